"""Misc. S3-related utilities."""

import base64
import datetime
import hashlib
import mimetypes
import time
import urllib.parse

def _amz_canonicalize(headers):
    r"""Canonicalize AMZ headers in that certain AWS way.

    >>> _amz_canonicalize({"x-amz-test": "test"})
    'x-amz-test:test\n'
    >>> _amz_canonicalize({"x-amz-first": "test",
    ...                    "x-amz-second": "hello"})
    'x-amz-first:test\nx-amz-second:hello\n'
    >>> _amz_canonicalize({})
    ''
    """
    rv = {}
    for header, value in headers.items():
        header = header.lower()
        if header.startswith("x-amz-"):
            rv.setdefault(header, []).append(str(value).strip())
    parts = []
    for key in sorted(rv):
        parts.append("%s:%s\n" % (key, ",".join(rv[key])))
    return "".join(parts)

def metadata_headers(metadata):
    return dict(("X-AMZ-Meta-" + h, v) for h, v in metadata.items())

def headers_metadata(headers):
    return dict((h[11:].lower(), v) for h, v in headers.items()
                                   if h.lower().startswith("x-amz-meta-"))

rfc822_fmt = '%a, %d %b %Y %H:%M:%S GMT'
iso8601_fmt = '%Y-%m-%dT%H:%M:%S.000Z'

def _rfc822_dt(v): return datetime.datetime.strptime(v, rfc822_fmt)

def _iso8601_dt(v):
    """Parse an S3 timestamp, with or without fractional seconds.

    >>> _iso8601_dt("2009-10-12T17:50:30.000Z")
    datetime.datetime(2009, 10, 12, 17, 50, 30)
    >>> _iso8601_dt("2009-10-12T17:50:30Z")
    datetime.datetime(2009, 10, 12, 17, 50, 30)
    """
    if "." in v:
        v = v[:v.index(".")] + "Z"
    return datetime.datetime.strptime(v, '%Y-%m-%dT%H:%M:%SZ')

def rfc822_fmtdate(t=None):
    if t is None:
        return time.strftime(rfc822_fmt, time.gmtime())
    return t.strftime(rfc822_fmt)

def expire2datetime(expire, base=None):
    """Force *expire* into a datetime relative to *base*.

    If expire is a relatively small integer, it is assumed to be a delta in
    seconds. This is possible for deltas up to 10 years.

    If expire is a delta, it is added to *base* to yield the expire date.

    If base isn't given, the current time is assumed.

    >>> base = datetime.datetime(1990, 1, 31, 1, 2, 3)
    >>> expire2datetime(base) == base
    True
    >>> expire2datetime(3600 * 24, base=base) - base
    datetime.timedelta(days=1)
    >>> import time
    >>> expire2datetime(time.mktime(base.timetuple())) == base
    True
    """
    if hasattr(expire, "timetuple"):
        return expire
    if base is None:
        base = datetime.datetime.now()
    # *expire* is not a datetime object; try interpreting it
    # as a timedelta, a UNIX timestamp or offsets in seconds.
    try:
        return base + expire
    except TypeError:
        # Since the operands could not be added, reinterpret
        # *expire* as a UNIX timestamp or a delta in seconds.
        # This is rather arbitrary: 10 years are allowed.
        unix_eighties = 315529200
        if expire < unix_eighties:
            return base + datetime.timedelta(seconds=expire)
        else:
            return datetime.datetime.fromtimestamp(expire)

def _hash_data(data, name="md5"):
    hasher = hashlib.new(name)
    if hasattr(data, "read"):
        pos = data.tell()
        while True:
            chunk = data.read(8192)
            if not chunk:
                break
            hasher.update(chunk)
        data.seek(pos)
    else:
        if isinstance(data, str):
            data = data.encode("utf-8")
        hasher.update(data)
    return hasher

def aws_md5(data):
    """Make an AWS-style MD5 hash (digest in base64).

    File-like *data* is hashed from its current position, which is restored
    afterwards.

    >>> aws_md5(b"Hello!")
    'lS0sVtBIWVgzZ0e83ZhZDQ=='
    >>> from io import BytesIO
    >>> aws_md5(BytesIO(b"Hello world!"))
    'hvsmnRkNLIX24EaM7KQqIA=='
    """
    return base64.b64encode(_hash_data(data).digest()).decode("ascii")

def aws_etag(data):
    """The ETag S3 assigns to a single-part object holding *data*.

    >>> aws_etag(b"")
    '"d41d8cd98f00b204e9800998ecf8427e"'
    """
    return '"%s"' % (_hash_data(data).hexdigest(),)

def aws_urlquote(value):
    r"""AWS-style quote a URL part.

    >>> aws_urlquote("/bucket/a key")
    '/bucket/a%20key'
    >>> aws_urlquote(u"/bucket/\xe5der")
    '/bucket/%C3%A5der'
    """
    return urllib.parse.quote(value, "/")

def guess_mimetype(fn, default="application/octet-stream"):
    """Guess a mimetype from filename *fn*."""
    if "." not in fn:
        return default
    bfn, ext = fn.lower().rsplit(".", 1)
    if ext == "jpg": ext = "jpeg"
    return mimetypes.guess_type(bfn + "." + ext)[0] or default

def info_dict(headers):
    headers = dict((k.lower(), v) for k, v in headers.items())
    rv = {"headers": headers, "metadata": headers_metadata(headers)}
    if "content-length" in headers:
        rv["size"] = int(headers["content-length"])
    if "content-type" in headers:
        rv["mimetype"] = headers["content-type"]
    if "etag" in headers:
        rv["etag"] = headers["etag"]
    if "date" in headers:
        rv["date"] = _rfc822_dt(headers["date"])
    if "last-modified" in headers:
        rv["modify"] = _rfc822_dt(headers["last-modified"])
    return rv
