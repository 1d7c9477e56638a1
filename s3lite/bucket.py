"""Bucket manipulation"""

import datetime
import logging

from . import auth
from .errors import Cancelled, ServiceError, ValidationError
from .listing import ListResp, paginate
from .multipart import MultipartUpload
from .streaming import ProgressCallingFile, file_size
from .utils import (metadata_headers, aws_md5, guess_mimetype, info_dict,
                    expire2datetime)
from .xmlutil import (is_error_document, parse_init_multi, parse_list_bucket,
                      parse_list_multi, render_bucket_config)

logger = logging.getLogger(__name__)

class S3File(bytes):
    def __new__(cls, value, **kwds):
        return super(S3File, cls).__new__(cls, value)

    def __init__(self, value, **kwds):
        kwds["data"] = value
        self.kwds = kwds

    def put_into(self, bucket, key):
        return bucket.put(key, **self.kwds)

class S3Bucket(object):
    """A bucket, addressed through the client *s3*.

    Nothing about the bucket is cached; every call goes to the service.
    """

    def __init__(self, name, s3):
        self.name = name
        self.s3 = s3

    def __str__(self):
        return "<%s %s at %r>" % (self.__class__.__name__, self.name, self.base_url)

    def __repr__(self):
        return self.__class__.__name__ + "(%r, s3=%r)" % (self.name, self.s3)

    def __eq__(self, other):
        return (isinstance(other, S3Bucket) and self.name == other.name
                and self.s3 is other.s3)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.name)

    def __getitem__(self, name): return self.get_reader(name)
    def __delitem__(self, name): return self.delete(name)
    def __setitem__(self, name, value):
        if hasattr(value, "put_into"):
            return value.put_into(self, name)
        else:
            return self.put(name, value)
    def __contains__(self, name):
        try:
            self.info(name)
        except KeyError:
            return False
        else:
            return True

    @property
    def base_url(self):
        return self.s3.region.bucket_url(self.name)

    def make_request(self, method, key=None, args=None, data=None,
                     headers={}, cancel=None, read=False):
        return self.s3.make_request(method, self.name, key=key, args=args,
                                    data=data, headers=headers, cancel=cancel,
                                    read=read)

    def get_reader(self, key, cancel=None):
        """Open *key* for reading.

        The returned response has an `s3_info` dict; close it when done, read
        to the end or not.
        """
        response = self.make_request("GET", key=key, cancel=cancel)
        response.s3_info = info_dict(response.headers)
        return response

    def get(self, key, cancel=None):
        """Fetch the whole content of *key* as bytes."""
        _, body = self.make_request("GET", key=key, cancel=cancel, read=True)
        return body

    def info(self, key, cancel=None):
        response = self.make_request("HEAD", key=key, cancel=cancel)
        rv = info_dict(response.headers)
        response.close()
        return rv

    def put(self, key, data=None, acl=None, metadata={}, mimetype=None,
            headers={}, cancel=None):
        headers = headers.copy()
        if data is None:
            data = b""
        elif isinstance(data, str):
            data = data.encode("utf-8")
        if mimetype:
            headers["Content-Type"] = str(mimetype)
        elif "Content-Type" not in headers:
            headers["Content-Type"] = guess_mimetype(key)
        headers.update(metadata_headers(metadata))
        if acl: headers["X-AMZ-ACL"] = acl
        if "Content-Length" not in headers:
            if hasattr(data, "read"):
                raise ValidationError("streamed data needs a Content-Length",
                                      key=key)
            headers["Content-Length"] = str(len(data))
        if "Content-MD5" not in headers and not hasattr(data, "read"):
            headers["Content-MD5"] = aws_md5(data)
        self.make_request("PUT", key=key, data=data, headers=headers,
                          cancel=cancel).close()

    def put_file(self, key, fp, acl=None, metadata={}, progress=None,
                 size=None, mimetype=None, headers={}, cancel=None):
        """Put file-like object or filename *fp* on S3 as *key*.

        *fp* must have a read method that takes a buffer size. If it is
        seekable, it is hashed for ``Content-MD5`` and rewound on retries.

        *size* can be specified as a size hint. Otherwise the size is figured
        out by seeking, or via ``os.fstat``; a stream whose size cannot be
        told is refused.

        *progress* is a callback that might look like ``p(current, total,
        last_read)``. ``current`` is the current position, ``total`` is the
        size, and ``last_read`` is how much was last read. ``last_read`` is
        zero on EOF.
        """
        do_close = False
        if not hasattr(fp, "read"):
            fp = open(fp, "rb")
            do_close = True

        try:
            headers = headers.copy()
            if size is None:
                size = file_size(fp)
            if "Content-Length" not in headers:
                if size is None:
                    raise ValidationError("no size given and fp cannot "
                                          "tell its size", key=key)
                headers["Content-Length"] = str(size)
            if ("Content-MD5" not in headers and hasattr(fp, "seekable")
                    and fp.seekable()):
                headers["Content-MD5"] = aws_md5(fp)

            if progress:
                fp = ProgressCallingFile(fp, size, progress)

            self.put(key, data=fp, acl=acl, metadata=metadata,
                     mimetype=mimetype, headers=headers, cancel=cancel)
        finally:
            if do_close:
                fp.close()

    def delete(self, key, cancel=None):
        """Delete *key*; deleting a key that does not exist is not an error."""
        try:
            self.make_request("DELETE", key=key, cancel=cancel).close()
        except ServiceError as e:
            if e.code != "NoSuchKey" and not (e.code is None and e.status == 404):
                raise
            logger.debug("deleted %r which was not there", key)
        return True

    def copy(self, source, key, acl=None, metadata=None,
             mimetype=None, headers={}, cancel=None):
        """Copy S3 file *source* on format '<bucket>/<key>' to *key*.

        If metadata is not None, replaces the metadata with given metadata,
        otherwise copies the previous metadata.

        Note that *acl* is not copied, but set to *private* by S3 if not given.
        """
        headers = headers.copy()
        headers.update({"Content-Type": mimetype or guess_mimetype(key)})
        headers["X-AMZ-Copy-Source"] = source
        if acl: headers["X-AMZ-ACL"] = acl
        if metadata is not None:
            headers["X-AMZ-Metadata-Directive"] = "REPLACE"
            headers.update(metadata_headers(metadata))
        else:
            headers["X-AMZ-Metadata-Directive"] = "COPY"
        resp, body = self.make_request("PUT", key=key, headers=headers,
                                       cancel=cancel, read=True)
        # A copy can fail after the 200 has been sent.
        if is_error_document(body):
            raise ServiceError.from_body(resp.status, body, bucket=self.name,
                                         key=key)

    def list(self, prefix="", delimiter="", marker="", max_keys=None,
             cancel=None):
        """Fetch one page of the bucket listing.

        See `s3lite.listing` for how *prefix*, *delimiter*, *marker* and
        *max_keys* select the page.
        """
        mapping = (("prefix", prefix),
                   ("delimiter", delimiter),
                   ("marker", marker),
                   ("max-keys", max_keys))
        args = [(k, str(v)) for (k, v) in mapping if v not in (None, "")]
        _, body = self.make_request("GET", args=args, cancel=cancel, read=True)
        page = ListResp.from_dict(parse_list_bucket(body))
        if not page.name:
            page.name = self.name
        return page

    def iter_pages(self, prefix="", delimiter="", marker="", max_keys=None,
                   cancel=None):
        """Yield every page of the listing, following markers."""
        if max_keys is None:
            max_keys = self.s3.listing.max_keys

        def fetch(marker):
            page = self.list(prefix=prefix, delimiter=delimiter,
                             marker=marker, max_keys=max_keys, cancel=cancel)
            return page, page.continuation(), page.is_truncated

        return paginate(fetch, marker=marker or None,
                        what="listing of %r" % (self.name,))

    def listdir(self, prefix=None, marker=None, limit=None, delimiter=None,
                cancel=None):
        """List contents of bucket.

        Yields `Key` tuples of (key, last_modified, etag, size,
        storage_class), across as many pages as it takes.

        *prefix*, if given, predicates `key.startswith(prefix)`.
        *marker*, if given, predicates `key > marker`, lexicographically.
        *limit*, if given, predicates `len(keys) <= limit`.

        *key* includes the *prefix* if any is given.
        """
        if limit is not None and limit <= 0:
            return
        count = 0
        for page in self.iter_pages(prefix=prefix or "",
                                    delimiter=delimiter or "",
                                    marker=marker or "", cancel=cancel):
            for key in page.contents:
                yield key
                count += 1
                if limit is not None and count >= limit:
                    return

    def make_url(self, key, args=None, arg_sep="&"):
        return self.s3.make_url(self.name, key, args=args, arg_sep=arg_sep)

    def _now(self):
        return datetime.datetime.now()

    def make_url_authed(self, key, expire=datetime.timedelta(minutes=5)):
        """Produce an authenticated URL for S3 object *key*.

        *expire* is a delta or a datetime on which the authenticated URL
        expires. It defaults to five minutes, and accepts a timedelta, an
        integer delta in seconds, or a datetime. An expiry in the past makes
        a URL the service refuses with ``AccessDenied``.

        To generate an unauthenticated URL for a key, see `B.make_url`.
        """
        # NOTE There is a usecase for having a headers argument to this
        # function - Amazon S3 will validate the X-AMZ-* headers of the GET
        # request, and so for the browser to send such a header, it would have
        # to be listed in the signature description.
        expire = expire2datetime(expire, base=self._now())
        expire = str(int(expire.timestamp()))
        sign = auth.sign_description(self.s3.credentials, auth.make_description(
            "GET", self.name, key=key, headers={"Date": expire}))
        args = (("AWSAccessKeyId", self.s3.credentials.access_key),
                ("Expires", expire),
                ("Signature", sign))
        return self.make_url(key, args, arg_sep="&")

    def put_bucket(self, acl=None, config_xml=None, cancel=None):
        if config_xml is None and self.s3.region.s3_location_constraint:
            config_xml = render_bucket_config(
                self.s3.region.s3_location_constraint)
        if config_xml:
            headers = {"Content-Length": str(len(config_xml)),
                       "Content-Type": "text/xml"}
        else:
            config_xml = None
            headers = {"Content-Length": "0"}
        if acl:
            headers["X-AMZ-ACL"] = acl
        resp = self.make_request("PUT", key=None, data=config_xml,
                                 headers=headers, cancel=cancel)
        resp.close()
        return resp.status == 200

    def delete_bucket(self, force=False, cancel=None):
        """Delete the bucket.

        With *force*, a bucket that is not empty is emptied (objects deleted,
        in-progress uploads aborted) and deletion retried, for as long as the
        client's attempt strategy allows; a bucket that is already gone
        counts as deleted, and False is returned for it.
        """
        if not force:
            self.make_request("DELETE", cancel=cancel).close()
            return True
        error = None
        for attempt in self.s3.attempts.start(cancel=cancel):
            try:
                self.make_request("DELETE", cancel=cancel).close()
            except ServiceError as e:
                if e.code == "NoSuchBucket":
                    return False
                if e.code != "BucketNotEmpty":
                    raise
                error = e
            else:
                return True
            logger.info("emptying bucket %r before deleting it", self.name)
            for key in self.listdir(cancel=cancel):
                self.delete(key.key, cancel=cancel)
            uploads, _ = self.list_multi(cancel=cancel)
            for upload in uploads:
                try:
                    upload.abort(cancel=cancel)
                except ServiceError as e:
                    if e.code != "NoSuchUpload":
                        raise
        if error is None:
            raise Cancelled("request cancelled", bucket=self.name)
        raise error

    def init_multi(self, key, mimetype=None, acl=None, metadata={},
                   headers={}, cancel=None):
        """Start a multipart upload of *key*."""
        headers = headers.copy()
        headers["Content-Type"] = mimetype or guess_mimetype(key)
        headers.update(metadata_headers(metadata))
        if acl:
            headers["X-AMZ-ACL"] = acl
        _, body = self.make_request("POST", key=key, args=[("uploads", None)],
                                    headers=headers, cancel=cancel, read=True)
        upload_id = parse_init_multi(body)
        logger.info("initiated multipart upload of %r: %s", key, upload_id)
        return MultipartUpload(self, key, upload_id)

    def multi(self, key, mimetype=None, acl=None, cancel=None):
        """Return the upload in progress for *key*, or start one."""
        uploads, _ = self.list_multi(prefix=key, cancel=cancel)
        for upload in uploads:
            if upload.key == key:
                return upload
        return self.init_multi(key, mimetype=mimetype, acl=acl, cancel=cancel)

    def list_multi(self, prefix="", delimiter="", cancel=None):
        """List the multipart uploads in progress.

        Returns ``(uploads, common_prefixes)``, walking every page.
        """
        page_size = self.s3.listing.max_uploads

        def fetch(marker):
            args = [("uploads", None), ("max-uploads", str(page_size))]
            if prefix:
                args.append(("prefix", prefix))
            if delimiter:
                args.append(("delimiter", delimiter))
            if marker:
                key_marker, upload_id_marker = marker
                args.append(("key-marker", key_marker))
                if upload_id_marker:
                    args.append(("upload-id-marker", upload_id_marker))
            _, body = self.make_request("GET", args=args, cancel=cancel,
                                        read=True)
            page = parse_list_multi(body)
            if page["next_key_marker"]:
                next_marker = (page["next_key_marker"],
                               page["next_upload_id_marker"])
            elif page["uploads"]:
                last = page["uploads"][-1]
                next_marker = (last["key"], last["upload_id"])
            elif page["common_prefixes"]:
                next_marker = (page["common_prefixes"][-1], None)
            else:
                next_marker = None
            return page, next_marker, page["is_truncated"]

        uploads = []
        prefixes = []
        for page in paginate(fetch, what="uploads in %r" % (self.name,)):
            uploads.extend(MultipartUpload(self, u["key"], u["upload_id"])
                           for u in page["uploads"])
            prefixes.extend(p for p in page["common_prefixes"]
                            if p not in prefixes)
        return uploads, prefixes
