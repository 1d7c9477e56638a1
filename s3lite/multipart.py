"""Multipart uploads

An upload goes through init, any number of part uploads, and then either
complete or abort::

    multi = bucket.init_multi("backup.tar", mimetype="application/x-tar")
    try:
        with open("backup.tar", "rb") as fp:
            parts = multi.put_all(fp, 5 * 1024 * 1024)
        multi.complete(parts)
    except Exception:
        multi.abort()
        raise

Parts are independent requests keyed by part number, so several threads may
upload parts of the same upload at once. The service only accepts parts
smaller than `MIN_PART_SIZE` as the last part; a smaller earlier part makes
`complete` fail with ``EntityTooSmall``.
"""

import collections
import io
import logging
import operator

from .errors import Cancelled, ServiceError, ValidationError
from .listing import paginate
from .streaming import file_size, read_sections
from .utils import aws_etag, aws_md5
from .xmlutil import (is_error_document, parse_complete_multi,
                      parse_list_parts, render_complete_multi)

logger = logging.getLogger(__name__)

MIN_PART_SIZE = 5 * 1024 * 1024
MAX_PART_NUMBER = 10000

Part = collections.namedtuple("Part", "n etag size")

class MultipartUpload(object):
    """A handle on one in-progress multipart upload.

    Created by `S3Bucket.init_multi`, `S3Bucket.multi` or
    `S3Bucket.list_multi`. Once `complete` or `abort` succeeds the upload ID
    is dead, and the service answers anything further with ``NoSuchUpload``.
    """

    def __init__(self, bucket, key, upload_id):
        self.bucket = bucket
        self.key = key
        self.upload_id = upload_id
        self.state = "active"

    def __repr__(self):
        return "<%s %s/%s id=%r (%s)>" % (self.__class__.__name__,
            self.bucket.name, self.key, self.upload_id, self.state)

    def __eq__(self, other):
        return (isinstance(other, MultipartUpload)
                and self.bucket.name == other.bucket.name
                and self.key == other.key
                and self.upload_id == other.upload_id)

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((self.bucket.name, self.key, self.upload_id))

    def _request(self, method, args=(), **kwds):
        args = [("uploadId", self.upload_id)] + list(args)
        return self.bucket.make_request(method, key=self.key, args=args,
                                        **kwds)

    def put_part(self, n, data, cancel=None):
        """Upload *data* as part number *n* (1-based).

        *data* is bytes or a seekable file-like object, which is sent from
        its current position to its end.
        """
        if not 1 <= n <= MAX_PART_NUMBER:
            raise ValidationError("part number out of range", n=n)
        if hasattr(data, "read"):
            size = file_size(data)
            if size is None:
                raise ValidationError("part data must be seekable", n=n)
        else:
            size = len(data)
        etag = aws_etag(data)
        headers = {"Content-Length": str(size),
                   "Content-MD5": aws_md5(data),
                   "Content-Type": "application/octet-stream"}
        resp, _ = self._request("PUT", args=[("partNumber", str(n))],
                                data=data, headers=headers, cancel=cancel,
                                read=True)
        etag = resp.headers.get("ETag") or etag
        logger.debug("uploaded part %d of %r (%d bytes)", n, self.key, size)
        return Part(n, etag, size)

    def list_parts(self, cancel=None):
        """All parts uploaded so far, in ascending part-number order."""
        page_size = self.bucket.s3.listing.max_parts

        def fetch(marker):
            args = [("max-parts", str(page_size))]
            if marker:
                args.append(("part-number-marker", str(marker)))
            _, body = self._request("GET", args=args, cancel=cancel,
                                    read=True)
            page = parse_list_parts(body)
            parts = [Part(p["n"], p["etag"], p["size"])
                     for p in page["parts"]]
            next_marker = page["next_part_number_marker"]
            if next_marker is None and parts:
                next_marker = parts[-1].n
            return parts, next_marker, page["is_truncated"]

        rv = []
        for parts in paginate(fetch, what="parts of %r" % (self.key,)):
            rv.extend(parts)
        rv.sort(key=operator.attrgetter("n"))
        return rv

    def put_all(self, fp, part_size, cancel=None):
        """Upload all of *fp* in parts of *part_size* bytes.

        An empty stream still makes one empty part, since an upload cannot
        be completed without parts. Parts already on the service with the
        same number, size and ETag are reused rather than sent again, so an
        interrupted upload can be resumed by calling this again.

        Returns the list of parts, ready for `complete`.
        """
        if part_size <= 0:
            raise ValidationError("part size must be positive",
                                  part_size=part_size)
        if not hasattr(fp, "read"):
            fp = io.BytesIO(fp)
        try:
            existing = dict((p.n, p) for p in self.list_parts(cancel=cancel))
        except ServiceError as e:
            if e.code != "NoSuchUpload":
                raise
            existing = {}
        rv = []
        for n, section in enumerate(read_sections(fp, part_size), 1):
            part = existing.get(n)
            if (part is not None and part.size == len(section)
                    and part.etag == aws_etag(section)):
                logger.debug("reusing part %d of %r", n, self.key)
            else:
                part = self.put_part(n, section, cancel=cancel)
            rv.append(part)
        return rv

    def complete(self, parts, cancel=None):
        """Assemble the upload from *parts*, given in any order.

        Returns the ETag of the resulting object.
        """
        if not parts:
            raise ValidationError("cannot complete an upload without parts",
                                  key=self.key)
        parts = sorted(parts, key=operator.attrgetter("n"))
        data = render_complete_multi(parts)
        headers = {"Content-Type": "application/xml"}
        # The service may also report a failure in the body of a 200.
        attempt = self.bucket.s3.attempts.start(cancel=cancel)
        while attempt.next():
            resp, body = self._request("POST", data=data, headers=headers,
                                       cancel=cancel, read=True)
            if not is_error_document(body):
                self.state = "completed"
                logger.info("completed multipart upload of %r from %d parts",
                            self.key, len(parts))
                return parse_complete_multi(body)
            error = ServiceError.from_body(resp.status, body,
                                           bucket=self.bucket.name,
                                           key=self.key)
            if not (error.retryable and attempt.has_next()):
                raise error
            logger.warning("retrying completion of %r: %s", self.key, error)
        raise Cancelled("request cancelled", bucket=self.bucket.name,
                        key=self.key)

    def abort(self, cancel=None):
        """Discard the upload and every part sent for it."""
        self._request("DELETE", cancel=cancel).close()
        self.state = "aborted"
        logger.info("aborted multipart upload of %r", self.key)
