"""Error taxonomy

Everything the library raises derives from `S3Error`, and carries a *kind*:

``"service"``
    the service answered with an error document (`ServiceError`).
``"validation"``
    the caller misused the protocol, either caught locally
    (`ValidationError`) or reported by the service with a misuse code such
    as ``EntityTooSmall``.
``"transport"``
    no HTTP response was obtained at all (`TransportError`).

Branch on ``e.kind`` and ``e.code`` rather than on messages.
"""

import http.client
import urllib.error

from .xmlutil import parse_error

# Codes the service uses for transient conditions; anything else is final.
RETRYABLE_CODES = frozenset([
    "InternalError",
    "ServiceUnavailable",
    "SlowDown",
    "RequestTimeout",
    "OperationAborted",
])

# Statuses retried when the error body carries no code.
RETRYABLE_STATUSES = frozenset([429, 500, 502, 503, 504])

VALIDATION_CODES = frozenset([
    "EntityTooSmall",
    "EntityTooLarge",
    "InvalidArgument",
    "InvalidPart",
    "InvalidPartOrder",
    "InvalidRequest",
    "MalformedXML",
])

class S3Error(Exception):
    kind = None
    retryable = False

    def __init__(self, message, **kwds):
        self.args = message, kwds.copy()
        self.msg, self.extra = self.args

    def __str__(self):
        rv = self.msg
        if self.extra:
            rv += " ("
            rv += ", ".join("%s=%r" % i for i in self.extra.items())
            rv += ")"
        return rv

class ServiceError(S3Error):
    """An error document returned by the service."""

    def __init__(self, message, status=None, code=None, bucket_name=None,
                 key=None, request_id=None, host_id=None, **kwds):
        super(ServiceError, self).__init__(message, **kwds)
        self.message = message
        self.status = status
        self.code = code
        self.bucket_name = bucket_name
        self.key = key
        self.request_id = request_id
        self.host_id = host_id

    def __str__(self):
        rv = "%s %s" % (self.status, self.code or "(no code)")
        if self.message:
            rv += ": " + self.message
        context = [("bucket", self.bucket_name), ("key", self.key),
                   ("request_id", self.request_id)]
        context = ", ".join("%s=%r" % (n, v) for n, v in context if v)
        if context:
            rv += " (" + context + ")"
        return rv

    @property
    def kind(self):
        if self.code in VALIDATION_CODES:
            return "validation"
        return "service"

    @property
    def retryable(self):
        if self.code:
            return self.code in RETRYABLE_CODES
        return self.status in RETRYABLE_STATUSES

    @classmethod
    def from_body(cls, status, data, bucket=None, key=None, **extra):
        """Build the most specific error for an error response body."""
        fields = parse_error(data) if data else {}
        code = fields.get("Code")
        if code is None and status == 404 and key is None:
            # HEAD responses carry no body; a bucket-level 404 is the bucket.
            code = "NoSuchBucket"
        if status == 404 and code in (None, "NoSuchKey"):
            cls = KeyNotFound
        message = fields.get("Message") or ""
        self = cls(message, status=status, code=code,
                   bucket_name=fields.get("BucketName") or bucket,
                   key=fields.get("Key") or key,
                   request_id=fields.get("RequestId"),
                   host_id=fields.get("HostId"), **extra)
        self.fields = fields
        self.data = data
        return self

    @classmethod
    def from_urllib(cls, e, bucket=None, key=None, **extra):
        """Try to read the real error from the service."""
        status = getattr(e, "code", None)
        data = b""
        fp = getattr(e, "fp", None)
        if fp is not None:
            try:
                data = e.read()
            except (http.client.HTTPException, urllib.error.URLError,
                    OSError) as read_error:
                extra["read_error"] = read_error
            finally:
                e.close()
        return cls.from_body(status, data, bucket=bucket, key=key, **extra)

class KeyNotFound(ServiceError, KeyError):
    """The requested key does not exist."""

class TransportError(S3Error):
    """No response could be obtained from the service."""

    kind = "transport"
    retryable = True

    def __init__(self, message, reason=None, **kwds):
        super(TransportError, self).__init__(message, **kwds)
        self.reason = reason

    @classmethod
    def from_exception(cls, e, **extra):
        reason = getattr(e, "reason", e)
        return cls(str(reason), reason=reason, **extra)

class Cancelled(TransportError):
    retryable = False

class ValidationError(S3Error, ValueError):
    """Caller misuse detected before any request was made."""

    kind = "validation"
