"""Request execution"""

import http.client
import logging
import urllib.error
import urllib.parse
import urllib.request

from . import auth
from .attempt import AttemptStrategy
from .bucket import S3Bucket
from .errors import Cancelled, ServiceError, TransportError
from .listing import ListingConfig
from .region import US_EAST
from .utils import aws_md5, aws_urlquote, rfc822_fmtdate

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = AttemptStrategy(min=5, total=5.0, delay=0.2)
# Seconds a single attempt may block on the socket.
DEFAULT_TIMEOUT = 60.0

def make_query(args, arg_sep="&"):
    """Render query arguments; a value of None renders the bare name.

    >>> make_query([("uploads", None)])
    'uploads'
    >>> make_query({"prefix": "a b/", "max-keys": "2"})
    'prefix=a+b%2F&max-keys=2'
    """
    if hasattr(args, "items"):
        args = args.items()
    parts = []
    for name, value in args:
        if value is None:
            parts.append(urllib.parse.quote_plus(name))
        else:
            parts.append("=".join((urllib.parse.quote_plus(name),
                                   urllib.parse.quote_plus(str(value)))))
    return arg_sep.join(parts)

class _Rewinder(object):
    """Puts a request body back where it was before each resend."""

    def __init__(self, data):
        self.data = data
        self.pos = None
        if hasattr(data, "read"):
            try:
                self.pos = data.tell()
            except (AttributeError, OSError):
                self.pos = None

    @property
    def resendable(self):
        return not hasattr(self.data, "read") or self.pos is not None

    def rewind(self):
        if self.pos is not None:
            self.data.seek(self.pos)

class S3(object):
    """A client for one set of credentials at one region.

    Holds no state besides its configuration, so a single instance may be
    shared by any number of threads.
    """

    def __init__(self, credentials, region=US_EAST, timeout=DEFAULT_TIMEOUT,
                 attempts=DEFAULT_ATTEMPTS, listing=None):
        self.credentials = credentials
        self.region = region
        self.timeout = timeout
        self.attempts = attempts
        self.listing = listing or ListingConfig()
        self.opener = self.build_opener()

    def __repr__(self):
        return "%s(%r, region=%r)" % (self.__class__.__name__,
                                      self.credentials, self.region.name)

    def bucket(self, name):
        return S3Bucket(name, s3=self)

    @classmethod
    def build_opener(cls):
        return urllib.request.build_opener()

    def make_url(self, bucket, key=None, args=None, arg_sep="&"):
        url = self.region.bucket_url(bucket) + "/"
        if key:
            url += aws_urlquote(key)
        if args:
            url += "?" + make_query(args, arg_sep=arg_sep)
        return url

    def sign(self, method, bucket, key=None, args=None, headers={}):
        return auth.authorization(self.credentials, method, bucket, key=key,
                                  args=args, headers=headers)

    def new_request(self, method, bucket, key=None, args=None, data=None,
                    headers={}):
        headers = headers.copy()
        if isinstance(data, (bytes, bytearray)) and "Content-MD5" not in headers:
            headers["Content-MD5"] = aws_md5(data)
        if data is not None and "Content-Type" not in headers:
            # urllib would otherwise fill in a form type after signing.
            headers["Content-Type"] = "application/octet-stream"
        if "Date" not in headers:
            headers["Date"] = rfc822_fmtdate()
        if "Authorization" not in headers:
            headers["Authorization"] = self.sign(method, bucket, key=key,
                                                 args=args, headers=headers)
        url = self.make_url(bucket, key, args)
        return urllib.request.Request(url, data=data, headers=headers,
                                      method=method)

    def open_request(self, request):
        if self.timeout:
            return self.opener.open(request, timeout=self.timeout)
        else:
            return self.opener.open(request)

    def make_request(self, method, bucket, key=None, args=None, data=None,
                     headers={}, cancel=None, read=False):
        """Sign, send and classify one request, retrying transient failures.

        Returns the open response on a 2xx status; the caller must close it.
        With *read*, the body is read within the attempt instead, and
        ``(response, body)`` is returned with the response already closed.
        Raises `ServiceError` for error responses and `TransportError` when
        no response (or no complete body) was had, after the attempt strategy
        gives up on retrying.

        *cancel* is looked at between attempts and during the delay; an
        attempt in progress is bounded only by the client's `timeout`.
        """
        body = _Rewinder(data)
        attempt = self.attempts.start(cancel=cancel)
        while attempt.next():
            body.rewind()
            request = self.new_request(method, bucket, key=key, args=args,
                                       data=data, headers=headers)
            logger.debug("%s %s", method, request.full_url)
            try:
                response = self.open_request(request)
                if not read:
                    return response
                try:
                    return response, response.read()
                finally:
                    response.close()
            except urllib.error.HTTPError as e:
                error = ServiceError.from_urllib(e, bucket=bucket, key=key)
            except (urllib.error.URLError, http.client.HTTPException,
                    OSError) as e:
                error = TransportError.from_exception(e, bucket=bucket,
                                                      key=key)
            if not (error.retryable and body.resendable
                    and attempt.has_next()):
                raise error
            logger.warning("retrying %s %s after attempt %d: %s", method,
                           request.full_url, attempt.count, error)
        raise Cancelled("request cancelled", bucket=bucket, key=key)
