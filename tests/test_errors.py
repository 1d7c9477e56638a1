import io
import socket
import unittest
import urllib.error

from s3lite.errors import (S3Error, ServiceError, KeyNotFound,
                           TransportError, Cancelled, ValidationError)
from tests import error_xml

class ServiceErrorTests(unittest.TestCase):
    def test_from_body(self):
        body = error_xml("BucketNotEmpty",
                         "The bucket you tried to delete is not empty",
                         BucketName="johnsmith").encode("utf-8")
        e = ServiceError.from_body(409, body)
        assert e.status == 409
        assert e.code == "BucketNotEmpty"
        assert e.message == "The bucket you tried to delete is not empty"
        assert e.bucket_name == "johnsmith"
        assert e.request_id == "abcdef"
        assert e.host_id == "abcdef"
        assert e.kind == "service"
        assert not e.retryable
        assert e.fields["BucketName"] == "johnsmith"

    def test_context_from_request(self):
        e = ServiceError.from_body(403, error_xml("AccessDenied", "no"),
                                   bucket="b", key="k")
        assert e.bucket_name == "b"
        assert e.key == "k"

    def test_unparsable_body(self):
        e = ServiceError.from_body(502, b"<html>Bad Gateway")
        assert e.code is None
        assert e.fields == {}
        assert e.retryable
        assert str(e) == "502 (no code)"

    def test_head_not_found(self):
        e = ServiceError.from_body(404, b"", bucket="b", key="k")
        assert isinstance(e, KeyNotFound)
        assert isinstance(e, KeyError)
        assert e.code is None

    def test_bucket_head_not_found(self):
        e = ServiceError.from_body(404, b"", bucket="b")
        assert not isinstance(e, KeyNotFound)
        assert e.code == "NoSuchBucket"

    def test_retryable_codes(self):
        for code in ("InternalError", "ServiceUnavailable", "SlowDown",
                     "RequestTimeout", "OperationAborted"):
            assert ServiceError("x", status=500, code=code).retryable, code
        for code in ("NoSuchBucket", "NoSuchUpload", "AccessDenied",
                     "BucketNotEmpty", "EntityTooSmall"):
            assert not ServiceError("x", status=500, code=code).retryable, code

    def test_retryable_statuses(self):
        for status in (429, 500, 502, 503, 504):
            assert ServiceError("x", status=status).retryable
        for status in (400, 403, 404, 409, 501):
            assert not ServiceError("x", status=status).retryable

    def test_validation_kind(self):
        for code in ("EntityTooSmall", "InvalidPartOrder", "InvalidPart",
                     "MalformedXML"):
            e = ServiceError("x", status=400, code=code)
            assert e.kind == "validation"
            assert not e.retryable

    def test_from_urllib(self):
        body = io.BytesIO(error_xml("NoSuchKey", "gone",
                                    Key="a").encode("utf-8"))
        http_error = urllib.error.HTTPError("http://x/b/a", 404, "Not Found",
                                            {}, body)
        e = ServiceError.from_urllib(http_error, bucket="b", key="a")
        assert isinstance(e, KeyNotFound)
        assert e.message == "gone"

class OtherErrorTests(unittest.TestCase):
    def test_transport(self):
        reason = socket.gaierror(-2, "Name or service not known")
        e = TransportError.from_exception(urllib.error.URLError(reason),
                                          bucket="b")
        assert e.reason is reason
        assert e.kind == "transport"
        assert e.retryable
        assert e.extra == {"bucket": "b"}

    def test_cancelled(self):
        e = Cancelled("request cancelled")
        assert isinstance(e, TransportError)
        assert not e.retryable

    def test_validation(self):
        e = ValidationError("part size must be positive", part_size=0)
        assert isinstance(e, ValueError)
        assert e.kind == "validation"
        assert str(e) == "part size must be positive (part_size=0)"

    def test_base(self):
        e = S3Error("listing is truncated", marker="a")
        assert e.kind is None
        assert str(e) == "listing is truncated (marker='a')"
