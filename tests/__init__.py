import http.client
import urllib.request
import urllib.response
from io import BytesIO

import s3lite
from s3lite import region
from s3lite.utils import rfc822_fmtdate

# Use the fake S3 credentials from the S3 Developer Guide
CREDENTIALS = s3lite.Credentials("0PN5J17HBGZHT7JJ3X82",
                                 "uV3F3YluFJax1cknvbcGwgjvx4QpvB+leU8dUj2o")
JOHNSMITH = region.custom("http://s3.amazonaws.com", bucket_in_domain=True)

# Retries without ever sleeping.
FAST_ATTEMPTS = s3lite.AttemptStrategy(min=3, total=0, delay=0)

def make_headers(pairs=()):
    if hasattr(pairs, "items"):
        pairs = pairs.items()
    msg = http.client.HTTPMessage()
    for n, v in pairs:
        del msg[n]
        msg[n] = v
    return msg

def MockHTTPResponse(fp, headers, url, code=200, msg="OK"):
    resp = urllib.response.addinfourl(fp, make_headers(headers), url, code)
    resp.msg = msg
    return resp

class MockHTTPHandler(urllib.request.HTTPHandler):
    def __init__(self, resps, reqs):
        super(MockHTTPHandler, self).__init__()
        self.resps = resps
        self.reqs = reqs

    def http_open(self, req):
        resp = self.resps.pop(0)
        if isinstance(resp, Exception):
            raise resp
        assert resp.geturl() == req.get_full_url(), \
            "%s != %s" % (resp.geturl(), req.get_full_url())
        return resp

    def http_request(self, req):
        req = urllib.request.HTTPHandler.http_request(self, req)
        self.reqs.append(req)
        return req

class MockS3Mixin(object):
    def __init__(self, *a, **k):
        self.mock_responses = []
        self.mock_requests = []
        super(MockS3Mixin, self).__init__(*a, **k)

    def build_opener(self):
        mockhttp = MockHTTPHandler(self.mock_responses, self.mock_requests)
        return urllib.request.build_opener(mockhttp)

    def bucket(self, name):
        return MockBucket(name, s3=self)

    def add_resp(self, url, headers, data, status="200 OK"):
        fp = BytesIO(data.encode("utf-8"))
        resp = MockHTTPResponse(fp, headers, url)
        return self.add_resp_obj(resp, status=status)

    def add_resp_obj(self, resp, status="200 OK"):
        code, resp.msg = status.split(" ", 1)
        resp.code = int(code)
        self.mock_responses.append(resp)

    def add_error(self, exc):
        self.mock_responses.append(exc)

    def mock_reset(self):
        self.mock_responses[:] = []
        self.mock_requests[:] = []

class MockS3(MockS3Mixin, s3lite.S3):
    pass

class MockBucket(s3lite.S3Bucket):
    """Bucket with the mock controls of its client at hand."""

    def add_resp(self, path, *a, **k):
        return self.s3.add_resp(self.base_url + path, *a, **k)

    @property
    def mock_requests(self):
        return self.s3.mock_requests

    @property
    def mock_responses(self):
        return self.s3.mock_responses

def mock_bucket(name="johnsmith", **kwds):
    kwds.setdefault("region", JOHNSMITH)
    kwds.setdefault("attempts", FAST_ATTEMPTS)
    return MockS3(CREDENTIALS, **kwds).bucket(name)

def H(ctype, *hpairs):
    msg = [("x-amz-request-id", "abcdef"),
           ("x-amz-id-2", "foobar"),
           ("Server", "AmazonS3"),
           ("Date", rfc822_fmtdate()),
           ("Content-Type", ctype)]
    msg.extend(hpairs)
    return msg

def error_xml(code, message, **fields):
    rv = ('<?xml version="1.0" encoding="UTF-8"?>\n'
          '<Error><Code>%s</Code><Message>%s</Message>' % (code, message))
    for name, value in fields.items():
        rv += "<%s>%s</%s>" % (name, value, name)
    rv += "<RequestId>abcdef</RequestId><HostId>abcdef</HostId></Error>"
    return rv
