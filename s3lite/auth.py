"""Request authentication

Requests are signed with the HMAC-SHA1 scheme described in the S3 Developer
Guide: a *string to sign* is made from the verb, a few content headers, the
date (or, for query-string authentication, the expiry timestamp), the
``x-amz-*`` headers and the canonicalized resource, and the signature is its
keyed digest under the secret key.

    >>> creds = Credentials("0PN5J17HBGZHT7JJ3X82",
    ...                     "uV3F3YluFJax1cknvbcGwgjvx4QpvB+leU8dUj2o")
    >>> desc = make_description("GET", "johnsmith", "photos/puppy.jpg",
    ...                         headers={"Date": "1175139620"})
    >>> sign_description(creds, desc)
    'rucSbH0yNEcP9oM2XNlouVI3BH4='
"""

import base64
import collections
import hashlib
import hmac
import os

from .errors import ValidationError
from .utils import _amz_canonicalize, aws_urlquote

# Query arguments that take part in the canonicalized resource.
SUBRESOURCES = frozenset([
    "acl", "cors", "delete", "lifecycle", "location", "logging",
    "notification", "partNumber", "policy", "requestPayment", "tagging",
    "torrent", "uploadId", "uploads", "versionId", "versioning", "versions",
    "website", "response-cache-control", "response-content-disposition",
    "response-content-encoding", "response-content-language",
    "response-content-type", "response-expires",
])

class Credentials(collections.namedtuple("Credentials", "access_key secret_key")):
    __slots__ = ()

    def __repr__(self):
        return "Credentials(access_key=%r)" % (self.access_key,)

    @classmethod
    def from_env(cls, environ=None):
        """Read credentials from the usual AWS environment variables."""
        if environ is None:
            environ = os.environ
        access_key = (environ.get("AWS_ACCESS_KEY_ID")
                      or environ.get("AWS_ACCESS_KEY"))
        secret_key = (environ.get("AWS_SECRET_ACCESS_KEY")
                      or environ.get("AWS_SECRET_KEY"))
        if not access_key:
            raise ValidationError("AWS_ACCESS_KEY_ID or AWS_ACCESS_KEY "
                                  "not found in environment")
        if not secret_key:
            raise ValidationError("AWS_SECRET_ACCESS_KEY or AWS_SECRET_KEY "
                                  "not found in environment")
        return cls(access_key, secret_key)

def amz_subresource(args):
    """Render the signed part of a query string.

    >>> amz_subresource([("uploadId", "abc"), ("partNumber", "2"),
    ...                  ("max-parts", "5")])
    'partNumber=2&uploadId=abc'
    >>> amz_subresource({"uploads": None})
    'uploads'
    """
    if not args:
        return ""
    if hasattr(args, "items"):
        args = args.items()
    parts = []
    for name, value in sorted(args):
        if name not in SUBRESOURCES:
            continue
        if value is None:
            parts.append(name)
        else:
            parts.append("%s=%s" % (name, value))
    return "&".join(parts)

def canonicalized_resource(bucket, key=None, args=None):
    """
    >>> canonicalized_resource("johnsmith", "my key")
    '/johnsmith/my%20key'
    >>> canonicalized_resource("johnsmith", args={"uploads": None})
    '/johnsmith/?uploads'
    """
    res = "/"
    if bucket:
        res += aws_urlquote(bucket) + "/"
    if key:
        res += aws_urlquote(key)
    subresource = amz_subresource(args)
    if subresource:
        res += "?" + subresource
    return res

def make_description(method, bucket, key=None, args=None, headers={}):
    # The signature descriptor is detailed in the developer's guide,
    # "Constructing the CanonicalizedResource Element".
    return "\n".join((method, headers.get("Content-MD5", ""),
        headers.get("Content-Type", ""), headers.get("Date", ""))) + "\n" +\
        _amz_canonicalize(headers) + \
        canonicalized_resource(bucket, key=key, args=args)

def sign_description(credentials, desc):
    """AWS-style sign data."""
    hasher = hmac.new(credentials.secret_key.encode("utf-8"),
                      desc.encode("utf-8"), hashlib.sha1)
    return base64.b64encode(hasher.digest()).decode("ascii")

def authorization(credentials, method, bucket, key=None, args=None,
                  headers={}):
    sign = sign_description(credentials, make_description(
        method, bucket, key=key, args=args, headers=headers))
    return "AWS %s:%s" % (credentials.access_key, sign)
