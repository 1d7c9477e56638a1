r"""A small, dependable Amazon S3 client

Everything starts from an `S3` client, which holds credentials and a region.
Buckets are had from it by name::

    s3 = S3(Credentials(access_key, secret_key))
    bucket = s3.bucket("johnsmith")
    print(bucket)
    # <S3Bucket johnsmith at 'https://s3.amazonaws.com/johnsmith'>

For S3-compatible services elsewhere, use a custom region; pass
``bucket_in_domain=True`` to address buckets as ``bucket.host`` rather than
``host/bucket``::

    s3 = S3(creds, region=region.custom("http://s3.example.com"))

Start out by creating the bucket and putting a simple file onto there::

    bucket.put_bucket(acl="public-read")
    bucket.put("my file", b"my content", mimetype="text/plain")

Alright, and fetch it back::

    bucket.get("my file")
    # b'my content'

For big objects, `get_reader` gives a file-like response to read from (and
close), and `put_file` streams an upload from an open file::

    with open("huge_cd.iso", "rb") as fp:
        bucket.put_file("huge_cd.iso", fp, acl="public-read")
    fp = bucket.get_reader("huge_cd.iso")
    fp.s3_info["size"]
    # 681574400
    fp.close()

Listing follows S3's prefix/delimiter/marker rules, one page at a time with
`S3Bucket.list`, or all the way through with `S3Bucket.listdir`::

    page = bucket.list(delimiter="/")
    page.common_prefixes
    # ['photos/', 'test/']
    [k.key for k in bucket.listdir(prefix="test/")]
    # ['test/bar', 'test/foo']

Anyone can fetch an object through an authenticated URL until it expires::

    bucket.make_url_authed("my file", expire=datetime.timedelta(hours=1))
    # 'https://s3.amazonaws.com/johnsmith/my%20file?AWSAccessKeyId=...'

Large objects go up in parts; see `s3lite.multipart`::

    multi = bucket.init_multi("huge_cd.iso")
    with open("huge_cd.iso", "rb") as fp:
        parts = multi.put_all(fp, 5 * 1024 * 1024)
    multi.complete(parts)
    # '"...-130"'

Failures raise `S3Error` subclasses: `ServiceError` (with `status`, `code`,
`message` and `bucket_name`) when the service refused, `TransportError` when
it could not be reached. Transient failures are retried first according to
the client's `AttemptStrategy`. Each attempt is bounded by the client's
`timeout`; a cancel event is only looked at between attempts.
"""

__version__ = "2.0"

from .attempt import AttemptStrategy, Attempt
from .auth import Credentials
from .bucket import S3File, S3Bucket
from .connection import S3, DEFAULT_ATTEMPTS
from .errors import (S3Error, ServiceError, KeyNotFound, TransportError,
                     Cancelled, ValidationError)
from .listing import ListingConfig, ListResp, Key
from .multipart import MultipartUpload, Part, MIN_PART_SIZE
from . import region

__all__ = ("S3", "S3Bucket", "S3File", "Credentials", "AttemptStrategy",
           "Attempt", "DEFAULT_ATTEMPTS", "S3Error", "ServiceError",
           "KeyNotFound", "TransportError", "Cancelled", "ValidationError",
           "ListingConfig", "ListResp", "Key", "MultipartUpload", "Part",
           "MIN_PART_SIZE", "region")
