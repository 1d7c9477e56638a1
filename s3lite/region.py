"""Service locations

A `Region` names where requests go and how buckets are addressed. With only
`s3_endpoint` set, buckets are addressed path-style::

    https://s3.amazonaws.com/johnsmith/photos/puppy.jpg

Setting `s3_bucket_endpoint` to a template containing ``${bucket}`` switches
to domain-style addressing::

    >>> region = US_EAST._replace(
    ...     s3_bucket_endpoint="https://${bucket}.s3.amazonaws.com")
    >>> region.bucket_url("johnsmith")
    'https://johnsmith.s3.amazonaws.com'
    >>> US_EAST.bucket_url("johnsmith")
    'https://s3.amazonaws.com/johnsmith'
"""

import collections

from .utils import aws_urlquote

_RegionBase = collections.namedtuple("Region",
    "name s3_endpoint s3_bucket_endpoint s3_location_constraint")

class Region(_RegionBase):
    __slots__ = ()

    def __new__(cls, name, s3_endpoint, s3_bucket_endpoint=None,
                s3_location_constraint=None):
        return super(Region, cls).__new__(cls, name, s3_endpoint.rstrip("/"),
                                          s3_bucket_endpoint,
                                          s3_location_constraint)

    def bucket_url(self, bucket):
        if self.s3_bucket_endpoint:
            return self.s3_bucket_endpoint.replace("${bucket}", bucket)
        return self.s3_endpoint + "/" + aws_urlquote(bucket)

US_EAST = Region("us-east-1", "https://s3.amazonaws.com")
US_WEST = Region("us-west-1", "https://s3-us-west-1.amazonaws.com",
                 s3_location_constraint="us-west-1")
US_WEST_2 = Region("us-west-2", "https://s3-us-west-2.amazonaws.com",
                   s3_location_constraint="us-west-2")
EU_WEST = Region("eu-west-1", "https://s3-eu-west-1.amazonaws.com",
                 s3_location_constraint="EU")
AP_SOUTHEAST = Region("ap-southeast-1",
                      "https://s3-ap-southeast-1.amazonaws.com",
                      s3_location_constraint="ap-southeast-1")
AP_SOUTHEAST_2 = Region("ap-southeast-2",
                        "https://s3-ap-southeast-2.amazonaws.com",
                        s3_location_constraint="ap-southeast-2")
AP_NORTHEAST = Region("ap-northeast-1",
                      "https://s3-ap-northeast-1.amazonaws.com",
                      s3_location_constraint="ap-northeast-1")
SA_EAST = Region("sa-east-1", "https://s3-sa-east-1.amazonaws.com",
                 s3_location_constraint="sa-east-1")

regions = dict((r.name, r) for r in (US_EAST, US_WEST, US_WEST_2, EU_WEST,
                                     AP_SOUTHEAST, AP_SOUTHEAST_2,
                                     AP_NORTHEAST, SA_EAST))

def custom(base_url, bucket_in_domain=False, name="custom"):
    """A region for an S3-compatible service at *base_url*.

    >>> custom("http://s3.example.com/").bucket_url("b")
    'http://s3.example.com/b'
    >>> custom("http://s3.example.com", bucket_in_domain=True).bucket_url("b")
    'http://b.s3.example.com'
    """
    base_url = base_url.rstrip("/")
    bucket_endpoint = None
    if bucket_in_domain:
        scheme, rest = base_url.split("://", 1)
        bucket_endpoint = scheme + "://${bucket}." + rest
    return Region(name, base_url, s3_bucket_endpoint=bucket_endpoint)
