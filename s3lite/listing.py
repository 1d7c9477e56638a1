"""Listing and pagination

The service answers listing requests one bounded page at a time. A page is
selected by four parameters:

*prefix*
    only keys starting with it are considered.
*marker*
    only keys sorting strictly after it are considered.
*delimiter*
    a key whose remainder after *prefix* contains the delimiter is collapsed
    into the common prefix ``prefix + remainder[:end of first delimiter]``;
    each common prefix is reported once, and never one that sorts at or
    before *marker*.
*max_keys*
    keys and common prefixes together fill at most this many slots; the page
    is *truncated* if anything else would have followed.

`select_page` is that rule as a function. Walking a whole listing means
asking for pages one after the other, each marker taken from the previous
page, until a page is not truncated; `paginate` does that for any of the
listings (objects, in-progress uploads, parts).
"""

import collections
import logging

from .errors import S3Error

logger = logging.getLogger(__name__)

class ListingConfig(object):
    """Page-size caps used when walking listings.

    `max_keys` of None leaves the page size to the service.
    """

    def __init__(self, max_keys=None, max_uploads=1000, max_parts=1000):
        self.max_keys = max_keys
        self.max_uploads = max_uploads
        self.max_parts = max_parts

    def __repr__(self):
        return "%s(max_keys=%r, max_uploads=%r, max_parts=%r)" % (
            self.__class__.__name__, self.max_keys, self.max_uploads,
            self.max_parts)

Key = collections.namedtuple("Key",
                             "key last_modified etag size storage_class")

class ListResp(object):
    """One page of a bucket listing."""

    def __init__(self, name, prefix="", delimiter="", marker="",
                 max_keys=0, is_truncated=False, contents=(),
                 common_prefixes=(), next_marker=None):
        self.name = name
        self.prefix = prefix
        self.delimiter = delimiter
        self.marker = marker
        self.max_keys = max_keys
        self.is_truncated = is_truncated
        self.contents = list(contents)
        self.common_prefixes = list(common_prefixes)
        self.next_marker = next_marker

    def __repr__(self):
        return "<%s %s: %d keys, %d prefixes%s>" % (
            self.__class__.__name__, self.name, len(self.contents),
            len(self.common_prefixes),
            ", truncated" if self.is_truncated else "")

    @classmethod
    def from_dict(cls, d):
        d = dict(d)
        d["contents"] = [Key(**c) for c in d["contents"]]
        return cls(**d)

    def continuation(self):
        """The marker to ask for the page after this one.

        The service only reports ``NextMarker`` when a delimiter is in play;
        otherwise it is the greatest key or common prefix on the page.
        """
        if self.next_marker:
            return self.next_marker
        candidates = []
        if self.contents:
            candidates.append(self.contents[-1].key)
        if self.common_prefixes:
            candidates.append(self.common_prefixes[-1])
        return max(candidates) if candidates else None

def select_page(keys, prefix="", delimiter="", marker="", max_keys=1000):
    """Apply the page-selection rule to sorted, unique *keys*.

    Returns a tuple ``(contents, common_prefixes, is_truncated)``.

    >>> keys = ["index.html", "index2.html", "photos/2006/January/sample.jpg",
    ...         "test/bar", "test/foo"]
    >>> select_page(keys, delimiter="/")
    (['index.html', 'index2.html'], ['photos/', 'test/'], False)
    >>> select_page(keys, delimiter="/", marker="photos/", max_keys=1)
    ([], ['test/'], False)
    >>> select_page(keys, max_keys=2)
    (['index.html', 'index2.html'], [], True)
    """
    contents = []
    prefixes = []
    marker = marker or ""
    for key in keys:
        if not key.startswith(prefix) or key <= marker:
            continue
        common = None
        if delimiter:
            rest = key[len(prefix):]
            pos = rest.find(delimiter)
            if pos >= 0:
                common = prefix + rest[:pos + len(delimiter)]
                if common <= marker or (prefixes and prefixes[-1] == common):
                    continue
        if len(contents) + len(prefixes) >= max_keys:
            return contents, prefixes, True
        if common is None:
            contents.append(key)
        else:
            prefixes.append(common)
    return contents, prefixes, False

def paginate(fetch, marker=None, what="listing"):
    """Yield pages from *fetch* until one comes back untruncated.

    *fetch* is called with the marker for the page wanted (None for the
    first) and returns ``(page, next_marker, is_truncated)``. Pages are
    requested strictly one after the other.
    """
    while True:
        page, next_marker, is_truncated = fetch(marker)
        logger.debug("%s page after %r: truncated=%s", what, marker,
                     is_truncated)
        yield page
        if not is_truncated:
            return
        if next_marker is None or next_marker == marker:
            raise S3Error("%s is truncated but the marker did not advance"
                          % (what,), marker=marker)
        marker = next_marker
