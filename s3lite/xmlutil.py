"""Reading and writing the service's XML documents."""

import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

from .utils import _iso8601_dt

S3_NS = "http://s3.amazonaws.com/doc/2006-03-01/"

def _local(tag):
    return tag.rsplit("}", 1)[-1]

def _root(data):
    if isinstance(data, str):
        data = data.encode("utf-8")
    return ET.fromstring(data.strip())

def _children(elem, name):
    return [c for c in elem if _local(c.tag) == name]

def _text(elem, name, default=None):
    for child in elem:
        if _local(child.tag) == name:
            return child.text if child.text is not None else ""
    return default

def _int(elem, name, default=0):
    value = _text(elem, name)
    return int(value) if value else default

def _bool(elem, name):
    return (_text(elem, name) or "").strip().lower() == "true"

def is_error_document(data):
    """Tell whether a successful response body is actually an ``<Error>``."""
    try:
        return _local(_root(data).tag) == "Error"
    except ET.ParseError:
        return False

def parse_error(data):
    """Pull the fields out of an ``<Error>`` document.

    Bodies that do not parse yield an empty dict; the caller still has the
    HTTP status to go by.
    """
    try:
        root = _root(data)
    except ET.ParseError:
        return {}
    if _local(root.tag) != "Error":
        return {}
    return dict((_local(c.tag), (c.text or "").strip()) for c in root
                if len(c) == 0)

def parse_list_bucket(data):
    """Parse a ``ListBucketResult`` into a plain dict."""
    root = _root(data)
    contents = []
    for c in _children(root, "Contents"):
        modified = _text(c, "LastModified")
        contents.append({
            "key": _text(c, "Key"),
            "last_modified": _iso8601_dt(modified) if modified else None,
            "etag": _text(c, "ETag"),
            "size": _int(c, "Size"),
            "storage_class": _text(c, "StorageClass"),
        })
    return {
        "name": _text(root, "Name"),
        "prefix": _text(root, "Prefix", ""),
        "delimiter": _text(root, "Delimiter", ""),
        "marker": _text(root, "Marker", ""),
        "next_marker": _text(root, "NextMarker"),
        "max_keys": _int(root, "MaxKeys"),
        "is_truncated": _bool(root, "IsTruncated"),
        "contents": contents,
        "common_prefixes": [_text(cp, "Prefix")
                            for cp in _children(root, "CommonPrefixes")],
    }

def parse_init_multi(data):
    return _text(_root(data), "UploadId")

def parse_complete_multi(data):
    return _text(_root(data), "ETag")

def parse_list_multi(data):
    """Parse a ``ListMultipartUploadsResult``."""
    root = _root(data)
    uploads = [{"key": _text(u, "Key"),
                "upload_id": _text(u, "UploadId"),
                "initiated": _text(u, "Initiated")}
               for u in _children(root, "Upload")]
    return {
        "bucket": _text(root, "Bucket"),
        "key_marker": _text(root, "KeyMarker", ""),
        "upload_id_marker": _text(root, "UploadIdMarker", ""),
        "next_key_marker": _text(root, "NextKeyMarker"),
        "next_upload_id_marker": _text(root, "NextUploadIdMarker"),
        "is_truncated": _bool(root, "IsTruncated"),
        "uploads": uploads,
        "common_prefixes": [_text(cp, "Prefix")
                            for cp in _children(root, "CommonPrefixes")],
    }

def parse_list_parts(data):
    """Parse a ``ListPartsResult``."""
    root = _root(data)
    parts = [{"n": _int(p, "PartNumber"),
              "etag": _text(p, "ETag"),
              "size": _int(p, "Size")}
             for p in _children(root, "Part")]
    next_marker = _text(root, "NextPartNumberMarker")
    return {
        "part_number_marker": _int(root, "PartNumberMarker"),
        "next_part_number_marker": int(next_marker) if next_marker else None,
        "is_truncated": _bool(root, "IsTruncated"),
        "parts": parts,
    }

def render_complete_multi(parts):
    """Render the ``CompleteMultipartUpload`` manifest for *parts*, in the
    order given."""
    rv = ["<CompleteMultipartUpload>"]
    for part in parts:
        rv.append("<Part><PartNumber>%d</PartNumber><ETag>%s</ETag></Part>"
                  % (part.n, escape(part.etag)))
    rv.append("</CompleteMultipartUpload>")
    return "".join(rv).encode("utf-8")

def render_bucket_config(location_constraint):
    return ('<CreateBucketConfiguration xmlns="%s">'
            '<LocationConstraint>%s</LocationConstraint>'
            '</CreateBucketConfiguration>'
            % (S3_NS, escape(location_constraint))).encode("utf-8")
