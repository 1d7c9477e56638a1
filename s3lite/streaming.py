"""Streaming helpers

Uploads from file-like objects need their length up front: the
``Content-Length`` header is part of what gets sent before the body, and
the ``Content-MD5`` header is signed. `file_size` finds it, `ProgressCallingFile`
reports on the body as it is read off, and `read_sections` cuts a stream into
multipart-sized chunks.
"""

import io
import os

from .errors import ValidationError

class ProgressCallingFile(object):
    __slots__ = ("fp", "pos", "size", "progress")

    def __init__(self, fp, size, progress):
        self.fp = fp
        self.pos = fp.tell()
        self.size = size
        self.progress = progress

    def __getattr__(self, attnam):
        return getattr(self.fp, attnam)

    def seek(self, *a, **k):
        rv = self.fp.seek(*a, **k)
        self.pos = self.fp.tell()
        return rv

    def read(self, *a, **k):
        chunk = self.fp.read(*a, **k)
        self.pos += len(chunk)
        self.progress(self.pos, self.size, len(chunk))
        return chunk

def file_size(fp):
    """Number of bytes left to read in *fp*, or None if it cannot be told.

    >>> fp = io.BytesIO(b"hello world")
    >>> _ = fp.seek(6)
    >>> file_size(fp)
    5
    """
    if hasattr(fp, "seekable") and fp.seekable():
        pos = fp.tell()
        end = fp.seek(0, io.SEEK_END)
        fp.seek(pos)
        return end - pos
    if hasattr(fp, "fileno"):
        try:
            return os.fstat(fp.fileno()).st_size - fp.tell()
        except (OSError, io.UnsupportedOperation):
            return None
    return None

def _read_full(fp, size):
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = fp.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)

def read_sections(fp, part_size):
    """Yield consecutive *part_size* chunks of *fp*; the last may be short.

    At least one chunk is always yielded, even for an empty stream.

    >>> list(read_sections(io.BytesIO(b"abcde"), 2))
    [b'ab', b'cd', b'e']
    >>> list(read_sections(io.BytesIO(b""), 2))
    [b'']
    """
    if part_size <= 0:
        raise ValidationError("part size must be positive", part_size=part_size)
    section = _read_full(fp, part_size)
    yield section
    while len(section) == part_size:
        section = _read_full(fp, part_size)
        if not section:
            break
        yield section
