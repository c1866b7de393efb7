"""Blob hashing for the "touched but unchanged" check.

git names a blob by hashing ``b"blob <size>\\0" + content``. Comparing that
digest against the index hash tells us whether a working-copy file whose
index entry reports a null hash is really modified.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Union

from gitdiffwrap.errors import ProtocolError

CHUNK_SIZE = 65536


def object_hash(path: Union[str, Path], algorithm: str = "sha1") -> str:
    """Return the hex blob hash of the file at *path*.

    The file is streamed in fixed-size chunks. A file that yields fewer bytes
    than its size promised raises ``ProtocolError``.
    """
    with open(path, "rb") as fh:
        size = os.fstat(fh.fileno()).st_size
        digest = hashlib.new(algorithm)
        digest.update(f"blob {size}\0".encode("ascii"))
        remaining = size
        while remaining:
            chunk = fh.read(min(remaining, CHUNK_SIZE))
            if not chunk:
                raise ProtocolError(f"Unexpected end of file while hashing {path}")
            digest.update(chunk)
            remaining -= len(chunk)
    return digest.hexdigest()


def prefix_match(computed: str, reference: str) -> bool:
    """Compare *reference* against *computed* over their common length.

    Abbreviated references match the start of the full hash. Characters
    beyond the shorter of the two are not compared.
    """
    n = min(len(reference), len(computed))
    return computed[:n] == reference[:n].lower()


def hash_matches(path: Union[str, Path], reference: str, algorithm: str = "sha1") -> bool:
    """True if the blob hash of *path* matches *reference*; False if *path* is missing."""
    if not os.path.isfile(path):
        return False
    return prefix_match(object_hash(path, algorithm), reference)
