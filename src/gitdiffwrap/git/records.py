"""Parser for ``git diff --raw`` records.

Grammar (one record per line)::

    :<srcMode> <dstMode> <srcHash>[.]* <dstHash>[.]* <status>[score]\\t<path>[\\t<path>]

Parsing is strictly left to right. Each ``_read_*`` / ``_skip_*`` helper takes
the current offset and returns the next one, raising ``FormatError`` with the
offending offset when the expected token is missing.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Tuple

from gitdiffwrap.errors import FormatError
from gitdiffwrap.git.models import (
    NULL_HASH,
    REGULAR_FILE_MODE,
    ChangeStatus,
    DiffRecord,
    Side,
)
from gitdiffwrap.git.pathcodec import decode_path

logger = logging.getLogger(__name__)

# Modes and scores are accumulated with the range of a signed 32-bit integer.
INT_MAX = 2**31 - 1

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def normalize_separators(path: str) -> str:
    """Replace git's ``/`` separators with the host separator."""
    if os.sep == "/":
        return path
    return path.replace("/", os.sep)


def _skip_char(src: str, i: int, ch: str) -> int:
    if i >= len(src) or src[i] != ch:
        raise FormatError(f"Expected {ch!r}", i)
    return i + 1


def _read_char(src: str, i: int) -> Tuple[str, int]:
    if i >= len(src):
        raise FormatError("Expected char", i)
    return src[i], i + 1


def _read_number(src: str, i: int, base: int, what: str, optional: bool = False) -> Tuple[int, int]:
    n = 0
    j = i
    while j < len(src):
        digit = ord(src[j]) - 48
        if digit < 0 or digit >= base:
            break
        n = n * base + digit
        if n > INT_MAX:
            raise FormatError(f"{what.capitalize()} overflow", j)
        j += 1
    if j == i and not optional:
        raise FormatError(f"Expected {what}", i)
    return n, j


def _read_octal(src: str, i: int) -> Tuple[int, int]:
    return _read_number(src, i, 8, "octal")


def _read_decimal(src: str, i: int, optional: bool = False) -> Tuple[int, int]:
    return _read_number(src, i, 10, "decimal", optional)


def _read_hash(src: str, i: int) -> Tuple[str, int]:
    j = i
    nonzero = False
    while j < len(src) and src[j] in _HEX_DIGITS:
        nonzero = nonzero or src[j] != "0"
        j += 1
    if j == i:
        raise FormatError("Expected hex", i)
    value = src[i:j] if nonzero else NULL_HASH
    # Abbreviated hashes are padded with dots.
    while j < len(src) and src[j] == ".":
        j += 1
    return value, j


def _read_path(src: str, i: int) -> Tuple[str, int]:
    path, j = decode_path(src, i)
    if not path:
        raise FormatError("Expected path", i)
    return normalize_separators(path), j


def parse_raw_line(line: str, log: Optional[logging.Logger] = None) -> DiffRecord:
    """Parse one ``--raw`` line into a ``DiffRecord``."""
    (log or logger).debug("%s", line)

    i = _skip_char(line, 0, ":")
    src_mode, i = _read_octal(line, i)
    i = _skip_char(line, i, " ")
    dst_mode, i = _read_octal(line, i)
    i = _skip_char(line, i, " ")
    src_hash, i = _read_hash(line, i)
    i = _skip_char(line, i, " ")
    dst_hash, i = _read_hash(line, i)
    i = _skip_char(line, i, " ")
    status, i = _read_char(line, i)
    score, i = _read_decimal(line, i, optional=True)
    i = _skip_char(line, i, "\t")
    src_path, i = _read_path(line, i)

    if i < len(line):
        i = _skip_char(line, i, "\t")
        dst_path, i = _read_path(line, i)
    else:
        dst_path = src_path

    return DiffRecord(
        src_mode=src_mode,
        dst_mode=dst_mode,
        src_hash=src_hash,
        dst_hash=dst_hash,
        status=status,
        score=score,
        src_path=src_path,
        dst_path=dst_path,
    )


def untracked_record(name: str, side: Side, log: Optional[logging.Logger] = None) -> DiffRecord:
    """Synthesize a record for an untracked working-copy file.

    The working copy on the right means the file was added; on the left it
    means the file was deleted.
    """
    (log or logger).debug("Untracked: %s", name)
    right = side == Side.RIGHT
    return DiffRecord(
        src_mode=0 if right else REGULAR_FILE_MODE,
        dst_mode=REGULAR_FILE_MODE if right else 0,
        src_hash=NULL_HASH,
        dst_hash=NULL_HASH,
        status=(ChangeStatus.ADDED if right else ChangeStatus.DELETED).value,
        score=0,
        src_path=name,
        dst_path=name,
    )
