"""Decoding and encoding of git's C-style quoted path tokens.

git quotes a path in ``diff --raw`` output when it contains a double quote,
a backslash, control characters or non-ASCII bytes. Non-ASCII bytes are
written as ``\\ooo`` octal escapes of their UTF-8 encoding, so a single
character may span up to four escapes::

    "caf\\303\\251.txt"   ->   café.txt

``decode_path`` stops at the first unescaped TAB, which separates the source
and destination paths of a rename or copy.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from gitdiffwrap.errors import FormatError

_SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "r": "\r",
    "n": "\n",
    "t": "\t",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

_QUOTE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\r": "\\r",
    "\n": "\\n",
    "\t": "\\t",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}

_OCTAL_DIGITS = "01234567"


def _read_octal_byte(src: str, i: int) -> Tuple[int, int]:
    """Read the three octal digits of one ``\\ooo`` escape starting at *i*."""
    j = i
    value = 0
    while j < len(src) and j - i < 3 and src[j] in _OCTAL_DIGITS:
        value = value * 8 + (ord(src[j]) - 48)
        j += 1
    if j == i:
        raise FormatError("Expected octal", j)
    if value > 0xFF:
        raise FormatError("Octal escape out of byte range", i)
    return value, j


def _read_utf8(src: str, i: int) -> Tuple[int, int]:
    """Decode one UTF-8 sequence of octal escapes; *i* points past the first ``\\``.

    Returns ``(code_point, next_offset)``.
    """
    lead, j = _read_octal_byte(src, i)
    if lead <= 0x7F:
        return lead, j
    if lead <= 0xBF:
        raise FormatError("Invalid utf8", j)
    if lead <= 0xDF:
        cp, more = lead & 0x1F, 1
    elif lead <= 0xEF:
        cp, more = lead & 0x0F, 2
    elif lead <= 0xF7:
        cp, more = lead & 0x07, 3
    else:
        raise FormatError("Invalid utf8", j)

    for _ in range(more):
        if j >= len(src) or src[j] != "\\":
            raise FormatError("Expected '\\'", j)
        cont, j = _read_octal_byte(src, j + 1)
        if cont < 0x80 or cont > 0xBF:
            raise FormatError("Invalid utf8", j)
        cp = (cp << 6) | (cont & 0x3F)
    return cp, j


def utf16_surrogates(cp: int) -> Tuple[int, int]:
    """Return the UTF-16 surrogate pair for a code point above the BMP."""
    if cp < 0x10000:
        raise ValueError(f"U+{cp:04X} is inside the basic multilingual plane")
    cp -= 0x10000
    return 0xD800 + (cp >> 10), 0xDC00 + (cp & 0x3FF)


def decode_path(src: str, start: int = 0) -> Tuple[str, int]:
    """Decode the path token at *start*. Returns ``(text, end_offset)``.

    When the token holds no quote or backslash the result is a plain slice of
    *src*; the output buffer is only created once a transformation is needed.
    """
    buf: Optional[List[str]] = None
    j = start
    end = len(src)
    while j < end:
        ch = src[j]
        if ch == "\t":
            break
        if ch == '"':
            if buf is None:
                buf = [src[start:j]]
            j += 1
            continue
        if ch == "\\":
            if buf is None:
                buf = [src[start:j]]
            j += 1
            if j == end:
                raise FormatError("Unexpected end of string", j)
            ch = src[j]
            if ch in "0123":
                cp, j = _read_utf8(src, j)
                buf.append(chr(cp))
                continue
            ch = _SIMPLE_ESCAPES.get(ch, ch)
        if buf is not None:
            buf.append(ch)
        j += 1

    if buf is None:
        return src[start:j], j
    return "".join(buf), j


def needs_quoting(path: str) -> bool:
    return any(ch in _QUOTE_ESCAPES or ord(ch) < 0x20 or ord(ch) >= 0x7F for ch in path)


def quote_path(path: str) -> str:
    """Quote *path* the way git does in ``--raw`` output (``core.quotePath``)."""
    if not needs_quoting(path):
        return path
    out = ['"']
    for ch in path:
        if ch in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) >= 0x7F:
            out.extend(f"\\{b:03o}" for b in ch.encode("utf-8"))
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)
