"""
ucf.utils.bytes
===============

Dependency-free helpers around byte handling:

- Hex helpers: to_hex/from_hex, 0x-prefix management
- is_canonical_hex: the exact text form fixture files are written in
- first_difference: offset of the first differing byte (fixture diagnostics)

Fixture files store *unprefixed lowercase* hex with one trailing newline, so
`to_hex` defaults to prefix=False here. `from_hex` is lenient for CLI input;
the fixture loader checks `is_canonical_hex` first.

Examples
--------
>>> to_hex(b"\\x01\\x02")
'0102'
>>> from_hex('0xdeadbeef')
b'\\xde\\xad\\xbe\\xef'
>>> is_canonical_hex("deadbeef\\n"), is_canonical_hex("0xDEADBEEF")
(True, False)
>>> first_difference(b"abc", b"abd")
2
"""

from __future__ import annotations

import re
from typing import Optional, Union

BytesLike = Union[bytes, bytearray, memoryview]

_CANONICAL_HEX = re.compile(r"(?:[0-9a-f]{2})*\n?")


def is_byteslike(x: object) -> bool:
    return isinstance(x, (bytes, bytearray, memoryview))


def strip0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_hex(data: BytesLike, *, prefix: bool = False) -> str:
    """Return lowercase hex string of data."""
    if not is_byteslike(data):
        raise TypeError("to_hex expects bytes-like")
    h = bytes(data).hex()
    return f"0x{h}" if prefix else h


def from_hex(h: str) -> bytes:
    """
    Parse a hex string with or without 0x prefix. Surrounding whitespace
    (e.g. a trailing newline in a fixture file) is ignored; odd lengths and
    non-hex characters are rejected.
    """
    if not isinstance(h, str):
        raise TypeError("from_hex expects str")
    s = strip0x(h.strip())
    if len(s) % 2 == 1:
        raise ValueError(f"invalid hex string: odd length {len(s)}")
    try:
        return bytes.fromhex(s)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


def is_canonical_hex(text: str) -> bool:
    """Lowercase, unprefixed, even-length hex, optionally followed by a single newline."""
    return _CANONICAL_HEX.fullmatch(text) is not None


def first_difference(a: BytesLike, b: BytesLike) -> Optional[int]:
    """Offset of the first differing byte, len(shorter) on a strict prefix, None if equal."""
    a, b = bytes(a), bytes(b)
    if a == b:
        return None
    for i, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return i
    return min(len(a), len(b))


__all__ = [
    "BytesLike",
    "is_byteslike",
    "strip0x",
    "to_hex",
    "from_hex",
    "is_canonical_hex",
    "first_difference",
]
