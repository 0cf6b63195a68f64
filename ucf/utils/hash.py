"""
ucf.utils.hash
==============

BLAKE3-256, the single hash primitive of the UCF digest profile.

- blake3_256(*parts) -> 32 bytes over the concatenation of `parts`
- Hasher: incremental wrapper for digesting a prefix and a body without concatenating
- ZERO32: the all-zero digest (self-digest placeholder, chain genesis)
"""

from __future__ import annotations

import blake3 as _blake3

from .bytes import BytesLike

DIGEST_SIZE = 32
ZERO32 = b"\x00" * DIGEST_SIZE


class Hasher:
    """Incremental BLAKE3-256 hasher; `update` chains."""

    __slots__ = ("_h",)

    def __init__(self) -> None:
        self._h = _blake3.blake3()

    def update(self, data: BytesLike) -> "Hasher":
        self._h.update(data)
        return self

    def digest(self) -> bytes:
        return self._h.digest(length=DIGEST_SIZE)


def blake3_256(*parts: BytesLike) -> bytes:
    """BLAKE3 with a 32-byte output over the concatenation of `parts`."""
    h = Hasher()
    for p in parts:
        h.update(p)
    return h.digest()


__all__ = ["DIGEST_SIZE", "ZERO32", "Hasher", "blake3_256"]
