"""Shared building blocks: digests, references, reason codes, signatures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, List

from ..schema.message import Kind, Message, pb


@dataclass
class Digest32(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.Digest32"
    value: bytes = pb(1, Kind.BYTES)


@dataclass
class Ref(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.Ref"
    uri: str = pb(1, Kind.STRING)
    label: str = pb(2, Kind.STRING)


@dataclass
class ReasonCodes(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.ReasonCodes"
    codes: List[str] = pb(1, Kind.STRING, repeated=True)


@dataclass
class Signature(Message):
    """Carried opaquely; nothing in this package verifies it."""

    SCHEMA_ID: ClassVar[str] = "ucf.v1.Signature"
    algorithm: str = pb(1, Kind.STRING)
    signer: bytes = pb(2, Kind.BYTES)
    signature: bytes = pb(3, Kind.BYTES)


def digest(value: bytes) -> Digest32:
    return Digest32(value=bytes(value))
