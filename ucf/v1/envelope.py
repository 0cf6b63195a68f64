from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional

from ..schema.message import Kind, Message, pb
from .common import Digest32, Signature


class MsgType(IntEnum):
    MSG_TYPE_UNSPECIFIED = 0
    MSG_TYPE_CANONICAL_INTENT = 1
    MSG_TYPE_POLICY_DECISION = 2
    MSG_TYPE_PVGS_RECEIPT = 3
    MSG_TYPE_SEP_EVENT = 4


@dataclass
class UcfEnvelope(Message):
    """Transport wrapper: an opaque payload plus its digest and signature."""

    SCHEMA_ID: ClassVar[str] = "ucf.v1.UcfEnvelope"
    epoch_id: str = pb(1, Kind.STRING)
    nonce: bytes = pb(2, Kind.BYTES)
    signature: Optional[Signature] = pb(3, Kind.MESSAGE, message=Signature)
    payload_digest: Optional[Digest32] = pb(4, Kind.MESSAGE, message=Digest32)
    msg_type: int = pb(5, Kind.ENUM, enum=MsgType)
    payload: bytes = pb(6, Kind.BYTES)
