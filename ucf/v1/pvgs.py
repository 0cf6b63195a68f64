from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional

from ..schema.message import Kind, Message, pb
from .common import Digest32, Signature


class ReceiptStatus(IntEnum):
    RECEIPT_STATUS_UNSPECIFIED = 0
    RECEIPT_STATUS_ACCEPTED = 1
    RECEIPT_STATUS_REJECTED = 2


@dataclass
class PvgsReceipt(Message):
    """Proof-verification receipt: which program ran and which proof it produced."""

    SCHEMA_ID: ClassVar[str] = "ucf.v1.PVGSReceipt"
    status: int = pb(1, Kind.ENUM, enum=ReceiptStatus)
    program_digest: Optional[Digest32] = pb(2, Kind.MESSAGE, message=Digest32)
    proof_digest: Optional[Digest32] = pb(3, Kind.MESSAGE, message=Digest32)
    signer: Optional[Signature] = pb(4, Kind.MESSAGE, message=Signature)
