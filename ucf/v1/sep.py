"""
Session evidence: the SEP event chain and the records that close it.

Each `SepEvent` stores its own digest (`event_digest`) and the digest of the
event before it (`prev_event_digest`); the first event of a session links to
32 zero bytes. `SessionSeal.final_event_digest` pins the chain head.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, List, Optional

from ..schema.message import Kind, Message, pb
from .common import Digest32, ReasonCodes, Ref, Signature


class SepEventType(IntEnum):
    SEP_EVENT_TYPE_UNSPECIFIED = 0
    SEP_EVENT_TYPE_INTENT = 1
    SEP_EVENT_TYPE_DECISION = 2
    SEP_EVENT_TYPE_OUTCOME = 3
    SEP_EVENT_TYPE_RECOVERY = 4


class CompletenessStatus(IntEnum):
    COMPLETENESS_STATUS_UNSPECIFIED = 0
    COMPLETENESS_STATUS_COMPLETE = 1
    COMPLETENESS_STATUS_DEGRADED = 2
    COMPLETENESS_STATUS_FAIL = 3


@dataclass
class SepEvent(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.SepEvent"
    event_id: str = pb(1, Kind.STRING)
    session_id: str = pb(2, Kind.STRING)
    event_type: int = pb(3, Kind.ENUM, enum=SepEventType)
    object_ref: Optional[Ref] = pb(4, Kind.MESSAGE, message=Ref)
    reason_codes: Optional[ReasonCodes] = pb(5, Kind.MESSAGE, message=ReasonCodes)
    timestamp_ms: int = pb(6, Kind.UINT64)
    prev_event_digest: Optional[Digest32] = pb(7, Kind.MESSAGE, message=Digest32)
    event_digest: Optional[Digest32] = pb(8, Kind.MESSAGE, message=Digest32)
    attestation_sig: Optional[Signature] = pb(9, Kind.MESSAGE, message=Signature)
    epoch_id: int = pb(10, Kind.UINT64)


@dataclass
class SessionSeal(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.SessionSeal"
    seal_id: str = pb(1, Kind.STRING)
    seal_digest: Optional[Digest32] = pb(2, Kind.MESSAGE, message=Digest32)
    session_id: str = pb(3, Kind.STRING)
    final_event_digest: Optional[Digest32] = pb(4, Kind.MESSAGE, message=Digest32)
    final_record_digest: Optional[Digest32] = pb(5, Kind.MESSAGE, message=Digest32)
    proof_receipt_ref: Optional[Ref] = pb(6, Kind.MESSAGE, message=Ref)
    created_at_ms: int = pb(7, Kind.UINT64)


@dataclass
class CompletenessReport(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.CompletenessReport"
    report_id: str = pb(1, Kind.STRING)
    report_digest: Optional[Digest32] = pb(2, Kind.MESSAGE, message=Digest32)
    session_id: str = pb(3, Kind.STRING)
    status: int = pb(4, Kind.ENUM, enum=CompletenessStatus)
    missing_nodes: List[Ref] = pb(5, Kind.MESSAGE, repeated=True, message=Ref)
    missing_edges: List[str] = pb(6, Kind.STRING, repeated=True)
    reason_codes: Optional[ReasonCodes] = pb(7, Kind.MESSAGE, message=ReasonCodes)
    proof_receipt_ref: Optional[Ref] = pb(8, Kind.MESSAGE, message=Ref)
