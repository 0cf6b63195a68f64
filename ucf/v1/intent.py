from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, List, Optional

from ..schema.message import Kind, Message, pb
from .common import ReasonCodes, Ref


class Channel(IntEnum):
    CHANNEL_UNSPECIFIED = 0
    CHANNEL_REALTIME = 1
    CHANNEL_BATCH = 2


class RiskLevel(IntEnum):
    RISK_LEVEL_UNSPECIFIED = 0
    RISK_LEVEL_LOW = 1
    RISK_LEVEL_MEDIUM = 2
    RISK_LEVEL_HIGH = 3


class DataClass(IntEnum):
    DATA_CLASS_UNSPECIFIED = 0
    DATA_CLASS_PUBLIC = 1
    DATA_CLASS_INTERNAL = 2
    DATA_CLASS_SENSITIVE = 3


@dataclass
class QueryParams(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.QueryParams"
    query: str = pb(1, Kind.STRING)
    selectors: List[str] = pb(2, Kind.STRING, repeated=True)


@dataclass
class CanonicalIntent(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.CanonicalIntent"
    intent_id: str = pb(1, Kind.STRING)
    channel: int = pb(2, Kind.ENUM, enum=Channel)
    risk_level: int = pb(3, Kind.ENUM, enum=RiskLevel)
    data_class: int = pb(4, Kind.ENUM, enum=DataClass)
    subject: Optional[Ref] = pb(5, Kind.MESSAGE, message=Ref)
    reason_codes: Optional[ReasonCodes] = pb(6, Kind.MESSAGE, message=ReasonCodes)
    query: Optional[QueryParams] = pb(7, Kind.MESSAGE, message=QueryParams)
