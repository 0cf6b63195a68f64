from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, List, Optional

from ..schema.message import Kind, Message, pb
from .common import ReasonCodes


class DecisionForm(IntEnum):
    DECISION_FORM_UNSPECIFIED = 0
    DECISION_FORM_ALLOW = 1
    DECISION_FORM_DENY = 2
    DECISION_FORM_REQUIRE_APPROVAL = 3
    DECISION_FORM_REQUIRE_SIMULATION = 4


@dataclass
class ConstraintsDelta(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.ConstraintsDelta"
    constraints_added: List[str] = pb(1, Kind.STRING, repeated=True)
    constraints_removed: List[str] = pb(2, Kind.STRING, repeated=True)


@dataclass
class PolicyDecision(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.PolicyDecision"
    decision: int = pb(1, Kind.ENUM, enum=DecisionForm)
    reason_codes: Optional[ReasonCodes] = pb(2, Kind.MESSAGE, message=ReasonCodes)
    constraints: Optional[ConstraintsDelta] = pb(3, Kind.MESSAGE, message=ConstraintsDelta)
