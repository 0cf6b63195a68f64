from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional

from ..schema.message import Kind, Message, pb
from .common import Digest32, Ref, Signature


class MicroModule(IntEnum):
    MICRO_MODULE_UNSPECIFIED = 0
    MICRO_MODULE_LC = 1
    MICRO_MODULE_SN = 2
    MICRO_MODULE_HPA = 3


@dataclass
class MicrocircuitConfigEvidence(Message):
    """
    Evidence that a microcircuit module runs a given configuration.
    `config_digest` is the digest of the configuration blob itself;
    `prev_config_digest` names the configuration it superseded.
    """

    SCHEMA_ID: ClassVar[str] = "ucf.v1.MicrocircuitConfigEvidence"
    module: int = pb(1, Kind.ENUM, enum=MicroModule)
    config_version: int = pb(2, Kind.UINT32)
    config_digest: Optional[Digest32] = pb(3, Kind.MESSAGE, message=Digest32)
    created_at_ms: int = pb(4, Kind.UINT64)
    prev_config_digest: Optional[Digest32] = pb(5, Kind.MESSAGE, message=Digest32)
    proof_receipt_ref: Optional[Ref] = pb(6, Kind.MESSAGE, message=Ref)
    attestation_sig: Optional[Signature] = pb(7, Kind.MESSAGE, message=Signature)
    attestation_key_id: Optional[str] = pb(8, Kind.STRING, optional=True)
