"""
UCF — ucf.schema
----------------

Schema plumbing shared by every `ucf.v1` message:

- message  : `Message` base, `pb(...)` field descriptors, `Kind`
- policy   : `NormalizationPolicy`, `SetField`, path validation/access
- normalize: the field normalizer
- registry : (domain, schema_id, schema_version) → schema entry
"""

from __future__ import annotations

from .message import FieldSpec, Kind, Message, pb
from .policy import EMPTY_POLICY, NormalizationPolicy, SetField

__all__ = [
    "FieldSpec",
    "Kind",
    "Message",
    "pb",
    "EMPTY_POLICY",
    "NormalizationPolicy",
    "SetField",
]
