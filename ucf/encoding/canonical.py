"""
Canonical bytes
===============

canonical_bytes(message, policy) is the single byte string every conforming
producer derives for a message: normalize (sort set-like fields, zero the
self-digest), then serialize with the deterministic wire codec.

transport_bytes(message, policy) is what a producer actually sends once the
self-digest has been written back by `ucf.digest.seal`: the same
normalization, except the stored self-digest is kept.

Both raise EncodingError (from the codec) or SchemaPolicyMismatch (from the
normalizer); neither is retried.
"""

from __future__ import annotations

from typing import Optional

from ..schema.message import Message
from ..schema.normalize import normalize
from ..schema.policy import EMPTY_POLICY, NormalizationPolicy
from . import wire


def canonical_bytes(
    message: Message,
    policy: NormalizationPolicy = EMPTY_POLICY,
    *,
    schema_id: Optional[str] = None,
) -> bytes:
    return wire.encode(normalize(message, policy, schema_id=schema_id))


def transport_bytes(
    message: Message,
    policy: NormalizationPolicy = EMPTY_POLICY,
    *,
    schema_id: Optional[str] = None,
) -> bytes:
    return wire.encode(normalize(message, policy, zero_self_digest=False, schema_id=schema_id))


__all__ = ["canonical_bytes", "transport_bytes"]
