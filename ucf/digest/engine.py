"""
Digest engine
=============

    digest32 = BLAKE3-256( UTF8(domain) || UTF8(schema_id)
                           || ASCII(decimal(schema_version)) || canonical_bytes )

No delimiters, no length prefixes: existing digests depend on the exact
concatenation (see SchemaRegistry.prefix_collisions for the ambiguity check).

Self-referential digests (a digest field embedded in the message it
describes) are zero-then-hash on a deep copy: the normalizer writes 32 zero
bytes into the self-digest field, the copy is encoded and hashed, and
`seal()` hands back a *new* message carrying the result. The digest never
covers its own field.

Everything here is a pure function. An optional `max_input_bytes` cap turns
oversized inputs into DigestInputTooLarge; without it digesting is total.
"""

from __future__ import annotations

from typing import Optional

from ..encoding.canonical import canonical_bytes
from ..errors import DigestInputTooLarge, SchemaPolicyMismatch
from ..schema.message import Message
from ..schema.policy import assign_path, read_path
from ..schema.registry import SchemaEntry
from ..utils.bytes import BytesLike, is_byteslike
from ..utils.hash import Hasher


def digest_prefix(domain: str, schema_id: str, schema_version: int) -> bytes:
    if not isinstance(domain, str) or not isinstance(schema_id, str):
        raise TypeError("domain and schema_id must be str")
    if isinstance(schema_version, bool) or not isinstance(schema_version, int):
        raise ValueError("schema_version must be an int")
    if schema_version < 1:
        raise ValueError(f"schema_version must be positive, got {schema_version}")
    return domain.encode("utf-8") + schema_id.encode("utf-8") + str(schema_version).encode("ascii")


def digest32(
    domain: str,
    schema_id: str,
    schema_version: int,
    canonical: BytesLike,
    *,
    max_input_bytes: Optional[int] = None,
) -> bytes:
    """32-byte BLAKE3 over the domain-separated canonical bytes."""
    if not is_byteslike(canonical):
        raise TypeError("canonical bytes must be bytes-like")
    prefix = digest_prefix(domain, schema_id, schema_version)
    size = len(prefix) + len(memoryview(canonical))
    if max_input_bytes is not None and size > max_input_bytes:
        raise DigestInputTooLarge(size, max_input_bytes, schema_id=schema_id, domain=domain)
    return Hasher().update(prefix).update(canonical).digest()


def _check_type(message: Message, entry: SchemaEntry) -> None:
    if not isinstance(message, entry.message_type):
        raise TypeError(
            f"{entry.schema_id} expects {entry.message_type.__name__}, got {type(message).__name__}"
        )


def _require_self_digest(entry: SchemaEntry) -> str:
    if entry.policy.self_digest is None:
        raise SchemaPolicyMismatch(entry.schema_id, "<self_digest>", "schema declares no self-digest field")
    return entry.policy.self_digest


def message_digest(
    message: Message, entry: SchemaEntry, *, max_input_bytes: Optional[int] = None
) -> bytes:
    """Digest of a message's canonical bytes under its schema's domain."""
    _check_type(message, entry)
    data = canonical_bytes(message, entry.policy, schema_id=entry.schema_id)
    return digest32(
        entry.domain,
        entry.schema_id,
        entry.schema_version,
        data,
        max_input_bytes=max_input_bytes,
    )


def instance_digest(
    message: Message, entry: SchemaEntry, *, max_input_bytes: Optional[int] = None
) -> bytes:
    """
    The digest other records use to refer to `message`.

    Canonical bytes already carry a zeroed self-digest, so for schemas that
    declare one this equals `self_digest`; otherwise it is the message digest.
    """
    return message_digest(message, entry, max_input_bytes=max_input_bytes)


def self_digest(
    message: Message, entry: SchemaEntry, *, max_input_bytes: Optional[int] = None
) -> bytes:
    """Zero-then-hash digest for schemas that embed their own digest."""
    _require_self_digest(entry)
    return message_digest(message, entry, max_input_bytes=max_input_bytes)


def seal(message: Message, entry: SchemaEntry, *, max_input_bytes: Optional[int] = None) -> Message:
    """Return a copy of `message` with its self-digest field filled in."""
    path = _require_self_digest(entry)
    value = self_digest(message, entry, max_input_bytes=max_input_bytes)
    out = message.copy()
    assign_path(out, path, value)
    return out


def stored_self_digest(message: Message, entry: SchemaEntry) -> Optional[bytes]:
    value = read_path(message, _require_self_digest(entry))
    return bytes(value) if value is not None else None


def verify_seal(message: Message, entry: SchemaEntry) -> bool:
    """True when the stored self-digest matches a fresh zero-then-hash."""
    return stored_self_digest(message, entry) == self_digest(message, entry)


__all__ = [
    "digest_prefix",
    "digest32",
    "message_digest",
    "instance_digest",
    "self_digest",
    "seal",
    "stored_self_digest",
    "verify_seal",
]
