"""
Normalization policies.

A `NormalizationPolicy` tells the normalizer, per schema:

- which repeated fields are *set-like* (unordered multisets) and the key
  they are sorted by;
- which repeated fields are *ordered* (left exactly as authored);
- which bytes field, if any, is the self-digest (zeroed before hashing);
- which bytes field, if any, links to the previous instance of a chain.

Field references are dotted paths from the schema root, e.g.
``reason_codes.codes`` or ``neurons.labels``. A path may pass through
repeated message fields (the rest of the path is then applied to every
element); digest paths may only pass through singular message fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple, Type

from ..errors import SchemaPolicyMismatch
from ..utils.hash import DIGEST_SIZE
from .message import FieldSpec, Kind, Message


@dataclass(frozen=True)
class SetField:
    """
    A set-like repeated field.

    key: None sorts elements by their encoded bytes (scalars: by value, then
    encoded bytes). A tuple of sub-field names sorts message elements by
    those fields first, e.g. ("pre", "post", "post_compartment",
    "syn_param_id", "delay_steps"). Ties always fall back to the full
    element bytes, so the order is total.
    """

    path: str
    key: Optional[Tuple[str, ...]] = None

    @property
    def depth(self) -> int:
        return self.path.count(".") + 1


@dataclass(frozen=True)
class NormalizationPolicy:
    set_fields: Tuple[SetField, ...] = ()
    ordered_fields: Tuple[str, ...] = ()
    self_digest: Optional[str] = None
    prev_digest: Optional[str] = None
    digest_width: int = DIGEST_SIZE

    def __post_init__(self) -> None:
        if self.digest_width != DIGEST_SIZE:
            raise ValueError(f"digest_width is fixed at {DIGEST_SIZE} bytes in this profile")
        if self.self_digest is not None and self.self_digest == self.prev_digest:
            raise ValueError("self_digest and prev_digest must be different fields")

    def to_obj(self) -> Dict[str, object]:
        return {
            "set_fields": [
                {"path": sf.path, "key": list(sf.key) if sf.key else None}
                for sf in self.set_fields
            ],
            "ordered_fields": list(self.ordered_fields),
            "self_digest": self.self_digest,
            "prev_digest": self.prev_digest,
            "digest_width": self.digest_width,
        }


EMPTY_POLICY = NormalizationPolicy()


# ---------------------------------------------------------------------------
# Path resolution / validation
# ---------------------------------------------------------------------------


def resolve_path(
    message_type: Type[Message], path: str, *, schema_id: Optional[str] = None
) -> List[FieldSpec]:
    """Resolve a dotted path to the chain of field specs it walks through."""
    sid = schema_id or message_type.schema_name()
    if not path:
        raise SchemaPolicyMismatch(sid, path, "empty field path")
    specs: List[FieldSpec] = []
    cls: Optional[Type[Message]] = message_type
    parts = path.split(".")
    for i, name in enumerate(parts):
        if cls is None:
            raise SchemaPolicyMismatch(
                sid, path, f"{'.'.join(parts[:i])!r} is not a message field"
            )
        spec = cls.descriptor(name)
        if spec is None:
            raise SchemaPolicyMismatch(sid, path, f"{cls.__name__} has no field {name!r}")
        specs.append(spec)
        cls = spec.message_type if spec.kind is Kind.MESSAGE else None
    return specs


def _check_set_field(message_type: Type[Message], sf: SetField, sid: str) -> None:
    leaf = resolve_path(message_type, sf.path, schema_id=sid)[-1]
    if not leaf.repeated:
        raise SchemaPolicyMismatch(sid, sf.path, "set-like field must be repeated")
    if sf.key is None:
        return
    if leaf.kind is not Kind.MESSAGE:
        raise SchemaPolicyMismatch(sid, sf.path, "a sort key tuple needs message elements")
    if not sf.key:
        raise SchemaPolicyMismatch(sid, sf.path, "empty sort key tuple")
    for k in sf.key:
        if leaf.message_type.descriptor(k) is None:  # type: ignore[union-attr]
            raise SchemaPolicyMismatch(
                sid,
                sf.path,
                f"sort key {k!r} is not a field of {leaf.message_type.__name__}",  # type: ignore[union-attr]
            )


def _check_digest_path(message_type: Type[Message], path: str, role: str, sid: str) -> None:
    specs = resolve_path(message_type, path, schema_id=sid)
    if any(s.repeated for s in specs):
        raise SchemaPolicyMismatch(sid, path, f"{role} path cannot cross a repeated field")
    if specs[-1].kind is not Kind.BYTES:
        raise SchemaPolicyMismatch(sid, path, f"{role} field must be bytes")


@lru_cache(maxsize=None)
def validate_policy(
    message_type: Type[Message],
    policy: NormalizationPolicy,
    schema_id: Optional[str] = None,
) -> None:
    """Raise SchemaPolicyMismatch unless every path in `policy` fits `message_type`."""
    sid = schema_id or message_type.schema_name()
    seen = set()
    for sf in policy.set_fields:
        if sf.path in seen:
            raise SchemaPolicyMismatch(sid, sf.path, "declared set-like twice")
        seen.add(sf.path)
        _check_set_field(message_type, sf, sid)
    for path in policy.ordered_fields:
        if path in seen:
            raise SchemaPolicyMismatch(sid, path, "declared both set-like and ordered")
        if not resolve_path(message_type, path, schema_id=sid)[-1].repeated:
            raise SchemaPolicyMismatch(sid, path, "ordered field must be repeated")
    if policy.self_digest is not None:
        _check_digest_path(message_type, policy.self_digest, "self-digest", sid)
    if policy.prev_digest is not None:
        _check_digest_path(message_type, policy.prev_digest, "previous-digest", sid)


# ---------------------------------------------------------------------------
# Path access on instances
# ---------------------------------------------------------------------------


def read_path(message: Message, path: str) -> Any:
    """Value at a singular dotted path, or None when an intermediate is unset."""
    obj: object = message
    for name in path.split("."):
        if obj is None:
            return None
        obj = getattr(obj, name)
    return obj


def assign_path(message: Message, path: str, value: object) -> None:
    """Set a singular dotted path in place, creating unset intermediate messages."""
    parts = path.split(".")
    obj: Message = message
    for name in parts[:-1]:
        child = getattr(obj, name)
        if child is None:
            spec = type(obj).descriptor(name)
            child = spec.message_type()  # type: ignore[union-attr,misc]
            setattr(obj, name, child)
        obj = child
    setattr(obj, parts[-1], value)


__all__ = [
    "SetField",
    "NormalizationPolicy",
    "EMPTY_POLICY",
    "resolve_path",
    "validate_policy",
    "read_path",
    "assign_path",
]
