"""
Field normalizer.

normalize(message, policy) returns a *new* message in which:

- every set-like repeated field is sorted by a total order
  (declared key parts, then the element's full encoded bytes), innermost
  paths first so nested sets are canonical before their parents compare;
- ordered repeated fields are untouched;
- the self-digest field, if declared, holds `digest_width` zero bytes.

The input is deep-copied first and never mutated.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..encoding import wire
from .message import FieldSpec, Kind, Message
from .policy import NormalizationPolicy, SetField, assign_path, resolve_path, validate_policy


def _key_part(value: Any) -> Tuple:
    # None sorts before any set value; str compares by UTF-8 bytes.
    if value is None:
        return (0,)
    if isinstance(value, Message):
        return (1, wire.encode(value))
    if isinstance(value, str):
        return (1, value.encode("utf-8"))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return (1, bytes(value))
    if isinstance(value, (list, tuple)):
        return (1, tuple(_key_part(v) for v in value))
    return (1, int(value))


def _sort_key(leaf: FieldSpec, sf: SetField, owner: type) -> Callable[[Any], Tuple]:
    if leaf.kind is Kind.MESSAGE:
        names = sf.key or ()

        def message_key(el: Message) -> Tuple:
            return tuple(_key_part(getattr(el, n)) for n in names) + (wire.encode(el),)

        return message_key

    def scalar_key(el: Any) -> Tuple:
        return (_key_part(el), wire.scalar_bytes(leaf, el, owner))

    return scalar_key


def _visit(obj: Any, parts: Sequence[str], fn: Callable[[Message, str], None]) -> None:
    name = parts[0]
    if len(parts) == 1:
        fn(obj, name)
        return
    child = getattr(obj, name)
    if child is None:
        return
    if isinstance(child, list):
        for el in child:
            _visit(el, parts[1:], fn)
    else:
        _visit(child, parts[1:], fn)


def _sort_set_field(root: Message, sf: SetField, schema_id: str) -> None:
    leaf = resolve_path(type(root), sf.path, schema_id=schema_id)[-1]

    def sort_in_place(owner: Message, name: str) -> None:
        values: List[Any] = list(getattr(owner, name))
        if len(values) > 1:
            values.sort(key=_sort_key(leaf, sf, type(owner)))
        setattr(owner, name, values)

    _visit(root, sf.path.split("."), sort_in_place)


def normalize(
    message: Message,
    policy: NormalizationPolicy,
    *,
    zero_self_digest: bool = True,
    schema_id: Optional[str] = None,
) -> Message:
    """Return a normalized deep copy of `message`; see module docstring."""
    sid = schema_id or type(message).schema_name()
    validate_policy(type(message), policy, sid)
    out = message.copy()
    for sf in sorted(policy.set_fields, key=lambda s: -s.depth):
        _sort_set_field(out, sf, sid)
    if zero_self_digest and policy.self_digest is not None:
        assign_path(out, policy.self_digest, bytes(policy.digest_width))
    return out


__all__ = ["normalize"]
