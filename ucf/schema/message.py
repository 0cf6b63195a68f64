"""
UCF — ucf.schema.message
------------------------

Typed message records with wire descriptors.

A schema is a `@dataclass` subclass of `Message` whose fields are declared
with `pb(number, kind, ...)`. The descriptor metadata gives the encoder the
field number and wire kind, and gives the normalizer the capability set it
needs: enumerate fields in field-number order, get/set by name, deep copy.

    @dataclass
    class Ref(Message):
        SCHEMA_ID: ClassVar[str] = "ucf.v1.Ref"
        uri: str = pb(1, Kind.STRING)
        label: str = pb(2, Kind.STRING)

Defaults follow proto3: 0 / False / "" / b"" for scalars, [] for repeated
fields, None for message fields and `optional` scalars.

Enums are IntEnum subclasses and must declare a zero member
(`*_UNSPECIFIED`). Values outside the declared members survive decoding as
plain ints (open enums).
"""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Set, Tuple, Type


class Kind(Enum):
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    BOOL = "bool"
    ENUM = "enum"
    STRING = "string"
    BYTES = "bytes"
    MESSAGE = "message"
    # Declarable only so hygiene checks can flag it; never encodable.
    MAP = "map"


VARINT_KINDS = frozenset(
    (Kind.INT32, Kind.INT64, Kind.UINT32, Kind.UINT64, Kind.BOOL, Kind.ENUM)
)

_ZERO: Dict[Kind, Any] = {
    Kind.INT32: 0,
    Kind.INT64: 0,
    Kind.UINT32: 0,
    Kind.UINT64: 0,
    Kind.BOOL: False,
    Kind.ENUM: 0,
    Kind.STRING: "",
    Kind.BYTES: b"",
}


@dataclass(frozen=True)
class FieldSpec:
    number: int
    kind: Kind
    name: str = ""
    repeated: bool = False
    optional: bool = False
    message_type: Optional[Type["Message"]] = None
    enum_type: Optional[Type[IntEnum]] = None

    @property
    def is_message(self) -> bool:
        return self.kind is Kind.MESSAGE

    @property
    def singular(self) -> bool:
        return not self.repeated and self.kind is not Kind.MAP

    def zero(self) -> Any:
        if self.repeated:
            return []
        if self.kind is Kind.MAP:
            return {}
        if self.kind is Kind.MESSAGE or self.optional:
            return None
        return _ZERO[self.kind]


def pb(
    number: int,
    kind: Kind,
    *,
    repeated: bool = False,
    optional: bool = False,
    message: Optional[Type["Message"]] = None,
    enum: Optional[Type[IntEnum]] = None,
) -> Any:
    """Declare a dataclass field carrying its wire descriptor."""
    if not 1 <= number <= (1 << 29) - 1:
        raise ValueError(f"field number out of range: {number}")
    if kind is Kind.MESSAGE and message is None:
        raise ValueError("MESSAGE fields need a message type")
    if kind is Kind.ENUM and enum is None:
        raise ValueError("ENUM fields need an enum type")
    if repeated and optional:
        raise ValueError("a field cannot be both repeated and optional")
    spec = FieldSpec(
        number=number,
        kind=kind,
        repeated=repeated,
        optional=optional,
        message_type=message,
        enum_type=enum,
    )
    meta = {"ucf": spec}
    if repeated:
        return dataclasses.field(default_factory=list, metadata=meta)
    if kind is Kind.MAP:
        return dataclasses.field(default_factory=dict, metadata=meta)
    return dataclasses.field(default=spec.zero(), metadata=meta)


class Message:
    """Base class for schema records. Subclasses must be dataclasses."""

    SCHEMA_ID: ClassVar[str] = ""

    @classmethod
    def descriptors(cls) -> Tuple[FieldSpec, ...]:
        """Field descriptors in ascending field-number order."""
        cached = cls.__dict__.get("_ucf_descriptors")
        if cached is not None:
            return cached
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} must be a dataclass")
        specs: List[FieldSpec] = []
        seen: Dict[int, str] = {}
        for f in dataclasses.fields(cls):
            spec = f.metadata.get("ucf")
            if spec is None:
                continue
            if spec.number in seen:
                raise TypeError(
                    f"{cls.__name__}: field number {spec.number} used by "
                    f"{seen[spec.number]!r} and {f.name!r}"
                )
            seen[spec.number] = f.name
            specs.append(dataclasses.replace(spec, name=f.name))
        specs.sort(key=lambda s: s.number)
        result = tuple(specs)
        setattr(cls, "_ucf_descriptors", result)
        return result

    @classmethod
    def descriptor(cls, name: str) -> Optional[FieldSpec]:
        for spec in cls.descriptors():
            if spec.name == name:
                return spec
        return None

    @classmethod
    def schema_name(cls) -> str:
        return cls.SCHEMA_ID or cls.__name__

    def copy(self) -> "Message":
        """Deep copy; the normalizer and `seal()` never touch the original."""
        return copy.deepcopy(self)

    def to_obj(self) -> Dict[str, Any]:
        """JSON-friendly view (bytes → hex, enums → member names)."""
        out: Dict[str, Any] = {}
        for spec in self.descriptors():
            out[spec.name] = _obj_value(spec, getattr(self, spec.name))
        return out


def _obj_value(spec: FieldSpec, value: Any) -> Any:
    if value is None:
        return None
    if spec.repeated:
        one = dataclasses.replace(spec, repeated=False)
        return [_obj_value(one, v) for v in value]
    if isinstance(value, Message):
        return value.to_obj()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, IntEnum):
        return value.name
    return value


# ---------------------------------------------------------------------------
# Enum helpers
# ---------------------------------------------------------------------------


def enum_has_zero(enum_type: Type[IntEnum]) -> bool:
    return any(int(m) == 0 for m in enum_type)


def coerce_enum(enum_type: Optional[Type[IntEnum]], value: int) -> int:
    """Map a wire value onto its enum member; unknown values stay plain ints."""
    if enum_type is None:
        return value
    try:
        return enum_type(value)
    except ValueError:
        return value


# ---------------------------------------------------------------------------
# Type graph
# ---------------------------------------------------------------------------


def iter_message_types(root: Type[Message]) -> Iterator[Type[Message]]:
    """Yield `root` and every message type reachable through its fields, once each."""
    seen: Set[Type[Message]] = set()
    stack = [root]
    while stack:
        cls = stack.pop()
        if cls in seen:
            continue
        seen.add(cls)
        yield cls
        for spec in cls.descriptors():
            if spec.message_type is not None:
                stack.append(spec.message_type)


def iter_enum_types(root: Type[Message]) -> Iterator[Type[IntEnum]]:
    seen: Set[Type[IntEnum]] = set()
    for cls in iter_message_types(root):
        for spec in cls.descriptors():
            if spec.enum_type is not None and spec.enum_type not in seen:
                seen.add(spec.enum_type)
                yield spec.enum_type


__all__ = [
    "Kind",
    "VARINT_KINDS",
    "FieldSpec",
    "pb",
    "Message",
    "enum_has_zero",
    "coerce_enum",
    "iter_message_types",
    "iter_enum_types",
]
