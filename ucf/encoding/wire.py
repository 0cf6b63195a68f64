"""
Deterministic protobuf wire codec
---------------------------------

A small, dependency-free encoder/decoder for the proto3 subset used by the
`ucf.v1` schemas, driven by the `pb(...)` descriptors on `Message` classes.

Supported kinds:
- int32 / int64 (negative values use the 10-byte two's-complement varint)
- uint32 / uint64
- bool, enum (varint)
- string (UTF-8, must be valid), bytes
- nested messages
- repeated fields of any of the above

Not supported (by design for canonical bytes):
- map fields (no canonical iteration order on the wire) → EncodingError
- fixed32/fixed64/sint/float/double, groups

Determinism rules:
- fields are emitted in ascending field-number order
- proto3 defaults are omitted (0, False, "", b"", enum 0, empty repeated,
  unset message); `optional` scalars are emitted whenever they are set
- repeated varint kinds are packed; repeated string/bytes/message fields are
  emitted one record per element, in list order
- the encoder does no sorting of its own: set-like fields are ordered by
  `ucf.schema.normalize` before they get here

Public API:
- encode(message) -> bytes
- decode(data, message_type, *, strict=True) -> Message
- scalar_bytes(kind, value) -> bytes      (wire value of one scalar element)
"""

from __future__ import annotations

from typing import Any, Dict, List, Type

from ..errors import DecodingError, EncodingError
from ..schema.message import VARINT_KINDS, FieldSpec, Kind, Message, coerce_enum

WT_VARINT = 0
WT_I64 = 1
WT_LEN = 2
WT_I32 = 5

_U64 = 1 << 64

_RANGES = {
    Kind.INT32: (-(1 << 31), (1 << 31) - 1),
    Kind.ENUM: (-(1 << 31), (1 << 31) - 1),
    Kind.INT64: (-(1 << 63), (1 << 63) - 1),
    Kind.UINT32: (0, (1 << 32) - 1),
    Kind.UINT64: (0, _U64 - 1),
}

# ------------------------
# Low-level encode helpers
# ------------------------


def _varint(n: int) -> bytes:
    """Unsigned LEB128 for 0 <= n < 2**64."""
    out = bytearray()
    while True:
        b = n & 0x7F
        n >>= 7
        if n:
            out.append(b | 0x80)
        else:
            out.append(b)
            return bytes(out)


def _tag(number: int, wire_type: int) -> bytes:
    return _varint((number << 3) | wire_type)


def _len_delimited(number: int, payload: bytes) -> bytes:
    return _tag(number, WT_LEN) + _varint(len(payload)) + payload


def _fail(owner: Type[Message], spec: FieldSpec, message: str, **data: Any) -> EncodingError:
    return EncodingError(message, schema_id=owner.schema_name(), field=spec.name, **data)


def _varint_value(owner: Type[Message], spec: FieldSpec, value: Any) -> int:
    if spec.kind is Kind.BOOL:
        if not isinstance(value, bool):
            raise _fail(owner, spec, "bool field expects bool", got=type(value).__name__)
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _fail(owner, spec, f"{spec.kind.value} field expects int", got=type(value).__name__)
    lo, hi = _RANGES[spec.kind]
    v = int(value)
    if not lo <= v <= hi:
        raise _fail(owner, spec, f"value out of {spec.kind.value} range", value=v)
    return v + _U64 if v < 0 else v


def _scalar_payload(owner: Type[Message], spec: FieldSpec, value: Any) -> bytes:
    if spec.kind in VARINT_KINDS:
        return _varint(_varint_value(owner, spec, value))
    if spec.kind is Kind.STRING:
        if not isinstance(value, str):
            raise _fail(owner, spec, "string field expects str", got=type(value).__name__)
        try:
            return value.encode("utf-8", "strict")
        except UnicodeEncodeError as e:
            raise _fail(owner, spec, "string is not valid UTF-8") from e
    if spec.kind is Kind.BYTES:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise _fail(owner, spec, "bytes field expects bytes", got=type(value).__name__)
        return bytes(value)
    raise _fail(owner, spec, f"not a scalar kind: {spec.kind.value}")


def _message_payload(owner: Type[Message], spec: FieldSpec, value: Any) -> bytes:
    if not isinstance(value, spec.message_type):  # type: ignore[arg-type]
        raise _fail(
            owner,
            spec,
            f"expects {spec.message_type.__name__}",  # type: ignore[union-attr]
            got=type(value).__name__,
        )
    return encode(value)


def _is_default(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return len(value) == 0
    return value == 0 or value is False or value == ""


# ------------------------
# Encoder
# ------------------------


def encode(message: Message) -> bytes:
    """Serialize `message` deterministically (no normalization applied)."""
    owner = type(message)
    out = bytearray()
    for spec in owner.descriptors():
        value = getattr(message, spec.name)
        if spec.kind is Kind.MAP:
            raise _fail(owner, spec, "map fields have no canonical encoding")
        if spec.repeated:
            if not isinstance(value, (list, tuple)):
                raise _fail(owner, spec, "repeated field expects a list", got=type(value).__name__)
            if not value:
                continue
            if spec.kind in VARINT_KINDS:
                packed = b"".join(_scalar_payload(owner, spec, v) for v in value)
                out += _len_delimited(spec.number, packed)
            elif spec.kind is Kind.MESSAGE:
                for v in value:
                    out += _len_delimited(spec.number, _message_payload(owner, spec, v))
            else:
                for v in value:
                    out += _len_delimited(spec.number, _scalar_payload(owner, spec, v))
            continue
        if value is None:
            if spec.kind is Kind.MESSAGE or spec.optional:
                continue
            raise _fail(owner, spec, "required scalar field is None")
        if spec.kind is Kind.MESSAGE:
            out += _len_delimited(spec.number, _message_payload(owner, spec, value))
            continue
        if not spec.optional and _is_default(value):
            # still type-check so a wrong default-like value is not silently dropped
            _scalar_payload(owner, spec, value)
            continue
        payload = _scalar_payload(owner, spec, value)
        if spec.kind in VARINT_KINDS:
            out += _tag(spec.number, WT_VARINT) + payload
        else:
            out += _len_delimited(spec.number, payload)
    return bytes(out)


def scalar_bytes(spec: FieldSpec, value: Any, owner: Type[Message] = Message) -> bytes:
    """Wire value bytes of one scalar element (varint, UTF-8 or raw bytes)."""
    return _scalar_payload(owner, spec, value)


# ------------------------
# Decoder
# ------------------------


class _Buf:
    __slots__ = ("mv", "pos", "end", "owner")

    def __init__(self, mv: memoryview, owner: Type[Message], pos: int = 0, end: int | None = None):
        self.mv = mv
        self.pos = pos
        self.end = len(mv) if end is None else end
        self.owner = owner

    def at_end(self) -> bool:
        return self.pos >= self.end

    def error(self, message: str, **data: Any) -> DecodingError:
        return DecodingError(message, schema_id=self.owner.schema_name(), offset=self.pos, **data)

    def get(self, n: int) -> memoryview:
        if n < 0 or self.pos + n > self.end:
            raise self.error("truncated input", need=n)
        out = self.mv[self.pos : self.pos + n]
        self.pos += n
        return out

    def varint(self) -> int:
        result = 0
        for shift in range(0, 70, 7):
            if self.pos >= self.end:
                raise self.error("truncated varint")
            b = self.mv[self.pos]
            self.pos += 1
            if shift == 63 and b > 1:
                raise self.error("varint exceeds 64 bits")
            result |= (b & 0x7F) << shift
            if not b & 0x80:
                return result
        raise self.error("varint too long")

    def sub(self, owner: Type[Message]) -> "_Buf":
        n = self.varint()
        if self.pos + n > self.end:
            raise self.error("length-delimited field overruns buffer", length=n)
        child = _Buf(self.mv, owner, self.pos, self.pos + n)
        self.pos += n
        return child

    def skip(self, wire_type: int) -> None:
        if wire_type == WT_VARINT:
            self.varint()
        elif wire_type == WT_I64:
            self.get(8)
        elif wire_type == WT_LEN:
            self.get(self.varint())
        elif wire_type == WT_I32:
            self.get(4)
        else:
            raise self.error(f"unsupported wire type {wire_type}")


def _from_varint(buf: _Buf, spec: FieldSpec, raw: int) -> Any:
    kind = spec.kind
    if kind is Kind.BOOL:
        if raw > 1:
            raise buf.error("bool varint out of range", field=spec.name, value=raw)
        return bool(raw)
    v = raw - _U64 if kind in (Kind.INT32, Kind.INT64, Kind.ENUM) and raw >= (1 << 63) else raw
    lo, hi = _RANGES[kind]
    if not lo <= v <= hi:
        raise buf.error(f"value out of {kind.value} range", field=spec.name, value=v)
    if kind is Kind.ENUM:
        return coerce_enum(spec.enum_type, v)
    return v


def _read_len_value(buf: _Buf, spec: FieldSpec, strict: bool) -> Any:
    if spec.kind is Kind.MESSAGE:
        return _decode_message(buf.sub(spec.message_type), spec.message_type, strict)  # type: ignore[arg-type]
    raw = bytes(buf.get(buf.varint()))
    if spec.kind is Kind.STRING:
        try:
            return raw.decode("utf-8", "strict")
        except UnicodeDecodeError as e:
            raise buf.error("invalid UTF-8 in string field", field=spec.name) from e
    return raw


def _decode_message(buf: _Buf, cls: Type[Message], strict: bool) -> Message:
    by_number = {s.number: s for s in cls.descriptors()}
    values: Dict[str, Any] = {}
    while not buf.at_end():
        key = buf.varint()
        number, wire_type = key >> 3, key & 0x7
        if number == 0:
            raise buf.error("field number 0 is invalid")
        spec = by_number.get(number)
        if spec is None:
            if strict:
                raise buf.error(f"unknown field number {number}", field_number=number)
            buf.skip(wire_type)
            continue
        if spec.kind is Kind.MAP:
            raise buf.error("map fields are not decodable", field=spec.name)

        if spec.repeated:
            items: List[Any] = values.setdefault(spec.name, [])
            if spec.kind in VARINT_KINDS and wire_type == WT_LEN:
                packed = buf.sub(cls)
                while not packed.at_end():
                    items.append(_from_varint(buf, spec, packed.varint()))
            elif spec.kind in VARINT_KINDS and wire_type == WT_VARINT:
                items.append(_from_varint(buf, spec, buf.varint()))
            elif spec.kind not in VARINT_KINDS and wire_type == WT_LEN:
                items.append(_read_len_value(buf, spec, strict))
            else:
                raise buf.error(f"wire type {wire_type} invalid for repeated {spec.kind.value}", field=spec.name)
            continue

        expected = WT_VARINT if spec.kind in VARINT_KINDS else WT_LEN
        if wire_type != expected:
            raise buf.error(f"wire type {wire_type} invalid for {spec.kind.value}", field=spec.name)
        if expected == WT_VARINT:
            values[spec.name] = _from_varint(buf, spec, buf.varint())
        else:
            values[spec.name] = _read_len_value(buf, spec, strict)
    return cls(**values)


def decode(data: bytes | bytearray | memoryview, message_type: Type[Message], *, strict: bool = True) -> Message:
    """
    Parse `data` into `message_type`. With `strict`, unknown field numbers are
    rejected instead of skipped.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("decode expects bytes-like input")
    buf = _Buf(memoryview(bytes(data)), message_type)
    return _decode_message(buf, message_type, strict)


__all__ = ["encode", "decode", "scalar_bytes", "EncodingError", "DecodingError"]
