"""
Wire codec tests: deterministic field layout, proto3 default omission,
packed repeated numerics, negative varints, and decoder rejections.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Dict, List, Optional

import pytest

from ucf.encoding import wire
from ucf.errors import DecodingError, EncodingError, UcfErrorCode
from ucf.schema.message import Kind, Message, pb
from ucf.v1 import (
    Compartment,
    Digest32,
    MicrocircuitConfigEvidence,
    PolicyDecision,
    ReasonCodes,
    Ref,
    SepEvent,
    SynapseParams,
)


class Color(IntEnum):
    COLOR_UNSPECIFIED = 0
    COLOR_RED = 1


@dataclass
class Packed(Message):
    SCHEMA_ID: ClassVar[str] = "test.Packed"
    nums: List[int] = pb(1, Kind.UINT32, repeated=True)
    flags: List[bool] = pb(2, Kind.BOOL, repeated=True)
    colors: List[int] = pb(3, Kind.ENUM, repeated=True, enum=Color)
    big: int = pb(4, Kind.INT64)
    opt: Optional[int] = pb(5, Kind.INT64, optional=True)
    flag: bool = pb(6, Kind.BOOL)


@dataclass
class WithMap(Message):
    SCHEMA_ID: ClassVar[str] = "test.WithMap"
    tags: Dict[str, str] = pb(1, Kind.MAP)


# ------------------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------------------


def test_empty_message_encodes_to_nothing() -> None:
    assert wire.encode(Ref()) == b""
    assert wire.encode(SynapseParams()) == b""


def test_fields_are_emitted_in_field_number_order() -> None:
    # label (2) is set first in the constructor call; uri (1) still leads
    assert wire.encode(Ref(label="x", uri="y")) == bytes.fromhex("0a0179" "120178")


def test_repeated_strings_are_one_record_each_in_list_order() -> None:
    assert wire.encode(ReasonCodes(codes=["b", "a"])) == bytes.fromhex("0a0162" "0a0161")


def test_default_scalars_are_omitted() -> None:
    s = SynapseParams(syn_param_id=0, e_rev_mv=0, mod_channel=0)
    assert wire.encode(s) == b""


def test_optional_scalar_is_emitted_when_set_to_zero() -> None:
    assert wire.encode(Compartment(parent_comp_id=0)) == bytes.fromhex("1000")
    assert wire.encode(Compartment()) == b""


def test_optional_empty_string_is_emitted() -> None:
    m = MicrocircuitConfigEvidence(attestation_key_id="")
    assert wire.encode(m) == bytes.fromhex("4200")


def test_set_empty_message_field_is_emitted() -> None:
    assert wire.encode(PolicyDecision(reason_codes=ReasonCodes())) == bytes.fromhex("1200")


def test_negative_int32_uses_ten_byte_varint() -> None:
    out = wire.encode(SynapseParams(e_rev_mv=-1))
    assert out == bytes.fromhex("28" "ffffffffffffffffff01")


def test_bool_and_uint64() -> None:
    m = SepEvent(timestamp_ms=1_700_000_000_000)
    assert wire.encode(m) == bytes.fromhex("30" "80d095ffbc31")
    assert wire.encode(Packed(flag=True)) == bytes.fromhex("3001")


def test_repeated_numerics_are_packed() -> None:
    m = Packed(nums=[1, 300], flags=[True, False], colors=[Color.COLOR_RED, 0])
    assert wire.encode(m) == bytes.fromhex("0a03" "01ac02" "12020100" "1a020100")


def test_int64_extremes() -> None:
    lo = wire.encode(Packed(big=-(1 << 63)))
    assert lo == bytes.fromhex("20" "80808080808080808001")
    hi = wire.encode(Packed(big=(1 << 63) - 1))
    assert hi == bytes.fromhex("20" "ffffffffffffffff7f")


@pytest.mark.parametrize(
    "msg, field",
    [
        (SynapseParams(e_rev_mv=1 << 31), "e_rev_mv"),
        (SynapseParams(syn_param_id=-1), "syn_param_id"),
        (Packed(flag=1), "flag"),
        (Ref(uri=b"raw"), "uri"),
        (Digest32(value="not bytes"), "value"),
        (ReasonCodes(codes="abc"), "codes"),
        (PolicyDecision(reason_codes=Ref()), "reason_codes"),
    ],
)
def test_invalid_values_raise_encoding_error(msg: Message, field: str) -> None:
    with pytest.raises(EncodingError) as ei:
        wire.encode(msg)
    assert ei.value.code == UcfErrorCode.ENCODING_ERROR
    assert ei.value.data["field"] == field
    assert ei.value.data["schema_id"] == type(msg).schema_name()


def test_default_like_value_of_wrong_type_is_not_dropped() -> None:
    with pytest.raises(EncodingError):
        wire.encode(Ref(uri=0))


def test_lone_surrogate_is_invalid_utf8() -> None:
    with pytest.raises(EncodingError):
        wire.encode(Ref(uri="\ud800"))


def test_map_fields_refuse_to_encode() -> None:
    with pytest.raises(EncodingError) as ei:
        wire.encode(WithMap(tags={"a": "b"}))
    assert ei.value.data["field"] == "tags"


# ------------------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------------------


def test_decode_roundtrip_of_nested_message() -> None:
    m = PolicyDecision(decision=3, reason_codes=ReasonCodes(codes=["x", "y"]))
    assert wire.decode(wire.encode(m), PolicyDecision) == m


def test_decode_accepts_unpacked_repeated_numerics() -> None:
    data = bytes.fromhex("0801" "08ac02")
    assert wire.decode(data, Packed).nums == [1, 300]


def test_decode_negative_and_open_enum() -> None:
    m = wire.decode(bytes.fromhex("28" "ffffffffffffffffff01"), SynapseParams)
    assert m.e_rev_mv == -1
    # 7 is not a declared member: kept as a plain int
    p = wire.decode(bytes.fromhex("1a0107"), Packed)
    assert p.colors == [7]
    assert not isinstance(p.colors[0], Color)


def test_decode_optional_scalar_distinguishes_zero_from_unset() -> None:
    assert wire.decode(bytes.fromhex("1000"), Compartment).parent_comp_id == 0
    assert wire.decode(b"", Compartment).parent_comp_id is None


@pytest.mark.parametrize(
    "target, hexdata, reason",
    [
        (Ref, "0a05616263", "truncated"),
        (SynapseParams, "08", "truncated varint"),
        (SynapseParams, "08ffffffffffffffffff7f", "64 bits"),
        (Ref, "0002", "field number 0"),
        (Ref, "0d00000000", "wire type"),
        (Packed, "3002", "bool"),
        (Ref, "0a02c328", "UTF-8"),
        (Ref, "0a0161" "00", "field number 0"),
    ],
)
def test_decode_rejects_malformed_input(target: type, hexdata: str, reason: str) -> None:
    with pytest.raises(DecodingError) as ei:
        wire.decode(bytes.fromhex(hexdata), target)
    assert reason in ei.value.message
    assert ei.value.code == UcfErrorCode.DECODING_ERROR
    assert isinstance(ei.value, EncodingError)


def test_unknown_fields_rejected_in_strict_mode_and_skipped_otherwise() -> None:
    data = bytes.fromhex("0a0161" "f80101")  # uri="a", then field 31 varint
    with pytest.raises(DecodingError):
        wire.decode(data, Ref)
    assert wire.decode(data, Ref, strict=False) == Ref(uri="a")


def test_decode_rejects_non_bytes() -> None:
    with pytest.raises(TypeError):
        wire.decode("0a00", Ref)  # type: ignore[arg-type]
