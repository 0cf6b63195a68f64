"""
Normalizer tests: set-like sorting (scalar and keyed), innermost-first
ordering, untouched ordered fields, self-digest zeroing, and policy errors.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, List

import pytest

from ucf.encoding.canonical import canonical_bytes
from ucf.errors import SchemaPolicyMismatch
from ucf.schema.message import Kind, Message, pb
from ucf.schema.normalize import normalize
from ucf.schema.policy import NormalizationPolicy, SetField, validate_policy
from ucf.utils.hash import ZERO32
from ucf.v1 import (
    CanonicalIntent,
    ChannelParams,
    ChannelParamsSetPayload,
    CompletenessReport,
    Compartment,
    ConnEdge,
    ConnectivityGraphPayload,
    Digest32,
    LabelKv,
    MorphNeuron,
    MorphologySetPayload,
    QueryParams,
    ReasonCodes,
    Ref,
    SepEvent,
)


def _policy(registry, cls):
    return registry.for_type(cls).policy


def test_reason_codes_order_invariance(registry) -> None:
    p = _policy(registry, ReasonCodes)
    a = canonical_bytes(ReasonCodes(codes=["b", "a", "c"]), p)
    b = canonical_bytes(ReasonCodes(codes=["c", "b", "a"]), p)
    assert a == b
    assert normalize(ReasonCodes(codes=["c", "b", "a"]), p).codes == ["a", "b", "c"]


def test_duplicates_are_kept(registry) -> None:
    p = _policy(registry, ReasonCodes)
    assert normalize(ReasonCodes(codes=["x", "a", "x"]), p).codes == ["a", "x", "x"]


def test_strings_sort_by_utf8_bytes(registry) -> None:
    # UTF-16 code units would put U+FF21 after U+10000
    p = _policy(registry, ReasonCodes)
    out = normalize(ReasonCodes(codes=["\U00010000", "Ａ", "Z"]), p).codes
    assert out == ["Z", "Ａ", "\U00010000"]


def test_input_is_never_mutated(registry) -> None:
    p = _policy(registry, SepEvent)
    ev = SepEvent(reason_codes=ReasonCodes(codes=["b", "a"]), event_digest=Digest32(value=b"\x01" * 32))
    normalize(ev, p)
    assert ev.reason_codes.codes == ["b", "a"]
    assert ev.event_digest.value == b"\x01" * 32


def test_keyed_sort_with_tuple_key(registry) -> None:
    p = _policy(registry, ChannelParamsSetPayload)
    msg = ChannelParamsSetPayload(
        params=[
            ChannelParams(neuron_id=2, comp_id=0),
            ChannelParams(neuron_id=1, comp_id=1),
            ChannelParams(neuron_id=1, comp_id=0),
        ]
    )
    out = normalize(msg, p)
    assert [(c.neuron_id, c.comp_id) for c in out.params] == [(1, 0), (1, 1), (2, 0)]


def test_ties_on_key_fall_back_to_element_bytes(registry) -> None:
    p = _policy(registry, ChannelParamsSetPayload)
    hi = ChannelParams(neuron_id=1, comp_id=0, leak_g=9)
    lo = ChannelParams(neuron_id=1, comp_id=0, leak_g=3)
    assert normalize(ChannelParamsSetPayload(params=[hi, lo]), p).params == [lo, hi]
    assert normalize(ChannelParamsSetPayload(params=[lo, hi]), p).params == [lo, hi]


def test_five_part_edge_key(registry) -> None:
    p = _policy(registry, ConnectivityGraphPayload)
    edges = [
        ConnEdge(pre=2, post=1, post_compartment=0, syn_param_id=2, delay_steps=1),
        ConnEdge(pre=1, post=2, post_compartment=0, syn_param_id=1, delay_steps=2),
        ConnEdge(pre=1, post=2, post_compartment=0, syn_param_id=1, delay_steps=1),
    ]
    out = normalize(ConnectivityGraphPayload(edges=edges), p)
    assert [(e.pre, e.delay_steps) for e in out.edges] == [(1, 1), (1, 2), (2, 1)]


def test_nested_sets_are_sorted_inside_every_parent(registry) -> None:
    p = _policy(registry, MorphologySetPayload)
    msg = MorphologySetPayload(
        neurons=[
            MorphNeuron(
                neuron_id=2,
                compartments=[Compartment(comp_id=3), Compartment(comp_id=1)],
                labels=[LabelKv(k="z", v="1"), LabelKv(k="a", v="2")],
            ),
            MorphNeuron(neuron_id=1, compartments=[Compartment(comp_id=5), Compartment(comp_id=4)]),
        ]
    )
    out = normalize(msg, p)
    assert [n.neuron_id for n in out.neurons] == [1, 2]
    assert [c.comp_id for c in out.neurons[0].compartments] == [4, 5]
    assert [c.comp_id for c in out.neurons[1].compartments] == [1, 3]
    assert [kv.k for kv in out.neurons[1].labels] == ["a", "z"]


def test_keyed_message_sort_by_string_key(registry) -> None:
    p = _policy(registry, CompletenessReport)
    msg = CompletenessReport(missing_nodes=[Ref(uri="ucf://b"), Ref(uri="ucf://a")])
    assert [r.uri for r in normalize(msg, p).missing_nodes] == ["ucf://a", "ucf://b"]


def test_completeness_sorts_nested_codes_and_keeps_edge_order(registry) -> None:
    p = _policy(registry, CompletenessReport)
    msg = CompletenessReport(
        missing_edges=["evt-2->evt-4", "evt-1->evt-3"],
        reason_codes=ReasonCodes(codes=["missing-node", "edge-gap"]),
    )
    out = normalize(msg, p)
    assert out.missing_edges == ["evt-2->evt-4", "evt-1->evt-3"]
    assert out.reason_codes.codes == ["edge-gap", "missing-node"]
    swapped = CompletenessReport(missing_edges=list(reversed(msg.missing_edges)))
    assert canonical_bytes(swapped, p) != canonical_bytes(CompletenessReport(missing_edges=msg.missing_edges), p)


def test_ordered_fields_keep_authored_order(registry) -> None:
    p = _policy(registry, CanonicalIntent)
    msg = CanonicalIntent(
        reason_codes=ReasonCodes(codes=["z", "a"]),
        query=QueryParams(selectors=["z", "a"]),
    )
    out = normalize(msg, p)
    assert out.reason_codes.codes == ["a", "z"]
    assert out.query.selectors == ["z", "a"]


def test_missing_intermediate_message_is_skipped(registry) -> None:
    p = _policy(registry, CanonicalIntent)
    assert normalize(CanonicalIntent(intent_id="x"), p).reason_codes is None


def test_self_digest_is_zeroed_and_created_when_absent(registry) -> None:
    p = _policy(registry, SepEvent)
    stale = SepEvent(event_digest=Digest32(value=b"\xff" * 32))
    assert normalize(stale, p).event_digest.value == ZERO32
    created = normalize(SepEvent(), p)
    assert created.event_digest == Digest32(value=ZERO32)
    kept = normalize(stale, p, zero_self_digest=False)
    assert kept.event_digest.value == b"\xff" * 32


# ------------------------------------------------------------------------------
# Policy validation
# ------------------------------------------------------------------------------


@dataclass
class Leaf(Message):
    SCHEMA_ID: ClassVar[str] = "test.Leaf"
    n: int = pb(1, Kind.UINT32)


@dataclass
class Holder(Message):
    SCHEMA_ID: ClassVar[str] = "test.Holder"
    name: str = pb(1, Kind.STRING)
    leaves: List[Leaf] = pb(2, Kind.MESSAGE, repeated=True, message=Leaf)
    tags: List[str] = pb(3, Kind.STRING, repeated=True)
    blob: bytes = pb(4, Kind.BYTES)


@pytest.mark.parametrize(
    "policy, field, reason",
    [
        (NormalizationPolicy(set_fields=(SetField("nope"),)), "nope", "has no field"),
        (NormalizationPolicy(set_fields=(SetField("name"),)), "name", "must be repeated"),
        (NormalizationPolicy(set_fields=(SetField("name.x"),)), "name.x", "not a message field"),
        (NormalizationPolicy(set_fields=(SetField("tags", key=("n",)),)), "tags", "message elements"),
        (NormalizationPolicy(set_fields=(SetField("leaves", key=("m",)),)), "leaves", "sort key"),
        (NormalizationPolicy(self_digest="name"), "name", "must be bytes"),
        (NormalizationPolicy(self_digest="leaves.n"), "leaves.n", "repeated"),
        (NormalizationPolicy(ordered_fields=("name",)), "name", "must be repeated"),
        (
            NormalizationPolicy(set_fields=(SetField("tags"),), ordered_fields=("tags",)),
            "tags",
            "both set-like and ordered",
        ),
    ],
)
def test_policy_mismatch(policy: NormalizationPolicy, field: str, reason: str) -> None:
    with pytest.raises(SchemaPolicyMismatch) as ei:
        validate_policy(Holder, policy)
    assert ei.value.data["field"] == field
    assert ei.value.data["schema_id"] == "test.Holder"
    assert reason in ei.value.data["reason"]
    with pytest.raises(SchemaPolicyMismatch):
        normalize(Holder(), policy)


def test_valid_custom_policy() -> None:
    policy = NormalizationPolicy(
        set_fields=(SetField("leaves", key=("n",)), SetField("tags")),
        self_digest="blob",
    )
    out = normalize(Holder(leaves=[Leaf(2), Leaf(1)], tags=["b", "a"], blob=b"x"), policy)
    assert [leaf.n for leaf in out.leaves] == [1, 2]
    assert out.tags == ["a", "b"]
    assert out.blob == ZERO32


def test_policy_rejects_non_32_byte_width() -> None:
    with pytest.raises(ValueError):
        NormalizationPolicy(digest_width=64)
