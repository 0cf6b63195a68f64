from __future__ import annotations

import pytest

from ucf.errors import SchemaPolicyMismatch, UnknownSchema
from ucf.schema.policy import NormalizationPolicy, SetField
from ucf.schema.registry import SchemaEntry, SchemaRegistry, default_registry
from ucf.v1 import SCHEMAS, PvgsReceipt, ReasonCodes, Ref, SepEvent, domains


def test_default_registry_has_every_builtin_schema(registry) -> None:
    assert len(registry) == len(SCHEMAS) == 15
    assert default_registry() is registry
    assert ("ucf-core", "ucf.v1.SepEvent", 1) in registry
    assert registry.get("ucf-core", "ucf.v1.PVGSReceipt", 1).message_type is PvgsReceipt
    assert registry.for_type(SepEvent).policy.prev_digest == "prev_event_digest.value"


def test_every_domain_is_known(registry) -> None:
    assert {e.domain for e in registry} <= domains.ALL_DOMAINS


def test_entries_are_sorted_by_key(registry) -> None:
    keys = [e.key for e in registry.entries()]
    assert keys == sorted(keys)
    assert [e.key for e in registry] == keys


def test_builtin_prefixes_do_not_collide(registry) -> None:
    assert registry.prefix_collisions() == []


def test_unknown_lookups(registry) -> None:
    with pytest.raises(UnknownSchema) as ei:
        registry.get("ucf-core", "ucf.v1.SepEvent", 2)
    assert ei.value.data == {"domain": "ucf-core", "schema_id": "ucf.v1.SepEvent", "schema_version": 2}
    with pytest.raises(UnknownSchema):
        registry.get("UCF:ASSET:MORPH", "ucf.v1.SepEvent", 1)
    with pytest.raises(SchemaPolicyMismatch):
        registry.for_type(Ref)


@pytest.mark.parametrize(
    "domain, schema_id, version",
    [
        ("", "ucf.v1.X", 1),
        ("domé", "ucf.v1.X", 1),
        ("d", "X", 1),
        ("d", "ucf.v1.", 1),
        ("d", "ucf.v1.X", 0),
        ("d", "ucf.v1.X", True),
    ],
)
def test_entry_validation(domain: str, schema_id: str, version) -> None:
    with pytest.raises(ValueError):
        SchemaEntry(domain, schema_id, version, Ref)


def test_entry_label_and_prefix() -> None:
    e = SchemaEntry("ucf-core", "ucf.v1.Ref", 3, Ref)
    assert e.label() == "ucf-core/ucf.v1.Ref@3"
    assert e.prefix == b"ucf-coreucf.v1.Ref3"


def test_register_identical_is_noop_but_conflicts_fail() -> None:
    reg = SchemaRegistry()
    e = SchemaEntry("ucf-core", "ucf.v1.Ref", 1, Ref)
    assert reg.register(e) is e
    assert reg.register(SchemaEntry("ucf-core", "ucf.v1.Ref", 1, Ref)) is e
    assert len(reg) == 1

    # same key, different definition
    with pytest.raises(ValueError, match="different definition"):
        reg.register(SchemaEntry("ucf-core", "ucf.v1.Ref", 1, ReasonCodes))
    with pytest.raises(ValueError, match="different definition"):
        reg.register(
            SchemaEntry(
                "ucf-core", "ucf.v1.Ref", 1, Ref, NormalizationPolicy(self_digest="label")
            )
        )
    # a schema version lives in exactly one domain
    with pytest.raises(ValueError, match="bound to domain"):
        reg.register(SchemaEntry("UCF:ASSET:MORPH", "ucf.v1.Ref", 1, Ref))
    # one type, one schema id
    with pytest.raises(ValueError, match="already registered as"):
        reg.register(SchemaEntry("ucf-core", "ucf.v1.Other", 1, Ref))


def test_later_version_wins_type_lookup() -> None:
    reg = SchemaRegistry(
        [
            SchemaEntry("ucf-core", "ucf.v1.Ref", 2, Ref),
            SchemaEntry("ucf-core", "ucf.v1.Ref", 1, Ref),
        ]
    )
    assert reg.for_type(Ref).schema_version == 2


def test_strict_registry_validates_policies() -> None:
    bad = SchemaEntry("ucf-core", "ucf.v1.Ref", 1, Ref, NormalizationPolicy(set_fields=(SetField("uri"),)))
    with pytest.raises(SchemaPolicyMismatch):
        SchemaRegistry([bad])
    assert len(SchemaRegistry([bad], strict=False)) == 1


def test_prefix_collisions_are_reported() -> None:
    # "ab" + "c.d" + "1" == "a" + "bc.d" + "1"
    a = SchemaEntry("ab", "c.d", 1, Ref)
    b = SchemaEntry("a", "bc.d", 1, ReasonCodes)
    # "x" + "y.z" + "1" is a proper prefix of "x" + "y.z" + "12"
    c = SchemaEntry("x", "y.z", 1, PvgsReceipt)
    d = SchemaEntry("x", "y.z", 12, PvgsReceipt)
    reg = SchemaRegistry([a, b, c, d])
    pairs = {frozenset((p.key, q.key)) for p, q in reg.prefix_collisions()}
    assert pairs == {frozenset((a.key, b.key)), frozenset((c.key, d.key))}
