"""
Fixture verifier.

For each golden fixture the stored bytes are pushed back through the live
pipeline:

    lookup schema → digest32(stored bytes) == stored digest
                  → decode → canonical_bytes(decoded) == stored bytes
                  → stored self-digest is zeroed

Every step that can fail turns into a Diagnostic on that fixture's result;
nothing stops at the first failure. Chain groups are then checked link by
link, and the static hygiene rules run over the registry as a whole.

Fixtures are independent, so verification fans out over a thread pool; each
task owns its decoded message and buffers.
"""

from __future__ import annotations

import contextvars
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Type

from ..digest.chain import check_link
from ..digest.engine import digest32, instance_digest
from ..encoding import wire
from ..encoding.canonical import canonical_bytes
from ..errors import (
    ChainBroken,
    DecodingError,
    DigestInputTooLarge,
    EncodingError,
    FixtureMismatch,
    SchemaPolicyMismatch,
    UnknownSchema,
)
from ..logging import get_logger, trace_scope
from ..schema.message import Kind, Message, enum_has_zero, iter_enum_types, iter_message_types
from ..schema.policy import read_path, validate_policy
from ..schema.registry import SchemaEntry, SchemaRegistry, default_registry
from ..utils.bytes import first_difference, to_hex
from ..utils.hash import ZERO32
from .loader import load_fixtures
from .model import Diagnostic, Fixture, FixtureResult, VerificationReport

log = get_logger("fixtures.verifier")


# ---------------------------------------------------------------------------
# Single fixture
# ---------------------------------------------------------------------------


def verify_fixture(
    fixture: Fixture,
    registry: Optional[SchemaRegistry] = None,
    *,
    max_input_bytes: Optional[int] = None,
) -> FixtureResult:
    """Re-derive one fixture's bytes and digest; never raises for data problems."""
    registry = registry or default_registry()
    name = fixture.name
    result = FixtureResult(name=name, schema=f"{fixture.schema_id}@{fixture.schema_version}")

    def fail(err, rule: str) -> None:
        result.diagnostics.append(Diagnostic.from_error(err, subject=name, rule=rule))

    try:
        entry: Optional[SchemaEntry] = registry.get(*fixture.key)
    except UnknownSchema as err:
        fail(err, "unknown_schema")
        entry = None

    # the stored digest must match the stored bytes, with or without a schema
    try:
        computed = digest32(
            fixture.domain,
            fixture.schema_id,
            fixture.schema_version,
            fixture.canonical,
            max_input_bytes=max_input_bytes,
        )
    except DigestInputTooLarge as err:
        fail(err, "digest")
        computed = None
    if computed is not None:
        result.digest = to_hex(computed)
        if computed != fixture.digest:
            fail(FixtureMismatch(name, "digest", expected=fixture.digest, actual=computed), "digest")

    if entry is None:
        return result

    try:
        message = wire.decode(fixture.canonical, entry.message_type)
    except DecodingError as err:
        fail(err, "decode")
        return result

    policy = entry.policy
    if policy.self_digest is not None:
        stored = read_path(message, policy.self_digest)
        if stored is not None and bytes(stored) != ZERO32:
            fail(
                FixtureMismatch(name, "self-digest", expected=ZERO32, actual=bytes(stored)),
                "self_digest",
            )

    try:
        recomputed = canonical_bytes(message, policy, schema_id=entry.schema_id)
    except (EncodingError, SchemaPolicyMismatch) as err:
        fail(err, "canonical")
        return result
    if recomputed != fixture.canonical:
        fail(
            FixtureMismatch(
                name,
                "canonical bytes",
                expected=fixture.canonical,
                actual=recomputed,
                offset=first_difference(fixture.canonical, recomputed),
            ),
            "canonical",
        )
    return result


# ---------------------------------------------------------------------------
# Chains
# ---------------------------------------------------------------------------


def _decode_member(fixture: Fixture, entry: SchemaEntry) -> Optional[Message]:
    try:
        return wire.decode(fixture.canonical, entry.message_type)
    except DecodingError:
        return None


def verify_chains(fixtures: Iterable[Fixture], registry: SchemaRegistry) -> List[Diagnostic]:
    """
    Check every chain group in `seq` order. The member with seq 1 must link to
    ZERO32. A group without seq 1 is a `chain` diagnostic unless one of its
    manifest rows marks it as a `segment` of a longer history; the links
    between the members present are checked either way.
    """
    groups: Dict[str, List[Fixture]] = defaultdict(list)
    for f in fixtures:
        if f.chain is not None:
            groups[f.chain].append(f)

    out: List[Diagnostic] = []
    for chain in sorted(groups):
        members = sorted(groups[chain], key=lambda f: f.seq or 0)
        keys = {f.key for f in members}
        if len(keys) != 1:
            out.append(Diagnostic(chain, "chain", "chain members use different schemas"))
            continue
        seqs = [f.seq for f in members]
        if len(set(seqs)) != len(seqs):
            out.append(Diagnostic(chain, "chain", "duplicate seq in chain", actual=str(seqs)))
            continue
        if members[0].key not in registry:
            continue  # reported per fixture as unknown_schema
        if members[0].seq != 1 and not any(f.segment for f in members):
            out.append(
                Diagnostic(
                    chain,
                    "chain",
                    "chain has no genesis member (seq 1) and is not marked as a segment",
                    expected="1",
                    actual=str(members[0].seq),
                )
            )
        entry = registry.get(*members[0].key)
        decoded = [_decode_member(f, entry) for f in members]
        if any(m is None for m in decoded):
            out.append(Diagnostic(chain, "chain", "chain has undecodable members; links not checked"))
            continue

        head: Optional[bytes] = ZERO32 if members[0].seq == 1 else None
        try:
            for f, m in zip(members, decoded):
                if head is not None:
                    try:
                        check_link(head, m, entry, index=f.seq)
                    except ChainBroken as err:
                        out.append(
                            Diagnostic.from_error(err, subject=f"{chain}#{f.seq}", rule="chain_link")
                        )
                head = instance_digest(m, entry)
        except SchemaPolicyMismatch as err:
            out.append(Diagnostic.from_error(err, subject=chain, rule="chain"))
        else:
            log.debug("chain checked", extra={"chain": chain, "length": len(members)})
    return out


# ---------------------------------------------------------------------------
# Hygiene
# ---------------------------------------------------------------------------


def check_hygiene(registry: SchemaRegistry, fixtures: Sequence[Fixture] = ()) -> List[Diagnostic]:
    """
    Static checks over the registered schemas:

    - missing_fixture: a schema with no fixture
    - enum_zero: a reachable enum without a zero member
    - map_field: a MAP-kind field anywhere in a schema's type graph
    - policy: a normalization policy whose paths do not fit its type
    - ambiguous_prefix: two schemas whose digest prefixes collide
    """
    out: List[Diagnostic] = []
    covered = {f.key for f in fixtures}
    enums_seen: Set[type] = set()
    maps_seen: Set[Tuple[Type[Message], str]] = set()

    for entry in registry.entries():
        label = entry.label()
        if entry.key not in covered:
            out.append(Diagnostic(label, "missing_fixture", "schema has no golden fixture"))

        for enum_type in iter_enum_types(entry.message_type):
            if enum_type in enums_seen:
                continue
            enums_seen.add(enum_type)
            if not enum_has_zero(enum_type):
                out.append(
                    Diagnostic(label, "enum_zero", f"enum {enum_type.__name__} has no zero value")
                )

        for cls in iter_message_types(entry.message_type):
            for spec in cls.descriptors():
                if spec.kind is Kind.MAP and (cls, spec.name) not in maps_seen:
                    maps_seen.add((cls, spec.name))
                    out.append(
                        Diagnostic(label, "map_field", f"{cls.__name__}.{spec.name} is a map field")
                    )

        try:
            validate_policy(entry.message_type, entry.policy, entry.schema_id)
        except SchemaPolicyMismatch as err:
            out.append(Diagnostic.from_error(err, subject=label, rule="policy"))

    for a, b in registry.prefix_collisions():
        out.append(
            Diagnostic(
                a.label(),
                "ambiguous_prefix",
                f"digest prefix is ambiguous with {b.label()}",
                expected=to_hex(a.prefix),
                actual=to_hex(b.prefix),
            )
        )
    return out


# ---------------------------------------------------------------------------
# Whole set
# ---------------------------------------------------------------------------


def verify_all(
    fixtures: Sequence[Fixture],
    registry: Optional[SchemaRegistry] = None,
    *,
    workers: Optional[int] = None,
    hygiene: bool = True,
    load_diagnostics: Iterable[Diagnostic] = (),
    max_input_bytes: Optional[int] = None,
) -> VerificationReport:
    """Verify every fixture (concurrently, no fail-fast) and aggregate one report."""
    registry = registry or default_registry()
    report = VerificationReport(loading=list(load_diagnostics))

    with trace_scope(component="verifier"):
        log.info("verifying fixtures", extra={"count": len(fixtures), "schemas": len(registry)})

        counts: Dict[str, int] = defaultdict(int)
        for f in fixtures:
            counts[f.name] += 1
        dupes = sorted(n for n, c in counts.items() if c > 1)

        with ThreadPoolExecutor(max_workers=max(1, int(workers or 1))) as tp:
            # worker threads do not inherit the logging context; hand each task a copy
            futs = [
                tp.submit(
                    contextvars.copy_context().run,
                    verify_fixture,
                    f,
                    registry,
                    max_input_bytes=max_input_bytes,
                )
                for f in fixtures
            ]
            for fut in as_completed(futs):
                report.results.append(fut.result())
        report.results.sort(key=lambda r: r.name)

        for r in report.results:
            if not r.ok:
                log.warning(
                    "fixture failed",
                    extra={
                        "fixture": r.name,
                        "schema": r.schema,
                        "rules": sorted({d.rule for d in r.diagnostics}),
                    },
                )

        report.chains = verify_chains(fixtures, registry)
        if hygiene:
            report.hygiene = check_hygiene(registry, fixtures)
            report.hygiene.extend(
                Diagnostic(n, "duplicate_name", f"{counts[n]} fixtures share this name") for n in dupes
            )

        log.info("verification complete", extra=report.summary())
    return report


def verify_dir(
    directory: Path,
    registry: Optional[SchemaRegistry] = None,
    *,
    workers: Optional[int] = None,
    hygiene: bool = True,
    max_input_bytes: Optional[int] = None,
) -> VerificationReport:
    """Load `directory` and verify it; only a missing/invalid manifest raises."""
    loaded = load_fixtures(Path(directory), workers=workers)
    return verify_all(
        loaded.fixtures,
        registry,
        workers=workers,
        hygiene=hygiene,
        load_diagnostics=loaded.diagnostics,
        max_input_bytes=max_input_bytes,
    )


__all__ = [
    "verify_fixture",
    "verify_chains",
    "check_hygiene",
    "verify_all",
    "verify_dir",
]
