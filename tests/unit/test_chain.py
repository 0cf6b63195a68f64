from __future__ import annotations

import pytest

from ucf.digest.chain import ChainTracker, check_link, check_pair, prev_digest, verify_chain
from ucf.digest.engine import instance_digest, seal
from ucf.errors import ChainBroken, SchemaPolicyMismatch, UcfErrorCode
from ucf.fixtures.samples import SAMPLES_BY_NAME
from ucf.utils.hash import ZERO32
from ucf.v1 import Digest32, PvgsReceipt, ReasonCodes, SepEvent


@pytest.fixture
def entry(registry):
    return registry.for_type(SepEvent)


@pytest.fixture
def events():
    return [SAMPLES_BY_NAME[f"sep_event_chain_{i}"].build() for i in (1, 2, 3)]


def test_sample_chain_verifies(entry, events) -> None:
    head = verify_chain(events, entry)
    assert head == instance_digest(events[-1], entry)
    assert head.hex() == "f011d45f85a0b597e1e41fd2f588d67c9026c5f48898833f834c11fed47e6e3c"


def test_links_hold_pairwise(entry, events) -> None:
    check_pair(events[0], events[1], entry)
    check_pair(events[1], events[2], entry)
    assert prev_digest(events[1], entry) == instance_digest(events[0], entry)


def test_sealing_does_not_change_links(entry, events) -> None:
    sealed = [seal(e, entry) for e in events]
    assert verify_chain(sealed, entry) == verify_chain(events, entry)


def test_reordered_chain_is_broken(entry, events) -> None:
    with pytest.raises(ChainBroken) as ei:
        verify_chain([events[0], events[2], events[1]], entry)
    err = ei.value
    assert err.code == UcfErrorCode.CHAIN_BROKEN
    assert err.data["index"] == 1
    assert err.data["schema_id"] == "ucf.v1.SepEvent"
    assert err.data["expected"] == instance_digest(events[0], entry).hex()
    assert err.data["got"] == instance_digest(events[1], entry).hex()


def test_tampered_prior_breaks_the_next_link(entry, events) -> None:
    tampered = events[0].copy()
    tampered.reason_codes = ReasonCodes(codes=["init", "injected"])
    with pytest.raises(ChainBroken):
        check_pair(tampered, events[1], entry, index=1)


def test_genesis_must_be_zero_unless_skipped(entry, events) -> None:
    with pytest.raises(ChainBroken) as ei:
        verify_chain(events[1:], entry)
    assert ei.value.data["index"] == 0
    assert verify_chain(events[1:], entry, genesis=None) == verify_chain(events, entry)


def test_unset_previous_digest_never_links(entry) -> None:
    assert prev_digest(SepEvent(), entry) == b""
    with pytest.raises(ChainBroken):
        check_link(ZERO32, SepEvent(), entry)
    check_link(ZERO32, SepEvent(prev_event_digest=Digest32(value=ZERO32)), entry)


def test_empty_chain_returns_genesis(entry) -> None:
    assert verify_chain([], entry) == ZERO32


def test_tracker_accepts_in_order_and_rejects_forks(entry, events) -> None:
    tracker = ChainTracker(entry)
    for e in events[:2]:
        tracker.accept(e)
    assert tracker.length == 2
    assert tracker.head == instance_digest(events[1], entry)

    with pytest.raises(ChainBroken) as ei:
        tracker.accept(events[1])
    assert ei.value.data["index"] == 2
    # a rejected instance leaves the head unchanged
    assert tracker.length == 2
    assert tracker.accept(events[2]) == tracker.head
    assert tracker.length == 3


def test_schema_without_previous_digest_cannot_chain(registry) -> None:
    entry = registry.for_type(PvgsReceipt)
    with pytest.raises(SchemaPolicyMismatch):
        ChainTracker(entry)
    with pytest.raises(SchemaPolicyMismatch):
        verify_chain([PvgsReceipt()], entry)
