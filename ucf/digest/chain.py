"""
Chain checks.

A chain is a sequence of same-schema messages where each instance's
previous-digest field holds the digest of the prior instance. Nothing new is
computed for the link itself: the stored value is compared against the
independently known digest of the prior instance, and a mismatch is a
rejection (ChainBroken), never repaired.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..errors import ChainBroken, SchemaPolicyMismatch
from ..schema.message import Message
from ..schema.policy import read_path
from ..schema.registry import SchemaEntry
from ..utils.hash import ZERO32
from .engine import instance_digest


def _prev_path(entry: SchemaEntry) -> str:
    if entry.policy.prev_digest is None:
        raise SchemaPolicyMismatch(entry.schema_id, "<prev_digest>", "schema declares no previous-digest field")
    return entry.policy.prev_digest


def prev_digest(message: Message, entry: SchemaEntry) -> bytes:
    """Stored previous-digest of `message` (b"" when the field is unset)."""
    value = read_path(message, _prev_path(entry))
    return bytes(value) if value is not None else b""


def check_link(
    prior_digest: bytes, current: Message, entry: SchemaEntry, *, index: Optional[int] = None
) -> None:
    got = prev_digest(current, entry)
    if got != prior_digest:
        raise ChainBroken(prior_digest, got, schema_id=entry.schema_id, index=index)


def check_pair(prior: Message, current: Message, entry: SchemaEntry, *, index: Optional[int] = None) -> None:
    """Raise ChainBroken unless `current` links to `prior`."""
    check_link(instance_digest(prior, entry), current, entry, index=index)


def verify_chain(
    messages: Iterable[Message], entry: SchemaEntry, *, genesis: Optional[bytes] = ZERO32
) -> bytes:
    """
    Walk `messages` in order and return the digest of the last one.
    `genesis` is the previous-digest the first message must carry; None skips
    that check (a chain segment starting mid-history).
    """
    _prev_path(entry)
    head = genesis
    for i, m in enumerate(messages):
        if head is not None:
            check_link(head, m, entry, index=i)
        head = instance_digest(m, entry)
    return head if head is not None else ZERO32


class ChainTracker:
    """Accepts instances one at a time, rejecting any that do not extend the head."""

    def __init__(self, entry: SchemaEntry, head: bytes = ZERO32) -> None:
        _prev_path(entry)
        self.entry = entry
        self._head = bytes(head)
        self._length = 0

    @property
    def head(self) -> bytes:
        return self._head

    @property
    def length(self) -> int:
        return self._length

    def accept(self, message: Message) -> bytes:
        """Append `message` if it links to the current head; return its digest."""
        check_link(self._head, message, self.entry, index=self._length)
        digest = instance_digest(message, self.entry)
        self._head = digest
        self._length += 1
        return digest


__all__ = [
    "prev_digest",
    "check_link",
    "check_pair",
    "verify_chain",
    "ChainTracker",
]
