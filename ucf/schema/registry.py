"""
UCF | ucf.schema.registry

A small registry mapping (domain, schema_id, schema_version) → SchemaEntry.

- Each entry binds one message type to its normalization policy and to the
  one domain its digests are computed under.
- A (schema_id, schema_version) pair is permanently bound to one domain;
  registering it under a second domain is rejected.
- `default_registry()` lazily builds the registry of all built-in `ucf.v1`
  schemas.

Domain separation concatenates domain || schema_id || decimal(version)
without delimiters, so `prefix_collisions()` reports any pair of entries
where one prefix equals or starts another; the fixture verifier surfaces
these as hygiene violations.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Type

from ..errors import SchemaPolicyMismatch, UnknownSchema
from .message import Message
from .policy import EMPTY_POLICY, NormalizationPolicy, validate_policy

_SCHEMA_ID_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[A-Za-z0-9_]+)+$")

Key = Tuple[str, str, int]


@dataclass(frozen=True)
class SchemaEntry:
    domain: str
    schema_id: str
    schema_version: int
    message_type: Type[Message]
    policy: NormalizationPolicy = field(default=EMPTY_POLICY)

    def __post_init__(self) -> None:
        if not self.domain or not self.domain.isascii() or not self.domain.isprintable():
            raise ValueError(f"domain must be a non-empty printable ASCII string: {self.domain!r}")
        if not _SCHEMA_ID_RE.match(self.schema_id):
            raise ValueError(f"schema_id must be a dotted namespace: {self.schema_id!r}")
        if isinstance(self.schema_version, bool) or not isinstance(self.schema_version, int):
            raise ValueError("schema_version must be an int")
        if self.schema_version < 1:
            raise ValueError(f"schema_version must be positive, got {self.schema_version}")

    @property
    def key(self) -> Key:
        return (self.domain, self.schema_id, self.schema_version)

    @property
    def prefix(self) -> bytes:
        """domain || schema_id || decimal(version), as fed to the hash."""
        return (
            self.domain.encode("utf-8")
            + self.schema_id.encode("utf-8")
            + str(self.schema_version).encode("ascii")
        )

    def label(self) -> str:
        return f"{self.domain}/{self.schema_id}@{self.schema_version}"


class SchemaRegistry:
    """
    Registry of schema entries. With `strict` (the default) every policy is
    validated on registration; a non-strict registry accepts broken policies
    so the hygiene checks can report them instead.
    """

    def __init__(self, entries: Iterable[SchemaEntry] = (), *, strict: bool = True) -> None:
        self.strict = strict
        self._by_key: Dict[Key, SchemaEntry] = {}
        self._by_type: Dict[Type[Message], SchemaEntry] = {}
        self._domain_of: Dict[Tuple[str, int], str] = {}
        for e in entries:
            self.register(e)

    def register(self, entry: SchemaEntry) -> SchemaEntry:
        """Register `entry`. Re-registering an identical entry is a no-op."""
        existing = self._by_key.get(entry.key)
        if existing is not None:
            if existing == entry:
                return existing
            raise ValueError(f"{entry.label()} is already registered with a different definition")
        bound = self._domain_of.get((entry.schema_id, entry.schema_version))
        if bound is not None and bound != entry.domain:
            raise ValueError(
                f"{entry.schema_id}@{entry.schema_version} is bound to domain {bound!r}, "
                f"not {entry.domain!r}"
            )
        other = self._by_type.get(entry.message_type)
        if other is not None and other.schema_id != entry.schema_id:
            raise ValueError(
                f"{entry.message_type.__name__} already registered as {other.schema_id}"
            )
        if self.strict:
            validate_policy(entry.message_type, entry.policy, entry.schema_id)
        self._by_key[entry.key] = entry
        self._domain_of[(entry.schema_id, entry.schema_version)] = entry.domain
        # latest version wins for type lookups
        if other is None or other.schema_version < entry.schema_version:
            self._by_type[entry.message_type] = entry
        return entry

    def get(self, domain: str, schema_id: str, schema_version: int) -> SchemaEntry:
        try:
            return self._by_key[(domain, schema_id, schema_version)]
        except KeyError:
            raise UnknownSchema(domain, schema_id, schema_version) from None

    def for_type(self, message_type: Type[Message]) -> SchemaEntry:
        try:
            return self._by_type[message_type]
        except KeyError:
            raise SchemaPolicyMismatch(
                message_type.schema_name(), "<type>", "message type is not registered"
            ) from None

    def entries(self) -> List[SchemaEntry]:
        return [self._by_key[k] for k in sorted(self._by_key)]

    def prefix_collisions(self) -> List[Tuple[SchemaEntry, SchemaEntry]]:
        """Pairs (a, b) where a.prefix equals or is a proper prefix of b.prefix."""
        ordered = sorted(self._by_key.values(), key=lambda e: e.prefix)
        out: List[Tuple[SchemaEntry, SchemaEntry]] = []
        for i, a in enumerate(ordered):
            for b in ordered[i + 1 :]:
                if not b.prefix.startswith(a.prefix):
                    break
                out.append((a, b))
        return out

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._by_key)

    def __iter__(self) -> Iterator[SchemaEntry]:
        return iter(self.entries())


_DEFAULT: Optional[SchemaRegistry] = None
_DEFAULT_LOCK = threading.Lock()


def default_registry() -> SchemaRegistry:
    """Registry of every built-in `ucf.v1` schema (built once, read-only after)."""
    global _DEFAULT
    if _DEFAULT is None:
        with _DEFAULT_LOCK:
            if _DEFAULT is None:
                # Local import: ucf.v1 imports this module.
                from ..v1 import SCHEMAS

                _DEFAULT = SchemaRegistry(SCHEMAS)
    return _DEFAULT


__all__ = ["SchemaEntry", "SchemaRegistry", "default_registry"]
