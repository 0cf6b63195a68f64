"""
Fixture and report types.

- Fixture: one golden canonical-bytes/digest pair as loaded from disk
- ManifestEntry: one row of `manifest.json`
- Diagnostic: a single finding (fixture drift, chain break, hygiene rule, load problem)
- FixtureResult / VerificationReport: what `verify_all` hands back

Reports never raise on their own; `raise_for_failures()` turns a failing
report into one FixtureMismatch carrying every diagnostic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..errors import FixtureLoadError, FixtureMismatch, UcfError
from ..utils.bytes import to_hex

FORMATS = ("hex", "bin")


def is_fixture_name(name: Any) -> bool:
    """A plain file stem: non-empty, no path separators, not hidden or relative."""
    if not isinstance(name, str) or not name or name.startswith("."):
        return False
    return not any(c in name for c in "/\\\0")


@dataclass(frozen=True)
class Fixture:
    name: str
    domain: str
    schema_id: str
    schema_version: int
    canonical: bytes
    digest: bytes
    chain: Optional[str] = None
    seq: Optional[int] = None
    # the chain group deliberately starts after seq 1
    segment: bool = False
    source: Optional[Path] = None

    @property
    def key(self) -> Tuple[str, str, int]:
        return (self.domain, self.schema_id, self.schema_version)

    def label(self) -> str:
        return f"{self.name} ({self.schema_id}@{self.schema_version})"


@dataclass(frozen=True)
class ManifestEntry:
    name: str
    domain: str
    schema_id: str
    schema_version: int
    format: str = "hex"
    chain: Optional[str] = None
    seq: Optional[int] = None
    segment: bool = False

    @property
    def data_file(self) -> str:
        return f"{self.name}.{self.format}"

    @property
    def digest_file(self) -> str:
        return f"{self.name}.digest"

    @classmethod
    def from_obj(cls, obj: Any) -> "ManifestEntry":
        if not isinstance(obj, dict):
            raise FixtureLoadError("manifest entry must be an object", got=type(obj).__name__)
        try:
            name = obj["name"]
            domain = obj["domain"]
            schema_id = obj["schema_id"]
            version = obj["schema_version"]
        except KeyError as e:
            raise FixtureLoadError(f"manifest entry is missing {e.args[0]!r}", entry=obj) from None
        fmt = obj.get("format", "hex")
        chain = obj.get("chain")
        seq = obj.get("seq")
        segment = obj.get("segment", False)
        if not is_fixture_name(name):
            raise FixtureLoadError("fixture name must be a plain file stem", name=name)
        if not isinstance(domain, str) or not isinstance(schema_id, str):
            raise FixtureLoadError("domain and schema_id must be strings", fixture=name)
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise FixtureLoadError("schema_version must be a positive int", fixture=name, got=version)
        if fmt not in FORMATS:
            raise FixtureLoadError("format must be 'hex' or 'bin'", fixture=name, got=fmt)
        if (chain is None) != (seq is None):
            raise FixtureLoadError("chain and seq must be given together", fixture=name)
        if chain is not None and (
            not isinstance(chain, str) or isinstance(seq, bool) or not isinstance(seq, int)
        ):
            raise FixtureLoadError("chain must be a string and seq an int", fixture=name)
        if not isinstance(segment, bool) or (segment and chain is None):
            raise FixtureLoadError("segment must be a bool and needs a chain", fixture=name, got=segment)
        return cls(name, domain, schema_id, version, fmt, chain, seq, segment)

    def to_obj(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "domain": self.domain,
            "schema_id": self.schema_id,
            "schema_version": self.schema_version,
            "format": self.format,
        }
        if self.chain is not None:
            out["chain"] = self.chain
            out["seq"] = self.seq
        if self.segment:
            out["segment"] = True
        return out


@dataclass(frozen=True)
class Diagnostic:
    subject: str
    rule: str
    message: str
    expected: Optional[str] = None
    actual: Optional[str] = None
    code: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_error(cls, err: UcfError, *, subject: str, rule: str) -> "Diagnostic":
        data = dict(err.data)
        expected = data.pop("expected", None)
        actual = data.pop("actual", data.pop("got", None))
        return cls(
            subject=subject,
            rule=rule,
            message=err.message,
            expected=_text(expected),
            actual=_text(actual),
            code=str(getattr(err.code, "value", err.code)),
            data=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"subject": self.subject, "rule": self.rule, "message": self.message}
        if self.expected is not None:
            out["expected"] = self.expected
        if self.actual is not None:
            out["actual"] = self.actual
        if self.code is not None:
            out["code"] = self.code
        if self.data:
            out["data"] = self.data
        return out

    def __str__(self) -> str:
        s = f"[{self.rule}] {self.subject}: {self.message}"
        if self.expected is not None or self.actual is not None:
            s += f" (expected {self.expected}, got {self.actual})"
        return s


def _text(v: Any) -> Optional[str]:
    if v is None:
        return None
    if isinstance(v, (bytes, bytearray, memoryview)):
        return to_hex(v)
    return str(v)


@dataclass
class FixtureResult:
    name: str
    schema: str
    digest: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "schema": self.schema,
            "ok": self.ok,
            "digest": self.digest,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass
class VerificationReport:
    results: List[FixtureResult] = field(default_factory=list)
    chains: List[Diagnostic] = field(default_factory=list)
    hygiene: List[Diagnostic] = field(default_factory=list)
    loading: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures()

    def failures(self) -> List[Diagnostic]:
        out: List[Diagnostic] = list(self.loading)
        for r in self.results:
            out.extend(r.diagnostics)
        out.extend(self.chains)
        out.extend(self.hygiene)
        return out

    def summary(self) -> Dict[str, Any]:
        failed = sum(1 for r in self.results if not r.ok)
        return {
            "ok": self.ok,
            "fixtures": len(self.results),
            "passed": len(self.results) - failed,
            "failed": failed,
            "chain_errors": len(self.chains),
            "hygiene_errors": len(self.hygiene),
            "load_errors": len(self.loading),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary(),
            "results": [r.to_dict() for r in self.results],
            "chains": [d.to_dict() for d in self.chains],
            "hygiene": [d.to_dict() for d in self.hygiene],
            "loading": [d.to_dict() for d in self.loading],
        }

    def raise_for_failures(self) -> None:
        failures = self.failures()
        if not failures:
            return
        raise FixtureMismatch(
            "*",
            "verification",
            count=len(failures),
            diagnostics=[d.to_dict() for d in failures],
        )


__all__ = [
    "FORMATS",
    "is_fixture_name",
    "Fixture",
    "ManifestEntry",
    "Diagnostic",
    "FixtureResult",
    "VerificationReport",
]
