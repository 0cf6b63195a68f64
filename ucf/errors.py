"""
UCF — ucf.errors
----------------

Error taxonomy for the canonicalization / digest core.

Design goals
------------
- One root `UcfError` with a machine-stable `code` and JSON-safe `data`.
- One concrete subclass per failure class of the core:
  schema/policy authoring, encoding, decoding, digest input cap, chain
  integrity, fixture drift, fixture loading.
- Nothing in this core is transient: every error is `retryable=False`.
  The same input always reproduces the same error.
- Context carried on the error (schema id/version, field, fixture name) is
  enough to diagnose without re-running.

This module uses only stdlib.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional

# ---------------------------------------------------------------------------
# Error codes & classes
# ---------------------------------------------------------------------------


class Severity(IntEnum):
    """Optional severity hint for operators/CI output."""

    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class UcfErrorCode(str, Enum):
    # Generic
    CONFIG = "UCF/CONFIG"

    # Schema authoring
    SCHEMA_POLICY_MISMATCH = "UCF/SCHEMA_POLICY_MISMATCH"
    UNKNOWN_SCHEMA = "UCF/UNKNOWN_SCHEMA"

    # Wire
    ENCODING_ERROR = "UCF/ENCODING_ERROR"
    DECODING_ERROR = "UCF/DECODING_ERROR"

    # Digests / chains
    DIGEST_INPUT_TOO_LARGE = "UCF/DIGEST_INPUT_TOO_LARGE"
    CHAIN_BROKEN = "UCF/CHAIN_BROKEN"

    # Fixtures
    FIXTURE_MISMATCH = "UCF/FIXTURE_MISMATCH"
    FIXTURE_LOAD = "UCF/FIXTURE_LOAD"


@dataclass(eq=False)
class UcfError(Exception):
    """
    Root error for the UCF core.

    Attributes
    ----------
    code: str
        Machine-stable error code (see UcfErrorCode).
    message: str
        Human hint suitable for logs and CI output.
    data: dict
        Machine data (schema ids, field names, hex digests). JSON-serializable.
    severity: Severity
        Severity hint (default ERROR).
    retryable: bool
        Always False in this core; kept for interop with callers that check it.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.ERROR
    retryable: bool = False

    def __post_init__(self) -> None:
        super().__init__(f"{self.code}: {self.message}")

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe shape suitable for logs and reports."""
        return {
            "code": str(getattr(self.code, "value", self.code)),
            "message": self.message,
            "data": _coerce_json(self.data),
            "severity": int(self.severity),
            "retryable": self.retryable,
        }

    def __str__(self) -> str:  # pragma: no cover - human formatting
        code = getattr(self.code, "value", self.code)
        parts = [f"{code}: {self.message}"]
        if self.data:
            preview = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
            parts.append(f"[{preview}]")
        return " ".join(parts)


# Concrete subclasses (thin wrappers for ergonomics)
class ConfigError(UcfError):
    def __init__(self, message="invalid configuration", **data: Any) -> None:
        super().__init__(
            code=UcfErrorCode.CONFIG,
            message=message,
            data=_jsonmap(data),
        )


class SchemaPolicyMismatch(UcfError):
    """A normalization policy references something the message type lacks."""

    def __init__(
        self,
        schema_id: str,
        field: str,
        reason: str = "field does not exist",
        **data: Any,
    ) -> None:
        super().__init__(
            code=UcfErrorCode.SCHEMA_POLICY_MISMATCH,
            message=f"policy/schema mismatch on {schema_id}.{field}: {reason}",
            data=_jsonmap({"schema_id": schema_id, "field": field, "reason": reason, **data}),
            severity=Severity.CRITICAL,
        )


class UnknownSchema(UcfError):
    def __init__(self, domain: str, schema_id: str, schema_version: int) -> None:
        super().__init__(
            code=UcfErrorCode.UNKNOWN_SCHEMA,
            message=f"no schema registered for ({domain}, {schema_id}, {schema_version})",
            data={
                "domain": domain,
                "schema_id": schema_id,
                "schema_version": schema_version,
            },
        )


class EncodingError(UcfError):
    def __init__(self, message="encoding failed", **data: Any) -> None:
        super().__init__(
            code=UcfErrorCode.ENCODING_ERROR, message=message, data=_jsonmap(data)
        )


class DecodingError(EncodingError):
    def __init__(self, message="decoding failed", **data: Any) -> None:
        super().__init__(message=message, **data)
        self.code = UcfErrorCode.DECODING_ERROR


class DigestInputTooLarge(UcfError):
    def __init__(self, size: int, limit: int, **data: Any) -> None:
        super().__init__(
            code=UcfErrorCode.DIGEST_INPUT_TOO_LARGE,
            message=f"digest input of {size} bytes exceeds cap of {limit}",
            data=_jsonmap({"size": size, "limit": limit, **data}),
        )


class ChainBroken(UcfError):
    """Stored previous-digest does not match the digest of the prior instance."""

    def __init__(
        self,
        expected: bytes,
        got: bytes,
        *,
        schema_id: str = "",
        index: Optional[int] = None,
        **data: Any,
    ) -> None:
        where = f" at index {index}" if index is not None else ""
        super().__init__(
            code=UcfErrorCode.CHAIN_BROKEN,
            message=f"chain broken{where}: previous digest does not match prior instance",
            data=_jsonmap(
                {"expected": expected, "got": got, "schema_id": schema_id, "index": index, **data}
            ),
            severity=Severity.CRITICAL,
        )


class FixtureMismatch(UcfError):
    def __init__(
        self,
        name: str,
        what: str,
        expected: Any = None,
        actual: Any = None,
        **data: Any,
    ) -> None:
        super().__init__(
            code=UcfErrorCode.FIXTURE_MISMATCH,
            message=f"fixture {name!r}: {what} mismatch",
            data=_jsonmap(
                {"fixture": name, "what": what, "expected": expected, "actual": actual, **data}
            ),
            severity=Severity.CRITICAL,
        )


class FixtureLoadError(UcfError):
    def __init__(self, message="could not load fixtures", **data: Any) -> None:
        super().__init__(
            code=UcfErrorCode.FIXTURE_LOAD, message=message, data=_jsonmap(data)
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    # Keep JSON primitives; hex-encode bytes; recurse into containers.
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Mapping):
        return {str(k): _coerce_json(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_coerce_json(x) for x in v]
    return str(v)


def _preview(v: Any, limit: int = 96) -> str:
    s = str(_coerce_json(v))
    return s if len(s) <= limit else s[:limit] + "…"


__all__ = [
    "Severity",
    "UcfErrorCode",
    "UcfError",
    "ConfigError",
    "SchemaPolicyMismatch",
    "UnknownSchema",
    "EncodingError",
    "DecodingError",
    "DigestInputTooLarge",
    "ChainBroken",
    "FixtureMismatch",
    "FixtureLoadError",
]
