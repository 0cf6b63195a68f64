"""
Fixture writer.

Golden fixtures are append-only: once `<name>` exists, writing it again with
identical bytes is a no-op and writing different bytes is a FixtureMismatch.
A schema change that alters canonical bytes therefore needs a new fixture
name (and usually a new schema version), never an edited golden file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from ..digest.engine import digest32
from ..encoding.canonical import canonical_bytes
from ..errors import FixtureMismatch
from ..logging import get_logger
from ..schema.message import Message
from ..schema.registry import SchemaEntry, SchemaRegistry, default_registry
from ..utils.bytes import to_hex
from .loader import MANIFEST, read_manifest, write_manifest
from .model import FORMATS, ManifestEntry, is_fixture_name
from .samples import SAMPLE_CASES, SAMPLES_BY_NAME

log = get_logger("fixtures.writer")


def _check_existing(path: Path, content: bytes, name: str, what: str) -> bool:
    """True if `path` already holds `content`; raise if it holds anything else."""
    if not path.exists():
        return False
    current = path.read_bytes()
    if current != content:
        raise FixtureMismatch(
            name,
            what,
            expected=current,
            actual=content,
            path=str(path),
            reason="fixtures are append-only",
        )
    return True


def write_fixture(
    directory: Path,
    name: str,
    entry: SchemaEntry,
    message: Message,
    *,
    fmt: str = "hex",
    chain: Optional[str] = None,
    seq: Optional[int] = None,
    segment: bool = False,
    max_input_bytes: Optional[int] = None,
) -> bool:
    """
    Write `<name>.<fmt>` and `<name>.digest` for `message` and record it in the
    manifest. Returns False when the identical fixture was already present.
    """
    if not is_fixture_name(name):
        raise ValueError(f"fixture name must be a plain file stem, got {name!r}")
    if fmt not in FORMATS:
        raise ValueError(f"format must be one of {FORMATS}, got {fmt!r}")
    if segment and chain is None:
        raise ValueError("segment needs a chain")
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    canonical = canonical_bytes(message, entry.policy, schema_id=entry.schema_id)
    digest = digest32(
        entry.domain,
        entry.schema_id,
        entry.schema_version,
        canonical,
        max_input_bytes=max_input_bytes,
    )
    new = ManifestEntry(
        name=name,
        domain=entry.domain,
        schema_id=entry.schema_id,
        schema_version=entry.schema_version,
        format=fmt,
        chain=chain,
        seq=seq,
        segment=segment,
    )
    data = canonical if fmt == "bin" else (to_hex(canonical) + "\n").encode("ascii")
    digest_text = (to_hex(digest) + "\n").encode("ascii")

    entries: List[ManifestEntry] = read_manifest(directory) if (directory / MANIFEST).exists() else []
    known = {e.name: e for e in entries}
    old = known.get(name)
    if old is not None and old != new:
        raise FixtureMismatch(name, "manifest entry", expected=old.to_obj(), actual=new.to_obj())

    data_path = directory / new.data_file
    digest_path = directory / new.digest_file
    have_data = _check_existing(data_path, data, name, "canonical bytes")
    have_digest = _check_existing(digest_path, digest_text, name, "digest")
    if have_data and have_digest and old is not None:
        log.debug("fixture unchanged", extra={"fixture": name})
        return False

    if not have_data:
        data_path.write_bytes(data)
    if not have_digest:
        digest_path.write_bytes(digest_text)
    if old is None:
        write_manifest(directory, entries + [new])
    log.info(
        "wrote fixture",
        extra={
            "fixture": name,
            "schema_id": entry.schema_id,
            "domain": entry.domain,
            "digest": to_hex(digest),
            "size": len(canonical),
        },
    )
    return True


def generate_samples(
    directory: Path,
    registry: Optional[SchemaRegistry] = None,
    *,
    only: Optional[Iterable[str]] = None,
    max_input_bytes: Optional[int] = None,
) -> List[Tuple[str, bool]]:
    """Write the built-in sample cases; returns (name, written) pairs."""
    registry = registry or default_registry()
    if only is None:
        cases = SAMPLE_CASES
    else:
        names = sorted(set(only))
        unknown = [n for n in names if n not in SAMPLES_BY_NAME]
        if unknown:
            raise ValueError(f"unknown sample case(s): {', '.join(unknown)}")
        cases = [SAMPLES_BY_NAME[n] for n in names]

    out: List[Tuple[str, bool]] = []
    for case in cases:
        written = write_fixture(
            directory,
            case.name,
            case.entry(registry),
            case.build(),
            fmt=case.fmt,
            chain=case.chain,
            seq=case.seq,
            max_input_bytes=max_input_bytes,
        )
        out.append((case.name, written))
    return out


__all__ = ["write_fixture", "generate_samples"]
