"""
Fixture loader.

Reads `manifest.json` and every `<name>.hex|.bin` + `<name>.digest` pair it
lists. Files are independent and read-only, so they are read in parallel.

A missing or malformed manifest is fatal (FixtureLoadError); a problem with
an individual fixture's files becomes a Diagnostic so one bad pair does not
hide the rest.
"""

from __future__ import annotations

import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import FixtureLoadError
from ..logging import get_logger
from ..utils.bytes import is_canonical_hex
from ..utils.hash import DIGEST_SIZE
from .model import Diagnostic, Fixture, ManifestEntry

MANIFEST = "manifest.json"

log = get_logger("fixtures.loader")


@dataclass
class LoadResult:
    fixtures: List[Fixture] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def read_manifest(directory: Path) -> List[ManifestEntry]:
    path = Path(directory) / MANIFEST
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise FixtureLoadError("fixture manifest not found", path=str(path)) from None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FixtureLoadError(f"unreadable fixture manifest: {e}", path=str(path)) from e
    if not isinstance(raw, dict) or not isinstance(raw.get("fixtures"), list):
        raise FixtureLoadError("manifest must be an object with a 'fixtures' list", path=str(path))
    entries = [ManifestEntry.from_obj(o) for o in raw["fixtures"]]
    seen = set()
    for e in entries:
        if e.name in seen:
            raise FixtureLoadError("duplicate fixture name in manifest", path=str(path), fixture=e.name)
        seen.add(e.name)
    return entries


def write_manifest(directory: Path, entries: Sequence[ManifestEntry]) -> Path:
    path = Path(directory) / MANIFEST
    body = {"fixtures": [e.to_obj() for e in sorted(entries, key=lambda e: e.name)]}
    tmp = path.with_suffix(".json.tmp")
    tmp.write_text(json.dumps(body, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    tmp.replace(path)
    return path


def _read_text(path: Path, name: str) -> str:
    try:
        return path.read_text(encoding="ascii")
    except FileNotFoundError:
        raise FixtureLoadError("fixture file is missing", fixture=name, path=str(path)) from None
    except (OSError, UnicodeDecodeError) as e:
        raise FixtureLoadError(f"fixture file is unreadable: {e}", fixture=name, path=str(path)) from e


def _parse_hex(text: str, name: str, path: Path) -> bytes:
    if not is_canonical_hex(text):
        raise FixtureLoadError(
            "fixture hex must be lowercase and unprefixed, with at most one trailing newline",
            fixture=name,
            path=str(path),
        )
    return bytes.fromhex(text)


def load_fixture(directory: Path, entry: ManifestEntry) -> Fixture:
    directory = Path(directory)
    data_path = directory / entry.data_file
    if entry.format == "bin":
        try:
            canonical = data_path.read_bytes()
        except FileNotFoundError:
            raise FixtureLoadError(
                "fixture file is missing", fixture=entry.name, path=str(data_path)
            ) from None
        except OSError as e:
            raise FixtureLoadError(
                f"fixture file is unreadable: {e}", fixture=entry.name, path=str(data_path)
            ) from e
    else:
        canonical = _parse_hex(_read_text(data_path, entry.name), entry.name, data_path)

    digest_path = directory / entry.digest_file
    digest = _parse_hex(_read_text(digest_path, entry.name), entry.name, digest_path)
    if len(digest) != DIGEST_SIZE:
        raise FixtureLoadError(
            f"digest must be {DIGEST_SIZE} bytes, got {len(digest)}",
            fixture=entry.name,
            path=str(digest_path),
        )
    log.debug(
        "loaded fixture",
        extra={"fixture": entry.name, "schema_id": entry.schema_id, "size": len(canonical)},
    )
    return Fixture(
        name=entry.name,
        domain=entry.domain,
        schema_id=entry.schema_id,
        schema_version=entry.schema_version,
        canonical=canonical,
        digest=digest,
        chain=entry.chain,
        seq=entry.seq,
        segment=entry.segment,
        source=data_path,
    )


def load_fixtures(directory: Path, *, workers: Optional[int] = None) -> LoadResult:
    """Load every fixture listed in the manifest; per-fixture failures become diagnostics."""
    directory = Path(directory)
    entries = read_manifest(directory)
    result = LoadResult()
    log.debug("reading fixtures", extra={"path": str(directory), "count": len(entries)})
    with ThreadPoolExecutor(max_workers=max(1, int(workers or 1))) as tp:
        futs = {tp.submit(load_fixture, directory, e): e for e in entries}
        for fut in as_completed(futs):
            entry = futs[fut]
            try:
                result.fixtures.append(fut.result())
            except FixtureLoadError as err:
                result.diagnostics.append(Diagnostic.from_error(err, subject=entry.name, rule="load"))
    result.fixtures.sort(key=lambda f: f.name)
    result.diagnostics.sort(key=lambda d: d.subject)
    return result


__all__ = [
    "MANIFEST",
    "LoadResult",
    "read_manifest",
    "write_manifest",
    "load_fixture",
    "load_fixtures",
]
