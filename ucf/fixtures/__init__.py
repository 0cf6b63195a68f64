"""
UCF — ucf.fixtures
------------------

Golden fixture harness:

- model    : Fixture, ManifestEntry, Diagnostic, FixtureResult, VerificationReport
- loader   : manifest.json + <name>.hex|.bin + <name>.digest → Fixture
- verifier : verify_fixture / verify_all / verify_dir, chain and hygiene checks
- writer   : append-only write_fixture, generate_samples
- samples  : the built-in cases behind `ucf/testvectors/`
"""

from __future__ import annotations

from .loader import LoadResult, load_fixture, load_fixtures, read_manifest, write_manifest
from .model import Diagnostic, Fixture, FixtureResult, ManifestEntry, VerificationReport
from .verifier import check_hygiene, verify_all, verify_chains, verify_dir, verify_fixture
from .writer import generate_samples, write_fixture

__all__ = [
    "Fixture",
    "ManifestEntry",
    "Diagnostic",
    "FixtureResult",
    "VerificationReport",
    "LoadResult",
    "read_manifest",
    "write_manifest",
    "load_fixture",
    "load_fixtures",
    "verify_fixture",
    "verify_chains",
    "check_hygiene",
    "verify_all",
    "verify_dir",
    "write_fixture",
    "generate_samples",
]
