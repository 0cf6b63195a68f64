"""
Shared pytest fixtures:
- The built-in schema registry
- The packaged golden vectors directory, and a writable copy of it per test
- Logging context reset between tests
"""
from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from ucf import logging as ulog
from ucf.config import DEFAULT_FIXTURES_DIR
from ucf.schema.registry import SchemaRegistry, default_registry


@pytest.fixture(scope="session")
def registry() -> SchemaRegistry:
    return default_registry()


@pytest.fixture(scope="session")
def vectors_dir() -> Path:
    """Read-only golden vectors shipped with the package."""
    assert (DEFAULT_FIXTURES_DIR / "manifest.json").exists(), DEFAULT_FIXTURES_DIR
    return DEFAULT_FIXTURES_DIR


@pytest.fixture
def vectors_copy(vectors_dir: Path, tmp_path: Path) -> Path:
    """A scratch copy of the golden vectors that a test may tamper with."""
    dst = tmp_path / "vectors"
    shutil.copytree(vectors_dir, dst)
    return dst


@pytest.fixture(autouse=True)
def _clean_log_context():
    ulog.clear_context()
    yield
    ulog.clear_context()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Drop every UCF_* variable so config tests start from defaults."""
    for name in (
        "UCF_CONFIG",
        "UCF_FIXTURES_DIR",
        "UCF_VERIFY_WORKERS",
        "UCF_MAX_DIGEST_INPUT",
        "UCF_LOG_LEVEL",
        "UCF_LOG_FORMAT",
        "UCF_VERSION",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
