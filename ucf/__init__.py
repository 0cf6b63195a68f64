"""
UCF canonical core.

Deterministic canonical bytes and domain-separated BLAKE3 digests for the
`ucf.v1` protocol messages, plus the golden-fixture verification harness.

Only re-exports the version here to keep import-time side effects near zero.
"""

from __future__ import annotations

from .version import __version__


def get_version() -> str:
    """Return the version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
