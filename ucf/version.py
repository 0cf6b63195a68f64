"""
Package version for the UCF core.

Resolution order:
    1) UCF_VERSION (taken verbatim)
    2) `git describe` of the checkout this file lives in, mapped to PEP 440
    3) DEFAULT_VERSION
"""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_VERSION = "0.1.0"
ENV_VERSION = "UCF_VERSION"

# <tag>-<distance>-g<sha>[-dirty], or a bare sha when no tag is reachable
_DESCRIBE = re.compile(
    r"^(?:(?P<tag>.+)-(?P<distance>\d+)-g(?P<sha>[0-9a-f]+)|(?P<bare>[0-9a-f]{7,}))(?P<dirty>-dirty)?$"
)
_RELEASE = re.compile(r"^v?(\d+\.\d+\.\d+)$")


@dataclass(frozen=True)
class Describe:
    tag: Optional[str] = None
    distance: int = 0
    sha: Optional[str] = None
    dirty: bool = False

    @classmethod
    def parse(cls, text: str) -> "Describe":
        m = _DESCRIBE.match(text.strip())
        if m is None:
            return cls()
        if m["bare"]:
            return cls(sha=m["bare"], dirty=bool(m["dirty"]))
        return cls(tag=m["tag"], distance=int(m["distance"]), sha=m["sha"], dirty=bool(m["dirty"]))

    def pep440(self) -> Optional[str]:
        """
        v1.2.3 exactly, clean        -> 1.2.3
        v1.2.3 plus 4 commits        -> 1.2.3.post4+gabc1234
        untagged (or non-release tag) -> 0.0.0.post0+gabc1234
        """
        local = ".".join(p for p in (f"g{self.sha[:7]}" if self.sha else "", "dirty" if self.dirty else "") if p)
        suffix = f"+{local}" if local else ""
        m = _RELEASE.match(self.tag or "")
        if m:
            if self.distance == 0 and not self.dirty:
                return m.group(1)
            return f"{m.group(1)}.post{self.distance}{suffix}"
        if self.sha:
            return f"0.0.0.post0{suffix}"
        return None


def _git_describe() -> Optional[str]:
    root = next((p for p in Path(__file__).resolve().parents if (p / ".git").exists()), None)
    if root is None:
        return None
    try:
        out = subprocess.run(
            ["git", "describe", "--tags", "--long", "--dirty", "--always"],
            cwd=root,
            capture_output=True,
            text=True,
            timeout=2,
            check=True,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    return out.stdout.strip() or None


def resolve_version() -> str:
    env = (os.environ.get(ENV_VERSION) or "").strip()
    if env:
        return env
    desc = _git_describe()
    if desc:
        return Describe.parse(desc).pep440() or DEFAULT_VERSION
    return DEFAULT_VERSION


__version__ = resolve_version()
