"""
UCF configuration loader.

Layered config with clear precedence:
    1) Explicit overrides passed to `load()` (highest)
    2) Environment variables (UCF_*)
    3) Config file (TOML or JSON)
    4) Built-in defaults (lowest)

Only harness concerns live here: where the golden fixtures are, how many
workers the verifier fans out to, the optional digest input cap, and
logging. The normalizer/encoder/digest core takes its inputs as explicit
arguments and never reads configuration on its own.
"""

from __future__ import annotations

import json
import os
import sys
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError

# ------------------------------
# Defaults & helpers
# ------------------------------

DEFAULT_FIXTURES_DIR = Path(__file__).resolve().parent / "testvectors"
DEFAULT_WORKERS = 4
DEFAULT_LOG_LEVEL = "INFO"
_LOG_FORMATS = ("json", "text")


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    v = os.environ.get(name)
    if v is None or v == "":
        return default
    try:
        return int(v, 0)
    except ValueError as e:
        raise ConfigError(f"{name} must be int, got {v!r}", env=name) from e


def _env_path(name: str, default: Path) -> Path:
    v = os.environ.get(name)
    return _expand(v) if v else default


# ------------------------------
# Typed configuration model
# ------------------------------

@dataclass
class FixtureConfig:
    directory: Path = DEFAULT_FIXTURES_DIR
    workers: int = DEFAULT_WORKERS


@dataclass
class DigestConfig:
    # None: digesting is total over any input length
    max_input_bytes: Optional[int] = None


@dataclass
class LogConfig:
    level: str = DEFAULT_LOG_LEVEL
    format: Optional[str] = None  # "json" | "text" | None (auto)


@dataclass
class Config:
    fixtures: FixtureConfig = field(default_factory=FixtureConfig)
    digest: DigestConfig = field(default_factory=DigestConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def to_dict(self) -> Dict[str, Any]:
        def _normalize(obj: Any) -> Any:
            if isinstance(obj, Path):
                return str(obj)
            if isinstance(obj, dict):
                return {k: _normalize(v) for k, v in obj.items()}
            return obj

        return _normalize(asdict(self))


# ------------------------------
# File loader (TOML / JSON)
# ------------------------------

def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("config file not found", path=str(path))
    suffix = path.suffix.lower()
    with path.open("rb") as f:
        try:
            if suffix in {".toml", ".tml"}:
                return tomllib.load(f)
            if suffix == ".json":
                return json.load(f)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
            raise ConfigError(f"cannot parse config: {e}", path=str(path)) from e
    raise ConfigError(f"unsupported config format: {suffix}. Use .toml or .json", path=str(path))


def _merge_dict(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Nested dict merge: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)
        else:
            out[k] = v
    return out


# ------------------------------
# Main loader
# ------------------------------

def load(config_file: Optional[str | Path] = None, **overrides: Any) -> Config:
    """
    Load the harness configuration.

    Precedence: overrides > env > file > defaults.

    Parameters
    ----------
    config_file : str | Path | None
        Optional path to a TOML or JSON file with keys:
          fixtures: { directory, workers }
          digest:   { max_input_bytes }
          log:      { level, format }

    overrides : Any
        Keyword overrides, e.g. load(fixtures={"workers": 1})
    """
    base: Dict[str, Any] = asdict(Config())
    base["fixtures"]["directory"] = str(base["fixtures"]["directory"])

    if config_file:
        base = _merge_dict(base, _load_file(_expand(config_file)))

    if "UCF_FIXTURES_DIR" in os.environ:
        base["fixtures"]["directory"] = str(_env_path("UCF_FIXTURES_DIR", DEFAULT_FIXTURES_DIR))
    if "UCF_VERIFY_WORKERS" in os.environ:
        base["fixtures"]["workers"] = _env_int("UCF_VERIFY_WORKERS", DEFAULT_WORKERS)
    if "UCF_MAX_DIGEST_INPUT" in os.environ:
        base["digest"]["max_input_bytes"] = _env_int("UCF_MAX_DIGEST_INPUT", None)
    if "UCF_LOG_LEVEL" in os.environ:
        base["log"]["level"] = os.environ["UCF_LOG_LEVEL"].strip().upper()
    if "UCF_LOG_FORMAT" in os.environ:
        base["log"]["format"] = os.environ["UCF_LOG_FORMAT"].strip().lower() or None

    if overrides:
        base = _merge_dict(base, overrides)

    try:
        cfg = Config(
            fixtures=FixtureConfig(
                directory=_expand(base["fixtures"]["directory"]),
                workers=int(base["fixtures"]["workers"]),
            ),
            digest=DigestConfig(
                max_input_bytes=(
                    int(base["digest"]["max_input_bytes"])
                    if base["digest"].get("max_input_bytes") is not None
                    else None
                ),
            ),
            log=LogConfig(
                level=str(base["log"]["level"]).upper(),
                format=base["log"].get("format"),
            ),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"invalid configuration value: {e}") from e

    _validate_config(cfg)
    return cfg


def _validate_config(cfg: Config) -> None:
    if cfg.fixtures.workers < 1:
        raise ConfigError("fixtures.workers must be >= 1", workers=cfg.fixtures.workers)
    if cfg.digest.max_input_bytes is not None and cfg.digest.max_input_bytes < 1:
        raise ConfigError(
            "digest.max_input_bytes must be positive",
            max_input_bytes=cfg.digest.max_input_bytes,
        )
    if cfg.log.format is not None and cfg.log.format not in _LOG_FORMATS:
        raise ConfigError("log.format must be 'json' or 'text'", format=cfg.log.format)


# ------------------------------
# CLI helper
# ------------------------------

def main(argv: List[str] | None = None) -> int:
    """
    CLI usage:

        python -m ucf.config                      # load defaults/env; print JSON
        python -m ucf.config path/to/config.toml  # load file; print JSON
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    path = argv[0] if argv else None
    try:
        cfg = load(path)
    except ConfigError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
