"""
UCF — ucf.logging
-----------------

stdlib logging for the fixture harness and the CLI.

Every line carries the fields bound in the current context (`bind`,
`trace_scope`) plus whatever the call site passes as `extra`. Two renderers
exist: one JSON object per line for pipes and CI, and a `|`-separated text line
(colored on a TTY) for humans.

    from ucf import logging as ulog

    ulog.configure(level="INFO")
    log = ulog.get_logger(__name__)
    with ulog.trace_scope(component="verifier"):
        log.info("verifying fixtures", extra={"count": 20})

Only the I/O edge logs (fixture loading, verification, writing, the CLI). The
normalizer, codec and digest engine stay silent.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Dict, Iterator, Optional, Tuple, Union

ENV_FORMAT = "UCF_LOG_FORMAT"
ENV_LEVEL = "UCF_LOG_LEVEL"

ROOT = "ucf"

# Context fields rendered up front by the text formatter, in this order.
CONTEXT_KEYS = ("trace_id", "component", "fixture", "schema_id", "domain")

_fields: ContextVar[Dict[str, Any]] = ContextVar("ucf_log_fields", default={})


def context() -> Dict[str, Any]:
    """Snapshot of the fields bound in the current context."""
    return dict(_fields.get())


def bind(**fields: Any) -> None:
    _fields.set({**_fields.get(), **{k: _jsonable(v) for k, v in fields.items()}})


def unbind(*keys: str) -> None:
    _fields.set({k: v for k, v in _fields.get().items() if k not in keys})


def clear_context() -> None:
    _fields.set({})


@contextmanager
def trace_scope(trace_id: Optional[str] = None, **fields: Any) -> Iterator[str]:
    """Bind a trace id (a fresh 12-hex one by default) until the block exits."""
    token = _fields.set(dict(_fields.get()))
    tid = trace_id or uuid.uuid4().hex[:12]
    try:
        bind(trace_id=tid, **fields)
        yield tid
    finally:
        _fields.reset(token)


def _jsonable(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str, list, dict)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Path):
        return str(v)
    if is_dataclass(v) and not isinstance(v, type):
        return asdict(v)
    return str(v)


# Attributes every LogRecord has; anything else on a record came from `extra`.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        k: _jsonable(v)
        for k, v in vars(record).items()
        if k not in _STANDARD_ATTRS and not k.startswith("_")
    }


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds")


def _traceback(record: logging.LogRecord) -> str:
    return "".join(traceback.format_exception(*record.exc_info)).rstrip()  # type: ignore[misc]


class JSONFormatter(logging.Formatter):
    """One JSON object per line; bound context wins over `extra` on key clashes."""

    def format(self, record: logging.LogRecord) -> str:
        out: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "pid": os.getpid(),
            "tid": threading.get_ident(),
            **context(),
        }
        for k, v in record_extras(record).items():
            out.setdefault(k, v)
        if record.exc_info:
            out["err"] = _traceback(record)
        return json.dumps(out, default=str, separators=(",", ":"))


_COLORS = {
    logging.DEBUG: "90",
    logging.INFO: "32",
    logging.WARNING: "33",
    logging.ERROR: "31",
    logging.CRITICAL: "1;35",
}


def _paint(code: str, text: str) -> str:
    return f"\x1b[{code}m{text}\x1b[0m"


def _is_tty(stream: IO[str]) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty()) and "NO_COLOR" not in os.environ
    except ValueError:  # closed stream
        return False


class TextFormatter(logging.Formatter):
    """
    `ts | LEVEL | logger | k=v ... | message`, e.g.

        2026-01-05T12:34:56.789+00:00 | WARNING | ucf.fixtures.verifier | fixture=sep_event_chain_2 | digest mismatch
    """

    def __init__(self, stream: Optional[IO[str]] = None, *, color: Optional[bool] = None):
        super().__init__()
        self.color = _is_tty(stream or sys.stderr) if color is None else color

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        pairs = [f"{k}={ctx[k]}" for k in CONTEXT_KEYS if ctx.get(k) is not None]
        pairs += [f"{k}={v}" for k, v in record_extras(record).items() if k not in ctx]

        ts, level, name = _timestamp(record), f"{record.levelname:<5}", record.name
        if self.color:
            ts = _paint("90", ts)
            level = _paint(_COLORS.get(record.levelno, "37"), level)
            name = _paint("36", name)

        parts = [ts, level, name]
        if pairs:
            parts.append(" ".join(pairs))
        parts.append(record.getMessage())
        line = " | ".join(parts)
        if record.exc_info:
            line += "\n" + _traceback(record)
        return line


def _level(level: Union[str, int, None]) -> int:
    if level is None:
        level = os.environ.get(ENV_LEVEL) or "INFO"
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _wants_json(flag: Optional[bool], stream: IO[str]) -> bool:
    if flag is not None:
        return flag
    env = (os.environ.get(ENV_FORMAT) or "").strip().lower()
    if env in ("json", "text"):
        return env == "json"
    return not _is_tty(stream)


def configure(
    *,
    json: Optional[bool] = None,
    level: Union[str, int, None] = None,
    stream: Optional[IO[str]] = None,
    propagate_existing: bool = False,
) -> None:
    """
    Install a single console handler on the `ucf` logger.

    `json=None` reads UCF_LOG_FORMAT (json|text) and otherwise picks text on a
    TTY and JSON when piped. `level=None` reads UCF_LOG_LEVEL, default INFO.
    Existing handlers are replaced unless `propagate_existing` is set.
    """
    stream = stream or sys.stderr
    lvl = _level(level)
    logger = logging.getLogger(ROOT)
    logger.setLevel(lvl)
    if not propagate_existing:
        logger.handlers.clear()

    handler = logging.StreamHandler(stream)
    handler.setLevel(lvl)
    handler.setFormatter(JSONFormatter() if _wants_json(json, stream) else TextFormatter(stream))
    logger.addHandler(handler)


def configure_from_config(cfg: Any) -> None:
    """Apply the `log` section of a `ucf.config.Config`."""
    fmt = (cfg.log.format or "").lower()
    configure(json={"json": True, "text": False}.get(fmt), level=cfg.log.level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    if not name or name == ROOT:
        return logging.getLogger(ROOT)
    return logging.getLogger(name if name.startswith(ROOT + ".") else f"{ROOT}.{name}")


class ContextAdapter(logging.LoggerAdapter):
    """Adds constant fields to every call; call-site `extra` overrides them."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> Tuple[Any, Dict[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_fields(logger: logging.Logger, **fields: Any) -> ContextAdapter:
    return ContextAdapter(logger, {k: _jsonable(v) for k, v in fields.items()})


__all__ = [
    "CONTEXT_KEYS",
    "ContextAdapter",
    "JSONFormatter",
    "TextFormatter",
    "bind",
    "clear_context",
    "configure",
    "configure_from_config",
    "context",
    "get_logger",
    "record_extras",
    "trace_scope",
    "unbind",
    "with_fields",
]
