"""
ucf - command-line interface for the UCF canonical core.

Commands:
  ucf verify [DIR]        Verify golden fixtures (bytes, digests, chains, hygiene)
  ucf generate DIR        Write the built-in sample fixtures (append-only)
  ucf digest HEX          Digest canonical bytes under a domain/schema/version
  ucf decode HEX          Decode canonical bytes and print the message as JSON
  ucf schemas             List registered schemas, domains and policies
  ucf version             Print the package version

Global options:
  --config PATH           TOML/JSON config file (env UCF_CONFIG)
  --log-level TEXT        Log level (env UCF_LOG_LEVEL)
  --log-format TEXT       json | text (env UCF_LOG_FORMAT)

Examples:
  ucf verify
  ucf verify ./ucf/testvectors --json --workers 8
  ucf generate /tmp/vectors --only policy_decision
  ucf digest --domain ucf-core --schema ucf.v1.PVGSReceipt --version 1 0801...
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .. import config as ucf_config
from .. import logging as ulog
from ..digest.engine import digest32, instance_digest
from ..encoding import wire
from ..errors import (
    ConfigError,
    DecodingError,
    DigestInputTooLarge,
    FixtureLoadError,
    FixtureMismatch,
    UnknownSchema,
)
from ..fixtures.model import VerificationReport
from ..fixtures.verifier import verify_dir
from ..fixtures.writer import generate_samples
from ..schema.registry import SchemaEntry, default_registry
from ..utils.bytes import from_hex, to_hex
from ..version import __version__

app = typer.Typer(
    name="ucf",
    help="UCF canonical encoding, digests and golden-fixture verification",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.config: Optional[ucf_config.Config] = None


_ctx = GlobalContext()


def _cfg() -> ucf_config.Config:
    if _ctx.config is None:
        _ctx.config = ucf_config.load()
    return _ctx.config


def _fail(msg: str, code: int = 1) -> None:
    typer.echo(f"Error: {msg}", err=True)
    raise typer.Exit(code)


def _console() -> Console:
    # resolved per call so CliRunner's swapped stdout is honored
    return Console(highlight=False, soft_wrap=True)


@app.callback()
def main_callback(
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path to a TOML or JSON config file", envvar="UCF_CONFIG"
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="json or text"),
) -> None:
    """
    UCF canonical core CLI.

    Configuration precedence (highest first): command-line flags, UCF_*
    environment variables, the --config file, built-in defaults.
    """
    log: dict = {}
    if log_level:
        log["level"] = log_level
    if log_format:
        log["format"] = log_format.lower()
    try:
        _ctx.config = ucf_config.load(config, **({"log": log} if log else {}))
    except ConfigError as e:
        _fail(str(e), code=2)
    ulog.configure_from_config(_ctx.config)


# ----------------------------------------------------------------------------
# verify
# ----------------------------------------------------------------------------


def _print_report(report: VerificationReport) -> None:
    console = _console()
    t = Table(title="Fixtures", box=box.SIMPLE)
    t.add_column("Fixture")
    t.add_column("Schema")
    t.add_column("Status")
    t.add_column("Digest")
    for r in report.results:
        status = "[green]ok[/green]" if r.ok else "[red]FAIL[/red]"
        digest = (r.digest or "")[:16]
        t.add_row(r.name, r.schema, status, digest)
    console.print(t)

    failures = report.failures()
    if failures:
        f = Table(title="Diagnostics", box=box.SIMPLE)
        f.add_column("Rule")
        f.add_column("Subject")
        f.add_column("Message")
        for d in failures:
            f.add_row(d.rule, d.subject, d.message)
        console.print(f)

    s = report.summary()
    verdict = "[green]PASS[/green]" if s["ok"] else "[red]FAIL[/red]"
    console.print(
        f"{verdict} {s['passed']}/{s['fixtures']} fixtures, "
        f"{s['chain_errors']} chain, {s['hygiene_errors']} hygiene, {s['load_errors']} load error(s)"
    )


@app.command()
def verify(
    directory: Optional[Path] = typer.Argument(None, help="Fixture directory (default from config)"),
    json_out: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Verification threads"),
    hygiene: bool = typer.Option(True, "--hygiene/--no-hygiene", help="Run static schema checks"),
) -> None:
    """Verify golden fixtures against the live schemas. Exit 1 on any failure."""
    cfg = _cfg()
    target = directory or cfg.fixtures.directory
    try:
        report = verify_dir(
            target,
            workers=workers or cfg.fixtures.workers,
            hygiene=hygiene,
            max_input_bytes=cfg.digest.max_input_bytes,
        )
    except FixtureLoadError as e:
        if json_out:
            typer.echo(json.dumps({"error": e.to_dict()}, indent=2, sort_keys=True))
            raise typer.Exit(1)
        _fail(str(e))
        return

    if json_out:
        typer.echo(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    else:
        _print_report(report)
    if not report.ok:
        raise typer.Exit(1)


# ----------------------------------------------------------------------------
# generate
# ----------------------------------------------------------------------------


@app.command()
def generate(
    directory: Path = typer.Argument(..., help="Directory to write fixtures into"),
    only: Optional[List[str]] = typer.Option(None, "--only", help="Sample case name (repeatable)"),
) -> None:
    """Write the built-in sample fixtures. Existing fixtures must match exactly."""
    cfg = _cfg()
    try:
        written = generate_samples(directory, only=only, max_input_bytes=cfg.digest.max_input_bytes)
    except ValueError as e:
        _fail(str(e), code=2)
        return
    except FixtureMismatch as e:
        _fail(str(e))
        return
    for name, changed in written:
        typer.echo(f"{'wrote' if changed else 'unchanged'} {name}")


# ----------------------------------------------------------------------------
# digest / decode
# ----------------------------------------------------------------------------


def _parse_hex_arg(data: str) -> bytes:
    try:
        return from_hex(data)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command()
def digest(
    data: str = typer.Argument(..., help="Canonical bytes as hex"),
    domain: str = typer.Option(..., "--domain", help="Digest domain, e.g. ucf-core"),
    schema: str = typer.Option(..., "--schema", help="Schema id, e.g. ucf.v1.PVGSReceipt"),
    version: int = typer.Option(1, "--version", min=1, help="Schema version"),
) -> None:
    """Print digest32(domain || schema || version || bytes) as hex."""
    canonical = _parse_hex_arg(data)
    try:
        d = digest32(domain, schema, version, canonical, max_input_bytes=_cfg().digest.max_input_bytes)
    except DigestInputTooLarge as e:
        _fail(str(e))
        return
    typer.echo(to_hex(d))


def _find_entry(schema: str, version: int) -> SchemaEntry:
    for entry in default_registry().entries():
        if entry.schema_id == schema and entry.schema_version == version:
            return entry
    raise UnknownSchema("*", schema, version)


@app.command()
def decode(
    data: str = typer.Argument(..., help="Canonical bytes as hex"),
    schema: str = typer.Option(..., "--schema", help="Schema id, e.g. ucf.v1.SepEvent"),
    version: int = typer.Option(1, "--version", min=1, help="Schema version"),
) -> None:
    """Decode canonical bytes and print the message and its digest as JSON."""
    raw = _parse_hex_arg(data)
    try:
        entry = _find_entry(schema, version)
        message = wire.decode(raw, entry.message_type)
    except (UnknownSchema, DecodingError) as e:
        _fail(str(e))
        return
    out = {
        "schema": entry.label(),
        "digest": to_hex(instance_digest(message, entry)),
        "message": message.to_obj(),
    }
    typer.echo(json.dumps(out, indent=2, sort_keys=True))


# ----------------------------------------------------------------------------
# schemas / version
# ----------------------------------------------------------------------------


@app.command()
def schemas(json_out: bool = typer.Option(False, "--json", help="Print JSON")) -> None:
    """List registered schemas with their domains and normalization policies."""
    entries = default_registry().entries()
    if json_out:
        rows = [
            {
                "domain": e.domain,
                "schema_id": e.schema_id,
                "schema_version": e.schema_version,
                "message_type": e.message_type.__name__,
                "policy": e.policy.to_obj(),
            }
            for e in entries
        ]
        typer.echo(json.dumps(rows, indent=2, sort_keys=True))
        return

    t = Table(title="Schemas", box=box.SIMPLE)
    t.add_column("Schema")
    t.add_column("Domain")
    t.add_column("Set fields")
    t.add_column("Self digest")
    t.add_column("Prev digest")
    for e in entries:
        t.add_row(
            f"{e.schema_id}@{e.schema_version}",
            e.domain,
            ", ".join(sf.path for sf in e.policy.set_fields) or "-",
            e.policy.self_digest or "-",
            e.policy.prev_digest or "-",
        )
    _console().print(t)


@app.command()
def version() -> None:
    """Print the package version."""
    typer.echo(__version__)


def main() -> None:
    """Entry point for the ucf CLI."""
    app()


if __name__ == "__main__":
    main()
