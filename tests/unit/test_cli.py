from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ucf.cli.main import app
from ucf.version import __version__

runner = CliRunner()

PVGS_RECEIPT_DIGEST = "34fd2cbecef499094b6dff1846fd38fded9f2660e3cf88f0625423d0163fe656"


@pytest.fixture(autouse=True)
def _reset_cli_logging(clean_env):
    yield
    # the callback binds a handler to the runner's (now closed) stderr
    logging.getLogger("ucf").handlers.clear()


def invoke(*args: str):
    return runner.invoke(app, ["--log-level", "ERROR", *args])


def test_verify_shipped_vectors() -> None:
    result = invoke("verify")
    assert result.exit_code == 0, result.output
    assert "PASS 20/20 fixtures" in result.output


def test_verify_json(vectors_dir: Path) -> None:
    result = invoke("verify", str(vectors_dir), "--json", "--workers", "2")
    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report["summary"]["ok"] is True
    assert report["summary"]["fixtures"] == 20
    names = [r["name"] for r in report["results"]]
    assert names == sorted(names)


def test_verify_reports_failures(vectors_copy: Path) -> None:
    (vectors_copy / "pvgs_receipt.digest").write_text("00" * 32 + "\n")
    result = invoke("verify", str(vectors_copy))
    assert result.exit_code == 1
    assert "FAIL 19/20 fixtures" in result.output

    result = invoke("verify", str(vectors_copy), "--json")
    assert result.exit_code == 1
    report = json.loads(result.stdout)
    failed = [r for r in report["results"] if not r["ok"]]
    assert [r["name"] for r in failed] == ["pvgs_receipt"]
    assert failed[0]["diagnostics"][0]["rule"] == "digest"


def test_verify_without_hygiene(vectors_copy: Path) -> None:
    # drop one fixture from the manifest: only hygiene notices
    manifest = json.loads((vectors_copy / "manifest.json").read_text())
    manifest["fixtures"] = [f for f in manifest["fixtures"] if f["name"] != "pvgs_receipt"]
    (vectors_copy / "manifest.json").write_text(json.dumps(manifest))
    assert invoke("verify", str(vectors_copy)).exit_code == 1
    assert invoke("verify", str(vectors_copy), "--no-hygiene").exit_code == 0


def test_verify_missing_manifest(tmp_path: Path) -> None:
    result = invoke("verify", str(tmp_path))
    assert result.exit_code == 1
    assert "manifest not found" in result.output

    as_json = invoke("verify", str(tmp_path), "--json")
    assert as_json.exit_code == 1
    err = json.loads(as_json.stdout)["error"]
    assert err["code"] == "UCF/FIXTURE_LOAD"
    assert err["data"]["path"].endswith("manifest.json")


def test_verify_uses_configured_directory(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("UCF_FIXTURES_DIR", str(tmp_path))
    result = invoke("verify")
    assert result.exit_code == 1
    assert "manifest not found" in result.output


def test_generate_is_append_only(tmp_path: Path) -> None:
    out = tmp_path / "vectors"
    first = invoke("generate", str(out), "--only", "policy_decision")
    assert first.exit_code == 0, first.output
    assert first.stdout.strip() == "wrote policy_decision"

    again = invoke("generate", str(out), "--only", "policy_decision")
    assert again.stdout.strip() == "unchanged policy_decision"

    (out / "policy_decision.hex").write_text("0800\n")
    clash = invoke("generate", str(out), "--only", "policy_decision")
    assert clash.exit_code == 1
    assert "mismatch" in clash.output


def test_generate_unknown_case(tmp_path: Path) -> None:
    result = invoke("generate", str(tmp_path), "--only", "nope")
    assert result.exit_code == 2
    assert "unknown sample" in result.output


def test_digest(vectors_dir: Path) -> None:
    data = (vectors_dir / "pvgs_receipt.hex").read_text().strip()
    result = invoke("digest", "--domain", "ucf-core", "--schema", "ucf.v1.PVGSReceipt", data)
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == PVGS_RECEIPT_DIGEST

    other = invoke("digest", "--domain", "ucf-core", "--schema", "ucf.v1.PVGSReceipt", "--version", "2", data)
    assert other.stdout.strip() != PVGS_RECEIPT_DIGEST


def test_digest_rejects_bad_hex() -> None:
    result = invoke("digest", "--domain", "d", "--schema", "a.b", "xyz")
    assert result.exit_code == 2


def test_decode(vectors_dir: Path) -> None:
    data = (vectors_dir / "policy_decision.hex").read_text().strip()
    result = invoke("decode", "--schema", "ucf.v1.PolicyDecision", data)
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["schema"] == "ucf-core/ucf.v1.PolicyDecision@1"
    assert out["digest"] == "c7ba331f4c31d009153439055ee621817feb5c591722c9e90788ba9587663beb"
    assert isinstance(out["message"], dict)


def test_decode_failures() -> None:
    unknown = invoke("decode", "--schema", "ucf.v1.Nope", "00")
    assert unknown.exit_code == 1
    assert "no schema registered" in unknown.output

    truncated = invoke("decode", "--schema", "ucf.v1.ReasonCodes", "0a05")
    assert truncated.exit_code == 1
    assert "truncated" in truncated.output


def test_schemas() -> None:
    result = invoke("schemas", "--json")
    assert result.exit_code == 0, result.output
    rows = json.loads(result.stdout)
    assert len(rows) == 15
    sep = next(r for r in rows if r["schema_id"] == "ucf.v1.SepEvent")
    assert sep["domain"] == "ucf-core"
    assert sep["policy"]["prev_digest"] == "prev_event_digest.value"

    assert invoke("schemas").exit_code == 0


def test_version() -> None:
    result = invoke("version")
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_bad_config_exits_2(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.toml"), "version"])
    assert result.exit_code == 2
    assert "config file not found" in result.output

    bad = tmp_path / "bad.toml"
    bad.write_text("[fixtures]\nworkers = 0\n")
    result = runner.invoke(app, ["--config", str(bad), "version"])
    assert result.exit_code == 2
