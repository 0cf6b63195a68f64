from __future__ import annotations

import json
from pathlib import Path

import pytest

from ucf import config as ucf_config
from ucf.config import DEFAULT_FIXTURES_DIR, load
from ucf.errors import ConfigError, UcfErrorCode


def test_defaults(clean_env) -> None:
    cfg = load()
    assert cfg.fixtures.directory == DEFAULT_FIXTURES_DIR
    assert cfg.fixtures.workers == 4
    assert cfg.digest.max_input_bytes is None
    assert cfg.log.level == "INFO"
    assert cfg.log.format is None


def test_toml_file(clean_env, tmp_path: Path) -> None:
    path = tmp_path / "ucf.toml"
    path.write_text(
        '[fixtures]\ndirectory = "vectors"\nworkers = 2\n\n'
        "[digest]\nmax_input_bytes = 65536\n\n"
        '[log]\nlevel = "debug"\nformat = "json"\n'
    )
    clean_env.chdir(tmp_path)
    cfg = load(path)
    assert cfg.fixtures.directory == (tmp_path / "vectors").resolve()
    assert cfg.fixtures.workers == 2
    assert cfg.digest.max_input_bytes == 65536
    assert cfg.log.level == "DEBUG"
    assert cfg.log.format == "json"


def test_json_file_keeps_unset_sections_at_defaults(clean_env, tmp_path: Path) -> None:
    path = tmp_path / "ucf.json"
    path.write_text(json.dumps({"fixtures": {"workers": 8}}))
    cfg = load(str(path))
    assert cfg.fixtures.workers == 8
    assert cfg.fixtures.directory == DEFAULT_FIXTURES_DIR
    assert cfg.log.level == "INFO"


def test_precedence_overrides_env_file(clean_env, tmp_path: Path) -> None:
    path = tmp_path / "ucf.toml"
    path.write_text("[fixtures]\nworkers = 2\n[digest]\nmax_input_bytes = 100\n")
    clean_env.setenv("UCF_VERIFY_WORKERS", "3")
    clean_env.setenv("UCF_MAX_DIGEST_INPUT", "0x1000")
    clean_env.setenv("UCF_LOG_LEVEL", "warning")
    clean_env.setenv("UCF_LOG_FORMAT", "TEXT")
    clean_env.setenv("UCF_FIXTURES_DIR", str(tmp_path))

    cfg = load(path)
    assert cfg.fixtures.workers == 3
    assert cfg.digest.max_input_bytes == 4096
    assert cfg.log.level == "WARNING"
    assert cfg.log.format == "text"
    assert cfg.fixtures.directory == tmp_path.resolve()

    cfg = load(path, fixtures={"workers": 5})
    assert cfg.fixtures.workers == 5
    assert cfg.fixtures.directory == tmp_path.resolve()


def test_empty_log_format_env_means_auto(clean_env) -> None:
    clean_env.setenv("UCF_LOG_FORMAT", "")
    assert load().log.format is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"fixtures": {"workers": 0}},
        {"digest": {"max_input_bytes": 0}},
        {"log": {"format": "yaml"}},
        {"fixtures": {"workers": "many"}},
    ],
)
def test_invalid_values(clean_env, overrides) -> None:
    with pytest.raises(ConfigError) as ei:
        load(**overrides)
    assert ei.value.code == UcfErrorCode.CONFIG


def test_invalid_env_int(clean_env) -> None:
    clean_env.setenv("UCF_VERIFY_WORKERS", "lots")
    with pytest.raises(ConfigError) as ei:
        load()
    assert ei.value.data["env"] == "UCF_VERIFY_WORKERS"


@pytest.mark.parametrize(
    "name, body",
    [
        ("ucf.toml", "[fixtures\n"),
        ("ucf.json", "{"),
        ("ucf.yaml", "fixtures: {}\n"),
    ],
)
def test_bad_files(clean_env, tmp_path: Path, name: str, body: str) -> None:
    path = tmp_path / name
    path.write_text(body)
    with pytest.raises(ConfigError):
        load(path)


def test_missing_file(clean_env, tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load(tmp_path / "nope.toml")


def test_to_dict_is_json_safe(clean_env) -> None:
    d = load().to_dict()
    assert d["fixtures"]["directory"] == str(DEFAULT_FIXTURES_DIR)
    json.dumps(d)


def test_main_prints_config_and_reports_errors(clean_env, tmp_path: Path, capsys) -> None:
    assert ucf_config.main([]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["fixtures"]["workers"] == 4

    bad = tmp_path / "bad.json"
    bad.write_text('{"fixtures": {"workers": -1}}')
    assert ucf_config.main([str(bad)]) == 2
    assert "config error" in capsys.readouterr().err
