"""Tests for configuration loading."""

from pathlib import Path

import pytest

from sentinel.config import SentinelConfig

_ENV_VARS = (
    "SENTINEL_API_KEY",
    "GEMINI_API_KEY",
    "API_KEY",
    "SENTINEL_MODEL",
    "SENTINEL_API_BASE",
    "SENTINEL_TIMEOUT",
    "SENTINEL_WEB_PORT",
    "SENTINEL_DATA_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(tmp_path: Path, monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))


def test_defaults(tmp_path: Path):
    config = SentinelConfig.load()
    assert config.api_key == ""
    assert config.model == "gemini-3-pro-preview"
    assert config.db_path == tmp_path / "data" / "sentinel" / "sentinel.db"


def test_yaml_file(tmp_path: Path):
    config_dir = tmp_path / "config" / "sentinel"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text(
        "api_key: from-file\nrequest-timeout: 30\nweb_port: '9000'\nbogus: 1\n"
    )

    config = SentinelConfig.load()
    assert config.api_key == "from-file"
    assert config.request_timeout == 30.0
    assert config.web_port == 9000


def test_env_overrides_file(tmp_path: Path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("api_key: from-file\nmodel: file-model\n")
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    monkeypatch.setenv("SENTINEL_TIMEOUT", "12.5")

    config = SentinelConfig.load(path)
    assert config.api_key == "from-env"
    assert config.model == "file-model"
    assert config.request_timeout == 12.5


def test_non_mapping_file_rejected(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        SentinelConfig.load(path)
