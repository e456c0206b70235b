"""Global configuration — XDG paths, YAML config file, env vars, defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "sentinel"
    return Path.home() / ".local" / "share" / "sentinel"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "sentinel"
    return Path.home() / ".config" / "sentinel"


@dataclass
class SentinelConfig:
    """Application-wide configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    config_dir: Path = field(default_factory=_default_config_dir)
    api_key: str = ""
    api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-3-pro-preview"
    request_timeout: float = 300.0
    thinking_budget: int = 15000
    web_host: str = "127.0.0.1"
    web_port: int = 8080
    verbose: bool = False

    @property
    def db_path(self) -> Path:
        return self.data_dir / "sentinel.db"

    @classmethod
    def load(cls, config_file: str | Path | None = None) -> SentinelConfig:
        """Load config from ``config.yaml`` then environment variables."""
        config = cls()

        path = Path(config_file) if config_file else config.config_dir / "config.yaml"
        if path.is_file():
            config._apply_file(path)

        env_key = (
            os.environ.get("SENTINEL_API_KEY")
            or os.environ.get("GEMINI_API_KEY")
            or os.environ.get("API_KEY")
        )
        if env_key:
            config.api_key = env_key

        env_model = os.environ.get("SENTINEL_MODEL")
        if env_model:
            config.model = env_model

        env_base = os.environ.get("SENTINEL_API_BASE")
        if env_base:
            config.api_base = env_base

        env_timeout = os.environ.get("SENTINEL_TIMEOUT")
        if env_timeout:
            config.request_timeout = float(env_timeout)

        env_port = os.environ.get("SENTINEL_WEB_PORT")
        if env_port:
            config.web_port = int(env_port)

        env_data = os.environ.get("SENTINEL_DATA_DIR")
        if env_data:
            config.data_dir = Path(env_data)

        return config

    def _apply_file(self, path: Path) -> None:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must be a mapping")

        known = {f.name: f for f in fields(self)}
        for key, value in data.items():
            name = key.replace("-", "_")
            if name not in known:
                logger.warning("Ignoring unknown config key '%s' in %s", key, path)
                continue
            current = getattr(self, name)
            if isinstance(current, Path):
                value = Path(value).expanduser()
            elif isinstance(current, bool):
                value = bool(value)
            elif isinstance(current, (int, float)):
                value = type(current)(value)
            setattr(self, name, value)
