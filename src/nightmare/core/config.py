"""Nightmare configuration: Pydantic model, load, and save."""

from __future__ import annotations

import contextlib
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr, field_validator

from nightmare.core.constants import (
    CONFIG_FILENAME,
    CREDS_FILENAME,
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    DISCOVERY_URL,
    NIGHTMARE_DIR_NAME,
    SSO_API_URL,
    USER_AGENT,
)
from nightmare.core.exceptions import ConfigError


def default_data_dir() -> Path:
    """Return the default data directory (~/.nightmare), honouring NIGHTMARE_DATA_DIR."""
    if env_dir := os.environ.get("NIGHTMARE_DATA_DIR"):
        return Path(env_dir).expanduser()
    return Path.home() / NIGHTMARE_DIR_NAME


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class ApiConfig(BaseModel):
    sso_url: str = SSO_API_URL
    discovery_url: str = DISCOVERY_URL
    user_agent: str = USER_AGENT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @field_validator("sso_url", "discovery_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if not (1 <= v <= 300):
            raise ValueError("timeout_seconds must be between 1 and 300")
        return v


class VmConfig(BaseModel):
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0)
    max_poll_attempts: int = Field(default=DEFAULT_MAX_POLL_ATTEMPTS, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class NightmareConfig(BaseModel):
    """Root Nightmare configuration model."""

    data_dir: Path = Field(default_factory=default_data_dir)
    api: ApiConfig = Field(default_factory=ApiConfig)
    vm: VmConfig = Field(default_factory=VmConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    _config_path: Path | None = PrivateAttr(default=None)

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_data_dir(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @property
    def creds_path(self) -> Path:
        return self.data_dir / CREDS_FILENAME

    @property
    def config_path(self) -> Path:
        """The file this config was loaded from (or would be saved to)."""
        return self._config_path or _config_file_path()


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("NIGHTMARE_CONFIG"):
        return Path(env_path)
    return default_data_dir() / CONFIG_FILENAME


def load_config(path: Path | None = None) -> NightmareConfig:
    """
    Load NightmareConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (NIGHTMARE_*)
      2. Config file (~/.nightmare/config.toml)
      3. Built-in defaults

    A missing file yields the defaults.
    """
    import tomllib

    cfg_path = path or _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except Exception as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc

    try:
        _apply_env_overrides(data)
        config = NightmareConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return config


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay NIGHTMARE_* environment variables onto the parsed TOML data."""
    if data_dir := os.environ.get("NIGHTMARE_DATA_DIR"):
        data["data_dir"] = data_dir
    if sso := os.environ.get("NIGHTMARE_SSO_URL"):
        data.setdefault("api", {})["sso_url"] = sso
    if discovery := os.environ.get("NIGHTMARE_DISCOVERY_URL"):
        data.setdefault("api", {})["discovery_url"] = discovery
    if timeout := os.environ.get("NIGHTMARE_TIMEOUT_SECONDS"):
        try:
            data.setdefault("api", {})["timeout_seconds"] = float(timeout)
        except ValueError:
            raise ValueError(f"NIGHTMARE_TIMEOUT_SECONDS is not a number: {timeout!r}") from None
    if level := os.environ.get("NIGHTMARE_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level


def save_config(config: NightmareConfig, path: Path | None = None) -> Path:
    """
    Write ``config`` as TOML to ``path`` (default: ``config.config_path``).

    The file is written next to its target and renamed into place, with
    permissions 0600 set before the rename.
    """
    import tomli_w

    cfg_path = path or config.config_path
    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_to_dict(config), f)
        tmp_path.chmod(0o600)
        os.replace(tmp_path, cfg_path)
    except OSError as exc:
        with contextlib.suppress(OSError):
            tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return cfg_path


def config_to_dict(config: NightmareConfig) -> dict[str, Any]:
    """Serialize a config to a TOML-compatible dict."""
    data = config.model_dump(mode="json")
    data["data_dir"] = str(config.data_dir)
    return data
