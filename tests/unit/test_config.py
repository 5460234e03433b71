"""Unit tests for nightmare.core.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from nightmare.core.config import (
    NightmareConfig,
    config_to_dict,
    load_config,
    save_config,
)
from nightmare.core.constants import DISCOVERY_URL, SSO_API_URL
from nightmare.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for var in (
        "NIGHTMARE_CONFIG",
        "NIGHTMARE_DATA_DIR",
        "NIGHTMARE_SSO_URL",
        "NIGHTMARE_DISCOVERY_URL",
        "NIGHTMARE_TIMEOUT_SECONDS",
        "NIGHTMARE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestDefaults:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        cfg = load_config(tmp_path / "absent.toml")
        assert cfg.api.sso_url == SSO_API_URL
        assert cfg.api.discovery_url == DISCOVERY_URL
        assert cfg.logging.level == "INFO"
        assert cfg.vm.poll_interval_seconds == 4.0

    def test_remembers_source_path(self, tmp_path: Path) -> None:
        path = tmp_path / "absent.toml"
        assert load_config(path).config_path == path

    def test_creds_path_inside_data_dir(self, tmp_path: Path) -> None:
        cfg = NightmareConfig(data_dir=tmp_path)
        assert cfg.creds_path == tmp_path / "creds.json"

    def test_data_dir_from_env(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("NIGHTMARE_DATA_DIR", str(tmp_path / "elsewhere"))
        assert NightmareConfig().data_dir == tmp_path / "elsewhere"


class TestFile:
    def test_values_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(
            'data_dir = "/tmp/nm"\n'
            "[api]\n"
            'sso_url = "https://sso.example.com/api/"\n'
            "timeout_seconds = 10\n"
            "[logging]\n"
            'level = "debug"\n'
            'format = "JSON"\n'
        )
        cfg = load_config(path)
        assert cfg.data_dir == Path("/tmp/nm")
        assert cfg.api.sso_url == "https://sso.example.com/api"
        assert cfg.api.timeout_seconds == 10
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.format == "json"

    def test_unparseable_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("this is = = not toml")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config(path)

    def test_invalid_values_raise(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[api]\nsso_url = "ftp://nope"\n')
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_timeout_bounds(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[api]\ntimeout_seconds = 0\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_bad_log_level(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[logging]\nlevel = "LOUD"\n')
        with pytest.raises(ConfigError):
            load_config(path)


class TestEnvOverrides:
    def test_env_beats_file(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[api]\nsso_url = "https://file.example.com"\n')
        monkeypatch.setenv("NIGHTMARE_SSO_URL", "https://env.example.com")
        monkeypatch.setenv("NIGHTMARE_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("NIGHTMARE_LOG_LEVEL", "warning")
        cfg = load_config(path)
        assert cfg.api.sso_url == "https://env.example.com"
        assert cfg.api.timeout_seconds == 12.5
        assert cfg.logging.level == "WARNING"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[api]\ndiscovery_url = "https://disc.example.com/gap"\n')
        monkeypatch.setenv("NIGHTMARE_CONFIG", str(path))
        assert load_config().api.discovery_url == "https://disc.example.com/gap"
        assert load_config().config_path == path

    def test_non_numeric_timeout_raises_config_error(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("NIGHTMARE_TIMEOUT_SECONDS", "soon")
        with pytest.raises(ConfigError, match="NIGHTMARE_TIMEOUT_SECONDS"):
            load_config(tmp_path / "absent.toml")


class TestSave:
    def test_save_and_reload(self, tmp_path: Path) -> None:
        cfg = NightmareConfig(data_dir=tmp_path / "data", vm={"max_poll_attempts": 9})
        path = save_config(cfg, tmp_path / "out" / "config.toml")
        assert path.exists()
        assert oct(path.stat().st_mode & 0o777) == "0o600"
        assert not path.with_suffix(".tmp").exists()

        loaded = load_config(path)
        assert config_to_dict(loaded) == config_to_dict(cfg)
        assert loaded.vm.max_poll_attempts == 9

    def test_defaults_to_loaded_path(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        cfg = load_config(path)
        assert save_config(cfg) == path
        assert path.exists()

    def test_unwritable_target_raises_config_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(ConfigError, match="Cannot write"):
            save_config(NightmareConfig(data_dir=tmp_path), blocker / "config.toml")
