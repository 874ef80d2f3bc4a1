"""Tests for configuration paths, persistence and precedence."""

from __future__ import annotations

import json
import stat

import pytest

from rootly_tui.commands.config import apply_setting, mask_secret
from rootly_tui.config import (
    config_exists,
    config_path,
    get_cache_dir,
    get_config_dir,
    load_config,
    resolve_config,
    save_config,
)
from rootly_tui.exceptions import ConfigError, InvalidUsageError
from rootly_tui.models import Config


class TestPaths:
    def test_xdg_dirs(self, isolated_config) -> None:
        assert get_config_dir() == isolated_config / "config" / "rootly-tui"
        assert get_cache_dir() == isolated_config / "cache" / "rootly-tui"

    def test_cache_dir_not_created(self, isolated_config) -> None:
        assert not get_cache_dir().exists()


class TestPersistence:
    def test_defaults_without_file(self, isolated_config) -> None:
        config = load_config()
        assert config == Config()
        assert not config_exists()

    def test_round_trip(self, isolated_config) -> None:
        save_config(Config(api_key="secret", timezone="Europe/Paris"))
        loaded = load_config()
        assert loaded.api_key == "secret"
        assert loaded.timezone == "Europe/Paris"

    def test_file_is_private(self, isolated_config) -> None:
        save_config(Config(api_key="secret"))
        mode = stat.S_IMODE(config_path().stat().st_mode)
        assert mode == 0o600

    def test_invalid_json(self, isolated_config) -> None:
        config_path().write_text("{nope")
        with pytest.raises(ConfigError):
            load_config()

    def test_invalid_values(self, isolated_config) -> None:
        config_path().write_text(json.dumps({"page_size": 0}))
        with pytest.raises(ConfigError):
            load_config()


class TestPrecedence:
    def test_env_overrides_file(self, isolated_config, monkeypatch) -> None:
        save_config(Config(api_key="from-file", endpoint="file.example.com"))
        monkeypatch.setenv("ROOTLY_API_KEY", "from-env")
        config = resolve_config()
        assert config.api_key == "from-env"
        assert config.endpoint == "file.example.com"

    def test_cli_overrides_env(self, isolated_config, monkeypatch) -> None:
        monkeypatch.setenv("ROOTLY_ENDPOINT", "env.example.com")
        config = resolve_config(cli_api_key="cli", cli_endpoint="cli.example.com")
        assert (config.api_key, config.endpoint) == ("cli", "cli.example.com")

    def test_validity(self) -> None:
        assert not Config().is_valid()
        assert Config(api_key="k").is_valid()
        assert not Config(api_key="k", endpoint="").is_valid()

    @pytest.mark.parametrize(
        "endpoint,expected",
        [
            ("api.rootly.com", "https://api.rootly.com"),
            ("http://localhost:8080/", "http://localhost:8080"),
        ],
    )
    def test_base_url(self, endpoint, expected) -> None:
        assert Config(endpoint=endpoint).base_url == expected


class TestApplySetting:
    def test_nested_int(self) -> None:
        config = apply_setting(Config(), "cache.list_ttl_seconds", "60")
        assert config.cache.list_ttl_seconds == 60

    def test_bool(self) -> None:
        assert apply_setting(Config(), "cache.persistent", "false").cache.persistent is False
        assert apply_setting(Config(), "request.verify_ssl", "yes").request.verify_ssl is True

    def test_string(self) -> None:
        assert apply_setting(Config(), "timezone", "Asia/Tokyo").timezone == "Asia/Tokyo"

    @pytest.mark.parametrize("key", ["nope", "cache.nope", "timezone.inner", "cache"])
    def test_unknown_key(self, key) -> None:
        with pytest.raises(InvalidUsageError):
            apply_setting(Config(), key, "1")

    def test_bad_integer(self) -> None:
        with pytest.raises(InvalidUsageError, match="Expected integer"):
            apply_setting(Config(), "page_size", "many")

    def test_out_of_range(self) -> None:
        with pytest.raises(InvalidUsageError, match="Validation error"):
            apply_setting(Config(), "page_size", "500")


@pytest.mark.parametrize(
    "secret,expected",
    [("", ""), ("short", "*****"), ("rootly_abcdef123456", "***************3456")],
)
def test_mask_secret(secret, expected) -> None:
    assert mask_secret(secret) == expected
