"""Tests for config.loader and codex_oauth.config."""
import dataclasses

import pytest

from config.loader import ConfigLoader
from codex_oauth import OAuthConfig


class TestConfigLoader:
    def test_env_overrides_default(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CODEX_TEST_PORT", "1470")
        monkeypatch.setenv("CODEX_TEST_TIMEOUT", "30")
        monkeypatch.setenv("CODEX_TEST_FLAG", "yes")
        loader = ConfigLoader(env_path=str(tmp_path / "missing.env"))

        assert loader.get("CODEX_TEST_PORT", 1455) == 1470
        assert loader.get("CODEX_TEST_TIMEOUT", 120.0) == 30.0
        assert loader.get("CODEX_TEST_FLAG", False) is True

    def test_unparseable_value_falls_back(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CODEX_TEST_PORT", "not-a-port")
        loader = ConfigLoader(env_path=str(tmp_path / "missing.env"))
        assert loader.get("CODEX_TEST_PORT", 1455) == 1455

    def test_unset_returns_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("CODEX_TEST_HOST", raising=False)
        loader = ConfigLoader(env_path=str(tmp_path / "missing.env"))
        assert loader.get("CODEX_TEST_HOST", "localhost") == "localhost"

    def test_env_file_loaded(self, monkeypatch, tmp_path):
        monkeypatch.delenv("CODEX_TEST_FROM_FILE", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text("CODEX_TEST_FROM_FILE=2.5\n")
        loader = ConfigLoader(env_path=str(env_file))
        try:
            assert loader.get("CODEX_TEST_FROM_FILE", 1.0) == 2.5
        finally:
            monkeypatch.delenv("CODEX_TEST_FROM_FILE", raising=False)

    def test_int_list(self, monkeypatch, tmp_path):
        loader = ConfigLoader(env_path=str(tmp_path / "missing.env"))

        monkeypatch.setenv("CODEX_TEST_PORTS", "1461, 1462,1463")
        assert loader.get_int_list("CODEX_TEST_PORTS", [1456]) == [1461, 1462, 1463]

        monkeypatch.setenv("CODEX_TEST_PORTS", "1461,abc")
        assert loader.get_int_list("CODEX_TEST_PORTS", [1456]) == [1456]

        monkeypatch.delenv("CODEX_TEST_PORTS")
        assert loader.get_int_list("CODEX_TEST_PORTS", [1456, 1457]) == [1456, 1457]


class TestOAuthConfig:
    def test_defaults(self):
        config = OAuthConfig()
        assert config.client_id == "app_EMoamEEZ73f0CkXaXp7hrann"
        assert config.callback_path == "/auth/callback"
        assert config.scope == "openid profile email offline_access"
        assert config.stale_attempt_age == 300.0

    def test_ports_in_preference_order(self):
        config = OAuthConfig(callback_port=1455, fallback_ports=(1456, 1457))
        assert config.ports == (1455, 1456, 1457)

    def test_frozen(self):
        config = OAuthConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.timeout = 1.0
