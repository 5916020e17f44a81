"""Tests for the codex-oauth command-line interface."""
import datetime
import importlib
import json

import pytest

from cli.account_display import format_expiry, mask_token
from codex_oauth import Account, AuthTimeoutError

# The package re-exports main(), so fetch the module itself
cli_main = importlib.import_module("cli.main")


def _account():
    return Account(
        email="x@y.com",
        account_id="a1",
        plan_type="pro",
        access_token="access-token-value-1234567890",
        refresh_token="refresh-token-value-1234567890",
        id_token="",
        expires_at=datetime.datetime(2033, 5, 18, 3, 33, 19, tzinfo=datetime.timezone.utc),
    )


class TestDisplayHelpers:
    def test_mask_token(self):
        masked = mask_token("access-token-value-1234567890")
        assert masked.startswith("access")
        assert "1234567890" not in masked
        assert mask_token("") == "-"
        assert mask_token("short") == "*****"

    def test_format_expiry(self):
        assert format_expiry(-5) == "expired"
        assert format_expiry(125) == "2m"
        assert format_expiry(2 * 3600 + 15 * 60) == "2h 15m"


class TestParser:
    def test_refresh_requires_token(self):
        with pytest.raises(SystemExit):
            cli_main.build_parser().parse_args(["refresh"])

    def test_flags(self):
        args = cli_main.build_parser().parse_args(["--json", "--debug", "refresh", "rt-1"])
        assert args.command == "refresh"
        assert args.refresh_token == "rt-1"
        assert args.json and args.debug


class TestMain:
    def test_login_json_output(self, monkeypatch, capsys):
        async def fake_authenticate(self):
            return _account()

        monkeypatch.setattr(cli_main.OAuthOrchestrator, "authenticate", fake_authenticate)
        monkeypatch.setattr(cli_main, "setup_logging", lambda debug: None)

        cli_main.main(["--json", "login"])

        data = json.loads(capsys.readouterr().out)
        assert data["account_id"] == "a1"
        assert data["access_token"] == "access-token-value-1234567890"
        assert data["expires_at"] == "2033-05-18T03:33:19+00:00"

    def test_oauth_error_exits_1(self, monkeypatch):
        async def fake_authenticate(self):
            raise AuthTimeoutError(120)

        monkeypatch.setattr(cli_main.OAuthOrchestrator, "authenticate", fake_authenticate)
        monkeypatch.setattr(cli_main, "setup_logging", lambda debug: None)

        with pytest.raises(SystemExit) as exc_info:
            cli_main.main(["login"])
        assert exc_info.value.code == 1
