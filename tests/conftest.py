"""Shared fixtures for the Codex OAuth tests."""
import base64
import json
import socket

import pytest

from codex_oauth import OAuthConfig


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def encode_jwt(payload) -> str:
    """Unsigned compact JWT with the given payload."""
    header = _b64url(json.dumps({"alg": "RS256", "typ": "JWT"}).encode())
    body = _b64url(json.dumps(payload).encode())
    return f"{header}.{body}.signature"


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def make_jwt():
    return encode_jwt


@pytest.fixture
def account_payload():
    return {
        "sub": "auth0|user-1",
        "aud": ["https://api.openai.com/v1"],
        "exp": 1999999999,
        "https://api.openai.com/auth": {
            "chatgpt_account_id": "a1",
            "chatgpt_plan_type": "pro",
            "chatgpt_user_id": "user-1",
        },
        "https://api.openai.com/profile": {"email": "x@y.com"},
    }


def free_ports(count: int):
    """Distinct ports that were free a moment ago."""
    found = []
    while len(found) < count:
        port = free_port()
        if port not in found:
            found.append(port)
    return found


@pytest.fixture
def ports():
    return free_ports(3)


@pytest.fixture
def six_ports():
    """Primary port plus five fallbacks, like the default configuration."""
    return free_ports(6)


@pytest.fixture
def oauth_config(ports):
    return OAuthConfig(
        token_url="https://auth.example.test/oauth/token",
        authorize_url="https://auth.example.test/oauth/authorize",
        callback_host="127.0.0.1",
        callback_port=ports[0],
        fallback_ports=tuple(ports[1:]),
        timeout=5.0,
        port_ready_timeout=2.0,
        browser_open_delay=0.0,
        http_timeout=5.0,
    )
