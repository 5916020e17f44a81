"""
OpenAI OAuth authorization URL construction (matches the openai/codex CLI)
"""
from urllib.parse import urlencode

from .config import OAuthConfig


def build_redirect_uri(config: OAuthConfig, port: int) -> str:
    """
    Redirect URI for the port the callback listener actually bound.

    The token exchange must send this exact string again, so both sides
    build it here.

    Args:
        config: OAuth configuration
        port: Bound callback port (after any fallback)

    Returns:
        str: e.g. http://localhost:1456/auth/callback
    """
    return f"http://localhost:{port}{config.callback_path}"


def build_authorization_url(
    config: OAuthConfig,
    code_challenge: str,
    state: str,
    port: int,
) -> str:
    """
    Create the OpenAI OAuth authorization URL.

    Args:
        config: OAuth configuration
        code_challenge: PKCE S256 challenge
        state: Anti-CSRF state token
        port: Bound callback port

    Returns:
        str: Full authorization URL to open in the browser
    """
    params = {
        "response_type": "code",
        "client_id": config.client_id,
        "redirect_uri": build_redirect_uri(config, port),
        "scope": config.scope,
        "code_challenge": code_challenge,
        "code_challenge_method": "S256",
        "state": state,
    }
    # Codex CLI parameters (id_token_add_organizations, originator, ...)
    for key, value in config.extra_authorize_params.items():
        params.setdefault(key, value)

    return f"{config.authorize_url}?{urlencode(params)}"
