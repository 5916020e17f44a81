"""
OpenAI OAuth token exchange and refresh
"""
import logging
from typing import Dict, Optional

import httpx
from pydantic import ValidationError

from .config import OAuthConfig
from .errors import InvalidResponseError, NetworkError, TokenHTTPError
from .models import TokenResponse

logger = logging.getLogger(__name__)


async def _post_token_request(
    data: Dict[str, str],
    config: OAuthConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenResponse:
    """
    POST a form-encoded grant to the token endpoint.

    Args:
        data: Form fields for the grant
        config: OAuth configuration (token URL, timeout)
        transport: Optional httpx transport (used by tests)

    Returns:
        Parsed TokenResponse

    Raises:
        NetworkError: Transport failure or timeout
        TokenHTTPError: Non-200 status
        InvalidResponseError: Body is not a valid token response
    """
    grant_type = data["grant_type"]

    try:
        async with httpx.AsyncClient(timeout=config.http_timeout, transport=transport) as client:
            logger.debug(f"Sending {grant_type} request to {config.token_url}")
            response = await client.post(
                config.token_url,
                data=data,
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Accept": "application/json",
                },
            )
    except httpx.TimeoutException as e:
        logger.error(f"Token request ({grant_type}) timed out after {config.http_timeout} seconds: {e}")
        raise NetworkError(f"Token request timed out: {e}") from e
    except httpx.RequestError as e:
        logger.error(f"Token request ({grant_type}) failed: {e}")
        raise NetworkError(f"Token request failed: {e}") from e

    logger.debug(f"Token endpoint response status: {response.status_code}")

    if response.status_code != 200:
        logger.error(f"Token request ({grant_type}) failed with status {response.status_code}")
        raise TokenHTTPError(response.status_code, response.text)

    try:
        payload = response.json()
    except ValueError as e:
        # JSONDecodeError, or UnicodeDecodeError on a non-UTF-8 body
        logger.error(f"Failed to parse token response: {e}")
        raise InvalidResponseError() from e

    try:
        return TokenResponse.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Token response missing required fields: {e.error_count()} error(s)")
        raise InvalidResponseError() from e


async def exchange_code_for_tokens(
    code: str,
    code_verifier: str,
    redirect_uri: str,
    config: OAuthConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenResponse:
    """
    Exchange authorization code for access and refresh tokens.

    Args:
        code: Authorization code from callback
        code_verifier: PKCE code verifier of the same attempt
        redirect_uri: Redirect URI sent in the authorize request (byte-for-byte)
        config: OAuth configuration
        transport: Optional httpx transport

    Returns:
        TokenResponse
    """
    logger.info(f"Exchanging authorization code for tokens at {config.token_url}")
    tokens = await _post_token_request(
        {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": config.client_id,
            "code_verifier": code_verifier,
        },
        config,
        transport,
    )
    logger.info("Successfully exchanged authorization code for tokens")
    return tokens


async def refresh_access_token(
    refresh_token: str,
    config: OAuthConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> TokenResponse:
    """
    Refresh access token using refresh token.

    No retry is attempted here; that is the caller's decision.

    Args:
        refresh_token: OAuth refresh token
        config: OAuth configuration
        transport: Optional httpx transport

    Returns:
        TokenResponse (refresh_token is None when the issuer did not rotate it)
    """
    tokens = await _post_token_request(
        {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": config.client_id,
        },
        config,
        transport,
    )
    logger.info("Successfully refreshed access token")
    return tokens
