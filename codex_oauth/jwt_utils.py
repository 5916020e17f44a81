"""
JWT token parsing and ChatGPT account info extraction

Tokens are decoded, never verified. The identity read here was already
vouched for by the issuer over the token endpoint's TLS connection, so these
helpers must not be used for trust decisions.
"""
import base64
import binascii
import datetime
import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .models import DEFAULT_PLAN_TYPE, AccountInfo, JWTClaims

logger = logging.getLogger(__name__)


def _decode_payload(token: str) -> Optional[Any]:
    """Decode the middle segment of a compact JWT into JSON"""
    if not token or not isinstance(token, str):
        return None

    # JWT structure: header.payload.signature
    parts = token.split(".")
    if len(parts) != 3:
        logger.debug(f"Invalid JWT format: expected 3 parts, got {len(parts)}")
        return None

    payload = parts[1]
    # JWT uses base64url without padding
    padded = payload + "=" * (-len(payload) % 4)

    try:
        decoded_bytes = base64.b64decode(
            padded.replace("-", "+").replace("_", "/"),
            validate=True,
        )
        return json.loads(decoded_bytes.decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        # UnicodeDecodeError and JSONDecodeError are both ValueErrors
        logger.debug(f"Error decoding JWT payload: {e}")
        return None


def decode_jwt(token: str) -> Optional[JWTClaims]:
    """
    Decode JWT claims without verification.

    Args:
        token: Compact JWT (header.payload.signature)

    Returns:
        Parsed claims, or None if the token is malformed
    """
    payload = _decode_payload(token)
    if not isinstance(payload, dict):
        return None

    try:
        return JWTClaims.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"JWT claims have unexpected shape: {e.error_count()} error(s)")
        return None


def get_token_claims(token: str) -> Optional[Dict[str, Any]]:
    """
    Get all raw claims from a JWT for debugging.

    Args:
        token: Compact JWT

    Returns:
        Full JWT payload or None if invalid
    """
    payload = _decode_payload(token)
    return payload if isinstance(payload, dict) else None


def _expiry_from_exp(exp: Optional[float]) -> Optional[datetime.datetime]:
    if exp is None:
        return None
    try:
        return datetime.datetime.fromtimestamp(float(exp), datetime.timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug(f"Ignoring out-of-range exp claim: {exp}")
        return None


def extract_account_info(token: str) -> Optional[AccountInfo]:
    """
    Extract account identity from an access token.

    Vendor-namespaced claims win over the standard top-level ones:
    token["https://api.openai.com/auth"]["chatgpt_account_id"], then
    token["https://api.openai.com/profile"]["email"] or token["email"].

    Args:
        token: OAuth access token (JWT format)

    Returns:
        AccountInfo (check ``is_valid``), or None if the token cannot be decoded
    """
    claims = decode_jwt(token)
    if claims is None:
        return None

    auth = claims.openai_auth
    profile = claims.openai_profile

    return AccountInfo(
        account_id=auth.chatgpt_account_id if auth else None,
        plan_type=(auth.chatgpt_plan_type if auth else None) or DEFAULT_PLAN_TYPE,
        user_id=(auth.chatgpt_user_id if auth else None) or claims.sub,
        email=(profile.email if profile else None) or claims.email,
        expires_at=_expiry_from_exp(claims.exp),
    )
