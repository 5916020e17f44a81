"""PKCE (Proof Key for Code Exchange) generation for the Codex OAuth flow"""

import base64
import hashlib
import secrets

from .models import PKCEPair

# 32 random bytes -> 43 character base64url verifier
VERIFIER_BYTES = 32
STATE_BYTES = 16


def _base64url(data: bytes) -> str:
    """Base64url encoding without padding"""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def compute_challenge(verifier: str) -> str:
    """S256 code challenge for a verifier

    Args:
        verifier: PKCE code verifier

    Returns:
        SHA-256 digest of the verifier, base64url encoded without padding
    """
    return _base64url(hashlib.sha256(verifier.encode("utf-8")).digest())


def generate_pkce() -> PKCEPair:
    """
    Generate PKCE code verifier and challenge.

    RFC 7636 PKCE standard:
    - Verifier: 43-128 characters, base64url encoded (32 bytes -> 43 chars)
    - Challenge: SHA-256 hash of verifier, base64url encoded

    Returns:
        PKCEPair: Tuple of (verifier, challenge)
    """
    verifier = _base64url(secrets.token_bytes(VERIFIER_BYTES))
    return PKCEPair(verifier=verifier, challenge=compute_challenge(verifier))


def generate_state() -> str:
    """
    Generate random state parameter for CSRF protection.

    Returns:
        str: 32 lowercase hex characters (16 random bytes)
    """
    return secrets.token_hex(STATE_BYTES)
