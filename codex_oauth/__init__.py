"""
Codex account OAuth module

Local OAuth 2.0 + PKCE authorization-code flow for adding Codex CLI
accounts, plus token refresh.
"""
from .config import OAuthConfig
from .errors import (
    OAuthError,
    AlreadyInProgressError,
    PortUnavailableError,
    InvalidStateError,
    IssuerError,
    TokenHTTPError,
    InvalidTokenError,
    InvalidResponseError,
    AuthTimeoutError,
    NetworkError,
    AuthCancelledError,
)
from .models import (
    PKCEPair,
    TokenResponse,
    JWTClaims,
    CallbackResult,
    AuthorizationAttempt,
    AccountInfo,
    Account,
)
from .pkce import generate_pkce, generate_state, compute_challenge
from .jwt_utils import (
    decode_jwt,
    extract_account_info,
    get_token_claims,
)
from .authorization import build_authorization_url, build_redirect_uri
from .token_exchange import (
    exchange_code_for_tokens,
    refresh_access_token,
)
from .callback_server import (
    OAuthCallbackServer,
    start_callback_server,
)
from .orchestrator import AuthState, OAuthOrchestrator

__all__ = [
    # Configuration
    "OAuthConfig",
    # Errors
    "OAuthError",
    "AlreadyInProgressError",
    "PortUnavailableError",
    "InvalidStateError",
    "IssuerError",
    "TokenHTTPError",
    "InvalidTokenError",
    "InvalidResponseError",
    "AuthTimeoutError",
    "NetworkError",
    "AuthCancelledError",
    # Models
    "PKCEPair",
    "TokenResponse",
    "JWTClaims",
    "CallbackResult",
    "AuthorizationAttempt",
    "AccountInfo",
    "Account",
    # PKCE
    "generate_pkce",
    "generate_state",
    "compute_challenge",
    # JWT Utilities
    "decode_jwt",
    "extract_account_info",
    "get_token_claims",
    # Authorization
    "build_authorization_url",
    "build_redirect_uri",
    # Token Exchange
    "exchange_code_for_tokens",
    "refresh_access_token",
    # Callback Server
    "OAuthCallbackServer",
    "start_callback_server",
    # Orchestrator
    "AuthState",
    "OAuthOrchestrator",
]
