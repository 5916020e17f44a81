"""OAuth orchestrator for adding Codex accounts

Runs one PKCE authorization-code flow at a time:

    idle -> generating-pkce -> awaiting-port -> server-ready -> browser-opened
         -> awaiting-callback -> exchanging-code -> done | failed

and exposes the refresh-token grant independently of that state machine.
"""

import asyncio
import logging
import webbrowser
from enum import Enum
from typing import Callable, Dict, Optional

import httpx

from .authorization import build_authorization_url, build_redirect_uri
from .callback_server import OAuthCallbackServer
from .config import OAuthConfig
from .errors import (
    AlreadyInProgressError,
    AuthCancelledError,
    InvalidStateError,
    InvalidTokenError,
    OAuthError,
)
from .jwt_utils import extract_account_info
from .models import Account, AuthorizationAttempt, TokenResponse
from .pkce import generate_pkce, generate_state
from .token_exchange import exchange_code_for_tokens, refresh_access_token

logger = logging.getLogger(__name__)

BrowserOpener = Callable[[str], bool]


class AuthState(str, Enum):
    """Orchestrator state"""
    IDLE = "idle"
    GENERATING_PKCE = "generating-pkce"
    AWAITING_PORT = "awaiting-port"
    SERVER_READY = "server-ready"
    BROWSER_OPENED = "browser-opened"
    AWAITING_CALLBACK = "awaiting-callback"
    EXCHANGING_CODE = "exchanging-code"
    DONE = "done"
    FAILED = "failed"


class OAuthOrchestrator:
    """OAuth PKCE flow implementation

    This class orchestrates the OAuth authentication flow including:
    - PKCE and state generation
    - Local callback listener lifecycle
    - Authorization URL construction and browser launch
    - Token exchange and account identity decoding
    - Token refresh

    One instance owns its pending-attempt map; it is meant to be created once
    and shared by reference.
    """

    def __init__(
        self,
        config: Optional[OAuthConfig] = None,
        open_browser: Optional[BrowserOpener] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: OAuth configuration (defaults from settings)
            open_browser: Callable that opens a URL, returns False on failure
                (defaults to webbrowser.open)
            transport: Optional httpx transport for token endpoint calls
        """
        self.config = config or OAuthConfig()
        self._open_browser = open_browser or webbrowser.open
        self._transport = transport
        self._pending: Dict[str, AuthorizationAttempt] = {}
        self._server: Optional[OAuthCallbackServer] = None
        self._in_progress = False
        self._cancel_requested = False
        self.state = AuthState.IDLE

    @property
    def is_authenticating(self) -> bool:
        return self._in_progress

    @property
    def pending_attempts(self) -> Dict[str, AuthorizationAttempt]:
        """Copy of the in-flight attempts keyed by state"""
        return dict(self._pending)

    def _set_state(self, state: AuthState) -> None:
        logger.debug(f"OAuth flow state: {self.state.value} -> {state.value}")
        self.state = state

    def purge_stale_attempts(self, now: Optional[float] = None) -> int:
        """
        Drop attempts older than ``config.stale_attempt_age``.

        Args:
            now: Current epoch seconds (defaults to time.time())

        Returns:
            Number of attempts removed
        """
        stale = [
            state for state, attempt in self._pending.items()
            if attempt.is_stale(self.config.stale_attempt_age, now)
        ]
        for state in stale:
            del self._pending[state]
        if stale:
            logger.debug(f"Purged {len(stale)} stale authorization attempt(s)")
        return len(stale)

    def register_attempt(self, attempt: AuthorizationAttempt) -> None:
        """Register an in-flight attempt after purging stale ones"""
        self.purge_stale_attempts()
        self._pending[attempt.state] = attempt

    def cancel(self) -> bool:
        """
        Cancel the in-flight authentication.

        Returns:
            True if an attempt was running
        """
        if not self._in_progress:
            return False
        self._cancel_requested = True
        if self._server is not None:
            self._server.cancel()
        return True

    def _check_cancelled(self) -> None:
        if self._cancel_requested:
            raise AuthCancelledError()

    async def authenticate(self) -> Account:
        """
        Run the full browser login flow.

        Returns:
            Account with tokens and identity

        Raises:
            AlreadyInProgressError: Another authentication is running
            OAuthError: Any other terminal failure of this attempt
        """
        if self._in_progress:
            raise AlreadyInProgressError()

        self._in_progress = True
        self._cancel_requested = False
        state_token: Optional[str] = None
        try:
            self._set_state(AuthState.GENERATING_PKCE)
            pkce = generate_pkce()
            state_token = generate_state()

            self._set_state(AuthState.AWAITING_PORT)
            # Keep a reference before binding so cancel() can reach the listener
            self._server = OAuthCallbackServer.from_config(state_token, self.config)
            port = await self._server.start()
            self._check_cancelled()

            redirect_uri = build_redirect_uri(self.config, port)
            self.register_attempt(AuthorizationAttempt(
                state=state_token,
                verifier=pkce.verifier,
                port=port,
                redirect_uri=redirect_uri,
            ))
            self._set_state(AuthState.SERVER_READY)

            if self.config.browser_open_delay > 0:
                await asyncio.sleep(self.config.browser_open_delay)
            self._check_cancelled()

            auth_url = build_authorization_url(self.config, pkce.challenge, state_token, port)
            self._launch_browser(auth_url)
            self._set_state(AuthState.BROWSER_OPENED)

            self._set_state(AuthState.AWAITING_CALLBACK)
            result = await self._server.wait_for_callback(self.config.timeout)
            self._check_cancelled()

            attempt = self._pending.pop(result.state, None)
            if attempt is None or attempt.is_stale(self.config.stale_attempt_age):
                raise InvalidStateError()

            self._set_state(AuthState.EXCHANGING_CODE)
            tokens = await exchange_code_for_tokens(
                result.code,
                attempt.verifier,
                attempt.redirect_uri,
                self.config,
                transport=self._transport,
            )
            self._check_cancelled()

            info = extract_account_info(tokens.access_token)
            if info is None or not info.is_valid:
                logger.error("Access token is missing account id or email")
                raise InvalidTokenError()

            account = Account.from_tokens(tokens, info)
            self._set_state(AuthState.DONE)
            logger.info(f"Authenticated {account.email} ({account.plan_type})")
            return account

        except OAuthError as e:
            self._set_state(AuthState.FAILED)
            logger.error(f"Authentication failed [{e.code}]: {e}")
            raise
        except BaseException:
            self._set_state(AuthState.FAILED)
            raise
        finally:
            if self._server is not None:
                await self._server.stop()
                self._server = None
            if state_token is not None:
                self._pending.pop(state_token, None)
            self._in_progress = False

    def _launch_browser(self, auth_url: str) -> None:
        # Try to open browser
        if self._open_browser(auth_url):
            logger.info("Browser opened for OpenAI authentication")
        else:
            logger.warning(f"Could not open browser automatically, open this URL manually: {auth_url}")

    async def refresh_access_token(self, refresh_token: str) -> TokenResponse:
        """
        Exchange a refresh token for new tokens (no retry).

        Args:
            refresh_token: OAuth refresh token

        Returns:
            TokenResponse
        """
        return await refresh_access_token(refresh_token, self.config, transport=self._transport)

    async def refresh_account(self, account: Account, force: bool = False) -> Account:
        """
        Refresh an account's tokens if its access token has expired.

        Args:
            account: Account to refresh
            force: Refresh even if the access token is still valid

        Returns:
            The same account if no refresh was needed, else an updated copy
        """
        if not force and not account.is_expired:
            return account

        logger.info(f"Refreshing access token for {account.email}")
        tokens = await self.refresh_access_token(account.refresh_token)

        info = extract_account_info(tokens.access_token)
        if info is None:
            raise InvalidTokenError()

        return account.with_refreshed_tokens(tokens, info)
