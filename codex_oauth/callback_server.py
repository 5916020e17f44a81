"""
Local OAuth callback server

Binds the first free port from a preference list, waits for the issuer's
redirect and hands exactly one outcome (code, issuer error or cancellation)
back to the waiting coroutine. The listener is always torn down before that
outcome is delivered.
"""
import asyncio
import hmac
import logging
from typing import Optional, Sequence, Union

from aiohttp import web

from .config import OAuthConfig
from .errors import (
    AuthCancelledError,
    AuthTimeoutError,
    IssuerError,
    OAuthError,
    PortUnavailableError,
)
from .models import CallbackResult
from .pages import SUCCESS_HTML, WAITING_HTML, error_html

logger = logging.getLogger(__name__)

# Upper bounds for the request line and each header line; larger requests get a 400
MAX_LINE_SIZE = 8190
MAX_FIELD_SIZE = 8190

Outcome = Union[CallbackResult, OAuthError]


class OAuthCallbackServer:
    """Local HTTP server for a single OAuth callback"""

    def __init__(
        self,
        expected_state: str,
        ports: Sequence[int],
        callback_path: str,
        host: str = "localhost",
        ready_timeout: float = 2.0,
    ):
        self.expected_state = expected_state
        self.ports = tuple(ports)
        self.callback_path = callback_path
        self.host = host
        self.ready_timeout = ready_timeout
        self.port: Optional[int] = None
        self.runner: Optional[web.AppRunner] = None

        self._future: Optional[asyncio.Future] = None
        self._completed = False
        self._finish_task: Optional[asyncio.Task] = None

        self.app = web.Application(
            handler_args={
                "max_line_size": MAX_LINE_SIZE,
                "max_field_size": MAX_FIELD_SIZE,
            }
        )
        # Any other path (e.g. /favicon.ico) gets aiohttp's 404 and the listener keeps running
        self.app.router.add_get(callback_path, self._handle_callback)

    @classmethod
    def from_config(cls, expected_state: str, config: OAuthConfig) -> "OAuthCallbackServer":
        return cls(
            expected_state,
            ports=config.ports,
            callback_path=config.callback_path,
            host=config.callback_host,
            ready_timeout=config.port_ready_timeout,
        )

    @property
    def is_running(self) -> bool:
        return self.runner is not None

    def _state_matches(self, state: Optional[str]) -> bool:
        if not state:
            return False
        return hmac.compare_digest(state.encode("utf-8"), self.expected_state.encode("utf-8"))

    async def _handle_callback(self, request: web.Request) -> web.StreamResponse:
        """Handle OAuth callback request"""
        if self._completed:
            return web.Response(
                text=error_html("This authorization attempt has already completed."),
                content_type="text/html",
                status=400,
            )

        code = request.query.get("code")
        state = request.query.get("state")
        error = request.query.get("error")
        error_description = request.query.get("error_description")

        # Check for errors
        if error:
            logger.error(f"OAuth error from issuer: {error}")
            if error_description:
                logger.error(f"Description: {error_description}")
            message = f"{error}: {error_description}" if error_description else error
            return await self._respond_and_complete(
                request,
                web.Response(text=error_html(message), content_type="text/html", status=400),
                IssuerError(error, error_description),
            )

        # Validate state (CSRF protection); a stray request must not end the attempt
        if not self._state_matches(state):
            logger.warning("Rejected OAuth callback with missing or unknown state")
            return web.Response(
                text=error_html("Invalid state"),
                content_type="text/html",
                status=400,
            )

        # Browser preflight before the final redirect
        if not code:
            logger.debug("OAuth callback without code, still waiting")
            return web.Response(text=WAITING_HTML, content_type="text/html", status=400)

        logger.info("Received OAuth callback with authorization code")
        return await self._respond_and_complete(
            request,
            web.Response(text=SUCCESS_HTML, content_type="text/html"),
            CallbackResult(code=code, state=state),
        )

    async def _respond_and_complete(
        self,
        request: web.Request,
        response: web.Response,
        outcome: Outcome,
    ) -> web.Response:
        """Write a terminal response in full, then tear down and deliver"""
        self._completed = True
        response.force_close()
        try:
            await response.prepare(request)
            await response.write_eof()
        finally:
            self._schedule_finish(outcome)
        return response

    def _schedule_finish(self, outcome: Outcome) -> None:
        self._finish_task = asyncio.get_running_loop().create_task(self._finish(outcome))

    async def _finish(self, outcome: Outcome) -> None:
        try:
            await self.stop()
        finally:
            self._deliver(outcome)

    def _deliver(self, outcome: Outcome) -> None:
        # The waiter may already be gone (timeout)
        if self._future is None or self._future.done():
            return
        if isinstance(outcome, BaseException):
            self._future.set_exception(outcome)
        else:
            self._future.set_result(outcome)

    async def start(self) -> int:
        """
        Start the callback server on the first port that binds.

        Returns:
            The bound port

        Raises:
            PortUnavailableError: No candidate port could be bound in time
        """
        if self.runner is not None or self._future is not None:
            raise RuntimeError("Callback server already started")

        self._future = asyncio.get_running_loop().create_future()

        # Access log disabled: request lines carry the authorization code
        runner = web.AppRunner(self.app, access_log=None)
        await runner.setup()

        for port in self.ports:
            site = web.TCPSite(runner, host=self.host, port=port)
            try:
                await asyncio.wait_for(site.start(), timeout=self.ready_timeout)
            except (OSError, asyncio.TimeoutError) as e:
                logger.debug(f"Callback port {port} unavailable: {e!r}")
                await site.stop()
                continue

            self.runner = runner
            self.port = port
            logger.info(f"OAuth callback server listening on port {port}")
            return port

        await runner.cleanup()
        logger.error(f"No callback port available (tried {list(self.ports)})")
        raise PortUnavailableError(self.ports)

    async def wait_for_callback(self, timeout: float) -> CallbackResult:
        """
        Wait for OAuth callback.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            CallbackResult with the authorization code

        Raises:
            AuthTimeoutError: No callback within ``timeout``
            IssuerError: Issuer redirected with an error
            AuthCancelledError: ``cancel()`` was called
        """
        if self._future is None:
            raise RuntimeError("Callback server not started")

        try:
            return await asyncio.wait_for(self._future, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"OAuth callback timeout after {timeout} seconds")
            raise AuthTimeoutError(timeout) from None

    def cancel(self) -> bool:
        """
        Resolve the pending callback as cancelled.

        Returns:
            True if an outcome was still pending
        """
        if self._completed or self._future is None:
            return False
        self._completed = True
        logger.info("OAuth callback wait cancelled")
        self._schedule_finish(AuthCancelledError())
        return True

    async def stop(self) -> None:
        """Stop the callback server and release its port (idempotent)"""
        runner, self.runner = self.runner, None
        if runner is not None:
            await runner.cleanup()
            logger.info(f"OAuth callback server on port {self.port} stopped")

        # Make sure a teardown started by the handler has released the port too
        task = self._finish_task
        if task is not None and task is not asyncio.current_task() and not task.done():
            await task

        # A cancel raced ahead of wait_for_callback leaves an outcome nobody awaits
        future = self._future
        if future is not None and future.done() and not future.cancelled():
            future.exception()


async def start_callback_server(expected_state: str, config: OAuthConfig) -> OAuthCallbackServer:
    """
    Start OAuth callback server.

    Args:
        expected_state: Expected state parameter for CSRF protection
        config: OAuth configuration (ports, path, host, ready timeout)

    Returns:
        Running OAuthCallbackServer instance
    """
    server = OAuthCallbackServer.from_config(expected_state, config)
    await server.start()
    return server
