"""
Local OAuth callback server for the loopback redirect
"""
import asyncio
import logging
from typing import Optional
from aiohttp import web

from settings import AUTH_TIMEOUT
from .errors import CallbackTimeoutError, OAuthProviderError, StateMismatchError
from .models import CallbackResult

logger = logging.getLogger(__name__)

# Delay between answering the terminal request and closing the listener
SHUTDOWN_GRACE = 0.1

SUCCESS_PAGE = """
<html>
    <body>
        <h1>Authentication successful!</h1>
        <p>You can close this window and return to the terminal.</p>
    </body>
</html>
"""

FAILURE_PAGE = """
<html>
    <body>
        <h1>Authentication failed</h1>
        <p>{reason}</p>
        <p>You can close this window.</p>
    </body>
</html>
"""


class OAuthCallbackServer:
    """Single-use local HTTP server that captures one OAuth redirect

    Every path is accepted; only the ``code``, ``error`` and ``state`` query
    parameters are read. The first request carrying a code or an error decides
    the outcome, anything after that is answered with ``Done``.
    """

    def __init__(self, expected_state: str, port: int, host: str = "localhost"):
        self.expected_state = expected_state
        self.port = port
        self.host = host
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._outcome: Optional[asyncio.Future] = None

        # Path-agnostic: the redirect URI has no path component
        self.app.router.add_route("GET", "/{tail:.*}", self._handle_callback)

    @property
    def done(self) -> bool:
        return self._outcome is not None and self._outcome.done()

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Handle OAuth callback request"""
        if self._outcome is None or self._outcome.done():
            return web.Response(text="Done")

        code = request.query.get("code")
        state = request.query.get("state")
        error = request.query.get("error")

        if error:
            description = request.query.get("error_description")
            logger.warning(f"OAuth provider returned error: {error}")
            self._outcome.set_exception(OAuthProviderError(error, description))
            return web.Response(
                text=FAILURE_PAGE.format(reason=f"Error: {error}"),
                content_type="text/html",
                status=400,
            )

        # Favicon fetches and premature polls carry none of the OAuth parameters
        if not code and state is None:
            return web.Response(text="Waiting for OAuth callback...")

        if state != self.expected_state:
            logger.warning("OAuth callback state does not match the authorization request")
            self._outcome.set_exception(StateMismatchError())
            return web.Response(
                text=FAILURE_PAGE.format(reason="State mismatch. Close this window and retry."),
                content_type="text/html",
                status=400,
            )

        if code:
            self._outcome.set_result(CallbackResult(code=code, state=state))
            return web.Response(text=SUCCESS_PAGE, content_type="text/html")

        return web.Response(text="Waiting for OAuth callback...")

    async def start(self) -> None:
        """Bind the listener

        Raises:
            OSError: If the port is already in use
        """
        self._outcome = asyncio.get_running_loop().create_future()
        self.runner = web.AppRunner(self.app, access_log=None)
        await self.runner.setup()

        site = web.TCPSite(self.runner, host=self.host, port=self.port)
        try:
            await site.start()
        except OSError:
            await self.stop()
            raise
        logger.debug(f"OAuth callback server listening on port {self.port}")

    async def wait_for_callback(self, timeout: float = AUTH_TIMEOUT) -> CallbackResult:
        """
        Wait for the OAuth redirect, then shut the listener down.

        Args:
            timeout: Maximum time to wait in seconds (default 5 minutes)

        Returns:
            CallbackResult with the authorization code

        Raises:
            OAuthProviderError: The provider reported an error
            StateMismatchError: The callback state was not the expected one
            CallbackTimeoutError: Nothing conclusive arrived within ``timeout``
        """
        if self._outcome is None:
            raise RuntimeError("Callback server has not been started")

        try:
            return await asyncio.wait_for(self._outcome, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"OAuth callback timeout after {timeout} seconds")
            raise CallbackTimeoutError(timeout) from None
        finally:
            if self._outcome.done() and not self._outcome.cancelled():
                # Let the final page reach the browser before closing
                await asyncio.sleep(SHUTDOWN_GRACE)
            await self.stop()

    async def stop(self) -> None:
        """Stop the callback server and release the port"""
        if self._outcome is not None and not self._outcome.done():
            self._outcome.cancel()
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.debug(f"OAuth callback server on port {self.port} stopped")


async def start_callback_server(expected_state: str, port: int) -> OAuthCallbackServer:
    """
    Start OAuth callback server.

    Args:
        expected_state: State embedded in the authorization URL
        port: Local port to bind

    Returns:
        OAuthCallbackServer instance
    """
    server = OAuthCallbackServer(expected_state, port)
    await server.start()
    return server


async def wait_for_callback(port: int, expected_state: str, timeout: float = AUTH_TIMEOUT) -> str:
    """
    Listen on ``port`` for a single OAuth redirect and return its code.

    The port is released before this returns or raises.
    """
    server = await start_callback_server(expected_state, port)
    result = await server.wait_for_callback(timeout=timeout)
    return result.code
