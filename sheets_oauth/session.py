"""Login, status and logout for the Google OAuth session

``login`` runs the loopback authorization-code flow and saves the token;
``get_auth_client`` rebuilds ``google.oauth2.credentials.Credentials`` from the
saved files. The session functions do not raise: failures come back as result
records (or ``None``) and the reason goes to the log.

The token file is otherwise passed through as-is; the only shape requirement
is an ``access_token`` or a ``refresh_token``, since a record with neither can
never authorize a request.
"""

import datetime
import logging
import os
import webbrowser
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from google.oauth2.credentials import Credentials
from rich.console import Console

from settings import AUTH_TIMEOUT, OAUTH_CALLBACK_PORT
from utils.storage import ClientCredentials, TokenStorage, load_client_credentials
from .authorization import create_authorization_request
from .callback_server import start_callback_server
from .models import AuthStatus, LoginResult, LogoutResult
from .token_exchange import exchange_code_for_tokens

logger = logging.getLogger(__name__)

# Status output goes to stderr so command output on stdout stays clean
console = Console(stderr=True)


def _expiry_from_record(token: Dict[str, Any]) -> Optional[datetime.datetime]:
    """Naive UTC expiry as google-auth expects, from ``expiry_date`` in ms"""
    expiry_date = token.get("expiry_date")
    if expiry_date is None:
        return None
    expiry = datetime.datetime.fromtimestamp(int(expiry_date) / 1000, tz=datetime.timezone.utc)
    return expiry.replace(tzinfo=None)


def credentials_from_token(token: Dict[str, Any], client: ClientCredentials) -> Credentials:
    """Build google-auth credentials from a stored token record

    Raises:
        ValueError: If the record carries neither an access nor a refresh token
    """
    access_token = token.get("access_token") or token.get("token")
    refresh_token = token.get("refresh_token")
    if not access_token and not refresh_token:
        raise ValueError("Token record has no access_token or refresh_token")

    scope = token.get("scope")
    scopes = scope.split() if isinstance(scope, str) else scope

    return Credentials(
        token=access_token,
        refresh_token=refresh_token,
        id_token=token.get("id_token"),
        token_uri=client.token_uri,
        client_id=client.client_id,
        client_secret=client.client_secret,
        scopes=scopes,
        expiry=_expiry_from_record(token),
    )


def _open_browser(url: str, out: Console) -> None:
    """Best-effort browser launch; the URL has already been printed"""
    try:
        opened = webbrowser.open(url)
    except Exception as e:
        logger.debug(f"Browser launch failed: {e}")
        opened = False

    if not opened:
        out.print("[yellow]Could not open browser automatically[/yellow]")


async def login(
    credentials_path: os.PathLike,
    token_path: Optional[os.PathLike] = None,
    *,
    port: int = OAUTH_CALLBACK_PORT,
    timeout: float = AUTH_TIMEOUT,
    open_browser: bool = True,
    out: Optional[Console] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> LoginResult:
    """
    Run the loopback OAuth flow and persist the resulting token.

    Args:
        credentials_path: OAuth client JSON downloaded from Google Cloud Console
        token_path: Where to save the token (default: settings.TOKEN_FILE)
        port: Local port for the redirect listener
        timeout: Seconds to wait for the browser round trip
        open_browser: Whether to try launching the system browser
        out: Console for user-facing progress output
        http_client: Optional HTTP client for the token exchange

    Returns:
        LoginResult with success flag and message
    """
    out = out or console
    credentials_path = Path(credentials_path).expanduser()
    storage = TokenStorage(token_path)

    if not credentials_path.exists():
        return LoginResult(False, f"Credentials file not found: {credentials_path}")

    try:
        client = load_client_credentials(credentials_path)
        request = create_authorization_request(client, port)
        logger.debug(f"Generated auth URL: {request.url[:60]}...")

        server = await start_callback_server(request.state, port)
        try:
            out.print("\nOpening browser for authentication...")
            out.print("If browser doesn't open, visit:")
            out.print(request.url, markup=False, highlight=False, soft_wrap=True)
            out.print()
            if open_browser:
                _open_browser(request.url, out)

            callback = await server.wait_for_callback(timeout=timeout)
        finally:
            await server.stop()
        logger.debug("Authorization code received, exchanging for tokens")

        token_record = await exchange_code_for_tokens(
            callback.code, client, request.redirect_uri, client=http_client
        )

        storage.install_credentials(credentials_path)
        storage.save_tokens(token_record)
    except Exception as e:
        logger.debug("Login failed", exc_info=True)
        return LoginResult(False, f"Authentication failed: {e}")

    logger.info(f"Saved token to {storage.token_file}")
    return LoginResult(True, "Authentication successful")


def get_auth_client(
    token_path: Optional[os.PathLike] = None,
    credentials_path: Optional[os.PathLike] = None,
) -> Optional[Credentials]:
    """
    Rebuild OAuth credentials from the saved token.

    Args:
        token_path: Token file (default: settings.TOKEN_FILE)
        credentials_path: Client credentials file (default: the copy saved next
            to the token file by ``login``)

    Returns:
        Credentials seeded with the stored token, or None when either file is
        missing or cannot be used
    """
    storage = TokenStorage(token_path)
    try:
        token = storage.load_tokens()
        if token is None:
            return None

        creds_file = Path(credentials_path).expanduser() if credentials_path else storage.credentials_file
        if not creds_file.exists():
            logger.debug(f"No credentials file at {creds_file}")
            return None

        client = load_client_credentials(creds_file)
        return credentials_from_token(token, client)
    except Exception as e:
        logger.debug(f"Could not rebuild OAuth client: {e}")
        return None


def get_auth_status(
    token_path: Optional[os.PathLike] = None,
    credentials_path: Optional[os.PathLike] = None,
) -> AuthStatus:
    """Report whether a client can be rebuilt from the saved files"""
    storage = TokenStorage(token_path)
    client = get_auth_client(storage.token_file, credentials_path)
    return AuthStatus(authenticated=client is not None, token_path=storage.token_file)


def logout(token_path: Optional[os.PathLike] = None) -> LogoutResult:
    """Delete the saved token; succeeds whether or not one existed"""
    storage = TokenStorage(token_path)
    try:
        if storage.clear_tokens():
            return LogoutResult(True, "Logged out successfully")
        return LogoutResult(True, "No active session")
    except OSError as e:
        logger.debug("Logout failed", exc_info=True)
        return LogoutResult(False, f"Logout failed: {e}")
