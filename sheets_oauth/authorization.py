"""
Google OAuth authorization URL construction
"""
import secrets
from urllib.parse import urlencode

from settings import SCOPES
from utils.storage import ClientCredentials
from .models import AuthorizationRequest


def create_state() -> str:
    """
    Generate random state parameter correlating the request with its callback.

    Returns:
        str: 32-byte random state string
    """
    return secrets.token_urlsafe(32)


def loopback_redirect_uri(port: int) -> str:
    """Redirect URI pointing at the local callback listener"""
    return f"http://localhost:{port}"


def create_authorization_request(credentials: ClientCredentials, port: int) -> AuthorizationRequest:
    """
    Build the Google authorization URL for the loopback flow.

    Requests offline access so the token endpoint also returns a refresh token.

    Args:
        credentials: OAuth client registration
        port: Port the callback listener will bind

    Returns:
        AuthorizationRequest: Tuple of (url, state, redirect_uri)
    """
    state = create_state()
    redirect_uri = loopback_redirect_uri(port)

    params = {
        "response_type": "code",
        "client_id": credentials.client_id,
        "redirect_uri": redirect_uri,
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        "state": state,
    }

    url = f"{credentials.auth_uri}?{urlencode(params)}"

    return AuthorizationRequest(url=url, state=state, redirect_uri=redirect_uri)
