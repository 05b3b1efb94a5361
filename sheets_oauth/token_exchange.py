"""
Google OAuth authorization code exchange
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx

from settings import TOKEN_EXCHANGE_TIMEOUT
from utils.storage import ClientCredentials
from .errors import TokenExchangeError

logger = logging.getLogger(__name__)


def build_token_record(data: Dict[str, Any], now: Optional[float] = None) -> Dict[str, Any]:
    """
    Turn a token endpoint response into the stored token record.

    ``expires_in`` (seconds from now) becomes ``expiry_date`` in epoch
    milliseconds; every other field is kept as returned.
    """
    record = dict(data)
    expires_in = record.pop("expires_in", None)
    if expires_in is not None:
        issued_at = time.time() if now is None else now
        record["expiry_date"] = int((issued_at + int(expires_in)) * 1000)
    return record


async def exchange_code_for_tokens(
    code: str,
    credentials: ClientCredentials,
    redirect_uri: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """
    Exchange an authorization code for access and refresh tokens.

    Args:
        code: Authorization code from the callback
        credentials: OAuth client registration
        redirect_uri: Redirect URI used in the authorization request
        client: Optional HTTP client to send the request with

    Returns:
        Token record ready to be saved

    Raises:
        TokenExchangeError: If the endpoint is unreachable or rejects the code
    """
    payload = {
        "grant_type": "authorization_code",
        "code": code,
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
        "redirect_uri": redirect_uri,
    }

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=TOKEN_EXCHANGE_TIMEOUT) as owned_client:
                response = await owned_client.post(credentials.token_uri, data=payload)
        else:
            response = await client.post(credentials.token_uri, data=payload)
    except httpx.HTTPError as e:
        raise TokenExchangeError(f"Token exchange request failed: {e}") from e

    if response.status_code != 200:
        logger.debug(f"Token endpoint response: {response.text}")
        raise TokenExchangeError(f"Token exchange failed: {response.status_code} - {response.text}")

    try:
        data = response.json()
    except ValueError as e:
        raise TokenExchangeError("Token endpoint returned invalid JSON") from e

    if not isinstance(data, dict) or "access_token" not in data:
        raise TokenExchangeError("Token endpoint response has no access_token")

    logger.info("OAuth tokens obtained from token endpoint")
    return build_token_record(data)
