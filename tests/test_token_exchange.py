import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from sheets_oauth import TokenExchangeError, build_token_record, exchange_code_for_tokens
from utils.storage import ClientCredentials
from tests.helpers import CLIENT_CONFIG

CLIENT = ClientCredentials.from_dict(CLIENT_CONFIG)


def _exchange(handler):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await exchange_code_for_tokens("auth-code", CLIENT, "http://localhost:3847", client=client)

    return asyncio.run(scenario())


def test_exchange_posts_code_and_client_details():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["form"] = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
        return httpx.Response(200, json={
            "access_token": "ya29.token",
            "refresh_token": "1//refresh",
            "expires_in": 3599,
            "token_type": "Bearer",
            "scope": "https://www.googleapis.com/auth/spreadsheets",
        })

    record = _exchange(handler)

    assert seen["url"] == "https://oauth2.googleapis.com/token"
    assert seen["form"] == {
        "grant_type": "authorization_code",
        "code": "auth-code",
        "client_id": CLIENT.client_id,
        "client_secret": "test-secret",
        "redirect_uri": "http://localhost:3847",
    }
    assert record["access_token"] == "ya29.token"
    assert record["refresh_token"] == "1//refresh"
    assert "expires_in" not in record
    assert isinstance(record["expiry_date"], int)


def test_rejected_code_raises():
    def handler(request):
        return httpx.Response(400, json={"error": "invalid_grant"})

    with pytest.raises(TokenExchangeError, match="400"):
        _exchange(handler)


def test_network_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TokenExchangeError, match="request failed"):
        _exchange(handler)


def test_response_without_access_token_raises():
    def handler(request):
        return httpx.Response(200, json={"token_type": "Bearer"})

    with pytest.raises(TokenExchangeError, match="access_token"):
        _exchange(handler)


def test_build_token_record_converts_expiry_to_milliseconds():
    record = build_token_record({"access_token": "t", "expires_in": 3600}, now=1000.0)

    assert record == {"access_token": "t", "expiry_date": 4_600_000}


def test_build_token_record_without_expiry():
    assert build_token_record({"access_token": "t"}) == {"access_token": "t"}
