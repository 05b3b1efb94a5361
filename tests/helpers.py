import asyncio

import aiohttp


CLIENT_CONFIG = {
    "installed": {
        "client_id": "1234-test.apps.googleusercontent.com",
        "client_secret": "test-secret",
        "redirect_uris": ["http://localhost"],
        "auth_uri": "https://accounts.google.com/o/oauth2/auth",
        "token_uri": "https://oauth2.googleapis.com/token",
    }
}


async def fetch(url, attempts=100):
    """GET ``url``, retrying until the listener has bound its port"""
    for _ in range(attempts):
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url) as response:
                    return response.status, await response.text()
        except aiohttp.ClientConnectorError:
            await asyncio.sleep(0.02)
    raise AssertionError(f"Nothing listening at {url}")
