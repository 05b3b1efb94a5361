import asyncio
import datetime
import io
import json
from urllib.parse import parse_qs, urlparse

import httpx
from rich.console import Console

import sheets_oauth.session as session
from sheets_oauth import (
    create_authorization_request,
    get_auth_client,
    get_auth_status,
    login,
    logout,
    start_callback_server,
)
from utils.storage import ClientCredentials
from tests.helpers import CLIENT_CONFIG, fetch


def _quiet_console():
    return Console(file=io.StringIO())


def _token_endpoint(request):
    return httpx.Response(200, json={
        "access_token": "ya29.access",
        "refresh_token": "1//refresh",
        "expires_in": 3599,
        "token_type": "Bearer",
        "scope": "https://www.googleapis.com/auth/spreadsheets https://www.googleapis.com/auth/drive.readonly",
    })


def _fake_browser(monkeypatch, port, make_query):
    """Replace the browser with one that follows the redirect to the listener"""
    opened = []
    requests = []

    def open_url(url):
        opened.append(url)
        state = parse_qs(urlparse(url).query)["state"][0]
        requests.append(asyncio.get_running_loop().create_task(
            fetch(f"http://127.0.0.1:{port}/?{make_query(state)}")
        ))
        return True

    monkeypatch.setattr(session.webbrowser, "open", open_url)
    return opened


def _run_login(credentials_file, token_path, port, handler=_token_endpoint, timeout=5):
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await login(
                credentials_file,
                token_path,
                port=port,
                timeout=timeout,
                out=_quiet_console(),
                http_client=client,
            )

    return asyncio.run(scenario())


def test_authorization_url_requests_offline_access():
    client = ClientCredentials.from_dict(CLIENT_CONFIG)

    request = create_authorization_request(client, 3847)
    query = parse_qs(urlparse(request.url).query)

    assert request.url.startswith("https://accounts.google.com/o/oauth2/auth?")
    assert request.redirect_uri == "http://localhost:3847"
    assert query["redirect_uri"] == ["http://localhost:3847"]
    assert query["access_type"] == ["offline"]
    assert query["response_type"] == ["code"]
    assert query["state"] == [request.state]
    assert query["scope"][0].split() == [
        "https://www.googleapis.com/auth/spreadsheets",
        "https://www.googleapis.com/auth/drive.readonly",
    ]


def test_each_request_gets_a_fresh_state():
    client = ClientCredentials.from_dict(CLIENT_CONFIG)

    assert create_authorization_request(client, 3847).state != create_authorization_request(client, 3847).state


def test_login_without_credentials_file_does_no_network_io(tmp_path, token_path, free_port):
    def handler(request):
        raise AssertionError("token endpoint must not be called")

    missing = tmp_path / "missing.json"
    result = _run_login(missing, token_path, free_port, handler=handler)

    assert result.success is False
    assert str(missing) in result.message
    assert not token_path.exists()


def test_login_saves_token_and_credentials(monkeypatch, credentials_file, token_path, free_port):
    opened = _fake_browser(monkeypatch, free_port, lambda state: f"code=4/abc&state={state}")

    result = _run_login(credentials_file, token_path, free_port)

    assert result.success is True
    assert result.message == "Authentication successful"
    assert len(opened) == 1

    saved = json.loads(token_path.read_text())
    assert saved["access_token"] == "ya29.access"
    assert saved["refresh_token"] == "1//refresh"
    assert "expiry_date" in saved

    copied = token_path.parent / "credentials.json"
    assert json.loads(copied.read_text()) == CLIENT_CONFIG
    assert get_auth_status(token_path).authenticated is True


def test_login_reports_provider_error(monkeypatch, credentials_file, token_path, free_port):
    _fake_browser(monkeypatch, free_port, lambda state: f"error=access_denied&state={state}")

    result = _run_login(credentials_file, token_path, free_port)

    assert result.success is False
    assert "access_denied" in result.message
    assert not token_path.exists()


def test_login_reports_state_mismatch(monkeypatch, credentials_file, token_path, free_port):
    _fake_browser(monkeypatch, free_port, lambda state: "code=4/abc&state=forged")

    result = _run_login(credentials_file, token_path, free_port)

    assert result.success is False
    assert "state mismatch" in result.message


def test_login_reports_token_endpoint_failure(monkeypatch, credentials_file, token_path, free_port):
    _fake_browser(monkeypatch, free_port, lambda state: f"code=4/abc&state={state}")

    def handler(request):
        return httpx.Response(400, json={"error": "invalid_grant"})

    result = _run_login(credentials_file, token_path, free_port, handler=handler)

    assert result.success is False
    assert result.message.startswith("Authentication failed:")
    assert not token_path.exists()


def test_login_times_out_without_browser(monkeypatch, credentials_file, token_path, free_port):
    monkeypatch.setattr(session.webbrowser, "open", lambda url: False)

    result = _run_login(credentials_file, token_path, free_port, timeout=0.2)

    assert result.success is False
    assert "timed out" in result.message


def test_login_survives_browser_launch_failure(monkeypatch, credentials_file, token_path, free_port):
    requests = []

    def broken_browser(url):
        state = parse_qs(urlparse(url).query)["state"][0]
        requests.append(asyncio.get_running_loop().create_task(
            fetch(f"http://127.0.0.1:{free_port}/?code=4/abc&state={state}")
        ))
        raise session.webbrowser.Error("no browser available")

    monkeypatch.setattr(session.webbrowser, "open", broken_browser)

    result = _run_login(credentials_file, token_path, free_port)

    assert result.success is True


def _write_session(token_path, token):
    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(json.dumps(token))
    (token_path.parent / "credentials.json").write_text(json.dumps(CLIENT_CONFIG))


def test_client_from_minimal_token(token_path):
    _write_session(token_path, {"access_token": "t", "expiry_date": 0})

    client = get_auth_client(token_path)

    assert client is not None
    assert client.token == "t"
    assert client.client_id == "1234-test.apps.googleusercontent.com"
    assert client.expiry == datetime.datetime(1970, 1, 1)

    token_path.unlink()
    assert get_auth_status(token_path).authenticated is False


def test_client_uses_explicit_credentials_path(tmp_path, credentials_file):
    token_path = tmp_path / "elsewhere" / "token.json"
    token_path.parent.mkdir()
    token_path.write_text(json.dumps({"access_token": "t", "refresh_token": "r"}))

    assert get_auth_client(token_path) is None
    client = get_auth_client(token_path, credentials_file)
    assert client is not None
    assert client.refresh_token == "r"


def test_status_without_token_file(token_path):
    status = get_auth_status(token_path)

    assert status.authenticated is False
    assert status.token_path == token_path


def test_corrupt_or_unusable_files_mean_not_authenticated(token_path):
    _write_session(token_path, {"access_token": "t"})
    (token_path.parent / "credentials.json").write_text("{broken")
    assert get_auth_client(token_path) is None

    _write_session(token_path, {"token_type": "Bearer"})
    assert get_auth_client(token_path) is None

    token_path.write_text(json.dumps({"access_token": "t"}))
    (token_path.parent / "credentials.json").unlink()
    assert get_auth_client(token_path) is None


def test_logout_is_idempotent(token_path):
    _write_session(token_path, {"access_token": "t"})

    first = logout(token_path)
    second = logout(token_path)

    assert (first.success, first.message) == (True, "Logged out successfully")
    assert (second.success, second.message) == (True, "No active session")
    assert not token_path.exists()


def test_logout_reports_filesystem_errors(token_path, monkeypatch):
    _write_session(token_path, {"access_token": "t"})

    def refuse(self):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(session.TokenStorage, "clear_tokens", refuse)
    result = logout(token_path)

    assert result.success is False
    assert "read-only filesystem" in result.message


def _assert_port_released(port):
    async def rebind():
        server = await start_callback_server("again", port)
        await server.stop()

    asyncio.run(rebind())


def test_login_survives_unexpected_browser_exception(monkeypatch, credentials_file, token_path, free_port):
    requests = []

    def crashing_browser(url):
        state = parse_qs(urlparse(url).query)["state"][0]
        requests.append(asyncio.get_running_loop().create_task(
            fetch(f"http://127.0.0.1:{free_port}/?code=4/abc&state={state}")
        ))
        raise RuntimeError("no display")

    monkeypatch.setattr(session.webbrowser, "open", crashing_browser)

    result = _run_login(credentials_file, token_path, free_port)

    assert result.success is True
    _assert_port_released(free_port)


def test_login_releases_port_when_output_fails(credentials_file, token_path, free_port):
    class BrokenConsole(Console):
        def print(self, *objects, **kwargs):
            raise OSError("stdout closed")

    async def scenario():
        return await login(credentials_file, token_path, port=free_port, timeout=5, out=BrokenConsole())

    result = asyncio.run(scenario())

    assert result.success is False
    assert "stdout closed" in result.message
    _assert_port_released(free_port)
