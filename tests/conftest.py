import json
import socket

import pytest

from tests.helpers import CLIENT_CONFIG


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "downloads" / "client_secret.json"
    path.parent.mkdir()
    path.write_text(json.dumps(CLIENT_CONFIG))
    return path


@pytest.fixture
def token_path(tmp_path):
    return tmp_path / "config" / "token.json"
