import json
import logging
import os
import platform
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List

from settings import TOKEN_FILE, GOOGLE_AUTH_URI, GOOGLE_TOKEN_URI

logger = logging.getLogger(__name__)

CREDENTIALS_FILENAME = "credentials.json"


@dataclass(frozen=True)
class ClientCredentials:
    """OAuth client registration loaded from a Google Cloud Console JSON file

    Attributes:
        client_id: OAuth client identifier
        client_secret: OAuth client secret
        redirect_uris: Redirect URIs registered for the client
        auth_uri: Provider authorization endpoint
        token_uri: Provider token endpoint
    """
    client_id: str
    client_secret: str
    redirect_uris: List[str] = field(default_factory=list)
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientCredentials":
        """Build from the parsed JSON file (``installed`` or ``web`` section)

        Raises:
            ValueError: If neither section is present or required keys are missing
        """
        if not isinstance(data, dict):
            raise ValueError("Credentials file must contain a JSON object")

        section = data.get("installed") or data.get("web")
        if not isinstance(section, dict):
            raise ValueError("Credentials file has no 'installed' or 'web' section")

        missing = [key for key in ("client_id", "client_secret") if not section.get(key)]
        if missing:
            raise ValueError(f"Credentials file is missing {', '.join(missing)}")

        return cls(
            client_id=section["client_id"],
            client_secret=section["client_secret"],
            redirect_uris=list(section.get("redirect_uris") or []),
            auth_uri=section.get("auth_uri") or GOOGLE_AUTH_URI,
            token_uri=section.get("token_uri") or GOOGLE_TOKEN_URI,
        )


def load_client_credentials(credentials_path) -> ClientCredentials:
    """Read and parse an OAuth client credentials file

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or has the wrong shape
    """
    path = Path(credentials_path)
    data = json.loads(path.read_text())
    return ClientCredentials.from_dict(data)


class TokenStorage:
    """Token file storage with restrictive file permissions"""

    def __init__(self, token_file: Optional[os.PathLike] = None):
        self.token_path = Path(token_file if token_file else TOKEN_FILE).expanduser()

    def _ensure_secure_directory(self):
        """Create parent directory with secure permissions"""
        parent_dir = self.token_path.parent
        if not parent_dir.exists():
            parent_dir.mkdir(parents=True, exist_ok=True)
            # Set directory permissions to 700 on Unix-like systems
            if platform.system() != "Windows":
                os.chmod(parent_dir, 0o700)

    def exists(self) -> bool:
        return self.token_path.exists()

    def save_tokens(self, token_data: Dict[str, Any]):
        """Write the token record as JSON

        Raises:
            OSError: If the directory or file cannot be written
        """
        self._ensure_secure_directory()
        self.token_path.write_text(json.dumps(token_data, indent=2))

        if platform.system() != "Windows":
            os.chmod(self.token_path, 0o600)

        logger.debug(f"Saved tokens to {self.token_path}")

    def load_tokens(self) -> Optional[Dict[str, Any]]:
        """Load the token record, or None if it is missing or unreadable"""
        if not self.token_path.exists():
            logger.debug(f"No token file at {self.token_path}")
            return None

        try:
            data = json.loads(self.token_path.read_text())
        except (json.JSONDecodeError, IOError) as e:
            logger.debug(f"Could not read token file {self.token_path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.debug(f"Token file {self.token_path} does not contain a JSON object")
            return None
        return data

    def clear_tokens(self) -> bool:
        """Remove stored tokens

        Returns:
            True if a token file was deleted, False if there was none

        Raises:
            OSError: If the file exists but cannot be removed
        """
        if not self.token_path.exists():
            return False
        self.token_path.unlink()
        logger.info(f"Removed token file {self.token_path}")
        return True

    def install_credentials(self, credentials_path: os.PathLike) -> Path:
        """Copy the client credentials next to the token file

        Nothing is copied when ``credentials_path`` already is that file.

        Returns:
            Path of the credentials copy beside the token file
        """
        self._ensure_secure_directory()
        target = self.credentials_file
        source = Path(credentials_path).expanduser()
        if source.resolve() != target.resolve():
            shutil.copyfile(source, target)
            logger.debug(f"Copied credentials from {source} to {target}")
        return target

    @property
    def token_file(self) -> Path:
        """Get the token file path"""
        return self.token_path

    @property
    def credentials_file(self) -> Path:
        """Credentials copy kept alongside the token file"""
        return self.token_path.parent / CREDENTIALS_FILENAME
