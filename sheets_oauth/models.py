"""Result records for the Google OAuth flow"""

from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple


class CallbackResult(NamedTuple):
    """Authorization code and state delivered to the loopback listener"""
    code: str
    state: str


class AuthorizationRequest(NamedTuple):
    """Authorization URL together with the state embedded in it"""
    url: str
    state: str
    redirect_uri: str


@dataclass
class LoginResult:
    """Outcome of a login attempt

    Attributes:
        success: Whether tokens were obtained and saved
        message: Human readable summary
    """
    success: bool
    message: str


@dataclass
class LogoutResult:
    """Outcome of a logout

    Attributes:
        success: False only when the token file could not be removed
        message: Human readable summary
    """
    success: bool
    message: str


@dataclass
class AuthStatus:
    """Whether a usable client can be rebuilt from stored files

    Attributes:
        authenticated: True when a client could be constructed
        token_path: Token file that was inspected
    """
    authenticated: bool
    token_path: Path
