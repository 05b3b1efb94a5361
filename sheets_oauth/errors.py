"""Exceptions raised during the Google OAuth login flow"""


class AuthError(Exception):
    """Base class for login flow failures"""


class OAuthProviderError(AuthError):
    """The identity provider redirected back with an ``error`` parameter"""

    def __init__(self, error: str, description: str = None):
        self.error = error
        self.description = description
        message = f"OAuth error: {error}"
        if description:
            message = f"{message} ({description})"
        super().__init__(message)


class StateMismatchError(AuthError):
    """The callback ``state`` does not match the one sent in the authorization URL"""

    def __init__(self):
        super().__init__("OAuth state mismatch")


class CallbackTimeoutError(AuthError, TimeoutError):
    """No terminal callback arrived before the deadline"""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"OAuth timed out after {timeout:g} seconds")


class TokenExchangeError(AuthError):
    """The token endpoint could not be reached or rejected the code"""
