"""
Google OAuth (loopback authorization-code flow) for sheets-cli
"""
from .errors import (
    AuthError,
    OAuthProviderError,
    StateMismatchError,
    CallbackTimeoutError,
    TokenExchangeError,
)
from .models import (
    CallbackResult,
    AuthorizationRequest,
    LoginResult,
    LogoutResult,
    AuthStatus,
)
from .authorization import (
    create_state,
    loopback_redirect_uri,
    create_authorization_request,
)
from .callback_server import (
    OAuthCallbackServer,
    start_callback_server,
    wait_for_callback,
)
from .token_exchange import (
    build_token_record,
    exchange_code_for_tokens,
)
from .session import (
    credentials_from_token,
    login,
    get_auth_client,
    get_auth_status,
    logout,
)

__all__ = [
    # Errors
    "AuthError",
    "OAuthProviderError",
    "StateMismatchError",
    "CallbackTimeoutError",
    "TokenExchangeError",
    # Models
    "CallbackResult",
    "AuthorizationRequest",
    "LoginResult",
    "LogoutResult",
    "AuthStatus",
    # Authorization
    "create_state",
    "loopback_redirect_uri",
    "create_authorization_request",
    # Callback Server
    "OAuthCallbackServer",
    "start_callback_server",
    "wait_for_callback",
    # Token Exchange
    "build_token_record",
    "exchange_code_for_tokens",
    # Session
    "credentials_from_token",
    "login",
    "get_auth_client",
    "get_auth_status",
    "logout",
]
