"""Shared utilities package for sheets-cli"""

from .storage import ClientCredentials, TokenStorage, load_client_credentials
from .debug_console import (
    DebugCapturingConsole,
    create_debug_console,
    setup_debug_logger,
)

__all__ = [
    "ClientCredentials",
    "TokenStorage",
    "load_client_credentials",
    "DebugCapturingConsole",
    "create_debug_console",
    "setup_debug_logger",
]
