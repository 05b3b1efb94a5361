"""Authentication handlers for CLI"""

import asyncio
import logging
from typing import Optional

from google.oauth2.credentials import Credentials
from rich.markup import escape

import settings
from sheets_oauth import get_auth_client, get_auth_status, login, logout
from cli.status_display import show_auth_status

logger = logging.getLogger(__name__)


def handle_login(args, console) -> int:
    """
    Run the browser login flow

    Args:
        args: Parsed arguments (credentials, token_file, no_browser)
        console: Rich console for output

    Returns:
        Process exit code
    """
    credentials_path = args.credentials or settings.CREDENTIALS_FILE
    token_path = args.token_file or settings.TOKEN_FILE

    console.print("Starting OAuth login flow...")
    result = asyncio.run(login(
        credentials_path,
        token_path,
        timeout=args.timeout,
        open_browser=not args.no_browser,
        out=console,
    ))

    if result.success:
        console.print(f"[green][OK][/green] {escape(result.message)}")
        console.print(f"[dim]Token saved to {escape(str(token_path))}[/dim]")
        return 0

    console.print(f"[red][ERROR][/red] {escape(result.message)}")
    return 1


def handle_status(args, console) -> int:
    """Show whether stored credentials are usable"""
    status = get_auth_status(args.token_file or settings.TOKEN_FILE)
    show_auth_status(status, console)
    return 0 if status.authenticated else 1


def handle_logout(args, console) -> int:
    """Delete the stored token"""
    result = logout(args.token_file or settings.TOKEN_FILE)
    if result.success:
        console.print(f"[green][OK][/green] {escape(result.message)}")
        return 0
    console.print(f"[red][ERROR][/red] {escape(result.message)}")
    return 1


def require_auth_client(args, console) -> Optional[Credentials]:
    """
    Rebuild the OAuth client or explain how to log in

    Returns:
        Credentials, or None after printing an error
    """
    client = get_auth_client(args.token_file or settings.TOKEN_FILE)
    if client is None:
        console.print("[red]ERROR:[/red] Not authenticated. Run 'sheets-cli auth login' first")
        logger.debug("No usable token or credentials file")
    return client
