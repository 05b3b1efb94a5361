"""CLI entry point and argument parsing"""

import sys
import argparse
import logging
from typing import List, Optional
from rich.console import Console

import settings
from cli.auth_handlers import handle_login, handle_logout, handle_status
from cli.debug_setup import setup_logging
from cli.sheets_handlers import SHEETS_COMMANDS, run_sheets_command

logger = logging.getLogger(__name__)

AUTH_COMMANDS = {
    "login": handle_login,
    "status": handle_status,
    "logout": handle_logout,
}


def _add_values_options(parser: argparse.ArgumentParser):
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--values", help='JSON array of rows, e.g. \'[["Name", "Age"], ["Alice", 30]]\'')
    source.add_argument("--csv", help="CSV file with the rows to write ('-' reads stdin)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sheets-cli",
        description="Authenticate with Google and work with Google Sheets from the terminal",
    )
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--token-file",
        default=None,
        help=f"Token file location (default: {settings.TOKEN_FILE})"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    # auth
    auth = commands.add_parser("auth", help="Manage the Google OAuth session")
    auth_commands = auth.add_subparsers(dest="auth_command", required=True)

    login = auth_commands.add_parser("login", help="Log in through the browser")
    login.add_argument(
        "--credentials",
        default=None,
        help=f"OAuth client JSON from Google Cloud Console (default: {settings.CREDENTIALS_FILE})"
    )
    login.add_argument("--no-browser", action="store_true", help="Only print the authorization URL")
    login.add_argument(
        "--timeout",
        type=float,
        default=settings.AUTH_TIMEOUT,
        help="Seconds to wait for the browser redirect (default: %(default)s)"
    )
    auth_commands.add_parser("status", help="Show whether stored credentials are usable")
    auth_commands.add_parser("logout", help="Delete the stored token")

    # spreadsheets
    create = commands.add_parser("create", help="Create a spreadsheet")
    create.add_argument("title")

    list_cmd = commands.add_parser("list", help="List recently modified spreadsheets")
    list_cmd.add_argument("--limit", type=int, default=settings.LIST_LIMIT)
    list_cmd.add_argument("--name", default=None, help="Only spreadsheets whose name contains this text")

    info = commands.add_parser("info", help="Show a spreadsheet and its sheets")
    info.add_argument("spreadsheet_id")

    read = commands.add_parser("read", help="Read cell values")
    read.add_argument("spreadsheet_id")
    read.add_argument("range", help="A1 notation, e.g. Sheet1!A1:C10")

    write = commands.add_parser("write", help="Overwrite cell values")
    write.add_argument("spreadsheet_id")
    write.add_argument("range")
    _add_values_options(write)

    append = commands.add_parser("append", help="Append rows after existing data")
    append.add_argument("spreadsheet_id")
    append.add_argument("range")
    _add_values_options(append)

    clear = commands.add_parser("clear", help="Clear cell values")
    clear.add_argument("spreadsheet_id")
    clear.add_argument("range")

    for name in ("create", "list", "info", "read"):
        commands.choices[name].add_argument("--json", action="store_true", help="Print JSON instead of a table")

    # Also accepted after the sub-command; only set when given there
    leaf_parsers = list(auth_commands.choices.values())
    leaf_parsers += [p for name, p in commands.choices.items() if name != "auth"]
    for leaf in leaf_parsers:
        leaf.add_argument("--token-file", default=argparse.SUPPRESS, help="Token file location")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    console = setup_logging(args.debug)
    output = Console()

    try:
        if args.command == "auth":
            return AUTH_COMMANDS[args.auth_command](args, console)
        if args.command in SHEETS_COMMANDS:
            return run_sheets_command(args, console, output)
        parser.error(f"Unknown command: {args.command}")
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        logger.debug("Unhandled error", exc_info=True)
        return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
