"""Spreadsheet command handlers for CLI"""

import csv
import json
import logging
import sys
from typing import Any, List

from rich.markup import escape

from sheets_api import (
    SheetsAPIError,
    append_rows,
    build_drive_service,
    build_sheets_service,
    clear_range,
    create_spreadsheet,
    get_spreadsheet,
    list_spreadsheets,
    read_range,
    write_range,
)
from cli.auth_handlers import require_auth_client
from cli.status_display import show_spreadsheet, show_spreadsheets, show_values

logger = logging.getLogger(__name__)


def parse_values(args) -> List[List[Any]]:
    """
    Rows to write, from ``--values`` (JSON array of arrays) or ``--csv``

    Raises:
        ValueError: If neither source is given or the data is malformed
    """
    if args.values is not None:
        values = json.loads(args.values)
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise ValueError("--values must be a JSON array of arrays, e.g. '[[\"a\", 1]]'")
        return values

    if args.csv is not None:
        if args.csv == "-":
            return [row for row in csv.reader(sys.stdin)]
        with open(args.csv, newline="", encoding="utf-8") as f:
            return [row for row in csv.reader(f)]

    raise ValueError("Provide cell values with --values or --csv")


def _emit_json(data, output):
    output.print_json(json.dumps(data, default=str))


def handle_create(args, console, output) -> int:
    credentials = require_auth_client(args, console)
    if credentials is None:
        return 1

    info = create_spreadsheet(build_sheets_service(credentials), args.title)
    if args.json:
        _emit_json(vars(info), output)
    else:
        title = escape(info.title or "")
        console.print(f"[green][OK][/green] Created spreadsheet '{title}'")
        output.print(info.spreadsheet_url or info.spreadsheet_id, highlight=False, soft_wrap=True)
    return 0


def handle_list(args, console, output) -> int:
    credentials = require_auth_client(args, console)
    if credentials is None:
        return 1

    spreadsheets = list_spreadsheets(build_drive_service(credentials), limit=args.limit, name_contains=args.name)
    if args.json:
        _emit_json([vars(s) for s in spreadsheets], output)
    else:
        show_spreadsheets(spreadsheets, output)
    return 0


def handle_info(args, console, output) -> int:
    credentials = require_auth_client(args, console)
    if credentials is None:
        return 1

    info, tabs = get_spreadsheet(build_sheets_service(credentials), args.spreadsheet_id)
    if args.json:
        _emit_json({**vars(info), "sheets": [vars(t) for t in tabs]}, output)
    else:
        show_spreadsheet(info, tabs, output)
    return 0


def handle_read(args, console, output) -> int:
    credentials = require_auth_client(args, console)
    if credentials is None:
        return 1

    values = read_range(build_sheets_service(credentials), args.spreadsheet_id, args.range)
    if args.json:
        _emit_json(values, output)
    else:
        show_values(values, output)
    return 0


def handle_write(args, console, output) -> int:
    values = parse_values(args)
    credentials = require_auth_client(args, console)
    if credentials is None:
        return 1

    updated = write_range(build_sheets_service(credentials), args.spreadsheet_id, args.range, values)
    console.print(f"[green][OK][/green] Updated {updated} cell(s)")
    return 0


def handle_append(args, console, output) -> int:
    values = parse_values(args)
    credentials = require_auth_client(args, console)
    if credentials is None:
        return 1

    appended = append_rows(build_sheets_service(credentials), args.spreadsheet_id, args.range, values)
    console.print(f"[green][OK][/green] Appended {appended} row(s)")
    return 0


def handle_clear(args, console, output) -> int:
    credentials = require_auth_client(args, console)
    if credentials is None:
        return 1

    cleared = clear_range(build_sheets_service(credentials), args.spreadsheet_id, args.range)
    console.print(f"[green][OK][/green] Cleared {escape(str(cleared))}")
    return 0


SHEETS_COMMANDS = {
    "create": handle_create,
    "list": handle_list,
    "info": handle_info,
    "read": handle_read,
    "write": handle_write,
    "append": handle_append,
    "clear": handle_clear,
}


def run_sheets_command(args, console, output) -> int:
    """Dispatch a spreadsheet sub-command, reporting API errors"""
    handler = SHEETS_COMMANDS[args.command]
    try:
        return handler(args, console, output)
    except SheetsAPIError as e:
        console.print(f"[red]ERROR:[/red] {escape(str(e))}")
        return 1
    except (ValueError, OSError) as e:
        console.print(f"[red]ERROR:[/red] {escape(str(e))}")
        logger.debug("Invalid input", exc_info=True)
        return 2
