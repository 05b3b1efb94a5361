"""Google Sheets helpers for sheets-cli"""

from .client import (
    SheetsAPIError,
    SpreadsheetInfo,
    SheetTab,
    build_sheets_service,
    build_drive_service,
    create_spreadsheet,
    get_spreadsheet,
    read_range,
    write_range,
    append_rows,
    clear_range,
    list_spreadsheets,
)

__all__ = [
    "SheetsAPIError",
    "SpreadsheetInfo",
    "SheetTab",
    "build_sheets_service",
    "build_drive_service",
    "create_spreadsheet",
    "get_spreadsheet",
    "read_range",
    "write_range",
    "append_rows",
    "clear_range",
    "list_spreadsheets",
]
