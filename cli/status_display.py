"""Status display functionality for CLI"""

from typing import List

from rich.markup import escape
from rich.table import Table
from rich.text import Text

from sheets_api import SheetTab, SpreadsheetInfo
from sheets_oauth import AuthStatus


def show_auth_status(status: AuthStatus, console):
    """
    Display authentication status

    Args:
        status: AuthStatus from sheets_oauth.get_auth_status
        console: Rich console for output
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()

    if status.authenticated:
        table.add_row("Auth Status:", "[green]✓ Authenticated[/green]")
    else:
        table.add_row("Auth Status:", "[red]✗ Not authenticated[/red]")
    table.add_row("Token File:", Text(str(status.token_path)))

    console.print(table)


def show_spreadsheets(spreadsheets: List[SpreadsheetInfo], console):
    """Display a list of spreadsheets"""
    if not spreadsheets:
        console.print("[dim]No spreadsheets found[/dim]")
        return

    table = Table(title="Spreadsheets")
    table.add_column("Title")
    table.add_column("ID", style="cyan")
    table.add_column("URL", style="dim")
    for sheet in spreadsheets:
        table.add_row(Text(sheet.title or ""), Text(sheet.spreadsheet_id), Text(sheet.spreadsheet_url or ""))
    console.print(table)


def show_spreadsheet(info: SpreadsheetInfo, tabs: List[SheetTab], console):
    """Display spreadsheet details and its worksheet tabs"""
    console.print(Text(info.title or "", style="bold"))
    console.print(f"ID:  {escape(info.spreadsheet_id)}", highlight=False)
    if info.spreadsheet_url:
        console.print(f"URL: {escape(info.spreadsheet_url)}", highlight=False)

    table = Table(title="Sheets")
    table.add_column("Sheet ID", style="cyan", justify="right")
    table.add_column("Title")
    table.add_column("Rows", justify="right")
    table.add_column("Columns", justify="right")
    for tab in tabs:
        table.add_row(
            str(tab.sheet_id),
            Text(tab.title or ""),
            "" if tab.row_count is None else str(tab.row_count),
            "" if tab.column_count is None else str(tab.column_count),
        )
    console.print(table)


def show_values(values: List[List], console):
    """Display cell values as a grid"""
    if not values:
        console.print("[dim]No values in range[/dim]")
        return

    width = max(len(row) for row in values)
    table = Table(show_header=False)
    for _ in range(width):
        table.add_column()
    for row in values:
        # Cell text is data, never markup
        cells = [Text(str(cell)) for cell in row]
        table.add_row(*(cells + [Text("")] * (width - len(cells))))
    console.print(table)
