"""Spreadsheet helpers on top of the generated Google API client

Every helper takes an already built service resource so callers (and tests)
decide how it is constructed.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from google.auth.exceptions import RefreshError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from settings import LIST_LIMIT

logger = logging.getLogger(__name__)

SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"


class SheetsAPIError(Exception):
    """A Sheets or Drive API call failed"""


@dataclass
class SpreadsheetInfo:
    """Identifying details of a spreadsheet"""
    spreadsheet_id: str
    spreadsheet_url: Optional[str]
    title: Optional[str]


@dataclass
class SheetTab:
    """One worksheet inside a spreadsheet"""
    sheet_id: int
    title: str
    row_count: Optional[int] = None
    column_count: Optional[int] = None


def build_sheets_service(credentials: Credentials):
    """Sheets v4 service resource"""
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


def build_drive_service(credentials: Credentials):
    """Drive v3 service resource"""
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


def _execute(request, action: str) -> Any:
    try:
        return request.execute()
    except HttpError as e:
        logger.debug(f"{action} failed", exc_info=True)
        raise SheetsAPIError(f"{action} failed: HTTP {e.resp.status} - {e.reason}") from e
    except RefreshError as e:
        raise SheetsAPIError(f"{action} failed: stored token was rejected ({e}). Run 'auth login' again") from e


def spreadsheet_url(spreadsheet_id: str) -> str:
    return f"https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit"


def create_spreadsheet(sheets, title: str) -> SpreadsheetInfo:
    """Create an empty spreadsheet titled ``title``"""
    request = sheets.spreadsheets().create(
        body={"properties": {"title": title}},
        fields="spreadsheetId,spreadsheetUrl,properties.title",
    )
    data = _execute(request, "Create spreadsheet")
    logger.info(f"Created spreadsheet {data.get('spreadsheetId')}")
    return SpreadsheetInfo(
        spreadsheet_id=data["spreadsheetId"],
        spreadsheet_url=data.get("spreadsheetUrl"),
        title=data.get("properties", {}).get("title"),
    )


def get_spreadsheet(sheets, spreadsheet_id: str) -> Tuple[SpreadsheetInfo, List[SheetTab]]:
    """Spreadsheet details plus its worksheet tabs"""
    request = sheets.spreadsheets().get(
        spreadsheetId=spreadsheet_id,
        fields="spreadsheetId,spreadsheetUrl,properties.title,sheets.properties",
    )
    data = _execute(request, "Get spreadsheet")

    info = SpreadsheetInfo(
        spreadsheet_id=data.get("spreadsheetId", spreadsheet_id),
        spreadsheet_url=data.get("spreadsheetUrl"),
        title=data.get("properties", {}).get("title"),
    )
    tabs = []
    for sheet in data.get("sheets", []):
        props = sheet.get("properties", {})
        grid = props.get("gridProperties", {})
        tabs.append(SheetTab(
            sheet_id=props.get("sheetId", 0),
            title=props.get("title", ""),
            row_count=grid.get("rowCount"),
            column_count=grid.get("columnCount"),
        ))
    return info, tabs


def read_range(sheets, spreadsheet_id: str, range_: str) -> List[List[Any]]:
    """Cell values in ``range_`` (A1 notation), row by row"""
    request = sheets.spreadsheets().values().get(spreadsheetId=spreadsheet_id, range=range_)
    data = _execute(request, "Read range")
    return data.get("values", [])


def write_range(sheets, spreadsheet_id: str, range_: str, values: List[List[Any]]) -> int:
    """Overwrite ``range_`` with ``values``; returns the number of updated cells"""
    request = sheets.spreadsheets().values().update(
        spreadsheetId=spreadsheet_id,
        range=range_,
        valueInputOption="USER_ENTERED",
        body={"values": values},
    )
    data = _execute(request, "Write range")
    return data.get("updatedCells", 0)


def append_rows(sheets, spreadsheet_id: str, range_: str, values: List[List[Any]]) -> int:
    """Append rows after the table found in ``range_``; returns the number of rows added"""
    request = sheets.spreadsheets().values().append(
        spreadsheetId=spreadsheet_id,
        range=range_,
        valueInputOption="USER_ENTERED",
        insertDataOption="INSERT_ROWS",
        body={"values": values},
    )
    data = _execute(request, "Append rows")
    return data.get("updates", {}).get("updatedRows", 0)


def clear_range(sheets, spreadsheet_id: str, range_: str) -> str:
    """Clear values in ``range_``; returns the range that was cleared"""
    request = sheets.spreadsheets().values().clear(
        spreadsheetId=spreadsheet_id, range=range_, body={}
    )
    data = _execute(request, "Clear range")
    return data.get("clearedRange", range_)


def list_spreadsheets(drive, limit: int = LIST_LIMIT, name_contains: Optional[str] = None) -> List[SpreadsheetInfo]:
    """Most recently modified spreadsheets visible to the user"""
    query = f"mimeType='{SPREADSHEET_MIME_TYPE}' and trashed=false"
    if name_contains:
        # Drive query syntax escapes quotes with a backslash
        escaped = name_contains.replace("\\", "\\\\").replace("'", "\\'")
        query += f" and name contains '{escaped}'"

    request = drive.files().list(
        q=query,
        pageSize=max(1, min(limit, 1000)),
        orderBy="modifiedTime desc",
        fields="files(id, name, webViewLink)",
    )
    data = _execute(request, "List spreadsheets")
    return [
        SpreadsheetInfo(
            spreadsheet_id=f["id"],
            spreadsheet_url=f.get("webViewLink") or spreadsheet_url(f["id"]),
            title=f.get("name"),
        )
        for f in data.get("files", [])
    ]
