"""Google Sheets Adapters

SheetRowSource and ExpeditionWriter implemented on the Sheets API v4.

Sheet layout (SURATMASUK, legacy column map):
- row 1: header
- A: agenda number, B: date (D/M/YYYY), C: sender, D: perihal
- from G: (details, recipient, signature) triplets, one per expedition
"""

from __future__ import annotations

import logging
from typing import Any

import google_auth_httplib2
import httplib2
from google.auth.credentials import Credentials
from googleapiclient.discovery import build

from dokpedisi.domain.errors import ExternalFetchError, ExternalWriteError
from dokpedisi.domain.models import LEGACY_COLUMN_MAP, ColumnMap, ExpeditionUpdate
from dokpedisi.domain.ports import ExpeditionWriter, SheetRowSource
from dokpedisi.logging_config import log_context
from dokpedisi.services.row_parser import cell_at

logger = logging.getLogger(__name__)

_HISTORY_GROUP_SIZE = 3


def _column_letters(index: int) -> str:
    """0-based column index to A1 letters: 0 -> A, 25 -> Z, 26 -> AA"""
    letters = ""
    number = index + 1
    while number:
        number, remainder = divmod(number - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def build_sheets_service(credentials: Credentials, timeout: float) -> Any:
    """Sheets API client whose HTTP requests time out after `timeout` seconds"""
    http = google_auth_httplib2.AuthorizedHttp(
        credentials, http=httplib2.Http(timeout=timeout)
    )
    return build("sheets", "v4", http=http, cache_discovery=False)


class GoogleSheetsRowSource(SheetRowSource):
    """
    Reads the agenda rows with spreadsheets.values.get.

    The API drops trailing empty cells, so rows may have different lengths.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        credentials: Credentials | None = None,
        timeout: float = 15.0,
        service: Any | None = None,
    ) -> None:
        """
        Args:
            spreadsheet_id: Google Sheets ID
            sheet_name: worksheet name (e.g. "SURATMASUK")
            credentials: Google API credentials (not needed when service is given)
            timeout: HTTP timeout in seconds
            service: pre-built Sheets API client
        """
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required")
        if not sheet_name:
            raise ValueError("sheet_name is required")
        if service is None and credentials is None:
            raise ValueError("credentials is required")

        self._service = service or build_sheets_service(credentials, timeout)
        self._spreadsheet_id = spreadsheet_id
        self._sheet_name = sheet_name

    def fetch_rows(self) -> list[list[str]]:
        """
        Fetch all data rows of the sheet.

        Returns:
            Rows below the header; blank rows are kept in position

        Raises:
            ExternalFetchError: the API call failed or timed out
        """
        try:
            result = self._service.spreadsheets().values().get(
                spreadsheetId=self._spreadsheet_id,
                range=self._sheet_name,
            ).execute()
        except Exception as e:
            logger.exception("Failed to read rows from Google Sheets")
            raise ExternalFetchError(f"Failed to read sheet {self._sheet_name}: {e}") from e

        values = result.get("values", [])
        rows = [[str(cell) for cell in row] for row in values[1:]]
        logger.info("Loaded %d rows from Google Sheets (%s)", len(rows), self._sheet_name)
        return rows


class GoogleSheetsExpeditionWriter(ExpeditionWriter):
    """
    Writes a new expedition back into the agenda row.

    The row is addressed by the sheet row number recorded at ingestion,
    since agenda numbers can repeat. Before writing, the agenda number in
    that row is compared with the update; a mismatch means the sheet was
    edited since the last refresh and the write is refused. The
    (details, recipient, signature) triplet goes into the first free
    history slot, so the next refresh reads it back as the last entry.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        credentials: Credentials | None = None,
        column_map: ColumnMap = LEGACY_COLUMN_MAP,
        timeout: float = 15.0,
        service: Any | None = None,
    ) -> None:
        """
        Args:
            spreadsheet_id: Google Sheets ID
            sheet_name: worksheet name
            credentials: Google API credentials (not needed when service is given)
            column_map: column layout (agenda number column, first history column)
            timeout: HTTP timeout in seconds
            service: pre-built Sheets API client
        """
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required")
        if not sheet_name:
            raise ValueError("sheet_name is required")
        if service is None and credentials is None:
            raise ValueError("credentials is required")

        self._service = service or build_sheets_service(credentials, timeout)
        self._spreadsheet_id = spreadsheet_id
        self._sheet_name = sheet_name
        self._column_map = column_map

    def _read_row(self, row_number: int) -> list[str]:
        result = self._service.spreadsheets().values().get(
            spreadsheetId=self._spreadsheet_id,
            range=f"{self._sheet_name}!{row_number}:{row_number}",
        ).execute()
        return [str(cell) for cell in (result.get("values") or [[]])[0]]

    def _next_free_column(self, cells: list[str]) -> int:
        """0-based column of the first history triplet with a blank details or recipient"""
        column = self._column_map.history_start
        while cell_at(cells, column) and cell_at(cells, column + 1):
            column += _HISTORY_GROUP_SIZE
        return column

    def write(self, update: ExpeditionUpdate) -> None:
        """
        Append the expedition triplet to the document's sheet row.

        Raises:
            ExternalWriteError: no sheet row or agenda number, the row now
                holds another agenda number, or the API call failed
        """
        if not update.agenda_no:
            raise ExternalWriteError("agenda_no is required")
        if update.sheet_row is None:
            raise ExternalWriteError(f"Agenda {update.agenda_no} has no sheet row")

        row_number = update.sheet_row
        context = log_context(agenda_no=update.agenda_no, sheet_row=row_number)
        try:
            cells = self._read_row(row_number)
            found = cell_at(cells, self._column_map.agenda_no)
            if found != update.agenda_no:
                logger.warning(
                    "Sheet row %d holds agenda %r, expected %r; refresh needed",
                    row_number,
                    found,
                    update.agenda_no,
                    extra=context,
                )
                raise ExternalWriteError(
                    f"Sheet row {row_number} no longer holds agenda {update.agenda_no}"
                )

            column = self._next_free_column(cells)
            first = _column_letters(column)
            last = _column_letters(column + _HISTORY_GROUP_SIZE - 1)
            target = f"{self._sheet_name}!{first}{row_number}:{last}{row_number}"
            response = self._service.spreadsheets().values().update(
                spreadsheetId=self._spreadsheet_id,
                range=target,
                valueInputOption="RAW",
                body={
                    "values": [
                        [
                            update.last_expedition_summary,
                            update.current_location,
                            update.signature or "",
                        ]
                    ]
                },
            ).execute()
        except ExternalWriteError:
            raise
        except Exception as e:
            logger.exception("Failed to update Google Sheets", extra=context)
            raise ExternalWriteError(
                f"Failed to update agenda {update.agenda_no} (row {row_number}): {e}"
            ) from e

        logger.info(
            "Appended expedition to sheet: range=%s, status=%s",
            response.get("updatedRange", target),
            update.status,
            extra=context,
        )


class NullExpeditionWriter(ExpeditionWriter):
    """ExpeditionWriter Null Object (sheet writes disabled)"""

    def write(self, update: ExpeditionUpdate) -> None:
        logger.debug(
            "NullExpeditionWriter: write skipped",
            extra=log_context(agenda_no=update.agenda_no, sheet_row=update.sheet_row),
        )
