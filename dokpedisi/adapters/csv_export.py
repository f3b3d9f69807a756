"""CSV Export Row Source

SheetRowSource that reads a shared spreadsheet through its public gviz CSV
export. No Google credentials are needed, but the sheet must be shared
("anyone with the link can view").
"""

from __future__ import annotations

import csv
import io
import logging
from urllib.parse import quote

import httpx

from dokpedisi.domain.errors import ExternalFetchError
from dokpedisi.domain.ports import SheetRowSource

logger = logging.getLogger(__name__)

_EXPORT_URL = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/gviz/tq?tqx=out:csv&sheet={sheet}"


def parse_csv(text: str) -> list[list[str]]:
    """CSV text -> rows of trimmed cells (quoted fields and "" escapes supported)"""
    reader = csv.reader(io.StringIO(text))
    return [[cell.strip() for cell in row] for row in reader]


class CsvExportRowSource(SheetRowSource):
    """
    Reads the agenda rows from the CSV export URL with httpx.

    A request that does not complete within `timeout` seconds fails with
    ExternalFetchError instead of hanging.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Args:
            spreadsheet_id: Google Sheets ID
            sheet_name: worksheet name
            timeout: request timeout in seconds
            client: httpx client (default: a new client per request)
        """
        if not spreadsheet_id:
            raise ValueError("spreadsheet_id is required")
        if not sheet_name:
            raise ValueError("sheet_name is required")

        self._url = _EXPORT_URL.format(
            spreadsheet_id=spreadsheet_id, sheet=quote(sheet_name)
        )
        self._timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    def _get(self) -> httpx.Response:
        if self._client is not None:
            return self._client.get(self._url, timeout=self._timeout)
        with httpx.Client(follow_redirects=True) as client:
            return client.get(self._url, timeout=self._timeout)

    def fetch_rows(self) -> list[list[str]]:
        """
        Download and parse the CSV export.

        Returns:
            Rows below the header; blank rows are kept in position

        Raises:
            ExternalFetchError: timeout, network error or non-2xx response
        """
        try:
            response = self._get()
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error("CSV export timed out after %.1fs: %s", self._timeout, self._url)
            raise ExternalFetchError(f"Timed out after {self._timeout}s: {self._url}") from e
        except httpx.HTTPStatusError as e:
            logger.error(
                "CSV export returned %d: %s", e.response.status_code, self._url
            )
            raise ExternalFetchError(
                f"GET {self._url} -> {e.response.status_code} {e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            logger.exception("CSV export request failed: %s", self._url)
            raise ExternalFetchError(f"GET {self._url} failed: {e}") from e

        rows = parse_csv(response.text)
        data_rows = rows[1:]
        logger.info("Loaded %d rows from CSV export", len(data_rows))
        return data_rows
