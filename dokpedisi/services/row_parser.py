"""Row Parser - one raw sheet row -> RawFields

The agenda sheet writes the document date as D/M/YYYY. Older rows and
hand-edited cells use other layouts, so the parser falls back to a few
common formats and finally to the epoch sentinel instead of failing.
"""

from __future__ import annotations

import datetime
import logging
import re
from collections.abc import Sequence

from dokpedisi.domain.models import (
    EPOCH,
    LEGACY_COLUMN_MAP,
    ColumnMap,
    DateSource,
    RawFields,
)

logger = logging.getLogger(__name__)

_DMY_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

_FALLBACK_FORMATS = (
    "%d-%m-%Y",
    "%Y/%m/%d",
    "%d %B %Y",
    "%B %d, %Y",
    "%d %b %Y",
)

_INDONESIAN_MONTHS = {
    "januari": 1,
    "februari": 2,
    "maret": 3,
    "april": 4,
    "mei": 5,
    "juni": 6,
    "juli": 7,
    "agustus": 8,
    "september": 9,
    "oktober": 10,
    "november": 11,
    "desember": 12,
    # abbreviations
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "jun": 6,
    "jul": 7,
    "agu": 8,
    "agt": 8,
    "sep": 9,
    "okt": 10,
    "nov": 11,
    "des": 12,
}

_INDONESIAN_DATE_PATTERN = re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s+(\d{4})$")


def cell_at(cells: Sequence[str], index: int) -> str:
    """Trimmed cell value, or "" when the row is shorter than index"""
    if index < len(cells) and cells[index] is not None:
        return str(cells[index]).strip()
    return ""


def is_blank_row(cells: Sequence[str]) -> bool:
    return not any(cell_at(cells, i) for i in range(len(cells)))


def parse_row_date(text: str) -> tuple[datetime.datetime, DateSource]:
    """
    Parse the document date of a sheet row.

    Order of rules:
    1. D/M/YYYY (month 1-based) -> UTC midnight
    2. ISO 8601, common strptime layouts, Indonesian month names
    3. EPOCH sentinel

    Args:
        text: raw cell text

    Returns:
        (aware UTC datetime, rule that produced it). Never raises.
    """
    text = (text or "").strip()
    if not text:
        return EPOCH, DateSource.EPOCH

    match = _DMY_PATTERN.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        try:
            return datetime.datetime(year, month, day, tzinfo=datetime.UTC), DateSource.DMY
        except ValueError:
            # e.g. 31/2/2024, try the fallback rules
            pass

    parsed = _parse_fallback(text)
    if parsed is not None:
        logger.debug("Row date %r parsed with fallback rule", text)
        return parsed, DateSource.FALLBACK

    logger.debug("Row date %r is unparsable, using epoch", text)
    return EPOCH, DateSource.EPOCH


def _parse_fallback(text: str) -> datetime.datetime | None:
    value = _parse_iso(text) or _parse_known_formats(text) or _parse_indonesian(text)
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)


def _parse_iso(text: str) -> datetime.datetime | None:
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        return None


def _parse_known_formats(text: str) -> datetime.datetime | None:
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def _parse_indonesian(text: str) -> datetime.datetime | None:
    """Day, Indonesian month name and year, e.g. 15 Januari 2024"""
    match = _INDONESIAN_DATE_PATTERN.match(text)
    if not match:
        return None
    day, month_name, year = match.groups()
    month = _INDONESIAN_MONTHS.get(month_name.lower())
    if month is None:
        return None
    try:
        return datetime.datetime(int(year), month, int(day))
    except ValueError:
        return None


def parse_row(
    cells: Sequence[str],
    row_index: int,
    column_map: ColumnMap = LEGACY_COLUMN_MAP,
    sheet_row: int | None = None,
) -> RawFields | None:
    """
    Convert one raw sheet row into RawFields.

    Args:
        cells: raw cell strings, positionally significant
        row_index: 0-based position of the row among the non-blank data rows
        column_map: column layout of the sheet
        sheet_row: 1-based row number in the sheet, when known

    Returns:
        RawFields, or None when the row has no data or no agenda number
        (the caller filters it out; this is not an error).
    """
    if is_blank_row(cells):
        return None
    trimmed = tuple(cell_at(cells, i) for i in range(len(cells)))

    agenda_no = cell_at(trimmed, column_map.agenda_no)
    if not agenda_no:
        logger.debug("Row %d has no agenda number, skipped", row_index)
        return None

    created_at, source = parse_row_date(cell_at(trimmed, column_map.created_at))

    return RawFields(
        agenda_no=agenda_no,
        created_at=created_at,
        created_at_source=source,
        sender=cell_at(trimmed, column_map.sender),
        perihal=cell_at(trimmed, column_map.subject),
        cells=trimmed,
        sheet_row=sheet_row,
    )
