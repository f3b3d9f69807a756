"""Expedition History Extractor

Past hand-offs are stored in the sheet as repeating triplets of cells,
starting at ColumnMap.history_start:

    details | recipient | signature | details | recipient | signature | ...

details is a composed sentence, e.g.

    "Diterima pada 2024-01-16 jam 10:00. Catatan: -"
    "Received on 2024-01-16 at 10:00. Notes: Reviewed"

The date inside details is YYYY-MM-DD, unlike the D/M/YYYY document date
of the row. Both conventions are kept as they are written by different
producers.
"""

from __future__ import annotations

import datetime
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from dokpedisi.domain.models import EPOCH, ExpeditionHistoryEntry
from dokpedisi.services.row_parser import cell_at

logger = logging.getLogger(__name__)

_GROUP_SIZE = 3
_NOTES_PLACEHOLDER = "-"
_ISO_DATE_PATTERN = re.compile(r"^(\d{1,4})-(\d{1,2})-(\d{1,2})$")


@dataclass(frozen=True)
class DetailsTemplate:
    """Wording of the composed details sentence"""

    prefix: str
    time_separator: str
    notes_marker: str

    @property
    def notes_split(self) -> str:
        return f". {self.notes_marker}"


INDONESIAN = DetailsTemplate(
    prefix="Diterima pada ",
    time_separator=" jam ",
    notes_marker="Catatan:",
)

ENGLISH = DetailsTemplate(
    prefix="Received on ",
    time_separator=" at ",
    notes_marker="Notes:",
)

_TEMPLATES = (INDONESIAN, ENGLISH)


@dataclass(frozen=True)
class ParsedDetails:
    timestamp: datetime.datetime
    notes: str | None


def normalize_notes(notes: str | None) -> str | None:
    """Map the "-" placeholder and blank notes to None"""
    if notes is None:
        return None
    notes = notes.strip()
    if not notes or notes == _NOTES_PLACEHOLDER:
        return None
    return notes


def _template_for(details: str) -> DetailsTemplate:
    # The prefix decides; note text may quote the other template's marker
    for template in _TEMPLATES:
        if details.startswith(template.prefix):
            return template
    for template in _TEMPLATES:
        if template.notes_split in details:
            return template
    return INDONESIAN


def parse_history_date(text: str) -> datetime.datetime:
    """YYYY-MM-DD -> UTC midnight. Unparsable text gives EPOCH."""
    match = _ISO_DATE_PATTERN.match(text.strip())
    if not match:
        return EPOCH
    year, month, day = (int(g) for g in match.groups())
    try:
        return datetime.datetime(year, month, day, tzinfo=datetime.UTC)
    except ValueError:
        return EPOCH


def parse_details(details: str) -> ParsedDetails:
    """
    Decompose a details sentence into its date and notes.

    The time part ("jam 10:00") is not kept: legacy rows only guarantee
    date granularity.

    Args:
        details: composed details text

    Returns:
        ParsedDetails. An unparsable date falls back to EPOCH.
    """
    template = _template_for(details)

    head = details.split(template.notes_split)[0]
    if head.startswith(template.prefix):
        head = head[len(template.prefix):]
    date_part = head.strip().split(template.time_separator)[0].rstrip(".")

    notes = None
    marker = re.search(re.escape(template.notes_marker) + r"\s*(.*)", details, re.DOTALL)
    if marker:
        notes = normalize_notes(marker.group(1))

    timestamp = parse_history_date(date_part)
    if timestamp == EPOCH:
        logger.debug("Unparsable expedition date in %r", details)

    return ParsedDetails(timestamp=timestamp, notes=notes)


def compose_details(
    date: datetime.date,
    time: str,
    notes: str | None = None,
    template: DetailsTemplate = INDONESIAN,
) -> str:
    """
    Build the details sentence written for a new expedition.

    compose_details(date(2024, 1, 20), "09:30", "Reviewed")
    -> "Diterima pada 2024-01-20 jam 09:30. Catatan: Reviewed"
    """
    return (
        f"{template.prefix}{date.isoformat()}{template.time_separator}{time}"
        f"{template.notes_split} {normalize_notes(notes) or _NOTES_PLACEHOLDER}"
    )


def extract_history(
    cells: Sequence[str], history_start: int
) -> list[ExpeditionHistoryEntry]:
    """
    Read the expedition history triplets of one row.

    Extraction stops at the first group with an empty details or recipient
    cell; groups after it are never read, even when populated.

    Args:
        cells: cells of the row
        history_start: index of the first details cell

    Returns:
        Entries in sheet order, with order = 1, 2, 3, ...
    """
    history: list[ExpeditionHistoryEntry] = []
    index = history_start

    while True:
        details = cell_at(cells, index)
        recipient = cell_at(cells, index + 1)
        if not details or not recipient:
            break

        parsed = parse_details(details)
        history.append(
            ExpeditionHistoryEntry(
                timestamp=parsed.timestamp,
                recipient=recipient,
                order=len(history) + 1,
                signature=cell_at(cells, index + 2) or None,
                notes=parsed.notes,
                details=details,
            )
        )
        index += _GROUP_SIZE

    return history
