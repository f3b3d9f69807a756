"""Document Collection - ingestion and queries over documents

raw rows -> parse_row -> extract_history -> assemble_document -> sorted list
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence

from dokpedisi.domain.models import (
    FIRST_DATA_ROW,
    LEGACY_COLUMN_MAP,
    ColumnMap,
    Document,
    DocumentStatus,
    IngestionReport,
)
from dokpedisi.services.document_assembler import assemble_document
from dokpedisi.services.history_extractor import extract_history
from dokpedisi.services.row_parser import is_blank_row, parse_row

logger = logging.getLogger(__name__)


def sort_documents(documents: Iterable[Document]) -> list[Document]:
    """Newest created_at first; equal dates keep their input order"""
    return sorted(documents, key=lambda d: d.created_at, reverse=True)


def ingest_report(
    rows: Sequence[Sequence[str]],
    column_map: ColumnMap = LEGACY_COLUMN_MAP,
    first_sheet_row: int = FIRST_DATA_ROW,
) -> IngestionReport:
    """
    Convert all data rows into documents and count the skipped ones.

    Row i of `rows` is sheet row first_sheet_row + i. All-blank rows keep
    that numbering but are otherwise ignored: they do not count as rows,
    are not skipped rows, and do not advance the row index used in ids.

    Args:
        rows: data rows in sheet order (header already removed)
        column_map: column layout of the sheet
        first_sheet_row: sheet row number of rows[0]

    Returns:
        IngestionReport with documents sorted by created_at descending
    """
    documents: list[Document] = []
    total = 0
    skipped = 0

    for position, cells in enumerate(rows):
        if is_blank_row(cells):
            continue
        row_index = total
        total += 1
        fields = parse_row(cells, row_index, column_map, sheet_row=first_sheet_row + position)
        if fields is None:
            skipped += 1
            continue
        history = extract_history(fields.cells, column_map.history_start)
        documents.append(assemble_document(fields, history, row_index))

    logger.info(
        "Ingested %d documents from %d rows (%d skipped, layout=%s)",
        len(documents),
        total,
        skipped,
        column_map.name,
    )
    return IngestionReport(
        documents=sort_documents(documents),
        total_rows=total,
        skipped_rows=skipped,
    )


def ingest(
    rows: Sequence[Sequence[str]],
    column_map: ColumnMap = LEGACY_COLUMN_MAP,
) -> list[Document]:
    """Convert all data rows into documents, newest first"""
    return ingest_report(rows, column_map).documents


def find_by_ids(documents: Sequence[Document], ids: Collection[str]) -> list[Document]:
    """Documents whose id is in ids, in collection order. Unknown ids are ignored."""
    wanted = set(ids)
    return [d for d in documents if d.id in wanted]


def find_by_id(documents: Sequence[Document], document_id: str) -> Document | None:
    for document in documents:
        if document.id == document_id:
            return document
    return None


def _matches(document: Document, needle: str) -> bool:
    haystack = [
        document.agenda_no,
        document.sender,
        document.perihal,
        document.current_recipient or "",
    ]
    haystack.extend(entry.recipient for entry in document.expedition_history)
    return any(needle in value.casefold() for value in haystack)


def search(documents: Sequence[Document], term: str) -> list[Document]:
    """
    Case-insensitive substring search.

    Matches agenda number, sender, perihal, current recipient and the
    recipient of every history entry. A blank term matches everything.
    """
    needle = (term or "").strip().casefold()
    if not needle:
        return list(documents)
    return [d for d in documents if _matches(d, needle)]


def filter_by_status(
    documents: Sequence[Document], status: DocumentStatus | None
) -> list[Document]:
    """Documents with the given derived status; None keeps all"""
    if status is None:
        return list(documents)
    return [d for d in documents if d.current_status is status]
