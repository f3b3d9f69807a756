"""Document Assembler - RawFields + history -> Document"""

from __future__ import annotations

import datetime
import logging

from dokpedisi.domain.errors import ValidationError
from dokpedisi.domain.models import Document, ExpeditionHistoryEntry, RawFields
from dokpedisi.logging_config import log_context

logger = logging.getLogger(__name__)


def document_id(agenda_no: str, row_index: int) -> str:
    """
    Stable id of a sheet document.

    The row index is part of the id because agenda numbers are not unique
    across rows. Re-ingesting the same sheet yields the same ids.
    """
    return f"{agenda_no}-{row_index}"


def assemble_document(
    fields: RawFields,
    history: list[ExpeditionHistoryEntry],
    row_index: int,
) -> Document:
    """
    Build the canonical Document of one sheet row.

    Status, current recipient, received date, last expedition summary and
    signature are not stored: Document derives them from the last history
    entry.

    Args:
        fields: parsed header fields
        history: extracted expedition history, in order
        row_index: 0-based position of the row among the non-blank data rows

    Returns:
        Document with is_from_google_sheets=True
    """
    return Document(
        id=document_id(fields.agenda_no, row_index),
        agenda_no=fields.agenda_no,
        sender=fields.sender,
        perihal=fields.perihal,
        created_at=fields.created_at,
        expedition_history=tuple(history),
        is_from_google_sheets=True,
        sheet_row=fields.sheet_row,
    )


def create_local_document(
    agenda_no: str,
    sender: str,
    perihal: str,
    sequence: int,
    created_at: datetime.datetime | None = None,
) -> Document:
    """
    Build a document created locally (not read from the sheet).

    Args:
        agenda_no: agenda number (required)
        sender: sender
        perihal: subject line
        sequence: running number of local documents, used in the id
        created_at: origination date (default: now, UTC)

    Raises:
        ValidationError: agenda_no is blank
    """
    agenda_no = (agenda_no or "").strip()
    if not agenda_no:
        raise ValidationError("agenda_no is required", field="agenda_no")

    if created_at is None:
        created_at = datetime.datetime.now(datetime.UTC)
    elif created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=datetime.UTC)

    document = Document(
        id=f"local-{agenda_no}-{sequence}",
        agenda_no=agenda_no,
        sender=(sender or "").strip(),
        perihal=(perihal or "").strip(),
        created_at=created_at,
        is_from_google_sheets=False,
    )
    logger.info(
        "Created local document", extra=log_context(doc_id=document.id, agenda_no=agenda_no)
    )
    return document
