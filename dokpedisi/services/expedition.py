"""Expedition Append Operation

Records one hand-off on several documents at once. The operation is
all-or-nothing: every input is validated before any document is touched.
History entries are only ever appended; derived fields follow from the
new last entry.
"""

from __future__ import annotations

import dataclasses
import datetime
import logging
import re
from collections.abc import Collection, Sequence

from dokpedisi.domain.errors import ValidationError
from dokpedisi.domain.models import Document, ExpeditionEvent, ExpeditionHistoryEntry
from dokpedisi.logging_config import log_context
from dokpedisi.services.history_extractor import compose_details, normalize_notes

logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_event_time(value: str) -> datetime.time:
    """
    "HH:MM" / "HH:MM:SS" -> time

    Raises:
        ValidationError: blank or malformed time
    """
    match = _TIME_PATTERN.match((value or "").strip())
    if not match:
        raise ValidationError(
            f"time must be HH:MM or HH:MM:SS, got {value!r}", field="time"
        )
    hour, minute, second = match.groups()
    try:
        return datetime.time(int(hour), int(minute), int(second or 0))
    except ValueError as e:
        raise ValidationError(f"time is out of range: {value!r}", field="time") from e


def validate_expedition(
    documents: Sequence[Document],
    target_ids: Collection[str],
    event: ExpeditionEvent,
) -> None:
    """
    Check an expedition request before anything is changed.

    Raises:
        ValidationError: no target ids, unknown target id, blank recipient,
            missing date, or blank/malformed time
    """
    if not target_ids:
        raise ValidationError(
            "target_ids must contain at least one document id", field="target_ids"
        )

    if not (event.recipient or "").strip():
        raise ValidationError("recipient is required", field="recipient")

    if event.date is None:
        raise ValidationError("date is required", field="date")

    if not (event.time or "").strip():
        raise ValidationError("time is required", field="time")
    parse_event_time(event.time)

    known = {d.id for d in documents}
    unknown = sorted(set(target_ids) - known)
    if unknown:
        raise ValidationError(
            f"Unknown document id(s): {', '.join(unknown)}", field="target_ids"
        )


def _event_date(event: ExpeditionEvent) -> datetime.date:
    # datetime is a subclass of date; only the date part is used
    if isinstance(event.date, datetime.datetime):
        return event.date.date()
    return event.date


def build_entry(document: Document, event: ExpeditionEvent) -> ExpeditionHistoryEntry:
    """New history entry for document, with order = current length + 1"""
    date = _event_date(event)
    time = event.time.strip()
    notes = normalize_notes(event.notes)
    return ExpeditionHistoryEntry(
        timestamp=datetime.datetime.combine(
            date, parse_event_time(time), tzinfo=datetime.UTC
        ),
        recipient=event.recipient.strip(),
        order=len(document.expedition_history) + 1,
        signature=(event.signature or "").strip() or None,
        notes=notes,
        details=compose_details(date, time, notes),
    )


def append_expedition(
    documents: Sequence[Document],
    target_ids: Collection[str],
    event: ExpeditionEvent,
) -> list[Document]:
    """
    Append one expedition entry to every targeted document.

    Args:
        documents: current collection snapshot
        target_ids: ids of the documents handed over
        event: recipient, date, time and optional notes/signature

    Returns:
        The whole collection in its original order. Non-targeted documents
        are returned as the same objects; each targeted document is
        replaced by a copy with exactly one more history entry.

    Raises:
        ValidationError: see validate_expedition. No document is changed.
    """
    validate_expedition(documents, target_ids, event)

    wanted = set(target_ids)
    result: list[Document] = []
    for document in documents:
        if document.id not in wanted:
            result.append(document)
            continue
        entry = build_entry(document, event)
        result.append(
            dataclasses.replace(
                document,
                expedition_history=document.expedition_history + (entry,),
            )
        )
        logger.debug(
            "Appended expedition: order=%d, recipient=%s",
            entry.order,
            entry.recipient,
            extra=log_context(doc_id=document.id, agenda_no=document.agenda_no),
        )

    logger.info(
        "Expedition recorded: %d document(s) -> %s",
        len(wanted),
        event.recipient.strip(),
    )
    return result
