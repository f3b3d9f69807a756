"""API request / response models (pydantic)"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, Field

from dokpedisi.domain.models import Document, ExpeditionHistoryEntry


class ExpeditionEntryResponse(BaseModel):
    order: int
    timestamp: datetime.datetime
    recipient: str
    signature: str | None
    notes: str | None
    details: str | None


class DocumentResponse(BaseModel):
    id: str
    agenda_no: str
    sender: str
    perihal: str
    created_at: datetime.datetime
    status: str
    current_recipient: str | None
    last_expedition: str | None
    tanggal_terima: datetime.datetime | None
    signature: str | None
    is_from_google_sheets: bool
    sheet_row: int | None = None
    expedition_history: list[ExpeditionEntryResponse]


class DocumentListResponse(BaseModel):
    documents: list[DocumentResponse]
    total: int
    skipped: int
    error: str | None
    last_sync: datetime.datetime | None


class CreateDocumentRequest(BaseModel):
    agenda_no: str
    sender: str = ""
    perihal: str = ""
    created_at: datetime.datetime | None = None


class ExpeditionRequest(BaseModel):
    target_ids: list[str] = Field(default_factory=list)
    recipient: str = ""
    date: datetime.date | None = None
    time: str = ""
    notes: str | None = None
    signature: str | None = None


class ExpeditionResponse(BaseModel):
    documents: list[DocumentResponse]
    persisted: list[str]
    failed: list[str]
    local: list[str] = Field(default_factory=list)


class SignatureRequest(BaseModel):
    image: str


class SignatureResponse(BaseModel):
    signature: str


def _entry_response(entry: ExpeditionHistoryEntry) -> ExpeditionEntryResponse:
    return ExpeditionEntryResponse(
        order=entry.order,
        timestamp=entry.timestamp,
        recipient=entry.recipient,
        signature=entry.signature,
        notes=entry.notes,
        details=entry.details,
    )


def to_document_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        agenda_no=document.agenda_no,
        sender=document.sender,
        perihal=document.perihal,
        created_at=document.created_at,
        status=document.current_status.value,
        current_recipient=document.current_recipient,
        last_expedition=document.last_expedition,
        tanggal_terima=document.tanggal_terima,
        signature=document.signature,
        is_from_google_sheets=document.is_from_google_sheets,
        sheet_row=document.sheet_row,
        expedition_history=[_entry_response(e) for e in document.expedition_history],
    )
