"""Document API routes

GET  /api/documents          → 200 DocumentListResponse
GET  /api/documents/{id}     → 200 DocumentResponse
POST /api/documents          → 201 DocumentResponse (local document)
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dokpedisi.domain.errors import ValidationError
from dokpedisi.domain.models import DocumentStatus
from dokpedisi.entrypoints.api.deps import get_document_store
from dokpedisi.entrypoints.api.schemas import (
    CreateDocumentRequest,
    DocumentListResponse,
    DocumentResponse,
    to_document_response,
)
from dokpedisi.services.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/documents", tags=["documents"])


@router.get("", response_model=DocumentListResponse)
def list_documents(
    q: str = "",
    status_filter: DocumentStatus | None = Query(None, alias="status"),
    refresh: bool = False,
    store: DocumentStore = Depends(get_document_store),
) -> DocumentListResponse:
    """
    Documents, newest first, filtered by search term and status.

    The first call loads the sheet; refresh=true forces a reload. A failed
    load still answers 200 with an empty list and the error message.
    """
    result = store.refresh() if refresh else store.ensure_loaded()

    documents = store.search(q, status_filter)
    return DocumentListResponse(
        documents=[to_document_response(d) for d in documents],
        total=len(documents),
        skipped=result.skipped_rows,
        error=store.error,
        last_sync=store.last_sync,
    )


@router.get("/{document_id:path}", response_model=DocumentResponse)
def get_document(
    document_id: str,
    store: DocumentStore = Depends(get_document_store),
) -> DocumentResponse:
    """Single document with its full expedition history

    Agenda numbers contain "/" (e.g. 001/SM/2024), so the id is a path
    parameter.
    """
    store.ensure_loaded()
    document = store.get(document_id)
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return to_document_response(document)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DocumentResponse)
def create_document(
    body: CreateDocumentRequest,
    store: DocumentStore = Depends(get_document_store),
) -> DocumentResponse:
    """Add a document that is not (yet) in the sheet"""
    store.ensure_loaded()
    try:
        document = store.add_local_document(
            agenda_no=body.agenda_no,
            sender=body.sender,
            perihal=body.perihal,
            created_at=body.created_at,
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": e.field, "message": str(e)},
        ) from e

    logger.info("Local document created: id=%s", document.id)
    return to_document_response(document)
