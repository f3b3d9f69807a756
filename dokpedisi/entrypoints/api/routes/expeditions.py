"""Expedition API routes

POST /api/expeditions → 200 ExpeditionResponse
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from dokpedisi.domain.errors import ValidationError
from dokpedisi.domain.models import ExpeditionEvent
from dokpedisi.entrypoints.api.deps import get_document_store
from dokpedisi.entrypoints.api.schemas import (
    ExpeditionRequest,
    ExpeditionResponse,
    to_document_response,
)
from dokpedisi.services.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/expeditions", tags=["expeditions"])


@router.post("", response_model=ExpeditionResponse)
def record_expedition(
    body: ExpeditionRequest,
    store: DocumentStore = Depends(get_document_store),
) -> ExpeditionResponse:
    """
    Hand the selected documents over to one recipient.

    - Invalid input → 400 {"detail": {"field", "message"}}, nothing changed
    - Sheet write failures do not fail the request; they are listed in `failed`
    - Local documents are not written to the sheet; they are listed in `local`
    """
    store.ensure_loaded()
    event = ExpeditionEvent(
        recipient=body.recipient,
        date=body.date,
        time=body.time,
        notes=body.notes,
        signature=body.signature,
    )
    try:
        outcome = store.record_expedition(body.target_ids, event)
    except ValidationError as e:
        logger.info("Expedition rejected: field=%s, %s", e.field, e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": e.field, "message": str(e)},
        ) from e

    return ExpeditionResponse(
        documents=[to_document_response(d) for d in outcome.documents],
        persisted=outcome.persisted_agenda_nos,
        failed=outcome.failed_agenda_nos,
        local=outcome.local_agenda_nos,
    )
