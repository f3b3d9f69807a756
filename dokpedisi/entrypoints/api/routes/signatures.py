"""Signature API routes

POST /api/signatures → 201 {signature}
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from dokpedisi.domain.errors import SignatureUploadError, ValidationError
from dokpedisi.entrypoints.api.deps import get_document_store
from dokpedisi.entrypoints.api.schemas import SignatureRequest, SignatureResponse
from dokpedisi.services.document_store import DocumentStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/signatures", tags=["signatures"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SignatureResponse)
def upload_signature(
    body: SignatureRequest,
    store: DocumentStore = Depends(get_document_store),
) -> SignatureResponse:
    """Store a captured signature (data URL) and return its reference"""
    try:
        reference = store.store_signature(body.image)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": e.field, "message": str(e)},
        ) from e
    except SignatureUploadError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to store signature",
        ) from e

    return SignatureResponse(signature=reference)
