"""FastAPI dependencies

The DocumentStore is built once per process and shared by every route.
Tests replace it through app.dependency_overrides[get_document_store].
"""

from __future__ import annotations

import logging

from dokpedisi.entrypoints.factory import create_document_store
from dokpedisi.services.document_store import DocumentStore

logger = logging.getLogger(__name__)

# ── DocumentStore (one per process) ─────────────────────────────────────────

_document_store: DocumentStore | None = None


def get_document_store() -> DocumentStore:
    """DocumentStore dependency"""
    global _document_store
    if _document_store is None:
        _document_store = create_document_store()
        logger.info("DocumentStore initialized")
    return _document_store


def reset_document_store() -> None:
    """Drop the cached store (next request builds a new one)"""
    global _document_store
    _document_store = None
