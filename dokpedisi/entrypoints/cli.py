#!/usr/bin/env python3
"""CLI Entrypoint - load the agenda sheet from the command line

Usage:
    python -m dokpedisi.entrypoints.cli
    python -m dokpedisi.entrypoints.cli --search "dinas"
    python -m dokpedisi.entrypoints.cli --status Unknown

Environment variables:
    see dokpedisi.config.AppConfig.from_env
    LOG_LEVEL: DEBUG, INFO, WARNING or ERROR (default: INFO)
"""

import argparse
import logging
import sys

from dokpedisi.domain.models import DocumentStatus
from dokpedisi.entrypoints.factory import create_document_store
from dokpedisi.logging_config import setup_logging


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dokpedisi",
        description="Load the incoming-letter agenda and show where each document is",
    )
    parser.add_argument(
        "--search",
        metavar="TERM",
        default="",
        help="only show documents matching TERM (agenda number, sender, perihal, recipient)",
    )
    parser.add_argument(
        "--status",
        choices=[s.value for s in DocumentStatus],
        help="only show documents with this status",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entrypoint"""
    args = _parse_args(argv)
    setup_logging()
    logger = logging.getLogger(__name__)

    logger.info("Dokpedisi - Starting")

    try:
        store = create_document_store()
        result = store.refresh()

        if result.error:
            logger.error("Failed to load documents: %s", result.error)
            sys.exit(1)

        logger.info(
            "Loaded %d document(s) from %d row(s), %d skipped",
            len(result.documents),
            result.total_rows,
            result.skipped_rows,
        )

        status = DocumentStatus(args.status) if args.status else None
        documents = store.search(args.search, status)
        for i, doc in enumerate(documents, 1):
            logger.info(
                "[%d] %s | %s | %s | status=%s recipient=%s history=%d",
                i,
                doc.agenda_no,
                doc.created_at.date().isoformat(),
                doc.perihal,
                doc.current_status.value,
                doc.current_recipient or "-",
                len(doc.expedition_history),
            )

        if args.search or status:
            logger.info("%d document(s) matched", len(documents))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
