"""
Booking engine entry point.

Serves the availability / booking HTTP API, or runs the offline console
walkthrough for development.

Usage:
    HTTP API:     python main.py serve
    Console mode: python main.py console
"""

import logging
import sys

from slotbook.config import settings

logger = logging.getLogger(__name__)


def _build_app():
    """Build the FastAPI app, loading services from CATALOG_FILE if set."""
    from slotbook.api import build_context, create_app

    context = build_context()
    if settings.storage.catalog_file:
        count = context.catalog.load_json_file(settings.storage.catalog_file)
        logger.info("Catalog loaded from %s (%d services)", settings.storage.catalog_file, count)
    else:
        logger.warning("CATALOG_FILE not set; starting with an empty service catalog")
    return create_app(context)


def _run_api_mode() -> None:
    """Start the HTTP API under uvicorn."""
    import uvicorn

    uvicorn.run(
        _build_app(),
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.log_level.lower(),
    )


def _run_console_mode() -> None:
    """Start the offline console demo (no server, no database)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_api_mode()
