"""
Main entry point for the docsnap server.

Loads settings, configures logging and serves the HTTP API with uvicorn.
uvicorn owns the event loop and signal handling; stores are opened and
closed by the application lifespan.

Usage:
    docsnap-server
    python -m docsnap.main
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from pydantic import ValidationError

from .api import create_app
from .config import Settings
from .errors import DocSnapError
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    # Load configuration
    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    # Setup logging
    setup_logging(settings)
    settings.log_config()

    try:
        app = create_app(settings)
    except (DocSnapError, ValueError) as e:
        logger.error(f"Failed to create application: {e}")
        sys.exit(1)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
