#!/usr/bin/env python3
"""Run the guestbook API under uvicorn.

Logfire is configured before the app factory runs, so failures while
building the container (for example a missing Supabase key) are reported.
"""

import sys

import logfire
import uvicorn

from guestbook.config import Settings
from guestbook.util.logging import setup_logging
from guestbook.util.observability import configure_logfire

APP_FACTORY = "guestbook.interface.api.app:create_app"


def main() -> int:
    settings = Settings()
    configure_logfire(settings)
    setup_logging(settings)

    logfire.info(
        "Starting guestbook API",
        host=settings.host,
        port=settings.port,
        supabase_url=settings.supabase.url,
    )
    try:
        uvicorn.run(
            APP_FACTORY,
            factory=True,
            host=settings.host,
            port=settings.port,
            log_config=None,  # Keep the Logfire handler from setup_logging
        )
    except Exception:
        logfire.exception("Guestbook API failed to start")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
