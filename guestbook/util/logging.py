"""Process logging.

Stdlib loggers (uvicorn, httpx) are routed into Logfire so their records
sit next to the spans of the request that produced them.
"""

import logging

import logfire

from guestbook.config import Settings

# Every request and every Supabase call already has its own span
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(settings: Settings) -> None:
    """Configure stdlib logging; call after ``configure_logfire``.

    Args:
        settings: Application settings
    """
    level = logging.DEBUG if settings.debug else logging.INFO

    logging.basicConfig(
        level=level,
        handlers=[logfire.LogfireLoggingHandler()],
        force=True,  # Override any existing configuration
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("guestbook").setLevel(level)
