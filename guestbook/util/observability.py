"""Observability configuration using Logfire.

Services emit structured events and spans directly:

    logfire.info("Comment created", comment_id=record.id)

    with logfire.span("mutation_engine.delete", comment_id=cid):
        ...
"""

import logfire
from fastapi import FastAPI

from guestbook.config import Settings

HEALTH_PATH = "/health"


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the process.

    Sends to Logfire cloud when explicitly enabled, or when a token is set
    and sending was not disabled; otherwise console only.

    Args:
        settings: Application settings
    """
    token = settings.observability.logfire_token
    send_to_logfire = settings.observability.send_to_logfire
    if send_to_logfire is None:
        send_to_logfire = token is not None

    logfire.configure(
        service_name="guestbook",
        service_version=settings.git_sha,
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=token,
        # Commenter and admin email addresses never leave the process
        scrubbing=logfire.ScrubbingOptions(extra_patterns=["email"]),
        console=logfire.ConsoleOptions(
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        max_depth=settings.comments.max_depth,
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Trace API requests, leaving out health probes."""
    logfire.instrument_fastapi(app, excluded_urls=HEALTH_PATH)


def instrument_httpx() -> None:
    """Trace outbound calls to the Supabase REST and auth APIs."""
    logfire.instrument_httpx()
