"""Structured logging via structlog.

Configures structlog once at application startup. Modules keep using
`logging.getLogger(__name__)`; the stdlib bridge at the bottom of
`configure_structlog()` routes those records to stdout as well.

Renderer selection:
  debug=True  — `ConsoleRenderer` with colours for local development.
  debug=False — `JSONRenderer` for machine-parseable logs in production.

The `request_id` field is injected into every structlog event from
`carimbo_cdn.core.middleware._request_id_var`.
"""

from __future__ import annotations

import logging
import sys

import structlog

from carimbo_cdn.core.middleware import get_request_id


def _inject_request_id(
    logger: logging.Logger,
    method: str,
    event_dict: dict,
) -> dict:
    """Structlog processor: inject request_id from the middleware ContextVar."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_structlog(debug: bool = False) -> None:
    """Configure structlog for the application lifetime.

    Called from `create_app()`. Calling it again simply replaces the
    configuration.
    """
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _inject_request_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )
