"""Sentry SDK integration.

Captures unhandled exceptions and a sample of request traces.

  - `send_default_pii=False` — client IPs and headers are not sent.
  - `before_send` scrubs any event field whose key contains a sensitive
    keyword (secret, password, token, dsn, authorization).
  - No-op when SENTRY_DSN is empty, which is the default.
"""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = logging.getLogger(__name__)

_SENSITIVE_KEYS = frozenset({"secret", "password", "token", "dsn", "authorization"})


def _scrub_secrets(event: dict[str, Any], hint: Any) -> dict[str, Any]:
    """Sentry before_send hook: redact values for sensitive keys.

    Walks the event's `extra` dict and the request headers.
    """
    _scrub_dict(event.get("extra", {}))
    headers = event.get("request", {}).get("headers", {})
    if isinstance(headers, dict):
        _scrub_dict(headers)
    return event


def _scrub_dict(d: dict[str, Any]) -> None:
    """Recursively redact sensitive values in-place."""
    for key in list(d.keys()):
        if any(sensitive in key.lower() for sensitive in _SENSITIVE_KEYS):
            d[key] = "[REDACTED]"
        elif isinstance(d[key], dict):
            _scrub_dict(d[key])


def init_sentry(dsn: str, environment: str = "production") -> None:
    """Initialise the Sentry SDK.

    Args:
        dsn: Sentry DSN string. Empty string disables Sentry entirely.
        environment: Sentry environment tag ("development" | "production").
    """
    if not dsn or not dsn.strip():
        logger.debug("Sentry DSN not configured — skipping initialisation")
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=[FastApiIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
        before_send=_scrub_secrets,
    )
    logger.info("Sentry initialised (environment=%s)", environment)
