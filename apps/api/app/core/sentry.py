"""Sentry initialisation for the legal workflow API."""

import sentry_sdk
import structlog
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from app.core.errors import DomainError

logger = structlog.get_logger()

_REDACTED_HEADERS = frozenset({"authorization", "cookie"})


def _before_send(event: dict, hint: dict) -> dict | None:
    """Drop expected workflow errors and redact credentials."""
    exc_info = hint.get("exc_info")
    # Blocked or stale transitions are answered with a 4xx; they are not faults
    if exc_info and isinstance(exc_info[1], DomainError):
        return None

    headers = event.get("request", {}).get("headers", {})
    for name in list(headers):
        if name.lower() in _REDACTED_HEADERS:
            headers[name] = "[REDACTED]"
    return event


def init_sentry(dsn: str | None, environment: str = "development", release: str | None = None) -> None:
    """No-op without a DSN. Must run before the FastAPI app is built."""
    if not dsn:
        logger.info("sentry_disabled", reason="SENTRY_DSN not set")
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=f"dealflow-legal-api@{release}" if release else None,
        traces_sample_rate=0.1 if environment == "production" else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        before_send=_before_send,
    )
    sentry_sdk.set_tag("service", "dealflow-legal-api")
    logger.info("sentry_initialized", environment=environment)
