"""Sentry initialization shared by the backend scrapers."""

import logging
import os

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration


def init_sentry(service: str) -> bool:
    """Initialize Sentry tagged with the scraper's service name.

    Call before any @monitor-decorated function runs. WARNING logs become
    breadcrumbs and ERROR logs become events. Does nothing when SENTRY_DSN
    is unset (local runs, tests).

    Returns:
        True if Sentry was initialized
    """
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "production"),
        traces_sample_rate=0.0,
        integrations=[
            LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR)
        ],
        release=os.getenv("GIT_COMMIT_SHA"),
    )
    sentry_sdk.set_tag("service", service)
    return True
