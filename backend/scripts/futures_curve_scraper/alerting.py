"""Slack alerting for scraper runs."""

import logging
import os
from datetime import datetime
from enum import Enum

import httpx

logger = logging.getLogger(__name__)


class AlertLevel(Enum):
    """Alert severity levels."""

    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


_COLORS = {
    AlertLevel.SUCCESS: "#2eb886",
    AlertLevel.WARNING: "#ff9900",
    AlertLevel.CRITICAL: "#ff0000",
}

_ICONS = {
    AlertLevel.SUCCESS: ":white_check_mark:",
    AlertLevel.WARNING: ":warning:",
    AlertLevel.CRITICAL: ":rotating_light:",
}


def build_payload(level: AlertLevel, subject: str, message: str) -> dict:
    return {
        "attachments": [
            {
                "color": _COLORS[level],
                "title": f"{_ICONS[level]} {subject}",
                "text": message,
                "footer": "Futures Curve Scraper",
                "ts": int(datetime.now().timestamp()),
            }
        ]
    }


def send_slack_alert(level: AlertLevel, subject: str, message: str) -> bool:
    """
    Send alert to Slack via webhook.

    Returns:
        True if sent successfully, False otherwise (never raises)
    """
    webhook_url = os.getenv("SLACK_WEBHOOK_URL")
    if not webhook_url:
        logger.debug("SLACK_WEBHOOK_URL not configured - skipping Slack alert")
        return False

    try:
        with httpx.Client(timeout=10) as client:
            response = client.post(webhook_url, json=build_payload(level, subject, message))
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Failed to send Slack alert: {e}")
        return False

    logger.info(f"Slack alert sent: {subject}")
    return True


def send_alert(level: AlertLevel, subject: str, message: str) -> None:
    logger.info(f"[{level.value}] {subject}: {message}")
    send_slack_alert(level, subject, message)
