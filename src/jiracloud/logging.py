"""Logging configuration using loguru.

Provides:
- Human-readable logging for interactive use
- Structured JSON logging for services embedding the client
- Audit logging for token lifecycle events

The library itself only emits records; nothing is printed until the
application calls ``setup_logging``. Token values are never logged.
"""

import json
import sys
from datetime import UTC, datetime

from loguru import logger

# loguru ships with a stderr handler; a library stays quiet until configured
logger.disable("jiracloud")


def _json_formatter(record: dict) -> str:
    """Format log record as a single JSON line."""
    log_entry = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if record.get("extra"):
        for key, value in record["extra"].items():
            if key not in log_entry:
                log_entry[key] = value

    if record["exception"]:
        log_entry["exception"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else None,
            "value": str(record["exception"].value) if record["exception"].value else None,
        }

    # Returned string is itself a format template, so route the JSON through extra
    record["extra"]["_json"] = json.dumps(log_entry, default=str)
    return "{extra[_json]}\n"


def _dev_formatter(record: dict) -> str:
    """Format log record for humans."""
    context_str = "[cloud={extra[cloud_id]}] " if record["extra"].get("cloud_id") else ""

    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        + context_str
        + "<level>{message}</level>\n"
        "{exception}"
    )


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """Configure loguru and enable jiracloud's records.

    Args:
        json_logs: If True, output one JSON object per line
        log_level: Minimum log level to output
    """
    logger.remove()

    if json_logs:
        logger.add(
            sys.stderr,
            format=_json_formatter,
            level=log_level,
            serialize=False,
        )
    else:
        logger.add(
            sys.stderr,
            format=_dev_formatter,
            level=log_level,
            colorize=True,
        )

    logger.enable("jiracloud")


# =============================================================================
# Audit Logging
# =============================================================================


def audit_authorization_started(state: str, scopes: list[str]) -> None:
    """Log when an authorization URL is handed out."""
    logger.info(
        "Authorization URL built",
        audit_event="authorization_started",
        has_state=bool(state),
        scopes=scopes,
    )


def audit_token_exchanged(cloud_id: str) -> None:
    """Log a successful authorization-code exchange."""
    logger.bind(cloud_id=cloud_id).info(
        "Authorization code exchanged",
        audit_event="token_exchanged",
    )


def audit_token_exchange_failed(reason: str) -> None:
    """Log a rejected authorization-code exchange."""
    logger.warning(
        "Authorization code exchange failed",
        audit_event="token_exchange_failed",
        reason=reason,
    )


def audit_token_refresh(cloud_id: str | None) -> None:
    """Log a successful token refresh."""
    logger.bind(cloud_id=cloud_id).info(
        "Access token refreshed",
        audit_event="token_refresh",
    )


def audit_token_refresh_failed(status_code: int) -> None:
    """Log a failed token refresh."""
    logger.warning(
        "Token refresh failed",
        audit_event="token_refresh_failed",
        status_code=status_code,
    )


__all__ = [
    "logger",
    "setup_logging",
    "audit_authorization_started",
    "audit_token_exchanged",
    "audit_token_exchange_failed",
    "audit_token_refresh",
    "audit_token_refresh_failed",
]
