"""Logging utilities for CineMatch.

This module centralizes logger configuration for the application and
provides structured helpers that emit one JSON payload per log line.
"""

import json
import logging
import uuid
from typing import Optional


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a configured logger instance."""
    logger_name = name or "cinematch"
    logger = logging.getLogger(logger_name)

    # Configure a basic console handler once so logs are visible during
    # development.
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    return logger


def generate_request_id() -> str:
    """Generate a unique request identifier for correlating logs."""

    return str(uuid.uuid4())


def _format_channel_message(msg: str, channel: str) -> str:
    """Prefix a log message with the CineMatch channel tag."""

    return f"[CINEMATCH-{channel.upper()}] {msg}"


def _format_structured_message(
    message: str,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> str:
    """Format a log message as a JSON-like structured string."""

    payload: dict = {"message": message}
    if user_id is not None:
        payload["user_id"] = user_id
    if request_id is not None:
        payload["request_id"] = request_id
    if extra:
        payload["extra"] = extra
    return json.dumps(payload, default=str, ensure_ascii=False)


def _log(
    level: int,
    msg: str,
    channel: str,
    user_id: Optional[str],
    request_id: Optional[str],
    extra: dict,
) -> None:
    logger = get_logger(f"cinematch.{channel.lower()}")
    structured = _format_structured_message(
        _format_channel_message(msg, channel),
        user_id=user_id,
        request_id=request_id,
        extra=extra or None,
    )
    logger.log(level, structured)


def log_info(
    msg: str,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
    channel: str = "router",
    **extra: object,
) -> None:
    """Log an informational message for the given channel."""

    _log(logging.INFO, msg, channel, user_id, request_id, extra)


def log_warn(
    msg: str,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
    channel: str = "router",
    **extra: object,
) -> None:
    """Log a warning message for the given channel."""

    _log(logging.WARNING, msg, channel, user_id, request_id, extra)


def log_error(
    msg: str,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
    channel: str = "router",
    **extra: object,
) -> None:
    """Log an error message for the given channel."""

    _log(logging.ERROR, msg, channel, user_id, request_id, extra)
