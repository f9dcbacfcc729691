"""
Module: logger.py
Description: Structured logging configuration for the SQS queue adapter.

Configures structlog for JSON output so queue operations can be traced
in CloudWatch Logs or any line-oriented log collector.

Key Components:
- JSON output with timestamp and level on every entry
- configure_logging(): level filtering for the whole package
- get_logger() helper function

Dependencies: structlog, logging, datetime
"""

import logging
from datetime import datetime, timezone

import structlog


def _add_timestamp(logger, method_name, event_dict):
    """Add an ISO 8601 UTC timestamp to the log entry."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add the upper-cased log level to the log entry."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog for the package.

    Args:
        level: Minimum level to emit (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Example:
        >>> configure_logging("DEBUG")
        >>> get_logger(__name__).debug("Claim planned", wait_seconds=5)
    """
    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )


configure_logging()


def get_logger(name: str):
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound structlog logger emitting JSON lines

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Message sent to SQS", queue_name="jobs", message_id="5fea7756")
        {"queue_name": "jobs", "message_id": "5fea7756", "event": "Message sent to SQS", "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)
