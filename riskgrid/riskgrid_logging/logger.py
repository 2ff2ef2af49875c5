"""
Structured JSON logging: timestamp, event_type, operation context.

structlog with ISO timestamps, log level and consistent keys. All riskgrid
modules use get_logger() and log snake_case event names with keyword context.
Credential fields (api_key, X-API-KEY, ...) are masked before rendering.

Uses only Python stdlib logging and structlog; no riskgrid imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# JSON output by default (LOG_FORMAT=json); human-readable console otherwise
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Ensure timestamp is always present (ISO 8601)."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


REDACTED = "***"
# Field names that may carry the scoring credential
CREDENTIAL_KEYS = frozenset({"api_key", "apikey", "x-api-key", "x_api_key", "fraudapikey"})


def _redact_credentials(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Mask credential fields so a scoring API key never reaches the log stream."""
    for key in event_dict:
        if key.lower() in CREDENTIAL_KEYS and event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def configure_structlog() -> None:
    """Configure structlog once at import: timestamp, level, event_type, renderer."""
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
        _redact_credentials,
    ]
    if LOG_FORMAT == "json":
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )
    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("scoring_response_normalized", records=12, shape="output")
    Output (JSON): {"event_type": "scoring_response_normalized", "records": 12, "shape": "output",
    "timestamp": "...", "level": "info", "logger": "riskgrid.scoring.orchestrator"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_operation(operation: str) -> structlog.BoundLogger:
    """
    Return a logger with the task pane operation name bound to all subsequent calls.

        log = bind_operation("insert")
        log.info("operation_completed", address="Sheet2!A1:C4")
    Output (JSON): {"event_type": "operation_completed", "operation": "insert", "address": "Sheet2!A1:C4", ...}
    """
    return get_logger("riskgrid").bind(operation=operation)
