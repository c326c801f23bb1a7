"""
Observability module for the change notifier.

Provides:
- Structured logging with JSON format and correlation IDs
- Invocation correlation ID (request_id) taken from the Lambda context
- Context management for the resource being processed

Usage:
    from change_notifier.core.observability import (
        bind_invocation_context,
        configure_structured_logging,
    )
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

# ============================================================================
# Context Variables for Invocation Tracking
# ============================================================================

# Correlation ID - links all logs for a single invocation
_request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")

# Resource ID of the configuration item being evaluated
_resource_id_ctx: ContextVar[str] = ContextVar("resource_id", default="")

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
    }
)


def generate_request_id() -> str:
    """
    Generate a unique request ID for correlation.

    Used when the handler is invoked without a Lambda context (local runs).

    Returns:
        String representation of a UUID4
    """
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Get the current request ID from context."""
    return _request_id_ctx.get()


def set_correlation_id(request_id: str) -> None:
    """Set the correlation ID for the current invocation context."""
    _request_id_ctx.set(request_id)


def get_resource_id() -> str:
    """Get the current resource ID from context."""
    return _resource_id_ctx.get()


def set_resource_id(resource_id: str) -> None:
    """Set the resource ID for the current invocation context."""
    _resource_id_ctx.set(resource_id)


def bind_invocation_context(context: Any) -> str:
    """
    Bind the Lambda invocation to the logging context.

    Resets any resource ID left over from a previous invocation on a warm
    container.

    Args:
        context: Lambda context object (may be None for local runs)

    Returns:
        The request ID bound to this invocation
    """
    request_id = getattr(context, "aws_request_id", None) or generate_request_id()
    set_correlation_id(request_id)
    set_resource_id("")
    return request_id


# ============================================================================
# Structured Logging Configuration
# ============================================================================


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON with standard fields:
    - timestamp: ISO 8601 format
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - logger: Logger name
    - message: Log message
    - request_id: Correlation ID (if available)
    - trace_id: OpenTelemetry trace ID (if available)
    - span_id: OpenTelemetry span ID (if available)
    - resource_id: Configuration item being processed (if available)
    - extra: Any additional context from logging.extra
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python logging LogRecord

        Returns:
            JSON-formatted log string
        """
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        # Add OpenTelemetry trace context if available
        from change_notifier.core.telemetry import get_span_id, get_trace_id

        trace_id = get_trace_id()
        if trace_id:
            log_entry["trace_id"] = trace_id

        span_id = get_span_id()
        if span_id:
            log_entry["span_id"] = span_id

        resource_id = get_resource_id()
        if resource_id:
            log_entry["resource_id"] = resource_id

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        log_entry["file"] = record.pathname
        log_entry["line"] = record.lineno
        log_entry["function"] = record.funcName

        # Fields passed as logger.info("msg", extra={"key": "value"})
        extra_keys = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_RECORD_KEYS
        }
        if extra_keys:
            log_entry["extra"] = extra_keys

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """
    Configure root logger with structured JSON formatting.

    The Lambda runtime installs its own handler on the root logger; it is
    replaced so every line is a single JSON object.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    root_logger = logging.getLogger()

    root_logger.handlers.clear()

    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    root_logger.addHandler(handler)

    # botocore is chatty at DEBUG and logs request bodies
    logging.getLogger("botocore").setLevel(max(root_logger.level, logging.INFO))
