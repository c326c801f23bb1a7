"""
Unit tests for observability features.

Tests cover:
- Structured logging with JSON format
- Invocation correlation ID binding from the Lambda context
- Resource ID context
- Root logger configuration
"""

import json
import logging
import re
import sys
from types import SimpleNamespace

import pytest

from change_notifier.core.observability import (
    StructuredFormatter,
    bind_invocation_context,
    configure_structured_logging,
    generate_request_id,
    get_request_id,
    get_resource_id,
    set_correlation_id,
    set_resource_id,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="change_notifier.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestInvocationContext:
    """Tests for request and resource context variables."""

    @pytest.mark.anyio
    async def test_generate_request_id_returns_uuid_format(self):
        """Test that generate_request_id returns a valid UUID string."""
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
            re.IGNORECASE,
        )
        assert uuid_pattern.match(generate_request_id())

    @pytest.mark.anyio
    async def test_bind_uses_lambda_request_id(self):
        """Test the aws_request_id from the Lambda context is bound."""
        context = SimpleNamespace(aws_request_id="c6af9ac6-7b61-11e6-9a41-93e8deadbeef")

        request_id = bind_invocation_context(context)

        assert request_id == "c6af9ac6-7b61-11e6-9a41-93e8deadbeef"
        assert get_request_id() == request_id

    @pytest.mark.anyio
    async def test_bind_without_context_generates_id(self):
        """Test local invocations get a generated request ID."""
        request_id = bind_invocation_context(None)

        assert request_id
        assert get_request_id() == request_id

    @pytest.mark.anyio
    async def test_bind_clears_previous_resource_id(self):
        """Test a warm container does not leak the previous resource ID."""
        set_resource_id("sg-previous")

        bind_invocation_context(None)

        assert get_resource_id() == ""


class TestStructuredFormatter:
    """Tests for JSON log formatting."""

    @pytest.mark.anyio
    async def test_output_is_json_with_base_fields(self):
        """Test the standard fields are present."""
        set_correlation_id("")
        set_resource_id("")

        entry = json.loads(StructuredFormatter().format(_record("Email sent successfully.")))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "change_notifier.test"
        assert entry["message"] == "Email sent successfully."
        assert entry["line"] == 10
        assert "timestamp" in entry
        assert "request_id" not in entry
        assert "resource_id" not in entry

    @pytest.mark.anyio
    async def test_context_fields_included(self):
        """Test request and resource IDs from context are added."""
        set_correlation_id("req-1")
        set_resource_id("sg-123")

        entry = json.loads(StructuredFormatter().format(_record()))

        assert entry["request_id"] == "req-1"
        assert entry["resource_id"] == "sg-123"

    @pytest.mark.anyio
    async def test_extra_fields_included(self):
        """Test logger extra fields land under 'extra'."""
        entry = json.loads(
            StructuredFormatter().format(_record(skip_reason="invalid_recipient", owner=None))
        )

        assert entry["extra"] == {"skip_reason": "invalid_recipient", "owner": None}

    @pytest.mark.anyio
    async def test_non_serializable_extra_uses_str(self):
        """Test values json cannot encode are stringified."""
        entry = json.loads(StructuredFormatter().format(_record(obj=object())))

        assert entry["extra"]["obj"].startswith("<object object")

    @pytest.mark.anyio
    async def test_exception_info_included(self):
        """Test exception type and message are captured."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record()
            record.exc_info = sys.exc_info()

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["exception"] == {"type": "RuntimeError", "message": "boom"}


class TestConfigureStructuredLogging:
    """Tests for root logger configuration."""

    @pytest.mark.anyio
    async def test_root_logger_uses_structured_formatter(self):
        """Test a single JSON handler is installed at the requested level."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_structured_logging("debug")

            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
            assert logging.getLogger("botocore").level == logging.INFO
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            logging.getLogger("botocore").setLevel(logging.NOTSET)

    @pytest.mark.anyio
    async def test_unknown_level_defaults_to_info(self):
        """Test an invalid level name falls back to INFO."""
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            configure_structured_logging("verbose")

            assert root.level == logging.INFO
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
            logging.getLogger("botocore").setLevel(logging.NOTSET)
