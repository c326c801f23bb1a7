"""
Pytest configuration and shared fixtures for the change notifier tests.

Provides:
- Test environment variables (set before any change_notifier import)
- SNS/AWS Config event fixtures
- A mock mail backend that records sends
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

ROOT = Path(__file__).resolve().parents[1]

# Add project root to path for imports
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are instantiated on import; configure the test environment first
os.environ["APP_ENV"] = "test"
os.environ["MAIL_BACKEND"] = "log"
os.environ["NOTIFIER_FROM_ADDRESS"] = "notifier@example.com"
os.environ["OTEL_ENABLED"] = "false"
os.environ["OBSERVABILITY_STRUCTURED_LOGS"] = "false"
os.environ.pop("ENV_FILE", None)

import pytest  # noqa: E402 (import after env setup)

from change_notifier.services.mailers import reset_mailer  # noqa: E402
from tests.factories import build_change_message, wrap_in_sns  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_mailer() -> Generator[None, None, None]:
    """Each test starts without a cached mail backend."""
    reset_mailer()
    yield
    reset_mailer()


@pytest.fixture
def make_event() -> Callable[..., dict[str, Any]]:
    """Factory for SNS events carrying a change message."""

    def _make(**kwargs: Any) -> dict[str, Any]:
        return wrap_in_sns(build_change_message(**kwargs))

    return _make


@pytest.fixture
def valid_event(make_event: Callable[..., dict[str, Any]]) -> dict[str, Any]:
    """An event that passes every gate."""
    return make_event()


@pytest.fixture
def mock_mailer() -> MagicMock:
    """Mail backend double; each send returns a distinct message ID."""
    mailer = MagicMock()
    mailer.send.side_effect = [f"msg-{i}" for i in range(1, 11)]
    return mailer
