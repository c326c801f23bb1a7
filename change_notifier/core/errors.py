"""
Domain-specific exceptions for the change notifier.

Only conditions that must fail the invocation are modelled as exceptions.
Events that are filtered out (wrong resource type, notifications disabled,
missing recipient) are normal traffic and are reported as skips instead.
"""

from typing import Any


class NotifierError(Exception):
    """Base exception for all change notifier errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DispatchError(NotifierError):
    """
    Raised when the mail provider fails to accept a notification.

    Examples:
    - SES rejects the message (unverified sender, sandbox recipient)
    - Throttling or service errors from SES
    - Network or credential failures inside botocore

    The invocation is failed; the send is not retried.
    """

    pass


class ConfigurationError(NotifierError):
    """
    Raised when the runtime configuration cannot deliver notifications.

    Examples:
    - Unknown mail backend
    - Sender address not configured when a send is attempted
    """

    pass
