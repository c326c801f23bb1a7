"""
Notification Dispatcher

Renders a validated NotificationRequest as a plain-text email and hands it
to the configured mail backend. One attempt is made per request; a failed
send fails the invocation.
"""

import json
import logging

from change_notifier.core.config import settings
from change_notifier.core.errors import ConfigurationError, DispatchError
from change_notifier.domain.models import NotificationRequest, SendResult
from change_notifier.services.mailers import Mailer, get_mailer

logger = logging.getLogger(__name__)


def build_subject(request: NotificationRequest) -> str:
    """Subject line naming the security group ID."""
    return f"Security Group {request.resource_id} Was Changed"


def build_body(request: NotificationRequest) -> str:
    """
    Plain-text body: the group's identifiers followed by the Config diff.

    The diff is rendered as JSON indented by two spaces, in the order AWS
    Config sent it.
    """
    identifiers = "/".join(request.identifiers)
    details = json.dumps(request.diff, indent=2, ensure_ascii=False)
    return f"The security group {identifiers} was changed.\n\nDetails:\n{details}"


def dispatch(request: NotificationRequest, mailer: Mailer | None = None) -> SendResult:
    """
    Send the change notification for a validated request.

    Args:
        request: Output of the event filter
        mailer: Mail backend (defaults to the configured process-wide mailer)

    Returns:
        SendResult with the provider's message ID

    Raises:
        ConfigurationError: If no sender address is configured
        DispatchError: If the mail backend fails to send
    """
    source = settings.notifier_from_address
    if not source:
        raise ConfigurationError(
            "NOTIFIER_FROM_ADDRESS is not configured",
            details={"resource_id": request.resource_id},
        )

    mailer = mailer or get_mailer()

    subject = build_subject(request)
    body = build_body(request)

    logger.info("Email Body: %s", body, extra={"recipient": request.recipient})

    try:
        message_id = mailer.send(
            to_address=request.recipient,
            subject=subject,
            body=body,
            source=source,
        )
    except Exception as e:
        logger.error(f"Email send failed: {e}")
        raise DispatchError(
            "Failed to send change notification",
            details={
                "recipient": request.recipient,
                "resource_id": request.resource_id,
                "error": str(e),
            },
        ) from e

    logger.info("Email sent successfully.", extra={"message_id": message_id})

    return SendResult(message_id=message_id, recipient=request.recipient)
