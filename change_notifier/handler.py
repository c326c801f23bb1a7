"""
AWS Lambda entry point.

Subscribed to the SNS topic that AWS Config publishes configuration item
changes to. Each invocation is independent: the event is filtered, and when
it passes, one notification email is sent to the security group owner.

Completion signal returned to the runtime:
- {"success": True, "outcome": "sent", "message_id": ...}
- {"success": False, "outcome": "skipped", "reason": ...}
A failed send raises, which the runtime records as a failed invocation.
"""

import logging
from typing import Any

from change_notifier.core.config import settings
from change_notifier.core.errors import NotifierError
from change_notifier.core.observability import (
    bind_invocation_context,
    configure_structured_logging,
)
from change_notifier.core.telemetry import force_flush, get_tracer, init_telemetry
from change_notifier.domain.enums import Outcome
from change_notifier.domain.models import Skip
from change_notifier.services import dispatch, evaluate

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

init_telemetry()

logger = logging.getLogger(__name__)


def handle_event(event: Any, context: Any = None) -> dict[str, Any]:
    """
    Run the filter-and-notify pipeline for one event.

    Args:
        event: SNS-triggered Lambda event
        context: Lambda context (None for local runs)

    Returns:
        Completion payload for the runtime

    Raises:
        DispatchError: If the notification could not be sent
        ConfigurationError: If the sender or mail backend is misconfigured
    """
    request_id = bind_invocation_context(context)

    with get_tracer().start_as_current_span("change_notifier.handle_event") as span:
        span.set_attribute("faas.invocation_id", request_id)

        result = evaluate(event)
        if isinstance(result, Skip):
            span.set_attribute("notifier.outcome", Outcome.SKIPPED.value)
            span.set_attribute("notifier.skip_reason", result.reason.value)
            return {
                "success": False,
                "outcome": Outcome.SKIPPED.value,
                "reason": result.reason.value,
            }

        span.set_attribute("resource.id", result.resource_id)

        try:
            sent = dispatch(result)
        except NotifierError as e:
            span.set_attribute("notifier.outcome", Outcome.FAILED.value)
            logger.error(
                f"Notification failed: {e.message}",
                extra={"outcome": Outcome.FAILED.value, "details": e.details},
            )
            raise

        span.set_attribute("notifier.outcome", Outcome.SENT.value)
        return {
            "success": True,
            "outcome": Outcome.SENT.value,
            "message_id": sent.message_id,
        }


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda runtime entry point (handler: change_notifier.handler.lambda_handler)."""
    try:
        return handle_event(event, context)
    finally:
        force_flush()
