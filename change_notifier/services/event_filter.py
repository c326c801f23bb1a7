"""
Event Validator/Filter

Decides whether an AWS Config change notification delivered through SNS
should produce an email, and extracts what the email needs.

Gates are applied in order and the first failure short-circuits:
1. The envelope carries at least one record with a non-empty SNS message
2. The message is JSON with `configurationItem` and `configurationItemDiff`
3. The resource is a security group
4. The `NotifyOnChange` tag is present and not a negative sentinel
5. The `OwnerDL` tag holds a valid email address

A failed gate is normal traffic, not an error: `evaluate` returns a `Skip`
and never raises.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from change_notifier.core.observability import set_resource_id
from change_notifier.core.validators import is_valid_email
from change_notifier.domain.enums import (
    NOTIFY_DISABLED_VALUES,
    SUPPORTED_RESOURCE_TYPE,
    ResourceTag,
    SkipReason,
)
from change_notifier.domain.models import (
    ChangeMessage,
    EventEnvelope,
    NotificationRequest,
    Skip,
    SnsRecord,
)

logger = logging.getLogger(__name__)

_INVALID_JSON = "The 'message' is not valid JSON. Stopping execution..."
_INVALID_FORMAT = "The 'message' format is invalid. Stopping execution..."


def _skip(reason: SkipReason, detail: str) -> Skip:
    """Log a gate failure and build the corresponding Skip."""
    logger.info(detail, extra={"skip_reason": reason.value})
    return Skip(reason=reason, detail=detail)


def _extract_message(event: Any) -> str | Skip:
    """
    Pull the raw SNS message string out of the Lambda event.

    Only the first record is considered; SNS delivers one record per
    invocation.
    """
    try:
        envelope = EventEnvelope.model_validate(event)
    except ValidationError as e:
        return _skip(
            SkipReason.INVALID_ENVELOPE,
            f"The event envelope is malformed: {e.error_count()} validation error(s).",
        )

    if not envelope.records:
        return _skip(SkipReason.INVALID_ENVELOPE, "The event contains no records.")

    try:
        record = SnsRecord.model_validate(envelope.records[0])
    except ValidationError:
        return _skip(SkipReason.INVALID_ENVELOPE, "The first record is malformed.")

    sns = record.sns
    if sns is None or not sns.message:
        return _skip(SkipReason.INVALID_ENVELOPE, "The first record carries no SNS message.")

    return sns.message


def _parse_message(raw_message: str) -> ChangeMessage | Skip:
    """Decode the stringified AWS Config payload."""
    try:
        payload = json.loads(raw_message)
    except (json.JSONDecodeError, RecursionError):
        return _skip(SkipReason.INVALID_MESSAGE, _INVALID_JSON)

    if not isinstance(payload, dict):
        return _skip(SkipReason.INVALID_MESSAGE, _INVALID_FORMAT)

    try:
        return ChangeMessage.model_validate(payload)
    except ValidationError:
        return _skip(SkipReason.INVALID_MESSAGE, _INVALID_FORMAT)


def notifications_enabled(tags: dict[str, str]) -> bool:
    """
    Check the NotifyOnChange policy tag.

    The comparison is case-sensitive: only an absent tag, an empty value,
    "No" and "False" disable notification.
    """
    value = tags.get(ResourceTag.NOTIFY_ON_CHANGE.value)
    return value is not None and value not in NOTIFY_DISABLED_VALUES


def build_identifiers(resource_id: str, tags: dict[str, str]) -> tuple[str, ...]:
    """Resource ID, followed by the Name tag when one is set."""
    name = tags.get(ResourceTag.NAME.value)
    if name:
        return (resource_id, name)
    return (resource_id,)


def evaluate(event: Any) -> NotificationRequest | Skip:
    """
    Validate and filter an SNS-delivered AWS Config change notification.

    Args:
        event: The raw Lambda event

    Returns:
        NotificationRequest when every gate passes, otherwise a Skip naming
        the first gate that failed
    """
    raw_message = _extract_message(event)
    if isinstance(raw_message, Skip):
        return raw_message

    message = _parse_message(raw_message)
    if isinstance(message, Skip):
        return message

    item = message.configuration_item
    set_resource_id(item.resource_id or "")

    if item.resource_type != SUPPORTED_RESOURCE_TYPE.value:
        return _skip(
            SkipReason.UNSUPPORTED_RESOURCE_TYPE,
            "Change notifications are only supported for Security Groups.",
        )

    if not item.resource_id:
        return _skip(SkipReason.INVALID_MESSAGE, _INVALID_FORMAT)

    if not notifications_enabled(item.tags):
        return _skip(
            SkipReason.NOTIFICATIONS_DISABLED,
            "Notifications are not enabled for the Security Group in question.",
        )

    owner = item.tags.get(ResourceTag.OWNER.value)
    owner_dl = item.tags.get(ResourceTag.OWNER_DL.value)

    if not is_valid_email(owner_dl):
        return _skip(
            SkipReason.INVALID_RECIPIENT,
            "The email address provided in the OwnerDL tag is either missing or invalid.",
        )

    logger.info(
        "Notification accepted",
        extra={
            "owner": owner,
            "owner_dl": owner_dl,
            "security_group_id": item.resource_id,
            "message_type": message.message_type,
        },
    )

    return NotificationRequest(
        recipient=owner_dl,
        resource_id=item.resource_id,
        identifiers=build_identifiers(item.resource_id, item.tags),
        diff=message.configuration_item_diff,
        owner=owner,
    )
