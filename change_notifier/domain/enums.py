"""
Domain enums for AWS Config change notifications.

These enums provide type-safe representations of resource types, policy
tags and filter outcomes used throughout the notifier.
"""

from enum import Enum


class ResourceType(str, Enum):
    """AWS Config resource types - only security groups are notified on."""

    SECURITY_GROUP = "AWS::EC2::SecurityGroup"


class ResourceTag(str, Enum):
    """Resource tags read by the notification policy."""

    NOTIFY_ON_CHANGE = "NotifyOnChange"
    OWNER_DL = "OwnerDL"
    OWNER = "Owner"
    NAME = "Name"


class SkipReason(str, Enum):
    """Why an event completed without sending a notification."""

    INVALID_ENVELOPE = "invalid_envelope"
    INVALID_MESSAGE = "invalid_message"
    UNSUPPORTED_RESOURCE_TYPE = "unsupported_resource_type"
    NOTIFICATIONS_DISABLED = "notifications_disabled"
    INVALID_RECIPIENT = "invalid_recipient"


class Outcome(str, Enum):
    """Terminal outcome reported to the Lambda runtime."""

    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


SUPPORTED_RESOURCE_TYPE = ResourceType.SECURITY_GROUP

# NotifyOnChange values that disable notification (case-sensitive)
NOTIFY_DISABLED_VALUES = frozenset({"", "No", "False"})
