"""Builders for SNS events wrapping AWS Config change notifications."""

from __future__ import annotations

import json
from typing import Any

SECURITY_GROUP = "AWS::EC2::SecurityGroup"

DEFAULT_DIFF = {
    "changeType": "UPDATE",
    "changedProperties": {
        "Configuration.IpPermissions.0": {
            "previousValue": None,
            "updatedValue": {"ipProtocol": "tcp", "fromPort": 22, "toPort": 22},
            "changeType": "CREATE",
        }
    },
}


def build_change_message(
    resource_type: str = SECURITY_GROUP,
    resource_id: str = "sg-123",
    tags: dict[str, Any] | None = None,
    diff: Any = None,
) -> dict[str, Any]:
    """Build an AWS Config ConfigurationItemChangeNotification payload."""
    if tags is None:
        tags = {"NotifyOnChange": "Yes", "OwnerDL": "owner@example.com", "Name": "web-sg"}
    return {
        "messageType": "ConfigurationItemChangeNotification",
        "configurationItem": {
            "resourceType": resource_type,
            "resourceId": resource_id,
            "tags": tags,
        },
        "configurationItemDiff": DEFAULT_DIFF if diff is None else diff,
    }


def wrap_in_sns(message: Any) -> dict[str, Any]:
    """Wrap a message (dict or raw string) in an SNS Lambda event."""
    raw = message if isinstance(message, str) else json.dumps(message)
    return {
        "Records": [
            {
                "EventSource": "aws:sns",
                "EventVersion": "1.0",
                "Sns": {
                    "Type": "Notification",
                    "MessageId": "95df01b4-ee98-5cb9-9903-4c221d41eb5e",
                    "TopicArn": "arn:aws:sns:us-east-1:123456789012:config-topic",
                    "Message": raw,
                },
            }
        ]
    }
