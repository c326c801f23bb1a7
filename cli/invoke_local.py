#!/usr/bin/env python3
"""
Invoke the Lambda handler locally.

Runs the filter-and-notify pipeline against an SNS event read from a JSON
file, or against a generated security group change event. By default the
`log` mail backend is used so nothing is sent; pass --send to go through SES.

Usage:
    uv run invoke-local --file event.json
    uv run invoke-local --resource-id sg-123 --name web-sg --owner-dl owner@example.com
    uv run invoke-local --file event.json --send
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any


def build_sample_event(
    resource_id: str,
    owner_dl: str,
    name: str | None = None,
    notify_on_change: str = "Yes",
    resource_type: str = "AWS::EC2::SecurityGroup",
) -> dict[str, Any]:
    """Build an SNS event wrapping an AWS Config change notification."""
    tags = {"NotifyOnChange": notify_on_change, "OwnerDL": owner_dl}
    if name:
        tags["Name"] = name

    message = {
        "messageType": "ConfigurationItemChangeNotification",
        "configurationItem": {
            "resourceType": resource_type,
            "resourceId": resource_id,
            "tags": tags,
        },
        "configurationItemDiff": {
            "changeType": "UPDATE",
            "changedProperties": {
                "Configuration.IpPermissions.0": {
                    "previousValue": None,
                    "updatedValue": {
                        "ipProtocol": "tcp",
                        "fromPort": 22,
                        "toPort": 22,
                        "ipRanges": ["0.0.0.0/0"],
                    },
                    "changeType": "CREATE",
                }
            },
        },
    }
    return {"Records": [{"EventSource": "aws:sns", "Sns": {"Message": json.dumps(message)}}]}


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Invoke the change notifier handler locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--file", type=Path, help="Path to an SNS event JSON file")
    parser.add_argument("--resource-id", default="sg-0123456789abcdef0")
    parser.add_argument("--name", default=None, help="Name tag of the security group")
    parser.add_argument("--owner-dl", default="owner@example.com", help="OwnerDL tag value")
    parser.add_argument("--notify-on-change", default="Yes", help="NotifyOnChange tag value")
    parser.add_argument(
        "--from-address",
        default=None,
        help="Sender address (overrides NOTIFIER_FROM_ADDRESS)",
    )
    parser.add_argument(
        "--send",
        action="store_true",
        help="Send through SES instead of logging the email",
    )
    args = parser.parse_args()

    # Settings are read on import, so the environment is prepared first
    if not args.send:
        os.environ["MAIL_BACKEND"] = "log"
    if args.from_address:
        os.environ["NOTIFIER_FROM_ADDRESS"] = args.from_address
    os.environ.setdefault("NOTIFIER_FROM_ADDRESS", "notifier@example.com")

    from change_notifier.core.errors import NotifierError
    from change_notifier.handler import lambda_handler

    if args.file:
        event = json.loads(args.file.read_text(encoding="utf-8"))
    else:
        event = build_sample_event(
            resource_id=args.resource_id,
            owner_dl=args.owner_dl,
            name=args.name,
            notify_on_change=args.notify_on_change,
        )

    try:
        result = lambda_handler(event, None)
    except NotifierError as e:
        print(f"[ERROR] {e.message}: {json.dumps(e.details, default=str)}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
