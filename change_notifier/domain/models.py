"""
Pydantic models for the SNS envelope and the AWS Config change message.

Field names follow Python conventions; the AWS wire names are accepted
through aliases. Unknown fields are ignored, since both SNS and AWS Config
add fields over time.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from change_notifier.domain.enums import SkipReason

# ============================================================================
# SNS Envelope
# ============================================================================


class SnsNotification(BaseModel):
    """The `Sns` object of an SNS-triggered Lambda record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: str | None = Field(default=None, alias="Message")
    message_id: str | None = Field(default=None, alias="MessageId")
    topic_arn: str | None = Field(default=None, alias="TopicArn")


class SnsRecord(BaseModel):
    """A single record of the Lambda event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sns: SnsNotification | None = Field(default=None, alias="Sns")


class EventEnvelope(BaseModel):
    """
    The event delivered to the handler by the SNS subscription.

    Records stay unvalidated here; only the first one is read, via SnsRecord.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    records: list[Any] = Field(default_factory=list, alias="Records")


# ============================================================================
# AWS Config Change Message
# ============================================================================


class ConfigurationItem(BaseModel):
    """Description of the monitored resource, including its tags."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    resource_type: str = Field(..., alias="resourceType")
    # Only required once the resource type is known to be supported
    resource_id: str | None = Field(default=None, alias="resourceId")
    tags: dict[str, str] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> Any:
        """AWS Config sends `null` for untagged resources."""
        return {} if v is None else v


class ChangeMessage(BaseModel):
    """Decoded `ConfigurationItemChangeNotification` payload."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    configuration_item: ConfigurationItem = Field(..., alias="configurationItem")
    configuration_item_diff: Any = Field(..., alias="configurationItemDiff")
    message_type: str | None = Field(default=None, alias="messageType")

    @field_validator("configuration_item_diff")
    @classmethod
    def diff_must_be_present(cls, v: Any) -> Any:
        """Reject an explicit `null` diff."""
        if v is None:
            raise ValueError("configurationItemDiff must not be null")
        return v


# ============================================================================
# Filter / Dispatch Results
# ============================================================================


@dataclass(frozen=True)
class NotificationRequest:
    """A validated notification, ready to be rendered and sent."""

    recipient: str
    resource_id: str
    identifiers: tuple[str, ...]
    diff: Any
    owner: str | None = None


@dataclass(frozen=True)
class Skip:
    """An event that completes without sending a notification."""

    reason: SkipReason
    detail: str = ""


@dataclass(frozen=True)
class SendResult:
    """A notification accepted by the mail backend."""

    message_id: str
    recipient: str
