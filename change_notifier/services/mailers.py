"""
Mail backends

The "send email" capability used by the dispatcher. Two backends exist:

- SesMailer: delivers through Amazon SES using boto3
- LogMailer: writes the rendered email to the structured log only, for
  local development without SES access

The backend is selected by `MAIL_BACKEND` and created once per process.
"""

import logging
import uuid
from typing import Protocol

import boto3
from botocore.config import Config

from change_notifier.core.config import MailBackend, settings
from change_notifier.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """Anything that can send one plain-text email and return its message ID."""

    def send(self, *, to_address: str, subject: str, body: str, source: str) -> str: ...


class LogMailer:
    """
    Logging mail backend.

    Useful for local development and dry runs: nothing leaves the process.
    """

    def send(self, *, to_address: str, subject: str, body: str, source: str) -> str:
        """
        Log the email instead of sending it.

        Returns:
            A synthetic message ID prefixed with "log-"
        """
        message_id = f"log-{uuid.uuid4()}"
        logger.info(
            "mail:%s",
            subject,
            extra={
                "message_id": message_id,
                "to_address": to_address,
                "source": source,
                "body": body,
            },
        )
        return message_id


class SesMailer:
    """
    Amazon SES mail backend.

    Uses the classic SES `SendEmail` API; the client is created lazily on
    first send and reused across warm invocations.
    """

    def __init__(self, client=None):
        """Initialize with an optional pre-built SES client."""
        self._client = client

    def _get_client(self):
        """Get or create boto3 SES client."""
        if self._client is None:
            config = {
                "service_name": "ses",
                "region_name": settings.ses_region,
                # A single attempt: failures surface to the caller unretried
                "config": Config(retries={"total_max_attempts": 1, "mode": "standard"}),
            }

            # Add endpoint URL for LocalStack or a non-default endpoint
            if settings.ses_endpoint_url:
                config["endpoint_url"] = settings.ses_endpoint_url

            # Add credentials if provided; otherwise the execution role is used
            if settings.ses_access_key_id and settings.ses_secret_access_key:
                config["aws_access_key_id"] = settings.ses_access_key_id
                config["aws_secret_access_key"] = settings.ses_secret_access_key

            self._client = boto3.client(**config)

        return self._client

    def send(self, *, to_address: str, subject: str, body: str, source: str) -> str:
        """
        Send a plain-text email through SES.

        Args:
            to_address: Single destination address
            subject: Subject line
            body: Plain-text body
            source: Verified sender address

        Returns:
            The SES MessageId

        Raises:
            botocore.exceptions.ClientError: SES rejected the request
            botocore.exceptions.BotoCoreError: Transport or credential failure
        """
        client = self._get_client()

        params = {
            "Source": source,
            "Destination": {"ToAddresses": [to_address]},
            "Message": {
                "Subject": {"Data": subject},
                "Body": {"Text": {"Data": body}},
            },
        }
        if settings.ses_configuration_set:
            params["ConfigurationSetName"] = settings.ses_configuration_set

        response = client.send_email(**params)
        return response["MessageId"]


_mailer: Mailer | None = None


def get_mailer() -> Mailer:
    """
    Get the process-wide mailer for the configured backend.

    Raises:
        ConfigurationError: If the configured backend is unknown
    """
    global _mailer

    if _mailer is None:
        backend = settings.mail_backend
        if backend == MailBackend.SES:
            _mailer = SesMailer()
        elif backend == MailBackend.LOG:
            _mailer = LogMailer()
        else:
            raise ConfigurationError(
                f"Unknown mail backend: {backend}",
                details={"backend": str(backend), "valid_backends": [b.value for b in MailBackend]},
            )

    return _mailer


def reset_mailer() -> None:
    """Drop the cached mailer so the next call re-reads settings."""
    global _mailer
    _mailer = None
