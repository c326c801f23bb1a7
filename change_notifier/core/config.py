"""Application configuration using Pydantic Settings.

This project loads configuration from environment variables (the Lambda
function configuration in deployed environments).

Optionally, you may point `ENV_FILE` at a local env file (for development).
In deployed environments, do not set `ENV_FILE` so the function's environment
is the single source of truth.
"""

import os
from enum import Enum

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from change_notifier.core.validators import is_valid_email


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class MailBackend(str, Enum):
    """Supported mail delivery backends."""

    SES = "ses"
    LOG = "log"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with support
    for .env files in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_log_level: str = "INFO"

    # Observability
    observability_structured_logs: bool = True

    # OpenTelemetry Configuration
    # Requires a collector reachable from the function
    otel_enabled: bool = False
    otel_service_name: str = "sg-change-notifier"
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_exporter_otlp_headers: str | None = None
    otel_traces_sampler: str = "parent_trace_always"
    otel_traces_sampler_arg: float = 1.0

    # Notification sender
    # Must be a verified identity in SES for the configured region
    notifier_from_address: str = ""

    # Mail backend: 'ses' sends through Amazon SES, 'log' only writes the
    # rendered email to the structured log (local development)
    mail_backend: MailBackend = MailBackend.SES

    # SES client configuration
    ses_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("SES_REGION", "AWS_REGION", "ses_region"),
    )
    ses_endpoint_url: str | None = None
    ses_access_key_id: str | None = None
    ses_secret_access_key: str | None = None
    ses_configuration_set: str | None = None

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("mail_backend", mode="before")
    @classmethod
    def validate_mail_backend(cls, v: str | MailBackend) -> MailBackend:
        """Validate and parse mail_backend to MailBackend enum."""
        if isinstance(v, MailBackend):
            return v
        try:
            return MailBackend(v.strip().lower())
        except ValueError:
            raise ValueError(
                f"mail_backend must be one of {[e.value for e in MailBackend]}, got '{v}'"
            )

    @field_validator("notifier_from_address")
    @classmethod
    def validate_from_address(cls, v: str) -> str:
        """Validate the sender address when one is configured."""
        v = v.strip()
        if v and not is_valid_email(v):
            raise ValueError(f"notifier_from_address must be a valid email address, got '{v}'")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent a function from being deployed that can never
        deliver a notification.
        """
        if self.app_env == AppEnvironment.PROD:
            if not self.notifier_from_address:
                raise ValueError("NOTIFIER_FROM_ADDRESS must be set in production")

            if self.mail_backend != MailBackend.SES:
                raise ValueError("MAIL_BACKEND must be 'ses' in production")

            if self.ses_endpoint_url:
                raise ValueError("SES_ENDPOINT_URL must not be overridden in production")

        return self


settings = Settings()
