"""
OpenTelemetry tracing for the notifier Lambda.

One span is opened per invocation by the handler; botocore instrumentation
adds a child span for the SES SendEmail call. Spans are exported over
OTLP/gRPC through a batch processor, which must be flushed before the
invocation returns because the runtime freezes the process between events.

Tracing is off unless OTEL_ENABLED=true. With it off, `get_tracer()` hands
out the API's no-op tracer and the helpers below return None.
"""

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.botocore import BotocoreInstrumentor
from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import (
    ALWAYS_OFF,
    ALWAYS_ON,
    ParentBased,
    Sampler,
    TraceIdRatioBased,
)
from opentelemetry.trace import SpanContext

logger = logging.getLogger(__name__)

TRACER_NAME = "change_notifier"

# Survives warm starts; created once per container
_tracer_provider: TracerProvider | None = None


def _parse_headers(headers_string: str | None) -> dict[str, str]:
    """Parse OTEL_EXPORTER_OTLP_HEADERS ("key1=value1,key2=value2")."""
    headers: dict[str, str] = {}
    for pair in (headers_string or "").split(","):
        key, sep, value = pair.partition("=")
        if sep:
            headers[key.strip()] = value.strip()
    return headers


def _create_resource(service_name: str, app_env: str) -> Resource:
    """Resource attributes identifying this function."""
    return Resource.create(
        {
            SERVICE_NAME: service_name,
            DEPLOYMENT_ENVIRONMENT: app_env,
            "cloud.provider": "aws",
            "faas.name": os.getenv("AWS_LAMBDA_FUNCTION_NAME", service_name),
        }
    )


def _create_sampler(sampler_name: str, sampler_arg: float) -> Sampler:
    """Map OTEL_TRACES_SAMPLER to a sampler; unknown names get parent-based ratio."""
    if sampler_name == "always_on":
        return ALWAYS_ON
    if sampler_name == "always_off":
        return ALWAYS_OFF
    if sampler_name == "traceidratio":
        return TraceIdRatioBased(sampler_arg)
    return ParentBased(root=TraceIdRatioBased(sampler_arg))


def init_telemetry(
    otlp_endpoint: str | None = None,
    otlp_headers: str | None = None,
) -> TracerProvider | None:
    """
    Set up the tracer provider and instrument botocore.

    Safe to call on every cold start; a provider that already exists is
    returned unchanged. Failure to set up tracing is logged and never stops
    the function from handling events.

    Args:
        otlp_endpoint: Collector endpoint (defaults to OTEL_EXPORTER_OTLP_ENDPOINT)
        otlp_headers: Exporter headers (defaults to OTEL_EXPORTER_OTLP_HEADERS)

    Returns:
        The TracerProvider, or None when tracing is disabled or failed to start
    """
    global _tracer_provider

    from change_notifier.core.config import settings

    if not settings.otel_enabled:
        logger.debug("OpenTelemetry tracing is disabled (OTEL_ENABLED=false)")
        return None

    if _tracer_provider is not None:
        return _tracer_provider

    endpoint = otlp_endpoint or settings.otel_exporter_otlp_endpoint
    headers = _parse_headers(otlp_headers or settings.otel_exporter_otlp_headers)

    try:
        provider = TracerProvider(
            resource=_create_resource(settings.otel_service_name, settings.app_env.value),
            sampler=_create_sampler(
                settings.otel_traces_sampler, settings.otel_traces_sampler_arg
            ),
        )
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, headers=headers))
        )
        trace.set_tracer_provider(provider)
        BotocoreInstrumentor().instrument(tracer_provider=provider)
    except Exception as e:
        logger.error(f"Failed to initialize OpenTelemetry: {e}", exc_info=True)
        return None

    _tracer_provider = provider
    logger.info(
        f"OpenTelemetry initialized: service={settings.otel_service_name}, "
        f"endpoint={endpoint}, sampler={settings.otel_traces_sampler}"
    )
    return provider


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


def force_flush(timeout_millis: int = 5000) -> None:
    """Export buffered spans before the invocation returns."""
    if _tracer_provider is None:
        return

    if not _tracer_provider.force_flush(timeout_millis):
        logger.warning("OpenTelemetry flush timed out")


def shutdown_telemetry() -> None:
    """Remove botocore instrumentation and shut the provider down."""
    global _tracer_provider

    if _tracer_provider is None:
        return

    try:
        BotocoreInstrumentor().uninstrument()
        _tracer_provider.shutdown()
    except Exception as e:
        logger.error(f"Error during OpenTelemetry shutdown: {e}", exc_info=True)
    finally:
        _tracer_provider = None


def _active_span_context() -> SpanContext | None:
    span = trace.get_current_span()
    if not span.is_recording():
        return None
    context = span.get_span_context()
    return context if context.is_valid else None


def get_trace_id() -> str | None:
    """Active trace ID as 32 hex chars, for log correlation."""
    context = _active_span_context()
    return format(context.trace_id, "032x") if context else None


def get_span_id() -> str | None:
    """Active span ID as 16 hex chars, for log correlation."""
    context = _active_span_context()
    return format(context.span_id, "016x") if context else None
