"""Distributed tracing using OpenTelemetry with pluggable exporters.

Spans are exported in batches to an OTLP collector (HTTP/protobuf by
default, gRPC optionally) or, for local development, through Loguru.
Export is best-effort: exporter failures are logged and never reach the
request that produced the span.

Request handlers do not talk to OpenTelemetry directly. They receive a
``SpanReporter`` through dependency injection, which is either backed by a
tracer (``TracerSpanReporter``) or does nothing (``NoOpSpanReporter``).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final, Protocol, TypeAlias

from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
    OTLPSpanExporter as OTLPGrpcSpanExporter,
)
from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
    OTLPSpanExporter as OTLPHttpSpanExporter,
)
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SpanExporter,
    SpanExportResult,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from price_calculator.core.context import RequestContext

if TYPE_CHECKING:
    from collections.abc import Generator, Sequence
    from contextlib import AbstractContextManager

    from fastapi import FastAPI

    from price_calculator.core.config import Settings

SERVICE_NAME_KEY: Final[str] = "service.name"
SERVICE_VERSION_KEY: Final[str] = "service.version"
ENVIRONMENT_KEY: Final[str] = "deployment.environment"

TRACER_NAME: Final[str] = "price-calculator"
DEFAULT_OTLP_HTTP_ENDPOINT: Final[str] = "http://localhost:4318/v1/traces"
DEFAULT_OTLP_GRPC_ENDPOINT: Final[str] = "http://localhost:4317"
EXCLUDED_URLS: Final[str] = "/health,/docs,/redoc,/openapi.json"

AttributeValue: TypeAlias = str | int | float | bool


class LoguruSpanExporter(SpanExporter):
    """Span exporter that writes finished spans through Loguru."""

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Log one debug record per span."""
        for span in spans:
            span_context = span.get_span_context()
            if not span_context:
                continue

            duration_ms = None
            if span.end_time and span.start_time:
                duration_ms = (span.end_time - span.start_time) // 1_000_000

            logger.bind(
                trace_id=f"0x{span_context.trace_id:032x}",
                span_id=f"0x{span_context.span_id:016x}",
                span_name=span.name,
                span_kind=span.kind.name,
                duration_ms=duration_ms,
                attributes=dict(span.attributes or {}),
                status=span.status.status_code.name,
            ).debug("Trace span completed: {}", span.name)

        return SpanExportResult.SUCCESS


class ResilientSpanExporter(SpanExporter):
    """Wrap an exporter so that export errors are logged, never raised.

    Args:
        exporter: The exporter doing the actual work.
    """

    def __init__(self, exporter: SpanExporter) -> None:
        self._exporter = exporter

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        """Export spans, reporting failure instead of raising."""
        try:
            return self._exporter.export(spans)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Span export failed: {}",
                exc,
                exporter=type(self._exporter).__name__,
                span_count=len(spans),
            )
            return SpanExportResult.FAILURE

    def shutdown(self) -> None:
        """Shut down the wrapped exporter."""
        try:
            self._exporter.shutdown()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Span exporter shutdown failed: {}", exc)

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Flush the wrapped exporter."""
        try:
            return self._exporter.force_flush(timeout_millis)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Span exporter flush failed: {}", exc)
            return False


def _get_otlp_exporter(settings: Settings) -> SpanExporter:
    config = settings.observability_config

    if config.exporter_protocol == "grpc":
        endpoint = config.exporter_endpoint or DEFAULT_OTLP_GRPC_ENDPOINT
        logger.info(f"Using OTLP/gRPC exporter at {endpoint}")
        return OTLPGrpcSpanExporter(
            endpoint=endpoint,
            insecure=settings.environment == "development",
        )

    endpoint = config.exporter_endpoint or DEFAULT_OTLP_HTTP_ENDPOINT
    logger.info(f"Using OTLP/HTTP exporter at {endpoint}")
    return OTLPHttpSpanExporter(endpoint=endpoint)


def get_span_exporter(settings: Settings) -> SpanExporter | None:
    """Get the span exporter selected by configuration.

    Args:
        settings: Application settings.

    Returns:
        SpanExporter | None: Configured exporter or None if disabled.
    """
    exporter_type = settings.observability_config.exporter_type

    if exporter_type == "otlp":
        return ResilientSpanExporter(_get_otlp_exporter(settings))

    if exporter_type == "console":
        logger.info("Using Loguru span exporter")
        return LoguruSpanExporter()

    logger.info("Span export explicitly disabled")
    return None


def setup_tracing(settings: Settings) -> TracerProvider | None:
    """Create a tracer provider and install it as the global provider.

    Args:
        settings: Application settings.

    Returns:
        TracerProvider | None: The provider, or None when tracing is disabled.
    """
    if not settings.observability_config.enable_tracing:
        logger.info("Tracing disabled by configuration")
        return None

    resource = Resource.create(
        {
            SERVICE_NAME_KEY: settings.app_name,
            SERVICE_VERSION_KEY: settings.app_version,
            ENVIRONMENT_KEY: settings.environment,
        }
    )
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=TraceIdRatioBased(settings.observability_config.trace_sample_rate),
    )

    exporter = get_span_exporter(settings)
    if exporter:
        tracer_provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(tracer_provider)

    logger.info(
        "Tracing configured",
        exporter_type=settings.observability_config.exporter_type,
        sample_rate=settings.observability_config.trace_sample_rate,
    )
    return tracer_provider


def shutdown_tracing(tracer_provider: TracerProvider | None) -> None:
    """Flush pending spans and release exporter resources.

    Args:
        tracer_provider: Provider returned by ``setup_tracing``.
    """
    if tracer_provider is None:
        return
    try:
        tracer_provider.shutdown()
    except Exception as exc:  # noqa: BLE001
        logger.error("Error shutting down tracer provider: {}", exc)


def add_correlation_id_to_span(span: trace.Span, scope: dict[str, Any]) -> None:
    """Server request hook that tags the request span with correlation data.

    Args:
        span: The current span.
        scope: ASGI scope dict containing request information.
    """
    if correlation_id := RequestContext.get_correlation_id():
        span.set_attribute("correlation_id", correlation_id)

    headers = dict(scope.get("headers", []))
    if request_id := headers.get(b"x-request-id", b"").decode("utf-8"):
        span.set_attribute("request_id", request_id)


def instrument_app(
    app: FastAPI, settings: Settings, tracer_provider: TracerProvider | None
) -> None:
    """Instrument the FastAPI application with server spans.

    Args:
        app: FastAPI application to instrument.
        settings: Application settings.
        tracer_provider: Provider that receives the server spans.
    """
    if not settings.observability_config.enable_tracing or tracer_provider is None:
        return

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        excluded_urls=EXCLUDED_URLS,
        server_request_hook=add_correlation_id_to_span,
    )
    logger.info("Application instrumented for tracing")


class SpanReporter(Protocol):
    """Capability handlers use to report their operations as spans."""

    def span(
        self, name: str, **attributes: AttributeValue
    ) -> AbstractContextManager[trace.Span]:
        """Open a span for the duration of a ``with`` block."""
        ...


class TracerSpanReporter:
    """Report spans through an OpenTelemetry tracer.

    Exceptions raised inside the span are recorded on it and mark it as
    failed before propagating.

    Args:
        tracer: Tracer that creates the spans.
    """

    def __init__(self, tracer: trace.Tracer) -> None:
        self._tracer = tracer

    @classmethod
    def from_provider(cls, tracer_provider: TracerProvider) -> TracerSpanReporter:
        """Build a reporter using the service tracer of a provider."""
        return cls(tracer_provider.get_tracer(TRACER_NAME))

    @contextmanager
    def span(
        self, name: str, **attributes: AttributeValue
    ) -> Generator[trace.Span]:
        """Open a span named after the operation being reported."""
        with self._tracer.start_as_current_span(
            name,
            attributes=attributes or None,
            record_exception=True,
            set_status_on_exception=True,
        ) as current_span:
            if correlation_id := RequestContext.get_correlation_id():
                current_span.set_attribute("correlation_id", correlation_id)
            yield current_span


class NoOpSpanReporter:
    """Reporter that records nothing. Used when tracing is disabled."""

    @contextmanager
    def span(
        self, name: str, **attributes: AttributeValue
    ) -> Generator[trace.Span]:
        """Yield a non-recording span."""
        _ = name, attributes
        yield trace.INVALID_SPAN
