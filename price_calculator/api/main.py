"""FastAPI application initialization and configuration module.

This module handles:
- Application lifecycle management (startup/shutdown)
- Ownership of the configuration store and the span reporter
- Middleware and exception handler registration
- OpenTelemetry setup and instrumentation

Middleware are executed in reverse order of registration.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from price_calculator.api.middleware.error_handler import register_exception_handlers
from price_calculator.api.middleware.request_context import RequestContextMiddleware
from price_calculator.api.middleware.request_logging import RequestLoggingMiddleware
from price_calculator.api.routes import pricing_router
from price_calculator.api.utils.responses import ORJSONResponse
from price_calculator.core.config import Settings, get_settings
from price_calculator.core.logging import setup_logging
from price_calculator.core.observability import (
    NoOpSpanReporter,
    SpanReporter,
    TracerSpanReporter,
    instrument_app,
    setup_tracing,
    shutdown_tracing,
)
from price_calculator.pricing.store import ConfigStore


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    shutdown_tracing(app_instance.state.tracer_provider)
    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    *,
    store: ConfigStore | None = None,
    reporter: SpanReporter | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().
        store: Configuration store to serve. A fresh zero-valued store if omitted.
        reporter: Span reporter for the handlers. Derived from the tracing
            configuration if omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    tracer_provider = setup_tracing(settings)

    if reporter is None:
        reporter = (
            TracerSpanReporter.from_provider(tracer_provider)
            if tracer_provider is not None
            else NoOpSpanReporter()
        )

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.config_store = store if store is not None else ConfigStore()
    application.state.span_reporter = reporter
    application.state.tracer_provider = tracer_provider

    register_exception_handlers(application)

    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(pricing_router)

    @application.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint for container orchestration and load balancers.

        Returns:
            dict[str, str]: The service status.
        """
        return {"status": "healthy"}

    instrument_app(application, settings, tracer_provider)

    return application


app = create_app()
