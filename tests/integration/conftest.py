"""Shared fixtures for integration tests.

The application under test is built with ``create_app`` around a fresh
configuration store and a span reporter backed by an in-memory exporter,
so each test sees zero-valued state and can inspect the spans it produced.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
    InMemorySpanExporter,
)

from price_calculator.api.main import create_app
from price_calculator.core.config import get_settings
from price_calculator.core.context import RequestContext
from price_calculator.core.observability import TracerSpanReporter
from price_calculator.pricing.store import ConfigStore


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear the settings cache so environment overrides take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Clear the request context before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def config_store() -> ConfigStore:
    """Provide a fresh zero-valued configuration store."""
    return ConfigStore()


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Provide an exporter collecting the spans of the test."""
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(
    span_exporter: InMemorySpanExporter,
) -> Generator[TracerProvider]:
    """Provide a tracer provider exporting synchronously to memory."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider
    provider.shutdown()


@pytest.fixture
def app(config_store: ConfigStore, tracer_provider: TracerProvider) -> FastAPI:
    """Provide the application wired to the test store and tracer."""
    return create_app(
        get_settings(),
        store=config_store,
        reporter=TracerSpanReporter.from_provider(tracer_provider),
    )


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Provide an async client for the application.

    Args:
        app: The application under test.

    Yields:
        AsyncClient: Client sending requests to the application in-process.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
