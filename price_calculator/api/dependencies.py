"""FastAPI dependencies exposing application-owned collaborators.

The configuration store and the span reporter are created once per
application in ``create_app`` and kept on ``app.state``. Handlers receive
them through these dependencies, which tests can override with
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from price_calculator.core.config import Settings
from price_calculator.core.observability import SpanReporter
from price_calculator.pricing.store import ConfigStore


def get_app_settings(request: Request) -> Settings:
    """Get the settings the running application was created with."""
    settings: Settings = request.app.state.settings
    return settings


def get_config_store(request: Request) -> ConfigStore:
    """Get the configuration store of the running application."""
    store: ConfigStore = request.app.state.config_store
    return store


def get_span_reporter(request: Request) -> SpanReporter:
    """Get the span reporter of the running application."""
    reporter: SpanReporter = request.app.state.span_reporter
    return reporter


ConfigStoreDep = Annotated[ConfigStore, Depends(get_config_store)]
SpanReporterDep = Annotated[SpanReporter, Depends(get_span_reporter)]
AppSettingsDep = Annotated[Settings, Depends(get_app_settings)]
