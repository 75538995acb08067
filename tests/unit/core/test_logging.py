"""Unit tests for the Loguru logging setup."""

import json
import logging
from collections.abc import Generator
from datetime import UTC, datetime
from typing import Any

import pytest
from loguru import logger
from pytest_mock import MockerFixture

from price_calculator.core.config import Settings
from price_calculator.core.logging import (
    DEFAULT_LOG_FORMAT,
    InterceptHandler,
    _state,
    format_console_with_context,
    serialize_for_json,
    setup_logging,
)


@pytest.fixture
def reset_logging_state() -> Generator[None]:
    """Allow setup_logging to run and restore the state afterwards."""
    previous = _state.configured
    _state.configured = False
    yield
    _state.configured = previous
    logger.remove()
    logging.basicConfig(handlers=[], force=True)


def _record(mocker: MockerFixture, **extra: Any) -> dict[str, Any]:
    level = mocker.Mock()
    level.name = "INFO"
    return {
        "time": datetime(2024, 6, 14, 12, 0, 0, 123456, tzinfo=UTC),
        "level": level,
        "name": "price_calculator.api.routes.pricing",
        "function": "calculate_price",
        "line": 42,
        "message": "Calculated total price: {120.0}",
        "extra": extra,
        "exception": None,
    }


@pytest.mark.unit
class TestConsoleFormatter:
    """Test suite for the console formatter."""

    def test_includes_location_and_message(self, mocker: MockerFixture) -> None:
        """Test the formatted line includes time, level, location and message."""
        line = format_console_with_context(_record(mocker))

        assert "2024-06-14 12:00:00.123" in line
        assert "INFO" in line
        assert "price_calculator.api.routes.pricing:calculate_price:42" in line
        assert line.endswith("\n")

    def test_escapes_braces_in_message(self, mocker: MockerFixture) -> None:
        """Test braces in messages cannot break the Loguru template."""
        line = format_console_with_context(_record(mocker))

        assert "{{120.0}}" in line

    def test_priority_fields_first(self, mocker: MockerFixture) -> None:
        """Test priority fields precede other context fields."""
        record = _record(
            mocker,
            total_price=120.0,
            correlation_id="0123456789abcdef",
            method="POST",
        )

        line = format_console_with_context(record)

        assert line.index("01234567") < line.index("POST") < line.index("total_price")
        assert "0123456789abcdef" not in line

    def test_skips_private_and_empty_fields(self, mocker: MockerFixture) -> None:
        """Test private and None fields are not displayed."""
        line = format_console_with_context(_record(mocker, _internal=1, empty=None))

        assert "_internal" not in line
        assert "empty" not in line

    def test_truncates_long_values(self, mocker: MockerFixture) -> None:
        """Test long field values are shortened."""
        line = format_console_with_context(_record(mocker, payload="x" * 500))

        assert "x" * 97 + "..." in line
        assert "x" * 98 not in line

    def test_falls_back_on_malformed_record(self) -> None:
        """Test a malformed record yields the default template."""
        assert format_console_with_context({}) == DEFAULT_LOG_FORMAT + "\n"


@pytest.mark.unit
class TestJsonFormatter:
    """Test suite for the JSON formatter."""

    def test_serializes_record_with_extra(self, mocker: MockerFixture) -> None:
        """Test the JSON line carries the record fields and context."""
        record = _record(mocker, correlation_id="abc", _hidden=True)

        entry = json.loads(serialize_for_json(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Calculated total price: {120.0}"
        assert entry["function"] == "calculate_price"
        assert entry["correlation_id"] == "abc"
        assert "_hidden" not in entry

    def test_serializes_exception(self, mocker: MockerFixture) -> None:
        """Test exception type and value are included."""
        record = _record(mocker)
        record["exception"] = mocker.Mock(type=ValueError, value=ValueError("bad"))

        entry = json.loads(serialize_for_json(record))

        assert entry["exception"] == {"type": "ValueError", "value": "bad"}


@pytest.mark.unit
@pytest.mark.usefixtures("reset_logging_state")
class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_configures_once(self, mocker: MockerFixture) -> None:
        """Test only the first call installs handlers."""
        mock_add = mocker.patch("price_calculator.core.logging.logger.add")
        settings = Settings()

        setup_logging(settings)
        setup_logging(settings)

        assert mock_add.call_count == 1
        assert _state.configured is True

    def test_json_formatter_uses_custom_sink(
        self, mocker: MockerFixture, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test the JSON formatter writes through the structured sink."""
        monkeypatch.setenv("LOG_CONFIG__LOG_FORMATTER_TYPE", "json")
        mock_add = mocker.patch("price_calculator.core.logging.logger.add")

        setup_logging(Settings())

        sink = mock_add.call_args.args[0]
        assert callable(sink)
        assert mock_add.call_args.kwargs["diagnose"] is False

    def test_intercepts_standard_logging(self, mocker: MockerFixture) -> None:
        """Test the standard library root and uvicorn loggers forward to Loguru."""
        mocker.patch("price_calculator.core.logging.logger.add")

        setup_logging(Settings())

        assert any(
            isinstance(handler, InterceptHandler)
            for handler in logging.getLogger().handlers
        )
        uvicorn_logger = logging.getLogger("uvicorn.access")
        assert isinstance(uvicorn_logger.handlers[0], InterceptHandler)
        assert uvicorn_logger.propagate is False


@pytest.mark.unit
class TestInterceptHandler:
    """Test suite for InterceptHandler."""

    def test_forwards_record_to_loguru(self) -> None:
        """Test standard library records arrive in Loguru."""
        messages: list[str] = []
        handler_id = logger.add(
            lambda message: messages.append(message.record["message"])
        )
        std_logger = logging.getLogger("tests.intercept")
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
        std_logger.setLevel(logging.INFO)

        try:
            std_logger.warning("collector unreachable: %s", "localhost:4318")
        finally:
            logger.remove(handler_id)

        assert messages == ["collector unreachable: localhost:4318"]
