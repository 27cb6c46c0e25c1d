"""Tests for the logging telemetry sink."""

import json
import logging

import pytest

from icebreaker.config.settings import Settings
from icebreaker.utils.telemetry import LoggingTelemetrySink, SeverityLevel, get_telemetry

LOGGER_NAME = "icebreaker.utils.telemetry"


def _payload(record: logging.LogRecord, prefix: str) -> dict:
    message = record.getMessage()
    assert message.startswith(prefix)
    return json.loads(message[len(prefix) :])


@pytest.fixture
def sink() -> LoggingTelemetrySink:
    return LoggingTelemetrySink(Settings(_env_file=None, enable_telemetry=True))


class TestLoggingTelemetrySink:
    """Test suite for LoggingTelemetrySink."""

    def test_track_trace(self, sink: LoggingTelemetrySink, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            sink.track_trace("Data store initialized", SeverityLevel.WARNING, {"db": "IcebreakerDB"})

        record = caplog.records[-1]
        payload = _payload(record, "TRACE: ")
        assert record.levelno == logging.WARNING
        assert payload["message"] == "Data store initialized"
        assert payload["severity"] == "warning"
        assert payload["properties"] == {"db": "IcebreakerDB"}

    def test_verbose_trace_logged_at_debug(
        self, sink: LoggingTelemetrySink, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            sink.track_trace("details", SeverityLevel.VERBOSE)

        assert caplog.records[-1].levelno == logging.DEBUG

    def test_track_event(self, sink: LoggingTelemetrySink, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
            sink.track_event("ProcessedPairups", {"pairsNotified": 3})

        payload = _payload(caplog.records[-1], "EVENT: ")
        assert payload["name"] == "ProcessedPairups"
        assert payload["properties"]["pairsNotified"] == 3

    def test_track_exception(
        self, sink: LoggingTelemetrySink, caplog: pytest.LogCaptureFixture
    ) -> None:
        try:
            raise ValueError("bad value")
        except ValueError as e:
            error = e

        with caplog.at_level(logging.ERROR, logger=LOGGER_NAME):
            sink.track_exception(error, {"operation": "set_user_info"})

        record = caplog.records[-1]
        payload = _payload(record, "EXCEPTION: ")
        assert payload["exception_type"] == "ValueError"
        assert payload["message"] == "bad value"
        assert record.exc_info is not None

    def test_disabled_sink_emits_nothing(self, caplog: pytest.LogCaptureFixture) -> None:
        sink = LoggingTelemetrySink(Settings(_env_file=None, enable_telemetry=False))

        with caplog.at_level(logging.DEBUG, logger=LOGGER_NAME):
            sink.track_trace("hidden")
            sink.track_event("Hidden")
            sink.track_exception(RuntimeError("hidden"))

        assert caplog.records == []

    def test_get_telemetry_is_cached(self) -> None:
        assert get_telemetry() is get_telemetry()
