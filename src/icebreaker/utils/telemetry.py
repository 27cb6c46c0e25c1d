"""Telemetry traces, events and exceptions for Icebreaker.

Store operations, the bot and the pairing job report to a telemetry sink
instead of calling a monitoring SDK directly. The default sink writes
structured JSON entries through the standard logging module so that they can
be ingested by any log aggregation system.

Example:
    >>> from icebreaker.utils.telemetry import get_telemetry, SeverityLevel
    >>> telemetry = get_telemetry()
    >>> telemetry.track_trace("Data store initialized", SeverityLevel.INFORMATION)
"""

import json
import logging
from datetime import UTC, datetime
from enum import Enum
from functools import lru_cache
from typing import Any, Final, Protocol

from icebreaker.config.settings import Settings, get_settings

logger: Final = logging.getLogger(__name__)


class SeverityLevel(str, Enum):
    """Severity of a telemetry trace."""

    VERBOSE = "verbose"
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


_LOG_LEVELS: Final[dict[SeverityLevel, int]] = {
    SeverityLevel.VERBOSE: logging.DEBUG,
    SeverityLevel.INFORMATION: logging.INFO,
    SeverityLevel.WARNING: logging.WARNING,
    SeverityLevel.ERROR: logging.ERROR,
    SeverityLevel.CRITICAL: logging.CRITICAL,
}


class TelemetrySink(Protocol):
    """Protocol for telemetry collectors."""

    def track_trace(
        self,
        message: str,
        severity: SeverityLevel = SeverityLevel.INFORMATION,
        properties: dict[str, Any] | None = None,
    ) -> None:
        """Record a free-text trace."""
        ...

    def track_event(self, name: str, properties: dict[str, Any] | None = None) -> None:
        """Record a named event."""
        ...

    def track_exception(
        self, exception: BaseException, properties: dict[str, Any] | None = None
    ) -> None:
        """Record an exception."""
        ...


class LoggingTelemetrySink:
    """Telemetry sink writing structured entries to the standard logger.

    Attributes:
        enabled: Whether entries are emitted at all.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the sink.

        Args:
            settings: Application settings. If None, uses get_settings().
        """
        self.settings = settings or get_settings()
        self.enabled = self.settings.enable_telemetry

    def track_trace(
        self,
        message: str,
        severity: SeverityLevel = SeverityLevel.INFORMATION,
        properties: dict[str, Any] | None = None,
    ) -> None:
        """Record a free-text trace at the given severity.

        Args:
            message: Trace text.
            severity: Trace severity. Defaults to information.
            properties: Additional context. Defaults to None.
        """
        if not self.enabled:
            return

        entry = self._entry("trace", properties)
        entry["message"] = message
        entry["severity"] = severity.value
        logger.log(_LOG_LEVELS[severity], f"TRACE: {json.dumps(entry, default=str)}")

    def track_event(self, name: str, properties: dict[str, Any] | None = None) -> None:
        """Record a named event.

        Args:
            name: Event name (e.g., "ProcessedPairups").
            properties: Additional context. Defaults to None.
        """
        if not self.enabled:
            return

        entry = self._entry("event", properties)
        entry["name"] = name
        logger.info(f"EVENT: {json.dumps(entry, default=str)}")

    def track_exception(
        self, exception: BaseException, properties: dict[str, Any] | None = None
    ) -> None:
        """Record an exception with its traceback.

        Args:
            exception: Exception to record.
            properties: Additional context. Defaults to None.
        """
        if not self.enabled:
            return

        entry = self._entry("exception", properties)
        entry["exception_type"] = type(exception).__name__
        entry["message"] = str(exception)
        logger.error(
            f"EXCEPTION: {json.dumps(entry, default=str)}",
            exc_info=(type(exception), exception, exception.__traceback__),
        )

    def _entry(self, event_type: str, properties: dict[str, Any] | None) -> dict[str, Any]:
        return {
            "timestamp": datetime.now(UTC).isoformat(),
            "event_type": event_type,
            "properties": properties or {},
        }


@lru_cache
def get_telemetry() -> LoggingTelemetrySink:
    """Get cached telemetry sink instance.

    The sink is configured from get_settings() and shared process-wide.

    Returns:
        Configured LoggingTelemetrySink instance.

    Example:
        >>> telemetry = get_telemetry()
        >>> telemetry.track_event("ProcessedPairups", {"pairsNotified": 3})
    """
    return LoggingTelemetrySink()
