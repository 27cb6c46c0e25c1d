"""Utility modules for Icebreaker.

This package provides common utilities for:
- One-time asynchronous initialization shared by concurrent callers
- Telemetry traces, events and exceptions
"""

from icebreaker.utils.lazy import AsyncLazy
from icebreaker.utils.telemetry import (
    LoggingTelemetrySink,
    SeverityLevel,
    TelemetrySink,
    get_telemetry,
)

__all__ = [
    "AsyncLazy",
    "LoggingTelemetrySink",
    "SeverityLevel",
    "TelemetrySink",
    "get_telemetry",
]
