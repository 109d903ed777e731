"""Structured logging utilities."""

from .events import (
    OUTCOMES,
    EventSink,
    JsonlEventLogger,
    SourceEvent,
    source_event,
    utc_timestamp,
)

__all__ = [
    "OUTCOMES",
    "EventSink",
    "JsonlEventLogger",
    "SourceEvent",
    "source_event",
    "utc_timestamp",
]
