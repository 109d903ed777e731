"""Structured JSONL event log for source resolution outcomes."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

OUTCOMES = ("loaded", "unreadable", "unparsable", "skipped")


@dataclass(slots=True, frozen=True)
class SourceEvent:
    """Outcome of resolving one source path."""

    timestamp: str
    path: str
    outcome: str
    reason: str | None


class EventSink(Protocol):
    """Anything that accepts events; a plain list qualifies."""

    def append(self, event: SourceEvent, /) -> None:
        """Record one event."""


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def source_event(path: str, outcome: str, reason: str | None = None) -> SourceEvent:
    """Build a timestamped event, rejecting unknown outcomes."""
    if outcome not in OUTCOMES:
        raise ValueError(f"Unknown source event outcome '{outcome}'.")
    return SourceEvent(timestamp=utc_timestamp(), path=path, outcome=outcome, reason=reason)


class JsonlEventLogger:
    """Append-only JSONL event logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: SourceEvent) -> None:
        """Append one event as a single JSON object line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, outcome: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by outcome."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if outcome is not None and record.get("outcome") != outcome:
                    continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
