from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from panic_triage.logging import JsonlEventLogger, source_event, utc_timestamp
from panic_triage.source import SourceCache


def test_event_log_writes_jsonl_schema(tmp_path: Path) -> None:
    logger = JsonlEventLogger(tmp_path / "logs" / "sources.jsonl")

    logger.append(source_event("/src/main.go", "loaded"))
    logger.append(source_event("/src/gone.go", "unreadable", "No such file"))

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    record = json.loads(lines[1])
    assert set(record) == {"timestamp", "path", "outcome", "reason"}
    assert record["path"] == "/src/gone.go"
    assert record["outcome"] == "unreadable"
    assert record["reason"] == "No such file"
    assert record["timestamp"].endswith("Z")


def test_event_log_read_filters_and_limits(tmp_path: Path) -> None:
    logger = JsonlEventLogger(tmp_path / "sources.jsonl")
    for index in range(4):
        logger.append(source_event(f"/src/{index}.go", "loaded"))
    logger.append(source_event("/src/x.s", "skipped", "not a Go source file"))
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n\n")

    assert [entry["path"] for entry in logger.read(outcome="loaded", limit=2)] == [
        "/src/2.go",
        "/src/3.go",
    ]
    assert len(logger.read()) == 5
    assert logger.read(limit=0) == []


def test_read_missing_log_returns_empty(tmp_path: Path) -> None:
    assert JsonlEventLogger(tmp_path / "absent.jsonl").read() == []


def test_unknown_outcome_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown source event outcome"):
        source_event("/src/main.go", "exploded")


def test_timestamp_is_utc_iso8601() -> None:
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_timestamp())


def test_source_cache_writes_to_jsonl_logger(tmp_path: Path) -> None:
    logger = JsonlEventLogger(tmp_path / "sources.jsonl")
    cache = SourceCache(events=logger)

    cache.load(str(tmp_path / "missing.go"))
    cache.load(str(tmp_path / "missing.go"))

    entries = logger.read()
    assert [entry["outcome"] for entry in entries] == ["unreadable"]
