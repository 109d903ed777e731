"""End-to-end dump triage: parse, augment, aggregate."""

from __future__ import annotations

import io
from pathlib import Path

from panic_triage.aggregate import aggregate
from panic_triage.config import TriageConfig, default_config
from panic_triage.logging import EventSink
from panic_triage.source import SourceCache, augment
from panic_triage.stack import Bucket, NoDumpFound, parse_dump
from panic_triage.stack.parser import DumpInput, TextSink


def analyze(
    text: DumpInput,
    *,
    config: TriageConfig | None = None,
    side_output: TextSink | None = None,
    cache: SourceCache | None = None,
    events: EventSink | None = None,
) -> list[Bucket] | NoDumpFound:
    """Turn a raw dump into ordered buckets.

    Lines that are not part of the dump go to side_output, or are discarded
    when none is given. MalformedDumpError from the parser propagates.
    """
    effective = config or default_config(Path.cwd())
    sink = side_output if side_output is not None else io.StringIO()
    parsed = parse_dump(
        text,
        sink,
        guess_paths=effective.guess_paths,
        root=effective.source_root,
    )
    if isinstance(parsed, NoDumpFound):
        return parsed

    if effective.augment:
        augment(parsed.goroutines, cache or SourceCache(events=events))
    return aggregate(parsed.goroutines, effective.similarity)
