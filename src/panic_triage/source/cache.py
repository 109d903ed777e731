"""Memoized loading and parsing of Go source files referenced by a dump."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from panic_triage.logging import EventSink, source_event
from panic_triage.source.golang import GoFile, GoFuncDecl, GoSourceError, parse_go_source
from panic_triage.stack.models import Call


class SourceUnavailableError(Exception):
    """Raised when a source path cannot be read or parsed."""

    def __init__(self, path: str, outcome: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.outcome = outcome
        self.reason = reason


@dataclass(slots=True, frozen=True)
class FuncMatch:
    """Declaration found for one frame, with the file and path it came from."""

    decl: GoFuncDecl
    source: GoFile
    path: str


def read_source_bytes(path: str) -> bytes:
    return Path(path).read_bytes()


class SourceCache:
    """Loads each path at most once, remembering failures as well as successes.

    Not safe for concurrent use; give each augmentation run its own instance.
    """

    def __init__(
        self,
        reader: Callable[[str], bytes] | None = None,
        events: EventSink | None = None,
        files: dict[str, bytes | None] | None = None,
    ) -> None:
        self._reader = reader or read_source_bytes
        self._events = events
        self.files: dict[str, bytes | None] = dict(files or {})
        self.parsed: dict[str, GoFile | None] = {}

    def load(self, path: str) -> GoFile | None:
        """Return the parsed file for path, or None when it is unavailable."""
        if path in self.parsed:
            return self.parsed[path]
        self.parsed[path] = None
        try:
            parsed = self._load_uncached(path)
        except SourceUnavailableError as exc:
            self._record(path, exc.outcome, exc.reason)
            return None
        self.parsed[path] = parsed
        self._record(path, "loaded", None)
        return parsed

    def get_func(self, call: Call) -> FuncMatch | None:
        """Return the declaration whose body holds the frame, if any."""
        path = call.local_src_path or call.src_path
        source = self.load(path)
        if source is None:
            return None
        decl = source.find_func(call.func.method, call.func.receiver, call.line)
        if decl is None:
            return None
        return FuncMatch(decl=decl, source=source, path=path)

    def _load_uncached(self, path: str) -> GoFile:
        if not path.endswith(".go"):
            self.files[path] = None
            raise SourceUnavailableError(path, "skipped", "not a Go source file")
        if path not in self.files:
            try:
                self.files[path] = self._reader(path)
            except OSError as exc:
                self.files[path] = None
                raise SourceUnavailableError(path, "unreadable", str(exc)) from exc
        content = self.files[path]
        if content is None:
            raise SourceUnavailableError(path, "unreadable", "no content")
        try:
            return parse_go_source(content.decode("utf-8", errors="replace"))
        except GoSourceError as exc:
            raise SourceUnavailableError(path, "unparsable", str(exc)) from exc

    def _record(self, path: str, outcome: str, reason: str | None) -> None:
        if self._events is not None:
            self._events.append(source_event(path, outcome, reason))
