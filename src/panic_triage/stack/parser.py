"""Line-oriented parser for goroutine crash dumps."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import IO, Final, Protocol

from panic_triage.stack.models import (
    ELIDED_MARKER,
    Arg,
    Args,
    Call,
    Context,
    Func,
    Goroutine,
    NoDumpFound,
    Signature,
)
from panic_triage.stack.naming import name_shared_pointers
from panic_triage.stack.paths import resolve_local_paths

LOCKED_TO_THREAD: Final = "locked to thread"
UNAVAILABLE_SRC_PATH: Final = "<unavailable>"

_HEADER_RE = re.compile(
    r"^goroutine (\d+)(?: gp=0x[0-9a-f]+ m=\S+(?: mp=0x[0-9a-f]+)?)? \[([^\]]+)\]:$"
)
_SLEEP_RE = re.compile(r"^(\d+)(?:~(\d+))? (minutes?|seconds?)$")
_UNAVAILABLE_RE = re.compile(r"^(?:\t| +)goroutine running on other thread; stack unavailable")
_FILE_RE = re.compile(
    r"^(?:\t| +)(\?\?|<autogenerated>|.+\.(?:c|go|s)):(\d+)"
    r"(?: \+0x[0-9a-f]+)?(?: fp=0x[0-9a-f]+ sp=0x[0-9a-f]+(?: pc=0x[0-9a-f]+)?)?$"
)
_CREATED_RE = re.compile(r"^created by (.+?)(?: in goroutine \d+)?$")
_FUNC_RE = re.compile(r"^(\S.*)\(([^()]*)\)$")
_ARG_WORD_RE = re.compile(r"^(0x[0-9a-fA-F]+|\d+)\??$")
_ELIDED_FRAMES_RE = re.compile(r"^\.\.\.additional frames elided\.\.\.$")

DumpInput = str | bytes | IO[str] | IO[bytes] | Iterable[str] | Iterable[bytes]


class TextSink(Protocol):
    """Anything accepting text writes, such as sys.stderr or io.StringIO."""

    def write(self, text: str, /) -> object:
        """Write text verbatim."""


class MalformedDumpError(ValueError):
    """Raised when a call line is not followed by a valid location line."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        super().__init__(f"line {line_number}: {reason}: {line.strip()!r}")
        self.line_number = line_number
        self.line = line
        self.reason = reason


def parse_args(raw: str) -> Args | None:
    """Decode a call line argument list; None when it is not a word list."""
    args = Args()
    if not raw.strip():
        return args
    for token in raw.split(", "):
        word = token.strip().strip("{}")
        if word == ELIDED_MARKER:
            args.elided = True
            break
        if word in ("", "_"):
            continue
        matched = _ARG_WORD_RE.match(word)
        if matched is None:
            return None
        args.values.append(Arg(value=int(matched.group(1), 0)))
    return args


def parse_header_details(state: str) -> Signature:
    """Split "<state>, <detail>, ..." into a Signature without a stack."""
    items = state.split(", ")
    signature = Signature(state=items[0])
    for item in items[1:]:
        if item == LOCKED_TO_THREAD:
            signature.locked = True
            continue
        sleep = _SLEEP_RE.match(item)
        if sleep is None:
            continue
        low = int(sleep.group(1))
        high = int(sleep.group(2)) if sleep.group(2) is not None else low
        signature.sleep_min = low
        signature.sleep_max = high
        signature.sleep_unit = "seconds" if sleep.group(3).startswith("second") else "minutes"
    return signature


class _ScanningState:
    """Per-parse state machine; scan() returns the text that is not dump."""

    def __init__(self) -> None:
        self.goroutines: list[Goroutine] = []
        self.line_number = 0
        self._goroutine: Goroutine | None = None
        self._first_line = False
        self._pending: Call | None = None
        self._pending_line = ""
        self._pending_line_number = 0
        self._pending_is_created_by = False

    def scan(self, line: str) -> str | None:
        self.line_number += 1
        body = line.rstrip("\r\n")

        if self._pending is not None:
            location = _FILE_RE.match(body)
            if location is not None:
                self._pending.src_path = location.group(1)
                self._pending.line = int(location.group(2))
                self._pending = None
                return None
            if not self._pending_is_created_by:
                raise MalformedDumpError(
                    self._pending_line_number,
                    self._pending_line,
                    "call line is not followed by a source location",
                )
            self._pending = None

        if self._goroutine is None:
            if self._start_goroutine(body):
                return None
            return line

        if not body:
            self._goroutine = None
            return None

        signature = self._goroutine.signature
        if self._first_line:
            self._first_line = False
            if _UNAVAILABLE_RE.match(body) is not None:
                signature.stack.calls = [Call(src_path=UNAVAILABLE_SRC_PATH)]
                return None

        if _FILE_RE.match(body) is not None:
            raise MalformedDumpError(
                self.line_number, line, "source location without a preceding call line"
            )

        created = _CREATED_RE.match(body)
        if created is not None:
            signature.created_by = Call(func=Func(raw=created.group(1)))
            self._expect_location(signature.created_by, line, created_by=True)
            return None

        if _ELIDED_FRAMES_RE.match(body) is not None:
            signature.stack.elided = True
            return None

        call = _FUNC_RE.match(body)
        if call is not None:
            args = parse_args(call.group(2))
            if args is not None:
                frame = Call(func=Func(raw=call.group(1)), args=args)
                signature.stack.calls.append(frame)
                self._expect_location(frame, line, created_by=False)
                return None

        if self._start_goroutine(body):
            return None

        self._goroutine = None
        return line

    def finish(self) -> None:
        if self._pending is not None and not self._pending_is_created_by:
            raise MalformedDumpError(
                self._pending_line_number,
                self._pending_line,
                "call line is not followed by a source location",
            )
        self._pending = None
        self._goroutine = None

    def _start_goroutine(self, body: str) -> bool:
        header = _HEADER_RE.match(body)
        if header is None:
            return False
        goroutine = Goroutine(
            id=int(header.group(1)),
            signature=parse_header_details(header.group(2)),
        )
        self.goroutines.append(goroutine)
        self._goroutine = goroutine
        self._first_line = True
        return True

    def _expect_location(self, call: Call, line: str, *, created_by: bool) -> None:
        self._pending = call
        self._pending_line = line
        self._pending_line_number = self.line_number
        self._pending_is_created_by = created_by


def _split_keepends(text: str) -> list[str]:
    pieces = text.split("\n")
    lines = [f"{piece}\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def iter_lines(stream: DumpInput) -> Iterator[str]:
    """Yield text lines with their line endings from any supported input."""
    if isinstance(stream, (bytes, bytearray)):
        yield from _split_keepends(bytes(stream).decode("utf-8", errors="replace"))
        return
    if isinstance(stream, str):
        yield from _split_keepends(stream)
        return
    for raw_line in stream:
        if isinstance(raw_line, (bytes, bytearray)):
            yield bytes(raw_line).decode("utf-8", errors="replace")
        else:
            yield raw_line


def parse_dump(
    stream: DumpInput,
    side_output: TextSink | None = None,
    guess_paths: bool = False,
    *,
    root: Path | None = None,
) -> Context | NoDumpFound:
    """Parse a goroutine dump, forwarding every non-dump line to side_output.

    Returns NoDumpFound when the input holds no goroutine header. Raises
    MalformedDumpError when a call line lacks its location line.
    """
    state = _ScanningState()
    for line in iter_lines(stream):
        emitted = state.scan(line)
        if emitted is not None and side_output is not None:
            side_output.write(emitted)
    state.finish()

    if not state.goroutines:
        return NoDumpFound(lines_scanned=state.line_number)

    name_shared_pointers(state.goroutines)
    local_root: Path | None = None
    if guess_paths:
        local_root = (root or Path.cwd()).resolve()
        resolve_local_paths(state.goroutines, local_root)
    return Context(goroutines=state.goroutines, local_root=local_root)
