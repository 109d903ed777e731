"""Lexical Go declaration parser: functions, parameters and named types."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from panic_triage.source.lexical import (
    LineIndex,
    find_closing,
    is_balanced,
    mask_comments_and_strings,
    split_top_level,
)

_PACKAGE_RE = re.compile(r"^\s*package\s+([A-Za-z_][A-Za-z0-9_]*)\b", re.MULTILINE)
_FUNC_START_RE = re.compile(r"^[ \t]*func\b", re.MULTILINE)
_IDENT_RE = re.compile(r"\s*([A-Za-z_][A-Za-z0-9_]*)")
_TYPE_SINGLE_RE = re.compile(r"^\s*type\s+([A-Za-z_][A-Za-z0-9_]*)(\[[^\]]*\])?\s+(?!\()(.+)$")
_TYPE_GROUP_START_RE = re.compile(r"^\s*type\s*\(")
_TYPE_ENTRY_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)(\[[^\]]*\])?\s+(.+)$")
_NAMED_PARAM_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s+(\S.*)$", re.DOTALL)
_PLAIN_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TYPE_KEYWORDS = frozenset({"chan", "func", "map", "struct", "interface"})
_LITERAL_TYPE_RE = re.compile(r"\b(interface|struct)\s*$")


class GoSourceError(ValueError):
    """Raised when text cannot be read as a Go source file."""


@dataclass(slots=True, frozen=True)
class GoParam:
    """One declared parameter; name is None for unnamed parameters."""

    name: str | None
    type_expr: str


@dataclass(slots=True, frozen=True)
class GoFuncDecl:
    """Top-level function or method declaration with its body line range."""

    name: str
    receiver: GoParam | None
    params: tuple[GoParam, ...]
    start_line: int
    end_line: int

    @property
    def receiver_base(self) -> str | None:
        """Return the receiver type name without '*' or type parameters."""
        if self.receiver is None:
            return None
        return self.receiver.type_expr.lstrip("*").split("[", 1)[0].strip() or None

    @property
    def pointer_receiver(self) -> bool:
        return self.receiver is not None and self.receiver.type_expr.startswith("*")

    def spans(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line


@dataclass(slots=True, frozen=True)
class GoFile:
    """Parsed view of one Go source file."""

    package: str
    funcs: tuple[GoFuncDecl, ...]
    line_count: int
    types: dict[str, str] = field(default_factory=dict)

    def find_func(self, name: str, receiver: str | None, line: int) -> GoFuncDecl | None:
        """Return the declaration named name whose body spans line."""
        if line < 1 or line > self.line_count:
            return None
        for decl in self.funcs:
            if decl.name == name and decl.receiver_base == receiver and decl.spans(line):
                return decl
        return None


def parse_go_source(text: str) -> GoFile:
    """Parse Go source text, raising GoSourceError when it is not Go code."""
    masked = mask_comments_and_strings(text)
    package = _PACKAGE_RE.search(masked)
    if package is None:
        raise GoSourceError("missing package clause")
    if not is_balanced(masked):
        raise GoSourceError("unbalanced braces")
    if not is_balanced(masked, "(", ")"):
        raise GoSourceError("unbalanced parentheses")

    index = LineIndex(masked)
    depths = _line_depths(masked)
    funcs: list[GoFuncDecl] = []
    for match in _FUNC_START_RE.finditer(masked):
        line = index.line_of(match.start())
        if depths[line - 1] != 0:
            continue
        decl = _parse_func(masked, match.end(), index, start_line=line)
        if decl is not None:
            funcs.append(decl)

    return GoFile(
        package=package.group(1),
        funcs=tuple(funcs),
        line_count=len(text.splitlines()),
        types=_collect_types(masked.split("\n"), depths),
    )


def parse_params(text: str) -> tuple[GoParam, ...]:
    """Split a parameter list into (name, type) pairs following Go grouping."""
    entries = [" ".join(entry.split()) for entry in split_top_level(text)]
    named = any(_named_entry(entry) is not None for entry in entries)
    if not named:
        return tuple(GoParam(name=None, type_expr=entry) for entry in entries)

    params: list[GoParam] = []
    pending: list[str] = []
    for entry in entries:
        matched = _named_entry(entry)
        if matched is None:
            if _PLAIN_IDENT_RE.match(entry):
                pending.append(entry)
            continue
        name, type_expr = matched
        for grouped in (*pending, name):
            params.append(GoParam(name=grouped, type_expr=type_expr))
        pending = []
    return tuple(params)


def _named_entry(entry: str) -> tuple[str, str] | None:
    matched = _NAMED_PARAM_RE.match(entry)
    if matched is None or matched.group(1) in _TYPE_KEYWORDS:
        return None
    return matched.group(1), matched.group(2).strip()


def _parse_func(
    masked: str, cursor: int, index: LineIndex, *, start_line: int
) -> GoFuncDecl | None:
    receiver: GoParam | None = None
    cursor = _skip_space(masked, cursor)
    if cursor < len(masked) and masked[cursor] == "(":
        close = find_closing(masked, cursor)
        if close is None:
            return None
        receivers = parse_params(masked[cursor + 1 : close])
        if len(receivers) != 1:
            return None
        receiver = receivers[0]
        cursor = close + 1

    ident = _IDENT_RE.match(masked, cursor)
    if ident is None:
        return None
    name = ident.group(1)
    cursor = _skip_space(masked, ident.end())

    if cursor < len(masked) and masked[cursor] == "[":
        close = find_closing(masked, cursor)
        if close is None:
            return None
        cursor = _skip_space(masked, close + 1)

    if cursor >= len(masked) or masked[cursor] != "(":
        return None
    close = find_closing(masked, cursor)
    if close is None:
        return None
    params = parse_params(masked[cursor + 1 : close])

    body = _find_body_start(masked, close + 1)
    if body is None:
        return None
    body_end = find_closing(masked, body)
    if body_end is None:
        return None
    return GoFuncDecl(
        name=name,
        receiver=receiver,
        params=params,
        start_line=start_line,
        end_line=index.line_of(body_end),
    )


def _find_body_start(masked: str, cursor: int) -> int | None:
    """Return the offset of the body brace, skipping result type literals."""
    while cursor < len(masked):
        char = masked[cursor]
        if char == "\n":
            return None
        if char in "([":
            close = find_closing(masked, cursor)
            if close is None:
                return None
            cursor = close + 1
            continue
        if char == "{":
            if _LITERAL_TYPE_RE.search(masked[max(0, cursor - 32) : cursor]) is None:
                return cursor
            close = find_closing(masked, cursor)
            if close is None:
                return None
            cursor = close + 1
            continue
        cursor += 1
    return None


def _collect_types(lines: list[str], depths: list[int]) -> dict[str, str]:
    types: dict[str, str] = {}
    index = 0
    while index < len(lines):
        line = lines[index]
        if depths[index] != 0:
            index += 1
            continue
        single = _TYPE_SINGLE_RE.match(line)
        if single is not None:
            types[single.group(1)] = _underlying(single.group(3))
            index += 1
            continue
        if _TYPE_GROUP_START_RE.match(line) is not None:
            group_end = _find_group_end(lines, index)
            for entry_index in range(index + 1, group_end):
                entry = _TYPE_ENTRY_RE.match(lines[entry_index])
                if entry is not None and depths[entry_index] == 0:
                    types[entry.group(1)] = _underlying(entry.group(3))
            index = group_end + 1
            continue
        index += 1
    return types


def _underlying(expr: str) -> str:
    stripped = expr.strip()
    if stripped.startswith("="):
        stripped = stripped[1:].strip()
    return " ".join(stripped.split())


def _line_depths(masked_text: str) -> list[int]:
    depths: list[int] = []
    depth = 0
    for line in masked_text.split("\n"):
        depths.append(depth)
        for char in line:
            if char == "{":
                depth += 1
            elif char == "}":
                depth = max(0, depth - 1)
    return depths


def _find_group_end(lines: list[str], start_index: int) -> int:
    depth = 0
    for idx in range(start_index, len(lines)):
        for char in lines[idx]:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return idx
    return len(lines) - 1


def _skip_space(text: str, cursor: int) -> int:
    while cursor < len(text) and text[cursor] in " \t":
        cursor += 1
    return cursor
