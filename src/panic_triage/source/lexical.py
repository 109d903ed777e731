"""Deterministic lexical scanning helpers for Go source text."""

from __future__ import annotations

import bisect

LINE_COMMENT = "//"
BLOCK_COMMENT = ("/*", "*/")
STRING_DELIMITERS = ('"', "'")
RAW_STRING_DELIMITER = "`"
ESCAPE_CHAR = "\\"


def mask_comments_and_strings(text: str) -> str:
    """Blank out comments and string contents, keeping offsets and line count."""
    chars = list(text)
    length = len(text)
    index = 0
    state: tuple[str, str] | None = None

    while index < length:
        if state is None:
            if text.startswith(LINE_COMMENT, index):
                _blank(chars, index, len(LINE_COMMENT))
                state = ("line_comment", LINE_COMMENT)
                index += len(LINE_COMMENT)
                continue

            start_marker, end_marker = BLOCK_COMMENT
            if text.startswith(start_marker, index):
                _blank(chars, index, len(start_marker))
                state = ("block_comment", end_marker)
                index += len(start_marker)
                continue

            char = text[index]
            if char == RAW_STRING_DELIMITER:
                chars[index] = " "
                state = ("raw_string", char)
                index += 1
                continue

            if char in STRING_DELIMITERS:
                chars[index] = " "
                state = ("string", char)
                index += 1
                continue

            index += 1
            continue

        mode, marker = state
        if mode == "line_comment":
            if text[index] == "\n":
                state = None
            else:
                chars[index] = " "
            index += 1
            continue

        closes = text.startswith(marker, index)
        if mode == "string":
            closes = closes and not _is_escaped(text, index)
            if text[index] == "\n":
                # Interpreted strings and runes cannot span lines.
                state = None
                index += 1
                continue
        if closes:
            _blank(chars, index, len(marker))
            state = None
            index += len(marker)
            continue
        if text[index] != "\n":
            chars[index] = " "
        index += 1

    return "".join(chars)


def is_balanced(masked_text: str, open_char: str = "{", close_char: str = "}") -> bool:
    """Return True when every close_char matches an earlier open_char."""
    depth = 0
    for char in masked_text:
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def find_closing(masked_text: str, open_index: int) -> int | None:
    """Return the index of the bracket closing the one at open_index."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    opener = masked_text[open_index]
    closer = pairs[opener]
    depth = 0
    for index in range(open_index, len(masked_text)):
        char = masked_text[index]
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return index
    return None


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split on separator where no bracket is open."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


class LineIndex:
    """Maps character offsets to 1-based line numbers."""

    def __init__(self, text: str) -> None:
        self._starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._starts.append(index + 1)

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def line_of(self, offset: int) -> int:
        return bisect.bisect_right(self._starts, offset)


def _blank(chars: list[str], index: int, count: int) -> None:
    for offset in range(count):
        chars[index + offset] = " "


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    cursor = index - 1
    while cursor >= 0 and text[cursor] == ESCAPE_CHAR:
        backslashes += 1
        cursor -= 1
    return backslashes % 2 == 1
