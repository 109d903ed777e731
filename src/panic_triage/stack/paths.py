"""Path guessing from build-time dump paths to local source files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from panic_triage.stack.models import Call, Goroutine

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


def _normalize_dump_path(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized[2:], True
    return normalized, False


def guess_local_path(root: Path, src_path: str) -> Path | None:
    """Resolve a printed source path to an existing file under root.

    Absolute paths that already exist under root are used as-is. Otherwise the
    longest trailing run of path components that names a file under root wins.
    """
    resolved_root = root.resolve()
    normalized, is_absolute_style = _normalize_dump_path(src_path)
    if not normalized:
        return None

    if is_absolute_style and not WINDOWS_ABSOLUTE_PATTERN.match(src_path):
        direct = Path(normalized).resolve(strict=False)
        if direct.is_relative_to(resolved_root) and direct.is_file():
            return direct

    parts = [part for part in normalized.split("/") if part not in ("", ".", "..")]
    for start in range(len(parts)):
        candidate = resolved_root.joinpath(*parts[start:])
        if candidate.is_file():
            return candidate
    return None


class PathGuesser:
    """Memoizing resolver; each distinct printed path is resolved once."""

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()
        self._resolved: dict[str, str] = {}

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, src_path: str) -> str:
        """Return the local path for src_path, or "" when none exists."""
        cached = self._resolved.get(src_path)
        if cached is not None:
            return cached
        guessed = guess_local_path(self._root, src_path)
        local = str(guessed) if guessed is not None else ""
        self._resolved[src_path] = local
        return local

    def update(self, call: Call) -> None:
        if call.src_path and not call.local_src_path:
            call.local_src_path = self.resolve(call.src_path)


def resolve_local_paths(goroutines: list[Goroutine], root: Path) -> None:
    """Fill local_src_path for every frame whose file exists under root."""
    guesser = PathGuesser(root)
    for goroutine in goroutines:
        guesser.update(goroutine.signature.created_by)
        for call in goroutine.signature.stack.calls:
            guesser.update(call)
