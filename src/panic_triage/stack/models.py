"""Typed models for parsed goroutine dumps."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote

POINTER_FLOOR = 16 * 1024 * 1024
POINTER_CEILING = 2**63
ELIDED_MARKER = "..."


@dataclass(slots=True, frozen=True)
class Func:
    """Fully qualified function reference as printed by the runtime."""

    raw: str = ""

    def __str__(self) -> str:
        return unquote(self.raw)

    def _split(self) -> list[str]:
        return posixpath.basename(self.raw).split(".", 1)

    @property
    def name(self) -> str:
        """Return the naked function name, including any receiver."""
        parts = self._split()
        if len(parts) == 1:
            return parts[0]
        return parts[1]

    @property
    def pkg_name(self) -> str:
        """Return the package name for this function reference."""
        parts = self._split()
        if len(parts) == 1:
            return ""
        return unquote(parts[0])

    @property
    def pkg_dot_name(self) -> str:
        """Return the "<package>.<func>" form."""
        parts = self._split()
        if len(parts) == 1:
            return parts[0]
        pkg = unquote(parts[0])
        if pkg or parts[1]:
            return f"{pkg}.{parts[1]}"
        return ""

    @property
    def import_path(self) -> str:
        """Return the directory-qualified package import path."""
        head, _, tail = self.raw.rpartition("/")
        pkg = tail.split(".", 1)[0] if "." in tail else ""
        if not pkg:
            return ""
        return unquote(f"{head}/{pkg}" if head else pkg)

    @property
    def receiver(self) -> str | None:
        """Return the receiver type for method frames, without '*' or parens."""
        head, sep, _ = _strip_type_params(self.name).rpartition(".")
        if not sep or not head:
            return None
        receiver = head.strip("()").lstrip("*")
        if "." in receiver:
            return None
        return receiver or None

    @property
    def method(self) -> str:
        """Return the bare function or method identifier."""
        return _strip_type_params(self.name).rpartition(".")[2]

    @property
    def is_exported(self) -> bool:
        """Return True when the function is exported or is main.main."""
        last = self.name.split(".")[-1]
        if last[:1].isupper():
            return True
        return self.pkg_name == "main" and self.name == "main"


@dataclass(slots=True)
class Arg:
    """One raw argument word, optionally relabelled by augmentation."""

    value: int = 0
    name: str = ""
    processed: str | None = None
    pointer: bool | None = None

    def __str__(self) -> str:
        if self.name:
            return self.name
        if self.value == 0:
            return "0"
        return f"{self.value:#x}"

    @property
    def is_ptr(self) -> bool:
        """Return True when the word is, or looks like, a pointer."""
        if self.pointer is not None:
            return self.pointer
        return POINTER_FLOOR < self.value < POINTER_CEILING


@dataclass(slots=True)
class Args:
    """Decoded call arguments of one frame."""

    values: list[Arg] = field(default_factory=list)
    elided: bool = False

    def __str__(self) -> str:
        rendered: list[str] = []
        for arg in self.values:
            if arg.processed is None:
                rendered.append(str(arg))
            elif arg.processed:
                rendered.append(arg.processed)
        if self.elided:
            rendered.append(ELIDED_MARKER)
        return ", ".join(rendered)

    @property
    def processed(self) -> bool:
        """Return True when augmentation relabelled at least one word."""
        return any(arg.processed is not None for arg in self.values)


@dataclass(slots=True)
class Call:
    """One stack frame."""

    func: Func = field(default_factory=Func)
    args: Args = field(default_factory=Args)
    src_path: str = ""
    local_src_path: str = ""
    line: int = 0

    @property
    def src_name(self) -> str:
        return posixpath.basename(self.src_path.replace("\\", "/"))

    @property
    def src_line(self) -> str:
        """Return "file.go:12", the short location used for display."""
        return f"{self.src_name}:{self.line}"

    @property
    def full_src_line(self) -> str:
        return f"{self.src_path}:{self.line}"

    @property
    def pkg_src(self) -> str:
        """Return "pkg/file.go"."""
        parent = posixpath.basename(posixpath.dirname(self.src_path.replace("\\", "/")))
        if not parent:
            return self.src_name
        return f"{parent}/{self.src_name}"

    @property
    def is_stdlib(self) -> bool:
        """Return True when the frame lives in the Go standard library."""
        import_path = self.func.import_path
        if not import_path or self.is_pkg_main:
            return False
        if "." in import_path.split("/")[0]:
            return False
        normalized = self.src_path.replace("\\", "/")
        return f"/src/{import_path}/" in normalized

    @property
    def is_pkg_main(self) -> bool:
        return self.func.pkg_name == "main"

    def same_location(self, other: Call) -> bool:
        """Compare by qualified name, file and line."""
        return (
            self.func == other.func
            and self.src_path == other.src_path
            and self.line == other.line
        )


@dataclass(slots=True)
class Stack:
    """Ordered frames, crash site first."""

    calls: list[Call] = field(default_factory=list)
    elided: bool = False


@dataclass(slots=True)
class Signature:
    """Structural identity used to deduplicate goroutines."""

    state: str = ""
    sleep_min: int = 0
    sleep_max: int = 0
    sleep_unit: str = "minutes"
    locked: bool = False
    created_by: Call = field(default_factory=Call)
    stack: Stack = field(default_factory=Stack)

    def sleep_string(self) -> str:
        """Return the sleep duration for display, collapsing equal bounds."""
        if self.sleep_max == 0:
            return ""
        if self.sleep_min != self.sleep_max:
            return f"{self.sleep_min}~{self.sleep_max} {self.sleep_unit}"
        return f"{self.sleep_max} {self.sleep_unit}"

    def created_by_string(self, full_path: bool = False) -> str:
        """Return "pkg.Func @ file.go:12", or "" for root goroutines."""
        created = self.created_by.func.pkg_dot_name
        if not created:
            return ""
        location = self.created_by.full_src_line if full_path else self.created_by.src_line
        return f"{created} @ {location}"


@dataclass(slots=True)
class Goroutine:
    """One goroutine snapshot from the dump."""

    id: int
    signature: Signature = field(default_factory=Signature)
    first: bool = False


@dataclass(slots=True)
class Context:
    """Top-level parse result."""

    goroutines: list[Goroutine]
    local_root: Path | None = None


@dataclass(slots=True, frozen=True)
class NoDumpFound:
    """Parse outcome for input that holds no goroutine header at all."""

    lines_scanned: int


@dataclass(slots=True)
class Bucket:
    """Goroutines sharing one signature. Mutable signature parts leave it unhashable."""

    signature: Signature
    ids: tuple[int, ...]
    first: bool = False

    def __len__(self) -> int:
        return len(self.ids)

    @property
    def state(self) -> str:
        return self.signature.state

    @property
    def locked(self) -> bool:
        return self.signature.locked

    @property
    def stack(self) -> Stack:
        return self.signature.stack


def _strip_type_params(name: str) -> str:
    output: list[str] = []
    depth = 0
    for char in name:
        if char == "[":
            depth += 1
        elif char == "]":
            depth = max(0, depth - 1)
        elif depth == 0:
            output.append(char)
    return "".join(output)
