"""Mapping from Go parameter types to the machine words they occupy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TypeShape(Enum):
    """Closed set of argument encodings printed by the runtime."""

    POINTER = "pointer"
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    SLICE = "slice"
    MAP = "map"
    CHANNEL = "channel"
    FUNC = "func"
    INTERFACE = "interface"
    UNKNOWN = "unknown"


WORD_COUNTS: dict[TypeShape, int] = {
    TypeShape.POINTER: 1,
    TypeShape.SIGNED: 1,
    TypeShape.UNSIGNED: 1,
    TypeShape.FLOAT: 1,
    TypeShape.BOOL: 1,
    TypeShape.STRING: 2,
    TypeShape.SLICE: 3,
    TypeShape.MAP: 1,
    TypeShape.CHANNEL: 1,
    TypeShape.FUNC: 1,
    TypeShape.INTERFACE: 2,
    TypeShape.UNKNOWN: 0,
}

# Shapes whose first word is an address.
POINTER_SHAPES = frozenset(
    {
        TypeShape.POINTER,
        TypeShape.STRING,
        TypeShape.SLICE,
        TypeShape.MAP,
        TypeShape.CHANNEL,
        TypeShape.FUNC,
        TypeShape.INTERFACE,
    }
)

_SIGNED_BITS = {"int": 64, "int8": 8, "int16": 16, "int32": 32, "int64": 64, "rune": 32}
_UNSIGNED_BITS = {
    "uint": 64,
    "uint8": 8,
    "uint16": 16,
    "uint32": 32,
    "uint64": 64,
    "uintptr": 64,
    "byte": 8,
}
_FLOAT_BITS = {"float32": 32, "float64": 64}

KNOWN_INTERFACES = frozenset(
    {
        "error",
        "any",
        "context.Context",
        "fmt.Stringer",
        "http.Handler",
        "http.ResponseWriter",
        "io.Closer",
        "io.ReadCloser",
        "io.ReadWriter",
        "io.Reader",
        "io.WriteCloser",
        "io.Writer",
        "net.Conn",
        "net.Listener",
        "reflect.Type",
        "sort.Interface",
    }
)
KNOWN_ALIASES = {
    "time.Duration": "int64",
    "os.FileMode": "uint32",
    "fs.FileMode": "uint32",
    "unsafe.Pointer": "*byte",
}

_MAX_RESOLVE_DEPTH = 8


@dataclass(slots=True, frozen=True)
class TypeDescriptor:
    """Shape of one declared parameter type."""

    expr: str
    shape: TypeShape
    bits: int = 64

    @property
    def words(self) -> int:
        return WORD_COUNTS[self.shape]

    @property
    def display(self) -> str:
        """Return the type as written, with variadic '...T' shown as '[]T'."""
        if self.expr.startswith("..."):
            return f"[]{self.expr[3:]}"
        return self.expr


def word_count(shape: TypeShape) -> int:
    """Return how many argument words a value of this shape occupies."""
    return WORD_COUNTS[shape]


def describe(expr: str, local_types: dict[str, str] | None = None) -> TypeDescriptor:
    """Classify a Go type expression, resolving named types declared locally."""
    normalized = " ".join(expr.split())
    shape, bits = _classify(normalized, local_types or {}, depth=0)
    return TypeDescriptor(expr=normalized, shape=shape, bits=bits)


def _classify(expr: str, local_types: dict[str, str], depth: int) -> tuple[TypeShape, int]:
    if depth > _MAX_RESOLVE_DEPTH or not expr:
        return TypeShape.UNKNOWN, 64
    if expr.startswith("..."):
        return TypeShape.SLICE, 64
    if expr.startswith("*"):
        return TypeShape.POINTER, 64
    if expr.startswith("[]"):
        return TypeShape.SLICE, 64
    if expr.startswith("map["):
        return TypeShape.MAP, 64
    if expr.startswith(("chan ", "chan<-", "<-chan")):
        return TypeShape.CHANNEL, 64
    if expr.startswith("func(") or expr.startswith("func "):
        return TypeShape.FUNC, 64
    if expr.startswith("interface"):
        return TypeShape.INTERFACE, 64
    if expr in _SIGNED_BITS:
        return TypeShape.SIGNED, _SIGNED_BITS[expr]
    if expr in _UNSIGNED_BITS:
        return TypeShape.UNSIGNED, _UNSIGNED_BITS[expr]
    if expr in _FLOAT_BITS:
        return TypeShape.FLOAT, _FLOAT_BITS[expr]
    if expr == "bool":
        return TypeShape.BOOL, 8
    if expr == "string":
        return TypeShape.STRING, 64
    if expr in KNOWN_INTERFACES:
        return TypeShape.INTERFACE, 64
    if expr in KNOWN_ALIASES:
        return _classify(KNOWN_ALIASES[expr], local_types, depth + 1)
    base = expr.split("[", 1)[0]
    if base in local_types:
        return _classify(local_types[base], local_types, depth + 1)
    return TypeShape.UNKNOWN, 64
