"""Goroutine dump models and parser."""

from .models import (
    Arg,
    Args,
    Bucket,
    Call,
    Context,
    Func,
    Goroutine,
    NoDumpFound,
    Signature,
    Stack,
)
from .naming import name_shared_pointers
from .parser import MalformedDumpError, iter_lines, parse_args, parse_dump, parse_header_details
from .paths import PathGuesser, guess_local_path, resolve_local_paths

__all__ = [
    "Arg",
    "Args",
    "Bucket",
    "Call",
    "Context",
    "Func",
    "Goroutine",
    "MalformedDumpError",
    "NoDumpFound",
    "PathGuesser",
    "Signature",
    "Stack",
    "guess_local_path",
    "iter_lines",
    "name_shared_pointers",
    "parse_args",
    "parse_dump",
    "parse_header_details",
    "resolve_local_paths",
]
