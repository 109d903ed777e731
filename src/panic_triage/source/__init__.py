"""Source lookup and argument augmentation."""

from .augment import augment, pointer_marker, process_call, render
from .cache import FuncMatch, SourceCache, SourceUnavailableError, read_source_bytes
from .golang import GoFile, GoFuncDecl, GoParam, GoSourceError, parse_go_source, parse_params
from .lexical import (
    LineIndex,
    find_closing,
    is_balanced,
    mask_comments_and_strings,
    split_top_level,
)
from .types import TypeDescriptor, TypeShape, describe, word_count

__all__ = [
    "FuncMatch",
    "GoFile",
    "GoFuncDecl",
    "GoParam",
    "GoSourceError",
    "LineIndex",
    "SourceCache",
    "SourceUnavailableError",
    "TypeDescriptor",
    "TypeShape",
    "augment",
    "describe",
    "find_closing",
    "is_balanced",
    "mask_comments_and_strings",
    "parse_go_source",
    "parse_params",
    "pointer_marker",
    "process_call",
    "read_source_bytes",
    "render",
    "split_top_level",
    "word_count",
]
