"""Goroutine bucketing."""

from .bucket import (
    MERGED_POINTER_NAME,
    Similarity,
    aggregate,
    args_similar,
    merge_signatures,
    signatures_similar,
    stacks_similar,
)

__all__ = [
    "MERGED_POINTER_NAME",
    "Similarity",
    "aggregate",
    "args_similar",
    "merge_signatures",
    "signatures_similar",
    "stacks_similar",
]
