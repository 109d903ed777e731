"""Group goroutines with equivalent signatures into buckets."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum

from panic_triage.stack.models import (
    Arg,
    Args,
    Bucket,
    Goroutine,
    Signature,
    Stack,
)

MERGED_POINTER_NAME = "*"

# Continuation words of string and slice renderings.
_CONTINUATION_LABELS = {1: "len", 2: "cap"}


class Similarity(Enum):
    """How strictly argument words must match for two frames to be the same."""

    EXACT_LINES = "exact_lines"
    ANY_POINTER = "any_pointer"
    ANY_VALUE = "any_value"


def args_similar(left: Args, right: Args, similarity: Similarity) -> bool:
    if left.elided != right.elided or len(left.values) != len(right.values):
        return False
    if similarity is Similarity.ANY_VALUE:
        return True
    for left_arg, right_arg in zip(left.values, right.values, strict=True):
        if left_arg.value == right_arg.value:
            continue
        if similarity is Similarity.ANY_POINTER and left_arg.is_ptr and right_arg.is_ptr:
            continue
        return False
    return True


def stacks_similar(left: Stack, right: Stack, similarity: Similarity) -> bool:
    if left.elided != right.elided or len(left.calls) != len(right.calls):
        return False
    return all(
        left_call.same_location(right_call)
        and args_similar(left_call.args, right_call.args, similarity)
        for left_call, right_call in zip(left.calls, right.calls, strict=True)
    )


def signatures_similar(left: Signature, right: Signature, similarity: Similarity) -> bool:
    """Return True when two goroutines belong in the same bucket."""
    return (
        left.state == right.state
        and left.locked == right.locked
        and left.sleep_min == right.sleep_min
        and left.sleep_max == right.sleep_max
        and left.sleep_unit == right.sleep_unit
        and left.created_by.same_location(right.created_by)
        and stacks_similar(left.stack, right.stack, similarity)
    )


def merge_signatures(left: Signature, right: Signature) -> Signature:
    """Return left with argument words that differ from right marked as merged."""
    calls = [
        replace(left_call, args=_merge_args(left_call.args, right_call.args))
        for left_call, right_call in zip(left.stack.calls, right.stack.calls, strict=True)
    ]
    return replace(left, stack=Stack(calls=calls, elided=left.stack.elided))


def _merge_args(left: Args, right: Args) -> Args:
    merged: list[Arg] = []
    owner: int | None = None
    for index, (left_arg, right_arg) in enumerate(zip(left.values, right.values, strict=True)):
        if left_arg.processed:
            owner = index
        if left_arg.value == right_arg.value:
            merged.append(left_arg)
            continue
        if left_arg.processed:
            merged.append(
                replace(
                    left_arg,
                    name=MERGED_POINTER_NAME,
                    processed=_merge_head(left_arg.processed),
                )
            )
            continue
        merged.append(replace(left_arg, name=MERGED_POINTER_NAME))
        if left_arg.processed == "" and owner is not None:
            text = merged[owner].processed or ""
            merged[owner] = replace(merged[owner], processed=_merge_tail(text, index - owner))
    return Args(values=merged, elided=left.elided)


def _merge_head(text: str) -> str:
    # The first word is the marker inside the trailing group, or the value after "=".
    if text.endswith(")"):
        start = text.rfind("(") + 1
        end = start
        while end < len(text) and text[end] not in ",)":
            end += 1
        return f"{text[:start]}{MERGED_POINTER_NAME}{text[end:]}"
    head, sep, _ = text.rpartition("=")
    return f"{head}{sep}{MERGED_POINTER_NAME}"


def _merge_tail(text: str, offset: int) -> str:
    label = _CONTINUATION_LABELS.get(offset)
    if label is not None and f"{label}=" in text:
        return re.sub(rf"\b{label}=[^,)]*", f"{label}={MERGED_POINTER_NAME}", text)
    return re.sub(r"\([^()]*\)$", f"({MERGED_POINTER_NAME})", text)


def _structural_key(signature: Signature) -> tuple[object, ...]:
    created = signature.created_by
    frames = tuple(
        (call.func, call.src_path, call.line, call.args.elided, len(call.args.values))
        for call in signature.stack.calls
    )
    return (
        signature.state,
        signature.locked,
        signature.sleep_min,
        signature.sleep_max,
        signature.sleep_unit,
        (created.func, created.src_path, created.line),
        signature.stack.elided,
        frames,
    )


@dataclass(slots=True)
class _Group:
    signature: Signature
    members: list[Goroutine] = field(default_factory=list)


def aggregate(
    goroutines: list[Goroutine],
    similarity: Similarity = Similarity.ANY_POINTER,
) -> list[Bucket]:
    """Bucket goroutines in first-encounter order; ids keep input order.

    Marks the first member of each bucket as its representative. Only the
    bucket holding the first goroutine of the input has first=True.
    """
    groups: list[_Group] = []
    candidates: dict[tuple[object, ...], list[_Group]] = {}
    for goroutine in goroutines:
        signature = goroutine.signature
        same_shape = candidates.setdefault(_structural_key(signature), [])
        for group in same_shape:
            if signatures_similar(group.signature, signature, similarity):
                if group.signature != signature:
                    group.signature = merge_signatures(group.signature, signature)
                group.members.append(goroutine)
                break
        else:
            group = _Group(signature=signature, members=[goroutine])
            same_shape.append(group)
            groups.append(group)

    buckets: list[Bucket] = []
    for position, group in enumerate(groups):
        for rank, member in enumerate(group.members):
            member.first = rank == 0
        buckets.append(
            Bucket(
                signature=group.signature,
                ids=tuple(member.id for member in group.members),
                first=position == 0,
            )
        )
    return buckets

