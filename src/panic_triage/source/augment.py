"""Relabel raw argument words using parameter types recovered from source."""

from __future__ import annotations

import struct

from panic_triage.source.cache import FuncMatch, SourceCache
from panic_triage.source.golang import GoParam
from panic_triage.source.types import POINTER_SHAPES, TypeDescriptor, TypeShape, describe
from panic_triage.stack.models import Arg, Call, Goroutine

POINTER_MARKER = "*"
_WORD_MASK = (1 << 64) - 1


def augment(goroutines: list[Goroutine], cache: SourceCache | None = None) -> None:
    """Enrich every frame's arguments in place; frames without source stay raw."""
    active = cache if cache is not None else SourceCache()
    for goroutine in goroutines:
        for call in goroutine.signature.stack.calls:
            match = active.get_func(call)
            if match is None:
                continue
            call.local_src_path = match.path
            process_call(call, match)


def process_call(call: Call, match: FuncMatch) -> None:
    """Consume argument words parameter by parameter and render each one."""
    params: list[GoParam] = []
    if match.decl.pointer_receiver and match.decl.receiver is not None:
        params.append(match.decl.receiver)
    params.extend(match.decl.params)

    values = call.args.values
    cursor = 0
    for param in params:
        descriptor = describe(param.type_expr, match.source.types)
        if descriptor.shape is TypeShape.UNKNOWN:
            break
        words = values[cursor : cursor + descriptor.words]
        if len(words) < descriptor.words:
            # Elided or truncated list; remaining words stay raw.
            break
        rendered = render(descriptor, words)
        if param.name and param.name != "_":
            rendered = f"{param.name}={rendered}"
        pointer_word = descriptor.shape in POINTER_SHAPES
        for offset, word in enumerate(words):
            word.processed = rendered if offset == 0 else ""
            word.pointer = pointer_word and (
                offset == 0 or descriptor.shape is TypeShape.INTERFACE
            )
        cursor += descriptor.words


def render(descriptor: TypeDescriptor, words: list[Arg]) -> str:
    """Render the words of one parameter for display."""
    shape = descriptor.shape
    if shape is TypeShape.SIGNED:
        return str(_signed(words[0].value, descriptor.bits))
    if shape is TypeShape.UNSIGNED:
        return str(words[0].value & ((1 << descriptor.bits) - 1))
    if shape is TypeShape.BOOL:
        return "true" if words[0].value & 0xFF else "false"
    if shape is TypeShape.FLOAT:
        return _float(words[0].value, descriptor.bits)
    marker = pointer_marker(words[0])
    if shape is TypeShape.POINTER:
        return marker
    if shape is TypeShape.STRING:
        return f"string({marker}, len={words[1].value})"
    if shape is TypeShape.SLICE:
        return f"{descriptor.display}({marker}, len={words[1].value}, cap={words[2].value})"
    return f"{descriptor.display}({marker})"


def pointer_marker(word: Arg) -> str:
    """Return the abstract display for an address word."""
    if word.name:
        return word.name
    if word.value == 0:
        return "nil"
    return POINTER_MARKER


def _signed(value: int, bits: int) -> int:
    masked = value & ((1 << bits) - 1)
    if masked >= 1 << (bits - 1):
        return masked - (1 << bits)
    return masked


def _float(value: int, bits: int) -> str:
    if bits == 32:
        (decoded,) = struct.unpack("<f", (value & 0xFFFFFFFF).to_bytes(4, "little"))
    else:
        (decoded,) = struct.unpack("<d", (value & _WORD_MASK).to_bytes(8, "little"))
    return f"{decoded:g}"
