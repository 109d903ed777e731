"""Stable labels for pointer values shared across frames."""

from __future__ import annotations

from panic_triage.stack.models import Arg, Goroutine


def name_shared_pointers(goroutines: list[Goroutine]) -> None:
    """Label every pointer word that occurs more than once as "#N".

    Values seen in the first goroutine are numbered first; within each group
    numbering follows ascending value so output is deterministic.
    """
    occurrences: dict[int, list[Arg]] = {}
    in_primary: set[int] = set()
    for index, goroutine in enumerate(goroutines):
        for call in goroutine.signature.stack.calls:
            for arg in call.args.values:
                if not arg.is_ptr:
                    continue
                occurrences.setdefault(arg.value, []).append(arg)
                if index == 0:
                    in_primary.add(arg.value)

    shared = [value for value, args in occurrences.items() if len(args) > 1]
    primary = sorted(value for value in shared if value in in_primary)
    rest = sorted(value for value in shared if value not in in_primary)

    for label, value in enumerate(primary + rest, start=1):
        for arg in occurrences[value]:
            arg.name = f"#{label}"
