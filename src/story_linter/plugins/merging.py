"""Merge strategies shared by extractors.

Per-file results always arrive sorted by file path, so both strategies
are deterministic for a given corpus.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from story_linter.models.extraction import FileExtraction


def concat(items: Sequence[FileExtraction]) -> tuple[Any, ...]:
    """Flatten iterable payloads into one tuple, in file order."""
    merged: list[Any] = []
    for item in items:
        if item.payload:
            merged.extend(item.payload)
    return tuple(merged)


def first_wins(
    items: Sequence[FileExtraction],
    combine: Callable[[Any, Any], Any] | None = None,
) -> dict[Any, Any]:
    """
    Merge mapping payloads, keeping the first value seen for each key.

    Args:
        items: Per-file results whose payloads are mappings.
        combine: Optional ``(kept, later) -> kept`` hook applied when a
            key reappears in a later file.

    Returns:
        Dict in first-seen order.
    """
    merged: dict[Any, Any] = {}
    for item in items:
        payload: Mapping[Any, Any] = item.payload or {}
        for key, value in payload.items():
            if key not in merged:
                merged[key] = value
            elif combine is not None:
                merged[key] = combine(merged[key], value)
    return merged
