"""Markdown text helpers shared by the built-in extractors."""

import re
from collections.abc import Iterator

_FENCE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_INLINE_CODE = re.compile(r"`[^`\n]*`")


def iter_prose_lines(body: str) -> Iterator[tuple[int, str]]:
    """
    Yield ``(start_index, line)`` for every line outside fenced code.

    ``start_index`` is the string index of the line within ``body``.
    Fences opened with backticks close only with backticks and vice
    versa; an unclosed fence hides the rest of the body.
    """
    fence: str | None = None
    position = 0
    for line in body.split("\n"):
        start = position
        position += len(line) + 1

        match = _FENCE.match(line)
        if match:
            marker = match.group(1)
            if fence is None:
                fence = marker
                continue
            if marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
                continue
        if fence is not None:
            continue

        yield start, line.rstrip("\r")


def mask_inline_code(line: str) -> str:
    """Blank out inline code spans, keeping every other index stable."""
    return _INLINE_CODE.sub(lambda m: " " * len(m.group(0)), line)
