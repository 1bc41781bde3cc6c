"""Parsed file records and the line-offset index."""

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any

from story_linter.models.findings import SourceLocation


class LineIndex:
    """Translate positions in a body of text into source locations.

    Built by a single left-to-right pass over the text that records, for
    every line start, both its string index and its UTF-8 byte offset.
    ``first_line`` and ``first_offset`` anchor the body inside its file
    when a front-matter block precedes it.
    """

    def __init__(self, text: str, first_line: int = 1, first_offset: int = 0) -> None:
        self._text = text
        self.first_line = first_line
        self._char_starts: list[int] = []
        self._byte_starts: list[int] = []

        char_pos = 0
        byte_pos = first_offset
        for line in text.split("\n"):
            self._char_starts.append(char_pos)
            self._byte_starts.append(byte_pos)
            char_pos += len(line) + 1
            byte_pos += len(line.encode("utf-8")) + 1

    @property
    def line_count(self) -> int:
        """Number of lines in the indexed text."""
        return len(self._char_starts)

    def locate(self, index: int) -> tuple[int, int, int]:
        """Return ``(line, column, byte_offset)`` for a string index.

        Indexes past the end of the text clamp to the end.
        """
        index = max(0, min(index, len(self._text)))
        row = bisect_right(self._char_starts, index) - 1
        line_start = self._char_starts[row]
        column = index - line_start + 1
        byte_offset = self._byte_starts[row] + len(
            self._text[line_start:index].encode("utf-8")
        )
        return self.first_line + row, column, byte_offset

    def location(self, file: str, index: int) -> SourceLocation:
        """Build a SourceLocation in ``file`` for a string index."""
        line, column, offset = self.locate(index)
        return SourceLocation(file=file, line=line, column=column, offset=offset)


@dataclass(frozen=True)
class FileRecord:
    """A source file read once by the Markdown reader.

    Attributes:
        path: Canonical absolute POSIX path.
        body: Text after the front-matter block (BOM removed, line endings kept).
        front_matter: Parsed front-matter mapping, empty when absent.
        line_index: Index translating body positions into file locations.
    """

    path: str
    body: str
    front_matter: dict[str, Any] = field(default_factory=dict)
    line_index: LineIndex = field(default_factory=lambda: LineIndex(""))

    def location(self, index: int) -> SourceLocation:
        """Source location of a string index into ``body``."""
        return self.line_index.location(self.path, index)
