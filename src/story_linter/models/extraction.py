"""Extraction models shared by the pipeline, the merger and plugins.

These models describe what flows between the engine phases:
the context an extractor sees for one file, the per-file result it
produces, and the corpus handed to validators.
"""

import posixpath
from functools import cached_property
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from story_linter.models.files import LineIndex
from story_linter.models.findings import SourceLocation


class ExtractionContext(BaseModel):
    """Context object for a single-file extraction.

    Extractors receive the body and front matter directly; the context
    supplies everything else they may need without touching the disk.

    Attributes:
        file_path: Canonical absolute POSIX path of the file.
        root_dir: Canonical absolute POSIX path of the project root.
        line_index: Index used to turn body positions into locations.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    file_path: str
    root_dir: str
    line_index: LineIndex

    @property
    def relative_path(self) -> str:
        """File path relative to the project root."""
        return relative_to_root(self.file_path, self.root_dir)

    def location(self, index: int) -> SourceLocation:
        """Translate a string index into the body into a SourceLocation."""
        return self.line_index.location(self.file_path, index)


class FileExtraction(BaseModel):
    """Output of one extractor for one file.

    The payload is opaque to the engine; only the extractor's own merge
    function interprets it.
    """

    model_config = ConfigDict(frozen=True)

    extractor: str
    file: str
    payload: Any = None


class Corpus(BaseModel):
    """The ordered set of files a run validates."""

    model_config = ConfigDict(frozen=True)

    root_dir: str
    files: tuple[str, ...] = Field(default_factory=tuple)

    def __contains__(self, path: object) -> bool:
        return path in self.members

    def __len__(self) -> int:
        return len(self.files)

    @cached_property
    def members(self) -> frozenset[str]:
        """Files as a set, for membership tests."""
        return frozenset(self.files)

    def relative(self, path: str) -> str:
        """Path relative to the project root, POSIX separators."""
        return relative_to_root(path, self.root_dir)


def relative_to_root(path: str, root_dir: str) -> str:
    """Render ``path`` relative to ``root_dir`` when it lies beneath it."""
    if path == root_dir:
        return "."
    prefix = root_dir.rstrip("/") + "/"
    if path.startswith(prefix):
        return path[len(prefix) :]
    return posixpath.normpath(path)
