"""Markdown reader.

Turns a file on disk into a FileRecord: decoded body, parsed front
matter and a line-offset index anchored at the first body line.
"""

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from story_linter.errors import FrontMatterParseError, ReadError
from story_linter.models.files import FileRecord, LineIndex

_BOM = "\ufeff"
_FENCE_OPEN = re.compile(r"---[ \t]*\r?\n")
_FENCE_CLOSE = re.compile(r"^---[ \t]*(?:\r?\n|\Z)", re.MULTILINE)


class MarkdownReader:
    """
    Reader for Markdown source files.

    Handles:
    - Strict UTF-8 decoding (malformed input is a ReadError)
    - Leading byte-order mark removal
    - YAML front-matter fences at the top of the file
    - CRLF and LF line endings (both kept in the body)
    """

    async def read(self, path: str) -> FileRecord:
        """
        Read and parse a single Markdown file.

        Args:
            path: Canonical absolute path of the file.

        Returns:
            FileRecord for the file.

        Raises:
            ReadError: If the file cannot be read or is not valid UTF-8.
            FrontMatterParseError: If the front-matter block is malformed.
        """
        try:
            raw = Path(path).read_bytes()
        except OSError as e:
            raise ReadError(f"Failed to read file: {e.strerror or e}", path) from e

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ReadError(f"File is not valid UTF-8 (byte {e.start})", path) from e

        if text.startswith(_BOM):
            text = text[len(_BOM) :]

        front_matter, body, first_line, first_offset = split_front_matter(text, path)
        logger.debug("Read {} ({} front-matter keys)", path, len(front_matter))
        return FileRecord(
            path=path,
            body=body,
            front_matter=front_matter,
            line_index=LineIndex(body, first_line=first_line, first_offset=first_offset),
        )


def split_front_matter(text: str, path: str) -> tuple[dict[str, Any], str, int, int]:
    """
    Split a leading front-matter block off ``text``.

    Args:
        text: Decoded file contents, BOM already removed.
        path: File path, used in error messages.

    Returns:
        Tuple of (front_matter, body, body_first_line, body_byte_offset).

    Raises:
        FrontMatterParseError: If the block is unterminated, is not valid
            YAML, or is not a mapping.
    """
    opening = _FENCE_OPEN.match(text)
    if not opening:
        return {}, text, 1, 0

    closing = _FENCE_CLOSE.search(text, opening.end())
    if not closing:
        raise FrontMatterParseError("Front matter is not terminated by '---'", path, line=1)

    yaml_text = text[opening.end() : closing.start()]
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        raise FrontMatterParseError(f"Invalid YAML in front matter: {e}", path, line=1) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterParseError(
            f"Front matter must be a mapping, not {type(data).__name__}", path, line=1
        )

    block = text[: closing.end()]
    body = text[closing.end() :]
    first_line = block.count("\n") + 1
    return _normalize(data), body, first_line, len(block.encode("utf-8"))


def _normalize(value: Any) -> Any:
    """Coerce YAML values into strings, numbers, booleans, lists and dicts."""
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set):
        return [_normalize(v) for v in value]
    if isinstance(value, datetime | date):
        return value.isoformat()
    if value is None or isinstance(value, str | int | float | bool):
        return value
    return str(value)
