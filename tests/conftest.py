"""Shared fixtures for story-linter tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from story_linter.config.models import EngineConfig


@pytest.fixture
def write_corpus(tmp_path: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """Factory fixture writing a corpus of files under tmp_path."""

    def _write(files: dict[str, str | bytes]) -> Path:
        for name, content in files.items():
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return tmp_path

    return _write


@pytest.fixture
def make_config() -> Callable[..., EngineConfig]:
    """Factory fixture building an EngineConfig rooted at a directory."""

    def _make(root: Path, **overrides: Any) -> EngineConfig:
        overrides.setdefault("include", ["**/*.md"])
        return EngineConfig(root_dir=root, **overrides)

    return _make
