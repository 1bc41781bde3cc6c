"""Tests for path utilities."""

from pathlib import Path

from story_linter.utils.paths import canonical_path, normalize_path


class TestCanonicalPath:
    """Tests for canonical_path."""

    def test_resolves_dot_segments(self, tmp_path: Path) -> None:
        """Test '..' segments collapse."""
        (tmp_path / "a").mkdir()
        path = tmp_path / "a" / ".." / "b.md"
        assert canonical_path(path) == (tmp_path / "b.md").resolve().as_posix()

    def test_same_file_through_symlink(self, tmp_path: Path) -> None:
        """Test a symlinked path canonicalizes to its target."""
        target = tmp_path / "real.md"
        target.write_text("x")
        link = tmp_path / "link.md"
        link.symlink_to(target)
        assert canonical_path(link) == canonical_path(target)


class TestNormalizePath:
    """Tests for normalize_path."""

    def test_relative_to_root(self, tmp_path: Path) -> None:
        """Test paths inside the root become relative."""
        assert normalize_path(tmp_path / "ch" / "a.md", tmp_path) == "ch/a.md"

    def test_outside_root(self, tmp_path: Path) -> None:
        """Test paths outside the root are returned whole."""
        outside = Path("/elsewhere/a.md")
        assert normalize_path(outside, tmp_path) == "/elsewhere/a.md"
