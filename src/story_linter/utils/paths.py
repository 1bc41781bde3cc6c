"""Path utilities for canonical corpus paths."""

from pathlib import Path


def canonical_path(path: Path) -> str:
    """
    Canonicalize a path for use as a corpus identity.

    Resolves symlinks and ``..`` segments and always uses forward
    slashes, so the same file reached through two globs compares equal.

    Args:
        path: Path to canonicalize.

    Returns:
        Absolute POSIX path string.
    """
    return path.resolve().as_posix()


def normalize_path(file_path: Path, root: Path) -> str:
    """
    Normalize a file path to be relative to the project root.

    Args:
        file_path: Path to normalize.
        root: Project root directory.

    Returns:
        Relative path as string with forward slashes.
    """
    try:
        relative = file_path.relative_to(root)
    except ValueError:
        # Outside the root (e.g. reached through a symlink)
        relative = file_path

    return relative.as_posix()
