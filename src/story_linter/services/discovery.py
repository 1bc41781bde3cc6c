"""File discovery for the validation corpus.

Expands include globs against the project root, removes excluded
paths, and returns a sorted, deduplicated list of canonical paths.
"""

from pathlib import Path

import pathspec
from loguru import logger

from story_linter.config.models import EngineConfig
from story_linter.errors import DiscoveryError
from story_linter.utils.paths import canonical_path, normalize_path


class FileDiscoverer:
    """Resolves the configured include/exclude globs into a corpus.

    Include patterns use POSIX glob semantics relative to ``rootDir``
    (``*``, ``?``, ``[...]`` and ``**`` for any depth). Exclude patterns
    use gitignore-style matching on root-relative paths, so a bare
    ``drafts/`` or ``**/node_modules/**`` excludes whole trees.
    """

    def discover(self, config: EngineConfig) -> list[str]:
        """
        Expand the configured globs.

        Args:
            config: Engine configuration with include/exclude and root.

        Returns:
            Canonical absolute POSIX paths, sorted lexicographically.

        Raises:
            DiscoveryError: If a pattern is invalid, the root is missing,
                or no file matched.
        """
        root = config.root_dir
        if not root.is_dir():
            raise DiscoveryError(f"root directory does not exist: {root}")

        excluded = self._compile_excludes(config.exclude)
        found: set[str] = set()

        for pattern in config.include:
            for path in self._expand(root, pattern):
                if not path.is_file():
                    continue
                if excluded.match_file(normalize_path(path, root)):
                    continue
                found.add(canonical_path(path))

        if not found:
            raise DiscoveryError("no files matched")

        files = sorted(found)
        logger.info("Discovered {} file(s) under {}", len(files), root)
        return files

    def _expand(self, root: Path, pattern: str) -> list[Path]:
        """Expand one include glob, rejecting patterns the globber cannot take."""
        if Path(pattern).is_absolute():
            raise DiscoveryError(f"invalid include pattern {pattern!r}: must be relative", pattern)
        try:
            # Path.glob validates lazily
            return list(root.glob(pattern))
        except (ValueError, NotImplementedError) as e:
            raise DiscoveryError(f"invalid include pattern {pattern!r}: {e}", pattern) from e

    def _compile_excludes(self, patterns: list[str]) -> pathspec.PathSpec:
        """Compile exclude patterns, naming the first invalid one."""
        for pattern in patterns:
            try:
                pathspec.GitIgnoreSpec.from_lines([pattern])
            except ValueError as e:
                raise DiscoveryError(f"invalid exclude pattern {pattern!r}: {e}", pattern) from e
        return pathspec.GitIgnoreSpec.from_lines(patterns)
