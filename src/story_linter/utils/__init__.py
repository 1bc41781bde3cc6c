"""story-linter utility modules."""

from story_linter.utils.logging import configure_logging, verbosity_level
from story_linter.utils.paths import canonical_path, normalize_path

__all__ = [
    "canonical_path",
    "configure_logging",
    "normalize_path",
    "verbosity_level",
]
