"""Domain models for story-linter."""

from story_linter.models.extraction import (
    Corpus,
    ExtractionContext,
    FileExtraction,
    relative_to_root,
)
from story_linter.models.files import FileRecord, LineIndex
from story_linter.models.findings import (
    ENGINE_VALIDATOR_KEY,
    Finding,
    RelatedLocation,
    Severity,
    SourceLocation,
    ValidationResult,
    empty_tally,
)

__all__ = [
    "ENGINE_VALIDATOR_KEY",
    "Corpus",
    "ExtractionContext",
    "FileExtraction",
    "FileRecord",
    "Finding",
    "LineIndex",
    "RelatedLocation",
    "Severity",
    "SourceLocation",
    "ValidationResult",
    "empty_tally",
    "relative_to_root",
]
