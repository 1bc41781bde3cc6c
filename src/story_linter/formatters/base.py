"""Formatter interface and shared rendering helpers."""

from abc import ABC, abstractmethod
from typing import Any

from story_linter.models.extraction import relative_to_root
from story_linter.models.findings import Finding, SourceLocation, ValidationResult


class Formatter(ABC):
    """Renders a ValidationResult as text for the terminal or a file."""

    name: str

    @abstractmethod
    def format(self, result: ValidationResult, root_dir: str | None = None) -> str:
        """
        Render a result.

        Args:
            result: Result of a validation run.
            root_dir: Project root; paths beneath it are shown relative to it.

        Returns:
            Rendered output.
        """
        ...


def display_path(path: str, root_dir: str | None) -> str:
    """Path as shown to the user."""
    if root_dir is None:
        return path
    return relative_to_root(path, root_dir)


def location_to_wire(location: SourceLocation, root_dir: str | None) -> dict[str, Any]:
    """Wire shape of a location: file, line and column."""
    return {
        "file": display_path(location.file, root_dir),
        "line": location.line,
        "column": location.column,
    }


def finding_to_wire(finding: Finding, root_dir: str | None = None) -> dict[str, Any]:
    """Wire shape of a finding, keys in fixed order."""
    wire: dict[str, Any] = {
        "code": finding.code,
        "validator": finding.validator,
        "severity": str(finding.severity),
        "message": finding.message,
    }
    if finding.location is not None:
        wire.update(location_to_wire(finding.location, root_dir))
    if finding.related:
        wire["related"] = [
            {**location_to_wire(r.location, root_dir), "message": r.message}
            for r in finding.related
        ]
    if finding.suggestion is not None:
        wire["suggestion"] = finding.suggestion
    return wire
