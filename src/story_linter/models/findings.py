"""Finding and result models.

A finding is the unit of output of every validator and of the
engine itself. Findings are frozen once emitted; the engine only
ever produces stamped copies.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

ENGINE_VALIDATOR_KEY = "engine"


class Severity(StrEnum):
    """Finding severities, lowest to highest."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Numeric rank used for ``minSeverity`` filtering."""
        return _SEVERITY_RANK[self]

    def at_least(self, other: "Severity") -> bool:
        """Return True if this severity is ``other`` or more severe."""
        return self.rank >= other.rank


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class SourceLocation(BaseModel):
    """A place in the corpus.

    Attributes:
        file: Canonical absolute POSIX path of the file.
        line: 1-based line number.
        column: 1-based character column.
        offset: UTF-8 byte offset from the start of the file.
    """

    model_config = ConfigDict(frozen=True)

    file: str
    line: int = Field(default=1, ge=1)
    column: int = Field(default=1, ge=1)
    offset: int = Field(default=0, ge=0)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class RelatedLocation(BaseModel):
    """A secondary location attached to a finding."""

    model_config = ConfigDict(frozen=True)

    location: SourceLocation
    message: str = ""


class Finding(BaseModel):
    """A single diagnostic emitted by a validator or by the engine."""

    model_config = ConfigDict(frozen=True)

    validator: str = ""
    code: str
    severity: Severity = Severity.ERROR
    message: str
    location: SourceLocation | None = None
    related: tuple[RelatedLocation, ...] = ()
    suggestion: str | None = None

    @property
    def file(self) -> str | None:
        """File the finding points at, if any."""
        return self.location.file if self.location else None

    def sort_key(self) -> tuple[str, int, str, str]:
        """Ordering key: file path, line, validator key, rule code."""
        if self.location is None:
            return ("", 0, self.validator, self.code)
        return (self.location.file, self.location.line, self.validator, self.code)


def empty_tally() -> dict[Severity, int]:
    """Return a zeroed per-severity tally."""
    return {Severity.ERROR: 0, Severity.WARNING: 0, Severity.INFO: 0}


class ValidationResult(BaseModel):
    """Top-level output of a validation run."""

    model_config = ConfigDict(frozen=True)

    findings: tuple[Finding, ...] = ()
    tally: dict[Severity, int] = Field(default_factory=empty_tally)
    file_count: int = 0
    passed: bool = True
    cancelled: bool = False

    @property
    def errors(self) -> list[Finding]:
        """Error-severity findings."""
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Finding]:
        """Warning-severity findings."""
        return [f for f in self.findings if f.severity == Severity.WARNING]

    def by_file(self) -> dict[str | None, list[Finding]]:
        """Group findings by file, preserving result order.

        Findings without a location are grouped under ``None``.
        """
        groups: dict[str | None, list[Finding]] = {}
        for finding in self.findings:
            groups.setdefault(finding.file, []).append(finding)
        return groups
