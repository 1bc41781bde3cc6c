"""Engine diagnostics.

Converts per-file and per-plugin errors into findings under the
reserved ``engine`` validator key.
"""

from story_linter.errors import (
    BusError,
    ExtractorError,
    FrontMatterParseError,
    ReadError,
    StoryLinterError,
)
from story_linter.models.findings import (
    ENGINE_VALIDATOR_KEY,
    Finding,
    Severity,
    SourceLocation,
)


def engine_finding(
    code: str,
    message: str,
    *,
    severity: Severity = Severity.ERROR,
    location: SourceLocation | None = None,
) -> Finding:
    """Build a finding attributed to the engine itself."""
    return Finding(
        validator=ENGINE_VALIDATOR_KEY,
        code=code,
        severity=severity,
        message=message,
        location=location,
    )


def finding_from_error(error: StoryLinterError) -> Finding:
    """
    Convert a recoverable engine error into a finding.

    Listener failures are warnings; every other error kind is an error.

    Args:
        error: The error to convert.

    Returns:
        Finding carrying the error's rule code and, where known, its file.
    """
    location: SourceLocation | None = None
    if isinstance(error, FrontMatterParseError):
        location = SourceLocation(file=error.path, line=error.line)
    elif isinstance(error, ReadError | ExtractorError):
        location = SourceLocation(file=error.path)

    severity = Severity.WARNING if isinstance(error, BusError) else Severity.ERROR
    return engine_finding(error.code, str(error), severity=severity, location=location)
