"""Tests for engine diagnostics."""

from story_linter.errors import (
    BusError,
    ExtractorError,
    FrontMatterParseError,
    MergeError,
    ReadError,
    ValidatorError,
)
from story_linter.models.findings import Severity
from story_linter.services.diagnostics import engine_finding, finding_from_error


class TestFindingFromError:
    """Tests for error to finding conversion."""

    def test_read_error_has_file_location(self) -> None:
        """Test ReadError findings point at the file."""
        finding = finding_from_error(ReadError("gone", "/c/a.md"))
        assert finding.validator == "engine"
        assert finding.code == "READ001"
        assert finding.severity is Severity.ERROR
        assert finding.location is not None
        assert finding.location.file == "/c/a.md"

    def test_front_matter_error_keeps_line(self) -> None:
        """Test FM001 findings carry the error line."""
        finding = finding_from_error(FrontMatterParseError("bad", "/c/a.md", line=2))
        assert finding.code == "FM001"
        assert finding.location is not None
        assert finding.location.line == 2

    def test_extractor_error(self) -> None:
        """Test EXT001 findings point at the file."""
        finding = finding_from_error(ExtractorError("boom", "/c/a.md", "links"))
        assert finding.code == "EXT001"
        assert finding.file == "/c/a.md"

    def test_locationless_errors(self) -> None:
        """Test merge and validator errors have no location."""
        assert finding_from_error(MergeError("boom", "links")).location is None
        assert finding_from_error(ValidatorError("boom", "v")).location is None

    def test_bus_error_is_warning(self) -> None:
        """Test listener failures are warnings."""
        finding = finding_from_error(BusError("boom", "finding"))
        assert finding.code == "BUS001"
        assert finding.severity is Severity.WARNING

    def test_message_kept(self) -> None:
        """Test the error message becomes the finding message."""
        assert finding_from_error(ValidatorError("it broke", "v")).message == "it broke"


class TestEngineFinding:
    """Tests for engine_finding."""

    def test_defaults(self) -> None:
        """Test engine findings default to error severity."""
        finding = engine_finding("X001", "msg")
        assert finding.validator == "engine"
        assert finding.severity is Severity.ERROR
