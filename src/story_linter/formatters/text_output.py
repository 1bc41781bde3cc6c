"""Human-readable terminal formatter."""

import click

from story_linter.formatters.base import Formatter, display_path
from story_linter.models.findings import Finding, Severity, ValidationResult

_STYLE = {
    Severity.ERROR: ("✗", "red"),
    Severity.WARNING: ("⚠", "yellow"),
    Severity.INFO: ("ℹ", "blue"),
}


class TextFormatter(Formatter):
    """One block per finding followed by a summary."""

    name = "text"

    def __init__(self, color: bool = True) -> None:
        self.color = color

    def _style(self, text: str, fg: str, bold: bool = False) -> str:
        if not self.color:
            return text
        return click.style(text, fg=fg, bold=bold)

    def format(self, result: ValidationResult, root_dir: str | None = None) -> str:
        lines: list[str] = []
        for finding in result.findings:
            lines.extend(self._finding_block(finding, root_dir))
            lines.append("")

        errors = result.tally[Severity.ERROR]
        warnings = result.tally[Severity.WARNING]
        info = result.tally[Severity.INFO]
        lines.append(
            f"Summary: {errors} errors, {warnings} warnings, {info} info "
            f"in {result.file_count} files"
        )
        if result.cancelled:
            lines.append(self._style("⚠ Validation cancelled before completion", "yellow"))
        if result.passed:
            lines.append(self._style("✓ All validation checks passed!", "green", bold=True))
        else:
            lines.append(self._style(f"✗ Found {errors} errors", "red", bold=True))
        return "\n".join(lines)

    def _finding_block(self, finding: Finding, root_dir: str | None) -> list[str]:
        icon, fg = _STYLE[finding.severity]
        header = f"{icon} [{finding.code}]"
        if finding.location is not None:
            loc = finding.location
            header += f" {display_path(loc.file, root_dir)}:{loc.line}:{loc.column}"

        block = [self._style(header, fg), f"  {finding.message}"]
        for related in finding.related:
            loc = related.location
            where = f"{display_path(loc.file, root_dir)}:{loc.line}:{loc.column}"
            block.append(f"  → {where} {related.message}".rstrip())
        if finding.suggestion:
            block.append(f"  Suggestion: {finding.suggestion}")
        block.append(self._style(f"  ({finding.validator})", "bright_black"))
        return block
