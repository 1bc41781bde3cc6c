"""Finding aggregation into the final ValidationResult."""

from collections.abc import Iterable

from story_linter.models.findings import Finding, Severity, ValidationResult, empty_tally


class FindingAggregator:
    """Filters, orders and tallies findings."""

    def aggregate(
        self,
        findings: Iterable[Finding],
        *,
        file_count: int,
        min_severity: Severity = Severity.INFO,
        cancelled: bool = False,
    ) -> ValidationResult:
        """
        Build the run result.

        Findings below ``min_severity`` are dropped before tallying.
        The remaining findings are stably sorted by file, line, validator
        and code; findings without a location come first.

        Args:
            findings: Every finding the run produced.
            file_count: Number of files in the corpus.
            min_severity: Lowest severity to keep.
            cancelled: Whether the run stopped on cancellation.

        Returns:
            ValidationResult; ``passed`` is True when no error remains.
        """
        kept = sorted(
            (f for f in findings if f.severity.at_least(min_severity)),
            key=Finding.sort_key,
        )
        tally = empty_tally()
        for finding in kept:
            tally[finding.severity] += 1

        return ValidationResult(
            findings=tuple(kept),
            tally=tally,
            file_count=file_count,
            passed=tally[Severity.ERROR] == 0,
            cancelled=cancelled,
        )
