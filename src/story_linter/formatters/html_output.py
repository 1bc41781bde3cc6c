"""Standalone HTML report formatter."""

from html import escape

from story_linter.formatters.base import Formatter, display_path
from story_linter.models.findings import Severity, ValidationResult

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Story Linter Report</title>
<style>
body {{ font-family: sans-serif; margin: 2rem; }}
table {{ border-collapse: collapse; width: 100%; }}
th, td {{ border: 1px solid #ddd; padding: 0.4rem; text-align: left; vertical-align: top; }}
.error {{ color: #c62828; }}
.warning {{ color: #ef6c00; }}
.info {{ color: #1565c0; }}
</style>
</head>
<body>
<h1>Story Linter Report</h1>
<p class="{status_class}">{status}</p>
<p>{summary}</p>
<table>
<thead>
<tr><th>Severity</th><th>Code</th><th>Location</th><th>Message</th><th>Validator</th></tr>
</thead>
<tbody>
{rows}
</tbody>
</table>
</body>
</html>"""


class HtmlFormatter(Formatter):
    """Renders findings as an HTML table with every value escaped."""

    name = "html"

    def format(self, result: ValidationResult, root_dir: str | None = None) -> str:
        rows = []
        for finding in result.findings:
            location = ""
            if finding.location is not None:
                loc = finding.location
                location = f"{display_path(loc.file, root_dir)}:{loc.line}:{loc.column}"
            message = escape(finding.message)
            if finding.suggestion:
                message += f"<br><em>{escape(finding.suggestion)}</em>"
            rows.append(
                f'<tr class="{finding.severity}">'
                f"<td>{escape(str(finding.severity))}</td>"
                f"<td>{escape(finding.code)}</td>"
                f"<td>{escape(location)}</td>"
                f"<td>{message}</td>"
                f"<td>{escape(finding.validator)}</td></tr>"
            )

        summary = (
            f"{result.tally[Severity.ERROR]} errors, {result.tally[Severity.WARNING]} warnings, "
            f"{result.tally[Severity.INFO]} info in {result.file_count} files"
        )
        return _PAGE.format(
            status_class="info" if result.passed else "error",
            status="All validation checks passed" if result.passed else "Validation failed",
            summary=escape(summary),
            rows="\n".join(rows),
        )
