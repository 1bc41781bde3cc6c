"""JSON formatter."""

import json

from story_linter.formatters.base import Formatter, finding_to_wire
from story_linter.models.findings import Severity, ValidationResult


class JsonFormatter(Formatter):
    """Machine-readable output; identical results serialise identically."""

    name = "json"

    def format(self, result: ValidationResult, root_dir: str | None = None) -> str:
        document = {
            "passed": result.passed,
            "fileCount": result.file_count,
            "cancelled": result.cancelled,
            "summary": {
                "error": result.tally[Severity.ERROR],
                "warning": result.tally[Severity.WARNING],
                "info": result.tally[Severity.INFO],
            },
            "findings": [finding_to_wire(f, root_dir) for f in result.findings],
        }
        return json.dumps(document, indent=2, ensure_ascii=False)
