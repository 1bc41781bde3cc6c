"""Output formatters for validation results."""

from story_linter.formatters.base import Formatter, finding_to_wire
from story_linter.formatters.html_output import HtmlFormatter
from story_linter.formatters.json_output import JsonFormatter
from story_linter.formatters.text_output import TextFormatter

FORMATS = ("text", "json", "html")


def get_formatter(name: str, color: bool = True) -> Formatter:
    """
    Create a formatter by name.

    Args:
        name: One of ``text``, ``json`` or ``html``.
        color: Colour terminal output (text formatter only).

    Raises:
        ValueError: If the name is unknown.
    """
    if name == "text":
        return TextFormatter(color=color)
    if name == "json":
        return JsonFormatter()
    if name == "html":
        return HtmlFormatter()
    raise ValueError(f"Unknown output format: {name}")


__all__ = [
    "FORMATS",
    "Formatter",
    "HtmlFormatter",
    "JsonFormatter",
    "TextFormatter",
    "finding_to_wire",
    "get_formatter",
]
