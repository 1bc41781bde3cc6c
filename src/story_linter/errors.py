"""story-linter error types.

All custom exceptions inherit from StoryLinterError to allow
catching any linter-specific error. Only ConfigError and
DiscoveryError ever escape a validation run; every other error
is converted into an ``engine`` finding carrying ``code``.
"""


class StoryLinterError(Exception):
    """Base exception for all story-linter errors."""

    code: str = "ENGINE000"


class ConfigError(StoryLinterError):
    """Invalid or contradictory configuration."""

    code = "CONF000"


class DiscoveryError(StoryLinterError):
    """Glob expansion matched nothing or hit an invalid pattern."""

    code = "DISC000"

    def __init__(self, message: str, pattern: str | None = None) -> None:
        super().__init__(message)
        self.pattern = pattern


class ReadError(StoryLinterError):
    """A source file could not be read or decoded."""

    code = "READ001"

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class FrontMatterParseError(ReadError):
    """The front-matter block of a file is malformed."""

    code = "FM001"

    def __init__(self, message: str, path: str, line: int = 1) -> None:
        super().__init__(message, path)
        self.line = line


class ExtractorError(StoryLinterError):
    """An extractor raised while processing a single file."""

    code = "EXT001"

    def __init__(self, message: str, path: str, extractor_key: str) -> None:
        super().__init__(message)
        self.path = path
        self.extractor_key = extractor_key


class MergeError(StoryLinterError):
    """An extractor's merge function raised."""

    code = "MERGE001"

    def __init__(self, message: str, extractor_key: str) -> None:
        super().__init__(message)
        self.extractor_key = extractor_key


class ValidatorError(StoryLinterError):
    """A validator raised during ``validate``."""

    code = "VAL001"

    def __init__(self, message: str, validator_key: str) -> None:
        super().__init__(message)
        self.validator_key = validator_key


class BusError(StoryLinterError):
    """An event listener raised during dispatch."""

    code = "BUS001"

    def __init__(self, message: str, event: str) -> None:
        super().__init__(message)
        self.event = event
