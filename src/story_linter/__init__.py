"""Story Linter: cross-file validation for Markdown prose projects."""

from story_linter.config import EngineConfig, ValidatorSettings, load_config
from story_linter.errors import ConfigError, DiscoveryError, StoryLinterError
from story_linter.models import Finding, Severity, SourceLocation, ValidationResult
from story_linter.plugins import BaseValidator, ExtractorDescriptor, Plugin, get_default_plugins
from story_linter.services import CancellationToken, EventBus, EventType, ValidationEngine, run

__version__ = "0.1.0"

__all__ = [
    "BaseValidator",
    "CancellationToken",
    "ConfigError",
    "DiscoveryError",
    "EngineConfig",
    "EventBus",
    "EventType",
    "ExtractorDescriptor",
    "Finding",
    "Plugin",
    "Severity",
    "SourceLocation",
    "StoryLinterError",
    "ValidationEngine",
    "ValidationResult",
    "ValidatorSettings",
    "__version__",
    "get_default_plugins",
    "run",
]
