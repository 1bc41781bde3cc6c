"""Plugin contract, registry and built-in plugins."""

from story_linter.plugins.base import (
    BaseValidator,
    ExtractorDescriptor,
    Plugin,
    SeverityPolicy,
    ValidatorProtocol,
    ValidatorRegistration,
)
from story_linter.plugins.defaults import get_default_plugins
from story_linter.plugins.registry import ActiveValidator, ValidatorRegistry

__all__ = [
    "ActiveValidator",
    "BaseValidator",
    "ExtractorDescriptor",
    "Plugin",
    "SeverityPolicy",
    "ValidatorProtocol",
    "ValidatorRegistration",
    "ValidatorRegistry",
    "get_default_plugins",
]
