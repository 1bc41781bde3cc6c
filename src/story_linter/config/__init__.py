"""Configuration management for story-linter."""

from story_linter.config.loader import LoadedConfig, default_config, find_config, load_config
from story_linter.config.models import EngineConfig, LoggingConfig, ValidatorSettings

__all__ = [
    "EngineConfig",
    "LoadedConfig",
    "LoggingConfig",
    "ValidatorSettings",
    "default_config",
    "find_config",
    "load_config",
]
