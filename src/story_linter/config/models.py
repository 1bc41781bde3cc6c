"""Pydantic configuration models for story-linter."""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from story_linter.models.findings import Severity


class ValidatorSettings(BaseModel):
    """Per-validator configuration.

    Keys other than ``enabled``, ``severity`` and ``rules`` are kept as
    opaque options and handed to the validator untouched.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    enabled: bool = True
    severity: Severity | None = None
    rules: dict[str, Severity] = Field(default_factory=dict)

    @property
    def options(self) -> dict[str, Any]:
        """Validator-specific options."""
        return dict(self.model_extra or {})

    def option(self, name: str, default: Any = None) -> Any:
        """Look up a single validator-specific option."""
        return self.options.get(name, default)


class EngineConfig(BaseModel):
    """Validated engine configuration.

    Accepts both the camelCase keys used in ``.story-linter.yml``
    (``rootDir``, ``stopOnError``, ``minSeverity``) and Python field names.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    include: list[str] = Field(min_length=1)
    exclude: list[str] = Field(default_factory=list)
    root_dir: Path = Field(default_factory=Path.cwd)
    validators: dict[str, ValidatorSettings] = Field(default_factory=dict)
    stop_on_error: bool = False
    min_severity: Severity = Severity.INFO

    @field_validator("include", "exclude")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Reject blank glob patterns."""
        for pattern in v:
            if not pattern or not pattern.strip():
                raise ValueError("glob patterns must not be empty")
        return v

    @field_validator("root_dir", mode="before")
    @classmethod
    def expand_root(cls, v: Path | str) -> Path:
        """Expand user path and resolve to absolute."""
        if isinstance(v, str):
            v = Path(v)
        return v.expanduser().resolve()

    @field_validator("validators", mode="before")
    @classmethod
    def expand_shorthand(cls, v: Any) -> Any:
        """Allow ``name: false`` / ``name: true`` / ``name:`` shorthand."""
        if not isinstance(v, dict):
            return v
        expanded: dict[str, Any] = {}
        for key, settings in v.items():
            if settings is None:
                expanded[key] = {}
            elif isinstance(settings, bool):
                expanded[key] = {"enabled": settings}
            else:
                expanded[key] = settings
        return expanded

    def settings_for(self, validator_key: str) -> ValidatorSettings:
        """Return the settings for a validator, defaults if unconfigured."""
        return self.validators.get(validator_key) or ValidatorSettings()


class LoggingConfig(BaseSettings):
    """Logging configuration for loguru.

    Every field can be overridden through ``STORY_LINTER_LOG_*``
    environment variables, e.g. ``STORY_LINTER_LOG_LEVEL=DEBUG``.
    """

    model_config = SettingsConfigDict(env_prefix="STORY_LINTER_LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    format: Literal["console", "json"] = "console"
    file: Path | None = None
    rotation: str = "10 MB"
    retention: str = "7 days"
