"""Validator registry.

Holds the enabled validators of a run, each paired with its settings,
and the extractor descriptors they depend on. Construction performs
every configuration check, so a built registry is always runnable.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from story_linter.config.models import EngineConfig, ValidatorSettings
from story_linter.errors import ConfigError
from story_linter.models.findings import ENGINE_VALIDATOR_KEY
from story_linter.plugins.base import (
    ExtractorDescriptor,
    Plugin,
    ValidatorProtocol,
    ValidatorRegistration,
)


@dataclass(frozen=True)
class ActiveValidator:
    """An instantiated, enabled validator and its configuration."""

    validator: ValidatorProtocol
    settings: ValidatorSettings

    @property
    def key(self) -> str:
        """Validator identity key."""
        return self.validator.key


class ValidatorRegistry:
    """
    Registry of extractors and enabled validators.

    Validators run in registration order unless ``sort_by_key`` is set,
    in which case they run sorted by key.
    """

    def __init__(
        self,
        plugins: Sequence[Plugin],
        config: EngineConfig,
        *,
        sort_by_key: bool = False,
    ) -> None:
        """Register plugins and instantiate enabled validators.

        Raises:
            ConfigError: On duplicate keys, configuration for an unknown
                validator, or a validator declaring an unknown extractor.
        """
        self._extractors: dict[str, ExtractorDescriptor] = {}
        registrations: dict[str, ValidatorRegistration] = {}

        for plugin in plugins:
            for descriptor in plugin.extractors:
                if descriptor.key in self._extractors:
                    raise ConfigError(f"Duplicate extractor key: {descriptor.key}")
                self._extractors[descriptor.key] = descriptor
            for registration in plugin.validators:
                if registration.key == ENGINE_VALIDATOR_KEY:
                    raise ConfigError(f"Validator key '{ENGINE_VALIDATOR_KEY}' is reserved")
                if registration.key in registrations:
                    raise ConfigError(f"Duplicate validator key: {registration.key}")
                registrations[registration.key] = registration

        unknown = sorted(set(config.validators) - set(registrations))
        if unknown:
            raise ConfigError(f"Unknown validator(s) in configuration: {', '.join(unknown)}")

        active: list[ActiveValidator] = []
        for key, registration in registrations.items():
            settings = config.settings_for(key)
            if not settings.enabled:
                logger.debug("Validator disabled: {}", key)
                continue
            active.append(self._instantiate(registration, settings))

        if sort_by_key:
            active.sort(key=lambda a: a.key)
        self._validators = tuple(active)

    def _instantiate(
        self, registration: ValidatorRegistration, settings: ValidatorSettings
    ) -> ActiveValidator:
        """Build one validator and check its declared extractors."""
        try:
            validator = registration.factory()
        except Exception as e:
            raise ConfigError(f"Failed to create validator '{registration.key}': {e}") from e

        if not isinstance(validator, ValidatorProtocol):
            raise ConfigError(f"'{registration.key}' does not implement the validator contract")
        if validator.key != registration.key:
            raise ConfigError(
                f"Validator registered as '{registration.key}' reports key '{validator.key}'"
            )

        missing = sorted(set(validator.extractors) - set(self._extractors))
        if missing:
            raise ConfigError(
                f"Validator '{validator.key}' declares unknown extractor(s): {', '.join(missing)}"
            )
        return ActiveValidator(validator=validator, settings=settings)

    @property
    def validators(self) -> tuple[ActiveValidator, ...]:
        """Enabled validators in run order."""
        return self._validators

    def get_extractor(self, key: str) -> ExtractorDescriptor:
        """Look up a registered extractor by key."""
        return self._extractors[key]

    def active_extractors(self) -> list[ExtractorDescriptor]:
        """Extractors referenced by enabled validators, in registration order."""
        wanted: set[str] = set()
        for active in self._validators:
            wanted.update(active.validator.extractors)
        return [d for key, d in self._extractors.items() if key in wanted]
