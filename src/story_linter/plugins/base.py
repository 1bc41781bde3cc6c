"""Plugin contract: extractor descriptors, validators and plugin bundles.

A plugin contributes zero or more extractors (a per-file function plus
a merge function, keyed by a stable identifier) and zero or more
validators (registered through a factory so that disabled validators
are never instantiated).
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from story_linter.config.models import ValidatorSettings
from story_linter.models.extraction import Corpus, ExtractionContext, FileExtraction
from story_linter.models.findings import Finding, RelatedLocation, Severity, SourceLocation

ExtractFn = Callable[[str, Mapping[str, Any], ExtractionContext], Any]
MergeFn = Callable[[Sequence[FileExtraction]], Any]


@dataclass(frozen=True)
class ExtractorDescriptor:
    """
    A metadata extractor contributed by a plugin.

    Attributes:
        key: Unique extractor identity, referenced by validators.
        extract: ``(body, front_matter, context) -> payload`` for one file.
            Must not perform I/O.
        merge: Combines the per-file results (given in file-path order)
            into one corpus-wide payload.
        empty: Builds the payload substituted when ``merge`` fails.
    """

    key: str
    extract: ExtractFn
    merge: MergeFn
    empty: Callable[[], Any] = tuple


class SeverityPolicy(BaseModel):
    """Default severities of a validator's rules."""

    model_config = ConfigDict(frozen=True)

    default: Severity = Severity.ERROR
    rules: dict[str, Severity] = Field(default_factory=dict)

    def default_for(self, code: str) -> Severity:
        """Severity a rule has when nothing is configured."""
        return self.rules.get(code, self.default)

    def resolve(self, code: str, settings: ValidatorSettings) -> Severity:
        """Effective severity of a rule under a validator's configuration.

        Precedence: configured per-rule override, configured validator
        severity, then this policy.
        """
        if code in settings.rules:
            return settings.rules[code]
        if settings.severity is not None:
            return settings.severity
        return self.default_for(code)


@runtime_checkable
class ValidatorProtocol(Protocol):
    """Contract every validator satisfies."""

    key: str
    version: str
    extractors: frozenset[str]
    severity: SeverityPolicy

    async def validate(
        self,
        corpus: Corpus,
        metadata: Mapping[str, Any],
        settings: ValidatorSettings,
    ) -> list[Finding]:
        """
        Check the corpus and return findings.

        Args:
            corpus: All files of the run, sorted.
            metadata: Read-only merged metadata restricted to ``extractors``.
            settings: This validator's configuration.

        Returns:
            Findings; the engine stamps validator key and severity.
        """
        ...


class BaseValidator(ABC):
    """
    Base class for validators.

    Subclasses set the class attributes and implement ``validate``.
    """

    key: ClassVar[str]
    version: ClassVar[str] = "0.1.0"
    extractors: ClassVar[frozenset[str]] = frozenset()
    severity: ClassVar[SeverityPolicy] = SeverityPolicy()

    @abstractmethod
    async def validate(
        self,
        corpus: Corpus,
        metadata: Mapping[str, Any],
        settings: ValidatorSettings,
    ) -> list[Finding]:
        """Check the corpus and return findings."""
        ...

    def finding(
        self,
        code: str,
        message: str,
        location: SourceLocation | None = None,
        *,
        related: Sequence[RelatedLocation] = (),
        suggestion: str | None = None,
    ) -> Finding:
        """Build a finding for one of this validator's rules."""
        return Finding(
            validator=self.key,
            code=code,
            severity=self.severity.default_for(code),
            message=message,
            location=location,
            related=tuple(related),
            suggestion=suggestion,
        )


@dataclass(frozen=True)
class ValidatorRegistration:
    """A validator key plus the factory that instantiates it."""

    key: str
    factory: Callable[[], ValidatorProtocol]

    @classmethod
    def for_class(cls, validator_cls: type[BaseValidator]) -> "ValidatorRegistration":
        """Register a BaseValidator subclass under its own key."""
        return cls(key=validator_cls.key, factory=validator_cls)


@dataclass(frozen=True)
class Plugin:
    """A bundle of extractors and validators registered together."""

    name: str
    extractors: tuple[ExtractorDescriptor, ...] = ()
    validators: tuple[ValidatorRegistration, ...] = ()
