"""Validation engine.

Orchestrates one run: discover files, extract metadata from each file
exactly once, merge it per extractor, run enabled validators over the
merged view, then aggregate the findings.
"""

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from loguru import logger

from story_linter.config.models import EngineConfig
from story_linter.errors import ValidatorError
from story_linter.models.extraction import Corpus
from story_linter.models.findings import Finding, Severity, ValidationResult
from story_linter.plugins.base import Plugin
from story_linter.plugins.defaults import get_default_plugins
from story_linter.plugins.registry import ActiveValidator, ValidatorRegistry
from story_linter.services.aggregator import FindingAggregator
from story_linter.services.diagnostics import finding_from_error
from story_linter.services.discovery import FileDiscoverer
from story_linter.services.events import CancellationToken, EventBus, EventType
from story_linter.services.extraction import ExtractionPipeline
from story_linter.services.merger import MetadataMerger
from story_linter.services.reader import MarkdownReader
from story_linter.utils.paths import canonical_path


class ValidationEngine:
    """
    Runs the validators of a configuration over a Markdown corpus.

    Plugin registration and configuration checks happen at construction,
    so a ConfigError surfaces before any file is touched. Discovery
    failures are raised from ``run``. Everything that goes wrong after
    discovery is reported as a finding.
    """

    def __init__(
        self,
        config: EngineConfig,
        plugins: Sequence[Plugin],
        *,
        events: EventBus | None = None,
        reader: MarkdownReader | None = None,
        discoverer: FileDiscoverer | None = None,
        diagnostics: Iterable[Finding] = (),
        sort_validators: bool = False,
    ) -> None:
        """
        Initialize engine.

        Args:
            config: Validated engine configuration.
            plugins: Plugins providing extractors and validators.
            events: Event bus for progress listeners (a private one if omitted).
            reader: Markdown reader (default reader if omitted).
            discoverer: File discoverer (default discoverer if omitted).
            diagnostics: Findings produced before the run, such as
                configuration warnings, to include in the result.
            sort_validators: Run validators sorted by key instead of in
                registration order.
        """
        self.config = config
        self.registry = ValidatorRegistry(plugins, config, sort_by_key=sort_validators)
        self.events = events or EventBus()
        self.reader = reader or MarkdownReader()
        self.discoverer = discoverer or FileDiscoverer()
        self.merger = MetadataMerger()
        self.aggregator = FindingAggregator()
        self._diagnostics = tuple(diagnostics)

    async def run(self, cancel: CancellationToken | None = None) -> ValidationResult:
        """
        Execute one validation run.

        Args:
            cancel: Token checked before each file and each validator.

        Returns:
            Aggregated ValidationResult.

        Raises:
            DiscoveryError: If no files match or a pattern is invalid.
        """
        cancel = cancel or CancellationToken()
        findings: list[Finding] = []

        await self._emit(findings, EventType.RUN_START, file_count=None)
        files = self.discoverer.discover(self.config)
        corpus = Corpus(root_dir=canonical_path(self.config.root_dir), files=tuple(files))
        logger.info(
            "Validation run started: {} files, {} validators",
            len(corpus),
            len(self.registry.validators),
        )
        await self._emit(findings, EventType.RUN_START, file_count=len(corpus))
        await self._record(findings, self._diagnostics)

        extractors = self.registry.active_extractors()
        pipeline = ExtractionPipeline(self.reader, extractors, corpus.root_dir)

        cancelled = False
        halted = False
        for path in corpus.files:
            if cancel.cancelled:
                cancelled = True
                break
            await self._emit(findings, EventType.FILE_PARSE, file=path)
            outcome = await pipeline.process(path)
            await self._record(findings, outcome.findings)
            await self._emit(
                findings,
                EventType.FILE_DONE,
                file=path,
                extractions=len(outcome.results),
                finding_count=len(outcome.findings),
            )
            if self.config.stop_on_error and outcome.has_errors:
                logger.warning("Stopping after {}: error during extraction", path)
                halted = True
                break

        if not (cancelled or halted):
            merged, merge_findings = self.merger.merge(extractors, pipeline.buckets)
            await self._record(findings, merge_findings)
            cancelled = await self._run_validators(corpus, merged, findings, cancel)

        if cancelled:
            logger.info("Validation run cancelled")

        result = self._aggregate(findings, corpus, cancelled)
        late = await self.events.emit(
            EventType.RUN_END,
            passed=result.passed,
            cancelled=result.cancelled,
            file_count=result.file_count,
            tally=dict(result.tally),
        )
        if late:
            findings.extend(late)
            result = self._aggregate(findings, corpus, cancelled)

        logger.info(
            "Validation run finished: {} errors, {} warnings, {} info",
            result.tally[Severity.ERROR],
            result.tally[Severity.WARNING],
            result.tally[Severity.INFO],
        )
        return result

    async def _run_validators(
        self,
        corpus: Corpus,
        merged: Mapping[str, Any],
        findings: list[Finding],
        cancel: CancellationToken,
    ) -> bool:
        """Run enabled validators in order. Returns True if cancelled."""
        for active in self.registry.validators:
            if cancel.cancelled:
                return True

            logger.debug("Running validator {} v{}", active.key, active.validator.version)
            await self._emit(findings, EventType.VALIDATOR_START, validator=active.key)
            view = MappingProxyType({k: merged[k] for k in sorted(active.validator.extractors)})
            produced = await self._invoke(active, corpus, view)
            await self._record(findings, produced)
            await self._emit(
                findings,
                EventType.VALIDATOR_DONE,
                validator=active.key,
                finding_count=len(produced),
            )

            if self.config.stop_on_error and any(f.severity == Severity.ERROR for f in produced):
                logger.warning("Stopping after validator {}: error finding reported", active.key)
                break

        return False

    async def _invoke(
        self, active: ActiveValidator, corpus: Corpus, view: Mapping[str, Any]
    ) -> list[Finding]:
        """Call one validator and stamp its findings with key and severity."""
        validator = active.validator
        try:
            raw = await validator.validate(corpus, view, active.settings)
            return [
                finding.model_copy(
                    update={
                        "validator": active.key,
                        "severity": validator.severity.resolve(finding.code, active.settings),
                    }
                )
                for finding in raw or ()
            ]
        except Exception as e:
            logger.opt(exception=e).error("Validator {} failed: {}", active.key, e)
            error = ValidatorError(f"Validator '{active.key}' failed: {e}", active.key)
            return [finding_from_error(error)]

    async def _record(self, findings: list[Finding], new: Iterable[Finding]) -> None:
        """Append findings, announcing each one on the bus."""
        for finding in new:
            findings.append(finding)
            findings.extend(await self.events.emit(EventType.FINDING, finding=finding))

    async def _emit(
        self, findings: list[Finding], event_type: EventType, /, **data: Any
    ) -> None:
        findings.extend(await self.events.emit(event_type, **data))

    def _aggregate(
        self, findings: list[Finding], corpus: Corpus, cancelled: bool
    ) -> ValidationResult:
        return self.aggregator.aggregate(
            findings,
            file_count=len(corpus),
            min_severity=self.config.min_severity,
            cancelled=cancelled,
        )


async def run(
    config: EngineConfig,
    plugins: Sequence[Plugin] | None = None,
    **kwargs: Any,
) -> ValidationResult:
    """
    Validate a corpus in one call.

    Args:
        config: Validated engine configuration.
        plugins: Plugins to register (the built-in plugins if omitted).
        **kwargs: Forwarded to ValidationEngine.

    Returns:
        Aggregated ValidationResult.
    """
    if plugins is None:
        plugins = get_default_plugins()
    engine = ValidationEngine(config, plugins, **kwargs)
    return await engine.run()
