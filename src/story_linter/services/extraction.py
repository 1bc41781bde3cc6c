"""Metadata extraction pipeline.

Reads each file exactly once and runs every active extractor over it.
Only the extractor payloads and any findings outlive the call; the
file record is dropped as soon as the last extractor has run.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from loguru import logger

from story_linter.errors import ExtractorError, ReadError
from story_linter.models.extraction import ExtractionContext, FileExtraction
from story_linter.models.findings import Finding, Severity
from story_linter.plugins.base import ExtractorDescriptor
from story_linter.services.diagnostics import finding_from_error
from story_linter.services.reader import MarkdownReader


@dataclass
class FileOutcome:
    """Result of running the pipeline over one file."""

    path: str
    results: list[FileExtraction] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """True if any finding for this file is error-severity."""
        return any(f.severity == Severity.ERROR for f in self.findings)


class ExtractionPipeline:
    """Runs extractors over files and buckets their results by key.

    Extractors run in registration order. A raising extractor produces an
    ``engine``/``EXT001`` finding; the remaining extractors still run.
    """

    def __init__(
        self,
        reader: MarkdownReader,
        extractors: Sequence[ExtractorDescriptor],
        root_dir: str,
    ) -> None:
        """Initialize pipeline.

        Args:
            reader: Reader used to load each file.
            extractors: Active extractors, in run order.
            root_dir: Canonical project root, exposed to extractors.
        """
        self.reader = reader
        self.extractors = list(extractors)
        self.root_dir = root_dir
        self.buckets: dict[str, list[FileExtraction]] = {d.key: [] for d in self.extractors}
        self._visited: set[str] = set()

    async def process(self, path: str) -> FileOutcome:
        """
        Read one file and apply every extractor to it.

        A path already processed by this pipeline is skipped, so each
        (extractor, file) pair yields at most one result.

        Args:
            path: Canonical absolute path.

        Returns:
            FileOutcome with the new per-file results and findings.
        """
        outcome = FileOutcome(path=path)
        if path in self._visited:
            logger.debug("Skipping already processed file: {}", path)
            return outcome
        self._visited.add(path)

        try:
            record = await self.reader.read(path)
        except ReadError as e:
            logger.warning("Cannot read {}: {}", path, e)
            outcome.findings.append(finding_from_error(e))
            return outcome

        context = ExtractionContext(
            file_path=path,
            root_dir=self.root_dir,
            line_index=record.line_index,
        )
        front_matter = MappingProxyType(record.front_matter)

        for descriptor in self.extractors:
            try:
                payload = descriptor.extract(record.body, front_matter, context)
            except Exception as e:
                logger.opt(exception=e).warning(
                    "Extractor {} failed on {}: {}", descriptor.key, path, e
                )
                error = ExtractorError(
                    f"Extractor '{descriptor.key}' failed: {e}", path, descriptor.key
                )
                outcome.findings.append(finding_from_error(error))
                continue

            result = FileExtraction(extractor=descriptor.key, file=path, payload=payload)
            self.buckets[descriptor.key].append(result)
            outcome.results.append(result)

        return outcome
