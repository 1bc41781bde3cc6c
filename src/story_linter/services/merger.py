"""Corpus-wide metadata merging."""

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from loguru import logger

from story_linter.errors import MergeError
from story_linter.models.extraction import FileExtraction
from story_linter.models.findings import Finding
from story_linter.plugins.base import ExtractorDescriptor
from story_linter.services.diagnostics import finding_from_error


class MetadataMerger:
    """Combines per-file extractor results into one payload per key."""

    def merge(
        self,
        extractors: Sequence[ExtractorDescriptor],
        buckets: Mapping[str, Sequence[FileExtraction]],
    ) -> tuple[Mapping[str, Any], list[Finding]]:
        """
        Merge every extractor's bucket.

        Inputs are handed to each merge function sorted by file path.
        A failing merge records ``MERGE001`` and its key gets the
        descriptor's empty payload instead.

        Args:
            extractors: Active extractors.
            buckets: Per-file results keyed by extractor.

        Returns:
            Read-only merged metadata and any merge findings.
        """
        merged: dict[str, Any] = {}
        findings: list[Finding] = []

        for descriptor in extractors:
            items = tuple(sorted(buckets.get(descriptor.key, ()), key=lambda r: r.file))
            try:
                merged[descriptor.key] = descriptor.merge(items)
            except Exception as e:
                logger.opt(exception=e).error("Merge failed for {}: {}", descriptor.key, e)
                error = MergeError(f"Merge for '{descriptor.key}' failed: {e}", descriptor.key)
                findings.append(finding_from_error(error))
                merged[descriptor.key] = descriptor.empty()
            else:
                logger.debug("Merged {} results for {}", len(items), descriptor.key)

        return MappingProxyType(merged), findings
