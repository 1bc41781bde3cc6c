"""story-linter services."""

from story_linter.services.aggregator import FindingAggregator
from story_linter.services.discovery import FileDiscoverer
from story_linter.services.engine import ValidationEngine, run
from story_linter.services.events import CancellationToken, Event, EventBus, EventType
from story_linter.services.extraction import ExtractionPipeline, FileOutcome
from story_linter.services.merger import MetadataMerger
from story_linter.services.reader import MarkdownReader, split_front_matter

__all__ = [
    "CancellationToken",
    "Event",
    "EventBus",
    "EventType",
    "ExtractionPipeline",
    "FileDiscoverer",
    "FileOutcome",
    "FindingAggregator",
    "MarkdownReader",
    "MetadataMerger",
    "ValidationEngine",
    "run",
    "split_front_matter",
]
