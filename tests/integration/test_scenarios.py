"""End-to-end validation scenarios over real corpora on disk."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from story_linter.config.models import ValidatorSettings
from story_linter.models.extraction import Corpus
from story_linter.models.findings import ENGINE_VALIDATOR_KEY, Finding, Severity
from story_linter.plugins import characters, links
from story_linter.plugins.base import BaseValidator, Plugin, ValidatorRegistration
from story_linter.services.engine import ValidationEngine, run
from story_linter.services.events import Event, EventBus, EventType

LINK_OPTIONS = {"link-graph": {"entryPoints": ["README.md"]}}


class BoomValidator(BaseValidator):
    key = "boom"

    async def validate(
        self, corpus: Corpus, metadata: Mapping[str, Any], settings: ValidatorSettings
    ) -> list[Finding]:
        raise RuntimeError("boom")


class FirstValidator(BaseValidator):
    key = "first"

    async def validate(self, corpus, metadata, settings):
        return [self.finding("FIRST001", "first failure")]


class SecondValidator(BaseValidator):
    key = "second"

    async def validate(self, corpus, metadata, settings):
        return [self.finding("SECOND001", "one"), self.finding("SECOND002", "two")]


def _name(finding: Finding) -> str:
    return Path(finding.file).name


class TestScenarios:
    """Literal corpora with their expected findings."""

    @pytest.mark.asyncio
    async def test_broken_link(self, write_corpus, make_config) -> None:
        """Test a link to a missing chapter fails the run."""
        root = write_corpus({"README.md": "See [Ch 2](./ch2.md).\n"})

        result = await run(make_config(root, validators=LINK_OPTIONS), [links.create_plugin()])

        assert len(result.findings) == 1
        finding = result.findings[0]
        assert (finding.validator, finding.code) == ("link-graph", "LINK001")
        assert finding.severity is Severity.ERROR
        assert _name(finding) == "README.md"
        assert finding.location.line == 1
        assert result.passed is False

    @pytest.mark.asyncio
    async def test_orphan(self, write_corpus, make_config) -> None:
        """Test an unlinked chapter is a warning only."""
        root = write_corpus({"README.md": "See [Ch 1](./ch1.md).\n", "ch1.md": "", "ch2.md": ""})

        result = await run(make_config(root, validators=LINK_OPTIONS), [links.create_plugin()])

        assert [(f.code, _name(f), f.severity) for f in result.findings] == [
            ("LINK002", "ch2.md", Severity.WARNING)
        ]
        assert result.passed is True

    @pytest.mark.asyncio
    async def test_character_drift(self, write_corpus, make_config) -> None:
        """Test a misspelled name is reported against its introduction."""
        root = write_corpus({"a.md": "# Tuxicles\n", "b.md": "Tuxilles arrived.\n"})

        result = await run(make_config(root), [characters.create_plugin()])

        assert len(result.findings) == 1
        finding = result.findings[0]
        assert finding.code == "CHAR001"
        assert finding.severity is Severity.ERROR
        assert _name(finding) == "b.md"
        assert "Tuxicles" in finding.message
        assert "a.md:1" in finding.message
        related = finding.related[0].location
        assert (Path(related.file).name, related.line) == ("a.md", 1)

    @pytest.mark.asyncio
    async def test_deterministic_order(self, write_corpus, make_config) -> None:
        """Test findings are ordered by file path regardless of discovery."""
        root = write_corpus({"z.md": "[x](./missing.md)\n", "a.md": "[y](./missing.md)\n"})
        config = make_config(root, validators={"link-graph": {"checkOrphans": False}})

        first = await run(config, [links.create_plugin()])
        second = await run(config, [links.create_plugin()])

        assert [(f.code, _name(f)) for f in first.findings] == [
            ("LINK001", "a.md"),
            ("LINK001", "z.md"),
        ]
        assert first == second

    @pytest.mark.asyncio
    async def test_validator_crash_isolation(self, write_corpus, make_config) -> None:
        """Test a raising validator becomes one engine finding."""
        root = write_corpus({"README.md": "See [Ch 2](./ch2.md).\n"})
        boom = Plugin(name="boom", validators=(ValidatorRegistration.for_class(BoomValidator),))

        result = await run(
            make_config(root, validators=LINK_OPTIONS), [links.create_plugin(), boom]
        )

        assert sorted((f.validator, f.code) for f in result.findings) == [
            (ENGINE_VALIDATOR_KEY, "VAL001"),
            ("link-graph", "LINK001"),
        ]
        assert result.passed is False

    @pytest.mark.asyncio
    async def test_stop_on_error(self, write_corpus, make_config) -> None:
        """Test the run stops after the first validator reporting an error."""
        root = write_corpus({"README.md": "Hello.\n"})
        plugin = Plugin(
            name="pair",
            validators=(
                ValidatorRegistration.for_class(FirstValidator),
                ValidatorRegistration.for_class(SecondValidator),
            ),
        )
        seen: list[Event] = []
        events = EventBus()
        events.subscribe(seen.append, types={EventType.VALIDATOR_START, EventType.RUN_END})

        engine = ValidationEngine(make_config(root, stop_on_error=True), [plugin], events=events)
        result = await engine.run()

        assert [f.code for f in result.findings] == ["FIRST001"]
        started = [e.data["validator"] for e in seen if e.type == EventType.VALIDATOR_START]
        assert started == ["first"]
        assert seen[-1].type == EventType.RUN_END


class TestBoundaries:
    """Edge corpora run through the whole engine."""

    @pytest.mark.asyncio
    async def test_single_empty_file(self, write_corpus, make_config) -> None:
        """Test one empty file without front matter yields no findings."""
        root = write_corpus({"a.md": ""})

        result = await run(make_config(root))

        assert result.findings == ()
        assert result.file_count == 1
        assert result.passed is True

    @pytest.mark.asyncio
    async def test_link_to_excluded_file(self, write_corpus, make_config) -> None:
        """Test a link to a file removed by an exclude glob is broken."""
        root = write_corpus(
            {"README.md": "Read the [draft](drafts/one.md).\n", "drafts/one.md": "Draft.\n"}
        )
        config = make_config(root, exclude=["drafts/"], validators=LINK_OPTIONS)

        result = await run(config, [links.create_plugin()])

        assert result.file_count == 1
        assert [(f.code, _name(f)) for f in result.findings] == [("LINK001", "README.md")]
        assert result.passed is False
