"""Tests for the character-consistency plugin."""

from types import MappingProxyType

import pytest

from story_linter.config.models import ValidatorSettings
from story_linter.models.extraction import Corpus, ExtractionContext, FileExtraction
from story_linter.models.files import LineIndex
from story_linter.models.findings import Severity, SourceLocation
from story_linter.plugins.characters import (
    CHARACTERS_KEY,
    Character,
    CharacterConsistencyValidator,
    extract_characters,
    levenshtein,
    merge_characters,
)

CORPUS = Corpus(root_dir="/r", files=("/r/a.md", "/r/b.md"))


def _extract(body: str, front_matter: dict | None = None, path: str = "/r/a.md") -> dict:
    context = ExtractionContext(file_path=path, root_dir="/r", line_index=LineIndex(body))
    return extract_characters(body, front_matter or {}, context)


def _character(name: str, file: str, line: int = 1, aliases: tuple[str, ...] = ()) -> Character:
    return Character(
        name=name,
        introduced_at=SourceLocation(file=file, line=line, column=1),
        aliases=aliases,
    )


async def _validate(*characters: Character, **options) -> list:
    metadata = {CHARACTERS_KEY: {c.name: c for c in characters}}
    return await CharacterConsistencyValidator().validate(
        CORPUS, metadata, ValidatorSettings(**options)
    )


class TestExtractCharacters:
    """Tests for name extraction."""

    def test_first_occurrence_location(self) -> None:
        """Test names are recorded where they first appear."""
        found = _extract("The dawn.\nLater, Tuxicles woke. Tuxicles ate.")
        assert list(found) == ["Tuxicles"]
        location = found["Tuxicles"].introduced_at
        assert (location.line, location.column) == (2, 8)

    def test_compound_names(self) -> None:
        """Test camel-case surnames stay one name."""
        assert list(_extract("Old MacDonald sang.")) == ["Old", "MacDonald"]

    def test_fenced_code_ignored(self) -> None:
        """Test names inside fenced code are not collected."""
        assert list(_extract("```\nHidden\n```\nShown here")) == ["Shown"]

    def test_link_targets_and_inline_code_ignored(self) -> None:
        """Test link targets and code spans are masked."""
        found = _extract("Ask [Marta](Elsewhere.md) about `Config` now")
        assert list(found) == ["Ask", "Marta"]

    def test_declared_list(self) -> None:
        """Test front matter lists declare names without a line."""
        found = _extract("", {"characters": ["Zed"]})
        assert found["Zed"].introduced_at == SourceLocation(file="/r/a.md")

    def test_declared_mapping_with_aliases(self) -> None:
        """Test front matter mappings attach aliases to prose names."""
        found = _extract("Tuxicles arrives.", {"characters": {"Tuxicles": ["Tux"], "Bea": "B"}})
        assert found["Tuxicles"].aliases == ("Tux",)
        assert found["Tuxicles"].introduced_at.line == 1
        assert found["Bea"].aliases == ("B",)

    def test_sentence_start_names_unconfirmed(self) -> None:
        """Test names seen only at the start of a sentence are unconfirmed."""
        found = _extract("Tired, she sat down. Later, Marta left.\nFired up, she ran.")
        assert found["Tired"].confirmed is False
        assert found["Fired"].confirmed is False
        assert found["Marta"].confirmed is True

    def test_later_mid_sentence_use_confirms(self) -> None:
        """Test a mid-sentence occurrence confirms a name but keeps the first location."""
        found = _extract("Oskar waved.\nThey saw Oskar again.")
        assert found["Oskar"].confirmed is True
        assert found["Oskar"].introduced_at.line == 1

    def test_wrapped_line_continues_sentence(self) -> None:
        """Test the first word of a wrapped line is not a sentence start."""
        found = _extract("# Arrivals\nTuxicles came in.\nShe spoke to\nMarta quietly.")
        assert found["Tuxicles"].confirmed is False
        assert found["Marta"].confirmed is True

    def test_headings_confirm(self) -> None:
        """Test names in headings are confirmed."""
        assert _extract("# Tuxicles\n")["Tuxicles"].confirmed is True

    def test_declared_names_confirmed(self) -> None:
        """Test front matter declarations confirm a name."""
        found = _extract("Zed ran.", {"characters": ["Zed"]})
        assert found["Zed"].confirmed is True

    def test_declared_invalid(self) -> None:
        """Test other front matter shapes are rejected."""
        with pytest.raises(ValueError, match="characters"):
            _extract("", {"characters": 5})


class TestMergeCharacters:
    """Tests for merging per-file names."""

    def test_first_introduction_wins(self) -> None:
        """Test the earliest file keeps the introduction and aliases are unioned."""
        items = [
            FileExtraction(
                extractor=CHARACTERS_KEY,
                file="/r/a.md",
                payload={"Tuxicles": _character("Tuxicles", "/r/a.md", aliases=("Tux",))},
            ),
            FileExtraction(
                extractor=CHARACTERS_KEY,
                file="/r/b.md",
                payload={"Tuxicles": _character("Tuxicles", "/r/b.md", aliases=("T",))},
            ),
        ]
        merged = merge_characters(items)
        assert isinstance(merged, MappingProxyType)
        assert merged["Tuxicles"].introduced_at.file == "/r/a.md"
        assert merged["Tuxicles"].aliases == ("Tux", "T")


    def test_confirmation_folded_in(self) -> None:
        """Test a later file confirming a name confirms the merged entry."""
        unconfirmed = _character("Oskar", "/r/a.md").model_copy(update={"confirmed": False})
        items = [
            FileExtraction(
                extractor=CHARACTERS_KEY, file="/r/a.md", payload={"Oskar": unconfirmed}
            ),
            FileExtraction(
                extractor=CHARACTERS_KEY,
                file="/r/b.md",
                payload={"Oskar": _character("Oskar", "/r/b.md")},
            ),
        ]
        merged = merge_characters(items)
        assert merged["Oskar"].confirmed is True
        assert merged["Oskar"].introduced_at.file == "/r/a.md"


class TestLevenshtein:
    """Tests for edit distance."""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [("kitten", "sitting", 3), ("", "abc", 3), ("same", "same", 0), ("ab", "ba", 2)],
    )
    def test_distance(self, a: str, b: str, expected: int) -> None:
        """Test known distances."""
        assert levenshtein(a, b) == expected


class TestCharacterConsistencyValidator:
    """Tests for CHAR001."""

    @pytest.mark.asyncio
    async def test_near_duplicate_flagged(self) -> None:
        """Test a one-edit variant is reported against the first name."""
        first = _character("Tuxicles", "/r/a.md")
        later = _character("Tuxilles", "/r/b.md", line=3)

        findings = await _validate(first, later)

        assert len(findings) == 1
        finding = findings[0]
        assert finding.code == "CHAR001"
        assert finding.severity is Severity.ERROR
        assert finding.location == later.introduced_at
        assert "a.md:1" in finding.message
        assert finding.related[0].location == first.introduced_at
        assert "alias" in finding.suggestion

    @pytest.mark.asyncio
    async def test_distinct_names_pass(self) -> None:
        """Test unrelated names are not reported."""
        assert await _validate(_character("Marta", "/r/a.md"), _character("Oskar", "/r/b.md")) == []

    @pytest.mark.asyncio
    async def test_configured_alias(self) -> None:
        """Test configured aliases are never reported."""
        findings = await _validate(
            _character("Tuxicles", "/r/a.md"),
            _character("Tuxilles", "/r/b.md"),
            aliases={"Tuxicles": ["Tuxilles"]},
        )
        assert findings == []

    @pytest.mark.asyncio
    async def test_declared_alias(self) -> None:
        """Test aliases declared in front matter are never reported."""
        findings = await _validate(
            _character("Tuxicles", "/r/a.md", aliases=("Tuxilles",)),
            _character("Tuxilles", "/r/b.md"),
        )
        assert findings == []

    @pytest.mark.asyncio
    async def test_ignored_name(self) -> None:
        """Test ignored names are not reported."""
        findings = await _validate(
            _character("Tuxicles", "/r/a.md"),
            _character("Tuxilles", "/r/b.md"),
            ignore=["tuxilles"],
        )
        assert findings == []

    @pytest.mark.asyncio
    async def test_short_names_skipped(self) -> None:
        """Test names below the minimum length are not compared."""
        assert await _validate(_character("Anne", "/r/a.md"), _character("Ann", "/r/b.md")) == []

    @pytest.mark.asyncio
    async def test_unconfirmed_name_is_not_canonical(self) -> None:
        """Test capitalised sentence openers are not compared against each other."""
        first = _extract("Tired, she sat down.", path="/r/a.md")
        later = _extract("Fired from the job, he left.", path="/r/b.md")

        findings = await _validate(*first.values(), *later.values())

        assert findings == []

    @pytest.mark.asyncio
    async def test_unconfirmed_variant_still_reported(self) -> None:
        """Test a sentence-opening misspelling of a confirmed name is reported."""
        first = _extract("# Tuxicles\n", path="/r/a.md")
        later = _extract("Tuxilles arrived.", path="/r/b.md")

        findings = await _validate(*first.values(), *later.values())

        assert [(f.code, f.location.file) for f in findings] == [("CHAR001", "/r/b.md")]

    @pytest.mark.asyncio
    async def test_max_distance_option(self) -> None:
        """Test the distance threshold is configurable."""
        names = (_character("Marian", "/r/a.md"), _character("Miriam", "/r/b.md"))
        assert await _validate(*names) == []
        assert [f.code for f in await _validate(*names, maxDistance=2)] == ["CHAR001"]
