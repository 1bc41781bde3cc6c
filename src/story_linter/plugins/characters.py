"""Character-consistency plugin.

Collects capitalised names from prose and flags later spellings that
are a small edit away from a name introduced earlier in the corpus.
"""

import re
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from story_linter.config.models import ValidatorSettings
from story_linter.models.extraction import Corpus, ExtractionContext, FileExtraction
from story_linter.models.findings import Finding, RelatedLocation, Severity, SourceLocation
from story_linter.plugins.base import (
    BaseValidator,
    ExtractorDescriptor,
    Plugin,
    SeverityPolicy,
    ValidatorRegistration,
)
from story_linter.plugins.markdown import iter_prose_lines, mask_inline_code
from story_linter.plugins.merging import first_wins

CHARACTERS_KEY = "characters"

_NAME = re.compile(r"\b[A-Z][a-z]+(?:[A-Z][a-z]+)*\b")
_LINK_TARGET = re.compile(r"\]\([^)]*\)|<[^>\s]+>|https?://\S+")

# list markers, blockquotes and opening quotes or emphasis before a word
_OPENERS = r"(?:[>*+-]\s+|\d+[.)]\s+)*[\"'“‘(\[*_]*"
_AFTER_STOP = re.compile(r"[.!?][\"'”’)\]*_]*\s+" + _OPENERS + r"$")
_LINE_START = re.compile(r"^\s*" + _OPENERS + r"$")
_ENDS_SENTENCE = re.compile(r"[.!?:][\"'”’)\]*_]*\s*$")
_HEADING = re.compile(r"^\s{0,3}#{1,6}\s")

COMMON_WORDS = frozenset(
    {
        # articles, determiners, pronouns
        "The", "This", "That", "These", "Those", "There", "Then", "Than", "Their",
        "They", "Them", "She", "Her", "Hers", "His", "Him", "Its", "You", "Your",
        "We", "Our", "Ours", "Me", "My", "Mine", "It", "He", "An", "Some", "Any",
        "All", "Each", "Every", "Both", "Few", "Many", "Most", "Other", "Such",
        "No", "Not", "None", "Nothing", "Everything", "Someone", "Everyone",
        # conjunctions, prepositions, adverbs
        "And", "But", "Or", "Nor", "So", "Yet", "For", "If", "When", "While",
        "Where", "Why", "How", "What", "Which", "Who", "Whom", "Whose", "After",
        "Before", "Because", "Although", "Though", "Until", "Since", "As", "At",
        "By", "In", "On", "Of", "To", "With", "Without", "From", "Into", "Over",
        "Under", "Up", "Down", "Out", "Once", "Now", "Later", "Soon", "Still",
        "Just", "Only", "Even", "Also", "Again", "Here", "Perhaps", "Maybe",
        "Yes", "Oh", "Well", "Meanwhile", "Suddenly", "Finally", "However",
        "Is", "Was", "Were", "Are", "Be", "Been", "Do", "Did", "Does", "Had",
        "Has", "Have", "Can", "Could", "Will", "Would", "Should", "Shall",
        "May", "Might", "Must", "Let", "Please",
        # structure
        "Chapter", "Section", "Part", "Book", "Volume", "Prologue", "Epilogue",
        "Act", "Scene", "Interlude", "Appendix", "Contents", "Introduction",
        "Notes", "Note", "End",
        # time
        "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
        "Sunday", "January", "February", "March", "April", "June", "July",
        "August", "September", "October", "November", "December", "Today",
        "Tomorrow", "Yesterday", "Morning", "Evening", "Night",
    }
)  # fmt: skip


class Character(BaseModel):
    """A character name and where the corpus first introduces it.

    ``confirmed`` is False while the name has only been seen as the
    first word of a sentence, where ordinary words are capitalised too.
    Only confirmed names serve as the canonical spelling.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    introduced_at: SourceLocation
    aliases: tuple[str, ...] = ()
    confirmed: bool = True


class CharacterOptions(BaseModel):
    """Options of the character-consistency validator."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    aliases: dict[str, list[str]] = Field(default_factory=dict)
    ignore: list[str] = Field(default_factory=list)
    max_distance: int = Field(default=1, ge=0)
    min_length: int = Field(default=4, ge=1)


def _mask_link_targets(line: str) -> str:
    return _LINK_TARGET.sub(lambda m: " " * len(m.group(0)), mask_inline_code(line))


def _at_sentence_start(prefix: str, previous: str) -> bool:
    """Whether a word preceded by ``prefix`` on its line opens a sentence.

    ``previous`` is the prose line before, used when the word is the
    first on its line.
    """
    if _AFTER_STOP.search(prefix):
        return True
    if not _LINE_START.match(prefix):
        return False
    return (
        not previous.strip()
        or _ENDS_SENTENCE.search(previous) is not None
        or _HEADING.match(previous) is not None
    )


def _declared_characters(front_matter: Mapping[str, Any]) -> dict[str, tuple[str, ...]]:
    """Read ``characters`` from front matter as ``{name: aliases}``."""
    declared = front_matter.get(CHARACTERS_KEY)
    if declared is None:
        return {}
    if isinstance(declared, list):
        return {str(name): () for name in declared}
    if isinstance(declared, Mapping):
        result: dict[str, tuple[str, ...]] = {}
        for name, aliases in declared.items():
            if aliases is None:
                aliases = []
            elif isinstance(aliases, str):
                aliases = [aliases]
            result[str(name)] = tuple(str(a) for a in aliases)
        return result
    raise ValueError(f"front matter '{CHARACTERS_KEY}' must be a list or a mapping")


def extract_characters(
    body: str, front_matter: Mapping[str, Any], context: ExtractionContext
) -> dict[str, Character]:
    """Collect the first occurrence of each name in one file."""
    found: dict[str, Character] = {}
    previous = ""
    for start, line in iter_prose_lines(body):
        prose = _mask_link_targets(line)
        for match in _NAME.finditer(prose):
            name = match.group(0)
            if name in COMMON_WORDS:
                continue
            confirmed = not _at_sentence_start(prose[: match.start()], previous)
            character = found.get(name)
            if character is None:
                location = context.location(start + match.start())
                found[name] = Character(name=name, introduced_at=location, confirmed=confirmed)
            elif confirmed and not character.confirmed:
                found[name] = character.model_copy(update={"confirmed": True})
        if line.strip():
            previous = line

    for name, aliases in _declared_characters(front_matter).items():
        character = found.get(name)
        if character is None:
            found[name] = Character(
                name=name,
                introduced_at=SourceLocation(file=context.file_path),
                aliases=aliases,
            )
        else:
            found[name] = character.model_copy(update={"aliases": aliases, "confirmed": True})
    return found


def _fold_later(kept: Character, later: Character) -> Character:
    update: dict[str, Any] = {}
    if later.aliases:
        update["aliases"] = tuple(dict.fromkeys(kept.aliases + later.aliases))
    if later.confirmed and not kept.confirmed:
        update["confirmed"] = True
    return kept.model_copy(update=update) if update else kept


def merge_characters(items: Sequence[FileExtraction]) -> Mapping[str, Character]:
    """First introduction wins; later aliases and confirmations are folded in."""
    return MappingProxyType(first_wins(items, combine=_fold_later))


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + (ca != cb))
            )
        previous = current
    return previous[-1]


class CharacterConsistencyValidator(BaseValidator):
    """Flags misspelled variants of character names (CHAR001)."""

    key = "character-consistency"
    version = "0.1.0"
    extractors = frozenset({CHARACTERS_KEY})
    severity = SeverityPolicy(default=Severity.ERROR)

    async def validate(
        self,
        corpus: Corpus,
        metadata: Mapping[str, Any],
        settings: ValidatorSettings,
    ) -> list[Finding]:
        options = CharacterOptions.model_validate(settings.options)
        characters: Mapping[str, Character] = metadata[CHARACTERS_KEY]
        ignored = {name.lower() for name in options.ignore}

        aliases: set[str] = set()
        for names in options.aliases.values():
            aliases.update(n.lower() for n in names)
        for character in characters.values():
            aliases.update(a.lower() for a in character.aliases)

        canonical_names: list[Character] = []
        findings: list[Finding] = []
        for character in characters.values():
            lowered = character.name.lower()
            if lowered in aliases:
                continue
            match = None
            if lowered not in ignored:
                match = self._closest(character, canonical_names, options)
            if match is None:
                if character.confirmed or lowered in ignored:
                    canonical_names.append(character)
                continue

            where = f"{corpus.relative(match.introduced_at.file)}:{match.introduced_at.line}"
            findings.append(
                self.finding(
                    "CHAR001",
                    f'Inconsistent character name: "{character.name}" looks like '
                    f'"{match.name}" introduced at {where}',
                    character.introduced_at,
                    related=(
                        RelatedLocation(
                            location=match.introduced_at,
                            message=f'"{match.name}" is introduced here',
                        ),
                    ),
                    suggestion=f'Use "{match.name}" or declare "{character.name}" as an alias',
                )
            )
        return findings

    def _closest(
        self,
        character: Character,
        known: Sequence[Character],
        options: CharacterOptions,
    ) -> Character | None:
        """Earliest known name within ``max_distance`` of ``character``."""
        name = character.name.lower()
        if len(name) < options.min_length:
            return None
        for candidate in known:
            other = candidate.name.lower()
            if len(other) < options.min_length:
                continue
            if abs(len(other) - len(name)) > options.max_distance:
                continue
            if levenshtein(name, other) <= options.max_distance:
                return candidate
        return None


def create_plugin() -> Plugin:
    """Build the character-consistency plugin."""
    return Plugin(
        name="characters",
        extractors=(
            ExtractorDescriptor(
                key=CHARACTERS_KEY,
                extract=extract_characters,
                merge=merge_characters,
                empty=lambda: MappingProxyType({}),
            ),
        ),
        validators=(ValidatorRegistration.for_class(CharacterConsistencyValidator),),
    )
