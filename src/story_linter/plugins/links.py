"""Link-graph plugin.

Extracts intra-corpus links from every file and checks the resulting
graph for broken links, orphaned documents and mutual links.
"""

import difflib
import posixpath
import re
from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import unquote

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from story_linter.config.models import ValidatorSettings
from story_linter.models.extraction import Corpus, ExtractionContext
from story_linter.models.findings import Finding, RelatedLocation, Severity, SourceLocation
from story_linter.plugins.base import (
    BaseValidator,
    ExtractorDescriptor,
    Plugin,
    SeverityPolicy,
    ValidatorRegistration,
)
from story_linter.plugins.markdown import iter_prose_lines, mask_inline_code
from story_linter.plugins.merging import concat

LINKS_KEY = "links"
DEFAULT_ENTRY_POINTS = ("README.md", "index.md")

# [text](target "title"), not preceded by "!" (images)
_INLINE_LINK = re.compile(r"(?<!!)\[([^\]]*)\]\(\s*<?([^)\s>]+)>?(?:\s+[\"'(][^)]*)?\s*\)")
# [id]: target "title", footnote definitions ([^1]: ...) excluded
_REFERENCE_DEF = re.compile(r"^\s{0,3}\[(?!\^)([^\]]+)\]:\s*<?([^\s>]+)>?")
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


class Link(BaseModel):
    """An outbound link from one corpus file to another."""

    model_config = ConfigDict(frozen=True)

    text: str
    target: str
    resolved: str
    location: SourceLocation


class LinkOptions(BaseModel):
    """Options of the link-graph validator."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    entry_points: list[str] = Field(default_factory=lambda: list(DEFAULT_ENTRY_POINTS))
    check_orphans: bool = True
    report_bidirectional: bool = False


def resolve_target(target: str, file_path: str, root_dir: str) -> str | None:
    """
    Resolve a link target to a canonical corpus path.

    Args:
        target: Raw link target as written.
        file_path: Canonical path of the linking file.
        root_dir: Canonical project root, used for ``/``-rooted targets.

    Returns:
        Absolute POSIX path, or None for external links and pure anchors.
    """
    if target.startswith("//") or _SCHEME.match(target):
        return None
    path = target.split("#", 1)[0].split("?", 1)[0]
    if not path:
        return None
    path = unquote(path)
    if path.startswith("/"):
        joined = root_dir.rstrip("/") + path
    else:
        joined = posixpath.join(posixpath.dirname(file_path), path)
    return posixpath.normpath(joined)


def extract_links(
    body: str, front_matter: Mapping[str, Any], context: ExtractionContext
) -> tuple[Link, ...]:
    """Collect inline links and reference definitions outside fenced code."""
    links: list[Link] = []
    for start, line in iter_prose_lines(body):
        prose = mask_inline_code(line)
        matches = list(_INLINE_LINK.finditer(prose))
        reference = _REFERENCE_DEF.match(prose)
        if reference:
            matches.append(reference)

        for match in matches:
            text, target = match.group(1), match.group(2)
            resolved = resolve_target(target, context.file_path, context.root_dir)
            if resolved is None:
                continue
            links.append(
                Link(
                    text=text,
                    target=target,
                    resolved=resolved,
                    location=context.location(start + match.start()),
                )
            )
    return tuple(links)


class LinkGraphValidator(BaseValidator):
    """Checks the corpus link graph (LINK001, LINK002, LINK003)."""

    key = "link-graph"
    version = "0.1.0"
    extractors = frozenset({LINKS_KEY})
    severity = SeverityPolicy(
        default=Severity.ERROR,
        rules={"LINK002": Severity.WARNING, "LINK003": Severity.INFO},
    )

    async def validate(
        self,
        corpus: Corpus,
        metadata: Mapping[str, Any],
        settings: ValidatorSettings,
    ) -> list[Finding]:
        options = LinkOptions.model_validate(settings.options)
        links: Sequence[Link] = metadata[LINKS_KEY]

        findings: list[Finding] = []
        inbound: set[str] = set()
        edges: dict[tuple[str, str], Link] = {}

        for link in links:
            source = link.location.file
            if link.resolved in corpus:
                if link.resolved != source:
                    inbound.add(link.resolved)
                    edges.setdefault((source, link.resolved), link)
                continue
            findings.append(
                self.finding(
                    "LINK001",
                    f'Broken link to "{link.target}": target is not part of the corpus',
                    link.location,
                    suggestion=self._suggest(link, corpus),
                )
            )

        if options.check_orphans and len(corpus) > 1:
            for path in corpus.files:
                if path in inbound or self._is_entry_point(corpus.relative(path), options):
                    continue
                findings.append(
                    self.finding(
                        "LINK002",
                        "Orphaned document: no other document links here "
                        "and it is not an entry point",
                        SourceLocation(file=path),
                    )
                )

        if options.report_bidirectional:
            findings.extend(self._bidirectional(edges, corpus))

        return findings

    def _is_entry_point(self, relative: str, options: LinkOptions) -> bool:
        for entry in options.entry_points:
            if "/" in entry:
                if posixpath.normpath(entry.lstrip("/")) == relative:
                    return True
            elif posixpath.basename(relative) == entry:
                return True
        return False

    def _suggest(self, link: Link, corpus: Corpus) -> str | None:
        """Closest corpus file to a broken link, relative to the linking file."""
        candidates = {corpus.relative(path): path for path in corpus.files}
        close = difflib.get_close_matches(corpus.relative(link.resolved), candidates, n=1)
        if not close:
            return None
        source_dir = posixpath.dirname(link.location.file)
        return f'Did you mean "{posixpath.relpath(candidates[close[0]], source_dir)}"?'

    def _bidirectional(
        self, edges: Mapping[tuple[str, str], Link], corpus: Corpus
    ) -> list[Finding]:
        findings: list[Finding] = []
        for (source, target), link in edges.items():
            if source > target or (target, source) not in edges:
                continue
            back = edges[(target, source)]
            findings.append(
                self.finding(
                    "LINK003",
                    f'Bidirectional link between "{corpus.relative(source)}" '
                    f'and "{corpus.relative(target)}"',
                    link.location,
                    related=(RelatedLocation(location=back.location, message="Link back"),),
                )
            )
        return findings


def create_plugin() -> Plugin:
    """Build the link-graph plugin."""
    return Plugin(
        name="links",
        extractors=(
            ExtractorDescriptor(key=LINKS_KEY, extract=extract_links, merge=concat),
        ),
        validators=(ValidatorRegistration.for_class(LinkGraphValidator),),
    )
