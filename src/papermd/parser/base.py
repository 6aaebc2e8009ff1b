"""Core intermediate representation (IR) shared by the JATS and arXiv parsers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class ParseError(Exception):
    """Raised when the source markup cannot be parsed at all."""


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Text:
    text: str


@dataclass(frozen=True, slots=True)
class Bold:
    children: list[InlineContent] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Italic:
    children: list[InlineContent] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Superscript:
    text: str


@dataclass(frozen=True, slots=True)
class Subscript:
    text: str


@dataclass(frozen=True, slots=True)
class Citation:
    """In-text citation; ``ref_id`` points at a reference id in the same document."""

    ref_id: str
    text: str


@dataclass(frozen=True, slots=True)
class Link:
    url: str
    children: list[InlineContent] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Code:
    text: str


@dataclass(frozen=True, slots=True)
class InlineFormula:
    text: str
    tex: str | None = None


InlineContent = Text | Bold | Italic | Superscript | Subscript | Citation | Link | Code | InlineFormula


# ---------------------------------------------------------------------------
# Block elements
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Paragraph:
    content: list[InlineContent] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Blockquote:
    content: list[InlineContent] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ListBlock:
    ordered: bool = False
    items: list[list[InlineContent]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TableBlock:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class FigureBlock:
    id: str | None = None
    label: str | None = None
    caption: str | None = None


@dataclass(frozen=True, slots=True)
class BoxedText:
    content: list[BlockElement] = field(default_factory=list)
    title: str | None = None


@dataclass(frozen=True, slots=True)
class DefItem:
    term: str
    definition: str


@dataclass(frozen=True, slots=True)
class DefList:
    items: list[DefItem] = field(default_factory=list)
    title: str | None = None


@dataclass(frozen=True, slots=True)
class FormulaBlock:
    """Display formula. ``tex`` wins over ``text`` when both are known."""

    id: str | None = None
    label: str | None = None
    tex: str | None = None
    text: str | None = None


@dataclass(frozen=True, slots=True)
class Preformat:
    text: str


BlockElement = (
    Paragraph | Blockquote | ListBlock | TableBlock | FigureBlock | BoxedText | DefList | FormulaBlock | Preformat
)


# ---------------------------------------------------------------------------
# Document structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class JatsAuthor:
    surname: str
    given_names: str | None = None


@dataclass(frozen=True, slots=True)
class PublicationDate:
    year: str
    month: str | None = None
    day: str | None = None


@dataclass(frozen=True, slots=True)
class JatsMetadata:
    title: str = ""
    authors: list[JatsAuthor] = field(default_factory=list)
    doi: str | None = None
    pmcid: str | None = None
    pmid: str | None = None
    journal: str | None = None
    publication_date: PublicationDate | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    keywords: list[str] | None = None
    article_type: str | None = None
    license: str | None = None
    abstract: str | None = None


@dataclass(frozen=True, slots=True)
class JatsSection:
    """A heading-delimited section. Top-level sections are level 2."""

    title: str
    level: int
    content: list[BlockElement] = field(default_factory=list)
    subsections: list[JatsSection] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class JatsReference:
    id: str
    text: str
    doi: str | None = None
    pmid: str | None = None
    pmcid: str | None = None


@dataclass(frozen=True, slots=True)
class JatsFootnote:
    id: str
    text: str


@dataclass(frozen=True, slots=True)
class BackMatterNote:
    title: str
    text: str


@dataclass(frozen=True, slots=True)
class JatsDocument:
    metadata: JatsMetadata
    sections: list[JatsSection] = field(default_factory=list)
    references: list[JatsReference] = field(default_factory=list)
    acknowledgments: str | None = None
    appendices: list[JatsSection] | None = None
    footnotes: list[JatsFootnote] | None = None
    floats: list[BlockElement] | None = None
    notes: list[BackMatterNote] | None = None


class Parser(Protocol):
    def parse(self, markup: str) -> JatsDocument:  # pragma: no cover - structural protocol
        """Parse source markup into the document IR."""
