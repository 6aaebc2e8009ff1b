"""Plain-text extraction over the ordered XML tree."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .xml_tree import ElementNode, Node, TextNode

# Name parts that are routinely written as adjacent elements with no
# whitespace between them, e.g. <surname>McGuire</surname><given-names>N</given-names>.
NAME_FRAGMENT_TAGS = frozenset({"surname", "given-names", "name", "string-name"})

_ENDS_WITH_SEPARATOR_RE = re.compile(r"[\s,;.:()\-/]$")
_WHITESPACE_RE = re.compile(r"\s+")


def extract_text(node: Node | Iterable[Node] | None) -> str:
    """Concatenate every text descendant of *node* in document order."""
    if node is None:
        return ""
    if isinstance(node, TextNode):
        return node.text
    if isinstance(node, ElementNode):
        return _join_child_texts(node.children)
    return _join_child_texts(node)


def _join_child_texts(nodes: Iterable[Node]) -> str:
    parts: list[str] = []
    for child in nodes:
        text = extract_text(child)
        if not text:
            continue
        if (
            isinstance(child, ElementNode)
            and child.tag in NAME_FRAGMENT_TAGS
            and parts
            and not _ENDS_WITH_SEPARATOR_RE.search(parts[-1])
        ):
            parts.append(" ")
        parts.append(text)
    return "".join(parts)


def extract_text_excluding(nodes: Iterable[Node], *tags: str) -> str:
    """Like :func:`extract_text`, skipping direct children with one of *tags*."""
    kept = [node for node in nodes if not (isinstance(node, ElementNode) and node.tag in tags)]
    return _join_child_texts(kept)


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


_ID_LABEL_PREFIX = r"(?<!\w)(?:doi|pmcid|pmid|pmc)\s*:?\s*"
_ID_TRAILING_BOUNDARY = r"(?![\w/-]|\.\w)"
_TRAILING_PERIODS_RE = re.compile(r"(?:\.\s*){2,}$")


def strip_identifiers(text: str, *, doi: str | None = None, pmid: str | None = None, pmcid: str | None = None) -> str:
    """Remove identifiers carried as structured fields from a citation string.

    Each value is removed together with a ``doi:``/``PMID:``-style label
    (any case) and, for DOIs, a ``doi.org`` URL. Bare occurrences are only
    removed when they stand alone, so ``10.1/ab`` inside ``10.1/abc`` is
    kept. ``pmcid`` is the numeric id; its ``PMC``-prefixed form is
    removed too. The result is whitespace-collapsed.
    """
    result = text
    if doi:
        result = re.sub(rf"https?://(?:dx\.)?doi\.org/{re.escape(doi)}", "", result, flags=re.IGNORECASE)
    # PMC-prefixed form first so the bare number does not leave "PMC" behind.
    for value in (f"PMC{pmcid}" if pmcid else None, doi, pmid, pmcid):
        if value:
            result = _strip_identifier(result, value)
    result = normalize_whitespace(result)
    return _TRAILING_PERIODS_RE.sub(".", result)


def _strip_identifier(text: str, value: str) -> str:
    escaped = re.escape(value)
    text = re.sub(rf"{_ID_LABEL_PREFIX}{escaped}{_ID_TRAILING_BOUNDARY}", "", text, flags=re.IGNORECASE)
    return re.sub(rf"(?<![\w./-]){escaped}{_ID_TRAILING_BOUNDARY}", "", text)
