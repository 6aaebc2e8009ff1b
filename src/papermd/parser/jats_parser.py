"""JATS XML (PubMed Central) parser producing the document IR.

Walks the order-preserving tree from :mod:`papermd.parser.xml_tree`, so
text runs, citations and formatting inside a paragraph keep their
original left-to-right order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .base import (
    BackMatterNote,
    BlockElement,
    Blockquote,
    Bold,
    BoxedText,
    Citation,
    Code,
    DefItem,
    DefList,
    FigureBlock,
    FormulaBlock,
    InlineContent,
    InlineFormula,
    Italic,
    JatsAuthor,
    JatsDocument,
    JatsFootnote,
    JatsMetadata,
    JatsReference,
    JatsSection,
    Link,
    ListBlock,
    Paragraph,
    Preformat,
    PublicationDate,
    Subscript,
    Superscript,
    TableBlock,
    Text,
)
from .text import extract_text, extract_text_excluding, normalize_whitespace, strip_identifiers
from .xml_tree import ElementNode, Node, TextNode, attr, find_article, find_child, find_children, parse_xml

logger = logging.getLogger(__name__)

# Lower wins; any other pub-date type ranks after these.
_DATE_PRIORITY = {"epub": 0, "ppub": 1, "collection": 2}
_OTHER_DATE_PRIORITY = 3

# Block-level elements that JATS allows inside <p>.
_BLOCK_TAGS_IN_PARAGRAPH = frozenset({"table-wrap", "fig", "disp-quote", "boxed-text"})


@dataclass(frozen=True, slots=True)
class BackMatter:
    acknowledgments: str | None = None
    appendices: list[JatsSection] | None = None
    footnotes: list[JatsFootnote] | None = None
    floats: list[BlockElement] | None = None
    notes: list[BackMatterNote] | None = None


class JatsParser:
    """Parse JATS XML into the document IR.

    Each ``parse_*`` method accepts the full XML string, so callers can ask
    for just the part they need. :meth:`parse` parses the XML once and
    assembles the whole document.
    """

    def parse(self, xml: str) -> JatsDocument:
        article = _load_article(xml)
        if article is None:
            return JatsDocument(metadata=JatsMetadata())

        metadata = _parse_metadata(article)
        sections = _parse_body(article)
        references = _parse_references(article)
        back = _parse_back_matter(article)
        logger.debug("Parsed JATS article: %d sections, %d references", len(sections), len(references))

        return JatsDocument(
            metadata=metadata,
            sections=sections,
            references=references,
            acknowledgments=back.acknowledgments,
            appendices=back.appendices,
            footnotes=back.footnotes,
            floats=back.floats,
            notes=back.notes,
        )

    def parse_metadata(self, xml: str) -> JatsMetadata:
        article = _load_article(xml)
        return _parse_metadata(article) if article is not None else JatsMetadata()

    def parse_body(self, xml: str) -> list[JatsSection]:
        article = _load_article(xml)
        return _parse_body(article) if article is not None else []

    def parse_references(self, xml: str) -> list[JatsReference]:
        article = _load_article(xml)
        return _parse_references(article) if article is not None else []

    def parse_back_matter(self, xml: str) -> BackMatter:
        article = _load_article(xml)
        return _parse_back_matter(article) if article is not None else BackMatter()

    def parse_table(self, xml: str) -> TableBlock:
        """Parse a standalone ``<table-wrap>`` fragment."""
        table_wrap = find_child(parse_xml(xml), "table-wrap")
        if table_wrap is None:
            return TableBlock()
        return _parse_table_wrap(table_wrap)


def parse_jats(xml: str) -> JatsDocument:
    return JatsParser().parse(xml)


def parse_jats_metadata(xml: str) -> JatsMetadata:
    return JatsParser().parse_metadata(xml)


def parse_jats_body(xml: str) -> list[JatsSection]:
    return JatsParser().parse_body(xml)


def parse_jats_references(xml: str) -> list[JatsReference]:
    return JatsParser().parse_references(xml)


def parse_jats_back_matter(xml: str) -> BackMatter:
    return JatsParser().parse_back_matter(xml)


def parse_jats_table(xml: str) -> TableBlock:
    return JatsParser().parse_table(xml)


def _load_article(xml: str) -> ElementNode | None:
    article = find_article(parse_xml(xml))
    if article is None:
        logger.debug("No <article> element found")
    return article


def _child_text(nodes: list[Node], tag: str) -> str | None:
    """Stripped text of the first child named *tag*, or ``None`` if there is no such child."""
    node = find_child(nodes, tag)
    return extract_text(node).strip() if node is not None else None


# ---------------------------------------------------------------------------
# Front matter
# ---------------------------------------------------------------------------


def _parse_metadata(article: ElementNode) -> JatsMetadata:
    front = find_child(article.children, "front")
    article_meta = find_child(front.children, "article-meta") if front is not None else None
    if front is None or article_meta is None:
        return JatsMetadata()

    meta = article_meta.children

    title_group = find_child(meta, "title-group")
    title = ""
    if title_group is not None:
        title = normalize_whitespace(_child_text(title_group.children, "article-title") or "")

    doi = pmcid = pmid = None
    for article_id in find_children(meta, "article-id"):
        id_type = attr(article_id, "pub-id-type")
        value = extract_text(article_id).strip()
        if id_type == "doi":
            doi = value
        elif id_type in ("pmc", "pmcid"):
            pmcid = _strip_pmc_prefix(value)
        elif id_type == "pmid":
            pmid = value

    fpage = _child_text(meta, "fpage")
    if fpage is not None:
        lpage = _child_text(meta, "lpage")
        pages = f"{fpage}-{lpage}" if lpage else fpage
    else:
        pages = _child_text(meta, "elocation-id")

    keywords = [
        text
        for group in find_children(meta, "kwd-group")
        for kwd in find_children(group.children, "kwd")
        if (text := normalize_whitespace(extract_text(kwd)))
    ]

    return JatsMetadata(
        title=title,
        authors=_parse_authors(meta),
        doi=doi or None,
        pmcid=pmcid or None,
        pmid=pmid or None,
        journal=_parse_journal(front) or None,
        publication_date=_parse_publication_date(meta),
        volume=_child_text(meta, "volume") or None,
        issue=_child_text(meta, "issue") or None,
        pages=pages or None,
        keywords=keywords or None,
        article_type=attr(article, "article-type") or None,
        license=_parse_license(meta) or None,
        abstract=_parse_abstract(meta) or None,
    )


def _parse_authors(meta: list[Node]) -> list[JatsAuthor]:
    authors: list[JatsAuthor] = []
    contrib_group = find_child(meta, "contrib-group")
    if contrib_group is None:
        return authors

    for contrib in find_children(contrib_group.children, "contrib"):
        if attr(contrib, "contrib-type") != "author":
            continue
        name = find_child(contrib.children, "name")
        if name is None:
            continue
        surname = _child_text(name.children, "surname") or ""
        given_names = _child_text(name.children, "given-names") or ""
        authors.append(JatsAuthor(surname=surname, given_names=given_names or None))
    return authors


def _parse_abstract(meta: list[Node]) -> str | None:
    abstract = find_child(meta, "abstract")
    if abstract is None:
        return None

    secs = find_children(abstract.children, "sec")
    if secs:
        parts: list[str] = []
        for sec in secs:
            sec_title = normalize_whitespace(_child_text(sec.children, "title") or "")
            text = " ".join(normalize_whitespace(extract_text(p)) for p in find_children(sec.children, "p"))
            parts.append(f"{sec_title}: {text}" if sec_title else text)
        return "\n\n".join(parts)

    paragraphs = find_children(abstract.children, "p")
    if paragraphs:
        return "\n\n".join(normalize_whitespace(extract_text(p)) for p in paragraphs)

    return normalize_whitespace(extract_text(abstract)) or None


def _parse_publication_date(meta: list[Node]) -> PublicationDate | None:
    best: PublicationDate | None = None
    best_priority = _OTHER_DATE_PRIORITY + 1
    for pub_date in find_children(meta, "pub-date"):
        # pub-type is NLM / early JATS, date-type is JATS 1.2+.
        date_type = attr(pub_date, "pub-type") or attr(pub_date, "date-type") or ""
        priority = _DATE_PRIORITY.get(date_type, _OTHER_DATE_PRIORITY)
        if priority >= best_priority:
            continue
        year = _child_text(pub_date.children, "year") or ""
        if not year:
            continue
        month = _child_text(pub_date.children, "month") or ""
        day = _child_text(pub_date.children, "day") or ""
        best = PublicationDate(year=year, month=month or None, day=day or None)
        best_priority = priority
    return best


def _parse_license(meta: list[Node]) -> str | None:
    permissions = find_child(meta, "permissions")
    license_node = find_child(permissions.children, "license") if permissions is not None else None
    if license_node is None:
        return None
    href = attr(license_node, "xlink:href")
    if href:
        return href
    license_p = find_child(license_node.children, "license-p")
    return normalize_whitespace(extract_text(license_p)) if license_p is not None else None


def _parse_journal(front: ElementNode) -> str | None:
    journal_meta = find_child(front.children, "journal-meta")
    if journal_meta is None:
        return None
    title_group = find_child(journal_meta.children, "journal-title-group")
    if title_group is not None:
        journal = _child_text(title_group.children, "journal-title")
        if journal:
            return normalize_whitespace(journal)
    journal = _child_text(journal_meta.children, "journal-title")
    return normalize_whitespace(journal) if journal else None


def _strip_pmc_prefix(value: str) -> str:
    return value[3:] if value.startswith("PMC") else value


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------


def _parse_inline(nodes: list[Node]) -> list[InlineContent]:
    """Convert mixed content to inline IR nodes, keeping document order."""
    result: list[InlineContent] = []
    for node in nodes:
        if isinstance(node, TextNode):
            if node.text:
                result.append(Text(node.text))
            continue
        handler = _INLINE_HANDLERS.get(node.tag, _inline_as_text)
        item = handler(node)
        if item is not None:
            result.append(item)
    return result


def _inline_as_text(node: ElementNode) -> InlineContent | None:
    text = extract_text(node)
    return Text(text) if text else None


def _inline_formula(node: ElementNode) -> InlineContent:
    tex = _find_tex(node.children)
    return InlineFormula(text=tex or extract_text(node), tex=tex)


def _inline_ext_link(node: ElementNode) -> InlineContent | None:
    href = attr(node, "xlink:href")
    if href:
        return Link(url=href, children=_parse_inline(node.children))
    return _inline_as_text(node)


def _inline_uri(node: ElementNode) -> InlineContent | None:
    url = attr(node, "xlink:href") or extract_text(node).strip()
    if not url:
        return None
    return Link(url=url, children=_parse_inline(node.children))


def _inline_xref(node: ElementNode) -> InlineContent | None:
    if attr(node, "ref-type") == "bibr":
        return Citation(ref_id=attr(node, "rid") or "", text=extract_text(node))
    return _inline_as_text(node)


def _find_tex(nodes: list[Node]) -> str | None:
    """TeX source from ``<tex-math>`` inside ``<alternatives>``, else a direct one."""
    tex_math = None
    alternatives = find_child(nodes, "alternatives")
    if alternatives is not None:
        tex_math = find_child(alternatives.children, "tex-math")
    if tex_math is None:
        tex_math = find_child(nodes, "tex-math")
    if tex_math is None:
        return None
    return extract_text(tex_math).strip() or None


_INLINE_HANDLERS: dict[str, Callable[[ElementNode], InlineContent | None]] = {
    "bold": lambda node: Bold(children=_parse_inline(node.children)),
    "strong": lambda node: Bold(children=_parse_inline(node.children)),
    "italic": lambda node: Italic(children=_parse_inline(node.children)),
    "em": lambda node: Italic(children=_parse_inline(node.children)),
    "sup": lambda node: Superscript(text=extract_text(node)),
    "sub": lambda node: Subscript(text=extract_text(node)),
    "monospace": lambda node: Code(text=extract_text(node)),
    # Styling is dropped, content kept.
    "underline": _inline_as_text,
    "sc": _inline_as_text,
    "inline-formula": _inline_formula,
    "ext-link": _inline_ext_link,
    "uri": _inline_uri,
    "xref": _inline_xref,
}


# ---------------------------------------------------------------------------
# Block content
# ---------------------------------------------------------------------------


def _parse_block_content(nodes: list[Node]) -> list[BlockElement]:
    """Convert the block-level children of a container, in document order.

    ``<title>``, ``<sec>`` and anything else without a block handler is
    skipped here; sections are handled by the caller.
    """
    blocks: list[BlockElement] = []
    for node in nodes:
        if not isinstance(node, ElementNode):
            continue
        handler = _BLOCK_HANDLERS.get(node.tag)
        if handler is not None:
            blocks.extend(handler(node))
    return blocks


def _parse_paragraph(node: ElementNode) -> list[BlockElement]:
    """Parse ``<p>``, lifting nested block elements out into sibling blocks."""
    if not any(isinstance(child, ElementNode) and child.tag in _BLOCK_TAGS_IN_PARAGRAPH for child in node.children):
        return [Paragraph(content=_parse_inline(node.children))]

    blocks: list[BlockElement] = []
    buffer: list[Node] = []

    def flush() -> None:
        content = _parse_inline(buffer)
        buffer.clear()
        # Formatting whitespace around the lifted block is not a paragraph.
        if any(not isinstance(item, Text) or item.text.strip() for item in content):
            blocks.append(Paragraph(content=content))

    for child in node.children:
        if isinstance(child, ElementNode) and child.tag in _BLOCK_TAGS_IN_PARAGRAPH:
            flush()
            blocks.extend(_BLOCK_HANDLERS[child.tag](child))
        else:
            buffer.append(child)
    flush()
    return blocks


def _parse_list(node: ElementNode) -> list[BlockElement]:
    items = [
        [item for p in find_children(list_item.children, "p") for item in _parse_inline(p.children)]
        for list_item in find_children(node.children, "list-item")
    ]
    return [ListBlock(ordered=attr(node, "list-type") == "order", items=items)]


def _parse_table_row(row: ElementNode) -> list[str]:
    cells: list[str] = []
    for cell in row.children:
        if not isinstance(cell, ElementNode) or cell.tag not in ("th", "td"):
            continue
        paragraphs = find_children(cell.children, "p")
        if len(paragraphs) > 1:
            cells.append("<br>".join(normalize_whitespace(extract_text(p)) for p in paragraphs))
        else:
            cells.append(normalize_whitespace(extract_text(cell)))
    return cells


def _parse_table_wrap(node: ElementNode) -> TableBlock:
    label = normalize_whitespace(_child_text(node.children, "label") or "")
    caption_text = normalize_whitespace(_child_text(node.children, "caption") or "")
    caption = ". ".join(part for part in (label, caption_text) if part) or None

    table = find_child(node.children, "table")
    if table is None:
        return TableBlock(caption=caption)

    headers: list[str] = []
    thead = find_child(table.children, "thead")
    if thead is not None:
        head_rows = find_children(thead.children, "tr")
        if head_rows:
            headers = _parse_table_row(head_rows[0])

    tbodies = find_children(table.children, "tbody")
    # Some tables put <tr> straight under <table>.
    body_rows = [tr for tbody in tbodies for tr in find_children(tbody.children, "tr")] if tbodies else find_children(
        table.children, "tr"
    )
    rows = [_parse_table_row(tr) for tr in body_rows]
    return TableBlock(headers=headers, rows=rows, caption=caption)


def _parse_figure(node: ElementNode) -> FigureBlock:
    label = normalize_whitespace(_child_text(node.children, "label") or "")
    caption = normalize_whitespace(_child_text(node.children, "caption") or "")
    return FigureBlock(id=attr(node, "id") or None, label=label or None, caption=caption or None)


def _parse_disp_quote(node: ElementNode) -> list[BlockElement]:
    paragraphs = find_children(node.children, "p")
    if not paragraphs:
        return [Blockquote(content=_parse_inline(node.children))]

    content: list[InlineContent] = []
    for index, p in enumerate(paragraphs):
        if index > 0:
            content.append(Text("\n\n"))
        content.extend(_parse_inline(p.children))
    return [Blockquote(content=content)]


def _parse_boxed_text(node: ElementNode) -> list[BlockElement]:
    title = normalize_whitespace(_child_text(node.children, "title") or "")
    return [BoxedText(content=_parse_block_content(node.children), title=title or None)]


def _parse_def_items(node: ElementNode) -> list[DefItem]:
    return [
        DefItem(
            term=normalize_whitespace(_child_text(item.children, "term") or ""),
            definition=normalize_whitespace(_child_text(item.children, "def") or ""),
        )
        for item in find_children(node.children, "def-item")
    ]


def _parse_def_list(node: ElementNode) -> list[BlockElement]:
    title = normalize_whitespace(_child_text(node.children, "title") or "")
    return [DefList(items=_parse_def_items(node), title=title or None)]


def _parse_disp_formula(node: ElementNode) -> list[BlockElement]:
    label = normalize_whitespace(_child_text(node.children, "label") or "")
    tex = _find_tex(node.children)
    text = None
    if tex is None:
        text = extract_text_excluding(node.children, "label").strip() or None
    return [FormulaBlock(id=attr(node, "id") or None, label=label or None, tex=tex, text=text)]


def _parse_preformat(node: ElementNode) -> list[BlockElement]:
    return [Preformat(text=extract_text(node))]


def _parse_supplementary_material(node: ElementNode) -> list[BlockElement]:
    label = normalize_whitespace(_child_text(node.children, "label") or "")
    caption = normalize_whitespace(_child_text(node.children, "caption") or "")
    text = ": ".join(part for part in (label, caption) if part)
    return [Paragraph(content=[Text(text)])] if text else []


_BLOCK_HANDLERS: dict[str, Callable[[ElementNode], list[BlockElement]]] = {
    "p": _parse_paragraph,
    "list": _parse_list,
    "table-wrap": lambda node: [_parse_table_wrap(node)],
    "fig": lambda node: [_parse_figure(node)],
    "disp-quote": _parse_disp_quote,
    "boxed-text": _parse_boxed_text,
    "def-list": _parse_def_list,
    "disp-formula": _parse_disp_formula,
    "preformat": _parse_preformat,
    "supplementary-material": _parse_supplementary_material,
}


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _parse_section(node: ElementNode, level: int) -> JatsSection:
    title = normalize_whitespace(_child_text(node.children, "title") or "")
    return JatsSection(
        title=title,
        level=level,
        content=_parse_block_content(node.children),
        subsections=[_parse_section(sec, level + 1) for sec in find_children(node.children, "sec")],
    )


def _parse_body(article: ElementNode) -> list[JatsSection]:
    body = find_child(article.children, "body")
    if body is None:
        return []

    sections: list[JatsSection] = []
    loose: list[Node] = []

    def flush() -> None:
        blocks = _parse_block_content(loose)
        loose.clear()
        if blocks:
            sections.append(JatsSection(title="", level=2, content=blocks))

    for node in body.children:
        if isinstance(node, ElementNode) and node.tag == "sec":
            flush()
            sections.append(_parse_section(node, 2))
        else:
            loose.append(node)
    flush()
    return sections


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


def _parse_references(article: ElementNode) -> list[JatsReference]:
    back = find_child(article.children, "back")
    ref_list = find_child(back.children, "ref-list") if back is not None else None
    if ref_list is None:
        return []

    references: list[JatsReference] = []
    for ref in find_children(ref_list.children, "ref"):
        ref_id = attr(ref, "id") or ""
        reference = _parse_reference(ref, ref_id)
        if ref_id and reference is not None:
            references.append(reference)
    return references


def _parse_reference(ref: ElementNode, ref_id: str) -> JatsReference | None:
    alternatives = find_child(ref.children, "citation-alternatives")
    scope = alternatives.children if alternatives is not None else ref.children

    mixed = find_child(scope, "mixed-citation")
    element = find_child(scope, "element-citation")
    if mixed is not None:
        citation, raw_text = mixed, extract_text(mixed)
    elif element is not None:
        citation, raw_text = element, _format_element_citation(element)
    else:
        # Skip <label> so the citation number stays out of the text.
        text = normalize_whitespace(extract_text_excluding(ref.children, "label"))
        return JatsReference(id=ref_id, text=text) if text else None

    doi, pmid, pmcid = _extract_pub_ids(citation)
    text = strip_identifiers(raw_text, doi=doi, pmid=pmid, pmcid=pmcid)
    if not text:
        return None
    return JatsReference(id=ref_id, text=text, doi=doi, pmid=pmid, pmcid=pmcid)


def _format_element_citation(citation: ElementNode) -> str:
    """Assemble ``Authors. Title. Source. Year;Volume:Pages.`` from structured children."""
    nodes = citation.children
    parts: list[str] = []

    person_group = find_child(nodes, "person-group")
    if person_group is not None:
        names: list[str] = []
        for name in person_group.children:
            if not isinstance(name, ElementNode):
                continue
            if name.tag == "name":
                surname = _child_text(name.children, "surname") or ""
                given = _child_text(name.children, "given-names") or ""
                if surname:
                    names.append(f"{surname} {given}" if given else surname)
            elif name.tag == "string-name":
                text = normalize_whitespace(extract_text(name))
                if text:
                    names.append(text)
        if names:
            parts.append(", ".join(names))

    for tag in ("article-title", "source"):
        text = normalize_whitespace(_child_text(nodes, tag) or "")
        if text:
            parts.append(text)

    year = _child_text(nodes, "year") or ""
    if year:
        volume = _child_text(nodes, "volume") or ""
        fpage = _child_text(nodes, "fpage") or ""
        lpage = _child_text(nodes, "lpage") or ""
        if volume:
            year += f";{volume}"
        if fpage:
            year += f":{fpage}-{lpage}" if lpage else f":{fpage}"
        parts.append(year)

    return ". ".join(parts) + "."


def _extract_pub_ids(citation: ElementNode) -> tuple[str | None, str | None, str | None]:
    doi = pmid = pmcid = None
    for pub_id in find_children(citation.children, "pub-id"):
        value = extract_text(pub_id).strip()
        if not value:
            continue
        id_type = attr(pub_id, "pub-id-type")
        if id_type == "doi":
            doi = value
        elif id_type == "pmid":
            pmid = value
        elif id_type in ("pmc", "pmcid"):
            pmcid = _strip_pmc_prefix(value)
    return doi, pmid, pmcid


# ---------------------------------------------------------------------------
# Back matter and floats
# ---------------------------------------------------------------------------


def _paragraph_texts(nodes: list[Node]) -> list[str]:
    return [normalize_whitespace(extract_text(p)) for p in find_children(nodes, "p")]


def _parse_back_matter(article: ElementNode) -> BackMatter:
    acknowledgments = appendices = footnotes = notes = None

    back = find_child(article.children, "back")
    if back is not None:
        acknowledgments = _parse_acknowledgments(back)

        app_group = find_child(back.children, "app-group")
        if app_group is not None:
            appendices = [_parse_section(app, 2) for app in find_children(app_group.children, "app")] or None

        fn_group = find_child(back.children, "fn-group")
        if fn_group is not None:
            footnotes = [_parse_footnote(fn) for fn in find_children(fn_group.children, "fn")] or None

        notes = (_parse_notes(back) + _parse_glossaries(back)) or None

    return BackMatter(
        acknowledgments=acknowledgments,
        appendices=appendices,
        footnotes=footnotes,
        floats=_parse_floats(article),
        notes=notes,
    )


def _parse_acknowledgments(back: ElementNode) -> str | None:
    ack = find_child(back.children, "ack")
    if ack is None:
        return None
    paragraphs = _paragraph_texts(ack.children)
    if not paragraphs:
        paragraphs = [text for sec in find_children(ack.children, "sec") for text in _paragraph_texts(sec.children)]
    return "\n\n".join(paragraphs) or None


def _parse_footnote(fn: ElementNode) -> JatsFootnote:
    parts: list[str] = []
    title = normalize_whitespace(_child_text(fn.children, "title") or "")
    if title:
        parts.append(title)
    parts.extend(text for text in _paragraph_texts(fn.children) if text)
    return JatsFootnote(id=attr(fn, "id") or "", text=" ".join(parts))


def _note_from(node: ElementNode) -> BackMatterNote | None:
    title = normalize_whitespace(_child_text(node.children, "title") or "")
    text = "\n\n".join(_paragraph_texts(node.children))
    if not title and not text:
        return None
    return BackMatterNote(title=title, text=text)


def _parse_notes(back: ElementNode) -> list[BackMatterNote]:
    notes: list[BackMatterNote] = []
    for element in find_children(back.children, "notes"):
        # A <notes> holding <sec> or nested <notes> (e.g. "Declarations") is only a wrapper.
        inner = find_children(element.children, "sec") or find_children(element.children, "notes")
        for node in inner or [element]:
            note = _note_from(node)
            if note is not None:
                notes.append(note)
    return notes


def _parse_glossaries(back: ElementNode) -> list[BackMatterNote]:
    notes: list[BackMatterNote] = []
    for glossary in find_children(back.children, "glossary"):
        def_list = find_child(glossary.children, "def-list")
        if def_list is None:
            continue
        title = normalize_whitespace(_child_text(glossary.children, "title") or "") or "Glossary"
        lines = [f"{item.term}: {item.definition}" for item in _parse_def_items(def_list)]
        notes.append(BackMatterNote(title=title, text="\n".join(lines)))
    return notes


def _parse_floats(article: ElementNode) -> list[BlockElement] | None:
    floats_group = find_child(article.children, "floats-group")
    if floats_group is None:
        return None
    blocks: list[BlockElement] = []
    for node in floats_group.children:
        if not isinstance(node, ElementNode):
            continue
        if node.tag == "fig":
            blocks.append(_parse_figure(node))
        elif node.tag == "table-wrap":
            blocks.append(_parse_table_wrap(node))
    return blocks or None
