"""arXiv (LaTeXML HTML) parser producing the same IR as the JATS parser.

LaTeXML marks structure with ``ltx_*`` CSS classes, so elements are
matched by class first and by tag name second.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Callable

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from .base import (
    BlockElement,
    Blockquote,
    Bold,
    Citation,
    Code,
    FigureBlock,
    FormulaBlock,
    InlineContent,
    InlineFormula,
    Italic,
    JatsAuthor,
    JatsDocument,
    JatsMetadata,
    JatsReference,
    JatsSection,
    Link,
    ListBlock,
    Paragraph,
    ParseError,
    Preformat,
    Subscript,
    Superscript,
    TableBlock,
    Text,
)
from .text import normalize_whitespace, strip_identifiers

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^h[1-6]$")
_DOI_HREF_RE = re.compile(r"doi\.org/(.+)")
_TRAILING_DIGITS_RE = re.compile(r"\d+$")

_SECTION_LEVELS = (("ltx_subsection", 3), ("ltx_subsubsection", 4), ("ltx_paragraph", 5))
_NON_BODY_SECTION_CLASSES = ("ltx_bibliography", "ltx_acknowledgement")
_INLINE_CONTAINER_TAGS = frozenset({"span", "cite"})


class ArxivHtmlParser:
    """Parse arXiv LaTeXML HTML into the document IR."""

    def parse(self, html: str) -> JatsDocument:
        soup = _make_soup(html)
        sections = _parse_body(soup)
        references = _parse_references(soup)
        logger.debug("Parsed arXiv HTML: %d sections, %d references", len(sections), len(references))
        return JatsDocument(
            metadata=_parse_metadata(soup),
            sections=sections,
            references=references,
            acknowledgments=_parse_acknowledgments(soup),
        )

    def parse_metadata(self, html: str) -> JatsMetadata:
        return _parse_metadata(_make_soup(html))

    def parse_body(self, html: str) -> list[JatsSection]:
        return _parse_body(_make_soup(html))

    def parse_references(self, html: str) -> list[JatsReference]:
        return _parse_references(_make_soup(html))


def parse_arxiv_html(html: str) -> JatsDocument:
    return ArxivHtmlParser().parse(html)


def parse_arxiv_html_metadata(html: str) -> JatsMetadata:
    return ArxivHtmlParser().parse_metadata(html)


def parse_arxiv_html_body(html: str) -> list[JatsSection]:
    return ArxivHtmlParser().parse_body(html)


def parse_arxiv_html_references(html: str) -> list[JatsReference]:
    return ArxivHtmlParser().parse_references(html)


def _make_soup(html: str | bytes) -> BeautifulSoup:
    if not isinstance(html, (str, bytes)):
        raise ParseError(f"Expected HTML as str or bytes, got {type(html).__name__}")
    return BeautifulSoup(html, "html.parser")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _has_class(el: Tag, cls: str) -> bool:
    return cls in (el.get("class") or [])


def _child_tags(el: Tag) -> list[Tag]:
    return [child for child in el.children if isinstance(child, Tag)]


def _text_without(el: Tag, *selectors: str) -> str:
    """Text of *el* with every element matching one of *selectors* removed."""
    clone = copy.copy(el)
    for selector in selectors:
        for match in clone.select(selector):
            match.decompose()
    return clone.get_text()


def _strip_annotations(el: Tag) -> str:
    # LaTeXML embeds the TeX source and content MathML as annotations.
    clone = copy.copy(el)
    for annotation in clone.find_all(["annotation", "annotation-xml"]):
        annotation.decompose()
    return clone.get_text().strip()


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------


def _parse_inline_children(parent: Tag) -> list[InlineContent]:
    result: list[InlineContent] = []
    for node in parent.children:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            if str(node):
                result.append(Text(str(node)))
        elif isinstance(node, Tag):
            result.extend(_parse_inline_element(node))
    return result


def _parse_inline_element(el: Tag) -> list[InlineContent]:
    if _has_class(el, "ltx_font_bold"):
        return [Bold(children=_parse_inline_children(el))]
    if _has_class(el, "ltx_font_italic"):
        return [Italic(children=_parse_inline_children(el))]
    if _has_class(el, "ltx_font_typewriter"):
        return [Code(text=el.get_text().strip())]

    handler = _INLINE_HANDLERS.get(el.name)
    if handler is not None:
        return [handler(el)]
    if el.name in _INLINE_CONTAINER_TAGS:
        return _parse_inline_children(el)

    text = el.get_text().strip()
    return [Text(text)] if text else []


def _inline_math(el: Tag) -> InlineContent:
    return InlineFormula(text=_strip_annotations(el), tex=el.get("alttext") or None)


def _inline_anchor(el: Tag) -> InlineContent:
    href = el.get("href") or ""
    if href.startswith("#bib"):
        return Citation(ref_id=href[1:], text=el.get_text().strip())
    if href.startswith(("http://", "https://")):
        return Link(url=href, children=_parse_inline_children(el))
    return Text(el.get_text().strip())


_INLINE_HANDLERS: dict[str, Callable[[Tag], InlineContent]] = {
    "math": _inline_math,
    "a": _inline_anchor,
    "b": lambda el: Bold(children=_parse_inline_children(el)),
    "strong": lambda el: Bold(children=_parse_inline_children(el)),
    "i": lambda el: Italic(children=_parse_inline_children(el)),
    "em": lambda el: Italic(children=_parse_inline_children(el)),
    "code": lambda el: Code(text=el.get_text().strip()),
    "sup": lambda el: Superscript(text=el.get_text().strip()),
    "sub": lambda el: Subscript(text=el.get_text().strip()),
}


# ---------------------------------------------------------------------------
# Block content
# ---------------------------------------------------------------------------


def _is_skipped_block(el: Tag) -> bool:
    return el.name == "section" or bool(_HEADING_RE.match(el.name))


def _match_block(el: Tag) -> BlockElement | None:
    if _is_skipped_block(el):
        return None

    if _has_class(el, "ltx_equation") or _has_class(el, "ltx_eqn_table"):
        return _parse_formula(el)
    if _has_class(el, "ltx_tabular"):
        return _parse_table(el)

    if el.name == "p":
        return Paragraph(content=_parse_inline_children(el))
    if el.name in ("ol", "ul"):
        return _parse_list(el)
    if el.name == "figure" and _has_class(el, "ltx_table"):
        return _parse_table(el)
    if el.name == "table":
        return _parse_table(el)
    if el.name == "figure":
        return _parse_figure(el)
    if el.name == "blockquote":
        return Blockquote(content=_parse_inline_children(el))
    if el.name == "pre":
        return Preformat(text=el.get_text().strip())
    return None


def _parse_block_content(parent: Tag) -> list[BlockElement]:
    blocks: list[BlockElement] = []
    for el in _child_tags(parent):
        # ltx_para wraps running text together with display equations and tables.
        if _has_class(el, "ltx_para"):
            blocks.extend(_parse_ltx_para(el))
            continue
        block = _match_block(el)
        if block is not None:
            blocks.append(block)
        elif not _is_skipped_block(el) and el.name != "nav" and el.get_text().strip():
            blocks.append(Paragraph(content=_parse_inline_children(el)))
    return blocks


def _parse_ltx_para(el: Tag) -> list[BlockElement]:
    blocks = [block for child in _child_tags(el) if (block := _match_block(child)) is not None]
    if not blocks:
        inner = el.find("p")
        blocks.append(Paragraph(content=_parse_inline_children(inner if inner is not None else el)))
    return blocks


def _parse_list(el: Tag) -> ListBlock:
    ordered = el.name == "ol" or _has_class(el, "ltx_enumerate")
    # Direct items only; nested lists stay inside their parent item.
    items = [_parse_inline_children(li) for li in el.find_all("li", recursive=False)]
    return ListBlock(ordered=ordered, items=items)


def _parse_figure(el: Tag) -> FigureBlock:
    label = None
    label_el = el.select_one(".ltx_caption .ltx_tag_figure")
    if label_el is not None:
        label = re.sub(r":$", "", label_el.get_text().strip()) or None

    caption = None
    caption_el = el.select_one(".ltx_caption")
    if caption_el is not None:
        caption = normalize_whitespace(caption_el.get_text())
        if label:
            caption = re.sub(rf"^{re.escape(label)}[:\s]*", "", caption).strip()
        caption = caption or None

    return FigureBlock(id=el.get("id") or None, label=label, caption=caption)


def _cell_texts(row: Tag) -> list[str]:
    return [normalize_whitespace(_strip_annotations(cell)) for cell in row.select("th, td, .ltx_td")]


def _parse_table(el: Tag) -> TableBlock:
    caption_el = el.select_one(".ltx_caption")
    caption = normalize_whitespace(caption_el.get_text()) if caption_el is not None else None

    thead = el.select_one("thead") or el.select_one(".ltx_thead")
    headers: list[str] = []
    if thead is not None:
        header_row = thead.select_one("tr") or thead.select_one(".ltx_tr")
        if header_row is not None:
            headers = _cell_texts(header_row)

    tbody = el.select_one("tbody") or el.select_one(".ltx_tbody") or el
    rows: list[list[str]] = []
    for tr in tbody.select("tr, .ltx_tr"):
        if thead is not None and tr.parent is thead:
            continue
        cells = _cell_texts(tr)
        if cells:
            rows.append(cells)

    return TableBlock(headers=headers, rows=rows, caption=caption or None)


def _parse_formula(el: Tag) -> FormulaBlock:
    label_el = el.select_one(".ltx_tag_equation")
    label = label_el.get_text().strip() if label_el is not None else ""

    math = el.find("math")
    tex = None
    if math is not None:
        tex = math.get("alttext") or None
        text = _strip_annotations(math)
    else:
        text = el.get_text().strip()

    return FormulaBlock(
        id=el.get("id") or None,
        label=label or None,
        tex=tex,
        text=(text or None) if tex is None else None,
    )


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _section_level(el: Tag) -> int:
    for cls, level in _SECTION_LEVELS:
        if _has_class(el, cls):
            return level
    return 2


def _find_heading(el: Tag, level: int) -> Tag | None:
    for name in (f"h{level}", "h2", "h3", "h4", "h5", "h6"):
        heading = el.find(name, recursive=False)
        if heading is not None:
            return heading
    return None


def _parse_section(el: Tag) -> JatsSection:
    level = _section_level(el)
    heading = _find_heading(el, level)
    return JatsSection(
        title=normalize_whitespace(heading.get_text()) if heading is not None else "",
        level=level,
        content=_parse_block_content(el),
        subsections=[_parse_section(child) for child in el.find_all("section", recursive=False)],
    )


def _is_body_section(el: Tag) -> bool:
    return el.name == "section" and not any(_has_class(el, cls) for cls in _NON_BODY_SECTION_CLASSES)


def _parse_body(soup: BeautifulSoup) -> list[JatsSection]:
    article = soup.select_one("article.ltx_document") or soup
    return [_parse_section(el) for el in _child_tags(article) if _is_body_section(el)]


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def _parse_title(soup: BeautifulSoup) -> str:
    title = soup.select_one(".ltx_title.ltx_title_document")
    if title is None:
        return ""
    return normalize_whitespace(_text_without(title, ".ltx_authors"))


def _parse_author_name(part: str) -> JatsAuthor | None:
    # Affiliations follow the name on later lines.
    first_line = next((line.strip() for line in part.split("\n") if line.strip()), "")
    if not first_line or first_line[0].isdigit():
        return None
    name = _TRAILING_DIGITS_RE.sub("", first_line).strip()
    if not name:
        return None
    words = name.split()
    surname = words.pop()
    return JatsAuthor(surname=surname, given_names=" ".join(words) or None)


def _parse_authors(soup: BeautifulSoup) -> list[JatsAuthor]:
    authors: list[JatsAuthor] = []
    for person in soup.select(".ltx_authors .ltx_personname"):
        clone = copy.copy(person)
        for br in clone.find_all("br"):
            br.replace_with("\n")
        full_text = clone.get_text().strip()
        for part in full_text.split(","):
            author = _parse_author_name(part)
            if author is not None:
                authors.append(author)
    return authors


def _parse_abstract(soup: BeautifulSoup) -> str | None:
    abstract = soup.select_one(".ltx_abstract")
    if abstract is None:
        return None
    clone = copy.copy(abstract)
    for selector in (".ltx_title", ".ltx_note"):
        for match in clone.select(selector):
            match.decompose()
    paragraphs = [text for p in clone.find_all("p") if (text := normalize_whitespace(p.get_text()))]
    if paragraphs:
        return "\n\n".join(paragraphs)
    return normalize_whitespace(clone.get_text()) or None


def _parse_metadata(soup: BeautifulSoup) -> JatsMetadata:
    keywords = [text for kw in soup.select(".ltx_keywords .ltx_text") if (text := kw.get_text().strip())]
    return JatsMetadata(
        title=_parse_title(soup),
        authors=_parse_authors(soup),
        keywords=keywords or None,
        abstract=_parse_abstract(soup),
    )


# ---------------------------------------------------------------------------
# References and acknowledgements
# ---------------------------------------------------------------------------


def _reference_text(item: Tag) -> str:
    blocks = item.select(".ltx_bibblock")
    if blocks:
        return normalize_whitespace(" ".join(block.get_text() for block in blocks))

    text = normalize_whitespace(item.get_text())
    label_el = item.select_one(".ltx_tag_bibitem")
    if label_el is not None:
        label = normalize_whitespace(label_el.get_text())
        if label and text.startswith(label):
            text = text[len(label) :].strip()
    return text


def _reference_doi(item: Tag) -> str | None:
    for link in item.find_all("a", href=True):
        match = _DOI_HREF_RE.search(link["href"])
        if match:
            return match.group(1)
    return None


def _parse_references(soup: BeautifulSoup) -> list[JatsReference]:
    references: list[JatsReference] = []
    for item in soup.select(".ltx_bibitem"):
        ref_id = item.get("id") or f"ref{len(references) + 1}"
        doi = _reference_doi(item)
        text = _reference_text(item)
        if doi:
            text = strip_identifiers(text, doi=doi)
        references.append(JatsReference(id=ref_id, text=text, doi=doi))
    return references


def _parse_acknowledgments(soup: BeautifulSoup) -> str | None:
    ack = soup.select_one(".ltx_acknowledgement")
    if ack is None:
        return None
    return normalize_whitespace(_text_without(ack, ".ltx_title")) or None
