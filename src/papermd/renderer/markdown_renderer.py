"""Render the document IR as Markdown."""

from __future__ import annotations

import re

from papermd.parser.base import (
    BackMatterNote,
    BlockElement,
    Blockquote,
    Bold,
    BoxedText,
    Citation,
    Code,
    DefList,
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
    Preformat,
    Subscript,
    Superscript,
    TableBlock,
    Text,
)

_INITIALS_SPLIT_RE = re.compile(r"[\s.]+")


def format_author(author: JatsAuthor) -> str:
    """Abbreviate an author as ``Surname Initials``, e.g. ``Smith JA``."""
    if not author.given_names:
        return author.surname
    initials = "".join(part[0] for part in _INITIALS_SPLIT_RE.split(author.given_names) if part)
    return f"{author.surname} {initials}"


class MarkdownRenderer:
    """Render a parsed document to a Markdown string.

    ``include_floats`` and ``include_footnotes`` control the trailing
    "Figures and Tables" and "Footnotes" sections.
    """

    def __init__(self, *, include_floats: bool = True, include_footnotes: bool = True) -> None:
        self.include_floats = include_floats
        self.include_footnotes = include_footnotes

    def render(self, doc: JatsDocument) -> str:
        lines: list[str] = [f"# {doc.metadata.title}", ""]

        meta_lines = _metadata_lines(doc.metadata)
        if meta_lines:
            lines.extend(meta_lines)
            lines.append("")

        if doc.metadata.abstract:
            lines.extend(["## Abstract", "", doc.metadata.abstract, ""])

        for section in doc.sections:
            lines.extend(self._render_section(section))

        if doc.acknowledgments:
            lines.extend(["## Acknowledgments", "", doc.acknowledgments, ""])

        for note in doc.notes or []:
            lines.extend(_note_lines(note))

        if doc.references:
            lines.extend(["## References", ""])
            lines.extend(f"{index}. {_reference_line(ref)}" for index, ref in enumerate(doc.references, start=1))
            lines.append("")

        for appendix in doc.appendices or []:
            lines.extend(self._render_section(appendix))

        if self.include_footnotes and doc.footnotes:
            lines.extend(["## Footnotes", ""])
            lines.extend(f"{index}. {fn.text}" for index, fn in enumerate(doc.footnotes, start=1))
            lines.append("")

        if self.include_floats and doc.floats:
            lines.extend(["## Figures and Tables", ""])
            for block in doc.floats:
                lines.extend([self.render_block(block), ""])

        return "\n".join(lines).rstrip() + "\n"

    def _render_section(self, section: JatsSection) -> list[str]:
        lines: list[str] = []
        if section.title.strip():
            lines.extend([f"{'#' * section.level} {section.title}", ""])
        for block in section.content:
            lines.extend([self.render_block(block), ""])
        for subsection in section.subsections:
            lines.extend(self._render_section(subsection))
        return lines

    def render_block(self, block: BlockElement) -> str:
        if isinstance(block, Paragraph):
            return render_inline(block.content).strip()

        if isinstance(block, Blockquote):
            return _quote(render_inline(block.content).strip())

        if isinstance(block, ListBlock):
            return "\n".join(
                f"{f'{index}. ' if block.ordered else '- '}{render_inline(item).strip()}"
                for index, item in enumerate(block.items, start=1)
            )

        if isinstance(block, TableBlock):
            return _render_table(block)

        if isinstance(block, FigureBlock):
            label = block.label or "Figure"
            alt_text = f"{label}. {block.caption}" if block.caption else label
            return f"![{alt_text}]()"

        if isinstance(block, Preformat):
            return f"```\n{block.text}\n```"

        if isinstance(block, FormulaBlock):
            lines: list[str] = []
            if block.tex:
                lines.append(f"$${block.tex}$$")
            elif block.text:
                lines.extend(["```", block.text, "```"])
            if block.label:
                lines.append(block.label)
            return "\n".join(lines)

        if isinstance(block, DefList):
            lines = [f"**{block.title}**", ""] if block.title else []
            lines.extend(f"**{item.term}**: {item.definition}" for item in block.items)
            return "\n".join(lines)

        if isinstance(block, BoxedText):
            lines = [f"> **{block.title}**", ">"] if block.title else []
            for inner in block.content:
                lines.append(_quote(self.render_block(inner)))
            return "\n".join(lines)

        return ""


def write_markdown(doc: JatsDocument) -> str:
    return MarkdownRenderer().render(doc)


def render_inline(content: list[InlineContent]) -> str:
    return "".join(_render_inline_node(node) for node in content)


def _render_inline_node(node: InlineContent) -> str:
    if isinstance(node, Text):
        return node.text
    if isinstance(node, Bold):
        return f"**{render_inline(node.children)}**"
    if isinstance(node, Italic):
        return f"*{render_inline(node.children)}*"
    if isinstance(node, Superscript):
        return f"^{node.text}^"
    if isinstance(node, Subscript):
        return f"~{node.text}~"
    if isinstance(node, Citation):
        return node.text
    if isinstance(node, Code):
        return f"`{node.text}`"
    if isinstance(node, InlineFormula):
        return f"${node.tex}$" if node.tex else node.text
    if isinstance(node, Link):
        text = render_inline(node.children)
        return node.url if text == node.url else f"[{text}]({node.url})"
    return ""


def _quote(text: str) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in text.split("\n"))


def _table_row(cells: list[str]) -> str:
    return "| " + " | ".join(cell.replace("|", "\\|") for cell in cells) + " |"


def _render_table(block: TableBlock) -> str:
    lines: list[str] = []
    if block.caption:
        lines.extend([f"*{block.caption}*", ""])

    headers = block.headers
    if not headers and block.rows:
        # Markdown tables need a header row; keep it empty.
        headers = [""] * len(block.rows[0])
    if headers:
        lines.append(_table_row(headers))
        lines.append(_table_row(["---"] * len(headers)))

    lines.extend(_table_row(row) for row in block.rows)
    return "\n".join(lines)


def _metadata_lines(metadata: JatsMetadata) -> list[str]:
    lines: list[str] = []
    if metadata.authors:
        lines.append(f"**Authors**: {', '.join(format_author(author) for author in metadata.authors)}")
    if metadata.doi:
        lines.append(f"**DOI**: {metadata.doi}")
    if metadata.pmcid:
        lines.append(f"**PMC**: PMC{metadata.pmcid}")
    if metadata.pmid:
        lines.append(f"**PMID**: {metadata.pmid}")
    if metadata.journal:
        lines.append(f"**Journal**: {metadata.journal}")

    date = metadata.publication_date
    if date is not None:
        published = date.year
        if date.month:
            published += f"-{date.month.zfill(2)}"
            if date.day:
                published += f"-{date.day.zfill(2)}"
        lines.append(f"**Published**: {published}")

    citation = _citation(metadata)
    if citation:
        lines.append(f"**Citation**: {citation}")
    if metadata.article_type:
        lines.append(f"**Article Type**: {metadata.article_type}")
    if metadata.keywords:
        lines.append(f"**Keywords**: {', '.join(metadata.keywords)}")
    if metadata.license:
        lines.append(f"**License**: {metadata.license}")
    return lines


def _citation(metadata: JatsMetadata) -> str:
    if metadata.volume and metadata.issue:
        citation = f"Vol. {metadata.volume}({metadata.issue})"
        return f"{citation}, pp. {metadata.pages}" if metadata.pages else citation

    parts: list[str] = []
    if metadata.volume:
        parts.append(f"Vol. {metadata.volume}")
    if metadata.issue:
        parts.append(f"({metadata.issue})")
    if metadata.pages:
        parts.append(f"pp. {metadata.pages}")
    return ", ".join(parts)


def _reference_line(ref: JatsReference) -> str:
    links: list[str] = []
    if ref.doi:
        links.append(f"[doi:{ref.doi}](https://doi.org/{ref.doi})")
    if ref.pmid:
        links.append(f"[pmid:{ref.pmid}](https://pubmed.ncbi.nlm.nih.gov/{ref.pmid}/)")
    if ref.pmcid:
        links.append(f"[pmcid:PMC{ref.pmcid}](https://www.ncbi.nlm.nih.gov/pmc/articles/PMC{ref.pmcid}/)")
    return " ".join([ref.text, *links])


def _note_lines(note: BackMatterNote) -> list[str]:
    lines = [f"## {note.title}", ""] if note.title else []
    if note.text:
        lines.extend([note.text, ""])
    return lines
