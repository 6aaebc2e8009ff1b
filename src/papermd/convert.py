"""File-level conversion: read JATS XML or arXiv HTML, write Markdown."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from papermd.parser.arxiv_parser import ArxivHtmlParser
from papermd.parser.base import JatsDocument, ParseError, Parser
from papermd.parser.jats_parser import JatsParser
from papermd.renderer.markdown_renderer import MarkdownRenderer

logger = logging.getLogger(__name__)

SOURCE_FORMATS = ("auto", "jats", "arxiv")

_JATS_SUFFIXES = (".xml", ".nxml")
_HTML_SUFFIXES = (".html", ".htm")


@dataclass(frozen=True, slots=True)
class ConvertResult:
    success: bool
    error: str | None = None
    title: str | None = None
    sections: int | None = None
    references: int | None = None


def convert_pmc_xml_to_markdown(
    xml_path: str | Path, md_path: str | Path, *, renderer: MarkdownRenderer | None = None
) -> ConvertResult:
    """Convert a PMC JATS XML file to Markdown."""
    return _convert(JatsParser(), Path(xml_path), Path(md_path), renderer or MarkdownRenderer())


def convert_arxiv_html_to_markdown(
    html_path: str | Path, md_path: str | Path, *, renderer: MarkdownRenderer | None = None
) -> ConvertResult:
    """Convert an arXiv LaTeXML HTML file to Markdown."""
    return _convert(ArxivHtmlParser(), Path(html_path), Path(md_path), renderer or MarkdownRenderer())


def convert_file(
    input_path: str | Path,
    output_path: str | Path,
    *,
    source_format: str = "auto",
    renderer: MarkdownRenderer | None = None,
) -> ConvertResult:
    """Convert *input_path* to Markdown, picking the parser from *source_format*.

    ``"auto"`` decides from the file suffix and, failing that, from the
    first few kilobytes of content.
    """
    input_path = Path(input_path)
    if source_format not in SOURCE_FORMATS:
        raise ValueError(f"Unknown source format: {source_format!r} (expected one of {', '.join(SOURCE_FORMATS)})")

    if source_format == "auto":
        try:
            source_format = detect_format(input_path)
        except OSError as exc:
            logger.warning("Could not read %s: %s", input_path, exc)
            return ConvertResult(success=False, error=str(exc))

    if source_format == "jats":
        return convert_pmc_xml_to_markdown(input_path, output_path, renderer=renderer)
    return convert_arxiv_html_to_markdown(input_path, output_path, renderer=renderer)


def detect_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in _JATS_SUFFIXES:
        return "jats"
    if suffix in _HTML_SUFFIXES:
        return "arxiv"

    with path.open("r", encoding="utf-8", errors="replace") as handle:
        head = handle.read(8192)
    if "ltx_document" in head or "<html" in head.lower():
        return "arxiv"
    return "jats"


def _convert(parser: Parser, source: Path, destination: Path, renderer: MarkdownRenderer) -> ConvertResult:
    try:
        markup = source.read_text(encoding="utf-8")
        doc: JatsDocument = parser.parse(markup)
        markdown = renderer.render(doc)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(markdown, encoding="utf-8")
    except (ParseError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to convert %s: %s", source, exc)
        return ConvertResult(success=False, error=str(exc))

    logger.info(
        "Converted %s -> %s (%d sections, %d references)",
        source,
        destination,
        len(doc.sections),
        len(doc.references),
    )
    return ConvertResult(
        success=True,
        title=doc.metadata.title,
        sections=len(doc.sections),
        references=len(doc.references),
    )
