"""Parser package."""

from .arxiv_parser import ArxivHtmlParser, parse_arxiv_html
from .base import BlockElement, InlineContent, JatsDocument, JatsMetadata, JatsReference, JatsSection, ParseError
from .jats_parser import BackMatter, JatsParser, parse_jats

__all__ = [
    "ArxivHtmlParser",
    "BackMatter",
    "BlockElement",
    "InlineContent",
    "JatsDocument",
    "JatsMetadata",
    "JatsParser",
    "JatsReference",
    "JatsSection",
    "ParseError",
    "parse_arxiv_html",
    "parse_jats",
]
