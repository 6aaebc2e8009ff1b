"""Order-preserving XML tree used by the JATS parser.

lxml keeps mixed content as ``text``/``tail`` strings hanging off elements.
This module flattens that into explicit ``TextNode`` / ``ElementNode``
children so the parser can walk text runs and elements in document order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from html.entities import html5

from lxml import etree

from .base import ParseError

_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")
_NAMED_ENTITY_RE = re.compile(r"<!\[CDATA\[.*?\]\]>|<!--.*?-->|&([A-Za-z][A-Za-z0-9]*);", re.DOTALL)
_XML_BUILTIN_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})

_ATTR_PREFIXES = {
    "http://www.w3.org/1999/xlink": "xlink",
    "http://www.w3.org/XML/1998/namespace": "xml",
    "http://www.w3.org/2001/XMLSchema-instance": "xsi",
}


@dataclass(frozen=True, slots=True)
class TextNode:
    text: str


@dataclass(frozen=True, slots=True)
class ElementNode:
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)


Node = TextNode | ElementNode


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def decode_named_entities(markup: str) -> str:
    """Rewrite HTML named entities as numeric references XML can resolve.

    The five XML built-ins are left alone, as is anything inside CDATA
    sections and comments. Names unknown to HTML5 are escaped so they
    come through as literal text.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name is None or name in _XML_BUILTIN_ENTITIES:
            return match.group(0)
        value = html5.get(f"{name};")
        if value is None:
            return f"&amp;{name};"
        return "".join(f"&#{ord(ch)};" for ch in value)

    return _NAMED_ENTITY_RE.sub(_replace, markup)


def parse_xml(markup: str | bytes) -> list[Node]:
    """Parse *markup* and return the top-level nodes (the root element).

    Raises :class:`ParseError` when the document is not well-formed.
    """
    if isinstance(markup, bytes):
        markup = markup.decode("utf-8", errors="replace")
    text = markup.lstrip("\ufeff")
    text = _XML_DECLARATION_RE.sub("", text, count=1)
    if not text.strip():
        raise ParseError("Document is empty")

    source = decode_named_entities(text)
    parser = _make_parser(recover=False)
    try:
        root = etree.fromstring(source, parser)
    except etree.XMLSyntaxError as exc:
        if not _only_namespace_errors(parser.error_log):
            raise ParseError(str(exc)) from exc
        # Undeclared prefixes such as xlink: are common in hand-edited JATS.
        root = etree.fromstring(source, _make_parser(recover=True))
    if root is None:
        raise ParseError("Document has no root element")

    return [_build_element(root)]


def _make_parser(*, recover: bool) -> etree.XMLParser:
    return etree.XMLParser(
        resolve_entities=False, load_dtd=False, no_network=True, huge_tree=True, recover=recover
    )


def _only_namespace_errors(error_log) -> bool:
    errors = [entry for entry in error_log if entry.level >= etree.ErrorLevels.ERROR]
    return bool(errors) and all(entry.domain == etree.ErrorDomains.NAMESPACE for entry in errors)


def _build_element(element: etree._Element) -> ElementNode:
    nodes: list[Node] = []
    if element.text:
        nodes.append(TextNode(element.text))
    for child in element:
        # Comments, processing instructions and unresolved entities have
        # non-string tags; only their tail text belongs to the document.
        if isinstance(child.tag, str):
            nodes.append(_build_element(child))
        if child.tail:
            nodes.append(TextNode(child.tail))

    attrs = {_attr_name(key): value for key, value in element.attrib.items()}
    return ElementNode(tag=_local_name(element.tag), attrs=attrs, children=nodes)


def _local_name(tag: str) -> str:
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    # Undeclared prefixes (mml:math without xmlns:mml) are dropped as well.
    return tag.rsplit(":", 1)[-1]


def _attr_name(key: str) -> str:
    if not key.startswith("{"):
        return key
    namespace, local = key[1:].split("}", 1)
    prefix = _ATTR_PREFIXES.get(namespace)
    return f"{prefix}:{local}" if prefix else local


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


def tag_name(node: Node) -> str | None:
    return node.tag if isinstance(node, ElementNode) else None


def children(node: Node) -> list[Node]:
    return node.children if isinstance(node, ElementNode) else []


def attr(node: Node, name: str) -> str | None:
    if not isinstance(node, ElementNode):
        return None
    value = node.attrs.get(name)
    if value is None and ":" in name:
        value = node.attrs.get(name.split(":", 1)[1])
    return value


def find_child(nodes: list[Node], tag: str) -> ElementNode | None:
    for node in nodes:
        if isinstance(node, ElementNode) and node.tag == tag:
            return node
    return None


def find_children(nodes: list[Node], tag: str) -> list[ElementNode]:
    return [node for node in nodes if isinstance(node, ElementNode) and node.tag == tag]


def find_article(nodes: list[Node]) -> ElementNode | None:
    """Find ``<article>``, looking inside an efetch ``<pmc-articleset>`` wrapper if needed."""
    article = find_child(nodes, "article")
    if article is not None:
        return article
    wrapper = find_child(nodes, "pmc-articleset")
    if wrapper is not None:
        return find_child(wrapper.children, "article")
    return None
