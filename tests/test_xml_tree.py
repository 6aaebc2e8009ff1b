"""Tests for the ordered XML tree and text extraction helpers.

Covers:
- Mixed content order (text / element / text)
- Named, decimal and hex character references
- XML declaration, BOM, comments and undeclared namespace prefixes
- ParseError for empty and malformed input
- pmc-articleset unwrapping
- Name-fragment spacing in extract_text
- Identifier stripping for references
"""

from __future__ import annotations

import pytest

from papermd.parser.base import ParseError
from papermd.parser.text import extract_text, extract_text_excluding, normalize_whitespace, strip_identifiers
from papermd.parser.xml_tree import (
    ElementNode,
    TextNode,
    attr,
    children,
    decode_named_entities,
    find_article,
    find_child,
    find_children,
    parse_xml,
    tag_name,
)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def test_mixed_content_keeps_document_order() -> None:
    (p,) = parse_xml('<p>The adage [<xref ref-type="bibr" rid="CR1">1</xref>].</p>')

    assert tag_name(p) == "p"
    assert len(children(p)) == 3
    assert children(p)[0] == TextNode("The adage [")
    xref = children(p)[1]
    assert isinstance(xref, ElementNode)
    assert tag_name(xref) == "xref"
    assert attr(xref, "rid") == "CR1"
    assert attr(xref, "ref-type") == "bibr"
    assert children(p)[2] == TextNode("].")


def test_named_entities_are_decoded() -> None:
    (p,) = parse_xml("<p>a&nbsp;b&mdash;c &amp; d &bogus;</p>")
    assert extract_text(p) == "a\u00a0b\u2014c & d &bogus;"


def test_numeric_references_are_decoded() -> None:
    (p,) = parse_xml("<p>it&#8217;s &#x0003c; 3</p>")
    assert extract_text(p) == "it\u2019s < 3"


def test_decode_named_entities_leaves_xml_builtins() -> None:
    assert decode_named_entities("&lt;&amp;&gt;&quot;&apos;") == "&lt;&amp;&gt;&quot;&apos;"
    assert decode_named_entities("&hellip;") == "&#8230;"
    assert decode_named_entities("&notanentity;") == "&amp;notanentity;"


def test_decode_named_entities_skips_cdata_and_comments() -> None:
    markup = "<!-- &nbsp; --><![CDATA[a &mdash; b]]>&mdash;"
    assert decode_named_entities(markup) == "<!-- &nbsp; --><![CDATA[a &mdash; b]]>&#8212;"


def test_cdata_content_is_kept_literally() -> None:
    (tex,) = parse_xml("<tex-math><![CDATA[\\alpha &nbsp; x < y]]></tex-math>")
    assert extract_text(tex) == "\\alpha &nbsp; x < y"


def test_xml_declaration_and_bom_are_stripped() -> None:
    (article,) = parse_xml('\ufeff<?xml version="1.0" encoding="UTF-8"?>\n<article><p>x</p></article>')
    assert tag_name(article) == "article"


def test_bytes_input_is_accepted() -> None:
    (root,) = parse_xml('<?xml version="1.0" encoding="UTF-8"?><p>café</p>'.encode("utf-8"))
    assert extract_text(root) == "café"


def test_comments_are_dropped_but_tail_text_kept() -> None:
    (p,) = parse_xml("<p>a<!-- note -->b<?pi data?>c</p>")
    assert extract_text(p) == "abc"


def test_namespaced_attributes_use_conventional_prefix() -> None:
    (root,) = parse_xml(
        '<article xmlns:xlink="http://www.w3.org/1999/xlink">'
        '<ext-link xlink:href="https://example.org">site</ext-link></article>'
    )
    link = find_child(children(root), "ext-link")
    assert link is not None
    assert attr(link, "xlink:href") == "https://example.org"


def test_undeclared_prefix_is_tolerated() -> None:
    (root,) = parse_xml('<article><ext-link xlink:href="https://example.org">site</ext-link></article>')
    link = find_child(children(root), "ext-link")
    assert link is not None
    assert attr(link, "xlink:href") == "https://example.org"


def test_doctype_is_not_fetched() -> None:
    (root,) = parse_xml(
        '<!DOCTYPE article PUBLIC "-//NLM//DTD JATS (Z39.96) Journal Archiving and Interchange DTD v1.2 20190208//EN" '
        '"JATS-archivearticle1.dtd"><article><p>ok</p></article>'
    )
    assert tag_name(root) == "article"


def test_empty_input_raises() -> None:
    with pytest.raises(ParseError):
        parse_xml("   ")


def test_malformed_input_raises() -> None:
    with pytest.raises(ParseError):
        parse_xml("<article><p>unclosed</article>")


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

def test_navigation_on_text_nodes_is_total() -> None:
    text = TextNode("x")
    assert tag_name(text) is None
    assert children(text) == []
    assert attr(text, "id") is None


def test_find_children_keeps_order() -> None:
    (root,) = parse_xml("<r><a>1</a><b/><a>2</a></r>")
    assert [extract_text(node) for node in find_children(children(root), "a")] == ["1", "2"]
    assert find_child(children(root), "missing") is None


def test_find_article_unwraps_pmc_articleset() -> None:
    nodes = parse_xml("<pmc-articleset><article><front/></article></pmc-articleset>")
    article = find_article(nodes)
    assert article is not None
    assert tag_name(article) == "article"
    assert find_article(parse_xml("<other/>")) is None


# ---------------------------------------------------------------------------
# Text extraction
# ---------------------------------------------------------------------------

def test_name_fragments_get_a_space() -> None:
    (name,) = parse_xml("<name><surname>McGuire</surname><given-names>N</given-names></name>")
    assert extract_text(name) == "McGuire N"


def test_name_fragments_after_separator_get_no_extra_space() -> None:
    (name,) = parse_xml("<string-name><surname>Smith</surname>, <given-names>J</given-names></string-name>")
    assert extract_text(name) == "Smith, J"


def test_ordinary_elements_are_joined_verbatim() -> None:
    (p,) = parse_xml("<p>H<sub>2</sub>O is <italic>wet</italic></p>")
    assert extract_text(p) == "H2O is wet"


def test_extract_text_excluding_skips_direct_children() -> None:
    (ref,) = parse_xml("<ref><label>12.</label> Personal communication.</ref>")
    assert extract_text_excluding(children(ref), "label").strip() == "Personal communication."


def test_normalize_whitespace() -> None:
    assert normalize_whitespace("  a\n   b\tc  ") == "a b c"


# ---------------------------------------------------------------------------
# Identifier stripping
# ---------------------------------------------------------------------------

def test_strip_identifiers_removes_labelled_doi() -> None:
    text = strip_identifiers("Smith J. A study. Nature. 2024. doi: 10.1234/test", doi="10.1234/test")
    assert text == "Smith J. A study. Nature. 2024."


def test_strip_identifiers_keeps_longer_tokens() -> None:
    assert strip_identifiers("See 10.1234/test5 here.", doi="10.1234/test") == "See 10.1234/test5 here."


def test_strip_identifiers_removes_pmc_form_and_fixes_period() -> None:
    assert strip_identifiers("Ref. PMCID: PMC12345.", pmcid="12345") == "Ref."


def test_strip_identifiers_removes_doi_url() -> None:
    assert strip_identifiers("X. https://doi.org/10.1/abc", doi="10.1/abc") == "X."


def test_strip_identifiers_collapses_trailing_period_run() -> None:
    text = strip_identifiers("Work. 2020;1:1-10. doi:10.1/x. PMID: 12345.", doi="10.1/x", pmid="12345")
    assert text == "Work. 2020;1:1-10."
