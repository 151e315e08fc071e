"""Tests for link/image extraction and the plain text projection."""

from __future__ import annotations

from conftest import make_page

from cosense_kb.parser import (
    extract_image_urls,
    extract_links,
    extract_page_links,
    line_text,
    page_text,
    parse_line,
    parse_lines,
)


class TestExtractLinks:
    def test_links_and_hashtags_share_namespace(self):
        lines = ["[Python] is #Python"]
        links = extract_links(parse_lines(lines), lines)
        assert links == {"Python": ["[Python] is #Python", "[Python] is #Python"]}

    def test_discovery_order(self):
        lines = ["#b [a]", "[c] [a]"]
        links = extract_links(parse_lines(lines), lines)
        assert list(links) == ["b", "a", "c"]
        assert links["a"] == ["#b [a]", "[c] [a]"]

    def test_recurses_into_decorations(self):
        lines = ["[* bold #deep]", "[/ italic #tag]"]
        links = extract_links(parse_lines(lines), lines)
        assert list(links) == ["deep", "tag"]

    def test_nested_double_bracket(self):
        lines = ["[[#inner]]"]
        links = extract_links(parse_lines(lines), lines)
        assert links == {"inner": ["[[#inner]]"]}

    def test_ignores_non_page_links(self):
        lines = ["[https://example.com x] [/proj/page] [me.icon] `[code]` [$ [m]"]
        assert extract_links(parse_lines(lines), lines) == {}

    def test_code_block_content_has_no_links(self):
        page = make_page("A", ["code:x.py", " [not] #links", "[yes]"])
        assert list(extract_page_links(page)) == ["yes"]

    def test_context_is_raw_line_with_indent(self):
        page = make_page("A", ["  indented [B]"])
        assert extract_page_links(page) == {"B": ["  indented [B]"]}

    def test_telomere_lines(self):
        from cosense_kb.models import CosenseLine, CosensePage

        page = CosensePage(
            title="A",
            lines=["A", CosenseLine(text="see [B]", created=1, updated=2)],
        )
        assert extract_page_links(page) == {"B": ["see [B]"]}


class TestExtractImageUrls:
    def test_distinct_urls_in_order(self):
        pages = [
            make_page("A", ["[https://gyazo.com/1]", "[* https://gyazo.com/2]"]),
            make_page("B", ["[https://gyazo.com/1] [https://example.com/x.png]"]),
        ]
        assert extract_image_urls(pages) == [
            "https://gyazo.com/1",
            "https://gyazo.com/2",
            "https://example.com/x.png",
        ]

    def test_no_images(self):
        assert extract_image_urls([make_page("A", ["[https://example.com]"])]) == []


class TestPlainText:
    def test_node_contributions(self):
        parsed = parse_line(
            "a [Page] [https://e.com Site] [/proj/pg] #tag [** b][/ c] `d` [$ e] "
            "[u.icon][https://gyazo.com/x]"
        )
        assert line_text(parsed) == "a Page Site pg tag bc d e "

    def test_page_text_joins_lines(self):
        page = make_page("Title", ["[link] text", "code:a.py", " x = [1]"])
        assert page_text(page) == "Title\nlink text\ncode:a.py\nx = [1]"

    def test_page_text_without_title(self):
        page = make_page("Title", ["[link] text"])
        assert page_text(page, include_title=False) == "link text"

    def test_empty_quote_contributes_nothing(self):
        assert line_text(parse_line(">")) == ""
