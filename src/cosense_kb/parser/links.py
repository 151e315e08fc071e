"""Link and image extraction from parsed pages."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from ..models import (
    CosensePage,
    DecorationNode,
    HashtagNode,
    ImageNode,
    InlineNode,
    InternalLinkNode,
    ParsedLine,
)
from .line_parser import parse_lines


def iter_nodes(nodes: Iterable[InlineNode]) -> Iterator[InlineNode]:
    """Walk nodes depth-first, left to right, descending into decorations."""
    for node in nodes:
        yield node
        if isinstance(node, DecorationNode):
            yield from iter_nodes(node.children)


def link_target(node: InlineNode) -> str | None:
    """Page title a node links to. Internal links and hashtags are equivalent."""
    if isinstance(node, InternalLinkNode):
        return node.title
    if isinstance(node, HashtagNode):
        return node.tag
    return None


def extract_links(
    parsed_lines: Sequence[ParsedLine],
    raw_lines: Sequence[str],
) -> dict[str, list[str]]:
    """Collect link targets of a page with the lines that reference them.

    Args:
        parsed_lines: Output of parse_lines() for the page.
        raw_lines: The same lines, unparsed.

    Returns:
        Mapping of target title to source lines, in discovery order.
        A line linking twice to the same target is listed twice.
    """
    links: dict[str, list[str]] = {}

    for parsed_line, raw_line in zip(parsed_lines, raw_lines):
        for node in iter_nodes(parsed_line.nodes):
            target = link_target(node)
            if target:
                links.setdefault(target, []).append(raw_line)

    return links


def extract_page_links(page: CosensePage) -> dict[str, list[str]]:
    """extract_links() for an export page."""
    lines = page.line_texts()
    return extract_links(parse_lines(lines), lines)


def extract_image_urls(pages: Iterable[CosensePage]) -> list[str]:
    """Distinct image URLs across pages, in discovery order."""
    urls: dict[str, None] = {}

    for page in pages:
        for parsed_line in parse_lines(page.line_texts()):
            for node in iter_nodes(parsed_line.nodes):
                if isinstance(node, ImageNode):
                    urls.setdefault(node.url)

    return list(urls)
