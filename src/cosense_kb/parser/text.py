"""Plain text projection of parsed lines.

Each node type contributes a fixed piece of text; images and icons
contribute nothing.
"""

from __future__ import annotations

from ..models import (
    CodeNode,
    CosensePage,
    DecorationNode,
    ExternalLinkNode,
    ExternalProjectLinkNode,
    HashtagNode,
    InlineNode,
    InternalLinkNode,
    MathNode,
    ParsedLine,
    TextNode,
)
from .line_parser import parse_lines


def node_text(node: InlineNode) -> str:
    if isinstance(node, TextNode):
        return node.text
    if isinstance(node, (InternalLinkNode, ExternalLinkNode)):
        return node.title
    if isinstance(node, ExternalProjectLinkNode):
        return node.page
    if isinstance(node, HashtagNode):
        return node.tag
    if isinstance(node, DecorationNode):
        return "".join(node_text(child) for child in node.children)
    if isinstance(node, CodeNode):
        return node.code
    if isinstance(node, MathNode):
        return node.formula
    # ImageNode, IconNode
    return ""


def line_text(parsed_line: ParsedLine) -> str:
    return "".join(node_text(node) for node in parsed_line.nodes)


def page_text(page: CosensePage, include_title: bool = True) -> str:
    """Plain text of the page, one line per page line.

    With include_title=False the leading title line is left out.
    """
    lines = page.line_texts() if include_title else page.body_lines()
    return "\n".join(line_text(parsed) for parsed in parse_lines(lines))
