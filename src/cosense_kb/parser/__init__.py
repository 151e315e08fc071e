"""Cosense notation parsing, export loading and link extraction."""

from ..models import CosenseExport, CosensePage, ParsedLine
from .export import ExportError, load_export, parse_export
from .line_parser import is_image_url, measure_indent, parse_inline, parse_line, parse_lines
from .links import extract_image_urls, extract_links, extract_page_links, iter_nodes
from .text import line_text, node_text, page_text

__all__ = [
    "CosenseExport",
    "CosensePage",
    "ParsedLine",
    "ExportError",
    "load_export",
    "parse_export",
    "is_image_url",
    "measure_indent",
    "parse_inline",
    "parse_line",
    "parse_lines",
    "extract_image_urls",
    "extract_links",
    "extract_page_links",
    "iter_nodes",
    "line_text",
    "node_text",
    "page_text",
]
