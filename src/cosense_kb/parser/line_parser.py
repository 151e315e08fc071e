"""Cosense line notation parser.

Turns one raw line into a ParsedLine: indent, inline node tree, and the
code-block / quote flags. parse_lines() threads the fenced code-block
state across the lines of a page.

Parsing is total. Anything that is not recognised notation ends up as
text, and unrecognised bracket content becomes an internal link.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from ..models import (
    BoldNode,
    CodeNode,
    ExternalLinkNode,
    ExternalProjectLinkNode,
    HashtagNode,
    IconNode,
    ImageNode,
    InlineNode,
    InternalLinkNode,
    ItalicNode,
    MathNode,
    ParsedLine,
    StrikethroughNode,
    TextNode,
    UnderlineNode,
)

# ─────────────────────────────────────────────────────────────────────────────
# Patterns
# ─────────────────────────────────────────────────────────────────────────────

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg", "bmp")
_IMAGE_EXT_GROUP = "|".join(IMAGE_EXTENSIONS)

# Image file extension at the very end of a URL
IMAGE_EXTENSION_PATTERN = re.compile(rf"\.(?:{_IMAGE_EXT_GROUP})\Z", re.IGNORECASE)
# Gyazo image hosts (gyazo.com and i.gyazo.com)
GYAZO_PATTERN = re.compile(r"https?://(i\.)?gyazo\.com/")
# Image already downloaded into the archive (../assets/images/xxx.png)
LOCAL_IMAGE_PATH_PATTERN = re.compile(
    rf"\.\./assets/images/[^\s\]]+\.(?:{_IMAGE_EXT_GROUP})",
    re.IGNORECASE,
)
# URL anywhere inside a bracket
URL_PATTERN = re.compile(r"https?://[^\s\]]+")

# Inline notation, matched at the cursor position
DOUBLE_BRACKET_PATTERN = re.compile(r"\[\[([^\]]+)\]\]")
BRACKET_PATTERN = re.compile(r"\[([^\]]+)\]")
INLINE_CODE_PATTERN = re.compile(r"`([^`]+)`")
HASHTAG_PATTERN = re.compile(r"#([^\s\[\]#]+)")

# Bracket interiors, matched against the whole interior
EXTERNAL_PROJECT_PATTERN = re.compile(r"/([^/]+)/(.*)")
ICON_PATTERN = re.compile(r"([^\s.]+)\.icon")
BOLD_PATTERN = re.compile(r"(\*+)\s+(.+)")
ITALIC_PATTERN = re.compile(r"/\s+(.+)")
STRIKETHROUGH_PATTERN = re.compile(r"-\s+(.+)")
UNDERLINE_PATTERN = re.compile(r"_\s+(.+)")
MATH_PREFIX = "$ "

CODE_BLOCK_PATTERN = re.compile(r"code:(\S+)")
CODE_BLOCK_LANGUAGE_PATTERN = re.compile(r"\.(\w+)\Z", re.ASCII)

# Characters after which a # starts a hashtag (besides line start / a closed node)
HASHTAG_BOUNDARY_CHARS = frozenset(" \t」）】")

INDENT_CHARS = (" ", "\t")


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def measure_indent(line: str) -> tuple[int, str]:
    """Count leading spaces/tabs (one unit each) and return the rest of the line.

    Full-width spaces are content, not indentation.
    """
    indent = 0
    while indent < len(line) and line[indent] in INDENT_CHARS:
        indent += 1
    return indent, line[indent:]


def is_image_url(url: str) -> bool:
    """True for Gyazo URLs, image file extensions and localized image paths."""
    return bool(
        GYAZO_PATTERN.match(url)
        or IMAGE_EXTENSION_PATTERN.search(url)
        or LOCAL_IMAGE_PATH_PATTERN.fullmatch(url)
    )


def _code_block_language(content: str) -> str | None:
    """Return the language of a code:filename line, or None if it is not one."""
    match = CODE_BLOCK_PATTERN.fullmatch(content)
    if not match:
        return None
    ext_match = CODE_BLOCK_LANGUAGE_PATTERN.search(match.group(1))
    return ext_match.group(1) if ext_match else ""


def _strip_quote(content: str) -> str | None:
    """Return the quoted text of a '>' line, or None if it is not a quote.

    '>>' is ordinary text. One space after '>' is dropped.
    """
    if not content.startswith(">") or content.startswith(">>"):
        return None
    quoted = content[1:]
    return quoted[1:] if quoted.startswith(" ") else quoted


def _external_link(content: str, raw: str, url: str) -> ExternalLinkNode:
    parts = re.split(r"\s+", content)
    if len(parts) == 1:
        # [URL]
        return ExternalLinkNode(raw=raw, url=url, title=url)

    if URL_PATTERN.match(parts[0]):
        # [URL title words]
        return ExternalLinkNode(raw=raw, url=parts[0], title=" ".join(parts[1:]))

    # [title words URL]
    url_part = next((part for part in parts if URL_PATTERN.search(part)), "")
    title_parts = [part for part in parts if not URL_PATTERN.search(part)]
    return ExternalLinkNode(raw=raw, url=url_part, title=" ".join(title_parts))


def parse_bracket(content: str) -> InlineNode:
    """Parse the interior of a single-bracket expression [content].

    Alternatives are tried in a fixed order and the first match wins.

    Args:
        content: Text between '[' and the first ']'.

    Returns:
        The node for the bracket. Falls back to an internal link.
    """
    raw = f"[{content}]"

    match = EXTERNAL_PROJECT_PATTERN.fullmatch(content)
    if match:
        return ExternalProjectLinkNode(raw=raw, project=match.group(1), page=match.group(2))

    match = ICON_PATTERN.fullmatch(content)
    if match:
        return IconNode(raw=raw, user=match.group(1))

    if content.startswith(MATH_PREFIX):
        return MathNode(raw=raw, formula=content[len(MATH_PREFIX):])

    match = BOLD_PATTERN.fullmatch(content)
    if match:
        inner = match.group(2)
        # [* image] displays the image (large), it is not bold text
        if is_image_url(inner):
            return ImageNode(raw=raw, url=inner)
        return BoldNode(raw=raw, level=len(match.group(1)), children=parse_inline(inner))

    match = ITALIC_PATTERN.fullmatch(content)
    if match:
        return ItalicNode(raw=raw, children=parse_inline(match.group(1)))

    match = STRIKETHROUGH_PATTERN.fullmatch(content)
    if match:
        return StrikethroughNode(raw=raw, children=parse_inline(match.group(1)))

    match = UNDERLINE_PATTERN.fullmatch(content)
    if match:
        return UnderlineNode(raw=raw, children=parse_inline(match.group(1)))

    if LOCAL_IMAGE_PATH_PATTERN.fullmatch(content):
        return ImageNode(raw=raw, url=content)

    match = URL_PATTERN.search(content)
    if match:
        url = match.group(0)
        if GYAZO_PATTERN.match(url) or IMAGE_EXTENSION_PATTERN.search(url):
            return ImageNode(raw=raw, url=url)
        return _external_link(content, raw, url)

    return InternalLinkNode(raw=raw, title=content)


def _at_hashtag_boundary(buffer: list[str]) -> bool:
    """Whether a '#' at the cursor may start a hashtag.

    An empty buffer means the cursor is at line start or right after a
    closed node; otherwise the last pending character decides.
    """
    if not buffer:
        return True
    return buffer[-1] in HASHTAG_BOUNDARY_CHARS


# ─────────────────────────────────────────────────────────────────────────────
# Inline parsing
# ─────────────────────────────────────────────────────────────────────────────


def parse_inline(text: str) -> tuple[InlineNode, ...]:
    """Parse inline notation into nodes.

    Used for line content and, recursively, for decoration interiors.
    At each position the cursor tries [[...]], [...], `...` and #tag in
    that order; anything else is accumulated as text.

    Args:
        text: Content without indentation.

    Returns:
        Nodes in source order. Concatenating their ``raw`` gives back ``text``.
    """
    nodes: list[InlineNode] = []
    buffer: list[str] = []
    pos = 0
    length = len(text)

    def flush() -> None:
        if buffer:
            chunk = "".join(buffer)
            nodes.append(TextNode(raw=chunk, text=chunk))
            buffer.clear()

    while pos < length:
        match = DOUBLE_BRACKET_PATTERN.match(text, pos)
        if match:
            flush()
            nodes.append(
                BoldNode(raw=match.group(0), level=1, children=parse_inline(match.group(1)))
            )
            pos = match.end()
            continue

        match = BRACKET_PATTERN.match(text, pos)
        if match:
            flush()
            nodes.append(parse_bracket(match.group(1)))
            pos = match.end()
            continue

        match = INLINE_CODE_PATTERN.match(text, pos)
        if match:
            flush()
            nodes.append(CodeNode(raw=match.group(0), code=match.group(1)))
            pos = match.end()
            continue

        if text[pos] == "#" and _at_hashtag_boundary(buffer):
            match = HASHTAG_PATTERN.match(text, pos)
            if match:
                # The separating whitespace becomes its own text node
                if buffer and buffer[-1] in INDENT_CHARS:
                    separator = buffer.pop()
                    flush()
                    buffer.append(separator)
                flush()
                nodes.append(HashtagNode(raw=match.group(0), tag=match.group(1)))
                pos = match.end()
                continue

        buffer.append(text[pos])
        pos += 1

    flush()
    return tuple(nodes)


# ─────────────────────────────────────────────────────────────────────────────
# Lines
# ─────────────────────────────────────────────────────────────────────────────


def parse_line(raw: str, inside_code_block: bool = False) -> ParsedLine:
    """Parse one line.

    Args:
        raw: The line as exported.
        inside_code_block: True while the line sits in a code:filename block.

    Returns:
        ParsedLine for the line.
    """
    indent, content = measure_indent(raw)

    # Code block body: no notation is interpreted
    if inside_code_block and indent > 0:
        return ParsedLine(
            indent=indent,
            nodes=(TextNode(raw=content, text=content),),
            is_code_block_content=True,
        )

    language = _code_block_language(content)
    if language is not None:
        return ParsedLine(
            indent=indent,
            nodes=(TextNode(raw=content, text=content),),
            is_code_block_start=True,
            code_block_language=language,
        )

    quoted = _strip_quote(content)
    if quoted is not None:
        return ParsedLine(
            indent=indent,
            nodes=parse_inline(quoted) if quoted else (),
            is_quote=True,
        )

    return ParsedLine(indent=indent, nodes=parse_inline(content))


def parse_lines(lines: Iterable[str]) -> list[ParsedLine]:
    """Parse the lines of a page, tracking code:filename blocks.

    A block starts at a code:filename line and ends at the first non-blank
    line indented no deeper than the code:filename line itself.

    Args:
        lines: Page lines in order.

    Returns:
        One ParsedLine per input line.
    """
    results: list[ParsedLine] = []
    inside_code_block = False
    code_block_indent = 0

    for line in lines:
        indent, _ = measure_indent(line)

        if inside_code_block and indent <= code_block_indent and line.strip() != "":
            inside_code_block = False

        parsed = parse_line(line, inside_code_block)
        results.append(parsed)

        if parsed.is_code_block_start:
            inside_code_block = True
            code_block_indent = indent

    return results
