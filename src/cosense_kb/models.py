"""Pydantic models for parsed notation and Cosense exports."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────────────────────────────────────
# Inline nodes
# ─────────────────────────────────────────────────────────────────────────────


class _Node(BaseModel):
    """Base for inline nodes. Nodes are immutable once parsed."""

    model_config = ConfigDict(frozen=True)

    raw: str = ""  # Exact source span this node was parsed from


class TextNode(_Node):
    type: Literal["text"] = "text"
    text: str


class InternalLinkNode(_Node):
    """[Page title]"""

    type: Literal["internal-link"] = "internal-link"
    title: str


class ExternalLinkNode(_Node):
    """[https://url title], [title https://url] or [https://url]"""

    type: Literal["external-link"] = "external-link"
    url: str
    title: str


class ExternalProjectLinkNode(_Node):
    """[/project/page]"""

    type: Literal["external-project-link"] = "external-project-link"
    project: str
    page: str = ""


class ImageNode(_Node):
    type: Literal["image"] = "image"
    url: str


class IconNode(_Node):
    """[user.icon]"""

    type: Literal["icon"] = "icon"
    user: str


class HashtagNode(_Node):
    type: Literal["hashtag"] = "hashtag"
    tag: str  # Shares the page-title namespace with internal links


class BoldNode(_Node):
    """[* text], [** text], ... or [[text]].

    level is the number of asterisks. It is stored as written; renderers
    clamp it to the heading sizes they support.
    """

    type: Literal["bold"] = "bold"
    level: int = 1
    children: tuple["InlineNode", ...] = ()


class ItalicNode(_Node):
    type: Literal["italic"] = "italic"
    children: tuple["InlineNode", ...] = ()


class StrikethroughNode(_Node):
    type: Literal["strikethrough"] = "strikethrough"
    children: tuple["InlineNode", ...] = ()


class UnderlineNode(_Node):
    type: Literal["underline"] = "underline"
    children: tuple["InlineNode", ...] = ()


class CodeNode(_Node):
    """`code` - interior kept verbatim."""

    type: Literal["code"] = "code"
    code: str


class MathNode(_Node):
    """[$ formula] - interior kept verbatim."""

    type: Literal["math"] = "math"
    formula: str


InlineNode = Annotated[
    Union[
        TextNode,
        InternalLinkNode,
        ExternalLinkNode,
        ExternalProjectLinkNode,
        ImageNode,
        IconNode,
        HashtagNode,
        BoldNode,
        ItalicNode,
        StrikethroughNode,
        UnderlineNode,
        CodeNode,
        MathNode,
    ],
    Field(discriminator="type"),
]

# Node variants that wrap recursively parsed children
DecorationNode = Union[BoldNode, ItalicNode, StrikethroughNode, UnderlineNode]

for _decoration in (BoldNode, ItalicNode, StrikethroughNode, UnderlineNode):
    _decoration.model_rebuild()


class ParsedLine(BaseModel):
    """One classified line of a page."""

    model_config = ConfigDict(frozen=True)

    indent: int = 0  # Leading spaces/tabs, each counted as one
    nodes: tuple[InlineNode, ...] = ()
    is_code_block_start: bool = False  # code:filename line
    code_block_language: str = ""  # Extension of the code:filename token
    is_code_block_content: bool = False
    is_quote: bool = False


# ─────────────────────────────────────────────────────────────────────────────
# Link queries
# ─────────────────────────────────────────────────────────────────────────────


class OneHopLinks(BaseModel):
    """Direct neighbours of a page."""

    outgoing: list[str] = Field(default_factory=list)  # Pages this page links to
    incoming: list[str] = Field(default_factory=list)  # Pages linking to this page


class RelatedPages(BaseModel):
    """Existing pages around a page, as shown in its related-pages block."""

    title: str
    outgoing: list[str] = Field(default_factory=list)
    incoming: list[str] = Field(default_factory=list)
    two_hop: list[str] = Field(default_factory=list)  # Truncated to the caller's limit


# ─────────────────────────────────────────────────────────────────────────────
# Cosense export format
# ─────────────────────────────────────────────────────────────────────────────


class CosenseUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    display_name: str = Field(default="", alias="displayName")
    email: str | None = None


class CosenseLine(BaseModel):
    """A line exported with its edit timestamps (telomere metadata)."""

    text: str
    created: int | None = None
    updated: int | None = None


class CosensePage(BaseModel):
    """A page. By convention lines[0] repeats the title."""

    title: str
    created: int | None = None
    updated: int | None = None
    id: str | None = None
    views: int | None = None
    lines: list[Union[str, CosenseLine]] = Field(default_factory=list)

    def line_texts(self) -> list[str]:
        """Lines flattened to plain strings."""
        return [line if isinstance(line, str) else line.text for line in self.lines]

    def body_lines(self) -> list[str]:
        """Lines after the leading title line."""
        texts = self.line_texts()
        if texts and texts[0] == self.title:
            return texts[1:]
        return texts


class CosenseExport(BaseModel):
    """Root of an export file.

    The full export carries project fields; the simplified import format
    only has ``pages``.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    exported: int | None = None
    users: list[CosenseUser] = Field(default_factory=list)
    pages: list[CosensePage]

    @property
    def is_full_export(self) -> bool:
        return self.name is not None and self.display_name is not None

    def project_label(self, default: str) -> str:
        return self.display_name if self.is_full_export and self.display_name else default
