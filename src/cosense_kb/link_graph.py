"""Page link graph built from internal links and hashtags.

The graph is built once from the whole page set and is read-only
afterwards. Queries answer the related-pages questions for one page:
direct links, backlinks and the two-hop neighbourhood.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .config import RELATED_PAGES_LIMIT
from .models import CosensePage, OneHopLinks, RelatedPages
from .parser.links import extract_page_links

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkGraph:
    """Read-only link graph.

    Adjacency values are duplicate-free tuples in insertion order.
    Targets that are not pages are kept (dangling links); they appear in
    back_links without being in existing_pages.
    """

    forward_links: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    back_links: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    # source -> target -> raw lines of source referencing target
    link_contexts: Mapping[str, Mapping[str, tuple[str, ...]]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    existing_pages: frozenset[str] = frozenset()

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.forward_links.values())

    def dangling_targets(self) -> list[str]:
        """Link targets with no page of that title."""
        return [title for title in self.back_links if title not in self.existing_pages]


class LinkGraphBuilder:
    """Accumulates edges, then freezes them into a LinkGraph."""

    def __init__(self) -> None:
        # dict[str, None] keeps insertion order and drops duplicates
        self._forward: dict[str, dict[str, None]] = {}
        self._back: dict[str, dict[str, None]] = {}
        self._contexts: dict[str, dict[str, list[str]]] = {}
        self._pages: set[str] = set()

    def seed(self, title: str) -> None:
        """Register an existing page so it gets (possibly empty) adjacency."""
        self._pages.add(title)
        self._forward.setdefault(title, {})
        self._back.setdefault(title, {})
        self._contexts.setdefault(title, {})

    def add_page(self, title: str, links: Mapping[str, Iterable[str]]) -> None:
        """Add the outgoing links of one page.

        Args:
            title: Source page title.
            links: Target title -> raw lines referencing it (extract_links()).
        """
        forward = self._forward.setdefault(title, {})
        contexts = self._contexts.setdefault(title, {})

        for target, lines in links.items():
            forward[target] = None
            self._back.setdefault(target, {})[title] = None
            contexts.setdefault(target, []).extend(lines)

    def build(self) -> LinkGraph:
        return LinkGraph(
            forward_links=MappingProxyType(
                {title: tuple(targets) for title, targets in self._forward.items()}
            ),
            back_links=MappingProxyType(
                {title: tuple(sources) for title, sources in self._back.items()}
            ),
            link_contexts=MappingProxyType(
                {
                    source: MappingProxyType(
                        {target: tuple(lines) for target, lines in targets.items()}
                    )
                    for source, targets in self._contexts.items()
                }
            ),
            existing_pages=frozenset(self._pages),
        )


def build_link_graph(pages: Iterable[CosensePage]) -> LinkGraph:
    """Build the link graph of a page set.

    Every page is seeded first so that pages without links still have
    empty forward and back entries.
    """
    pages = list(pages)
    builder = LinkGraphBuilder()

    for page in pages:
        builder.seed(page.title)

    for page in pages:
        links = extract_page_links(page)
        log.debug("%s: %d link targets", page.title, len(links))
        builder.add_page(page.title, links)

    graph = builder.build()
    log.info(
        "Link graph: %d pages, %d edges, %d dangling targets",
        len(graph.existing_pages),
        graph.edge_count,
        len(graph.dangling_targets()),
    )
    return graph


# ─────────────────────────────────────────────────────────────────────────────
# Queries
# ─────────────────────────────────────────────────────────────────────────────


def one_hop(graph: LinkGraph, title: str) -> OneHopLinks:
    """Pages the page links to, and pages linking to it."""
    return OneHopLinks(
        outgoing=list(graph.forward_links.get(title, ())),
        incoming=list(graph.back_links.get(title, ())),
    )


def two_hop(graph: LinkGraph, title: str) -> list[str]:
    """Pages one more edge away from any direct neighbour.

    Both hops follow links in either direction: from every outgoing and
    every incoming neighbour, its own forward links and backlinks are
    collected. The page itself and its direct neighbours are excluded.
    """
    neighbours = one_hop(graph, title)
    excluded = {*neighbours.outgoing, *neighbours.incoming, title}

    result: dict[str, None] = {}
    for neighbour in [*neighbours.outgoing, *neighbours.incoming]:
        for candidate in (
            *graph.forward_links.get(neighbour, ()),
            *graph.back_links.get(neighbour, ()),
        ):
            if candidate not in excluded:
                result.setdefault(candidate)

    return list(result)


def backlinks(graph: LinkGraph, title: str) -> list[str]:
    return list(graph.back_links.get(title, ()))


def link_context(graph: LinkGraph, source: str, target: str) -> list[str]:
    """Raw lines of ``source`` that link to ``target``."""
    return list(graph.link_contexts.get(source, {}).get(target, ()))


def related_pages(
    graph: LinkGraph,
    title: str,
    limit: int = RELATED_PAGES_LIMIT,
) -> RelatedPages:
    """Existing pages around ``title`` for a related-pages listing.

    Args:
        graph: Built link graph.
        title: Page to look around.
        limit: Maximum number of two-hop pages.

    Returns:
        RelatedPages with dangling titles removed and two-hop truncated.

    Raises:
        ValueError: If limit is negative.
    """
    if limit < 0:
        raise ValueError(f"limit must not be negative: {limit}")

    neighbours = one_hop(graph, title)
    pages = graph.existing_pages

    return RelatedPages(
        title=title,
        outgoing=[t for t in neighbours.outgoing if t in pages],
        incoming=[t for t in neighbours.incoming if t in pages],
        two_hop=[t for t in two_hop(graph, title) if t in pages][:limit],
    )
