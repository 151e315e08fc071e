#!/usr/bin/env python3
"""
ckb: CLI for Cosense exports

Usage:
    ckb --export export.json info          # Project summary
    ckb parse "[link] and #tag"            # Show how a line parses
    ckb links "Page"                       # Direct links and backlinks
    ckb related "Page"                     # Related pages (one and two hops)
    ckb images                             # Image URLs used by all pages
"""

from __future__ import annotations

import difflib
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

import click
from click.exceptions import ClickException, UsageError

from . import __version__ as CKB_VERSION

if TYPE_CHECKING:
    from .link_graph import LinkGraph
    from .models import CosenseExport, CosensePage


# ─────────────────────────────────────────────────────────────────────────────
# Output helpers
# ─────────────────────────────────────────────────────────────────────────────


def output(data, as_json: bool = False):
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))
    else:
        click.echo(data)


def _echo_titles(heading: str, titles: list[str]) -> None:
    click.echo(f"{heading} ({len(titles)}):")
    if not titles:
        click.echo("  (none)")
    for title in titles:
        click.echo(f"  {title}")


# ─────────────────────────────────────────────────────────────────────────────
# Error handling
# ─────────────────────────────────────────────────────────────────────────────


def _echo_error(error: Exception, json_errors: bool) -> None:
    """Write an error to stderr as JSON or as an ``Error:``/``Hint:`` pair."""
    from .errors import CosenseKBError, error_code_for, format_error_json

    if isinstance(error, CosenseKBError):
        if json_errors:
            click.echo(error.to_json(), err=True)
            return
        message = error.message
        suggestion = error.details.get("suggestion")
    else:
        message = error.format_message() if isinstance(error, ClickException) else str(error)
        if json_errors:
            click.echo(format_error_json(error_code_for(error), message), err=True)
            return
        suggestion = None

    click.echo(f"Error: {message}", err=True)
    if suggestion:
        click.echo(f"Hint: {suggestion}", err=True)


def _handle_error(ctx: click.Context, error: Exception, exit_code: int = 1) -> NoReturn:
    """Report an error the way --json-errors asks for and exit."""
    obj = ctx.find_root().obj or {}
    _echo_error(error, obj.get("json_errors", False))
    sys.exit(exit_code)


class JsonErrorGroup(click.Group):
    """Command group with JSON error output and command typo suggestions.

    With --json-errors anywhere on the command line, Click runs in
    non-standalone mode so usage errors reach main() and are reported as
    JSON with an ErrorCode instead of Click's usage text.
    """

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except UsageError:
            name = args[0] if args else ""
            close = difflib.get_close_matches(name, self.list_commands(ctx), n=1, cutoff=0.6)
            if name and close:
                raise UsageError(f"No such command '{name}'. Did you mean '{close[0]}'?", ctx)
            raise

    def main(
        self,
        args: Sequence[str] | None = None,
        prog_name: str | None = None,
        complete_var: str | None = None,
        standalone_mode: bool = True,
        **extra: Any,
    ) -> Any:
        argv = list(sys.argv[1:] if args is None else args)
        if "--json-errors" not in argv:
            return super().main(argv, prog_name, complete_var, standalone_mode, **extra)

        # Global option; accepted after the subcommand too
        argv = ["--json-errors", *(arg for arg in argv if arg != "--json-errors")]
        try:
            return super().main(argv, prog_name, complete_var, standalone_mode=False, **extra)
        except Exception as e:
            _echo_error(e, json_errors=True)
            raise SystemExit(1)


# ─────────────────────────────────────────────────────────────────────────────
# Export / graph loading
# ─────────────────────────────────────────────────────────────────────────────


def _load_export(ctx: click.Context) -> CosenseExport:
    """Load the configured export once per invocation."""
    from .config import ConfigurationError, get_export_path
    from .parser.export import ExportError, load_export

    obj = ctx.find_root().obj
    if "export" not in obj:
        try:
            path = get_export_path(obj.get("export_path"))
            obj["export"] = load_export(path)
        except (ConfigurationError, ExportError, OSError) as e:
            _handle_error(ctx, e)
    return obj["export"]


def _load_graph(ctx: click.Context) -> LinkGraph:
    from .link_graph import build_link_graph

    obj = ctx.find_root().obj
    if "graph" not in obj:
        obj["graph"] = build_link_graph(_load_export(ctx).pages)
    return obj["graph"]


def _find_page(ctx: click.Context, title: str) -> CosensePage:
    """Look up a page by exact title, suggesting close titles on failure."""
    from .errors import CosenseKBError, ErrorCode

    pages = _load_export(ctx).pages
    for page in pages:
        if page.title == title:
            return page

    titles = [page.title for page in pages]
    suggestions = difflib.get_close_matches(title, titles, n=5, cutoff=0.6)
    details: dict[str, Any] = {}
    if suggestions:
        details["suggestion"] = "Did you mean: " + ", ".join(suggestions)
        details["similar_titles"] = suggestions
    _handle_error(ctx, CosenseKBError(ErrorCode.PAGE_NOT_FOUND, f"Page not found: {title}", details))


def _require_page_or_target(ctx: click.Context, graph: LinkGraph, title: str) -> None:
    """Accept existing pages and dangling link targets, reject anything else."""
    if title in graph.existing_pages or title in graph.back_links:
        return
    _find_page(ctx, title)


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────


@click.group(cls=JsonErrorGroup)
@click.version_option(version=CKB_VERSION, prog_name="ckb")
@click.option(
    "--export",
    "export_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Cosense export JSON (default: $COSENSE_KB_EXPORT or .ckbconfig)",
)
@click.option(
    "--json-errors",
    "json_errors",
    is_flag=True,
    help="Output errors as JSON (for programmatic use)",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    envvar="COSENSE_KB_QUIET",
    help="Suppress informational logging",
)
@click.pass_context
def cli(ctx: click.Context, export_path: Path | None, json_errors: bool, quiet: bool):
    """ckb: explore the link structure of a Cosense export.

    \b
    Quick start:
      ckb --export export.json info     # Pages, links, images
      ckb related "Page title"          # Related pages
      ckb parse "[* bold] #tag"         # Inspect notation parsing

    \b
    For programmatic error handling:
      ckb --json-errors related ...     # Errors output as JSON with error codes
    """
    from ._logging import configure_logging

    configure_logging(quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj["json_errors"] = json_errors
    ctx.obj["quiet"] = quiet
    ctx.obj["export_path"] = export_path


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def info(ctx: click.Context, as_json: bool):
    """Show a summary of the export and its link graph."""
    from .config import DEFAULT_PROJECT_LABEL
    from .parser.links import extract_image_urls

    export = _load_export(ctx)
    graph = _load_graph(ctx)

    data = {
        "project": export.project_label(DEFAULT_PROJECT_LABEL),
        "pages": len(export.pages),
        "links": graph.edge_count,
        "dangling_targets": len(graph.dangling_targets()),
        "images": len(extract_image_urls(export.pages)),
    }

    if as_json:
        output(data, as_json=True)
        return

    click.echo(f"Project:          {data['project']}")
    click.echo(f"Pages:            {data['pages']}")
    click.echo(f"Links:            {data['links']}")
    click.echo(f"Dangling targets: {data['dangling_targets']}")
    click.echo(f"Images:           {data['images']}")


@cli.command()
@click.argument("line")
@click.option("--in-code-block", is_flag=True, help="Parse as if inside a code:filename block")
def parse(line: str, in_code_block: bool):
    """Parse a single LINE and print the result as JSON.

    Example:
      ckb parse "see [Page] and #tag"
    """
    from .parser.line_parser import parse_line

    output(parse_line(line, in_code_block).model_dump(mode="json"), as_json=True)


@cli.command()
@click.argument("title")
@click.pass_context
def page(ctx: click.Context, title: str):
    """Print the parsed lines of page TITLE as JSON."""
    from .parser.line_parser import parse_lines

    found = _find_page(ctx, title)
    parsed = parse_lines(found.line_texts())
    output([line.model_dump(mode="json") for line in parsed], as_json=True)


@cli.command()
@click.argument("title")
@click.option("--no-title", is_flag=True, help="Leave out the leading title line")
@click.pass_context
def text(ctx: click.Context, title: str, no_title: bool):
    """Print the plain text of page TITLE."""
    from .parser.text import page_text

    click.echo(page_text(_find_page(ctx, title), include_title=not no_title))


@cli.command()
@click.argument("title")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def links(ctx: click.Context, title: str, as_json: bool):
    """Show pages TITLE links to and pages linking to it."""
    from .link_graph import one_hop

    graph = _load_graph(ctx)
    _require_page_or_target(ctx, graph, title)
    result = one_hop(graph, title)

    if as_json:
        output(result.model_dump(), as_json=True)
        return

    _echo_titles("Outgoing", result.outgoing)
    _echo_titles("Incoming", result.incoming)


@cli.command()
@click.argument("title")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def backlinks(ctx: click.Context, title: str, as_json: bool):
    """List pages linking to TITLE."""
    from .link_graph import backlinks as get_backlinks

    graph = _load_graph(ctx)
    _require_page_or_target(ctx, graph, title)
    result = get_backlinks(graph, title)

    if as_json:
        output(result, as_json=True)
        return

    _echo_titles("Backlinks", result)


@cli.command()
@click.argument("title")
@click.option(
    "--limit",
    "-n",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum two-hop pages (default: related_limit config or 20)",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def related(ctx: click.Context, title: str, limit: int | None, as_json: bool):
    """Show related pages of TITLE: direct links, backlinks and two-hop pages."""
    from .config import ConfigurationError, get_related_limit
    from .link_graph import related_pages

    graph = _load_graph(ctx)
    _require_page_or_target(ctx, graph, title)

    if limit is None:
        try:
            limit = get_related_limit()
        except ConfigurationError as e:
            _handle_error(ctx, e)

    result = related_pages(graph, title, limit=limit)

    if as_json:
        output(result.model_dump(), as_json=True)
        return

    _echo_titles("Links", result.outgoing)
    _echo_titles("Backlinks", result.incoming)
    _echo_titles("Two hops", result.two_hop)


@cli.command()
@click.argument("source")
@click.argument("target")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def context(ctx: click.Context, source: str, target: str, as_json: bool):
    """Show the lines of SOURCE that link to TARGET."""
    from .link_graph import link_context

    graph = _load_graph(ctx)
    if source not in graph.existing_pages:
        _find_page(ctx, source)
    lines = link_context(graph, source, target)

    if as_json:
        output({"source": source, "target": target, "lines": lines}, as_json=True)
        return

    if not lines:
        click.echo(f"{source} does not link to {target}")
        return
    for line in lines:
        click.echo(line)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def images(ctx: click.Context, as_json: bool):
    """List distinct image URLs referenced by all pages."""
    from .parser.links import extract_image_urls

    urls = extract_image_urls(_load_export(ctx).pages)

    if as_json:
        output(urls, as_json=True)
        return

    for url in urls:
        click.echo(url)


def main():
    cli()


if __name__ == "__main__":
    main()
