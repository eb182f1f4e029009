#!/usr/bin/env python3
"""
pft: inspect and tidy a PFT site

Usage:
    pft init [PATH]          # Create a site skeleton
    pft map                  # Show the site map
    pft show ID              # Show one node and its links
    pft check                # Make entries consistent with their paths
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from . import __version__ as PFT_VERSION
from .errors import PftError
from .map import Node, SiteMap
from .tree import ContentTree


def format_table(rows: list[dict], columns: list[str], max_widths: dict | None = None) -> str:
    """Format rows as a plain text table."""
    if not rows:
        return ""

    max_widths = max_widths or {}

    def cell(row: dict, col: str) -> str:
        val = str(row.get(col, ""))
        limit = max_widths.get(col, 60)
        return val[: limit - 3] + "..." if len(val) > limit else val

    widths = {col: max([len(col)] + [len(cell(row, col)) for row in rows]) for col in columns}
    lines = [
        "  ".join(col.upper().ljust(widths[col]) for col in columns),
        "  ".join("-" * widths[col] for col in columns),
    ]
    for row in rows:
        lines.append("  ".join(cell(row, col).ljust(widths[col]) for col in columns).rstrip())
    return "\n".join(lines)


def output(data: Any, as_json: bool = False) -> None:
    """Output data as JSON or formatted text."""
    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(data)


def _ids(nodes: list[Node]) -> list[str]:
    return [node.id for node in nodes]


def node_to_dict(node: Node) -> dict[str, Any]:
    return {
        "id": node.id,
        "kind": node.kind.name.lower(),
        "seqnr": node.seqnr,
        "title": node.title,
        "date": str(node.date) if node.date else None,
        "virtual": node.virtual,
        "path": str(node.document.path) if node.document is not None else None,
        "prev": node.prev.id if node.prev else None,
        "next": node.next.id if node.next else None,
        "month": node.month.id if node.month else None,
        "days": _ids(node.days),
        "tags": _ids(node.tags),
        "tagged": _ids(node.tagged),
        "outlinks": _ids(node.outlinks),
        "inlinks": _ids(node.inlinks),
        "unresolved": list(node.unresolved),
    }


def map_to_dict(site_map: SiteMap) -> dict[str, Any]:
    return {
        "nodes": [node_to_dict(node) for node in site_map],
        "chronological": [node.id for node in site_map.chronological()],
        "months": _ids(site_map.months),
        "tags": _ids(site_map.tags),
        "unresolved": [ref.model_dump() for ref in site_map.unresolved],
        "diagnostics": [diag.model_dump() for diag in site_map.diagnostics],
    }


def _open_tree(ctx: click.Context) -> ContentTree:
    root = ctx.obj.get("root") if ctx.obj else None
    try:
        return ContentTree(root) if root else ContentTree.locate()
    except PftError as e:
        raise click.ClickException(str(e)) from e


# ─────────────────────────────────────────────────────────────────────────────
# Main CLI Group
# ─────────────────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version=PFT_VERSION, prog_name="pft")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="PFT_ROOT",
    help="Site root (default: search upwards for pft.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, verbose: bool, quiet: bool):
    """pft: build the map of a PFT site and keep its content tidy."""
    from ._logging import configure_logging

    if verbose:
        configure_logging("DEBUG")
    elif quiet:
        configure_logging("ERROR")

    ctx.ensure_object(dict)
    ctx.obj["root"] = root


@cli.command()
@click.argument("path", required=False, type=click.Path(file_okay=False, path_type=Path))
def init(path: Path | None):
    """Create a site skeleton in PATH (default: current directory)."""
    tree = ContentTree.create(path or Path.cwd())
    click.echo(f"Initialized PFT site in {tree.root}")


@cli.command("map")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--no-refs", is_flag=True, help="Skip cross reference resolution")
@click.option("--lenient", is_flag=True, help="Skip entries with broken headers instead of failing")
@click.pass_context
def map_cmd(ctx: click.Context, as_json: bool, no_refs: bool, lenient: bool):
    """Build and print the site map."""
    tree = _open_tree(ctx)
    try:
        site_map = tree.build_map(strict=not lenient, resolve_references=not no_refs)
    except PftError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        output(map_to_dict(site_map), as_json=True)
        return

    rows = [
        {
            "id": node.id,
            "kind": node.kind.name.lower(),
            "virtual": "yes" if node.virtual else "",
            "title": node.title or "",
        }
        for node in site_map
    ]
    output(format_table(rows, ["id", "kind", "virtual", "title"]))

    chain = [node.id for node in site_map.chronological()]
    if chain:
        click.echo(f"\nChronological: {' -> '.join(chain)}")

    for ref in site_map.unresolved:
        click.echo(f"Unresolved: {ref.node_id} -> {ref.symbol}", err=True)


@cli.command()
@click.argument("node_id")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def show(ctx: click.Context, node_id: str, as_json: bool):
    """Show a node and its links."""
    tree = _open_tree(ctx)
    try:
        site_map = tree.build_map()
    except PftError as e:
        raise click.ClickException(str(e)) from e

    node = site_map.get(node_id)
    if node is None:
        raise click.ClickException(f"No node with id {node_id!r}")

    data = node_to_dict(node)
    if as_json:
        output(data, as_json=True)
        return
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(value)
        click.echo(f"{key}: {value if value not in (None, '') else '-'}")


@cli.command()
@click.pass_context
def check(ctx: click.Context):
    """Make every entry consistent with its location.

    Completes missing dates from blog paths and moves files whose header
    no longer matches their path.
    """
    tree = _open_tree(ctx)
    try:
        changed = tree.make_consistent()
    except PftError as e:
        raise click.ClickException(str(e)) from e

    for entry in changed:
        click.echo(f"Updated: {entry.path.relative_to(tree.root)}")
    if not changed:
        click.echo("All entries are consistent.")


def main():
    """Entry point for pft CLI."""
    from ._logging import configure_logging

    configure_logging()
    cli()


if __name__ == "__main__":
    main()
