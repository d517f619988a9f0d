"""CLI for searching exported canvases offline."""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from canvas_search.core.importer.loader import import_snapshot
from canvas_search.core.search.index import ConversationSearchIndex
from canvas_search.logging_config import configure_logging
from canvas_search.models.node import Point

app = typer.Typer(help="Canvas search: query node titles, notes and conversations.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _parse_point(value: str) -> Point:
    try:
        x, y = (float(part) for part in value.split(","))
    except ValueError:
        msg = f"Expected X,Y but got {value!r}"
        raise typer.BadParameter(msg) from None
    return Point(x, y)


def _load_index(export: Path) -> ConversationSearchIndex:
    index = ConversationSearchIndex()
    try:
        import_snapshot(index, export)
    except (OSError, ValueError) as e:
        logger.error("Cannot load {}: {}", export, e)
        raise typer.Exit(1) from e
    return index


@app.command()
def search(
    export: Path = typer.Argument(..., help="Exported canvas JSON file"),
    query: str = typer.Argument(..., help="Search query"),
    near: Annotated[
        str | None,
        typer.Option("--near", help="Viewport center as X,Y for proximity ranking"),
    ] = None,
    limit: int = typer.Option(10, "--limit", "-n", help="Max results"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search an exported canvas."""
    center = _parse_point(near) if near else None
    index = _load_index(export)
    results = index.search(query, center)
    shown = results[:limit]

    if output_json:
        data = {
            "results": [
                {
                    "node_id": r.node_id,
                    "node_title": r.node_title,
                    "text_unit_id": r.text_unit_id,
                    "match_kind": str(r.match_kind),
                    "message_role": str(r.message_role) if r.message_role else None,
                    "assigned_role": r.assigned_role,
                    "snippet": r.snippet,
                    "position": [r.node_position.x, r.node_position.y],
                }
                for r in shown
            ],
            "total": len(results),
        }
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"Found {len(results)} results (showing {len(shown)}):\n")
    for r in shown:
        typer.echo(f"  [{r.node_title}] ({r.match_kind}) {r.snippet}")
        if r.assigned_role:
            typer.echo(f"    role: {r.assigned_role}")
        typer.echo(f"    node={r.node_id}  unit={r.text_unit_id}")
        typer.echo()


@app.command()
def stats(
    export: Path = typer.Argument(..., help="Exported canvas JSON file"),
) -> None:
    """Show index size for an exported canvas."""
    index = _load_index(export)
    s = index.stats()
    typer.echo(f"{s.node_count} nodes, {s.unit_count} text units, {s.token_count} distinct tokens")
