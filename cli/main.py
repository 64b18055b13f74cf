"""Storyblok source CLI: entry-point for fetch and sourcing operations.

Usage:
    python cli/main.py --help

Command groups:
    db      → node store maintenance
    fetch   → run a single paginated fetch
    source  → fetch and normalise every collection
    nodes   → inspect the node store
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that
# `from storyblok_source.xxx import ...` works when the CLI is invoked as
# `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
import logging
from dataclasses import replace
from typing import List, Optional

import typer

from cli.commands.nodes import nodes_app
from storyblok_source.client import StoryblokClient
from storyblok_source.config import SourceOptions, settings
from storyblok_source.db import get_connection, init_db
from storyblok_source.errors import SourceError
from storyblok_source.fetcher import PaginatedFetcher
from storyblok_source.orchestrator import source_nodes
from storyblok_source.sinks import NodeCollector, PluginStatus, SqliteNodeSink

app = typer.Typer(
    name="storyblok-source",
    help="Fetch Storyblok content and turn it into content-graph nodes.",
    no_args_is_help=True,
)
app.add_typer(nodes_app, name="nodes")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every page fetched."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _options(version: Optional[str], data_sources: Optional[List[str]]) -> SourceOptions:
    options = SourceOptions.from_settings(settings)
    overrides = {}
    if version:
        overrides["version"] = version
    if data_sources:
        overrides["data_sources"] = tuple(data_sources)
    if not overrides:
        return options
    return replace(options, **overrides)


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Node store operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite node store (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Node store ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Fetch command
# ---------------------------------------------------------------------------
@app.command("fetch")
def fetch(
    resource_type: str = typer.Argument(..., help="Resource path, e.g. cdn/stories."),
    version: Optional[str] = typer.Option(None, help="Content version: draft | published."),
    as_json: bool = typer.Option(False, "--json", help="Print the fetched items as JSON."),
) -> None:
    """Fetch every page of one resource type and report what came back."""
    options = _options(version, None)
    status = PluginStatus()

    async def _run() -> list:
        async with StoryblokClient.from_options(options) as client:
            fetcher = PaginatedFetcher(client, options.fetcher_config(), status.set_plugin_status)
            return await fetcher.fetch(resource_type)

    typer.echo(f"[fetch] Fetching {resource_type!r} (version={options.version!r}) …")
    try:
        items = asyncio.run(_run())
    except SourceError as e:
        typer.echo(f"[fetch] Error: {e}")
        raise typer.Exit(code=1)

    typer.echo(f"[fetch] {len(items)} items")
    if as_json:
        typer.echo(json.dumps(items, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Source command
# ---------------------------------------------------------------------------
@app.command("source")
def source(
    data_source: Optional[List[str]] = typer.Option(
        None, "--data-source", help="Datasource name (repeatable). Defaults to STORYBLOK_DATA_SOURCES."
    ),
    version: Optional[str] = typer.Option(None, help="Content version: draft | published."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Collect nodes without writing them."),
) -> None:
    """Fetch stories, tags and datasource entries and store them as nodes."""
    options = _options(version, data_source)
    status = PluginStatus()
    collector = NodeCollector()
    conn = None
    sink = None
    if not dry_run:
        conn = get_connection()
        init_db(conn)
        sink = SqliteNodeSink(conn)

    def _create_node(node: dict) -> None:
        collector.create_node(node)
        if sink is not None:
            sink.create_node(node)

    typer.echo(
        f"[source] version={options.version!r} data sources={list(options.data_sources)!r}"
    )
    try:
        counts = asyncio.run(source_nodes(options, _create_node, status.set_plugin_status))
    except SourceError as e:
        typer.echo(f"[source] Error: {e}")
        raise typer.Exit(code=1)
    finally:
        if conn is not None:
            conn.close()

    for resource_type, n in counts.items():
        typer.echo(f"  {resource_type}: {n}")

    duplicates = collector.duplicate_ids()
    if duplicates:
        typer.echo(f"[source] Warning: {len(duplicates)} duplicate node ids: {duplicates[:5]!r}")

    if sink is not None:
        typer.echo(
            f"[source] {sink.written} nodes written, {sink.unchanged} unchanged "
            f"→ {settings.db_path}"
        )
    else:
        typer.echo(f"[source] Dry run: {len(collector.nodes)} nodes collected")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
