"""Commands for inspecting the node store."""

import json

import typer

from storyblok_source.db import get_connection, init_db
from storyblok_source.db.nodes import count_by_type, get_node, list_nodes

nodes_app = typer.Typer(help="Inspect stored nodes.", no_args_is_help=True)


@nodes_app.command("list")
def nodes_list(
    type: str = typer.Option(None, "--type", help="Filter by node type (StoryblokEntry, StoryblokTag, ...)."),
) -> None:
    """List stored nodes."""
    conn = get_connection()
    init_db(conn)

    try:
        nodes = list_nodes(conn, node_type=type)
        if not nodes:
            typer.echo("No nodes found.")
            return
        for n in nodes:
            typer.echo(f"  {n.id}  [{n.node_type}]  {n.content_digest}")
    finally:
        conn.close()


@nodes_app.command("stats")
def nodes_stats() -> None:
    """Show node counts per type."""
    conn = get_connection()
    init_db(conn)

    try:
        counts = count_by_type(conn)
    finally:
        conn.close()

    if not counts:
        typer.echo("No nodes found.")
        return
    for node_type, n in counts.items():
        typer.echo(f"  {node_type}: {n}")


@nodes_app.command("show")
def nodes_show(
    node_id: str = typer.Argument(..., help="Node id, e.g. storyblokentry-42."),
) -> None:
    """Print the stored payload of one node."""
    conn = get_connection()
    init_db(conn)

    try:
        node = get_node(conn, node_id)
    finally:
        conn.close()

    if node is None:
        typer.echo(f"❌ Node not found: {node_id}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps(node.payload, indent=2, ensure_ascii=False))
