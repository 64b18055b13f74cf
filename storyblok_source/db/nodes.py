"""CRUD operations for the ``nodes`` table."""

from __future__ import annotations

import json
import sqlite3
from time import time
from typing import Optional

from storyblok_source.db.models import StoredNode
from storyblok_source.models import NodeRecord


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _row_to_node(row: sqlite3.Row) -> StoredNode:
    return StoredNode(
        id=row["id"],
        node_type=row["node_type"],
        content_digest=row["content_digest"],
        data_source=row["data_source"],
        payload=json.loads(row["payload"] or "{}"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def upsert_node(conn: sqlite3.Connection, node: NodeRecord) -> bool:
    """Insert *node*, or replace the stored copy if its digest changed.

    Args:
        conn: Open, initialised DB connection.
        node: A node record as produced by
            :func:`~storyblok_source.normalizer.build_node`.

    Returns:
        ``True`` if a row was inserted or updated, ``False`` if the stored
        digest already matched.
    """
    internal = node["internal"]
    digest = internal["contentDigest"]
    existing = conn.execute(
        "SELECT content_digest FROM nodes WHERE id = ?", (node["id"],)
    ).fetchone()
    if existing is not None and existing["content_digest"] == digest:
        return False

    now = int(time())
    payload = json.dumps(node, default=str)
    with conn:
        if existing is None:
            conn.execute(
                """
                INSERT INTO nodes (id, node_type, content_digest, data_source, payload, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (node["id"], internal["type"], digest, node.get("data_source"), payload, now, now),
            )
        else:
            conn.execute(
                """
                UPDATE nodes
                SET node_type = ?, content_digest = ?, data_source = ?, payload = ?, updated_at = ?
                WHERE id = ?
                """,
                (internal["type"], digest, node.get("data_source"), payload, now, node["id"]),
            )
    return True


def get_node(conn: sqlite3.Connection, node_id: str) -> Optional[StoredNode]:
    """Fetch a single node by id.  Returns ``None`` if not found."""
    row = conn.execute("SELECT * FROM nodes WHERE id = ?", (node_id,)).fetchone()
    return _row_to_node(row) if row else None


def list_nodes(
    conn: sqlite3.Connection, node_type: Optional[str] = None
) -> list[StoredNode]:
    """Return all nodes ordered by id, optionally filtered by ``node_type``."""
    if node_type:
        rows = conn.execute(
            "SELECT * FROM nodes WHERE node_type = ? ORDER BY id", (node_type,)
        ).fetchall()
    else:
        rows = conn.execute("SELECT * FROM nodes ORDER BY id").fetchall()
    return [_row_to_node(r) for r in rows]


def count_by_type(conn: sqlite3.Connection) -> dict[str, int]:
    rows = conn.execute(
        "SELECT node_type, COUNT(*) AS n FROM nodes GROUP BY node_type ORDER BY node_type"
    ).fetchall()
    return {r["node_type"]: r["n"] for r in rows}
