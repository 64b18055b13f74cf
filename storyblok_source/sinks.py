"""Destinations for finished nodes and liveness reports.

The pipeline only needs two callables, ``create_node(node)`` and
``set_plugin_status(status)``.  The classes here provide them for the CLI
and for tests; a host build system can pass its own functions instead.
"""

from __future__ import annotations

import logging
import sqlite3
from collections import Counter
from typing import Any, Optional

from storyblok_source.db.nodes import upsert_node
from storyblok_source.models import NodeRecord

logger = logging.getLogger(__name__)


class NodeCollector:
    """Keep every emitted node in memory, in emission order."""

    def __init__(self) -> None:
        self.nodes: list[NodeRecord] = []

    def create_node(self, node: NodeRecord) -> None:
        self.nodes.append(node)

    def by_type(self, type_name: str) -> list[NodeRecord]:
        return [n for n in self.nodes if n["internal"]["type"] == type_name]

    def duplicate_ids(self) -> list[str]:
        """Return node ids that were emitted more than once."""
        counts = Counter(n["id"] for n in self.nodes)
        return sorted(node_id for node_id, n in counts.items() if n > 1)


class SqliteNodeSink:
    """Write nodes into the SQLite store as they arrive.

    Unchanged nodes (same id and digest) are skipped.  ``written`` and
    ``unchanged`` count the two outcomes.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.written = 0
        self.unchanged = 0

    def create_node(self, node: NodeRecord) -> None:
        if upsert_node(self.conn, node):
            self.written += 1
        else:
            self.unchanged += 1


class PluginStatus:
    """Remember the most recent status report."""

    def __init__(self) -> None:
        self.status: dict[str, Any] = {}

    def set_plugin_status(self, status: dict[str, Any]) -> None:
        self.status = dict(status)
        logger.debug(f"Plugin status: {self.status}")

    @property
    def last_fetched(self) -> Optional[int]:
        return self.status.get("lastFetched")
