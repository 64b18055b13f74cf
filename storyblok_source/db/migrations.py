"""Database initialisation.

``init_db(conn)`` is idempotent: every statement in ``schema.sql`` uses
``IF NOT EXISTS``, so it is safe to call on an existing database.
"""

from __future__ import annotations

import sqlite3

from storyblok_source.config import settings


def init_db(conn: sqlite3.Connection) -> None:
    """Create the ``nodes`` table and its indexes if they do not exist.

    Args:
        conn: An open SQLite connection.
    """
    conn.executescript(settings.schema_path.read_text(encoding="utf-8"))
