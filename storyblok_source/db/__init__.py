"""Database layer package.

Public re-exports so callers can write::

    from storyblok_source.db import get_connection, init_db
"""

from storyblok_source.db.connection import get_connection
from storyblok_source.db.migrations import init_db

__all__ = ["get_connection", "init_db"]
