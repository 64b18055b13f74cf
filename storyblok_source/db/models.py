"""Dataclass models representing DB rows.

These are plain Python objects, not ORM models.  The DB layer serialises /
deserialises to and from these types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class StoredNode:
    id: str
    node_type: str
    content_digest: str
    data_source: str | None
    payload: dict[str, Any]
    created_at: int
    updated_at: int
