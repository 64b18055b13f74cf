"""Data models for the fetch → normalise pipeline.

These are plain Python objects.  Raw items and node records stay as dicts:
their shape is whatever the CMS returns for a collection and the pipeline
does not validate it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

# One entity (story, tag, datasource entry) as returned by the API.
RawItem = dict[str, Any]

# A raw item plus ``id``, ``parent``, ``children`` and ``internal``.
NodeRecord = dict[str, Any]

# Optional per-node hook applied after the digest has been computed.
Transform = Callable[[NodeRecord], None]

MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class CollectionRequest:
    """What to fetch: a resource path plus the fixed query parameters."""

    resource_type: str
    query_params: dict[str, Any] = field(default_factory=dict)


@dataclass
class PageResponse:
    """One page of results.

    ``data`` holds a single key naming the collection (``stories``,
    ``tags``, ``datasource_entries``…) mapped to that page's items.
    """

    data: dict[str, Any]
    total: int
    per_page: int


@dataclass(frozen=True)
class ExtractedItems:
    """Successful result of pulling the item list out of a page."""

    key: str
    items: list[RawItem]


@dataclass(frozen=True)
class Collection:
    """One named group of items fetched and normalised together."""

    resource_type: str
    type_name: str
    transform: Optional[Transform] = None
