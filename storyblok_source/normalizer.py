"""Turn raw API items into content-addressable node records.

Each node is a shallow copy of its item plus::

    id        "<type name lowercased>-<item id>"
    parent    None
    children  []
    internal  {"mediaType": "application/json",
               "type": <type name>,
               "contentDigest": md5 of the original item}

The digest is computed before any transform runs, so a transform can
rewrite fields without changing the fingerprint.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Iterable, Optional

from storyblok_source.digest import content_digest
from storyblok_source.errors import InvalidItem
from storyblok_source.models import MEDIA_TYPE, NodeRecord, RawItem, Transform

logger = logging.getLogger(__name__)

NodeCallback = Callable[[NodeRecord], None]


def node_id(type_name: str, item_id: object) -> str:
    return f"{type_name.lower()}-{item_id}"


def build_node(item: RawItem, type_name: str) -> NodeRecord:
    """Return a new node record for *item*; *item* itself is not modified.

    Raises:
        InvalidItem: *item* is not a mapping or has no ``id``.
        HashingError: *item* cannot be serialised for its digest.
    """
    if not isinstance(item, dict):
        raise InvalidItem(f"Cannot build a {type_name} node from {type(item).__name__}")
    if "id" not in item:
        raise InvalidItem(f"{type_name} item has no 'id': keys {sorted(map(str, item))!r}")
    digest = content_digest(item)
    return {
        **item,
        "id": node_id(type_name, item["id"]),
        "parent": None,
        "children": [],
        "internal": {
            "mediaType": MEDIA_TYPE,
            "type": type_name,
            "contentDigest": digest,
        },
    }


def normalize(
    items: Iterable[RawItem],
    type_name: str,
    create_node: NodeCallback,
    transform: Optional[Transform] = None,
) -> None:
    """Build a node for every item and hand each one to *create_node*.

    Nodes are emitted one by one in input order.  If hashing fails part way
    through, the :class:`~storyblok_source.errors.HashingError` propagates
    and nodes already emitted stay emitted.
    """
    emitted = 0
    for item in items:
        node = build_node(item, type_name)
        if transform is not None:
            transform(node)
        create_node(node)
        emitted += 1
    logger.info(f"Created {emitted} {type_name} nodes")


# ---------------------------------------------------------------------------
# Stock transforms
# ---------------------------------------------------------------------------

def stringify_content(node: NodeRecord) -> None:
    """Replace a story's nested ``content`` object with its JSON string.

    Uses plain ``json.dumps`` in the item's own key order, not the canonical
    digest serialisation.
    """
    if "content" in node:
        node["content"] = json.dumps(node["content"], ensure_ascii=False, separators=(",", ":"))


def stamp_data_source(name: str) -> Transform:
    """Return a transform that records the datasource *name* on each node."""

    def _stamp(node: NodeRecord) -> None:
        node["data_source"] = name

    return _stamp
