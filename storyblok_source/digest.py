"""Content digests for node records.

``safe_stringify`` produces a canonical JSON string: keys are sorted at every
level and any reference back to an enclosing container is replaced by a
``"[Circular ~.path]"`` marker instead of recursing forever.  The output is
used only as digest input.  It is never written into an emitted node, so the
``content`` field of a story is serialised separately (see
:func:`storyblok_source.normalizer.stringify_content`).
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from storyblok_source.errors import HashingError


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _circular_marker(path: str) -> str:
    return f"[Circular ~{path}]"


def _decycle(value: Any, ancestors: dict[int, str], path: str) -> Any:
    """Return a copy of *value* with back-references replaced by markers.

    *ancestors* maps ``id()`` of every container on the current branch to its
    path.  A container that is referenced twice without forming a cycle is
    serialised both times.
    """
    if isinstance(value, dict):
        container_id = id(value)
        if container_id in ancestors:
            return _circular_marker(ancestors[container_id])
        ancestors[container_id] = path
        try:
            return {
                key: _decycle(child, ancestors, f"{path}.{key}")
                for key, child in value.items()
            }
        finally:
            del ancestors[container_id]

    if isinstance(value, (list, tuple)):
        container_id = id(value)
        if container_id in ancestors:
            return _circular_marker(ancestors[container_id])
        ancestors[container_id] = path
        try:
            return [
                _decycle(child, ancestors, f"{path}.{index}")
                for index, child in enumerate(value)
            ]
        finally:
            del ancestors[container_id]

    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def safe_stringify(value: Any) -> str:
    """Serialise *value* to canonical JSON, tolerating circular references.

    Raises:
        HashingError: If *value* holds something JSON cannot represent
            (e.g. a ``set`` or an arbitrary object) or has keys that cannot
            be sorted against each other.
    """
    try:
        return json.dumps(
            _decycle(value, {}, ""),
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
        )
    except (TypeError, ValueError, RecursionError) as exc:
        raise HashingError(f"Cannot serialise item for hashing: {exc}") from exc


def content_digest(item: Any) -> str:
    """Return the 128-bit MD5 hex digest of ``safe_stringify(item)``."""
    payload = safe_stringify(item).encode("utf-8")
    return hashlib.md5(payload, usedforsecurity=False).hexdigest()
