"""Exception hierarchy for fetching and normalising Storyblok content.

Every error raised by the pipeline derives from :class:`SourceError` so the
CLI can report any failure with a single ``except`` clause.  None of these
are retried.
"""

from __future__ import annotations


class SourceError(Exception):
    """Base class for all fetch / normalise failures."""


class MalformedResponse(SourceError):
    """The response's ``data`` was not a single key mapped to a list of items."""

    def __init__(self, resource_type: str, keys: list[str], detail: str | None = None) -> None:
        self.resource_type = resource_type
        self.keys = keys
        if detail is None:
            detail = (
                f"Expected exactly one key in response data for {resource_type!r}, "
                f"got {len(keys)}: {keys!r}"
            )
        super().__init__(detail)


class InvalidItem(SourceError):
    """A raw item cannot be turned into a node (e.g. it has no ``id``)."""


class TransportError(SourceError):
    """The underlying HTTP request failed (network, status code, timeout, body)."""


class HashingError(SourceError):
    """The content digest of an item could not be computed."""


class PageLimitExceeded(SourceError):
    """More pages remained after the configured ``max_pages`` ceiling."""

    def __init__(self, resource_type: str, max_pages: int) -> None:
        self.resource_type = resource_type
        self.max_pages = max_pages
        super().__init__(
            f"Fetching {resource_type!r} did not finish within {max_pages} pages"
        )
