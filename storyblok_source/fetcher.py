"""Paginated fetcher: pulls every page of one collection into memory.

Pages are requested one at a time starting at page 1.  After each response
the status reporter receives ``{"lastFetched": <epoch ms>}`` as a liveness
signal.  Fetching continues while BOTH

* fewer items than ``total`` have been collected, and
* the current page number is ``<= ceil(total / per_page)``.

The two checks should agree for a well-behaved server; both are kept.  If the
server reports a ``total`` that is never reached the loop only stops when
``FetcherConfig.max_pages`` is set.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable, Protocol, Union

from storyblok_source.config import FetcherConfig
from storyblok_source.errors import MalformedResponse, PageLimitExceeded
from storyblok_source.models import CollectionRequest, ExtractedItems, PageResponse, RawItem

logger = logging.getLogger(__name__)

StatusCallback = Callable[[dict[str, Any]], None]


class CmsClient(Protocol):
    async def get(self, resource_type: str, params: dict[str, Any]) -> PageResponse: ...


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _now_ms() -> int:
    return int(time.time() * 1000)


def _last_page(total: int, per_page: int) -> int:
    if per_page <= 0:
        return 0
    return math.ceil(total / per_page)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_items(
    resource_type: str, data: dict[str, Any]
) -> Union[ExtractedItems, MalformedResponse]:
    """Pull the single item list out of a page's ``data`` mapping.

    ``/cdn/stories`` answers with ``{"stories": [...]}``, datasource entries
    with ``{"datasource_entries": [...]}`` and so on.  Anything other than
    exactly one key, or a value that is not a list, is returned as a
    :class:`MalformedResponse` for the caller to raise.
    """
    keys = list(data)
    if len(keys) != 1:
        return MalformedResponse(resource_type, keys)
    key = keys[0]
    value = data[key]
    if not isinstance(value, (list, tuple)):
        return MalformedResponse(
            resource_type,
            keys,
            f"Expected a list of items under {key!r} for {resource_type!r}, "
            f"got {type(value).__name__}",
        )
    return ExtractedItems(key=key, items=list(value))


class PaginatedFetcher:
    """Fetch all items of a resource type, one page at a time.

    Args:
        client: Anything with ``async get(resource_type, params)`` returning
            a :class:`~storyblok_source.models.PageResponse`.
        config: Version, page size and optional page ceiling.
        report_status: Called after every page with ``{"lastFetched": ms}``.
    """

    def __init__(
        self,
        client: CmsClient,
        config: FetcherConfig,
        report_status: StatusCallback,
    ) -> None:
        self.client = client
        self.config = config
        self.report_status = report_status

    def request_for(self, resource_type: str) -> CollectionRequest:
        return CollectionRequest(resource_type, self.config.base_params())

    async def fetch(self, resource_type: str) -> list[RawItem]:
        """Return every item of *resource_type* in page order.

        Raises:
            MalformedResponse: A page's ``data`` did not hold exactly one key
                mapped to a list.
            TransportError: Propagated from the client.
            PageLimitExceeded: ``max_pages`` was reached with pages remaining.
        """
        request = self.request_for(resource_type)
        results: list[RawItem] = []
        count = 0
        page = 1

        while True:
            params = {**request.query_params, "page": page}
            response = await self.client.get(request.resource_type, params)
            self.report_status({"lastFetched": _now_ms()})

            extracted = extract_items(request.resource_type, response.data)
            if isinstance(extracted, MalformedResponse):
                raise extracted

            results.extend(extracted.items)
            count += len(extracted.items)
            logger.debug(
                f"{resource_type}: page {page} returned {len(extracted.items)} "
                f"{extracted.key} ({count}/{response.total})"
            )

            has_more = count < response.total and page <= _last_page(
                response.total, response.per_page
            )
            if not has_more:
                break

            max_pages = self.config.max_pages
            if max_pages is not None and page >= max_pages:
                raise PageLimitExceeded(resource_type, max_pages)
            page += 1

        return results
