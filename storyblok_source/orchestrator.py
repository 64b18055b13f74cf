"""Run every collection's fetch → normalise pipeline concurrently.

Collections are ``cdn/stories``, ``cdn/tags`` and one
``cdn/datasource_entries`` per configured datasource name.  Each pipeline
fetches its pages sequentially, so at most one request per collection is in
flight.  :func:`source_nodes` finishes when every pipeline has finished and
raises the first error any of them raises.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, Optional
from urllib.parse import urlencode

from storyblok_source.client import StoryblokClient
from storyblok_source.config import SourceOptions
from storyblok_source.fetcher import CmsClient, PaginatedFetcher, StatusCallback
from storyblok_source.models import Collection, NodeRecord
from storyblok_source.normalizer import normalize, stamp_data_source, stringify_content

logger = logging.getLogger(__name__)

STORY_TYPE = "StoryblokEntry"
TAG_TYPE = "StoryblokTag"
DATASOURCE_ENTRY_TYPE = "StoryblokDataSourceEntry"


def datasource_resource(name: str) -> str:
    return f"cdn/datasource_entries?{urlencode({'datasource': name})}"


def build_collections(data_sources: Iterable[str] = ()) -> list[Collection]:
    """Return the stories and tags collections plus one per datasource."""
    collections = [
        Collection("cdn/stories", STORY_TYPE, transform=stringify_content),
        Collection("cdn/tags", TAG_TYPE),
    ]
    for name in data_sources:
        collections.append(
            Collection(
                datasource_resource(name),
                DATASOURCE_ENTRY_TYPE,
                transform=stamp_data_source(name),
            )
        )
    return collections


async def run_collection(
    collection: Collection,
    fetcher: PaginatedFetcher,
    create_node: Callable[[NodeRecord], None],
) -> int:
    """Fetch all items of *collection*, then normalise them into nodes.

    Returns:
        The number of items fetched (and nodes emitted).
    """
    logger.info(f"Fetching {collection.resource_type}")
    items = await fetcher.fetch(collection.resource_type)
    normalize(items, collection.type_name, create_node, collection.transform)
    return len(items)


async def source_nodes(
    options: SourceOptions,
    create_node: Callable[[NodeRecord], None],
    set_plugin_status: StatusCallback,
    client: Optional[CmsClient] = None,
) -> dict[str, int]:
    """Fetch and normalise every collection described by *options*.

    Args:
        options: Version, datasource names and client settings.
        create_node: Receives each finished node exactly once.
        set_plugin_status: Receives ``{"lastFetched": ms}`` after every page.
        client: CMS client to use.  When omitted a :class:`StoryblokClient`
            is built from *options* and closed afterwards.

    Returns:
        Item counts keyed by resource type.

    Raises:
        SourceError: The first failure of any collection.  Other pipelines
            are not cancelled but their results are discarded.
    """
    if client is None:
        async with StoryblokClient.from_options(options) as owned:
            return await source_nodes(options, create_node, set_plugin_status, owned)

    fetcher = PaginatedFetcher(client, options.fetcher_config(), set_plugin_status)
    collections = build_collections(options.data_sources)
    counts = await asyncio.gather(
        *(run_collection(c, fetcher, create_node) for c in collections)
    )
    summary: dict[str, int] = {
        c.resource_type: n for c, n in zip(collections, counts)
    }
    logger.info(f"Sourced {sum(counts)} nodes from {len(collections)} collections")
    return summary
