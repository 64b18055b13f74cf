"""Fetch Storyblok collections and turn them into content-graph nodes."""

from storyblok_source.config import FetcherConfig, SourceOptions
from storyblok_source.errors import (
    HashingError,
    MalformedResponse,
    PageLimitExceeded,
    SourceError,
    TransportError,
)
from storyblok_source.fetcher import PaginatedFetcher
from storyblok_source.normalizer import build_node, normalize
from storyblok_source.orchestrator import source_nodes

__all__ = [
    "FetcherConfig",
    "SourceOptions",
    "SourceError",
    "MalformedResponse",
    "TransportError",
    "HashingError",
    "PageLimitExceeded",
    "PaginatedFetcher",
    "build_node",
    "normalize",
    "source_nodes",
]
