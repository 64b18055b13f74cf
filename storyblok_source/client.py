"""Async HTTP client for the Storyblok content delivery API.

``StoryblokClient.get`` is the only capability the pipeline needs::

    async with StoryblokClient(access_token="...") as client:
        page = await client.get("cdn/stories", {"version": "draft", "page": 1})

Pagination metadata comes from the ``Total`` and ``Per-Page`` response
headers.  Every httpx failure is re-raised as
:class:`~storyblok_source.errors.TransportError`; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import parse_qsl, urlsplit

import httpx

from storyblok_source.config import DEFAULT_BASE_URL, SourceOptions
from storyblok_source.errors import TransportError
from storyblok_source.models import PageResponse

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": "storyblok-source/1.0",
    "Accept": "application/json",
}


def _split_resource(resource_type: str) -> tuple[str, dict[str, Any]]:
    """Split ``path?a=b`` into the path and its query parameters.

    httpx replaces a URL's own query string when ``params=`` is given, so the
    embedded filters have to be carried over explicitly.
    """
    parts = urlsplit(resource_type)
    return parts.path, dict(parse_qsl(parts.query, keep_blank_values=True))


def _header_int(headers: httpx.Headers, name: str) -> Optional[int]:
    raw = headers.get(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class StoryblokClient:
    """Thin async wrapper over :class:`httpx.AsyncClient`.

    Args:
        access_token: Storyblok preview or public token, sent as ``token``.
        base_url: API root, e.g. ``https://api-us.storyblok.com/v1``.
        timeout: Per-request timeout in seconds.
        http_client: Pre-built client to use instead of creating one.  It is
            left open by :meth:`aclose`.
    """

    def __init__(
        self,
        access_token: str = "",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.access_token = access_token
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            headers=_DEFAULT_HEADERS,
            timeout=timeout,
            follow_redirects=True,
        )

    @classmethod
    def from_options(cls, options: SourceOptions) -> StoryblokClient:
        return cls(
            access_token=options.access_token,
            base_url=options.base_url,
            timeout=options.request_timeout,
        )

    async def __aenter__(self) -> StoryblokClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def get(self, resource_type: str, params: dict[str, Any]) -> PageResponse:
        """Fetch one page of *resource_type*.

        *resource_type* may carry its own query string
        (``cdn/datasource_entries?datasource=colors``); it is merged with
        *params*.

        Raises:
            TransportError: On network errors, timeouts, 4xx/5xx responses,
                or a body that is not a JSON object.
        """
        path, query = _split_resource(resource_type)
        query.update(params)
        if self.access_token:
            query["token"] = self.access_token

        logger.debug(f"GET {resource_type} page={params.get('page')}")
        try:
            response = await self._http.get(path, params=query)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise TransportError(f"Request for {resource_type!r} failed: {exc}") from exc
        except ValueError as exc:
            raise TransportError(f"Response for {resource_type!r} is not JSON: {exc}") from exc

        if not isinstance(body, dict):
            raise TransportError(
                f"Response for {resource_type!r} is not a JSON object: {type(body).__name__}"
            )

        per_page = _header_int(response.headers, "per-page")
        if per_page is None:
            per_page = int(params.get("per_page", 0))
        total = _header_int(response.headers, "total")
        if total is None:
            total = sum(len(v) for v in body.values() if isinstance(v, list))

        return PageResponse(data=body, total=total, per_page=per_page)
