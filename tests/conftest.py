"""Shared fixtures.

``FakeCmsClient`` stands in for the Storyblok HTTP client: it serves
pre-built pages per resource type and records every request, so fetch and
orchestration tests run without any network access.
"""

from __future__ import annotations

from typing import Any, Union

import pytest

from storyblok_source.models import PageResponse


def make_page(key: str, items: list[dict], total: int, per_page: int = 10) -> PageResponse:
    return PageResponse(data={key: items}, total=total, per_page=per_page)


def make_items(prefix: str, start: int, n: int) -> list[dict]:
    return [{"id": start + i, "name": f"{prefix}-{start + i}"} for i in range(n)]


class FakeCmsClient:
    """Serve queued pages (or raise queued exceptions) per resource type."""

    def __init__(self, pages: dict[str, list[Union[PageResponse, Exception]]]) -> None:
        self.pages = {k: list(v) for k, v in pages.items()}
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def get(self, resource_type: str, params: dict[str, Any]) -> PageResponse:
        self.calls.append((resource_type, dict(params)))
        result = self.pages[resource_type][params["page"] - 1]
        if isinstance(result, Exception):
            raise result
        return result

    def pages_requested(self, resource_type: str) -> list[int]:
        return [p["page"] for r, p in self.calls if r == resource_type]


@pytest.fixture()
def status_log() -> list[dict]:
    return []


@pytest.fixture()
def report_status(status_log: list[dict]):
    return status_log.append
