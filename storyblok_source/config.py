"""Centralised settings for the Storyblok source.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

Two immutable configuration objects are derived from :data:`settings` and
passed explicitly to the pipeline:

``SourceOptions``
    Everything the orchestrator needs (protocol version, datasource names,
    client-construction fields).
``FetcherConfig``
    The subset shared by every paginated fetch of one orchestration run.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

# Page size used for every collection request.
PER_PAGE = 10

DEFAULT_BASE_URL = "https://api.storyblok.com/v1"


def _split_names(raw: str) -> list[str]:
    """Parse a comma-separated env value into a list of non-empty names."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _optional_int(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    return int(raw)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Storyblok API
    # ------------------------------------------------------------------
    access_token: str = field(
        default_factory=lambda: os.environ.get("STORYBLOK_ACCESS_TOKEN", "")
    )
    version: str = field(
        default_factory=lambda: os.environ.get("STORYBLOK_VERSION", "published")
    )
    data_sources: list[str] = field(
        default_factory=lambda: _split_names(os.environ.get("STORYBLOK_DATA_SOURCES", ""))
    )
    base_url: str = field(
        default_factory=lambda: os.environ.get("STORYBLOK_BASE_URL", DEFAULT_BASE_URL)
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    max_pages: int | None = field(
        default_factory=lambda: _optional_int(os.environ.get("STORYBLOK_MAX_PAGES"))
    )

    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("STORYBLOK_WORKSPACE", Path.home() / ".storyblok_source")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite node store."""
        return self.workspace_dir / "nodes.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class FetcherConfig:
    """Fixed request parameters shared by every paginated fetch."""

    version: str
    per_page: int = PER_PAGE
    max_pages: int | None = None

    def base_params(self) -> dict[str, Any]:
        return {"version": self.version, "per_page": self.per_page}


@dataclass(frozen=True)
class SourceOptions:
    """Immutable orchestrator configuration."""

    version: str
    data_sources: tuple[str, ...] = ()
    access_token: str = ""
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 30.0
    max_pages: int | None = None

    @classmethod
    def from_settings(cls, s: Settings) -> SourceOptions:
        return cls(
            version=s.version,
            data_sources=tuple(s.data_sources),
            access_token=s.access_token,
            base_url=s.base_url,
            request_timeout=s.request_timeout,
            max_pages=s.max_pages,
        )

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> SourceOptions:
        """Build options from a plugin-style mapping.

        Accepts ``version``, ``dataSources`` and ``accessToken`` as well as
        their snake_case spellings.  ``dataSources`` defaults to empty.
        """
        data_sources = options.get("dataSources", options.get("data_sources")) or ()
        access_token = options.get("accessToken", options.get("access_token", ""))
        return cls(
            version=options["version"],
            data_sources=tuple(data_sources),
            access_token=access_token,
            base_url=options.get("base_url", DEFAULT_BASE_URL),
            request_timeout=float(options.get("request_timeout", 30.0)),
            max_pages=options.get("max_pages"),
        )

    def fetcher_config(self) -> FetcherConfig:
        return FetcherConfig(version=self.version, max_pages=self.max_pages)


# Module-level singleton - import this everywhere:
#   from storyblok_source.config import settings
settings = Settings()
