"""Tests for the command-line interface.

HTTP is mocked with ``respx``; the node store lives in a temporary
workspace directory.
"""

from __future__ import annotations

import httpx
import pytest
import respx
from typer.testing import CliRunner

from cli.main import app
from storyblok_source.db import get_connection, init_db
from storyblok_source.db.nodes import count_by_type, get_node

runner = CliRunner()

API = "https://api.storyblok.com/v1"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Point the node store at a fresh temporary directory."""
    monkeypatch.setattr("storyblok_source.config.settings.workspace_dir", tmp_path)
    monkeypatch.setattr("storyblok_source.config.settings.access_token", "tok")
    monkeypatch.setattr("storyblok_source.config.settings.version", "draft")
    monkeypatch.setattr("storyblok_source.config.settings.data_sources", [])
    monkeypatch.setattr("storyblok_source.config.settings.max_pages", None)
    return tmp_path


def _mock_api(tags_body: dict | None = None) -> None:
    respx.get(f"{API}/cdn/stories").mock(
        return_value=httpx.Response(
            200,
            json={"stories": [{"id": 1, "name": "Home", "content": {"component": "page"}}]},
            headers={"Total": "1", "Per-Page": "10"},
        )
    )
    respx.get(f"{API}/cdn/tags").mock(
        return_value=httpx.Response(
            200,
            json=tags_body or {"tags": [{"id": "news", "name": "news"}]},
            headers={"Total": "1", "Per-Page": "10"},
        )
    )
    respx.get(f"{API}/cdn/datasource_entries").mock(
        return_value=httpx.Response(
            200,
            json={"datasource_entries": [{"id": 7, "name": "red", "value": "#f00"}]},
            headers={"Total": "1", "Per-Page": "10"},
        )
    )


def test_db_init(workspace):
    result = runner.invoke(app, ["db", "init"])
    assert result.exit_code == 0
    assert (workspace / "nodes.db").exists()


def test_fetch_prints_count(workspace):
    with respx.mock:
        _mock_api()
        result = runner.invoke(app, ["fetch", "cdn/tags", "--json"])

    assert result.exit_code == 0
    assert "1 items" in result.stdout
    assert '"name": "news"' in result.stdout


def test_fetch_error_exits_nonzero(workspace):
    with respx.mock:
        respx.get(f"{API}/cdn/stories").mock(return_value=httpx.Response(500))
        result = runner.invoke(app, ["fetch", "cdn/stories"])

    assert result.exit_code == 1
    assert "Error" in result.stdout


def test_source_writes_nodes(workspace):
    with respx.mock:
        _mock_api()
        result = runner.invoke(app, ["source", "--data-source", "colors"])

    assert result.exit_code == 0, result.stdout
    assert "3 nodes written" in result.stdout

    conn = get_connection()
    init_db(conn)
    try:
        assert count_by_type(conn) == {
            "StoryblokDataSourceEntry": 1,
            "StoryblokEntry": 1,
            "StoryblokTag": 1,
        }
        entry = get_node(conn, "storyblokdatasourceentry-7")
        assert entry.data_source == "colors"
        story = get_node(conn, "storyblokentry-1")
        assert story.payload["content"] == '{"component":"page"}'
    finally:
        conn.close()


def test_source_second_run_is_unchanged(workspace):
    with respx.mock:
        _mock_api()
        runner.invoke(app, ["source"])
        result = runner.invoke(app, ["source"])

    assert result.exit_code == 0
    assert "0 nodes written, 2 unchanged" in result.stdout


def test_source_dry_run_writes_nothing(workspace):
    with respx.mock:
        _mock_api()
        result = runner.invoke(app, ["source", "--dry-run"])

    assert result.exit_code == 0
    assert "Dry run: 2 nodes collected" in result.stdout
    assert not (workspace / "nodes.db").exists()


def test_source_malformed_response_exits_nonzero(workspace):
    with respx.mock:
        _mock_api(tags_body={"tags": [], "extra": []})
        result = runner.invoke(app, ["source", "--dry-run"])

    assert result.exit_code == 1
    assert "exactly one key" in result.stdout


def test_source_item_without_id_exits_nonzero(workspace):
    with respx.mock:
        _mock_api(tags_body={"tags": [{"name": "untagged"}]})
        result = runner.invoke(app, ["source", "--dry-run"])

    assert result.exit_code == 1
    assert "[source] Error: StoryblokTag item has no 'id'" in result.stdout


def test_nodes_list_and_show(workspace):
    with respx.mock:
        _mock_api()
        runner.invoke(app, ["source"])

    listed = runner.invoke(app, ["nodes", "list", "--type", "StoryblokTag"])
    assert listed.exit_code == 0
    assert "storybloktag-news" in listed.stdout
    assert "storyblokentry-1" not in listed.stdout

    shown = runner.invoke(app, ["nodes", "show", "storybloktag-news"])
    assert shown.exit_code == 0
    assert '"contentDigest"' in shown.stdout

    missing = runner.invoke(app, ["nodes", "show", "nope"])
    assert missing.exit_code == 1


def test_nodes_stats_empty(workspace):
    result = runner.invoke(app, ["nodes", "stats"])
    assert result.exit_code == 0
    assert "No nodes found." in result.stdout
