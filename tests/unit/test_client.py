"""End-to-end tests for NotionSource and AsyncNotionSource.

HTTP is stubbed at the httpx client level; requests are routed by path to
canned Notion responses.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from notionsource import (
    AsyncNotionSource,
    InMemorySourceActions,
    NotionSource,
    NotionSourceConfig,
    NotionSourceIncompleteError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _span(content):
    return {
        "type": "text",
        "text": {"content": content, "link": None},
        "annotations": {"color": "default"},
        "plain_text": content,
    }


def page_obj(page_id, title):
    return {
        "object": "page",
        "id": page_id,
        "archived": False,
        "created_time": "2021-06-01T00:00:00.000Z",
        "last_edited_time": "2021-06-02T00:00:00.000Z",
        "properties": {"Name": {"id": "title", "type": "title", "title": [_span(title)]}},
    }


def paragraph_obj(block_id, text):
    return {
        "object": "block",
        "id": block_id,
        "type": "paragraph",
        "has_children": False,
        "paragraph": {"rich_text": [_span(text)]},
    }


def listing(results, next_cursor=None):
    return {"object": "list", "results": results, "next_cursor": next_cursor,
            "has_more": next_cursor is not None}


def json_response(status, body):
    resp = httpx.Response(status, content=json.dumps(body).encode())
    resp.request = httpx.Request("GET", "https://api.notion.com/v1/test")
    return resp


class Router:
    """Map ``(method, path, cursor)`` to a response."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, method, path, **kwargs):
        cursor = (kwargs.get("json") or kwargs.get("params") or {}).get("start_cursor")
        self.calls.append((method, path, cursor))
        status, body = self.routes.get((method, path, cursor), (200, listing([])))
        return json_response(status, body)


def default_routes():
    return {
        ("POST", "/databases/db-1/query", None): (200, listing([page_obj("p1", "Hi")])),
        ("GET", "/blocks/p1/children", None): (200, listing([paragraph_obj("b1", "World")])),
    }


def make_source(**overrides):
    config = dict(
        token="secret_test_1234",
        database_id="db-1",
        retry_max_attempts=1,
        retry_base_delay=0.0,
        retry_jitter=False,
    )
    config.update(overrides)
    return NotionSource(**config)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_token_required(self):
        with pytest.raises(ValueError, match="token"):
            NotionSource()

    def test_config_object(self):
        config = NotionSourceConfig(token="t", database_id="d")
        with NotionSource(config=config) as source:
            assert source.config is config

    def test_from_options(self):
        with NotionSource.from_options({"token": "t", "parentContainerId": "d"}) as source:
            assert source.config.database_id == "d"


# ---------------------------------------------------------------------------
# Sync client
# ---------------------------------------------------------------------------

class TestNotionSource:
    def test_title_and_paragraph_document(self):
        source = make_source()
        with patch.object(source._transport._client, "request", side_effect=Router(default_routes())):
            result = source.load_documents()
        [doc] = result.documents
        assert doc.markdown.startswith("---\ntitle: Hi\n---\n\nWorld\n\n")
        assert doc.id == "NotionRecords-p1"
        assert result.complete

    def test_load_source_registers_nodes(self):
        source = make_source(node_type="Posts")
        actions = InMemorySourceActions()
        with patch.object(source._transport._client, "request", side_effect=Router(default_routes())):
            source.load_source(actions)
        collection = actions.collections["Posts"]
        node = collection.nodes["Posts-p1"]
        assert node["title"] == "Hi"
        assert json.loads(node["json"])["children"][0]["id"] == "b1"

    def test_document_order_follows_query_order(self):
        routes = {
            ("POST", "/databases/db-1/query", None): (200, listing([page_obj("p1", "A")], "n")),
            ("POST", "/databases/db-1/query", "n"): (200, listing([page_obj("p2", "B")])),
        }
        source = make_source()
        with patch.object(source._transport._client, "request", side_effect=Router(routes)):
            result = source.load_documents()
        assert [d.title for d in result.documents] == ["A", "B"]

    def test_partial_fetch_is_returned_with_diagnostics(self):
        routes = default_routes()
        routes[("GET", "/blocks/p1/children", None)] = (
            200,
            listing([paragraph_obj("b1", "World")], "c2"),
        )
        routes[("GET", "/blocks/p1/children", "c2")] = (404, {"message": "gone"})
        source = make_source()
        with patch.object(source._transport._client, "request", side_effect=Router(routes)):
            result = source.load_documents()
        assert result.documents[0].markdown.endswith("World\n\n")
        assert not result.complete
        assert not result.documents[0].complete
        assert result.diagnostics[0].code == "NOT_FOUND"

    def test_fail_on_truncation_raises(self):
        routes = default_routes()
        routes[("GET", "/blocks/p1/children", None)] = (500, {"message": "boom"})
        source = make_source(fail_on_truncation=True)
        with (
            patch.object(source._transport._client, "request", side_effect=Router(routes)),
            pytest.raises(NotionSourceIncompleteError) as exc_info,
        ):
            source.load_documents()
        assert exc_info.value.context["records"] == 1
        assert exc_info.value.context["diagnostics"][0]["code"] == "RETRY_EXHAUSTED"

    def test_build_document_without_front_matter(self):
        source = make_source(props_to_frontmatter=False)
        with patch.object(source._transport._client, "request", side_effect=Router(default_routes())):
            [record] = source.fetch_records().items
        assert source.build_document(record).markdown == "World\n\n"

    def test_close(self):
        source = make_source()
        source.close()
        assert source._transport._client.is_closed


# ---------------------------------------------------------------------------
# Async client
# ---------------------------------------------------------------------------

class TestAsyncNotionSource:
    @pytest.mark.asyncio
    async def test_load_source(self):
        source = AsyncNotionSource(
            token="secret_test_1234", database_id="db-1", retry_max_attempts=1
        )
        router = Router(default_routes())
        actions = InMemorySourceActions()
        with patch.object(source._transport._client, "request", new=AsyncMock(side_effect=router)):
            result = await source.load_source(actions)
        await source.close()
        assert result.complete
        node = actions.collections["NotionRecords"].nodes["NotionRecords-p1"]
        assert node["markdown"] == "---\ntitle: Hi\n---\n\nWorld\n\n"

    @pytest.mark.asyncio
    async def test_fail_on_truncation(self):
        routes = default_routes()
        routes[("POST", "/databases/db-1/query", None)] = (403, {"message": "no access"})
        async with AsyncNotionSource(
            token="t", database_id="db-1", retry_max_attempts=1, fail_on_truncation=True
        ) as source:
            with (
                patch.object(source._transport._client, "request", new=AsyncMock(side_effect=Router(routes))),
                pytest.raises(NotionSourceIncompleteError),
            ):
                await source.load_documents()

    def test_from_options(self):
        source = AsyncNotionSource.from_options({"token": "t", "databaseId": "d"})
        assert source.config.database_id == "d"
