"""Tests for the database and block endpoint wrappers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from notionsource.notion_api.blocks import AsyncBlockAPI, BlockAPI
from notionsource.notion_api.databases import AsyncDatabaseAPI, DatabaseAPI


class TestDatabaseAPI:
    def test_first_page_has_no_cursor(self):
        transport = MagicMock()
        transport.request.return_value = {"results": []}
        assert DatabaseAPI(transport).query("db-1") == {"results": []}
        transport.request.assert_called_once_with(
            "POST", "/databases/db-1/query", json={"page_size": 100}
        )

    def test_cursor_and_page_size_are_sent(self):
        transport = MagicMock()
        DatabaseAPI(transport).query("db-1", "cur", 25)
        transport.request.assert_called_once_with(
            "POST", "/databases/db-1/query", json={"page_size": 25, "start_cursor": "cur"}
        )

    @pytest.mark.asyncio
    async def test_async_query(self):
        transport = MagicMock()
        transport.request = AsyncMock(return_value={"results": [1]})
        result = await AsyncDatabaseAPI(transport).query("db-2", "c")
        assert result == {"results": [1]}
        transport.request.assert_awaited_once_with(
            "POST", "/databases/db-2/query", json={"page_size": 100, "start_cursor": "c"}
        )


class TestBlockAPI:
    def test_list_children(self):
        transport = MagicMock()
        BlockAPI(transport).list_children("blk")
        transport.request.assert_called_once_with(
            "GET", "/blocks/blk/children", params={"page_size": 100}
        )

    def test_list_children_with_cursor(self):
        transport = MagicMock()
        BlockAPI(transport).list_children("blk", "next", 10)
        transport.request.assert_called_once_with(
            "GET", "/blocks/blk/children", params={"page_size": 10, "start_cursor": "next"}
        )

    @pytest.mark.asyncio
    async def test_async_list_children(self):
        transport = MagicMock()
        transport.request = AsyncMock(return_value={"results": []})
        await AsyncBlockAPI(transport).list_children("blk")
        transport.request.assert_awaited_once_with(
            "GET", "/blocks/blk/children", params={"page_size": 100}
        )
