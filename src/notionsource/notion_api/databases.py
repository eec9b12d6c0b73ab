"""Database API wrappers for the Notion API.

Provides :class:`DatabaseAPI` (sync) and :class:`AsyncDatabaseAPI` (async)
thin wrappers around ``POST /databases/{id}/query``.  Each call returns one
page of results; the block tree fetcher drives the cursor loop so it can
decide what to do when a page fails.
"""

from __future__ import annotations

from typing import Any

from notionsource.config import MAX_PAGE_SIZE

from .transport import AsyncNotionTransport, NotionTransport


def _query_body(start_cursor: str | None, page_size: int) -> dict[str, Any]:
    body: dict[str, Any] = {"page_size": page_size}
    if start_cursor:
        body["start_cursor"] = start_cursor
    return body


class DatabaseAPI:
    """Synchronous wrapper for the Notion Databases API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def query(
        self,
        database_id: str,
        start_cursor: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Fetch one page of a database's rows.

        Parameters
        ----------
        database_id:
            The UUID of the database.
        start_cursor:
            ``next_cursor`` from the previous page, or ``None`` for the first.
        page_size:
            Number of rows to request (at most 100).

        Returns
        -------
        dict
            ``{"results": [...], "next_cursor": ..., "has_more": ...}``.
        """
        return self._transport.request(
            "POST",
            f"/databases/{database_id}/query",
            json=_query_body(start_cursor, page_size),
        )


class AsyncDatabaseAPI:
    """Asynchronous wrapper for the Notion Databases API.

    Mirrors :class:`DatabaseAPI` but all methods are coroutines.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def query(
        self,
        database_id: str,
        start_cursor: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Fetch one page of a database's rows (async).

        See :meth:`DatabaseAPI.query` for parameter documentation.
        """
        return await self._transport.request(
            "POST",
            f"/databases/{database_id}/query",
            json=_query_body(start_cursor, page_size),
        )
