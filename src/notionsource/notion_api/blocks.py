"""Block API wrappers for the Notion API.

Provides :class:`BlockAPI` (sync) and :class:`AsyncBlockAPI` (async) thin
wrappers around ``GET /blocks/{id}/children``.  A page ID is also a block
ID, so the same call lists a page's top-level content.
"""

from __future__ import annotations

from typing import Any

from notionsource.config import MAX_PAGE_SIZE

from .transport import AsyncNotionTransport, NotionTransport


def _children_params(start_cursor: str | None, page_size: int) -> dict[str, Any]:
    params: dict[str, Any] = {"page_size": page_size}
    if start_cursor:
        params["start_cursor"] = start_cursor
    return params


class BlockAPI:
    """Synchronous wrapper for the Notion Blocks API.

    Parameters
    ----------
    transport:
        A configured :class:`NotionTransport` instance.
    """

    def __init__(self, transport: NotionTransport) -> None:
        self._transport = transport

    def list_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Fetch one page of a block's direct children.

        Parameters
        ----------
        block_id:
            The UUID of the parent block (or page).
        start_cursor:
            ``next_cursor`` from the previous page, or ``None`` for the first.
        page_size:
            Number of children to request (at most 100).

        Returns
        -------
        dict
            ``{"results": [...], "next_cursor": ..., "has_more": ...}``.
        """
        return self._transport.request(
            "GET",
            f"/blocks/{block_id}/children",
            params=_children_params(start_cursor, page_size),
        )


class AsyncBlockAPI:
    """Asynchronous wrapper for the Notion Blocks API.

    Mirrors :class:`BlockAPI` but all methods are coroutines.
    """

    def __init__(self, transport: AsyncNotionTransport) -> None:
        self._transport = transport

    async def list_children(
        self,
        block_id: str,
        start_cursor: str | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Fetch one page of a block's direct children (async).

        See :meth:`BlockAPI.list_children` for parameter documentation.
        """
        return await self._transport.request(
            "GET",
            f"/blocks/{block_id}/children",
            params=_children_params(start_cursor, page_size),
        )
