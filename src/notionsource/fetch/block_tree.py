"""Materialise database rows and their nested block trees.

Two cursor loops share one shape: request a page, keep its ``results``,
follow ``next_cursor`` while ``has_more`` is set.  The database loop turns
each row into a :class:`Record` and fetches its block tree before moving on;
the children loop descends depth-first into every block that reports
``has_children`` before appending the page, so a parent's children are
always complete and in remote order.

When a request or response fails (:class:`NotionSourceAPIError`), the loop
stops as if the remote had no more pages.  The pages already read are kept,
the result is marked ``TerminationReason.ERROR`` and a
:class:`FetchDiagnostic` is recorded so callers can decide whether partial
data is acceptable.  Malformed objects and runaway nesting raise.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from notionsource.config import NotionSourceConfig
from notionsource.errors import (
    NotionSourceAPIError,
    NotionSourceDepthError,
    NotionSourceResponseError,
)
from notionsource.models import (
    Block,
    FetchDiagnostic,
    FetchResult,
    Record,
    TerminationReason,
)
from notionsource.notion_api.blocks import AsyncBlockAPI, BlockAPI
from notionsource.notion_api.databases import AsyncDatabaseAPI, DatabaseAPI
from notionsource.observability import NoopMetricsHook, get_logger

log = get_logger("notionsource.fetch")

T = TypeVar("T")

DATABASE = "database"
BLOCK = "block"


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _page_results(data: Mapping[str, Any], resource: str, resource_id: str) -> list[dict]:
    results = data.get("results")
    if not isinstance(results, list):
        raise NotionSourceResponseError(
            message=f"{resource} {resource_id} listing has no results array",
            context={"path": resource_id, "resource": resource},
        )
    return results


def _next_cursor(data: Mapping[str, Any], resource: str, resource_id: str) -> str | None:
    """Return the cursor of the next page, or ``None`` when exhausted."""
    if not data.get("has_more", False):
        return None
    cursor = data.get("next_cursor")
    if not cursor:
        raise NotionSourceResponseError(
            message=f"{resource} {resource_id} listing has more pages but no next_cursor",
            context={"path": resource_id, "resource": resource},
        )
    return cursor


class _FetcherBase:
    def __init__(self, config: NotionSourceConfig) -> None:
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()

    def _check_depth(self, block_id: str, depth: int) -> None:
        if depth > self._config.max_depth:
            raise NotionSourceDepthError(
                message=f"Block {block_id} is nested deeper than {self._config.max_depth} levels",
                context={"block_id": block_id, "depth": depth, "max_depth": self._config.max_depth},
            )

    def _database_id(self, database_id: str | None) -> str:
        resolved = database_id or self._config.database_id
        if not resolved:
            raise ValueError("database_id is required to fetch records")
        return resolved

    def _page_read(self, result: FetchResult, resource: str) -> None:
        result.pages += 1
        self._metrics.increment("notionsource.pages_fetched_total", tags={"resource": resource})

    def _truncate(
        self,
        result: FetchResult,
        exc: NotionSourceAPIError,
        resource: str,
        resource_id: str,
    ) -> None:
        result.reason = TerminationReason.ERROR
        result.error = exc
        code = getattr(exc.code, "value", exc.code)
        result.diagnostics.append(
            FetchDiagnostic(
                code=code,
                message=f"{resource} {resource_id} truncated after {result.pages} page(s): {exc.message}",
                context={
                    "resource": resource,
                    "resource_id": resource_id,
                    "pages_fetched": result.pages,
                    "items_fetched": len(result.items),
                },
            )
        )
        self._metrics.increment("notionsource.fetch_truncated_total", tags={"resource": resource})
        log.warning(
            "Pagination truncated",
            extra={
                "extra_fields": {
                    "op": "paginate",
                    "resource": resource,
                    "resource_id": resource_id,
                    "pages": result.pages,
                    "items": len(result.items),
                    "error_code": code,
                    "error": exc.message,
                }
            },
        )


# ---------------------------------------------------------------------------
# Sync fetcher
# ---------------------------------------------------------------------------

class BlockTreeFetcher(_FetcherBase):
    """Fetch database rows and their block trees, one request at a time.

    Parameters
    ----------
    databases:
        Database API used for the row listing.
    blocks:
        Block API used for every children listing.
    config:
        Supplies ``database_id``, ``page_size`` and ``max_depth``.
    """

    def __init__(self, databases: DatabaseAPI, blocks: BlockAPI, config: NotionSourceConfig) -> None:
        super().__init__(config)
        self._databases = databases
        self._blocks = blocks

    def fetch_records(self, database_id: str | None = None) -> FetchResult[Record]:
        """Fetch every row of a database with its block tree attached.

        Parameters
        ----------
        database_id:
            Overrides ``config.database_id``.

        Returns
        -------
        FetchResult[Record]
            Records in query order.  ``diagnostics`` covers the row listing
            and every block tree.
        """
        database_id = self._database_id(database_id)
        page_size = self._config.page_size
        result = self._paginate(
            DATABASE,
            database_id,
            lambda cursor: self._databases.query(database_id, cursor, page_size),
            self._materialize_records,
        )
        log.info(
            "Records fetched",
            extra={
                "extra_fields": {
                    "op": "fetch_records",
                    "database_id": database_id,
                    "records": len(result.items),
                    "pages": result.pages,
                    "complete": result.complete,
                }
            },
        )
        return result

    def fetch_children(self, block_id: str, depth: int = 0) -> FetchResult[Block]:
        """Fetch the direct children of a block, each with its own subtree.

        Parameters
        ----------
        block_id:
            A block or page ID.
        depth:
            Nesting level of the children being fetched (0 for a page's
            top-level content).

        Raises
        ------
        NotionSourceDepthError
            If *depth* exceeds ``config.max_depth``.
        NotionSourceMalformedError
            If a child object lacks ``id`` or ``type``.
        """
        self._check_depth(block_id, depth)
        page_size = self._config.page_size
        return self._paginate(
            BLOCK,
            block_id,
            lambda cursor: self._blocks.list_children(block_id, cursor, page_size),
            lambda items, diagnostics: self._materialize_blocks(items, depth, diagnostics),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _paginate(
        self,
        resource: str,
        resource_id: str,
        fetch_page: Callable[[str | None], dict],
        on_page: Callable[[list[dict], list[FetchDiagnostic]], list[T]],
    ) -> FetchResult[T]:
        result: FetchResult[T] = FetchResult()
        cursor: str | None = None
        while True:
            try:
                data = fetch_page(cursor)
                items = _page_results(data, resource, resource_id)
            except NotionSourceAPIError as exc:
                self._truncate(result, exc, resource, resource_id)
                break

            self._page_read(result, resource)
            result.items.extend(on_page(items, result.diagnostics))

            try:
                cursor = _next_cursor(data, resource, resource_id)
            except NotionSourceAPIError as exc:
                self._truncate(result, exc, resource, resource_id)
                break
            if cursor is None:
                break
        return result

    def _materialize_records(
        self, items: list[dict], diagnostics: list[FetchDiagnostic]
    ) -> list[Record]:
        records = []
        for item in items:
            record = Record.from_api(item)
            tree = self.fetch_children(record.id)
            record.children = tree.items
            record.diagnostics = list(tree.diagnostics)
            diagnostics.extend(tree.diagnostics)
            records.append(record)
        return records

    def _materialize_blocks(
        self, items: list[dict], depth: int, diagnostics: list[FetchDiagnostic]
    ) -> list[Block]:
        blocks = []
        for item in items:
            block = Block.from_api(item)
            if block.has_children:
                subtree = self.fetch_children(block.id, depth + 1)
                block.children = subtree.items
                diagnostics.extend(subtree.diagnostics)
            blocks.append(block)
        return blocks


# ---------------------------------------------------------------------------
# Async fetcher
# ---------------------------------------------------------------------------

class AsyncBlockTreeFetcher(_FetcherBase):
    """Asynchronous counterpart of :class:`BlockTreeFetcher`.

    Up to ``config.max_concurrent_records`` records of one result page have
    their block trees fetched concurrently.  Record order and per-parent
    child order are unaffected.
    """

    def __init__(
        self,
        databases: AsyncDatabaseAPI,
        blocks: AsyncBlockAPI,
        config: NotionSourceConfig,
    ) -> None:
        super().__init__(config)
        self._databases = databases
        self._blocks = blocks
        self._semaphore = asyncio.Semaphore(config.max_concurrent_records)

    async def fetch_records(self, database_id: str | None = None) -> FetchResult[Record]:
        """Fetch every row of a database with its block tree attached (async).

        See :meth:`BlockTreeFetcher.fetch_records`.
        """
        database_id = self._database_id(database_id)
        page_size = self._config.page_size
        result = await self._paginate(
            DATABASE,
            database_id,
            lambda cursor: self._databases.query(database_id, cursor, page_size),
            self._materialize_records,
        )
        log.info(
            "Records fetched",
            extra={
                "extra_fields": {
                    "op": "fetch_records",
                    "database_id": database_id,
                    "records": len(result.items),
                    "pages": result.pages,
                    "complete": result.complete,
                }
            },
        )
        return result

    async def fetch_children(self, block_id: str, depth: int = 0) -> FetchResult[Block]:
        """Fetch the direct children of a block with their subtrees (async).

        See :meth:`BlockTreeFetcher.fetch_children`.
        """
        self._check_depth(block_id, depth)
        page_size = self._config.page_size

        async def on_page(items: list[dict], diagnostics: list[FetchDiagnostic]) -> list[Block]:
            return await self._materialize_blocks(items, depth, diagnostics)

        return await self._paginate(
            BLOCK,
            block_id,
            lambda cursor: self._blocks.list_children(block_id, cursor, page_size),
            on_page,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _paginate(
        self,
        resource: str,
        resource_id: str,
        fetch_page: Callable[[str | None], Awaitable[dict]],
        on_page: Callable[[list[dict], list[FetchDiagnostic]], Awaitable[list[T]]],
    ) -> FetchResult[T]:
        result: FetchResult[T] = FetchResult()
        cursor: str | None = None
        while True:
            try:
                data = await fetch_page(cursor)
                items = _page_results(data, resource, resource_id)
            except NotionSourceAPIError as exc:
                self._truncate(result, exc, resource, resource_id)
                break

            self._page_read(result, resource)
            result.items.extend(await on_page(items, result.diagnostics))

            try:
                cursor = _next_cursor(data, resource, resource_id)
            except NotionSourceAPIError as exc:
                self._truncate(result, exc, resource, resource_id)
                break
            if cursor is None:
                break
        return result

    async def _materialize_record(self, record: Record) -> Record:
        async with self._semaphore:
            tree = await self.fetch_children(record.id)
        record.children = tree.items
        record.diagnostics = list(tree.diagnostics)
        return record

    async def _materialize_records(
        self, items: list[dict], diagnostics: list[FetchDiagnostic]
    ) -> list[Record]:
        records = [Record.from_api(item) for item in items]
        tasks = [asyncio.ensure_future(self._materialize_record(r)) for r in records]
        try:
            records = list(await asyncio.gather(*tasks))
        except BaseException:
            # gather leaves the sibling tasks running when one of them fails
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        for record in records:
            diagnostics.extend(record.diagnostics)
        return records

    async def _materialize_blocks(
        self, items: list[dict], depth: int, diagnostics: list[FetchDiagnostic]
    ) -> list[Block]:
        blocks = []
        for item in items:
            block = Block.from_api(item)
            if block.has_children:
                subtree = await self.fetch_children(block.id, depth + 1)
                block.children = subtree.items
                diagnostics.extend(subtree.diagnostics)
            blocks.append(block)
        return blocks
