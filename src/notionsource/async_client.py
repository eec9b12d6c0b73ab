"""Asynchronous notionsource client.

:class:`AsyncNotionSource` mirrors :class:`NotionSource` but every I/O
method is a coroutine.  With ``max_concurrent_records > 1`` the block trees
of several records are fetched at once; document order is unchanged.

Usage::

    import asyncio
    from notionsource import AsyncNotionSource

    async def main():
        async with AsyncNotionSource(token="secret_xxx", database_id="<db>") as source:
            result = await source.load_documents()
            print(len(result.documents), result.complete)

    asyncio.run(main())
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from notionsource.client import check_complete, register_documents
from notionsource.config import NotionSourceConfig
from notionsource.converter.document import DocumentAssembler
from notionsource.fetch.block_tree import AsyncBlockTreeFetcher
from notionsource.models import Document, FetchResult, LoadResult, Record
from notionsource.notion_api.blocks import AsyncBlockAPI
from notionsource.notion_api.databases import AsyncDatabaseAPI
from notionsource.notion_api.transport import AsyncNotionTransport
from notionsource.observability import NoopMetricsHook
from notionsource.sink import SourceActions


class AsyncNotionSource:
    """Asynchronous Notion database source.

    Parameters
    ----------
    token:
        Notion integration token.  **Required** unless *config* carries it.
    config:
        A ready-made :class:`NotionSourceConfig`.
    **kwargs:
        Forwarded to :class:`NotionSourceConfig`.
    """

    def __init__(
        self,
        token: str = "",
        *,
        config: NotionSourceConfig | None = None,
        **kwargs: Any,
    ) -> None:
        if config is None:
            config = NotionSourceConfig(token=token, **kwargs)
        if not config.token:
            raise ValueError("token is required")
        self._config = config
        self._metrics = config.metrics if config.metrics is not None else NoopMetricsHook()
        self._transport = AsyncNotionTransport(config)
        self._databases = AsyncDatabaseAPI(self._transport)
        self._blocks = AsyncBlockAPI(self._transport)
        self._fetcher = AsyncBlockTreeFetcher(self._databases, self._blocks, config)
        self._assembler = DocumentAssembler(config)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> AsyncNotionSource:
        """Create a source from a build-system options mapping."""
        return cls(config=NotionSourceConfig.from_options(options))

    @property
    def config(self) -> NotionSourceConfig:
        return self._config

    async def fetch_records(self, database_id: str | None = None) -> FetchResult[Record]:
        """Fetch every database row with its block tree attached (async).

        See :meth:`NotionSource.fetch_records`.
        """
        result = await self._fetcher.fetch_records(database_id)
        check_complete(self._config, result)
        return result

    def build_document(self, record: Record) -> Document:
        """Render one fetched record.  Rendering does no I/O."""
        document = self._assembler.assemble(record)
        self._metrics.increment("notionsource.documents_built_total")
        return document

    async def load_documents(self, database_id: str | None = None) -> LoadResult:
        """Fetch the database and render every row (async)."""
        fetched = await self.fetch_records(database_id)
        documents = [self.build_document(record) for record in fetched.items]
        return LoadResult(documents=documents, diagnostics=list(fetched.diagnostics))

    async def load_source(self, actions: SourceActions) -> LoadResult:
        """Load every document into the host's ``node_type`` collection."""
        result = await self.load_documents()
        register_documents(self._config, actions, result.documents)
        return result

    async def close(self) -> None:
        """Close the underlying HTTP transport."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncNotionSource:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
