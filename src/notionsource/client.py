"""Synchronous notionsource client.

:class:`NotionSource` fetches every page of one Notion database, renders
each to a Markdown document and hands the documents to the host build
system.

Usage::

    from notionsource import NotionSource
    from notionsource.sink import InMemorySourceActions

    actions = InMemorySourceActions()
    with NotionSource(token="secret_xxx", database_id="<db_id>") as source:
        source.load_source(actions)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from notionsource.config import NotionSourceConfig
from notionsource.converter.document import DocumentAssembler
from notionsource.errors import NotionSourceIncompleteError
from notionsource.fetch.block_tree import BlockTreeFetcher
from notionsource.models import Document, FetchResult, LoadResult, Record
from notionsource.notion_api.blocks import BlockAPI
from notionsource.notion_api.databases import DatabaseAPI
from notionsource.notion_api.transport import NotionTransport
from notionsource.observability import NoopMetricsHook, get_logger
from notionsource.sink import SourceActions

log = get_logger("notionsource")


def check_complete(config: NotionSourceConfig, result: FetchResult[Record]) -> None:
    """Raise when *result* is partial and ``fail_on_truncation`` is set."""
    if not config.fail_on_truncation or result.complete:
        return
    raise NotionSourceIncompleteError(
        message=f"Fetch incomplete: {len(result.diagnostics)} pagination loop(s) truncated",
        context={
            "records": len(result.items),
            "diagnostics": [d.to_dict() for d in result.diagnostics],
        },
        cause=result.error,
    )


def register_documents(
    config: NotionSourceConfig,
    actions: SourceActions,
    documents: list[Document],
) -> None:
    """Add every document to the ``config.node_type`` collection."""
    collection = actions.add_collection(config.node_type)
    for document in documents:
        collection.add_node(document.to_node())
    log.info(
        "Documents registered",
        extra={
            "extra_fields": {
                "op": "load_source",
                "collection": config.node_type,
                "documents": len(documents),
            }
        },
    )


class NotionSource:
    """Synchronous Notion database source.

    Parameters
    ----------
    token:
        Notion integration token.  **Required** unless *config* carries it.
    config:
        A ready-made :class:`NotionSourceConfig`.  When given, *token* and
        *kwargs* are ignored.
    **kwargs:
        All remaining keyword arguments are forwarded to
        :class:`NotionSourceConfig`.
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
        self._transport = NotionTransport(config)
        self._databases = DatabaseAPI(self._transport)
        self._blocks = BlockAPI(self._transport)
        self._fetcher = BlockTreeFetcher(self._databases, self._blocks, config)
        self._assembler = DocumentAssembler(config)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> NotionSource:
        """Create a source from a build-system options mapping.

        See :meth:`NotionSourceConfig.from_options` for accepted keys.
        """
        return cls(config=NotionSourceConfig.from_options(options))

    @property
    def config(self) -> NotionSourceConfig:
        return self._config

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def fetch_records(self, database_id: str | None = None) -> FetchResult[Record]:
        """Fetch every database row with its block tree attached.

        Raises
        ------
        NotionSourceIncompleteError
            If the fetch was truncated and ``fail_on_truncation`` is set.
        """
        result = self._fetcher.fetch_records(database_id)
        check_complete(self._config, result)
        return result

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def build_document(self, record: Record) -> Document:
        """Render one fetched record to a :class:`Document`."""
        document = self._assembler.assemble(record)
        self._metrics.increment("notionsource.documents_built_total")
        return document

    def load_documents(self, database_id: str | None = None) -> LoadResult:
        """Fetch the database and render every row.

        Returns
        -------
        LoadResult
            Documents in query order plus every fetch diagnostic.
        """
        fetched = self.fetch_records(database_id)
        documents = [self.build_document(record) for record in fetched.items]
        return LoadResult(documents=documents, diagnostics=list(fetched.diagnostics))

    def load_source(self, actions: SourceActions) -> LoadResult:
        """Load every document into the host's ``node_type`` collection."""
        result = self.load_documents()
        register_documents(self._config, actions, result.documents)
        return result

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP transport."""
        self._transport.close()

    def __enter__(self) -> NotionSource:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
