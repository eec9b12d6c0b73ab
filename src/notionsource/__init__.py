"""notionsource -- Notion databases as Markdown documents for static sites.

Public re-exports
-----------------

* **Clients:** :class:`NotionSource`, :class:`AsyncNotionSource`
* **Configuration:** :class:`NotionSourceConfig`
* **Errors:** Every :class:`NotionSourceError` subclass and :class:`ErrorCode`
* **Models:** Records, blocks, fetch results and documents
* **Host boundary:** :class:`SourceActions`, :class:`InMemorySourceActions`

Usage::

    from notionsource import InMemorySourceActions, NotionSource

    actions = InMemorySourceActions()
    with NotionSource(token="secret_xxx", database_id="<db_id>") as source:
        result = source.load_source(actions)

    for node in actions.collections["NotionRecords"].nodes.values():
        print(node["title"])
"""

from __future__ import annotations

from notionsource.async_client import AsyncNotionSource

# ── Clients ────────────────────────────────────────────────────────────
from notionsource.client import NotionSource

# ── Configuration ───────────────────────────────────────────────────────
from notionsource.config import OPTION_ALIASES, NotionSourceConfig

# ── Errors ──────────────────────────────────────────────────────────────
from notionsource.errors import (
    ErrorCode,
    NotionSourceAPIError,
    NotionSourceAuthError,
    NotionSourceDepthError,
    NotionSourceError,
    NotionSourceIncompleteError,
    NotionSourceMalformedError,
    NotionSourceNetworkError,
    NotionSourceNotFoundError,
    NotionSourcePermissionError,
    NotionSourceResponseError,
    NotionSourceRetryExhaustedError,
    NotionSourceValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notionsource.models import (
    Block,
    BlockType,
    Document,
    FetchDiagnostic,
    FetchResult,
    LoadResult,
    NormalizedProperty,
    Record,
    SpanContext,
    TerminationReason,
)

# ── Host boundary ───────────────────────────────────────────────────────
from notionsource.sink import (
    Collection,
    InMemoryCollection,
    InMemorySourceActions,
    SourceActions,
)

__all__ = [
    # Clients
    "AsyncNotionSource",
    "NotionSource",
    # Configuration
    "NotionSourceConfig",
    "OPTION_ALIASES",
    # Errors
    "ErrorCode",
    "NotionSourceAPIError",
    "NotionSourceAuthError",
    "NotionSourceDepthError",
    "NotionSourceError",
    "NotionSourceIncompleteError",
    "NotionSourceMalformedError",
    "NotionSourceNetworkError",
    "NotionSourceNotFoundError",
    "NotionSourcePermissionError",
    "NotionSourceResponseError",
    "NotionSourceRetryExhaustedError",
    "NotionSourceValidationError",
    # Models
    "Block",
    "BlockType",
    "Document",
    "FetchDiagnostic",
    "FetchResult",
    "LoadResult",
    "NormalizedProperty",
    "Record",
    "SpanContext",
    "TerminationReason",
    # Host boundary
    "Collection",
    "InMemoryCollection",
    "InMemorySourceActions",
    "SourceActions",
]

__version__ = "0.1.0"
