"""notionsource.notion_api -- Notion API transport and endpoint wrappers.

This sub-package provides:

* :mod:`.retries` -- Retry policy and exponential backoff.
* :mod:`.transport` -- HTTP transport with auth headers and retries.
* :mod:`.databases` -- Database query wrappers.
* :mod:`.blocks` -- Block children wrappers.
"""

from __future__ import annotations

from .blocks import AsyncBlockAPI, BlockAPI
from .databases import AsyncDatabaseAPI, DatabaseAPI
from .retries import RETRYABLE_STATUSES, RetryPolicy
from .transport import AsyncNotionTransport, NotionTransport

__all__ = [
    "AsyncBlockAPI",
    "AsyncDatabaseAPI",
    "AsyncNotionTransport",
    "BlockAPI",
    "DatabaseAPI",
    "NotionTransport",
    "RETRYABLE_STATUSES",
    "RetryPolicy",
]
