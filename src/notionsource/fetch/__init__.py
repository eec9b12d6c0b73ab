"""Block tree fetching: paginated database rows and nested block children."""

from __future__ import annotations

from .block_tree import AsyncBlockTreeFetcher, BlockTreeFetcher

__all__ = [
    "AsyncBlockTreeFetcher",
    "BlockTreeFetcher",
]
