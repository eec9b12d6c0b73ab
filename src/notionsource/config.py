"""Configuration for notionsource.

:class:`NotionSourceConfig` is a dataclass that captures every tuneable
knob.  Instances are passed to both :class:`NotionSource` and
:class:`AsyncNotionSource`.

Build systems usually hand over a plain options mapping with camelCase keys;
:meth:`NotionSourceConfig.from_options` translates those into fields.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# ---------------------------------------------------------------------------
# Option aliases
# ---------------------------------------------------------------------------

OPTION_ALIASES: dict[str, str] = {
    "apiVersion": "notion_version",
    "notionVersion": "notion_version",
    "token": "token",
    "parentContainerId": "database_id",
    "databaseId": "database_id",
    "propsToFrontmatter": "props_to_frontmatter",
    "lowerTitleLevel": "lower_title_level",
    "nodeTypeLabel": "node_type",
    "notionNodeType": "node_type",
}
"""Maps build-system option names to :class:`NotionSourceConfig` fields."""

MAX_PAGE_SIZE = 100


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class NotionSourceConfig:
    """Complete configuration for a notionsource client.

    Parameters
    ----------
    token:
        Notion integration token.  **Required.**  Never logged.
    notion_version:
        Value of the ``Notion-Version`` header sent with every request.
    database_id:
        The database whose pages become documents.  Required to fetch.
    props_to_frontmatter:
        Prepend the title and normalised properties to each document as
        YAML front matter.
    lower_title_level:
        Demote every heading by one level so the page title can sit above
        them as the only level-1 heading.
    node_type:
        Collection name registered with the host build system.  Also the
        prefix of every document identifier.
    base_url:
        API root URL.  Override for proxy or testing environments.
    page_size:
        Items requested per page (Notion caps this at 100).
    max_depth:
        Maximum block nesting depth that is fetched or rendered before
        :class:`NotionSourceDepthError` is raised.
    fail_on_truncation:
        Raise :class:`NotionSourceIncompleteError` when any pagination loop
        ended on an error instead of returning the partial result.
    date_range_uses_end:
        Render date-range mentions as ``start → end``.  The default keeps
        the historical ``start → start`` output.
    max_concurrent_records:
        Number of records whose block trees are fetched concurrently by the
        async client.  ``1`` fetches strictly one record at a time.
    retry_max_attempts:
        Maximum number of attempts per request for retryable HTTP errors.
    retry_base_delay:
        Base delay (seconds) for exponential backoff.
    retry_max_delay:
        Upper cap (seconds) on computed backoff delay.
    retry_jitter:
        Add random jitter to backoff intervals.
    timeout_seconds:
        HTTP request timeout in seconds.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~notionsource.observability.MetricsHook`.
    """

    # ── Core ────────────────────────────────────────────────────────────
    token: str = ""

    notion_version: str = "2021-05-13"

    database_id: str = ""

    base_url: str = "https://api.notion.com/v1"

    # ── Documents ───────────────────────────────────────────────────────
    props_to_frontmatter: bool = True

    lower_title_level: bool = True

    node_type: str = "NotionRecords"

    date_range_uses_end: bool = False

    # ── Fetching ────────────────────────────────────────────────────────
    page_size: int = MAX_PAGE_SIZE

    max_depth: int = 64

    fail_on_truncation: bool = False

    max_concurrent_records: int = 1

    # ── Retry ───────────────────────────────────────────────────────────
    retry_max_attempts: int = 3

    retry_base_delay: float = 1.0

    retry_max_delay: float = 30.0

    retry_jitter: bool = True

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        from urllib.parse import urlparse

        parsed = urlparse(self.base_url)
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise ValueError(
                f"base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API token, or target localhost for testing."
            )

        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {self.page_size}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
        if self.max_concurrent_records < 1:
            raise ValueError(
                f"max_concurrent_records must be >= 1, got {self.max_concurrent_records}"
            )
        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if not self.node_type:
            raise ValueError("node_type must not be empty")

    @classmethod
    def from_options(cls, options: Mapping[str, Any], **overrides: Any) -> NotionSourceConfig:
        """Build a config from a build-system options mapping.

        Keys may be camelCase aliases from :data:`OPTION_ALIASES` or field
        names.  ``None`` values fall back to the field default.  Keyword
        *overrides* win over *options*.

        Raises
        ------
        ValueError
            If a key matches neither an alias nor a field.
        """
        field_names = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in {**options, **overrides}.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in field_names:
                raise ValueError(f"Unknown notionsource option: {key!r}")
            if value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    def __repr__(self) -> str:
        """Mask the token to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "token":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"token='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"NotionSourceConfig({', '.join(parts)})"
