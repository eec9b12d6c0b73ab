"""Data models for notionsource.

Records and blocks are parsed from Notion API dicts into small dataclasses
so that the renderer dispatches on a closed :class:`BlockType` instead of
raw type strings.  Everything else here is a plain result container.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from notionsource.errors import NotionSourceError, NotionSourceMalformedError

T = TypeVar("T")

_HEADING_RE = re.compile(r"^heading_([1-9]\d*)$")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class BlockType(str, Enum):
    """Block kinds the Markdown emitter knows how to render."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    """Any ``heading_N`` block; the level is kept in ``Block.heading_level``."""

    TO_DO = "to_do"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TOGGLE = "toggle"
    UNSUPPORTED = "unsupported"

    OTHER = "other"
    """A remote type with no Markdown rendering.  Contributes nothing."""

    @classmethod
    def parse(cls, raw_type: str) -> tuple[BlockType, int | None]:
        """Map a Notion block type string to ``(BlockType, heading_level)``."""
        match = _HEADING_RE.match(raw_type)
        if match:
            return cls.HEADING, int(match.group(1))
        if raw_type == cls.HEADING.value:
            return cls.OTHER, None
        try:
            return cls(raw_type), None
        except ValueError:
            return cls.OTHER, None


class TerminationReason(str, Enum):
    """Why a pagination loop stopped."""

    EXHAUSTED = "exhausted"
    """The remote reported ``has_more: false``."""

    ERROR = "error"
    """A request or response failed; later pages were never requested."""


# ---------------------------------------------------------------------------
# Content tree
# ---------------------------------------------------------------------------

def _require(data: Mapping[str, Any], key: str, kind: str) -> Any:
    if key not in data:
        raise NotionSourceMalformedError(
            message=f"{kind} object is missing required field {key!r}",
            context={"object": kind, "field": key, "id": data.get("id")},
        )
    return data[key]


@dataclass
class Block:
    """One node of a record's content tree.

    Attributes
    ----------
    id:
        Notion block ID.
    type:
        Closed block kind used for rendering dispatch.
    raw_type:
        The type string as sent by Notion (``"heading_2"``, ``"callout"``).
    payload:
        The type-specific object (``block[raw_type]``).
    has_children:
        Whether Notion reported nested blocks.
    children:
        Fully fetched child blocks, in remote order.
    heading_level:
        Level (1 or more) of a ``heading_N`` block, else ``None``.
    raw:
        The original API dict, without children.
    """

    id: str
    type: BlockType
    raw_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    has_children: bool = False
    children: list[Block] = field(default_factory=list)
    heading_level: int | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Block:
        """Parse a block object returned by ``GET /blocks/{id}/children``.

        Raises
        ------
        NotionSourceMalformedError
            If ``id`` or ``type`` is missing.
        """
        block_id = _require(data, "id", "block")
        raw_type = _require(data, "type", "block")
        block_type, level = BlockType.parse(raw_type)
        payload = data.get(raw_type)
        return cls(
            id=block_id,
            type=block_type,
            raw_type=raw_type,
            payload=dict(payload) if isinstance(payload, Mapping) else {},
            has_children=bool(data.get("has_children", False)),
            heading_level=level,
            raw=dict(data),
        )

    @property
    def rich_text(self) -> list[dict[str, Any]]:
        """The block's inline spans.

        Current API versions use ``rich_text``; ``2021-05-13`` used ``text``.
        """
        spans = self.payload.get("rich_text")
        if spans is None:
            spans = self.payload.get("text")
        return list(spans or [])

    def to_raw(self) -> dict[str, Any]:
        """Return the API dict with materialised children attached."""
        raw = dict(self.raw)
        if self.children:
            raw["children"] = [child.to_raw() for child in self.children]
        return raw


@dataclass
class Record:
    """One database page together with its block tree."""

    id: str
    archived: bool
    created_time: str | None
    last_edited_time: str | None
    properties: dict[str, Any]
    children: list[Block] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[FetchDiagnostic] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> Record:
        """Parse a page object returned by ``POST /databases/{id}/query``.

        Raises
        ------
        NotionSourceMalformedError
            If ``id`` or ``properties`` is missing.
        """
        record_id = _require(data, "id", "page")
        properties = _require(data, "properties", "page")
        if not isinstance(properties, Mapping):
            raise NotionSourceMalformedError(
                message="page properties must be an object",
                context={"object": "page", "field": "properties", "id": record_id},
            )
        return cls(
            id=record_id,
            archived=bool(data.get("archived", False)),
            created_time=data.get("created_time"),
            last_edited_time=data.get("last_edited_time"),
            properties=dict(properties),
            raw=dict(data),
        )

    @property
    def complete(self) -> bool:
        return not self.diagnostics

    def to_raw(self) -> dict[str, Any]:
        """Return the page dict with its block tree under ``children``."""
        raw = dict(self.raw)
        raw["children"] = [child.to_raw() for child in self.children]
        return raw


# ---------------------------------------------------------------------------
# Inline text
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpanContext:
    """Content and style of one inline span, ready for annotation.

    ``link`` is either a URL string or a Notion link object
    (``{"url": ...}``).
    """

    content: str = ""
    bold: bool = False
    italic: bool = False
    code: bool = False
    strikethrough: bool = False
    underline: bool = False
    color: str = "default"
    link: str | Mapping[str, Any] | None = None
    equation: bool = False


@dataclass(frozen=True)
class NormalizedProperty:
    """A database property with its value flattened for front matter."""

    id: str | None
    key: str
    value: Any
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "key": self.key, "value": self.value, "type": self.type}


# ---------------------------------------------------------------------------
# Fetch results
# ---------------------------------------------------------------------------

@dataclass
class FetchDiagnostic:
    """Why part of a tree may be missing.

    Attributes
    ----------
    code:
        The :class:`~notionsource.errors.ErrorCode` of the failure that
        ended the loop.
    message:
        Human-readable description.
    context:
        ``resource`` (``"database"`` or ``"block"``), ``resource_id``,
        ``pages_fetched`` and ``items_fetched``.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "context": dict(self.context)}


@dataclass
class FetchResult(Generic[T]):
    """Items collected by one pagination loop.

    Attributes
    ----------
    items:
        Every item gathered before the loop stopped, in remote order.
    reason:
        Whether the remote ran out of pages or a request failed.
    error:
        The error that stopped the loop, when ``reason`` is ``ERROR``.
    pages:
        Number of pages successfully read.
    diagnostics:
        One entry for this loop (when truncated) plus every entry raised
        by nested loops.
    """

    items: list[T] = field(default_factory=list)
    reason: TerminationReason = TerminationReason.EXHAUSTED
    error: NotionSourceError | None = None
    pages: int = 0
    diagnostics: list[FetchDiagnostic] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.reason is TerminationReason.EXHAUSTED and not self.diagnostics


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@dataclass
class Document:
    """One assembled document, ready to hand to the build system."""

    id: str
    title: str
    properties: dict[str, NormalizedProperty]
    archived: bool
    created_at: str | None
    updated_at: str | None
    markdown: str
    raw: dict[str, Any] = field(default_factory=dict)
    diagnostics: list[FetchDiagnostic] = field(default_factory=list)

    @property
    def json(self) -> str:
        return json.dumps(self.raw, ensure_ascii=False, default=str)

    @property
    def complete(self) -> bool:
        return not self.diagnostics

    def to_node(self) -> dict[str, Any]:
        """Return the node fields registered with the host collection."""
        return {
            "id": self.id,
            "title": self.title,
            "properties": {k: p.to_dict() for k, p in self.properties.items()},
            "archived": self.archived,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "markdown": self.markdown,
            "raw": self.raw,
            "json": self.json,
        }


@dataclass
class LoadResult:
    """Result of :meth:`NotionSource.load_documents`.

    Attributes
    ----------
    documents:
        One document per fetched record, in query order.
    diagnostics:
        Every truncation seen while fetching, including record-level ones.
    """

    documents: list[Document] = field(default_factory=list)
    diagnostics: list[FetchDiagnostic] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.diagnostics
