"""Block tree to Markdown emitter.

Walks a fully fetched list of :class:`Block` objects left to right and
concatenates one fragment per block.  A block's nested children are
rendered by the same walk at ``depth + 2``, prefixed with ``depth`` spaces
and followed by a newline, then inserted after the block's own line.

Usage::

    from notionsource.config import NotionSourceConfig
    from notionsource.converter.markdown import MarkdownEmitter

    emitter = MarkdownEmitter(NotionSourceConfig())
    md = emitter.render(record.children)
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from notionsource.config import NotionSourceConfig
from notionsource.errors import NotionSourceDepthError
from notionsource.models import Block, BlockType
from notionsource.observability import get_logger

from .inline_text import render_rich_text

log = get_logger("notionsource.converter")

EOL = "\n"
INDENT_STEP = 2
CODE_FENCE = "```"
UNSUPPORTED_COMMENT = "<!-- This block is not supported by Notion API yet. -->"


class MarkdownEmitter:
    """Render block trees to Markdown with a few inline HTML fragments.

    Parameters
    ----------
    config:
        Supplies ``lower_title_level``, ``date_range_uses_end`` and
        ``max_depth``.
    """

    def __init__(self, config: NotionSourceConfig) -> None:
        self._config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, blocks: Sequence[Block], depth: int = 0) -> str:
        """Render *blocks* (and everything below them) to a string.

        Parameters
        ----------
        blocks:
            Sibling blocks, in display order.
        depth:
            Indentation counter.  Starts at 0 and grows by 2 per level.

        Raises
        ------
        NotionSourceDepthError
            If the tree is nested deeper than ``config.max_depth`` levels.
        """
        if depth // INDENT_STEP > self._config.max_depth:
            raise NotionSourceDepthError(
                message=f"Block tree nested deeper than {self._config.max_depth} levels",
                context={"depth": depth // INDENT_STEP, "max_depth": self._config.max_depth},
            )
        return "".join(self.render_block(block, depth) for block in blocks)

    def render_block(self, block: Block, depth: int = 0) -> str:
        """Render a single block with its nested children."""
        nested = self._render_nested(block, depth)
        renderer = _BLOCK_RENDERERS[block.type]
        return renderer(self, block, nested)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _text(self, block: Block) -> str:
        return render_rich_text(
            block.rich_text,
            date_range_uses_end=self._config.date_range_uses_end,
        )

    def _render_nested(self, block: Block, depth: int) -> str:
        if not (block.has_children or block.children):
            return ""
        return " " * depth + self.render(block.children, depth + INDENT_STEP) + EOL

    # ------------------------------------------------------------------
    # Block type renderers
    # ------------------------------------------------------------------

    def _render_paragraph(self, block: Block, nested: str) -> str:
        text = self._text(block)
        is_table_row = text.startswith("|") and text.endswith("|")
        spans = block.rich_text
        is_code_fence = bool(spans) and spans[0].get("plain_text", "").startswith(CODE_FENCE)
        ending = EOL if is_table_row or is_code_fence else EOL + EOL
        return text + ending + nested

    def _render_heading(self, block: Block, nested: str) -> str:
        demote = "#" if self._config.lower_title_level else ""
        hashes = demote + "#" * block.heading_level  # type: ignore[operator]
        return f"{EOL}{hashes} {self._text(block)}{EOL}{nested}"

    def _render_to_do(self, block: Block, nested: str) -> str:
        mark = "x" if block.payload.get("checked") else " "
        return f"- [{mark}] {self._text(block)}{EOL}{nested}"

    def _render_bulleted_list_item(self, block: Block, nested: str) -> str:
        return f"* {self._text(block)}{EOL}{nested}"

    def _render_numbered_list_item(self, block: Block, nested: str) -> str:
        # Markdown renderers renumber; every item is emitted as "1."
        return f"1. {self._text(block)}{EOL}{nested}"

    def _render_toggle(self, block: Block, nested: str) -> str:
        return f"<details><summary>{self._text(block)}</summary>{nested}</details>"

    def _render_unsupported(self, block: Block, nested: str) -> str:
        return f"{UNSUPPORTED_COMMENT}{EOL}{nested}"

    def _render_other(self, block: Block, nested: str) -> str:
        log.debug(
            "Skipping block without Markdown rendering",
            extra={"extra_fields": {"op": "render", "block_id": block.id, "block_type": block.raw_type}},
        )
        return ""


# ------------------------------------------------------------------
# Block renderer dispatch table
# ------------------------------------------------------------------

_BlockRenderer = Callable[[MarkdownEmitter, Block, str], str]

_BLOCK_RENDERERS: dict[BlockType, _BlockRenderer] = {
    BlockType.PARAGRAPH: MarkdownEmitter._render_paragraph,
    BlockType.HEADING: MarkdownEmitter._render_heading,
    BlockType.TO_DO: MarkdownEmitter._render_to_do,
    BlockType.BULLETED_LIST_ITEM: MarkdownEmitter._render_bulleted_list_item,
    BlockType.NUMBERED_LIST_ITEM: MarkdownEmitter._render_numbered_list_item,
    BlockType.TOGGLE: MarkdownEmitter._render_toggle,
    BlockType.UNSUPPORTED: MarkdownEmitter._render_unsupported,
    BlockType.OTHER: MarkdownEmitter._render_other,
}
