"""Notion records to Markdown documents.

Public API:

- :func:`stylize` / :data:`ANNOTATION_PIPELINE` -- style one span.
- :func:`render_rich_text` -- rich_text array to styled string.
- :func:`normalize_properties` / :func:`extract_title` -- page properties.
- :class:`MarkdownEmitter` -- block tree to Markdown.
- :class:`DocumentAssembler` -- record to front matter + body.
"""

from notionsource.converter.annotations import ANNOTATION_PIPELINE, stylize
from notionsource.converter.document import DocumentAssembler, render_front_matter
from notionsource.converter.inline_text import render_rich_text, span_context
from notionsource.converter.markdown import MarkdownEmitter
from notionsource.converter.properties import extract_title, normalize_properties

__all__ = [
    "ANNOTATION_PIPELINE",
    "DocumentAssembler",
    "MarkdownEmitter",
    "extract_title",
    "normalize_properties",
    "render_front_matter",
    "render_rich_text",
    "span_context",
    "stylize",
]
