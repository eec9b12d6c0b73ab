"""Inline rendering: Notion rich_text arrays to styled Markdown strings.

A rich_text array is an ordered list of spans.  Each span is turned into a
:class:`SpanContext` (content plus style flags) and passed through the
annotation pipeline; the results are concatenated in input order.

Span kinds:

* ``"text"`` -- ``text.content`` with an optional ``text.link``.
* ``"equation"`` -- ``equation.expression``, rendered as ``$expression$``.
* ``"mention"`` -- user and page mentions render their ``plain_text``;
  date mentions render as a ``<time>`` element.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from notionsource.models import SpanContext

from .annotations import stylize

_STYLE_FLAGS = ("bold", "italic", "code", "strikethrough", "underline")


def render_date_mention(date: Mapping[str, Any], *, use_end: bool = False) -> str:
    """Render a date mention as an HTML ``<time>`` element.

    A range is shown as ``start → start``; pass ``use_end=True`` to show
    ``start → end``.
    """
    start = date.get("start")
    end = date.get("end")
    if end:
        value = f"{start} → {end if use_end else start}"
    else:
        value = f"{start}"
    return f'<time datetime="{value}">{value}</time>'


def _mention_content(span: Mapping[str, Any], *, date_range_uses_end: bool) -> str:
    mention = span.get("mention") or {}
    if mention.get("type") == "date":
        return render_date_mention(mention.get("date") or {}, use_end=date_range_uses_end)
    # user, page and any other mention kind
    return span.get("plain_text", "")


def span_context(
    span: Mapping[str, Any],
    *,
    date_range_uses_end: bool = False,
) -> SpanContext:
    """Merge a raw span's text and annotation fields into a :class:`SpanContext`."""
    span_type = span.get("type", "text")

    if span_type == "equation":
        expression = (span.get("equation") or {}).get("expression", "")
        return SpanContext(content=expression, equation=True)

    text = span.get("text") or {}
    annotations = span.get("annotations") or {}

    if span_type == "mention":
        content = _mention_content(span, date_range_uses_end=date_range_uses_end)
    else:
        content = text.get("content")
        if content is None:
            content = span.get("plain_text", "")

    return SpanContext(
        content=content,
        color=annotations.get("color") or "default",
        link=text.get("link"),
        **{flag: bool(annotations.get(flag, False)) for flag in _STYLE_FLAGS},
    )


def render_rich_text(
    spans: Iterable[Mapping[str, Any]] | None,
    *,
    date_range_uses_end: bool = False,
) -> str:
    """Render a Notion rich_text array to one styled string.

    Parameters
    ----------
    spans:
        Notion rich_text objects, in display order.
    date_range_uses_end:
        Forwarded to :func:`render_date_mention`.

    Returns
    -------
    str
        The concatenation of every styled span.
    """
    if not spans:
        return ""
    return "".join(
        stylize(span_context(span, date_range_uses_end=date_range_uses_end))
        for span in spans
    )


def plain_text(spans: Iterable[Mapping[str, Any]] | None) -> str:
    """Join the unstyled ``plain_text`` of every span."""
    return "".join(span.get("plain_text", "") for span in spans or [])
