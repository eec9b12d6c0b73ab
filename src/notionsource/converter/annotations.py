"""Annotation pipeline: wrap one span's content in its Markdown/HTML styles.

Each step is a pure ``SpanContext -> SpanContext`` function that wraps
``content`` when its flag is set and passes the context through untouched
otherwise.  :data:`ANNOTATION_PIPELINE` fixes the order; a link therefore
wraps already-bolded text (``[**x**](u)``), never the other way round.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping

from notionsource.models import SpanContext

Annotator = Callable[[SpanContext], SpanContext]


def _wrap(ctx: SpanContext, content: str) -> SpanContext:
    return dataclasses.replace(ctx, content=content)


def annotate_bold(ctx: SpanContext) -> SpanContext:
    return _wrap(ctx, f"**{ctx.content}**") if ctx.bold else ctx


def annotate_italic(ctx: SpanContext) -> SpanContext:
    return _wrap(ctx, f"_{ctx.content}_") if ctx.italic else ctx


def annotate_code(ctx: SpanContext) -> SpanContext:
    return _wrap(ctx, f"`{ctx.content}`") if ctx.code else ctx


def annotate_strikethrough(ctx: SpanContext) -> SpanContext:
    return _wrap(ctx, f"~~{ctx.content}~~") if ctx.strikethrough else ctx


def annotate_underline(ctx: SpanContext) -> SpanContext:
    return _wrap(ctx, f"<u>{ctx.content}</u>") if ctx.underline else ctx


def annotate_color(ctx: SpanContext) -> SpanContext:
    if ctx.color == "default":
        return ctx
    return _wrap(ctx, f'<span notion-color="{ctx.color}">{ctx.content}</span>')


def link_target(link: str | Mapping | None) -> str | None:
    """Return the URL of a link object, or the link itself when it is a string."""
    if isinstance(link, Mapping):
        return link.get("url") or None
    return link or None


def annotate_link(ctx: SpanContext) -> SpanContext:
    if not ctx.link:
        return ctx
    target = link_target(ctx.link)
    if target is None:
        return ctx
    return _wrap(ctx, f"[{ctx.content}]({target})")


def annotate_equation(ctx: SpanContext) -> SpanContext:
    return _wrap(ctx, f"${ctx.content}$") if ctx.equation else ctx


ANNOTATION_PIPELINE: tuple[Annotator, ...] = (
    annotate_bold,
    annotate_italic,
    annotate_code,
    annotate_strikethrough,
    annotate_underline,
    annotate_color,
    annotate_link,
    annotate_equation,
)


def stylize(ctx: SpanContext) -> str:
    """Run *ctx* through every annotator in order and return the content."""
    for annotate in ANNOTATION_PIPELINE:
        ctx = annotate(ctx)
    return ctx.content
