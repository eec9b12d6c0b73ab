"""Database property normalisation.

A Notion page carries its database columns as a map of
``name -> {"id", "type", <type>: value}``.  The title column is surfaced
separately (:func:`extract_title`) and every other column is flattened to a
:class:`NormalizedProperty`.  ``rich_text`` values become styled strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from notionsource.errors import NotionSourceMalformedError
from notionsource.models import NormalizedProperty

from .inline_text import render_rich_text

TITLE_TYPE = "title"
RICH_TEXT_TYPE = "rich_text"


def _as_mapping(key: str, prop: Any) -> Mapping[str, Any]:
    if isinstance(prop, NormalizedProperty):
        return prop.to_dict()
    if not isinstance(prop, Mapping) or "type" not in prop:
        raise NotionSourceMalformedError(
            message=f"property {key!r} has no type",
            context={"object": "property", "field": "type", "id": key},
        )
    return prop


def _property_value(key: str, prop: Mapping[str, Any], **render_options: Any) -> Any:
    prop_type = prop["type"]
    if prop_type in prop:
        value = prop[prop_type]
    elif "value" in prop:
        # already normalised
        value = prop["value"]
    else:
        raise NotionSourceMalformedError(
            message=f"property {key!r} has no {prop_type!r} value",
            context={"object": "property", "field": prop_type, "id": key},
        )

    if prop_type == RICH_TEXT_TYPE and not isinstance(value, str):
        value = render_rich_text(value, **render_options)
    return value


def normalize_properties(
    properties: Mapping[str, Any],
    *,
    date_range_uses_end: bool = False,
) -> dict[str, NormalizedProperty]:
    """Flatten a page's property map, dropping the title property.

    The input is not modified.  The function also accepts its own output
    (or the equivalent ``{id, key, value, type}`` dicts) and returns an
    equal mapping, so normalising twice is the same as normalising once.

    Raises
    ------
    NotionSourceMalformedError
        If an entry has no ``type`` or no value for its type.
    """
    normalized: dict[str, NormalizedProperty] = {}
    for key, raw in properties.items():
        prop = _as_mapping(key, raw)
        if prop["type"] == TITLE_TYPE:
            continue
        normalized[key] = NormalizedProperty(
            id=prop.get("id"),
            key=key,
            value=_property_value(key, prop, date_range_uses_end=date_range_uses_end),
            type=prop["type"],
        )
    return normalized


def extract_title(
    properties: Mapping[str, Any],
    *,
    date_range_uses_end: bool = False,
) -> str:
    """Render the title property of a page.

    Raises
    ------
    NotionSourceMalformedError
        If no property has type ``"title"``.
    """
    for key, raw in properties.items():
        prop = _as_mapping(key, raw)
        if prop["type"] != TITLE_TYPE:
            continue
        spans = prop.get(TITLE_TYPE, prop.get("value"))
        if isinstance(spans, str):
            return spans
        return render_rich_text(spans, date_range_uses_end=date_range_uses_end)

    raise NotionSourceMalformedError(
        message="page has no title property",
        context={"object": "page", "field": TITLE_TYPE},
    )
