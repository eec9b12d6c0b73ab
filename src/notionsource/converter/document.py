"""Document assembly: title, properties and body into one text artifact.

With ``props_to_frontmatter`` enabled the body is prefixed with a YAML
front-matter block::

    ---
    title: Hello
    Tags:
    - a
    ---

    Body text
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import yaml

from notionsource.config import NotionSourceConfig
from notionsource.models import Document, NormalizedProperty, Record

from .markdown import MarkdownEmitter
from .properties import extract_title, normalize_properties

FRONT_MATTER_DELIMITER = "---"
REMOTE_IMAGE_KEY = "remoteImage"


def front_matter_value(value: Any) -> Any:
    """Prefer a property value's ``remoteImage`` sub-field when it is set."""
    if isinstance(value, Mapping) and value.get(REMOTE_IMAGE_KEY):
        return value[REMOTE_IMAGE_KEY]
    return value


def render_front_matter(title: str, properties: Mapping[str, NormalizedProperty]) -> str:
    """Serialise the title and property values as a front-matter block.

    Returns
    -------
    str
        ``"---\\n<yaml>\\n---\\n\\n"`` with keys in insertion order.
    """
    data: dict[str, Any] = {"title": title}
    for key, prop in properties.items():
        data[key] = front_matter_value(prop.value)
    body = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    body = body.rstrip("\n")
    return f"{FRONT_MATTER_DELIMITER}\n{body}\n{FRONT_MATTER_DELIMITER}\n\n"


class DocumentAssembler:
    """Turn a fully fetched :class:`Record` into a :class:`Document`.

    Parameters
    ----------
    config:
        Supplies ``node_type``, ``props_to_frontmatter`` and the emitter
        options.
    emitter:
        Optional pre-built :class:`MarkdownEmitter`.
    """

    def __init__(
        self,
        config: NotionSourceConfig,
        emitter: MarkdownEmitter | None = None,
    ) -> None:
        self._config = config
        self._emitter = emitter or MarkdownEmitter(config)

    def node_id(self, record_id: str) -> str:
        return f"{self._config.node_type}-{record_id}"

    def assemble(self, record: Record) -> Document:
        """Render *record* and wrap it with its metadata.

        Raises
        ------
        NotionSourceMalformedError
            If the record has no title property or a property has no value.
        """
        render_options = {"date_range_uses_end": self._config.date_range_uses_end}
        title = extract_title(record.properties, **render_options)
        properties = normalize_properties(record.properties, **render_options)

        markdown = self._emitter.render(record.children)
        if self._config.props_to_frontmatter:
            markdown = render_front_matter(title, properties) + markdown

        return Document(
            id=self.node_id(record.id),
            title=title,
            properties=properties,
            archived=record.archived,
            created_at=record.created_time,
            updated_at=record.last_edited_time,
            markdown=markdown,
            raw=record.to_raw(),
            diagnostics=list(record.diagnostics),
        )
