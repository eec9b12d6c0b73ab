"""Tests for document assembly and front matter (converter/document.py)."""

from __future__ import annotations

import json

import pytest
import yaml

from notionsource.config import NotionSourceConfig
from notionsource.converter.document import (
    DocumentAssembler,
    front_matter_value,
    render_front_matter,
)
from notionsource.errors import NotionSourceMalformedError
from notionsource.models import Block, FetchDiagnostic, NormalizedProperty, Record


def _span(content):
    return {
        "type": "text",
        "text": {"content": content, "link": None},
        "annotations": {},
        "plain_text": content,
    }


def make_record(title="Hi", body=("World",), extra_props=None, record_id="p1"):
    properties = {"Name": {"id": "title", "type": "title", "title": [_span(title)]}}
    properties.update(extra_props or {})
    record = Record.from_api({
        "object": "page",
        "id": record_id,
        "archived": False,
        "created_time": "2021-06-01T00:00:00.000Z",
        "last_edited_time": "2021-06-02T00:00:00.000Z",
        "properties": properties,
    })
    record.children = [
        Block.from_api({
            "id": f"{record_id}-b{i}",
            "type": "paragraph",
            "has_children": False,
            "paragraph": {"rich_text": [_span(text)]},
        })
        for i, text in enumerate(body)
    ]
    return record


class TestFrontMatter:
    def test_title_only(self):
        assert render_front_matter("Hi", {}) == "---\ntitle: Hi\n---\n\n"

    def test_properties_follow_title_in_order(self):
        props = {
            "Count": NormalizedProperty(id="c", key="Count", value=3, type="number"),
            "Done": NormalizedProperty(id="d", key="Done", value=True, type="checkbox"),
        }
        assert render_front_matter("Hi", props) == "---\ntitle: Hi\nCount: 3\nDone: true\n---\n\n"

    def test_values_are_quoted_when_needed(self):
        fm = render_front_matter("Hi: there", {})
        data = yaml.safe_load(fm.split("---\n")[1])
        assert data == {"title": "Hi: there"}

    def test_unicode_is_kept(self):
        assert "title: Café" in render_front_matter("Café", {})

    def test_remote_image_is_preferred(self):
        value = {"type": "file", "remoteImage": "https://img/x.png"}
        assert front_matter_value(value) == "https://img/x.png"

    def test_empty_remote_image_is_ignored(self):
        value = {"remoteImage": "", "name": "x"}
        assert front_matter_value(value) == value


class TestDocumentAssembler:
    def test_title_and_paragraph(self, assembler):
        doc = assembler.assemble(make_record())
        assert doc.markdown.startswith("---\ntitle: Hi\n---\n\nWorld\n\n")
        assert doc.markdown == "---\ntitle: Hi\n---\n\nWorld\n\n"

    def test_document_metadata(self, assembler):
        doc = assembler.assemble(make_record())
        assert doc.id == "NotionRecords-p1"
        assert doc.title == "Hi"
        assert doc.archived is False
        assert doc.created_at == "2021-06-01T00:00:00.000Z"
        assert doc.updated_at == "2021-06-02T00:00:00.000Z"

    def test_custom_node_type_prefixes_id(self):
        assembler = DocumentAssembler(NotionSourceConfig(node_type="Posts"))
        assert assembler.assemble(make_record()).id == "Posts-p1"

    def test_without_front_matter(self):
        assembler = DocumentAssembler(NotionSourceConfig(props_to_frontmatter=False))
        doc = assembler.assemble(make_record())
        assert doc.markdown == "World\n\n"
        assert doc.title == "Hi"

    def test_rich_text_property_in_front_matter(self, assembler):
        extra = {"Summary": {"id": "s", "type": "rich_text", "rich_text": [_span("short")]}}
        doc = assembler.assemble(make_record(extra_props=extra))
        assert doc.markdown.startswith("---\ntitle: Hi\nSummary: short\n---\n\n")
        assert doc.properties["Summary"].value == "short"
        assert "Name" not in doc.properties

    def test_raw_and_json_include_children(self, assembler):
        doc = assembler.assemble(make_record(body=("a", "b")))
        assert [child["id"] for child in doc.raw["children"]] == ["p1-b0", "p1-b1"]
        assert json.loads(doc.json)["id"] == "p1"

    def test_record_diagnostics_are_carried(self, assembler):
        record = make_record()
        record.diagnostics = [FetchDiagnostic(code="NETWORK_ERROR", message="cut")]
        doc = assembler.assemble(record)
        assert doc.complete is False
        assert doc.diagnostics[0].message == "cut"

    def test_record_without_title_raises(self, assembler):
        record = make_record()
        del record.properties["Name"]
        with pytest.raises(NotionSourceMalformedError):
            assembler.assemble(record)

    def test_to_node_fields(self, assembler):
        node = assembler.assemble(make_record()).to_node()
        assert set(node) == {
            "id",
            "title",
            "properties",
            "archived",
            "created_at",
            "updated_at",
            "markdown",
            "raw",
            "json",
        }
