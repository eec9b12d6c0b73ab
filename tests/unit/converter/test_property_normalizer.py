"""Tests for database property normalisation (converter/properties.py)."""

from __future__ import annotations

import copy

import pytest

from notionsource.converter.properties import extract_title, normalize_properties
from notionsource.errors import ErrorCode, NotionSourceMalformedError
from notionsource.models import NormalizedProperty


def _span(content, **ann):
    return {
        "type": "text",
        "text": {"content": content, "link": None},
        "annotations": {"color": "default", **ann},
        "plain_text": content,
    }


def make_properties():
    return {
        "Name": {"id": "title", "type": "title", "title": [_span("Hello")]},
        "Tags": {
            "id": "t1",
            "type": "multi_select",
            "multi_select": [{"name": "a"}, {"name": "b"}],
        },
        "Summary": {
            "id": "s1",
            "type": "rich_text",
            "rich_text": [_span("short "), _span("note", bold=True)],
        },
        "Count": {"id": "c1", "type": "number", "number": 3},
    }


class TestNormalizeProperties:
    def test_title_is_removed(self):
        normalized = normalize_properties(make_properties())
        assert "Name" not in normalized
        assert list(normalized) == ["Tags", "Summary", "Count"]

    def test_rich_text_is_rendered(self):
        normalized = normalize_properties(make_properties())
        assert normalized["Summary"] == NormalizedProperty(
            id="s1", key="Summary", value="short **note**", type="rich_text"
        )

    def test_other_values_pass_through(self):
        normalized = normalize_properties(make_properties())
        assert normalized["Tags"].value == [{"name": "a"}, {"name": "b"}]
        assert normalized["Count"].value == 3
        assert normalized["Count"].id == "c1"

    def test_input_is_not_modified(self):
        props = make_properties()
        snapshot = copy.deepcopy(props)
        normalize_properties(props)
        assert props == snapshot

    def test_idempotent_on_own_output(self):
        once = normalize_properties(make_properties())
        assert normalize_properties(once) == once

    def test_idempotent_on_dict_form(self):
        once = normalize_properties(make_properties())
        as_dicts = {key: prop.to_dict() for key, prop in once.items()}
        assert normalize_properties(as_dicts) == once

    def test_none_value_is_kept(self):
        props = {"Due": {"id": "d", "type": "date", "date": None}}
        assert normalize_properties(props)["Due"].value is None

    def test_missing_type_raises(self):
        with pytest.raises(NotionSourceMalformedError) as exc_info:
            normalize_properties({"Broken": {"id": "x"}})
        assert exc_info.value.code == ErrorCode.MALFORMED_OBJECT
        assert exc_info.value.context["id"] == "Broken"

    def test_missing_value_raises(self):
        with pytest.raises(NotionSourceMalformedError):
            normalize_properties({"Broken": {"id": "x", "type": "number"}})

    def test_date_mention_in_rich_text_honours_option(self):
        mention = {
            "type": "mention",
            "mention": {"type": "date", "date": {"start": "A", "end": "B"}},
            "annotations": {},
            "plain_text": "",
        }
        props = {"When": {"id": "w", "type": "rich_text", "rich_text": [mention]}}
        value = normalize_properties(props, date_range_uses_end=True)["When"].value
        assert value == '<time datetime="A → B">A → B</time>'


class TestExtractTitle:
    def test_renders_title_spans(self):
        props = {"Name": {"id": "title", "type": "title", "title": [_span("Hi", italic=True)]}}
        assert extract_title(props) == "_Hi_"

    def test_title_property_can_have_any_name(self):
        props = make_properties()
        props["Page"] = props.pop("Name")
        assert extract_title(props) == "Hello"

    def test_empty_title(self):
        assert extract_title({"Name": {"id": "title", "type": "title", "title": []}}) == ""

    def test_missing_title_raises(self):
        with pytest.raises(NotionSourceMalformedError) as exc_info:
            extract_title({"Count": {"id": "c", "type": "number", "number": 1}})
        assert exc_info.value.context["field"] == "title"
