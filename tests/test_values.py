#!/usr/bin/env python3
"""
Tests for JsonValue, the expression evaluator and Response records.
"""

import httpx
import pytest

from couch_shell.core import (
    EvaluationError,
    Evaluator,
    JsonValue,
    Plugin,
    PluginRegistry,
    UndefinedVariableError,
    VariableResolver,
    declarations,
    variable,
)
from couch_shell.core.evaluator import tokenize
from couch_shell.http import Response


# ============================================================================
# JsonValue Tests
# ============================================================================

class TestJsonValue:
    """Tests for JsonValue."""

    def test_types(self):
        assert JsonValue.wrap({}).is_object()
        assert JsonValue.wrap([]).is_array()
        assert JsonValue.wrap("s").is_string()
        assert JsonValue.wrap(1.5).is_number()
        assert JsonValue.wrap(True).is_boolean()
        assert JsonValue.wrap(None).is_null()

    def test_invalid_type(self):
        with pytest.raises(TypeError):
            JsonValue(object())

    def test_parse_scalars(self):
        assert JsonValue.parse("42").unwrapped == 42
        assert JsonValue.parse('"x"').unwrapped == "x"

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            JsonValue.parse("{nope")

    def test_member_access(self):
        j = JsonValue.parse('{"_id": "a", "rows": [{"key": 1}]}')
        assert j.get("_id") == "a"
        assert j["rows"][0]["key"] == 1
        assert j.get("missing") is None
        assert j["rows"][5] is None

    def test_get_on_non_object(self):
        assert JsonValue.wrap([1]).get("a") is None

    def test_wrong_index_type(self):
        with pytest.raises(TypeError):
            JsonValue.wrap({"a": 1})[0]
        with pytest.raises(TypeError):
            JsonValue.wrap([1])["a"]

    def test_to_s(self):
        assert JsonValue.wrap({"a": [1, 2]}).to_s() == '{"a":[1,2]}'
        assert JsonValue.wrap(True).to_s() == "true"
        assert JsonValue.wrap("plain").to_s() == "plain"

    def test_format_string_is_indented(self):
        assert JsonValue.wrap({"a": 1}).format_string() == '{\n  "a": 1\n}'

    def test_copy_is_independent(self):
        original = JsonValue.parse('{"a": {"b": 1}}')
        copied = original.copy()
        copied["a"].set_attr("b", 2)
        copied.delete_attr("missing")
        assert original.unwrapped == {"a": {"b": 1}}
        assert copied.unwrapped == {"a": {"b": 2}}

    def test_set_attr_unwraps(self):
        j = JsonValue.wrap({})
        j.set_attr("n", JsonValue.wrap([1]))
        assert j.unwrapped == {"n": [1]}


# ============================================================================
# Tokenizer and Evaluator Tests
# ============================================================================

class DocPlugin(Plugin):

    @variable("A document.")
    def lookup_doc(self):
        return JsonValue.parse('{"_id": "d1", "tags": ["a", "b"], "nested": {"k": "v"}}')

    @variable("Plain string.")
    def lookup_name(self):
        return "plain"


@pytest.fixture
def evaluator():
    registry = PluginRegistry(warn=lambda msg: None)
    info = declarations.build_plugin_info(DocPlugin, "doc")
    registry.load(info, DocPlugin(None, info))
    return Evaluator(VariableResolver(registry))


class TestTokenize:
    """Tests for tokenize."""

    def test_tokens(self):
        assert tokenize('@core.j0["x"][1]') == [
            ("punct", "@"), ("ident", "core"), ("punct", "."), ("ident", "j0"),
            ("punct", "["), ("string", '"x"'), ("punct", "]"),
            ("punct", "["), ("int", "1"), ("punct", "]"),
        ]

    def test_invalid_character(self):
        with pytest.raises(EvaluationError):
            tokenize("a + b")


class TestEvaluator:
    """Tests for Evaluator."""

    def test_identifier(self, evaluator):
        assert evaluator("name") == "plain"

    def test_qualified_identifier(self, evaluator):
        assert evaluator("@doc.name") == "plain"

    def test_member_and_index(self, evaluator):
        assert evaluator("doc._id") == "d1"
        assert evaluator("doc.tags[1]") == "b"
        assert evaluator('doc["nested"].k') == "v"

    def test_literals(self, evaluator):
        assert evaluator("42") == 42
        assert evaluator('"text"') == "text"

    def test_undefined_variable(self, evaluator):
        with pytest.raises(UndefinedVariableError):
            evaluator("nope")

    def test_missing_member(self, evaluator):
        with pytest.raises(EvaluationError, match="no member"):
            evaluator("doc.nope")

    def test_member_of_plain_value(self, evaluator):
        with pytest.raises(EvaluationError):
            evaluator("42.x")

    def test_index_out_of_range(self, evaluator):
        with pytest.raises(EvaluationError):
            evaluator("doc.tags[9]")

    def test_empty_expression(self, evaluator):
        with pytest.raises(EvaluationError):
            evaluator("   ")

    def test_unclosed_index(self, evaluator):
        with pytest.raises(EvaluationError, match="missing"):
            evaluator("doc.tags[0")


# ============================================================================
# Response Tests
# ============================================================================

def make_response(status=200, body=b'{"ok": true, "_id": "d1", "rev": "1-a"}',
                  content_type="application/json"):
    return Response(httpx.Response(status, content=body,
                                   headers={"Content-Type": content_type}))


class TestResponse:
    """Tests for Response."""

    def test_status(self):
        res = make_response(404)
        assert res.code == "404"
        assert res.message == "Not Found"
        assert not res.ok
        assert str(res) == "404 Not Found"

    def test_json_body(self):
        res = make_response()
        assert res.ok
        assert res.has_json
        assert res.json_value.get("ok").unwrapped is True

    def test_text_plain_parsed_as_json(self):
        res = make_response(content_type="text/plain; charset=utf-8")
        assert res.content_type == "text/plain"
        assert res.has_json

    def test_non_json_body(self):
        res = make_response(body=b"<html></html>", content_type="text/html")
        assert res.json_value is None
        assert res.body == "<html></html>"

    def test_invalid_json_body(self):
        res = make_response(body=b"{broken", content_type="application/json")
        assert res.json_value is None

    def test_attr_with_altname(self):
        res = make_response()
        assert res.attr("id", "_id") == "d1"
        assert res.attr("rev", "_rev") == "1-a"
        assert res.attr("nope") is None

    def test_get_fields_and_members(self):
        res = make_response()
        assert res.get("code") == "200"
        assert res.get("json") is res.json_value
        assert res.get("_id") == "d1"

    def test_ok_renders_as_json_boolean(self):
        assert make_response().get("ok").to_s() == "true"
        assert make_response(404).get("ok").to_s() == "false"
