"""Tests for context lookup, interpolation and condition expressions."""

import pytest

from clawflow.expressions import (
    evaluate_expression,
    get_nested_value,
    interpolate_string,
    interpolate_value,
)


def test_get_nested_value_resolves_path():
    assert get_nested_value({"a": {"b": {"c": 42}}}, "a.b.c") == 42


def test_get_nested_value_missing_segments_return_none():
    assert get_nested_value({"a": {}}, "a.b.c") is None
    assert get_nested_value({"a": 5}, "a.b") is None
    assert get_nested_value({}, "missing") is None


def test_get_nested_value_keeps_falsy_leaf_values():
    assert get_nested_value({"count": 0}, "count") == 0
    assert get_nested_value({"flag": False}, "flag") is False


def test_interpolate_string():
    assert interpolate_string("hello {{name}}", {"name": "Sam"}) == "hello Sam"
    assert interpolate_string("hello {{missing}}", {}) == "hello "


def test_interpolate_string_trims_whitespace_and_walks_paths():
    context = {"user": {"name": "Ada", "age": 36}}
    assert interpolate_string("{{ user.name }} is {{user.age}}", context) == "Ada is 36"


def test_interpolate_string_renders_booleans_and_structures():
    context = {"ok": True, "tags": ["a", "b"], "ratio": 2.0}
    assert interpolate_string("{{ok}} {{tags}} {{ratio}}", context) == 'true ["a", "b"] 2'


def test_interpolate_value_substitutes_inside_string_fields():
    body = {"text": "Hi {{name}}", "nested": {"id": "{{user.id}}"}, "count": 3}
    result = interpolate_value(body, {"name": "Ada", "user": {"id": "u-7"}})
    assert result == {"text": "Hi Ada", "nested": {"id": "u-7"}, "count": 3}


@pytest.mark.parametrize(
    "expression,context,expected",
    [
        ("a.b == '5'", {"a": {"b": "5"}}, True),
        ("a.b == '5'", {"a": {"b": "6"}}, False),
        ("count > 3", {"count": 5}, True),
        ("count > 3", {"count": 2}, False),
        ("count >= 5", {"count": 5}, True),
        ("count <= 4", {"count": 5}, False),
        ("count < 10", {"count": "7"}, True),
        ("status === \"done\"", {"status": "done"}, True),
        ("status !== 'done'", {"status": "done"}, False),
        ("status != 'done'", {"status": "open"}, True),
        ("flag == true", {"flag": True}, True),
    ],
)
def test_evaluate_expression_operators(expression, context, expected):
    assert evaluate_expression(expression, context) is expected


def test_evaluate_expression_prefers_longer_operators():
    # "===" must not be read as "==" followed by "= 'x'"
    assert evaluate_expression("v === 'x'", {"v": "x"}) is True
    # ">=" must not be read as ">" with a right side of "= 3"
    assert evaluate_expression("n >= 3", {"n": 3}) is True


def test_evaluate_expression_non_numeric_ordering_is_false():
    assert evaluate_expression("name > 3", {"name": "abc"}) is False
    assert evaluate_expression("missing < 3", {}) is False


def test_evaluate_expression_truthiness_fallback():
    assert evaluate_expression("user.active", {"user": {"active": True}}) is True
    assert evaluate_expression("user.active", {"user": {}}) is False
    assert evaluate_expression("empty", {"empty": ""}) is False


def test_evaluate_expression_missing_value_equals_empty_string():
    assert evaluate_expression("missing == ''", {}) is True


def test_get_nested_value_indexes_into_lists():
    context = {"s1": {"data": {"items": [{"name": "Ada"}, {"name": "Bo"}]}}}
    assert get_nested_value(context, "s1.data.items.0.name") == "Ada"
    assert get_nested_value(context, "s1.data.items.1") == {"name": "Bo"}


def test_get_nested_value_bad_list_segments_return_none():
    context = {"items": ["a", "b"]}
    assert get_nested_value(context, "items.2") is None
    assert get_nested_value(context, "items.first") is None
    assert get_nested_value(context, "items.-1") is None
    assert get_nested_value({"word": "abc"}, "word.0") is None


def test_list_paths_work_in_templates_and_conditions():
    context = {"hook": {"data": [{"name": "Ada", "age": 36}]}}
    assert interpolate_string("hi {{hook.data.0.name}}", context) == "hi Ada"
    assert evaluate_expression("hook.data.0.name == 'Ada'", context) is True
    assert evaluate_expression("hook.data.0.age > 30", context) is True
    assert evaluate_expression("hook.data.1.age > 30", context) is False


def test_null_is_distinct_from_missing():
    context = {"value": None}
    assert interpolate_string("[{{value}}] [{{absent}}]", context) == "[null] []"
    assert evaluate_expression("value == 'null'", context) is True
    assert evaluate_expression("value >= 0", context) is True
    assert evaluate_expression("absent >= 0", context) is False
    assert evaluate_expression("value", context) is False
