"""
Tests for the TOON encoder: scalars, strings, keys, array layouts and objects.
"""

import json

import pytest

from core.json_utils import json_to_toon
from core.toon_encoder import ToonEncoder, encode_to_toon


# --- Scalars ---

@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (0, "0"),
        (-0.0, "0"),
        (42, "42"),
        (-7, "-7"),
        (1.5, "1.5"),
        (-2.25, "-2.25"),
        (3.0, "3"),
        (123.456, "123.456"),
        (0.1, "0.1"),
        (1e16, "10000000000000000"),
        (1e21, "1e+21"),
        (1.5e-7, "1.5e-7"),
        (0.000001, "0.000001"),
        (9007199254740993, "9007199254740992"),
        (123456789012345678901234567890, "1.2345678901234568e+29"),
        (10**400, "null"),
    ],
)
def test_encode_numbers(value, expected):
    assert encode_to_toon(value) == expected


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_encode_as_null(value):
    assert encode_to_toon(value) == "null"
    assert encode_to_toon({"x": value}) == "x: null"
    assert encode_to_toon([value, 1]) == "[2]: null,1"


def test_negative_zero_normalized_everywhere():
    assert encode_to_toon(-0.0) == "0"
    assert encode_to_toon({"x": -0.0}) == "x: 0"
    assert encode_to_toon([-0.0]) == "[1]: 0"
    assert json_to_toon("-0") == "0"
    assert json_to_toon("-0.0") == "0"


# --- Strings ---

@pytest.mark.parametrize(
    "value",
    ["hello", "hello world", "Null", "True", "1.2.3", "日本語", "a_b.c", "x-y", "#tag", "x\x85"],
)
def test_bare_strings(value):
    assert encode_to_toon(value) == value


@pytest.mark.parametrize(
    "value, expected",
    [
        ("", '""'),
        ("true", '"true"'),
        ("false", '"false"'),
        ("null", '"null"'),
        ("1,2", '"1,2"'),
        ("42", '"42"'),
        ("-3.5", '"-3.5"'),
        ("1e10", '"1e10"'),
        ("2.5E-3", '"2.5E-3"'),
        ("007", '"007"'),
        ("-", '"-"'),
        ("-dash", '"-dash"'),
        (" padded", '" padded"'),
        ("padded ", '"padded "'),
        ("\ufeffx", '"\ufeffx"'),
        ("x\u3000", '"x\u3000"'),
        ("key: value", '"key: value"'),
        ("[x]", '"[x]"'),
        ("{x}", '"{x}"'),
    ],
)
def test_quoted_strings(value, expected):
    assert encode_to_toon(value) == expected


def test_string_escaping():
    assert encode_to_toon('say "hi"') == '"say \\"hi\\""'
    assert encode_to_toon("back\\slash") == '"back\\\\slash"'
    assert encode_to_toon("line\nbreak") == '"line\\nbreak"'
    assert encode_to_toon("cr\rhere") == '"cr\\rhere"'
    assert encode_to_toon("tab\there") == '"tab\\there"'
    # Backslash is escaped first, so an existing escape is not doubled twice
    assert encode_to_toon('\\"') == '"\\\\\\""'


def test_other_control_characters_quoted_but_not_escaped():
    assert encode_to_toon("bell\x07") == '"bell\x07"'


def test_is_bare_string():
    assert ToonEncoder.is_bare_string("plain")
    assert not ToonEncoder.is_bare_string("")
    assert not ToonEncoder.is_bare_string("a,b")
    assert not ToonEncoder.is_bare_string("0123")


# --- Keys ---

def test_key_bareness():
    assert encode_to_toon({"user_name": 1}) == "user_name: 1"
    assert encode_to_toon({"user-name": 1}) == '"user-name": 1'
    assert encode_to_toon({"a.b": 1}) == "a.b: 1"
    assert encode_to_toon({"_private": 1}) == "_private: 1"
    assert encode_to_toon({"1abc": 1}) == '"1abc": 1'
    assert encode_to_toon({"": 1}) == '"": 1'
    assert encode_to_toon({"with space": 1}) == '"with space": 1'


def test_key_escaping_only_backslash_and_quote():
    assert ToonEncoder.encode_key('say"x') == '"say\\"x"'
    assert ToonEncoder.encode_key("a\\b") == '"a\\\\b"'
    assert ToonEncoder.encode_key("new\nline") == '"new\nline"'


# --- Arrays ---

def test_empty_array():
    assert encode_to_toon([]) == "[0]:"
    assert encode_to_toon({"tags": []}) == "tags[0]:"
    assert encode_to_toon([1, []]) == "[2]:\n  - 1\n  - [0]:"


def test_primitive_array_inline():
    assert encode_to_toon([1, 2, 3]) == "[3]: 1,2,3"
    assert encode_to_toon(["a", None, True, 1.5, ""]) == '[5]: a,null,true,1.5,""'
    assert encode_to_toon(["x,y", "z"]) == '[2]: "x,y",z'


def test_tabular_array():
    data = [{"id": 1, "role": "admin"}, {"id": 2, "role": "user"}]
    assert encode_to_toon(data) == "[2]{id,role}:\n  1,admin\n  2,user"


def test_tabular_quotes_keys_and_values():
    data = [{"user-name": "a,b", "ok": True}]
    assert encode_to_toon(data) == '[1]{"user-name",ok}:\n  "a,b",true'


def test_tabular_allows_mixed_value_types_per_column():
    data = [{"id": 1}, {"id": "x"}, {"id": None}]
    assert encode_to_toon(data) == "[3]{id}:\n  1\n  x\n  null"


def test_different_key_order_is_not_tabular():
    data = [{"a": 1, "b": 2}, {"b": 3, "a": 4}]
    assert encode_to_toon(data) == "[2]:\n  - a: 1\n    b: 2\n  - b: 3\n    a: 4"


def test_nested_values_are_not_tabular():
    data = [{"a": {"x": 1}}]
    assert encode_to_toon(data) == "[1]:\n  - a:\n    x: 1"


def test_mixed_array_uses_list_form():
    out = encode_to_toon([1, {"a": 1}])
    assert out == "[2]:\n  - 1\n  - a: 1"
    assert "{" not in out.splitlines()[0]


def test_list_object_items():
    data = [{"a": 1, "b": 2}, {"c": [1, 2]}, {}]
    assert encode_to_toon(data) == "\n".join([
        "[3]:",
        "  - a: 1",
        "    b: 2",
        "  - c[2]: 1,2",
        "  -",
    ])


def test_array_of_arrays():
    assert encode_to_toon([[1, 2], [3]]) == "[2]:\n  - [2]: 1,2\n  - [1]: 3"
    assert encode_to_toon([[{"a": 1}, {"a": 2}]]) == "[1]:\n  - [2]{a}:\n    1\n    2"


def test_objects_without_keys_trim_trailing_rows():
    assert encode_to_toon([{}, {}]) == "[2]{}:"


# --- Objects ---

def test_round_trip_scenario():
    text = '{"name":"MDView","users":[{"id":1,"role":"admin"},{"id":2,"role":"user"}]}'
    assert json_to_toon(text) == "name: MDView\nusers[2]{id,role}:\n  1,admin\n  2,user"


def test_insertion_order_preserved():
    assert encode_to_toon({"b": 1, "a": 2}) == "b: 1\na: 2"


def test_nested_objects():
    assert encode_to_toon({"a": {"b": {"c": 1}}}) == "a:\n  b:\n    c: 1"
    assert encode_to_toon({"a": {}, "b": 1}) == "a:\nb: 1"
    assert encode_to_toon({}) == ""


def test_nested_tabular_and_list_fields():
    data = {"data": {"rows": [{"x": 1}, {"x": 2}]}, "items": [1, {"a": 1}]}
    assert encode_to_toon(data) == "\n".join([
        "data:",
        "  rows[2]{x}:",
        "    1",
        "    2",
        "items[2]:",
        "  - 1",
        "  - a: 1",
    ])


def test_object_in_list_with_nested_fields():
    data = {"users": [{"name": "Ana", "tags": ["a", "b"], "address": {"city": "Porto"}}, 1]}
    assert encode_to_toon(data) == "\n".join([
        "users[2]:",
        "  - name: Ana",
        "    tags[2]: a,b",
        "    address:",
        "    city: Porto",
        "  - 1",
    ])


def test_deterministic_output():
    data = json.loads('{"z": [1, {"y": [true, null]}], "a": {"b": "c d"}}')
    assert encode_to_toon(data) == encode_to_toon(data)


def test_json_to_toon_propagates_parse_errors():
    with pytest.raises(json.JSONDecodeError):
        json_to_toon("{not json")


def test_json_to_toon_numbers_follow_parsed_values():
    assert json_to_toon('{"x": 1.0, "y": 1e400, "z": 10}') == "x: 1\ny: null\nz: 10"
