"""
Quick validation tests for core helpers: JSON formatting, tree building,
markdown rendering and token math.
"""

import json

import pytest

from core.exceptions import UnsupportedFormatError
from core.json_utils import build_tree, format_json, json_to_toon, parse_json
from core.markdown_renderer import auto_format, render_markdown
from core.utils import savings_percent


def test_format_json():
    """Test pretty-printing with 2-space indentation."""
    print("Testing format_json...")

    assert format_json('{"a":[1,2]}') == '{\n  "a": [\n    1,\n    2\n  ]\n}'
    assert format_json('{"name": "ünï"}') == '{\n  "name": "ünï"\n}'
    assert format_json("[]") == "[]"

    with pytest.raises(json.JSONDecodeError):
        format_json("{'single': 'quotes'}")

    print("✓ format_json tests passed")


def test_build_tree():
    """Test tree view structure."""
    print("Testing build_tree...")

    tree = build_tree(json.loads('{"a": [1, "x"], "b": null, "c": {"d": true}}'))
    assert tree.key == "root"
    assert tree.type == "object"
    assert tree.value == "{3}"
    assert [c.key for c in tree.children] == ["a", "b", "c"]

    array_node = tree.children[0]
    assert array_node.type == "array"
    assert array_node.value == "Array(2)"
    assert [(c.key, c.type, c.value) for c in array_node.children] == [
        ("0", "number", 1),
        ("1", "string", "x"),
    ]

    assert tree.children[1].type == "null"
    assert tree.children[1].children is None
    assert tree.children[2].children[0].type == "boolean"

    scalar = build_tree(3.5, key="n")
    assert (scalar.key, scalar.type, scalar.value) == ("n", "number", 3.5)

    print("✓ build_tree tests passed")


def test_oversized_integer_literals():
    """Test integers past int()'s digit limit parse as out-of-range numbers."""
    print("Testing oversized integer literals...")

    huge = "1" * 5000
    assert json_to_toon(huge) == "null"
    assert json_to_toon(f'{{"n": {huge}, "m": 2}}') == "n: null\nm: 2"
    assert format_json(f"[{huge}]") == "[\n  null\n]"
    assert parse_json(f"-{huge}") == float("-inf")

    node = build_tree(parse_json(huge))
    assert (node.type, node.value) == ("number", None)

    print("✓ oversized integer tests passed")


def test_render_markdown():
    """Test markdown, html and text rendering."""
    print("Testing render_markdown...")

    assert "<h1>Title</h1>" in render_markdown("# Title")
    assert "<br" in render_markdown("line one\nline two")
    assert 'href="https://example.com"' in render_markdown("Visit https://example.com today")
    assert "<table>" in render_markdown("| a | b |\n|---|---|\n| 1 | 2 |")

    assert render_markdown("<b>raw</b>", "html") == "<b>raw</b>"

    text = render_markdown("<b>x</b> & y", "text")
    assert text.startswith("<pre ")
    assert "&lt;b&gt;x&lt;/b&gt; &amp; y" in text

    with pytest.raises(UnsupportedFormatError):
        render_markdown("x", "pdf")

    print("✓ render_markdown tests passed")


def test_auto_format():
    """Test markdown spacing cleanup."""
    print("Testing auto_format...")

    assert auto_format("Intro\n# Heading\nText\n- a\n- b") == "Intro\n\n# Heading\nText\n\n- a\n- b"
    assert auto_format("# One\n## Two") == "# One\n## Two"
    assert auto_format("a\\n\\n\\n\\nb") == "a\n\nb"
    assert auto_format("a\r\nb") == "a\nb"
    assert auto_format("Text\n> quote") == "Text\n\n> quote"
    assert auto_format("1. first\n2. second") == "1. first\n2. second"
    assert auto_format("  \n\nbody\n\n") == "body"

    fenced = "Text\n```\n# not a heading\n- not a list\n```"
    assert auto_format(fenced) == fenced

    print("✓ auto_format tests passed")


def test_savings_percent():
    assert savings_percent(12, 4) == 66.7
    assert savings_percent(10, 10) == 0.0
    assert savings_percent(0, 5) == 0.0


def run_all_tests():
    """Run all tests."""
    print("============================================================")
    print("Running Core Validation Tests")
    print("============================================================")

    test_format_json()
    test_build_tree()
    test_oversized_integer_literals()
    test_render_markdown()
    test_auto_format()
    test_savings_percent()

    print("\n============================================================")
    print("✅ All tests passed!")
    print("============================================================")


if __name__ == "__main__":
    run_all_tests()
