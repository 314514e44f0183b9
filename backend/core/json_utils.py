"""
JSON helpers shared by the API, the CLI and the document exporter.
"""

import json
import math
from typing import Any

from core.models import TreeNode
from core.toon_encoder import encode_to_toon


def _parse_int(literal: str) -> int | float:
    # Integers past int()'s digit limit are out of float64 range anyway
    try:
        return int(literal)
    except ValueError:
        return float(literal)


def parse_json(json_str: str) -> Any:
    """
    Parse JSON text the way every conversion expects it.

    Raises:
        json.JSONDecodeError: If json_str is not valid JSON
    """
    return json.loads(json_str, parse_int=_parse_int)


def _finite(value: Any) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, list):
        return [_finite(v) for v in value]
    if isinstance(value, dict):
        return {k: _finite(v) for k, v in value.items()}
    return value


def format_json(json_str: str) -> str:
    """Parse then re-serialize JSON with 2-space indentation; non-finite numbers become null."""
    parsed = parse_json(json_str)
    return json.dumps(_finite(parsed), indent=2, ensure_ascii=False)


def json_to_toon(json_str: str) -> str:
    """
    Convert JSON string to TOON format.

    Args:
        json_str: JSON-formatted string

    Returns:
        TOON-formatted string

    Raises:
        json.JSONDecodeError: If json_str is not valid JSON
    """
    data = parse_json(json_str)
    return encode_to_toon(data).rstrip()


def build_tree(value: Any, key: str = "root") -> TreeNode:
    """Build the node tree shown by the JSON tree view."""
    if value is None:
        return TreeNode(key=key, value=None, type="null")
    if isinstance(value, bool):
        return TreeNode(key=key, value=value, type="boolean")
    if isinstance(value, (int, float)):
        return TreeNode(key=key, value=_finite(value), type="number")
    if isinstance(value, list):
        return TreeNode(
            key=key,
            value=f"Array({len(value)})",
            type="array",
            children=[build_tree(item, str(i)) for i, item in enumerate(value)],
        )
    if isinstance(value, dict):
        return TreeNode(
            key=key,
            value=f"{{{len(value)}}}",
            type="object",
            children=[build_tree(v, k) for k, v in value.items()],
        )
    return TreeNode(key=key, value=str(value), type="string")
