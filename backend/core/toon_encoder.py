"""
TOON (Token-Oriented Object Notation) Encoder.

TOON is a compact, indentation-based rendering of JSON data meant for LLM
prompts. Uniform arrays of objects collapse into a header plus CSV-like rows,
which is where most of the token savings come from.

Format example:
    name: MDView
    users[2]{id,role}:
      1,admin
      2,user

Compared to JSON:
    {"name": "MDView", "users": [{"id": 1, "role": "admin"}, {"id": 2, "role": "user"}]}
"""

import math
import re
from decimal import Decimal
from typing import Any, Union

JsonValue = Union[None, bool, int, float, str, list["JsonValue"], dict[str, "JsonValue"]]

INDENT = "  "  # 2 spaces per nesting level

_NUMERIC_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_LEADING_ZERO_RE = re.compile(r"0[0-9]+")
_SPECIAL_CHARS_RE = re.compile(r'[:"\\\[\]{}]')
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f]")
_BARE_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")
_LITERALS = frozenset({"true", "false", "null"})
_MAX_SAFE_INTEGER = 2**53 - 1

# ECMAScript WhiteSpace and LineTerminator, the set String#trim removes
_JS_WHITESPACE = (
    "\t\n\v\f\r \xa0\u1680"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
    + "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def _indent(depth: int) -> str:
    return INDENT * depth


def is_primitive(value: Any) -> bool:
    """Anything that is not a list or dict encodes as a single scalar."""
    return not isinstance(value, (list, dict))


class ToonEncoder:
    """
    Encoder for converting parsed JSON values to TOON text.

    Arrays pick the most compact of three layouts:
    - inline for all-primitive arrays: ``[3]: 1,2,3``
    - tabular for uniform objects with primitive values: ``[2]{id,role}:``
    - a ``- `` prefixed list for everything else
    """

    @staticmethod
    def encode_number(n: int | float) -> str:
        """
        Encode a number the way ECMAScript's Number#toString prints it.

        Numbers are float64: integers beyond 2**53 lose precision the same
        way, and ones too large for a double become null. Floats use the
        shortest round-trip digits, integral values print without a fraction,
        and exponent notation only appears below 1e-6 or from 1e21 upward.
        """
        if isinstance(n, int):
            if abs(n) <= _MAX_SAFE_INTEGER:
                return str(n)
            try:
                n = float(n)
            except OverflowError:
                return "null"
        if math.isnan(n) or math.isinf(n):
            return "null"
        if n == 0:
            return "0"  # also normalizes -0.0

        sign = "-" if n < 0 else ""
        _, digit_tuple, exponent = Decimal(repr(abs(n))).as_tuple()
        digits = "".join(map(str, digit_tuple))
        stripped = digits.rstrip("0")
        exponent += len(digits) - len(stripped)
        digits = stripped

        k = len(digits)
        point = exponent + k  # position of the decimal point relative to digits

        if k <= point <= 21:
            return sign + digits + "0" * (point - k)
        if 0 < point <= 21:
            return sign + digits[:point] + "." + digits[point:]
        if -6 < point <= 0:
            return sign + "0." + "0" * -point + digits

        e = point - 1
        mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
        return f"{sign}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"

    @staticmethod
    def is_bare_string(s: str) -> bool:
        """Check whether a string can be emitted without quotes."""
        if not s or s != s.strip(_JS_WHITESPACE):
            return False
        if s in _LITERALS:
            return False
        if s.startswith("-"):
            return False
        # Would read back as a number
        if _NUMERIC_RE.fullmatch(s) or _LEADING_ZERO_RE.fullmatch(s):
            return False
        if _SPECIAL_CHARS_RE.search(s) or _CONTROL_CHARS_RE.search(s):
            return False
        # Comma is the row/element delimiter
        return "," not in s

    @classmethod
    def encode_string(cls, s: str) -> str:
        if s == "":
            return '""'
        if cls.is_bare_string(s):
            return s
        escaped = (
            s.replace("\\", "\\\\")
            .replace('"', '\\"')
            .replace("\n", "\\n")
            .replace("\r", "\\r")
            .replace("\t", "\\t")
        )
        return f'"{escaped}"'

    @staticmethod
    def encode_key(key: str) -> str:
        if _BARE_KEY_RE.fullmatch(key):
            return key
        return '"' + key.replace("\\", "\\\\").replace('"', '\\"') + '"'

    @classmethod
    def encode_scalar(cls, value: Any) -> str:
        """
        Encode a primitive JSON value.

        Args:
            value: None, bool, int, float or str

        Returns:
            TOON scalar text
        """
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return cls.encode_number(value)
        if isinstance(value, str):
            return cls.encode_string(value)
        # Fallback for non-JSON values
        return cls.encode_string(str(value))

    @staticmethod
    def is_tabular(items: list[Any]) -> bool:
        """All items are objects with the same ordered keys and primitive values."""
        if not items or not all(isinstance(item, dict) for item in items):
            return False
        fields = list(items[0])
        return all(
            list(item) == fields and all(is_primitive(v) for v in item.values())
            for item in items
        )

    @classmethod
    def encode_array(cls, items: list[Any], depth: int) -> str:
        """
        Encode an array whose header continues the current line.

        Body lines (table rows or list items) are indented at depth + 1.
        """
        if not items:
            return "[0]:"

        if all(is_primitive(v) for v in items):
            return f"[{len(items)}]: " + ",".join(cls.encode_scalar(v) for v in items)

        child_indent = _indent(depth + 1)

        if cls.is_tabular(items):
            fields = list(items[0])
            header = ",".join(cls.encode_key(f) for f in fields)
            lines = [f"[{len(items)}]{{{header}}}:"]
            for item in items:
                row = ",".join(cls.encode_scalar(item[f]) for f in fields)
                lines.append(child_indent + row)
            return "\n".join(lines)

        lines = [f"[{len(items)}]:"]
        for item in items:
            if is_primitive(item):
                lines.append(f"{child_indent}- {cls.encode_scalar(item)}")
            elif isinstance(item, list):
                lines.append(f"{child_indent}- {cls.encode_array(item, depth + 1)}")
            elif not item:
                lines.append(f"{child_indent}-")
            else:
                entries = iter(item.items())
                first_key, first_value = next(entries)
                lines.append(f"{child_indent}- {cls.encode_key_value(first_key, first_value, depth + 1)}")
                for key, value in entries:
                    lines.append(f"{child_indent}  {cls.encode_key_value(key, value, depth + 1)}")
        return "\n".join(lines)

    @classmethod
    def encode_key_value(cls, key: str, value: Any, depth: int) -> str:
        """Encode one object field; continuation lines carry their own indentation."""
        k = cls.encode_key(key)

        if is_primitive(value):
            return f"{k}: {cls.encode_scalar(value)}"

        if isinstance(value, list):
            # Empty and inline arrays share encode_array's one-line forms
            return k + cls.encode_array(value, depth)

        lines = [f"{k}:"]
        for child_key, child_value in value.items():
            lines.append(_indent(depth + 1) + cls.encode_key_value(child_key, child_value, depth + 1))
        return "\n".join(lines)

    @classmethod
    def encode_object(cls, obj: dict[str, Any], depth: int) -> str:
        prefix = _indent(depth)
        return "\n".join(prefix + cls.encode_key_value(k, v, depth) for k, v in obj.items())

    @classmethod
    def encode_value(cls, value: Any, depth: int = 0) -> str:
        if isinstance(value, list):
            return cls.encode_array(value, depth)
        if isinstance(value, dict):
            return cls.encode_object(value, depth)
        return cls.encode_scalar(value)

    @classmethod
    def encode(cls, value: JsonValue) -> str:
        """
        Encode a parsed JSON value to TOON format.

        Args:
            value: Output of json.loads (or any equivalent value tree)

        Returns:
            TOON-formatted string without trailing whitespace
        """
        return cls.encode_value(value, 0).rstrip()


def encode_to_toon(value: JsonValue) -> str:
    """
    Convenience function to encode data to TOON format.

    Args:
        value: Parsed JSON value

    Returns:
        TOON-formatted string
    """
    return ToonEncoder.encode(value)
