"""
Conversion service for JSON payloads: pretty-printing, TOON encoding,
tree building and token accounting.
"""

from core.json_utils import build_tree, format_json, json_to_toon, parse_json
from core.models import TokenStats, TreeNode
from core.utils import count_tokens, savings_percent
from logger import get_logger

logger = get_logger(__name__)


class ConversionService:
    """Stateless JSON conversions. Parse errors propagate as json.JSONDecodeError."""

    @staticmethod
    def format_json(content: str) -> str:
        return format_json(content)

    @staticmethod
    def to_toon(content: str) -> str:
        output = json_to_toon(content)
        logger.debug(f"TOON conversion: {len(content)} -> {len(output)} chars")
        return output

    @staticmethod
    def tree(content: str) -> TreeNode:
        return build_tree(parse_json(content))

    @staticmethod
    def token_stats(content: str) -> TokenStats:
        """
        Compare the token cost of the payload as indented JSON and as TOON.

        Both sides are derived from the same parsed value, so the comparison
        does not depend on how the input happened to be formatted.
        """
        pretty = format_json(content)
        toon = json_to_toon(content)

        json_tokens = count_tokens(pretty)
        toon_tokens = count_tokens(toon)

        return TokenStats(
            json_tokens=json_tokens,
            toon_tokens=toon_tokens,
            saved_tokens=json_tokens - toon_tokens,
            savings_percent=savings_percent(json_tokens, toon_tokens),
        )
