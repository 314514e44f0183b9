import tiktoken

# Cache tiktoken encoding at module level (expensive to load)
_TOKEN_ENCODING = None


def count_tokens(text: str, model: str = "gpt-4") -> int:
    """Count tokens for a given text using tiktoken (cached encoding)."""
    global _TOKEN_ENCODING
    if _TOKEN_ENCODING is None:
        try:
            _TOKEN_ENCODING = tiktoken.encoding_for_model(model)
        except KeyError:
            _TOKEN_ENCODING = tiktoken.get_encoding("cl100k_base")
    return len(_TOKEN_ENCODING.encode(text))


def savings_percent(before: int, after: int) -> float:
    """Share of `before` removed by going down to `after`, in percent."""
    if before <= 0:
        return 0.0
    return round((before - after) / before * 100, 1)
