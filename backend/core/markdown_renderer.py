"""
Markdown rendering and cleanup for the editor preview.
"""

import html
import re

from markdown_it import MarkdownIt

from core.exceptions import UnsupportedFormatError

_md = MarkdownIt(
    "js-default",
    {"html": True, "linkify": True, "typographer": True, "breaks": True},
)

_HEADING_RE = re.compile(r"#{1,6}\s")
_LIST_RE = re.compile(r"(?:[-*+]|\d+\.)\s")
_BLOCKQUOTE_RE = re.compile(r">\s")

_PRE_STYLE = (
    "white-space: pre-wrap; word-wrap: break-word; "
    "font-family: monospace; line-height: 1.5;"
)


def render_markdown(content: str, format: str = "markdown") -> str:
    """
    Render document content to HTML.

    Args:
        content: Raw document text
        format: "markdown" (rendered), "html" (passed through) or
            "text" (escaped and wrapped in <pre>)

    Returns:
        HTML string
    """
    if format == "markdown":
        return _md.render(content)
    if format == "html":
        return content
    if format == "text":
        return f'<pre style="{_PRE_STYLE}">{html.escape(content)}</pre>'
    raise UnsupportedFormatError(f"Unsupported render format: {format}")


def auto_format(content: str) -> str:
    """
    Tidy pasted markdown.

    Unescapes literal "\\n", normalizes line endings, puts a blank line before
    headings, lists and blockquotes, and collapses repeated blank lines.
    Fenced code blocks are left as they are.
    """
    text = content.replace("\\n", "\n").replace("\r\n", "\n")

    result: list[str] = []
    previous_was_empty = False
    in_code_block = False

    for line in text.split("\n"):
        stripped = line.strip()

        if stripped.startswith("```"):
            in_code_block = not in_code_block
            result.append(line)
            previous_was_empty = False
            continue

        if in_code_block:
            result.append(line)
            previous_was_empty = False
            continue

        is_empty = not stripped
        previous = result[-1].strip() if result else ""
        needs_gap = bool(result) and not previous_was_empty

        if _HEADING_RE.match(stripped):
            if needs_gap and not _HEADING_RE.match(previous):
                result.append("")
        elif _LIST_RE.match(stripped):
            if needs_gap and not _LIST_RE.match(previous):
                result.append("")
        elif _BLOCKQUOTE_RE.match(stripped):
            if needs_gap:
                result.append("")

        if not is_empty or not previous_was_empty:
            result.append(line)

        previous_was_empty = is_empty

    formatted = re.sub(r"\n{3,}", "\n\n", "\n".join(result))
    return formatted.strip()
