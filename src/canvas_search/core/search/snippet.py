"""Snippet extraction and markdown cleanup for search results."""

import re

from canvas_search.config import SNIPPET_CONTEXT

ELLIPSIS = "…"

# Applied in order: bold before italic, so "**x**" is not read as two "*x*".
_MARKDOWN_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"_([^_]+)_"), r"\1"),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"^#{1,6}\s*"), ""),
    (re.compile(r"^[-*]\s+"), ""),
    (re.compile(r"^\d+\.\s+"), ""),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"\s\*\s"), " "),
    (re.compile(r"  +"), " "),
]


def find_match(text: str, query: str) -> tuple[int, int] | None:
    """Locate the first case-insensitive literal occurrence of query in text.

    Returns:
        (start, end) offsets into the original text, or None.
    """
    if not query:
        return None
    m = re.search(re.escape(query), text, flags=re.IGNORECASE)
    if m is None:
        return None
    return m.start(), m.end()


def strip_markdown(text: str) -> str:
    """Remove common markdown markup, keeping the visible text.

    Line-start rules only look at the start of the string; snippets are
    single-line by the time they get here.
    """
    for pattern, repl in _MARKDOWN_RULES:
        text = pattern.sub(repl, text)
    return text


def make_snippet(text: str, start: int, end: int, *, context: int = SNIPPET_CONTEXT) -> str:
    """Cut a display excerpt around text[start:end].

    Args:
        text: Full text of the matched unit.
        start: Match start offset.
        end: Match end offset.
        context: Characters to keep on each side of the match.

    Returns:
        Cleaned excerpt, with an ellipsis on each side that was cut short.
    """
    lower = max(0, start - context)
    upper = min(len(text), end + context)

    snippet = text[lower:upper].replace("\n", " ").replace("  ", " ")
    snippet = strip_markdown(snippet)

    if lower > 0:
        snippet = ELLIPSIS + snippet
    if upper < len(text):
        snippet = snippet + ELLIPSIS
    return snippet.strip()
