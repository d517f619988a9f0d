"""Tests for snippet extraction and markdown cleanup."""

from canvas_search.core.search.snippet import ELLIPSIS, find_match, make_snippet, strip_markdown


def test_find_match_is_case_insensitive() -> None:
    assert find_match("What is our Q3 budget?", "q3") == (12, 14)


def test_find_match_treats_query_literally() -> None:
    assert find_match("cost (USD) per seat", "(usd)") == (5, 10)
    assert find_match("cost per seat", "c.st") is None


def test_strip_markdown_removes_inline_markup() -> None:
    text = "**bold** and __strong__ and *it* and `code` and [docs](https://example.com)"
    assert strip_markdown(text) == "bold and strong and it and code and docs"


def test_strip_markdown_removes_leading_block_markers() -> None:
    assert strip_markdown("## Heading") == "Heading"
    assert strip_markdown("- item") == "item"
    assert strip_markdown("12. numbered") == "numbered"


def test_snippet_at_start_has_only_trailing_ellipsis() -> None:
    text = "budget " + "x" * 193
    assert len(text) == 200

    snippet = make_snippet(text, 0, 6)
    assert snippet.startswith("budget")
    assert snippet.endswith(ELLIPSIS)


def test_snippet_in_middle_has_both_ellipses() -> None:
    text = "a" * 100 + "budget" + "b" * 94
    assert len(text) == 200

    snippet = make_snippet(text, 100, 106)
    assert snippet.startswith(ELLIPSIS)
    assert snippet.endswith(ELLIPSIS)
    assert snippet == ELLIPSIS + "a" * 60 + "budget" + "b" * 60 + ELLIPSIS


def test_snippet_of_short_text_is_the_whole_text() -> None:
    assert make_snippet("What is our Q3 budget?", 12, 14) == "What is our Q3 budget?"


def test_snippet_collapses_newlines_and_strips_markdown() -> None:
    text = "line **one**\nline two"
    assert make_snippet(text, 18, 21) == "line one line two"
