"""Tokenizer shared by indexing and querying."""

import re

from canvas_search.config import MIN_TOKEN_LENGTH

# Runs of letters and digits; underscore counts as a separator.
_TOKEN_RE = re.compile(r"[^\W_]+")


def tokenize(text: str) -> list[str]:
    """Lowercase text and split it into tokens of at least MIN_TOKEN_LENGTH characters."""
    return [t for t in _TOKEN_RE.findall(text.lower()) if len(t) >= MIN_TOKEN_LENGTH]
