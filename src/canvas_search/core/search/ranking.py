"""Relevance ordering of search results."""

from functools import cmp_to_key

from canvas_search.config import DISTANCE_THRESHOLD, MAX_RESULTS
from canvas_search.models.node import Point, SearchResult


def _compare(
    a: SearchResult,
    b: SearchResult,
    *,
    query: str,
    viewport_center: Point | None,
    distance_threshold: float,
) -> int:
    a_in_title = query in a.node_title.lower()
    b_in_title = query in b.node_title.lower()
    if a_in_title != b_in_title:
        return -1 if a_in_title else 1

    a_exact = query in a.full_text.lower()
    b_exact = query in b.full_text.lower()
    if a_exact != b_exact:
        return -1 if a_exact else 1

    if viewport_center is not None:
        a_dist = a.node_position.distance_to(viewport_center)
        b_dist = b.node_position.distance_to(viewport_center)
        # Small differences fall through to recency.
        if abs(a_dist - b_dist) > distance_threshold:
            return -1 if a_dist < b_dist else 1

    a_age = (a.timestamp, a.sequence)
    b_age = (b.timestamp, b.sequence)
    if a_age != b_age:
        return -1 if a_age > b_age else 1
    return 0


def rank_results(
    results: list[SearchResult],
    query: str,
    viewport_center: Point | None = None,
    *,
    limit: int = MAX_RESULTS,
    distance_threshold: float = DISTANCE_THRESHOLD,
) -> list[SearchResult]:
    """Sort results by relevance and keep the first `limit`.

    Order of precedence:
    - query found in the node title
    - query found verbatim in the matched text
    - closer to the viewport center, when the gap exceeds `distance_threshold`
    - newer result first (by timestamp, then by build sequence)
    """
    lowered = query.strip().lower()

    def cmp(a: SearchResult, b: SearchResult) -> int:
        return _compare(
            a,
            b,
            query=lowered,
            viewport_center=viewport_center,
            distance_threshold=distance_threshold,
        )

    return sorted(results, key=cmp_to_key(cmp))[:limit]
