"""In-memory inverted index over canvas node titles, notes, roles and conversations."""

import itertools
import threading
import uuid
from bisect import bisect_left
from collections.abc import Iterable, Iterator

from loguru import logger

from canvas_search.config import (
    DISTANCE_THRESHOLD,
    MAX_RESULTS,
    NOTE_UNIT_NAMESPACE,
    ROLE_LABEL_PREFIX,
    ROLE_UNIT_NAMESPACE,
    SNIPPET_CONTEXT,
    UNTITLED_TITLE,
)
from canvas_search.core.search.ranking import rank_results
from canvas_search.core.search.snippet import find_match, make_snippet
from canvas_search.core.search.tokenizer import tokenize
from canvas_search.models.node import (
    NOTE_UNIT_INDEX,
    ROLE_UNIT_INDEX,
    TITLE_UNIT_INDEX,
    IndexStats,
    MessageRole,
    NodeMetadata,
    NodeSnapshot,
    NodeType,
    Point,
    Posting,
    SearchResult,
    UnitKind,
)


def role_unit_id(node_id: str) -> str:
    """Text unit id of a node's assigned-role label."""
    return str(uuid.uuid5(ROLE_UNIT_NAMESPACE, node_id))


def note_unit_id(node_id: str) -> str:
    """Text unit id of a note node's body.

    Distinct from the node id, which already names the title unit.
    """
    return str(uuid.uuid5(NOTE_UNIT_NAMESPACE, node_id))


def _metadata_for(node: NodeSnapshot) -> NodeMetadata:
    return NodeMetadata(
        title=node.title or UNTITLED_TITLE,
        color=node.color,
        position=node.position,
        assigned_role=node.assigned_role or None,
    )


class ConversationSearchIndex:
    """Token index with prefix matching, substring fallback, snippets and ranking.

    All mutations and searches run under one re-entrant lock, so a search
    never sees a node halfway through being reindexed or removed.
    """

    def __init__(
        self,
        *,
        snippet_context: int = SNIPPET_CONTEXT,
        max_results: int = MAX_RESULTS,
        distance_threshold: float = DISTANCE_THRESHOLD,
    ) -> None:
        self.snippet_context = snippet_context
        self.max_results = max_results
        self.distance_threshold = distance_threshold

        self._lock = threading.RLock()
        self._postings: dict[str, list[Posting]] = {}
        self._texts: dict[str, str] = {}
        self._node_units: dict[str, set[str]] = {}
        self._metadata: dict[str, NodeMetadata] = {}

        # Per text unit bookkeeping, all keyed by text_unit_id.
        self._unit_owner: dict[str, str] = {}
        self._unit_kind: dict[str, UnitKind] = {}
        self._unit_role: dict[str, MessageRole] = {}
        self._unit_tokens: dict[str, set[str]] = {}

        # Sorted postings keys for prefix lookups; None when stale.
        self._vocabulary: list[str] | None = None

        # Build order of results, the final recency tie-break.
        self._result_counter = itertools.count()

    # Maintenance

    def rebuild(self, nodes: Iterable[NodeSnapshot]) -> None:
        """Replace the whole index with the given nodes."""
        with self._lock:
            self._postings.clear()
            self._texts.clear()
            self._node_units.clear()
            self._metadata.clear()
            self._unit_owner.clear()
            self._unit_kind.clear()
            self._unit_role.clear()
            self._unit_tokens.clear()
            self._vocabulary = None

            for node in nodes:
                self.index_node(node)

            logger.debug(
                "Rebuilt search index: {} nodes, {} units, {} tokens",
                len(self._metadata),
                len(self._texts),
                len(self._postings),
            )

    def index_node(self, node: NodeSnapshot) -> None:
        """(Re)index a node so the index reflects exactly its current content."""
        with self._lock:
            self._remove_node_locked(node.id)
            self._metadata[node.id] = _metadata_for(node)

            self._add_unit(
                node.id,
                node.id,
                node.title,
                stored_text=node.title,
                unit_index=TITLE_UNIT_INDEX,
                kind=UnitKind.TITLE,
            )

            if node.assigned_role:
                self._add_unit(
                    node.id,
                    role_unit_id(node.id),
                    node.assigned_role,
                    stored_text=f"{ROLE_LABEL_PREFIX} {node.assigned_role}",
                    unit_index=ROLE_UNIT_INDEX,
                    kind=UnitKind.ASSIGNED_ROLE,
                )

            for i, message in enumerate(node.conversation):
                self._add_unit(
                    node.id,
                    message.id,
                    message.content,
                    stored_text=message.content,
                    unit_index=i,
                    kind=UnitKind.CONVERSATION,
                    role=message.role,
                )

            if node.type == NodeType.NOTE and node.description:
                self._add_unit(
                    node.id,
                    note_unit_id(node.id),
                    node.description,
                    stored_text=node.description,
                    unit_index=NOTE_UNIT_INDEX,
                    kind=UnitKind.NOTE,
                )

            logger.debug(
                "Indexed node {} ({} units)", node.id, len(self._node_units.get(node.id, ()))
            )

    def remove_node(self, node_id: str) -> None:
        """Drop every posting, text and metadata entry owned by a node."""
        with self._lock:
            self._remove_node_locked(node_id)

    def update_node_metadata(self, node: NodeSnapshot) -> None:
        """Refresh title, color, position and role label without touching content."""
        with self._lock:
            self._metadata[node.id] = _metadata_for(node)

    def _add_unit(
        self,
        node_id: str,
        unit_id: str,
        indexed_text: str,
        *,
        stored_text: str,
        unit_index: int,
        kind: UnitKind,
        role: MessageRole | None = None,
    ) -> None:
        if not stored_text:
            return

        owner = self._unit_owner.get(unit_id)
        if owner is not None:
            logger.warning(
                "Text unit {} of node {} is already owned by node {}, skipping",
                unit_id,
                node_id,
                owner,
            )
            return

        self._texts[unit_id] = stored_text
        self._node_units.setdefault(node_id, set()).add(unit_id)
        self._unit_owner[unit_id] = node_id
        self._unit_kind[unit_id] = kind
        if role is not None:
            self._unit_role[unit_id] = role

        tokens = self._unit_tokens.setdefault(unit_id, set())
        for position, token in enumerate(tokenize(indexed_text)):
            bucket = self._postings.get(token)
            if bucket is None:
                bucket = self._postings[token] = []
                self._vocabulary = None
            bucket.append(
                Posting(
                    node_id=node_id,
                    text_unit_id=unit_id,
                    unit_index=unit_index,
                    token_position=position,
                )
            )
            tokens.add(token)

    def _remove_node_locked(self, node_id: str) -> None:
        self._metadata.pop(node_id, None)
        unit_ids = self._node_units.pop(node_id, None)
        if not unit_ids:
            return

        for unit_id in unit_ids:
            for token in self._unit_tokens.pop(unit_id, ()):
                remaining = [p for p in self._postings[token] if p.text_unit_id != unit_id]
                if remaining:
                    self._postings[token] = remaining
                else:
                    del self._postings[token]
                    self._vocabulary = None
            self._texts.pop(unit_id, None)
            self._unit_owner.pop(unit_id, None)
            self._unit_kind.pop(unit_id, None)
            self._unit_role.pop(unit_id, None)

    # Queries

    def search(self, query: str, viewport_center: Point | None = None) -> list[SearchResult]:
        """Find text units matching query, best first.

        Every query token must prefix-match some token of the unit. Units that
        pass that test but do not contain the whole query literally are
        dropped. When no unit passes, or the query has no tokens, every stored
        text is scanned for the query as a substring instead.

        Args:
            query: Raw query text.
            viewport_center: Canvas point used to favor nearby nodes.

        Returns:
            At most `max_results` results.
        """
        trimmed = query.strip()
        if not trimmed:
            return []

        with self._lock:
            tokens = tokenize(trimmed)
            candidates = self._token_candidates(tokens) if tokens else []
            if candidates:
                results = self._results_for(candidates, trimmed)
            else:
                results = self._substring_results(trimmed)

        return rank_results(
            results,
            trimmed,
            viewport_center,
            limit=self.max_results,
            distance_threshold=self.distance_threshold,
        )

    def _keys_with_prefix(self, prefix: str) -> Iterator[str]:
        if self._vocabulary is None:
            self._vocabulary = sorted(self._postings)
        vocabulary = self._vocabulary
        i = bisect_left(vocabulary, prefix)
        while i < len(vocabulary) and vocabulary[i].startswith(prefix):
            yield vocabulary[i]
            i += 1

    def _token_candidates(self, tokens: list[str]) -> list[str]:
        candidates: dict[str, None] | None = None
        for token in tokens:
            matched: dict[str, None] = {}
            for key in self._keys_with_prefix(token):
                for posting in self._postings[key]:
                    matched[posting.text_unit_id] = None

            if candidates is None:
                candidates = matched
            else:
                candidates = {unit_id: None for unit_id in candidates if unit_id in matched}
            if not candidates:
                return []
        return list(candidates or ())

    def _results_for(self, unit_ids: list[str], query: str) -> list[SearchResult]:
        results: list[SearchResult] = []
        for unit_id in unit_ids:
            text = self._texts.get(unit_id)
            if text is None:
                continue
            span = find_match(text, query)
            if span is None:
                # Token match without the literal query: dropped, not shown
                # with a token-based snippet.
                continue
            result = self._make_result(unit_id, text, span)
            if result is not None:
                results.append(result)
        return results

    def _substring_results(self, query: str) -> list[SearchResult]:
        results: list[SearchResult] = []
        for unit_id, text in self._texts.items():
            span = find_match(text, query)
            if span is None:
                continue
            result = self._make_result(unit_id, text, span)
            if result is None:
                continue
            results.append(result)
            if len(results) >= self.max_results:
                break
        return results

    def _make_result(self, unit_id: str, text: str, span: tuple[int, int]) -> SearchResult | None:
        node_id = self._unit_owner.get(unit_id)
        if node_id is None:
            return None
        metadata = self._metadata.get(node_id)
        if metadata is None:
            return None

        start, end = span
        return SearchResult(
            node_id=node_id,
            node_title=metadata.title,
            node_color=metadata.color,
            text_unit_id=unit_id,
            message_role=self._unit_role.get(unit_id),
            snippet=make_snippet(text, start, end, context=self.snippet_context),
            full_text=text,
            match_start=start,
            match_end=end,
            node_position=metadata.position,
            match_kind=self._unit_kind.get(unit_id, UnitKind.CONVERSATION),
            assigned_role=metadata.assigned_role,
            sequence=next(self._result_counter),
        )

    # Inspection

    def stats(self) -> IndexStats:
        with self._lock:
            return IndexStats(
                node_count=len(self._metadata),
                unit_count=len(self._texts),
                token_count=len(self._postings),
            )

    def postings_for(self, token: str) -> tuple[Posting, ...]:
        with self._lock:
            return tuple(self._postings.get(token, ()))

    def text_for(self, unit_id: str) -> str | None:
        with self._lock:
            return self._texts.get(unit_id)

    def units_for(self, node_id: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._node_units.get(node_id, ()))

    def metadata_for(self, node_id: str) -> NodeMetadata | None:
        with self._lock:
            return self._metadata.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        with self._lock:
            return node_id in self._metadata

    def __len__(self) -> int:
        with self._lock:
            return len(self._metadata)
