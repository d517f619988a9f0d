"""Debounced search-as-you-type front end for the search index."""

import threading
from collections.abc import Callable

from loguru import logger

from canvas_search.config import DEBOUNCE_SECONDS
from canvas_search.models.node import Point, SearchHighlight, SearchResult
from canvas_search.protocols import SearchIndexProtocol, TimerFactory, TimerProtocol

ResultCallback = Callable[[SearchResult], None]
Listener = Callable[["SearchController"], None]


def _daemon_timer(interval: float, callback: Callable[[], None]) -> TimerProtocol:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class SearchController:
    """Owns the live query and the results shown for it.

    Every change to `query` re-arms a debounce timer; when it fires, the
    search runs on the timer's thread. Each run takes a sequence number and
    only the latest run may publish its results, so a slow search from an
    earlier keystroke never overwrites a newer one.
    """

    def __init__(
        self,
        index: SearchIndexProtocol,
        *,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        self._index = index
        self._debounce_seconds = debounce_seconds
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._query = ""
        self._results: list[SearchResult] = []
        self._is_searching = False
        self._has_searched = False
        self._viewport_center: Point | None = None

        self._pending: TimerProtocol | None = None
        self._generation = 0
        self._sequence = 0

        self._on_select: ResultCallback | None = None
        self._listeners: list[Listener] = []

    @property
    def query(self) -> str:
        return self._query

    @query.setter
    def query(self, value: str) -> None:
        with self._lock:
            if value == self._query:
                return
            self._query = value
            timer = self._arm_locked()
        timer.start()
        self._notify()

    @property
    def results(self) -> list[SearchResult]:
        return list(self._results)

    @property
    def is_searching(self) -> bool:
        return self._is_searching

    @property
    def has_searched(self) -> bool:
        return self._has_searched

    @property
    def viewport_center(self) -> Point | None:
        return self._viewport_center

    def update_viewport_center(self, center: Point | None) -> None:
        """Set the canvas point used for proximity ranking of later searches."""
        self._viewport_center = center

    def clear_search(self) -> None:
        """Reset the query and results, dropping any pending or running search."""
        with self._lock:
            self._cancel_pending_locked()
            self._sequence += 1
            self._query = ""
            self._results = []
            self._is_searching = False
            self._has_searched = False
        self._notify()

    def search_immediately(self) -> None:
        """Search the current query now, on the calling thread."""
        with self._lock:
            self._cancel_pending_locked()
            query = self._query
        self._run_search(query)

    def on_select_result(self, callback: ResultCallback | None) -> None:
        """Register the host callback invoked when a result is selected."""
        self._on_select = callback

    def select(self, result: SearchResult) -> SearchHighlight:
        """Forward a selected result to the host and return its highlight."""
        highlight = result.highlight(self._query)
        if self._on_select is not None:
            self._on_select(result)
        return highlight

    def add_listener(self, listener: Listener) -> None:
        """Call `listener(controller)` after every state change."""
        self._listeners.append(listener)

    def close(self) -> None:
        with self._lock:
            self._cancel_pending_locked()

    def _arm_locked(self) -> TimerProtocol:
        self._cancel_pending_locked()
        generation = self._generation
        timer = self._timer_factory(
            self._debounce_seconds, lambda: self._on_timer(generation)
        )
        self._pending = timer
        return timer

    def _cancel_pending_locked(self) -> None:
        self._generation += 1
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._pending = None
            query = self._query
        self._run_search(query)

    def _run_search(self, query: str) -> None:
        trimmed = query.strip()
        with self._lock:
            self._sequence += 1
            sequence = self._sequence
            center = self._viewport_center
            if not trimmed:
                self._results = []
                self._is_searching = False
                self._has_searched = False
            else:
                self._is_searching = True
        self._notify()
        if not trimmed:
            return

        try:
            results = self._index.search(trimmed, center)
        except Exception:
            logger.exception("Search for {!r} failed", trimmed)
            with self._lock:
                if sequence == self._sequence:
                    self._is_searching = False
            self._notify()
            return

        with self._lock:
            if sequence != self._sequence:
                logger.debug("Discarding stale results for {!r}", trimmed)
                return
            self._results = results
            self._is_searching = False
            self._has_searched = True
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
