"""Protocols for dependency injection in the search controller."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from canvas_search.models.node import Point, SearchResult


@runtime_checkable
class SearchIndexProtocol(Protocol):
    """Anything the controller can run queries against."""

    def search(self, query: str, viewport_center: Point | None = None) -> list[SearchResult]:
        """Return ranked results for a query."""
        ...


@runtime_checkable
class TimerProtocol(Protocol):
    """A one-shot timer, as returned by threading.Timer."""

    def start(self) -> None:
        """Arm the timer."""
        ...

    def cancel(self) -> None:
        """Stop the timer if it has not fired yet."""
        ...


# Called as factory(interval_seconds, callback); threading.Timer fits.
TimerFactory = Callable[[float, Callable[[], None]], TimerProtocol]
