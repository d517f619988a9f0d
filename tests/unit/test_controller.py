"""Tests for the debounced search controller."""

import threading

from canvas_search.core.search.controller import SearchController
from canvas_search.core.search.index import ConversationSearchIndex
from canvas_search.models.node import Point, SearchResult, UnitKind
from tests.unit.conftest import BUDGET_NODE
from tests.unit.fakes import FakeIndex, FakeTimerFactory


def _result(node_id: str) -> SearchResult:
    return SearchResult(
        node_id=node_id,
        node_title="Budget Plan",
        node_color="blue",
        text_unit_id=node_id,
        message_role=None,
        snippet="Budget Plan",
        full_text="Budget Plan",
        match_start=0,
        match_end=6,
        node_position=Point(0, 0),
        match_kind=UnitKind.TITLE,
    )


def _controller() -> tuple[SearchController, FakeIndex, FakeTimerFactory]:
    index = FakeIndex()
    timers = FakeTimerFactory()
    return SearchController(index, timer_factory=timers), index, timers


def test_typing_arms_debounce_without_searching() -> None:
    controller, index, timers = _controller()

    controller.query = "bud"

    assert len(timers.timers) == 1
    assert timers.last.started
    assert timers.last.interval == 0.2
    assert index.calls == []
    assert not controller.has_searched


def test_new_keystroke_cancels_pending_timer() -> None:
    controller, index, timers = _controller()
    index.add_response("budg", [_result("n1")])

    controller.query = "bud"
    first = timers.last
    controller.query = "budg"

    assert first.cancelled
    # A timer that fired anyway after being replaced must not search.
    first.fire()
    assert index.calls == []

    timers.last.fire()
    assert index.calls == [("budg", None)]
    assert [r.node_id for r in controller.results] == ["n1"]
    assert controller.has_searched
    assert not controller.is_searching


def test_duplicate_query_does_not_rearm() -> None:
    controller, _index, timers = _controller()
    controller.query = "bud"
    controller.query = "bud"
    assert len(timers.timers) == 1


def test_search_trims_query_and_passes_viewport_center() -> None:
    controller, index, timers = _controller()
    controller.update_viewport_center(Point(10, 20))

    controller.query = "  budget  "
    timers.last.fire()

    assert index.calls == [("budget", Point(10, 20))]


def test_blank_query_clears_results_without_searching() -> None:
    controller, index, timers = _controller()
    index.add_response("budget", [_result("n1")])
    controller.query = "budget"
    timers.last.fire()

    controller.query = "   "
    timers.last.fire()

    assert index.calls == [("budget", None)]
    assert controller.results == []
    assert not controller.has_searched


def test_search_immediately_bypasses_debounce() -> None:
    controller, index, timers = _controller()
    index.add_response("budget", [_result("n1")])

    controller.query = "budget"
    controller.search_immediately()

    assert timers.last.cancelled
    assert index.calls == [("budget", None)]
    assert len(controller.results) == 1


def test_clear_search_resets_state_and_cancels_timer() -> None:
    controller, index, timers = _controller()
    index.add_response("budget", [_result("n1")])
    controller.query = "budget"
    controller.search_immediately()

    controller.query = "budget plan"
    controller.clear_search()

    assert timers.last.cancelled
    assert controller.query == ""
    assert controller.results == []
    assert not controller.has_searched
    assert not controller.is_searching


def test_stale_results_are_discarded() -> None:
    controller, index, _timers = _controller()
    index.add_response("a", [_result("old")])
    index.add_response("ab", [_result("new")])

    def type_more(query: str) -> None:
        # While the search for "a" is still running, the user types on and
        # a newer search completes first.
        if query == "a":
            controller.query = "ab"
            controller.search_immediately()

    index.before_return = type_more
    controller.query = "a"
    controller.search_immediately()

    assert [q for q, _ in index.calls] == ["a", "ab"]
    assert [r.node_id for r in controller.results] == ["new"]
    assert not controller.is_searching


def test_clear_search_discards_in_flight_results() -> None:
    controller, index, _timers = _controller()
    index.add_response("budget", [_result("n1")])
    index.before_return = lambda _query: controller.clear_search()

    controller.query = "budget"
    controller.search_immediately()

    assert controller.results == []
    assert not controller.has_searched


def test_search_failure_is_logged_not_raised() -> None:
    class BrokenIndex:
        def search(self, query: str, viewport_center: Point | None = None) -> list[SearchResult]:
            raise RuntimeError("index exploded")

    controller = SearchController(BrokenIndex(), timer_factory=FakeTimerFactory())
    controller.query = "budget"
    controller.search_immediately()

    assert not controller.is_searching
    assert controller.results == []


def test_select_forwards_to_callback_and_returns_highlight() -> None:
    controller, _index, _timers = _controller()
    selected: list[SearchResult] = []
    controller.on_select_result(selected.append)
    controller.query = "budget"

    result = _result("n1")
    highlight = controller.select(result)

    assert selected == [result]
    assert highlight.node_id == "n1"
    assert highlight.query == "budget"


def test_listeners_see_every_state_change() -> None:
    controller, index, timers = _controller()
    index.add_response("budget", [_result("n1")])
    seen: list[tuple[str, bool, int]] = []
    controller.add_listener(lambda c: seen.append((c.query, c.is_searching, len(c.results))))

    controller.query = "budget"
    timers.last.fire()

    assert seen == [("budget", False, 0), ("budget", True, 0), ("budget", False, 1)]


def test_real_timer_runs_search_on_background_thread() -> None:
    index = ConversationSearchIndex()
    index.rebuild([BUDGET_NODE])
    controller = SearchController(index, debounce_seconds=0.01)
    done = threading.Event()
    controller.add_listener(lambda c: done.set() if c.has_searched else None)

    controller.query = "q3"

    assert done.wait(timeout=5)
    assert [r.text_unit_id for r in controller.results] == ["m1"]
    controller.close()
