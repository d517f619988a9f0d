"""Host-facing session that owns one search index and its controller."""

from collections.abc import Iterable

from canvas_search.core.search.controller import SearchController
from canvas_search.core.search.index import ConversationSearchIndex
from canvas_search.models.node import NodeSnapshot
from canvas_search.protocols import TimerFactory


class SearchSession:
    """Wires canvas change events into the index.

    The host creates one session per open canvas and forwards node events;
    the UI binds to `controller`.
    """

    def __init__(
        self,
        index: ConversationSearchIndex | None = None,
        *,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self.index = index if index is not None else ConversationSearchIndex()
        if timer_factory is None:
            self.controller = SearchController(self.index)
        else:
            self.controller = SearchController(self.index, timer_factory=timer_factory)

    def load(self, nodes: Iterable[NodeSnapshot]) -> None:
        """Index a freshly loaded canvas, replacing whatever was indexed before."""
        self.index.rebuild(nodes)

    def node_changed(self, node: NodeSnapshot) -> None:
        """A node was created or its content edited."""
        self.index.index_node(node)

    def node_moved(self, node: NodeSnapshot) -> None:
        """Only geometry or display metadata changed; content is unchanged."""
        self.index.update_node_metadata(node)

    def node_deleted(self, node_id: str) -> None:
        self.index.remove_node(node_id)

    def close(self) -> None:
        self.controller.close()
