"""In-process search over canvas node titles, notes and conversations."""

from loguru import logger

from canvas_search.core.search.controller import SearchController
from canvas_search.core.search.index import ConversationSearchIndex
from canvas_search.protocols import SearchIndexProtocol, TimerProtocol
from canvas_search.session import SearchSession

__all__ = [
    "ConversationSearchIndex",
    "SearchController",
    "SearchIndexProtocol",
    "SearchSession",
    "TimerProtocol",
]

logger.disable("canvas_search")
