"""Domain models for canvas search."""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

TITLE_UNIT_INDEX = -1
NOTE_UNIT_INDEX = -2
ROLE_UNIT_INDEX = -3


class MessageRole(StrEnum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class NodeType(StrEnum):
    """Kind of canvas node."""

    STANDARD = "standard"
    NOTE = "note"


class UnitKind(StrEnum):
    """Which part of a node a text unit holds; also the match kind of a result."""

    TITLE = "title"
    NOTE = "note"
    ASSIGNED_ROLE = "assigned_role"
    CONVERSATION = "conversation"


@dataclass(frozen=True)
class Point:
    """A position on the canvas."""

    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class ConversationMessage:
    """A single message in a node's conversation."""

    id: str
    role: MessageRole
    content: str


@dataclass(frozen=True)
class NodeSnapshot:
    """The searchable state of a canvas node, as handed over by the host."""

    id: str
    title: str = ""
    color: str = "none"
    position: Point = Point(0.0, 0.0)
    type: NodeType = NodeType.STANDARD
    description: str = ""
    assigned_role: str | None = None
    conversation: tuple[ConversationMessage, ...] = ()


@dataclass(frozen=True)
class Posting:
    """One occurrence of a token inside one text unit."""

    node_id: str
    text_unit_id: str
    unit_index: int
    token_position: int


@dataclass(frozen=True)
class NodeMetadata:
    """Display and ranking data cached per indexed node."""

    title: str
    color: str
    position: Point
    assigned_role: str | None = None


@dataclass(frozen=True)
class SearchHighlight:
    """What the host needs to scroll to and highlight a selected match."""

    node_id: str
    text_unit_id: str
    query: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass(frozen=True)
class SearchResult:
    """A search hit with context.

    `text_unit_id` names the matched unit for highlighting: the node id for
    title hits, the message id for conversation hits, and ids derived from the
    node id for note bodies (`note_unit_id`) and role labels (`role_unit_id`).
    `sequence` orders results built by the same index; later is larger.
    """

    node_id: str
    node_title: str
    node_color: str
    text_unit_id: str
    message_role: MessageRole | None
    snippet: str
    full_text: str
    match_start: int
    match_end: int
    node_position: Point
    match_kind: UnitKind
    assigned_role: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    sequence: int = 0

    def highlight(self, query: str) -> SearchHighlight:
        return SearchHighlight(node_id=self.node_id, text_unit_id=self.text_unit_id, query=query)


@dataclass(frozen=True)
class IndexStats:
    """Size of the search index."""

    node_count: int
    unit_count: int
    token_count: int
