"""Shared test fixtures."""

import pytest

from canvas_search.core.search.index import ConversationSearchIndex
from canvas_search.models.node import (
    ConversationMessage,
    MessageRole,
    NodeSnapshot,
    NodeType,
    Point,
)

BUDGET_NODE = NodeSnapshot(
    id="n1",
    title="Budget Plan",
    color="blue",
    position=Point(0, 0),
    conversation=(
        ConversationMessage(id="m1", role=MessageRole.USER, content="What is our Q3 budget?"),
    ),
)

CANVAS_NODES = [
    BUDGET_NODE,
    NodeSnapshot(
        id="n2",
        title="Launch checklist",
        color="green",
        position=Point(500, 0),
        assigned_role="Product Designer",
        conversation=(
            ConversationMessage(
                id="m2",
                role=MessageRole.USER,
                content="Draft the **launch** plan for the new construction site",
            ),
            ConversationMessage(
                id="m3",
                role=MessageRole.ASSISTANT,
                content="Here is a plan:\n- hire the crew\n- order materials",
            ),
        ),
    ),
    NodeSnapshot(
        id="n3",
        title="Reading notes",
        color="none",
        position=Point(2000, 2000),
        type=NodeType.NOTE,
        description="Python is great for scripting and data pipelines",
    ),
]


@pytest.fixture
def index() -> ConversationSearchIndex:
    return ConversationSearchIndex()


@pytest.fixture
def populated_index() -> ConversationSearchIndex:
    """Return an index built from three nodes: a conversation, a role node, a note."""
    idx = ConversationSearchIndex()
    idx.rebuild(CANVAS_NODES)
    return idx
