"""Parse exported canvas node records into search snapshots."""

import json
from collections.abc import Mapping
from typing import Any

from loguru import logger

from canvas_search.models.node import (
    ConversationMessage,
    MessageRole,
    NodeSnapshot,
    NodeType,
    Point,
)


def _text(value: Any, *, node_id: str, field_name: str, default: str = "") -> str:
    """Coerce a scalar field to text; other values fall back to `default`."""
    if value is None:
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    logger.warning("Node {}: {} is a {}, ignoring it", node_id, field_name, type(value).__name__)
    return default


def _coord(value: Any, *, node_id: str, field_name: str) -> float:
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Node {}: {} is not a number, using 0", node_id, field_name)
        return 0.0


def _parse_conversation(raw: Any, *, node_id: str) -> tuple[ConversationMessage, ...]:
    """Decode a conversation given as a list or as a JSON string.

    Undecodable input yields an empty conversation.
    """
    if raw is None or raw == "":
        return ()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Node {}: conversation is not valid JSON, skipping it", node_id)
            return ()
    if not isinstance(raw, list):
        logger.warning("Node {}: conversation is not a list, skipping it", node_id)
        return ()

    messages: list[ConversationMessage] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or "id" not in item:
            logger.warning("Node {}: skipping malformed message #{}", node_id, i)
            continue
        try:
            role = MessageRole(item.get("role", MessageRole.USER))
        except ValueError:
            logger.warning("Node {}: unknown role {!r} in message #{}", node_id, item["role"], i)
            role = MessageRole.USER
        content = _text(item.get("content"), node_id=node_id, field_name=f"content of message #{i}")
        messages.append(ConversationMessage(id=str(item["id"]), role=role, content=content))
    return tuple(messages)


def _parse_node_type(raw: Any) -> NodeType:
    try:
        return NodeType(raw)
    except ValueError:
        return NodeType.STANDARD


def _resolve_role(data: dict[str, Any], role_names: Mapping[str, str], *, node_id: str) -> str | None:
    name = _text(data.get("assignedRole"), node_id=node_id, field_name="assignedRole")
    if name:
        return name
    team_member = data.get("teamMember")
    if isinstance(team_member, dict):
        return role_names.get(str(team_member.get("roleId")))
    return None


def parse_node_data(
    data: dict[str, Any],
    *,
    role_names: Mapping[str, str] | None = None,
) -> NodeSnapshot:
    """Parse one exported node record.

    Args:
        data: Raw node data. The conversation may come as a `conversation`
            list or as a `conversationJSON` string.
        role_names: Role id -> display name, used when the node carries a
            `teamMember.roleId` instead of an `assignedRole` name.

    Returns:
        The node's searchable snapshot.
    """
    if "id" not in data:
        msg = f"Node record without id: {sorted(data)!r}"
        raise ValueError(msg)
    node_id = str(data["id"])

    raw_conversation = data.get("conversation")
    if raw_conversation is None:
        raw_conversation = data.get("conversationJSON")

    return NodeSnapshot(
        id=node_id,
        title=_text(data.get("title"), node_id=node_id, field_name="title"),
        color=_text(data.get("color"), node_id=node_id, field_name="color") or "none",
        position=Point(
            _coord(data.get("x"), node_id=node_id, field_name="x"),
            _coord(data.get("y"), node_id=node_id, field_name="y"),
        ),
        type=_parse_node_type(data.get("type", NodeType.STANDARD)),
        description=_text(data.get("description"), node_id=node_id, field_name="description"),
        assigned_role=_resolve_role(data, role_names or {}, node_id=node_id),
        conversation=_parse_conversation(raw_conversation, node_id=node_id),
    )
