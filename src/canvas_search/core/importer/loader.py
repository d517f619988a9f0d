"""Load exported canvas files into a search index."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from canvas_search.core.importer.json_reader import parse_node_data
from canvas_search.core.search.index import ConversationSearchIndex
from canvas_search.models.node import NodeSnapshot


@dataclass(frozen=True)
class ImportStats:
    """Summary of an import operation."""

    nodes_imported: int
    nodes_skipped: int
    units_indexed: int


def _role_names(raw_roles: Any) -> dict[str, str]:
    if not isinstance(raw_roles, list):
        return {}
    return {
        str(role["id"]): str(role["name"])
        for role in raw_roles
        if isinstance(role, dict) and "id" in role and "name" in role
    }


def read_snapshot_data(data: Any) -> tuple[list[NodeSnapshot], int]:
    """Parse an export payload.

    Accepts either `{"nodes": [...], "roles": [...]}` or a bare list of nodes.

    Returns:
        Tuple of (parsed nodes, number of records skipped).
    """
    if isinstance(data, list):
        raw_nodes, role_names = data, {}
    elif isinstance(data, dict) and isinstance(data.get("nodes"), list):
        raw_nodes, role_names = data["nodes"], _role_names(data.get("roles"))
    else:
        msg = "Export must be a list of nodes or an object with a 'nodes' list"
        raise ValueError(msg)

    nodes: list[NodeSnapshot] = []
    skipped = 0
    for i, raw in enumerate(raw_nodes):
        if not isinstance(raw, dict) or "id" not in raw:
            logger.warning("Skipping node record #{}: no id", i)
            skipped += 1
            continue
        nodes.append(parse_node_data(raw, role_names=role_names))
    return nodes, skipped


def _read_export(path: Path) -> tuple[list[NodeSnapshot], int]:
    if not path.exists():
        msg = f"Export file not found: {path}"
        raise FileNotFoundError(msg)
    return read_snapshot_data(json.loads(path.read_text(encoding="utf-8")))


def load_snapshot_file(path: Path) -> list[NodeSnapshot]:
    """Read every node from an exported canvas JSON file."""
    nodes, _skipped = _read_export(path)
    return nodes


def import_snapshot(index: ConversationSearchIndex, path: Path) -> ImportStats:
    """Rebuild `index` from an exported canvas JSON file.

    Args:
        index: Index to replace the contents of.
        path: Export file to read.

    Returns:
        ImportStats with counts of imported and skipped nodes.
    """
    nodes, skipped = _read_export(path)
    index.rebuild(nodes)
    stats = index.stats()
    logger.info("Indexed {} nodes ({} text units) from {}", len(nodes), stats.unit_count, path)
    return ImportStats(
        nodes_imported=len(nodes),
        nodes_skipped=skipped,
        units_indexed=stats.unit_count,
    )
