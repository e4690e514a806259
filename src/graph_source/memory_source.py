# src/graph_source/memory_source.py — v1
"""In-memory graph source backed by a NetworkX MultiDiGraph.

Used by the CLI (JSON snapshot files) and by tests. Node attributes are
the Node model fields; parallel edges are kept as separate MultiDiGraph
keys. Endpoints that were only created implicitly by add_edge are not
reported as nodes, so dangling edges survive into snapshots exactly like
they would from a real store.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import networkx as nx

from graphinsight.core.models import (
    ChangeSummary,
    Edge,
    EdgeChanges,
    EntityChanges,
    GraphSnapshot,
    Node,
    Subgraph,
)
from graphinsight.graph_source.base_graph_source import BaseGraphSource

logger = logging.getLogger(__name__)

# Incremental detection is recommended below this share of changed elements.
INCREMENTAL_RATIO_THRESHOLD = 0.2


class MemoryGraphSource(BaseGraphSource):
    """Graph source holding the whole graph in a NetworkX MultiDiGraph."""

    def __init__(self, graph: nx.MultiDiGraph | None = None) -> None:
        self._graph = graph if graph is not None else nx.MultiDiGraph()

    # --- Construction ---

    @classmethod
    def from_snapshot(cls, snapshot: GraphSnapshot) -> MemoryGraphSource:
        source = cls()
        for node in snapshot.nodes:
            source.add_node(node)
        for edge in snapshot.edges:
            source.add_edge(edge)
        return source

    @classmethod
    def from_json_file(cls, path: str | Path) -> MemoryGraphSource:
        """Load a ``{"nodes": [...], "edges": [...]}`` JSON document."""
        file_path = Path(path).expanduser()
        data = json.loads(file_path.read_text(encoding="utf-8"))
        snapshot = GraphSnapshot.model_validate(data)
        logger.info(
            "Loaded snapshot %s: %d nodes, %d edges",
            file_path, len(snapshot.nodes), len(snapshot.edges),
        )
        return cls.from_snapshot(snapshot)

    def add_node(self, node: Node) -> None:
        self._graph.add_node(node.id, **node.model_dump(exclude={"id"}))

    def add_edge(self, edge: Edge) -> None:
        self._graph.add_edge(
            edge.source, edge.target, **edge.model_dump(exclude={"source", "target"})
        )

    def update_node(self, node_id: str, **changes: Any) -> None:
        """Apply attribute changes and stamp updated_at.

        Raises:
            KeyError: If the node does not exist.
        """
        if not self._is_entity(node_id):
            raise KeyError(node_id)
        data = self._graph.nodes[node_id]
        data.update(changes)
        data["updated_at"] = changes.get("updated_at") or datetime.now(timezone.utc)

    def to_networkx(self) -> nx.MultiDiGraph:
        """Copy of the underlying graph."""
        return self._graph.copy()

    # --- BaseGraphSource ---

    async def get_snapshot(self, limit: int = 10000) -> GraphSnapshot:
        nodes = self._nodes()[:limit]
        edges = self._edges()[: limit * 2]
        return GraphSnapshot(nodes=nodes, edges=edges)

    async def get_subgraph(self, node_ids: Sequence[str]) -> Subgraph:
        wanted = {n for n in node_ids if self._is_entity(n)}
        entities = [n for n in self._nodes() if n.id in wanted]
        relationships = [
            e for e in self._edges() if e.source in wanted and e.target in wanted
        ]
        return Subgraph(entities=entities, relationships=relationships)

    async def get_change_summary(self, since: datetime) -> ChangeSummary:
        entity_changes = await self.get_entities_modified_since(since)
        edge_changes = await self.get_edges_created_since(since)

        node_count = sum(1 for n in self._graph.nodes if self._is_entity(n))
        edge_count = self._graph.number_of_edges()
        total_changes = entity_changes.total + edge_changes.total
        has_changes = total_changes > 0
        change_ratio = (
            total_changes / (node_count + edge_count) if node_count > 0 else 1.0
        )

        return ChangeSummary(
            has_changes=has_changes,
            change_ratio=change_ratio,
            recommend_incremental=has_changes and change_ratio < INCREMENTAL_RATIO_THRESHOLD,
            total_changes=total_changes,
            new_entity_count=len(entity_changes.new_entities),
            modified_entity_count=len(entity_changes.modified_entities),
            new_edge_count=edge_changes.total,
        )

    async def get_entities_modified_since(
        self, since: datetime, limit: int = 1000
    ) -> EntityChanges:
        changed = [
            n for n in self._nodes()
            if (n.created_at is not None and n.created_at >= since)
            or (n.updated_at is not None and n.updated_at >= since)
        ][:limit]
        return EntityChanges(
            new_entities=[n for n in changed if n.is_new],
            modified_entities=[n for n in changed if not n.is_new],
        )

    async def get_edges_created_since(
        self, since: datetime, limit: int = 2000
    ) -> EdgeChanges:
        created = [
            e for e in self._edges()
            if e.created_at is not None and e.created_at >= since
        ]
        return EdgeChanges(new_edges=created[:limit])

    @property
    def provider_name(self) -> str:
        return "memory"

    # --- Internals ---

    def _is_entity(self, node_id: str) -> bool:
        # Implicit endpoints created by add_edge carry no attributes
        return node_id in self._graph and "type" in self._graph.nodes[node_id]

    def _nodes(self) -> list[Node]:
        return [
            Node(id=node_id, **data)
            for node_id, data in self._graph.nodes(data=True)
            if "type" in data
        ]

    def _edges(self) -> list[Edge]:
        return [
            Edge(source=u, target=v, **data)
            for u, v, data in self._graph.edges(data=True)
        ]
