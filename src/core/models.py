# src/core/models.py — v1
"""Shared Pydantic graph models used across modules.

No module redefines these types — all imports come from core.models.
Nodes and edges mirror what the graph-source collaborator returns; the
analytics engines only ever read them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# === GRAPH ELEMENTS ===


class Node(BaseModel):
    """Knowledge-graph entity as fetched from the graph source."""

    id: str
    name: str | None = None
    type: str = "Unknown"
    description: str | None = None
    confidence: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Name shown in ranked output: name, then label attribute, then id."""
        return self.name or self.attributes.get("label") or self.id

    @property
    def is_new(self) -> bool:
        """True when the entity was never updated after creation."""
        return self.updated_at is None or self.updated_at == self.created_at


class Edge(BaseModel):
    """Relationship between two entities.

    Direction is meaningful for PageRank and directed betweenness;
    community detection treats every edge as undirected.
    """

    source: str
    target: str
    type: str = "RELATED_TO"
    id: str | None = None
    created_at: datetime | None = None


# === SNAPSHOTS ===


class GraphSnapshot(BaseModel):
    """Full node/edge fetch used by every analytics call."""

    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [n.id for n in self.nodes]


class Subgraph(BaseModel):
    """Neighbourhood returned for on-demand detection.

    Relationship endpoints may reference entities by id or by display name.
    """

    entities: list[Node] = Field(default_factory=list)
    relationships: list[Edge] = Field(default_factory=list)


# === CHANGE TRACKING ===


class ChangeSummary(BaseModel):
    """High-level change statistics since a timestamp."""

    has_changes: bool
    change_ratio: float = 1.0
    recommend_incremental: bool = False
    total_changes: int = 0
    new_entity_count: int = 0
    modified_entity_count: int = 0
    new_edge_count: int = 0


class EntityChanges(BaseModel):
    """Entities created or updated since a timestamp."""

    new_entities: list[Node] = Field(default_factory=list)
    modified_entities: list[Node] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.new_entities) + len(self.modified_entities)


class EdgeChanges(BaseModel):
    """Edges created since a timestamp."""

    new_edges: list[Edge] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.new_edges)
