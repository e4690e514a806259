# src/graph_source/base_graph_source.py — v1
"""Abstract graph-source interface.

The analytics engines only read from the graph store: one full snapshot
per call, plus change summaries and diffs for incremental community
detection. Implementations must be safe to call concurrently.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from graphinsight.core.models import (
    ChangeSummary,
    EdgeChanges,
    EntityChanges,
    GraphSnapshot,
    Subgraph,
)


class BaseGraphSource(ABC):
    """Unified read interface for graph store backends."""

    # --- Snapshots ---

    @abstractmethod
    async def get_snapshot(self, limit: int = 10000) -> GraphSnapshot:
        """Fetch up to ``limit`` nodes and ``2 * limit`` edges."""

    @abstractmethod
    async def get_subgraph(self, node_ids: Sequence[str]) -> Subgraph:
        """Fetch the given entities and the relationships among them."""

    # --- Change tracking ---

    @abstractmethod
    async def get_change_summary(self, since: datetime) -> ChangeSummary:
        """Summarize entity and edge changes since a timestamp."""

    @abstractmethod
    async def get_entities_modified_since(
        self, since: datetime, limit: int = 1000
    ) -> EntityChanges:
        """Entities created or updated since a timestamp."""

    @abstractmethod
    async def get_edges_created_since(
        self, since: datetime, limit: int = 2000
    ) -> EdgeChanges:
        """Edges created since a timestamp."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (memory, json)."""
