# src/algorithms/louvain/aggregation.py — v1
"""Louvain phase 2: collapse communities into super-nodes.

Every level produces a fresh community -> super-node mapping; the caller
composes it with the original-node mapping into a new dict instead of
rewriting the previous level in place.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Set
from dataclasses import dataclass, field


@dataclass
class AggregatedLevel:
    """Super-node graph for the next hierarchy level."""

    adjacency: dict[int, set[int]] = field(default_factory=dict)
    degrees: dict[int, int] = field(default_factory=dict)
    assignment: dict[int, int] = field(default_factory=dict)
    community_to_super: dict[Hashable, int] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.adjacency)


def aggregate_communities(
    assignment: Mapping[Hashable, Hashable],
    adjacency: Mapping[Hashable, Set[Hashable]],
    degrees: Mapping[Hashable, int],
) -> AggregatedLevel:
    """Collapse each community of the current level into one super-node.

    Super-node ids are 0..k-1 in order of first appearance. Two super-nodes
    are adjacent when any edge crosses their community boundary. A
    super-node's degree is the sum of its members' degrees, so the total
    edge weight is unchanged between levels.

    Each super-node starts in its own community for the next phase.
    """
    level = AggregatedLevel()
    for community in assignment.values():
        if community not in level.community_to_super:
            super_id = len(level.community_to_super)
            level.community_to_super[community] = super_id
            level.adjacency[super_id] = set()
            level.degrees[super_id] = 0
            level.assignment[super_id] = super_id

    for node_id, community in assignment.items():
        node_super = level.community_to_super[community]
        level.degrees[node_super] += degrees.get(node_id, 0)
        for neighbor in adjacency.get(node_id, ()):
            neighbor_community = assignment.get(neighbor)
            if neighbor_community is None:
                continue
            neighbor_super = level.community_to_super[neighbor_community]
            if neighbor_super != node_super:
                level.adjacency[node_super].add(neighbor_super)

    return level


def compose_mapping(
    node_to_community: Mapping[str, Hashable],
    community_to_super: Mapping[Hashable, int],
) -> dict[str, int]:
    """Map original nodes straight to the next level's super-nodes."""
    return {
        node_id: community_to_super[community]
        for node_id, community in node_to_community.items()
    }


def renumber_communities(assignment: Mapping[str, Hashable]) -> dict[str, int]:
    """Relabel community ids densely as 0..k-1 in order of first appearance."""
    remap: dict[Hashable, int] = {}
    renumbered: dict[str, int] = {}
    for node_id, community in assignment.items():
        if community not in remap:
            remap[community] = len(remap)
        renumbered[node_id] = remap[community]
    return renumbered
