# src/algorithms/ranking.py — v1
"""Join raw scores and assignments back to display attributes.

Shared by PageRank, betweenness and community detection so every engine
presents the same ranked shape.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from graphinsight.algorithms.models import (
    Community,
    CommunityMember,
    EntityScore,
    RankedEntity,
)
from graphinsight.core.models import Node


def build_ranked_entities(
    nodes: Sequence[Node],
    scores: Mapping[str, float],
) -> list[RankedEntity]:
    """Ranked entities sorted by score, highest first.

    Ties keep the order of the score map.
    """
    node_map = {n.id: n for n in nodes}
    ranked: list[RankedEntity] = []
    for node_id, score in scores.items():
        node = node_map.get(node_id)
        ranked.append(RankedEntity(
            id=node_id,
            name=node.display_name if node else node_id,
            type=node.type if node else "Unknown",
            score=score,
            description=node.description if node else None,
            confidence=node.confidence if node else None,
        ))
    ranked.sort(key=lambda e: e.score, reverse=True)
    return ranked


def lookup_entity(ranked: Sequence[RankedEntity], entity_id: str) -> EntityScore | None:
    """Find one entity in a ranked list with its rank and percentile.

    rank is 1-based; percentile = (N - rank) / N * 100, so the top entity
    of N gets 100 * (N - 1) / N.
    """
    total = len(ranked)
    for position, entity in enumerate(ranked):
        if entity.id == entity_id:
            rank = position + 1
            return EntityScore(
                **entity.model_dump(),
                rank=rank,
                percentile=(total - rank) / total * 100,
            )
    return None


def build_community_list(
    nodes: Sequence[Node],
    assignment: Mapping[str, int],
) -> list[Community]:
    """Group nodes by community, count types and sort largest first."""
    node_map = {n.id: n for n in nodes}
    grouped: dict[int, list[CommunityMember]] = {}
    for node_id, community_id in assignment.items():
        node = node_map.get(node_id)
        grouped.setdefault(community_id, []).append(CommunityMember(
            id=node_id,
            name=node.display_name if node else node_id,
            type=node.type if node else "Unknown",
        ))

    communities: list[Community] = []
    for community_id, members in grouped.items():
        type_counts: dict[str, int] = {}
        for member in members:
            type_counts[member.type] = type_counts.get(member.type, 0) + 1
        dominant = max(type_counts, key=type_counts.get) if type_counts else "Unknown"  # type: ignore[arg-type]
        communities.append(Community(
            id=community_id,
            size=len(members),
            members=members,
            type_counts=type_counts,
            dominant_type=dominant,
        ))

    communities.sort(key=lambda c: c.size, reverse=True)
    return communities
