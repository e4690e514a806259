# src/algorithms/louvain/detector.py — v1
"""Louvain community detection: hierarchy loop and public operations.

run_louvain() alternates local moving and aggregation on an in-memory
adjacency; detect_communities() wraps it with the snapshot fetch, dense
renumbering, final modularity and the display-joined community list.

Stops climbing the hierarchy when a phase makes no move, when a single
community remains, or when aggregation no longer shrinks the graph.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Hashable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from graphinsight.algorithms.adjacency import UndirectedAdjacency, build_undirected_adjacency
from graphinsight.algorithms.louvain.aggregation import (
    aggregate_communities,
    compose_mapping,
    renumber_communities,
)
from graphinsight.algorithms.louvain.local_moving import local_moving_phase
from graphinsight.algorithms.models import (
    Community,
    CommunityMetadata,
    CommunityResult,
    EntityCommunity,
    LouvainConfig,
)
from graphinsight.algorithms.modularity import calculate_modularity
from graphinsight.algorithms.ranking import build_community_list
from graphinsight.core.models import Edge, GraphSnapshot
from graphinsight.core.random_source import resolve_rng
from graphinsight.logging.context import algorithm_context, set_phase

if TYPE_CHECKING:
    from graphinsight.graph_source.base_graph_source import BaseGraphSource

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_LIMIT = 10000


@dataclass
class LouvainOutcome:
    """Dense assignment plus hierarchy statistics."""

    assignment: dict[str, int]
    modularity: float
    hierarchy_levels: int


def run_louvain(
    graph: UndirectedAdjacency,
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
) -> LouvainOutcome:
    """Multi-level Louvain on a prebuilt undirected adjacency.

    Returns:
        LouvainOutcome with ids renumbered to 0..k-1 and modularity computed
        from scratch over the original adjacency.
    """
    config = config or LouvainConfig()
    rng = resolve_rng(rng)

    # original node -> node of the current level
    node_to_level: dict[str, Hashable] = {n: n for n in graph.adjacency}
    node_to_community: dict[str, Hashable] = {}

    level_adjacency: dict = graph.adjacency
    level_degrees: dict = graph.degrees
    level_assignment: dict = {n: n for n in graph.adjacency}
    levels = 0

    while True:
        levels += 1
        phase = local_moving_phase(
            level_assignment,
            level_adjacency,
            level_degrees,
            graph.total_weight,
            config,
            rng=rng,
        )
        node_to_community = {
            node_id: phase.assignment[level_node]
            for node_id, level_node in node_to_level.items()
        }

        if not phase.moved:
            break

        community_count = len(set(phase.assignment.values()))
        if community_count <= 1:
            break

        aggregated = aggregate_communities(phase.assignment, level_adjacency, level_degrees)
        if aggregated.size == len(phase.assignment):
            break

        node_to_level = compose_mapping(node_to_community, aggregated.community_to_super)
        level_adjacency = aggregated.adjacency
        level_degrees = aggregated.degrees
        level_assignment = aggregated.assignment

        logger.debug(
            "Completed hierarchy level %d", levels,
            extra={"data": {"level": levels, "communities": community_count}},
        )

    assignment = renumber_communities(node_to_community)
    modularity = calculate_modularity(
        assignment, graph.adjacency, graph.degrees, graph.total_weight, config.resolution,
    )
    return LouvainOutcome(
        assignment=assignment, modularity=modularity, hierarchy_levels=levels,
    )


def empty_community_result(
    config: LouvainConfig,
    started: float,
    **metadata: object,
) -> CommunityResult:
    """Zeroed result for a graph with no nodes."""
    return CommunityResult(
        metadata=CommunityMetadata(
            resolution=config.resolution,
            execution_time_ms=int((time.monotonic() - started) * 1000),
            **metadata,
        ),
    )


def detect_communities_in_snapshot(
    snapshot: GraphSnapshot,
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
    started: float | None = None,
) -> CommunityResult:
    """Full Louvain detection on an already fetched snapshot."""
    config = config or LouvainConfig()
    started = started if started is not None else time.monotonic()

    if not snapshot.nodes:
        logger.warning("No nodes found in graph for community detection")
        return empty_community_result(config, started)

    logger.info(
        "Loaded graph data for community detection",
        extra={"data": {"node_count": len(snapshot.nodes), "edge_count": len(snapshot.edges)}},
    )

    set_phase("adjacency")
    graph = build_undirected_adjacency(snapshot.node_ids, snapshot.edges)

    set_phase("optimize")
    outcome = run_louvain(graph, config, rng)

    set_phase("rank")
    community_list = build_community_list(snapshot.nodes, outcome.assignment)
    execution_time_ms = int((time.monotonic() - started) * 1000)

    logger.info(
        "Louvain community detection completed: %d communities, modularity=%.4f",
        len(community_list), outcome.modularity,
        extra={"data": {
            "community_count": len(community_list),
            "modularity": outcome.modularity,
            "hierarchy_levels": outcome.hierarchy_levels,
            "execution_time_ms": execution_time_ms,
        }},
    )

    return CommunityResult(
        communities=outcome.assignment,
        community_list=community_list,
        modularity=outcome.modularity,
        metadata=CommunityMetadata(
            node_count=len(snapshot.nodes),
            edge_count=len(snapshot.edges),
            community_count=len(community_list),
            hierarchy_levels=outcome.hierarchy_levels,
            resolution=config.resolution,
            execution_time_ms=execution_time_ms,
        ),
    )


async def detect_communities(
    source: BaseGraphSource,
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
    limit: int = DEFAULT_SNAPSHOT_LIMIT,
) -> CommunityResult:
    """Fetch a fresh snapshot and run full Louvain detection.

    Raises:
        Exception: Whatever the graph source raises, unmodified.
    """
    config = config or LouvainConfig()
    with algorithm_context("louvain"):
        logger.info(
            "Starting Louvain community detection",
            extra={"data": config.model_dump()},
        )
        started = time.monotonic()
        try:
            set_phase("fetch")
            snapshot = await source.get_snapshot(limit)
            return detect_communities_in_snapshot(snapshot, config, rng, started)
        except Exception:
            logger.exception("Louvain community detection failed")
            raise


async def detect_subgraph_communities(
    source: BaseGraphSource,
    node_ids: Sequence[str],
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
) -> CommunityResult:
    """On-demand detection restricted to a neighbourhood of the graph.

    Relationship endpoints returned by the source may be entity ids or
    display names; names are resolved back to ids and unresolvable
    relationships are dropped.
    """
    config = config or LouvainConfig()
    with algorithm_context("louvain_subgraph"):
        started = time.monotonic()
        try:
            set_phase("fetch")
            subgraph = await source.get_subgraph(node_ids)
        except Exception:
            logger.exception("Subgraph community detection failed")
            raise

        if not subgraph.entities:
            logger.warning("Subgraph is empty for %d requested nodes", len(node_ids))
            return empty_community_result(config, started)

        ids = {e.id for e in subgraph.entities}
        name_to_id = {e.display_name: e.id for e in subgraph.entities}

        def _resolve(endpoint: str) -> str | None:
            return endpoint if endpoint in ids else name_to_id.get(endpoint)

        edges: list[Edge] = []
        for rel in subgraph.relationships:
            src, tgt = _resolve(rel.source), _resolve(rel.target)
            if src is None or tgt is None:
                continue
            edges.append(rel.model_copy(update={"source": src, "target": tgt}))

        snapshot = GraphSnapshot(nodes=subgraph.entities, edges=edges)
        return detect_communities_in_snapshot(snapshot, config, rng, started)


async def get_entity_community(
    source: BaseGraphSource,
    entity_id: str,
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
) -> EntityCommunity | None:
    """Community of a single entity, or None if the entity is unknown."""
    result = await detect_communities(source, config, rng)
    community_id = result.communities.get(entity_id)
    if community_id is None:
        return None

    community = next((c for c in result.community_list if c.id == community_id), None)
    return EntityCommunity(
        entity_id=entity_id,
        community_id=community_id,
        community=community,
        total_communities=len(result.community_list),
        modularity=result.modularity,
    )


async def get_top_communities(
    source: BaseGraphSource,
    n: int = 10,
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
) -> list[Community]:
    """The n largest communities."""
    result = await detect_communities(source, config, rng)
    return result.community_list[:n]
