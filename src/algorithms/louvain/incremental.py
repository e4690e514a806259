# src/algorithms/louvain/incremental.py — v1
"""Incremental community detection (Dynamic-Frontier Louvain).

After a small graph delta only the changed region is re-optimized:
communities are seeded from the previous result, and local moving runs
on the frontier (new nodes, new-edge endpoints, modified nodes and their
immediate neighbours). Everything outside the frontier keeps its seeded
community.

Every result is tagged with how it was produced (DetectionMode) so callers
can tell a policy fallback from an error fallback.

Reference: DF Louvain, https://arxiv.org/abs/2404.19634
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

from graphinsight.algorithms.adjacency import UndirectedAdjacency, build_undirected_adjacency
from graphinsight.algorithms.louvain.aggregation import renumber_communities
from graphinsight.algorithms.louvain.detector import (
    DEFAULT_SNAPSHOT_LIMIT,
    detect_communities,
    detect_communities_in_snapshot,
    empty_community_result,
)
from graphinsight.algorithms.louvain.local_moving import local_moving_phase
from graphinsight.algorithms.models import (
    CommunityMetadata,
    CommunityResult,
    DetectionMode,
    LouvainConfig,
)
from graphinsight.algorithms.modularity import calculate_modularity
from graphinsight.algorithms.ranking import build_community_list
from graphinsight.core.models import Edge, GraphSnapshot
from graphinsight.logging.context import algorithm_context, set_phase

if TYPE_CHECKING:
    from graphinsight.graph_source.base_graph_source import BaseGraphSource

logger = logging.getLogger(__name__)

DEFAULT_MIN_NODES = 10
DEFAULT_MAX_CHANGE_RATIO = 0.3


@dataclass
class FrontierPlan:
    """Seeded assignment and the node sets allowed to move."""

    assignment: dict[str, int] = field(default_factory=dict)
    affected: set[str] = field(default_factory=set)
    frontier: set[str] = field(default_factory=set)


def ineligibility_reason(
    previous: CommunityResult | None,
    node_count: int,
    change_ratio: float,
    min_nodes: int = DEFAULT_MIN_NODES,
    max_change_ratio: float = DEFAULT_MAX_CHANGE_RATIO,
) -> str | None:
    """Why incremental mode cannot be used, or None when it can."""
    if previous is None or not previous.communities:
        return "no_previous_result"
    if change_ratio > max_change_ratio:
        return "high_change_ratio"
    if node_count < min_nodes:
        return "small_graph"
    return None


def plan_frontier(
    node_ids: Sequence[str],
    graph: UndirectedAdjacency,
    previous_assignment: Mapping[str, int],
    new_node_ids: Iterable[str] = (),
    new_edges: Iterable[Edge] = (),
    modified_node_ids: Iterable[str] = (),
) -> FrontierPlan:
    """Seed communities and compute the frontier.

    Present nodes keep their previous community. New nodes, and any node
    the previous result does not know, get fresh singleton ids above the
    highest previous id. Ids that are not in the snapshot are ignored.
    """
    present = set(node_ids)
    seeded: dict[str, int] = {
        node_id: community
        for node_id, community in previous_assignment.items()
        if node_id in present
    }
    next_id = max(previous_assignment.values(), default=-1) + 1

    affected: set[str] = set()
    for node_id in new_node_ids:
        if node_id in present:
            affected.add(node_id)
            seeded[node_id] = next_id
            next_id += 1

    for edge in new_edges:
        if edge.source in present:
            affected.add(edge.source)
        if edge.target in present:
            affected.add(edge.target)

    affected.update(n for n in modified_node_ids if n in present)

    frontier = set(affected)
    for node_id in affected:
        frontier.update(graph.neighbors(node_id))

    assignment: dict[str, int] = {}
    for node_id in node_ids:
        if node_id not in seeded:
            seeded[node_id] = next_id
            next_id += 1
        assignment[node_id] = seeded[node_id]

    return FrontierPlan(assignment=assignment, affected=affected, frontier=frontier)


def identify_changed_communities(
    previous: Mapping[str, int],
    current: Mapping[str, int],
    touched_nodes: Iterable[str],
) -> list[int]:
    """Current community ids that changed relative to a previous result.

    A community counts as changed when it holds a touched node, or when
    its member set is not exactly one community of the previous result
    (nodes joined, left or were removed from the graph).
    """
    changed: set[int] = {current[n] for n in touched_nodes if n in current}

    previous_members: dict[int, set[str]] = {}
    for node_id, community in previous.items():
        previous_members.setdefault(community, set()).add(node_id)

    current_members: dict[int, set[str]] = {}
    for node_id, community in current.items():
        current_members.setdefault(community, set()).add(node_id)

    for community, members in current_members.items():
        if community in changed:
            continue
        previous_ids = {previous.get(n) for n in members}
        if len(previous_ids) != 1 or None in previous_ids:
            changed.add(community)
            continue
        (previous_id,) = previous_ids
        if previous_members.get(previous_id) != members:
            changed.add(community)

    return sorted(changed)


def _tag(result: CommunityResult, **updates: object) -> CommunityResult:
    return result.model_copy(update={"metadata": result.metadata.model_copy(update=updates)})


async def detect_communities_incremental(
    source: BaseGraphSource,
    previous_result: CommunityResult | None,
    new_node_ids: Sequence[str] = (),
    new_edges: Sequence[Edge] = (),
    modified_node_ids: Sequence[str] = (),
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
    limit: int = DEFAULT_SNAPSHOT_LIMIT,
    min_nodes: int = DEFAULT_MIN_NODES,
    max_change_ratio: float = DEFAULT_MAX_CHANGE_RATIO,
) -> CommunityResult:
    """Re-optimize only the changed region of the graph.

    Falls back to full detection when incremental mode is not eligible
    (tagged FULL_BY_POLICY) or when anything fails on the incremental path
    (tagged FULL_BY_ERROR). Errors raised by the fallback itself propagate.
    """
    config = config or LouvainConfig()
    with algorithm_context("louvain_incremental"):
        logger.info(
            "Starting incremental community detection",
            extra={"data": {
                "new_node_count": len(new_node_ids),
                "new_edge_count": len(new_edges),
                "modified_node_count": len(modified_node_ids),
                "has_previous_result": previous_result is not None,
            }},
        )
        started = time.monotonic()
        try:
            set_phase("fetch")
            snapshot = await source.get_snapshot(limit)
            return _run_incremental(
                snapshot, previous_result, new_node_ids, new_edges, modified_node_ids,
                config, rng, started, min_nodes, max_change_ratio,
            )
        except Exception as exc:
            logger.exception("Incremental community detection failed, falling back to full")
            result = await detect_communities(source, config, rng, limit)
            return _tag(
                result,
                mode=DetectionMode.FULL_BY_ERROR,
                fallback_reason=f"error: {type(exc).__name__}",
            )


def _run_incremental(
    snapshot: GraphSnapshot,
    previous_result: CommunityResult | None,
    new_node_ids: Sequence[str],
    new_edges: Sequence[Edge],
    modified_node_ids: Sequence[str],
    config: LouvainConfig,
    rng: random.Random | None,
    started: float,
    min_nodes: int,
    max_change_ratio: float,
) -> CommunityResult:
    if not snapshot.nodes:
        logger.warning("No nodes found in graph for incremental community detection")
        return empty_community_result(
            config, started,
            mode=DetectionMode.INCREMENTAL, incremental=True, affected_node_count=0,
        )

    node_count = len(snapshot.nodes)
    total_changes = len(new_node_ids) + len(new_edges) + len(modified_node_ids)
    change_ratio = total_changes / node_count

    reason = ineligibility_reason(
        previous_result, node_count, change_ratio, min_nodes, max_change_ratio,
    )
    if reason is not None or previous_result is None:
        reason = reason or "no_previous_result"
        logger.info(
            "Using full detection instead of incremental (%s)", reason,
            extra={"data": {"reason": reason, "change_ratio": round(change_ratio, 3)}},
        )
        result = detect_communities_in_snapshot(snapshot, config, rng, started)
        return _tag(
            result,
            mode=DetectionMode.FULL_BY_POLICY,
            fallback_reason=reason,
            change_ratio=change_ratio,
        )

    set_phase("frontier")
    graph = build_undirected_adjacency(snapshot.node_ids, snapshot.edges)
    plan = plan_frontier(
        snapshot.node_ids, graph, previous_result.communities,
        new_node_ids, new_edges, modified_node_ids,
    )
    logger.info(
        "Identified frontier for incremental detection",
        extra={"data": {
            "affected_nodes": len(plan.affected),
            "frontier_size": len(plan.frontier),
            "total_nodes": node_count,
            "frontier_ratio": round(len(plan.frontier) / node_count, 3),
        }},
    )

    set_phase("optimize")
    phase = local_moving_phase(
        plan.assignment,
        graph.adjacency,
        graph.degrees,
        graph.total_weight,
        config,
        rng=rng,
        frontier=plan.frontier,
    )

    set_phase("rank")
    assignment = renumber_communities(phase.assignment)
    modularity = calculate_modularity(
        assignment, graph.adjacency, graph.degrees, graph.total_weight, config.resolution,
    )
    community_list = build_community_list(snapshot.nodes, assignment)
    changed = identify_changed_communities(
        previous_result.communities, assignment, plan.frontier,
    )
    execution_time_ms = int((time.monotonic() - started) * 1000)

    logger.info(
        "Incremental community detection completed: %d communities, %d changed",
        len(community_list), len(changed),
        extra={"data": {
            "community_count": len(community_list),
            "modularity": modularity,
            "frontier_size": len(plan.frontier),
            "execution_time_ms": execution_time_ms,
        }},
    )

    return CommunityResult(
        communities=assignment,
        community_list=community_list,
        modularity=modularity,
        changed_communities=changed,
        metadata=CommunityMetadata(
            node_count=node_count,
            edge_count=len(snapshot.edges),
            community_count=len(community_list),
            hierarchy_levels=1,
            resolution=config.resolution,
            execution_time_ms=execution_time_ms,
            mode=DetectionMode.INCREMENTAL,
            incremental=True,
            affected_node_count=len(plan.affected),
            frontier_size=len(plan.frontier),
            changed_community_count=len(changed),
            change_ratio=change_ratio,
        ),
    )


async def detect_communities_smart(
    source: BaseGraphSource,
    previous_result: CommunityResult | None = None,
    since: datetime | None = None,
    config: LouvainConfig | None = None,
    rng: random.Random | None = None,
    limit: int = DEFAULT_SNAPSHOT_LIMIT,
    min_nodes: int = DEFAULT_MIN_NODES,
    max_change_ratio: float = DEFAULT_MAX_CHANGE_RATIO,
) -> CommunityResult:
    """Choose between cached, incremental and full detection.

    Asks the source for a change summary since the last run: no changes
    returns the previous result marked as cached; a small change set runs
    the incremental path with freshly fetched diffs; anything else runs
    full detection. Failures while dispatching degrade to full detection.
    """
    config = config or LouvainConfig()

    if since is None or previous_result is None:
        logger.info("No previous state, using full detection")
        result = await detect_communities(source, config, rng, limit)
        return _tag(
            result, mode=DetectionMode.FULL_BY_POLICY, fallback_reason="no_previous_result",
        )

    try:
        summary = await source.get_change_summary(since)

        if not summary.has_changes:
            logger.info("No graph changes detected, returning previous result")
            cached = previous_result.model_copy(deep=True)
            return _tag(
                cached, mode=DetectionMode.CACHED, from_cache=True, no_changes=True,
            )

        if summary.recommend_incremental:
            logger.info(
                "Using incremental detection based on change analysis",
                extra={"data": {
                    "change_ratio": summary.change_ratio,
                    "total_changes": summary.total_changes,
                }},
            )
            entity_changes, edge_changes = await asyncio.gather(
                source.get_entities_modified_since(since),
                source.get_edges_created_since(since),
            )
            return await detect_communities_incremental(
                source,
                previous_result,
                new_node_ids=[e.id for e in entity_changes.new_entities],
                new_edges=edge_changes.new_edges,
                modified_node_ids=[e.id for e in entity_changes.modified_entities],
                config=config,
                rng=rng,
                limit=limit,
                min_nodes=min_nodes,
                max_change_ratio=max_change_ratio,
            )
    except Exception as exc:
        logger.warning("Smart detection failed, falling back to full: %s", exc)
        result = await detect_communities(source, config, rng, limit)
        return _tag(
            result,
            mode=DetectionMode.FULL_BY_ERROR,
            fallback_reason=f"error: {type(exc).__name__}",
        )

    logger.info(
        "Using full detection due to high change ratio",
        extra={"data": {"change_ratio": summary.change_ratio}},
    )
    result = await detect_communities(source, config, rng, limit)
    return _tag(
        result,
        mode=DetectionMode.FULL_BY_POLICY,
        fallback_reason="high_change_ratio",
        change_ratio=summary.change_ratio,
    )
