# src/algorithms/betweenness.py — v1
"""Betweenness centrality (Brandes) with optional source sampling.

For each source s a BFS counts shortest paths (sigma) and records
predecessors; dependencies are then accumulated in decreasing distance
order:

    delta(v) += sigma(v) / sigma(w) * (1 + delta(w))   for v in pred(w)

Undirected graphs are handled by adding every edge in both directions, so
each unordered pair is counted from both ends.

Normalization divides by (n-1)(n-2), halved for undirected graphs, and only
applies when n > 2. When sampling k < n sources, the (already normalized)
scores are scaled by n / k.
"""

from __future__ import annotations

import logging
import random
import time
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from graphinsight.algorithms.adjacency import build_neighbor_lists
from graphinsight.algorithms.models import (
    BetweennessConfig,
    BetweennessMetadata,
    BetweennessResult,
    EntityScore,
    RankedEntity,
)
from graphinsight.algorithms.ranking import build_ranked_entities, lookup_entity
from graphinsight.core.random_source import resolve_rng
from graphinsight.logging.context import algorithm_context, set_phase

if TYPE_CHECKING:
    from graphinsight.graph_source.base_graph_source import BaseGraphSource

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_LIMIT = 10000
DEFAULT_BRIDGE_THRESHOLD = 0.1


@dataclass
class ShortestPaths:
    """Single-source BFS state. order lists reached nodes by visit order."""

    sigma: dict[str, int]
    predecessors: dict[str, list[str]]
    order: list[str]


def shortest_paths(source: str, neighbors: Mapping[str, Sequence[str]]) -> ShortestPaths:
    """BFS from source counting shortest paths to every reachable node."""
    sigma: dict[str, int] = {source: 1}
    distance: dict[str, int] = {source: 0}
    predecessors: dict[str, list[str]] = {source: []}
    order: list[str] = []

    queue = deque([source])
    while queue:
        v = queue.popleft()
        order.append(v)
        for w in neighbors.get(v, ()):
            if w not in distance:
                distance[w] = distance[v] + 1
                sigma[w] = 0
                predecessors[w] = []
                queue.append(w)
            if distance[w] == distance[v] + 1:
                sigma[w] += sigma[v]
                predecessors[w].append(v)

    return ShortestPaths(sigma=sigma, predecessors=predecessors, order=order)


def accumulate_dependencies(
    source: str,
    paths: ShortestPaths,
    betweenness: dict[str, float],
) -> None:
    """Add source's pair dependencies into betweenness (in place)."""
    delta = dict.fromkeys(paths.order, 0.0)
    # BFS visit order reversed is non-increasing distance
    for w in reversed(paths.order):
        coefficient = (1.0 + delta[w]) / paths.sigma[w]
        for v in paths.predecessors[w]:
            delta[v] += paths.sigma[v] * coefficient
        if w != source:
            betweenness[w] += delta[w]


def sample_nodes(
    node_ids: Sequence[str],
    sample_size: int,
    rng: random.Random | None = None,
) -> list[str]:
    """Pick sample_size distinct nodes with a partial Fisher-Yates shuffle."""
    rng = resolve_rng(rng)
    shuffled = list(node_ids)
    for i in range(min(sample_size, len(shuffled))):
        j = i + rng.randrange(len(shuffled) - i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled[:sample_size]


def _is_sampled(sample_size: int | None, n: int) -> bool:
    return sample_size is not None and 0 < sample_size < n


def effective_sample_size(sample_size: int | None, n: int) -> int:
    """Number of source nodes Brandes actually runs from."""
    return sample_size if _is_sampled(sample_size, n) else n  # type: ignore[return-value]


def compute_betweenness(
    node_ids: Sequence[str],
    neighbors: Mapping[str, Sequence[str]],
    config: BetweennessConfig | None = None,
    rng: random.Random | None = None,
) -> dict[str, float]:
    """Betweenness score for every node id.

    Args:
        node_ids: All nodes; scores are reported in this order.
        neighbors: Outgoing neighbour lists (both directions if undirected).
        config: Normalization, direction and sampling options.
        rng: Random source used only when sampling.
    """
    config = config or BetweennessConfig()
    n = len(node_ids)
    betweenness = dict.fromkeys(node_ids, 0.0)

    sources: Sequence[str] = node_ids
    sampled = _is_sampled(config.sample_size, n)
    if sampled:
        sources = sample_nodes(node_ids, config.sample_size, rng)  # type: ignore[arg-type]
        logger.info("Using sampled approximation with %d source nodes", len(sources))

    for source in sources:
        accumulate_dependencies(source, shortest_paths(source, neighbors), betweenness)

    if config.normalized and n > 2:
        scale = (n - 1) * (n - 2)
        if not config.directed:
            scale /= 2
        for node_id in betweenness:
            betweenness[node_id] /= scale

    if sampled:
        factor = n / config.sample_size  # type: ignore[operator]
        for node_id in betweenness:
            betweenness[node_id] *= factor

    return betweenness


async def calculate_betweenness(
    source: BaseGraphSource,
    config: BetweennessConfig | None = None,
    rng: random.Random | None = None,
    limit: int = DEFAULT_SNAPSHOT_LIMIT,
) -> BetweennessResult:
    """Fetch a snapshot and rank every entity by betweenness.

    Raises:
        Exception: Whatever the graph source raises, unmodified.
    """
    config = config or BetweennessConfig()
    with algorithm_context("betweenness"):
        logger.info("Starting betweenness calculation", extra={"data": config.model_dump()})
        started = time.monotonic()
        try:
            set_phase("fetch")
            snapshot = await source.get_snapshot(limit)
        except Exception:
            logger.exception("Betweenness calculation failed")
            raise

        if not snapshot.nodes:
            logger.warning("No nodes found in graph for betweenness calculation")
            return BetweennessResult(metadata=BetweennessMetadata(
                normalized=config.normalized,
                directed=config.directed,
                execution_time_ms=int((time.monotonic() - started) * 1000),
            ))

        set_phase("brandes")
        node_ids = snapshot.node_ids
        neighbors = build_neighbor_lists(node_ids, snapshot.edges, directed=config.directed)
        scores = compute_betweenness(node_ids, neighbors, config, rng)

        set_phase("rank")
        ranked = build_ranked_entities(snapshot.nodes, scores)
        execution_time_ms = int((time.monotonic() - started) * 1000)

        logger.info(
            "Betweenness calculation completed",
            extra={"data": {
                "node_count": len(node_ids),
                "top_entity": ranked[0].name if ranked else None,
                "top_score": ranked[0].score if ranked else None,
                "execution_time_ms": execution_time_ms,
            }},
        )

        return BetweennessResult(
            scores=scores,
            ranked_entities=ranked,
            metadata=BetweennessMetadata(
                node_count=len(snapshot.nodes),
                edge_count=len(snapshot.edges),
                normalized=config.normalized,
                directed=config.directed,
                sample_size=effective_sample_size(config.sample_size, len(snapshot.nodes)),
                execution_time_ms=execution_time_ms,
            ),
        )


async def get_top_entities_by_betweenness(
    source: BaseGraphSource,
    n: int = 10,
    config: BetweennessConfig | None = None,
    rng: random.Random | None = None,
) -> list[RankedEntity]:
    result = await calculate_betweenness(source, config, rng)
    return result.ranked_entities[:n]


async def get_entity_betweenness(
    source: BaseGraphSource,
    entity_id: str,
    config: BetweennessConfig | None = None,
    rng: random.Random | None = None,
) -> EntityScore | None:
    """Betweenness of one entity with its rank and percentile, None if unknown."""
    result = await calculate_betweenness(source, config, rng)
    return lookup_entity(result.ranked_entities, entity_id)


async def identify_bridge_entities(
    source: BaseGraphSource,
    threshold: float = DEFAULT_BRIDGE_THRESHOLD,
    config: BetweennessConfig | None = None,
    rng: random.Random | None = None,
) -> list[RankedEntity]:
    """Entities whose normalized betweenness is at least threshold.

    Normalization is always forced on, whatever the config says.
    """
    config = (config or BetweennessConfig()).model_copy(update={"normalized": True})
    result = await calculate_betweenness(source, config, rng)
    return [e for e in result.ranked_entities if e.score >= threshold]
