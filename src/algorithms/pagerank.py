# src/algorithms/pagerank.py — v1
"""PageRank by power iteration over the directed entity graph.

Scores start uniform at 1/N. Each iteration computes, for every node v,

    score'(v) = (1 - d) / N + d * sum(score(u) / out(u) for u linking to v)

Self-loops and parallel edges count once per occurrence. Dangling nodes
(no out-links) do not redistribute their mass, so scores need not sum
to exactly 1 on graphs that have them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from graphinsight.algorithms.adjacency import DirectedLinks, build_directed_links
from graphinsight.algorithms.models import (
    EntityScore,
    PageRankConfig,
    PageRankMetadata,
    PageRankResult,
    RankedEntity,
)
from graphinsight.algorithms.ranking import build_ranked_entities, lookup_entity
from graphinsight.logging.context import algorithm_context, set_phase

if TYPE_CHECKING:
    from graphinsight.graph_source.base_graph_source import BaseGraphSource

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_LIMIT = 10000


@dataclass
class PowerIteration:
    scores: dict[str, float]
    iterations: int
    converged: bool
    final_max_delta: float


def compute_pagerank(
    links: DirectedLinks,
    config: PageRankConfig | None = None,
) -> PowerIteration:
    """Run power iteration until the max per-node delta drops below the threshold."""
    config = config or PageRankConfig()
    n = len(links.node_ids)
    if n == 0:
        return PowerIteration(scores={}, iterations=0, converged=True, final_max_delta=0.0)

    d = config.damping_factor
    teleport = (1.0 - d) / n
    scores = {node_id: 1.0 / n for node_id in links.node_ids}
    iterations = 0
    max_delta = 0.0
    converged = False

    while iterations < config.max_iterations:
        iterations += 1
        updated: dict[str, float] = {}
        max_delta = 0.0
        for node_id in links.node_ids:
            incoming = sum(
                scores[u] / (links.out_degree[u] or 1) for u in links.in_links[node_id]
            )
            value = teleport + d * incoming
            updated[node_id] = value
            max_delta = max(max_delta, abs(value - scores[node_id]))
        scores = updated
        if max_delta < config.convergence_threshold:
            converged = True
            break

    if not converged:
        logger.warning(
            "PageRank did not converge after %d iterations (max delta %.2e)",
            iterations, max_delta,
        )

    return PowerIteration(
        scores=scores, iterations=iterations, converged=converged, final_max_delta=max_delta,
    )


async def calculate_pagerank(
    source: BaseGraphSource,
    config: PageRankConfig | None = None,
    limit: int = DEFAULT_SNAPSHOT_LIMIT,
) -> PageRankResult:
    """Fetch a snapshot and rank every entity by PageRank.

    Raises:
        Exception: Whatever the graph source raises, unmodified.
    """
    config = config or PageRankConfig()
    with algorithm_context("pagerank"):
        logger.info("Starting PageRank calculation", extra={"data": config.model_dump()})
        started = time.monotonic()
        try:
            set_phase("fetch")
            snapshot = await source.get_snapshot(limit)
        except Exception:
            logger.exception("PageRank calculation failed")
            raise

        if not snapshot.nodes:
            logger.warning("No nodes found in graph for PageRank calculation")
            return PageRankResult(metadata=PageRankMetadata(
                iterations=0,
                damping_factor=config.damping_factor,
                execution_time_ms=int((time.monotonic() - started) * 1000),
            ))

        set_phase("iterate")
        links = build_directed_links(snapshot.node_ids, snapshot.edges)
        run = compute_pagerank(links, config)

        set_phase("rank")
        ranked = build_ranked_entities(snapshot.nodes, run.scores)
        execution_time_ms = int((time.monotonic() - started) * 1000)

        logger.info(
            "PageRank calculation completed in %d iterations", run.iterations,
            extra={"data": {
                "node_count": len(snapshot.nodes),
                "converged": run.converged,
                "final_max_delta": run.final_max_delta,
                "execution_time_ms": execution_time_ms,
            }},
        )

        return PageRankResult(
            scores=run.scores,
            ranked_entities=ranked,
            metadata=PageRankMetadata(
                node_count=len(snapshot.nodes),
                edge_count=len(snapshot.edges),
                iterations=run.iterations,
                converged=run.converged,
                final_max_delta=run.final_max_delta,
                damping_factor=config.damping_factor,
                execution_time_ms=execution_time_ms,
            ),
        )


async def get_top_entities_by_pagerank(
    source: BaseGraphSource,
    n: int = 10,
    config: PageRankConfig | None = None,
) -> list[RankedEntity]:
    result = await calculate_pagerank(source, config)
    return result.ranked_entities[:n]


async def get_entity_pagerank(
    source: BaseGraphSource,
    entity_id: str,
    config: PageRankConfig | None = None,
) -> EntityScore | None:
    """PageRank of one entity with its rank and percentile, None if unknown."""
    result = await calculate_pagerank(source, config)
    return lookup_entity(result.ranked_entities, entity_id)
