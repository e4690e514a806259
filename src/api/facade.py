# src/api/facade.py — v1
"""Public API facade — single entry point for whole-graph analysis.

Usage:
    from graphinsight.api.facade import analyze
    report = await analyze(source)

Each engine gets its own random source built from RANDOM_SEED, so every
part of the report matches the corresponding standalone call made with the
same seed.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from graphinsight.algorithms.betweenness import (
    calculate_betweenness,
    identify_bridge_entities,
)
from graphinsight.algorithms.louvain.detector import detect_communities
from graphinsight.algorithms.pagerank import calculate_pagerank
from graphinsight.api.models import AnalysisReport, ConfigOverrides
from graphinsight.config.settings import Settings
from graphinsight.core.random_source import make_rng
from graphinsight.graph_source.source_factory import create_graph_source
from graphinsight.logging.context import algorithm_context

if TYPE_CHECKING:
    from graphinsight.graph_source.base_graph_source import BaseGraphSource

logger = logging.getLogger(__name__)


async def analyze(
    source: BaseGraphSource | None = None,
    settings: Settings | None = None,
    overrides: ConfigOverrides | None = None,
) -> AnalysisReport:
    """Run community detection, PageRank, betweenness and the bridge filter.

    Args:
        source: Graph source. Built from settings when None.
        settings: Global settings. Loaded from .env if None.
        overrides: Per-call settings overrides.

    Returns:
        AnalysisReport with one result per engine.

    Raises:
        ConfigurationError: If the overridden settings are inconsistent.
        Exception: Whatever the graph source raises while fetching.
    """
    settings = _apply_overrides(settings or Settings(), overrides)
    source = source if source is not None else create_graph_source(settings)

    with algorithm_context("analyze") as run_id:
        logger.info(
            "Starting graph analysis: provider=%s, run_id=%s",
            source.provider_name, run_id,
        )
        started = time.monotonic()
        limit = settings.snapshot_limit

        communities = await detect_communities(
            source, settings.louvain_config(), make_rng(settings.random_seed), limit,
        )
        pagerank = await calculate_pagerank(source, settings.pagerank_config(), limit)
        betweenness = await calculate_betweenness(
            source, settings.betweenness_config(), make_rng(settings.random_seed), limit,
        )
        if betweenness.metadata.normalized:
            bridges = [
                e for e in betweenness.ranked_entities
                if e.score >= settings.bridge_threshold
            ]
        else:
            bridges = await identify_bridge_entities(
                source, settings.bridge_threshold, settings.betweenness_config(),
                make_rng(settings.random_seed),
            )

        report = AnalysisReport(
            provider=source.provider_name,
            communities=communities,
            pagerank=pagerank,
            betweenness=betweenness,
            bridges=bridges,
            execution_time_ms=int((time.monotonic() - started) * 1000),
        )

        logger.info(
            "Analysis complete: communities=%d, bridges=%d",
            report.communities.metadata.community_count, len(bridges),
            extra={"data": {"execution_time_ms": report.execution_time_ms}},
        )
        return report


def _apply_overrides(settings: Settings, overrides: ConfigOverrides | None) -> Settings:
    """Apply per-call config overrides if provided."""
    if overrides is None:
        return settings
    values = overrides.model_dump(exclude_none=True)
    if not values:
        return settings
    current = settings.model_dump()
    current.update(values)
    return Settings(_env_file=None, **current)
