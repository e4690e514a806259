# src/api/models.py — v1
"""API-level models: ConfigOverrides, AnalysisReport."""

from __future__ import annotations

from pydantic import BaseModel, Field

from graphinsight.algorithms.models import (
    BetweennessResult,
    CommunityResult,
    PageRankResult,
    RankedEntity,
)


class ConfigOverrides(BaseModel):
    """Per-call overrides — validated subset of Settings."""

    snapshot_limit: int | None = None
    random_seed: int | None = None
    louvain_resolution: float | None = None
    louvain_max_iterations: int | None = None
    pagerank_damping_factor: float | None = None
    pagerank_max_iterations: int | None = None
    betweenness_directed: bool | None = None
    betweenness_sample_size: int | None = None
    bridge_threshold: float | None = None


class AnalysisReport(BaseModel):
    """Return value of facade.analyze() — every engine over one graph source."""

    provider: str
    communities: CommunityResult
    pagerank: PageRankResult
    betweenness: BetweennessResult
    bridges: list[RankedEntity] = Field(default_factory=list)
    execution_time_ms: int = 0
