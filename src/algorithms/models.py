# src/algorithms/models.py — v1
"""Algorithm configuration and result models.

Configs carry the documented defaults; results are what every public
analytics operation returns (score/assignment map, ranked display list,
metadata block).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


# === CONFIGURATION ===


class LouvainConfig(BaseModel):
    """Louvain community detection parameters."""

    max_iterations: int = 100
    min_modularity_gain: float = 1e-7
    resolution: float = 1.0


class PageRankConfig(BaseModel):
    """PageRank power-iteration parameters."""

    damping_factor: float = 0.85
    max_iterations: int = 100
    convergence_threshold: float = 1e-6


class BetweennessConfig(BaseModel):
    """Brandes betweenness parameters. sample_size=None means exact."""

    normalized: bool = True
    directed: bool = True
    sample_size: int | None = None


# === COMMUNITIES ===


class DetectionMode(str, Enum):
    """How a community result was produced."""

    FULL = "full"
    INCREMENTAL = "incremental"
    FULL_BY_POLICY = "full_by_policy"
    FULL_BY_ERROR = "full_by_error"
    CACHED = "cached"


class CommunityMember(BaseModel):
    id: str
    name: str
    type: str = "Unknown"


class Community(BaseModel):
    """One detected community with display-joined members."""

    id: int
    size: int
    members: list[CommunityMember] = Field(default_factory=list)
    type_counts: dict[str, int] = Field(default_factory=dict)
    dominant_type: str = "Unknown"


class CommunityMetadata(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    community_count: int = 0
    hierarchy_levels: int = 0
    resolution: float = 1.0
    execution_time_ms: int = 0
    mode: DetectionMode = DetectionMode.FULL
    incremental: bool = False
    fallback_reason: str | None = None
    affected_node_count: int | None = None
    frontier_size: int | None = None
    changed_community_count: int | None = None
    change_ratio: float | None = None
    from_cache: bool = False
    no_changes: bool = False


class CommunityResult(BaseModel):
    """Result of full, incremental, smart or subgraph detection."""

    communities: dict[str, int] = Field(default_factory=dict)
    community_list: list[Community] = Field(default_factory=list)
    modularity: float = 0.0
    changed_communities: list[int] | None = None
    metadata: CommunityMetadata = Field(default_factory=CommunityMetadata)


class EntityCommunity(BaseModel):
    """Single-entity community lookup."""

    entity_id: str
    community_id: int
    community: Community | None = None
    total_communities: int = 0
    modularity: float = 0.0


# === SCORES ===


class RankedEntity(BaseModel):
    """Score joined with display attributes."""

    id: str
    name: str
    type: str = "Unknown"
    score: float = 0.0
    description: str | None = None
    confidence: float | None = None


class EntityScore(RankedEntity):
    """Ranked entity with its 1-based position and percentile."""

    rank: int
    percentile: float


class PageRankMetadata(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    iterations: int = 0
    converged: bool = True
    final_max_delta: float = 0.0
    damping_factor: float = 0.85
    execution_time_ms: int = 0


class PageRankResult(BaseModel):
    scores: dict[str, float] = Field(default_factory=dict)
    ranked_entities: list[RankedEntity] = Field(default_factory=list)
    metadata: PageRankMetadata = Field(default_factory=PageRankMetadata)


class BetweennessMetadata(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    normalized: bool = True
    directed: bool = True
    sample_size: int = 0
    execution_time_ms: int = 0


class BetweennessResult(BaseModel):
    scores: dict[str, float] = Field(default_factory=dict)
    ranked_entities: list[RankedEntity] = Field(default_factory=list)
    metadata: BetweennessMetadata = Field(default_factory=BetweennessMetadata)
