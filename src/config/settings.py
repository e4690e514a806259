# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: graph source
selection, algorithm defaults, randomness and logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from graphinsight.algorithms.models import (
    BetweennessConfig,
    LouvainConfig,
    PageRankConfig,
)


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Graph source ===
    graph_source_type: Literal["memory", "json"] = "memory"
    graph_source_path: Path | None = None
    snapshot_limit: int = 10000

    # === Randomness ===
    random_seed: int | None = None

    # === Louvain ===
    louvain_max_iterations: int = 100
    louvain_min_modularity_gain: float = 1e-7
    louvain_resolution: float = 1.0

    # === Incremental detection ===
    incremental_min_nodes: int = 10
    incremental_max_change_ratio: float = 0.3

    # === PageRank ===
    pagerank_damping_factor: float = 0.85
    pagerank_max_iterations: int = 100
    pagerank_convergence_threshold: float = 1e-6

    # === Betweenness ===
    betweenness_normalized: bool = True
    betweenness_directed: bool = True
    betweenness_sample_size: int | None = None
    bridge_threshold: float = 0.1

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("snapshot_limit", "louvain_max_iterations", "pagerank_max_iterations")
    @classmethod
    def validate_positive(cls, v: int) -> int:  # noqa: N805
        """Limits and iteration caps must be >= 1."""
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.graph_source_type == "json" and self.graph_source_path is None:
            errors.append("GRAPH_SOURCE_TYPE=json requires GRAPH_SOURCE_PATH")

        if not 0.0 < self.pagerank_damping_factor < 1.0:
            errors.append("PAGERANK_DAMPING_FACTOR must be in (0, 1)")

        if not 0.0 <= self.incremental_max_change_ratio <= 1.0:
            errors.append("INCREMENTAL_MAX_CHANGE_RATIO must be in [0, 1]")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    def louvain_config(self) -> LouvainConfig:
        return LouvainConfig(
            max_iterations=self.louvain_max_iterations,
            min_modularity_gain=self.louvain_min_modularity_gain,
            resolution=self.louvain_resolution,
        )

    def pagerank_config(self) -> PageRankConfig:
        return PageRankConfig(
            damping_factor=self.pagerank_damping_factor,
            max_iterations=self.pagerank_max_iterations,
            convergence_threshold=self.pagerank_convergence_threshold,
        )

    def betweenness_config(self) -> BetweennessConfig:
        return BetweennessConfig(
            normalized=self.betweenness_normalized,
            directed=self.betweenness_directed,
            sample_size=self.betweenness_sample_size,
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
