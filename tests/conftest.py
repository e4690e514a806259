# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides small reference graphs (cliques, stars, cycles), in-memory graph
sources and seeded random generators. No external services.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from itertools import combinations

import pytest

from graphinsight.core.models import Edge, GraphSnapshot, Node
from graphinsight.graph_source.memory_source import MemoryGraphSource

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


# === HELPERS ===


def make_nodes(ids: list[str], node_type: str = "Process", created_at=None) -> list[Node]:
    return [
        Node(id=i, name=f"Entity {i}", type=node_type, created_at=created_at or BASE_TIME)
        for i in ids
    ]


def clique_edges(ids: list[str], created_at=None) -> list[Edge]:
    return [
        Edge(source=a, target=b, created_at=created_at or BASE_TIME)
        for a, b in combinations(ids, 2)
    ]


def two_cliques_snapshot(size: int = 5) -> GraphSnapshot:
    """Two disjoint cliques a0..a{n-1} and b0..b{n-1}."""
    left = [f"a{i}" for i in range(size)]
    right = [f"b{i}" for i in range(size)]
    return GraphSnapshot(
        nodes=make_nodes(left, "Process") + make_nodes(right, "System"),
        edges=clique_edges(left) + clique_edges(right),
    )


def bridged_cliques_snapshot(size: int = 6) -> GraphSnapshot:
    """Two cliques joined by the single edge a0 - b0."""
    snapshot = two_cliques_snapshot(size)
    snapshot.edges.append(Edge(source="a0", target="b0", created_at=BASE_TIME))
    return snapshot


def star_snapshot(leaves: int = 4) -> GraphSnapshot:
    """Hub 'c' linked to leaves l0..l{n-1}."""
    leaf_ids = [f"l{i}" for i in range(leaves)]
    return GraphSnapshot(
        nodes=make_nodes(["c"], "Role") + make_nodes(leaf_ids, "Task"),
        edges=[Edge(source="c", target=leaf) for leaf in leaf_ids],
    )


def cycle_snapshot(size: int = 3) -> GraphSnapshot:
    ids = [f"n{i}" for i in range(size)]
    return GraphSnapshot(
        nodes=make_nodes(ids),
        edges=[Edge(source=ids[i], target=ids[(i + 1) % size]) for i in range(size)],
    )


# === FIXTURES ===


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def later_time() -> datetime:
    return BASE_TIME + timedelta(days=1)


@pytest.fixture
def two_cliques() -> GraphSnapshot:
    return two_cliques_snapshot()


@pytest.fixture
def bridged_cliques() -> GraphSnapshot:
    return bridged_cliques_snapshot()


@pytest.fixture
def star() -> GraphSnapshot:
    return star_snapshot()


@pytest.fixture
def two_cliques_source(two_cliques) -> MemoryGraphSource:
    return MemoryGraphSource.from_snapshot(two_cliques)


@pytest.fixture
def bridged_source(bridged_cliques) -> MemoryGraphSource:
    return MemoryGraphSource.from_snapshot(bridged_cliques)


@pytest.fixture
def empty_source() -> MemoryGraphSource:
    return MemoryGraphSource()
