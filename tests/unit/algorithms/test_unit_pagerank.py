# tests/unit/algorithms/test_unit_pagerank.py — v1
"""Tests for algorithms/pagerank.py — power iteration and ranked output."""

from __future__ import annotations

from unittest.mock import AsyncMock

import networkx as nx
import pytest

from graphinsight.algorithms.adjacency import build_directed_links
from graphinsight.algorithms.models import PageRankConfig
from graphinsight.algorithms.pagerank import (
    calculate_pagerank,
    compute_pagerank,
    get_entity_pagerank,
    get_top_entities_by_pagerank,
)
from graphinsight.core.models import Edge, GraphSnapshot, Node
from graphinsight.graph_source.memory_source import MemoryGraphSource

STRONG_EDGES = [("n0", "n1"), ("n1", "n2"), ("n2", "n0"), ("n0", "n2"), ("n2", "n3"), ("n3", "n0")]


def _source(pairs, ids=None) -> MemoryGraphSource:
    ids = ids or sorted({n for pair in pairs for n in pair})
    return MemoryGraphSource.from_snapshot(GraphSnapshot(
        nodes=[Node(id=i, name=i.upper(), type="Task") for i in ids],
        edges=[Edge(source=s, target=t) for s, t in pairs],
    ))


class TestComputePageRank:
    def test_three_cycle_uniform(self):
        links = build_directed_links(["a", "b", "c"], [
            Edge(source="a", target="b"), Edge(source="b", target="c"), Edge(source="c", target="a"),
        ])
        run = compute_pagerank(links)
        for score in run.scores.values():
            assert score == pytest.approx(1 / 3, abs=1e-6)
        assert run.converged

    def test_sum_is_one_without_dangling(self):
        ids = ["n0", "n1", "n2", "n3"]
        links = build_directed_links(ids, [Edge(source=s, target=t) for s, t in STRONG_EDGES])
        config = PageRankConfig()
        run = compute_pagerank(links, config)
        assert sum(run.scores.values()) == pytest.approx(1.0, abs=config.convergence_threshold * len(ids))

    def test_matches_networkx(self):
        ids = ["n0", "n1", "n2", "n3"]
        links = build_directed_links(ids, [Edge(source=s, target=t) for s, t in STRONG_EDGES])
        run = compute_pagerank(links, PageRankConfig(convergence_threshold=1e-10, max_iterations=500))
        expected = nx.pagerank(nx.DiGraph(STRONG_EDGES), alpha=0.85, tol=1e-12)
        for node_id, score in expected.items():
            assert run.scores[node_id] == pytest.approx(score, abs=1e-6)

    def test_dangling_mass_not_redistributed(self):
        links = build_directed_links(["a", "b"], [Edge(source="a", target="b")])
        run = compute_pagerank(links)
        assert run.scores["a"] == pytest.approx(0.075)
        assert run.scores["b"] == pytest.approx(0.075 + 0.85 * 0.075)
        assert sum(run.scores.values()) < 1.0

    def test_not_converged(self):
        links = build_directed_links(["a", "b"], [Edge(source="a", target="b")])
        run = compute_pagerank(links, PageRankConfig(max_iterations=1))
        assert run.iterations == 1
        assert not run.converged
        assert run.final_max_delta > 0

    def test_empty(self):
        run = compute_pagerank(build_directed_links([], []))
        assert run.scores == {}
        assert run.iterations == 0
        assert run.converged


class TestCalculatePageRank:
    @pytest.mark.asyncio
    async def test_ranked_output(self):
        source = _source([("a", "hub"), ("b", "hub"), ("c", "hub"), ("hub", "a")])
        result = await calculate_pagerank(source)
        assert result.ranked_entities[0].id == "hub"
        assert result.ranked_entities[0].name == "HUB"
        scores = [e.score for e in result.ranked_entities]
        assert scores == sorted(scores, reverse=True)
        assert result.metadata.node_count == 4
        assert result.metadata.edge_count == 4
        assert result.metadata.damping_factor == 0.85

    @pytest.mark.asyncio
    async def test_repeat_calls_agree(self):
        source = _source(STRONG_EDGES)
        first = await calculate_pagerank(source)
        second = await calculate_pagerank(source)
        for node_id, score in first.scores.items():
            assert second.scores[node_id] == pytest.approx(score, abs=1e-6)

    @pytest.mark.asyncio
    async def test_empty_graph(self, empty_source):
        result = await calculate_pagerank(empty_source)
        assert result.scores == {}
        assert result.ranked_entities == []
        assert result.metadata.iterations == 0
        assert result.metadata.converged is True

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self):
        source = AsyncMock()
        source.get_snapshot.side_effect = RuntimeError("down")
        with pytest.raises(RuntimeError):
            await calculate_pagerank(source)


class TestPageRankLookups:
    @pytest.mark.asyncio
    async def test_top_n(self):
        source = _source([("a", "hub"), ("b", "hub"), ("c", "hub"), ("hub", "a")])
        top = await get_top_entities_by_pagerank(source, n=2)
        assert len(top) == 2
        assert top[0].id == "hub"

    @pytest.mark.asyncio
    async def test_entity_rank_and_percentile(self):
        source = _source([("a", "hub"), ("b", "hub"), ("c", "hub"), ("hub", "a")])
        entity = await get_entity_pagerank(source, "hub")
        assert entity is not None
        assert entity.rank == 1
        assert entity.percentile == pytest.approx(75.0)

    @pytest.mark.asyncio
    async def test_unknown_entity(self):
        source = _source([("a", "b")])
        assert await get_entity_pagerank(source, "zzz") is None
