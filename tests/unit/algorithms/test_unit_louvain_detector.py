# tests/unit/algorithms/test_unit_louvain_detector.py — v1
"""Tests for algorithms/louvain/detector.py — full and subgraph detection."""

from __future__ import annotations

import random
from unittest.mock import AsyncMock

import pytest

from graphinsight.algorithms.adjacency import build_undirected_adjacency
from graphinsight.algorithms.louvain.detector import (
    detect_communities,
    detect_communities_in_snapshot,
    detect_subgraph_communities,
    get_entity_community,
    get_top_communities,
    run_louvain,
)
from graphinsight.algorithms.models import DetectionMode, LouvainConfig
from graphinsight.core.models import Edge, GraphSnapshot, Node, Subgraph
from graphinsight.graph_source.memory_source import MemoryGraphSource


class TestRunLouvain:
    def test_two_cliques(self, two_cliques, rng):
        graph = build_undirected_adjacency(two_cliques.node_ids, two_cliques.edges)
        outcome = run_louvain(graph, rng=rng)
        assert len(set(outcome.assignment.values())) == 2
        assert outcome.modularity > 0.3
        assert outcome.hierarchy_levels >= 1

    def test_ids_are_dense(self, bridged_cliques, rng):
        graph = build_undirected_adjacency(bridged_cliques.node_ids, bridged_cliques.edges)
        outcome = run_louvain(graph, rng=rng)
        ids = set(outcome.assignment.values())
        assert ids == set(range(len(ids)))

    def test_bridged_cliques_split_at_bridge(self, bridged_cliques, rng):
        graph = build_undirected_adjacency(bridged_cliques.node_ids, bridged_cliques.edges)
        outcome = run_louvain(graph, rng=rng)
        left = {outcome.assignment[f"a{i}"] for i in range(6)}
        right = {outcome.assignment[f"b{i}"] for i in range(6)}
        assert len(left) == 1 and len(right) == 1
        assert left != right

    def test_zero_edges_singletons(self, rng):
        graph = build_undirected_adjacency(["a", "b", "c"], [])
        outcome = run_louvain(graph, rng=rng)
        assert sorted(outcome.assignment.values()) == [0, 1, 2]
        assert outcome.modularity == 0.0

    def test_every_node_assigned(self, bridged_cliques, rng):
        graph = build_undirected_adjacency(bridged_cliques.node_ids, bridged_cliques.edges)
        outcome = run_louvain(graph, rng=rng)
        assert set(outcome.assignment) == set(bridged_cliques.node_ids)

    def test_seeded_runs_reproducible(self, bridged_cliques):
        graph = build_undirected_adjacency(bridged_cliques.node_ids, bridged_cliques.edges)
        first = run_louvain(graph, rng=random.Random(3))
        second = run_louvain(graph, rng=random.Random(3))
        assert first.assignment == second.assignment
        assert first.modularity == second.modularity

    def test_ring_of_cliques_multi_level(self, rng):
        nodes, edges = [], []
        for c in range(6):
            ids = [f"c{c}_{i}" for i in range(4)]
            nodes += ids
            edges += [Edge(source=a, target=b) for i, a in enumerate(ids) for b in ids[i + 1:]]
            edges.append(Edge(source=ids[0], target=f"c{(c + 1) % 6}_1"))
        graph = build_undirected_adjacency(nodes, edges)
        outcome = run_louvain(graph, rng=rng)
        assert 2 <= len(set(outcome.assignment.values())) <= 6
        assert outcome.modularity > 0.4


class TestDetectCommunities:
    @pytest.mark.asyncio
    async def test_two_cliques(self, two_cliques_source, rng):
        result = await detect_communities(two_cliques_source, rng=rng)
        assert result.metadata.community_count == 2
        assert result.modularity > 0.3
        assert result.metadata.node_count == 10
        assert result.metadata.edge_count == 20
        assert result.metadata.mode == DetectionMode.FULL
        assert result.metadata.incremental is False
        assert result.changed_communities is None

    @pytest.mark.asyncio
    async def test_community_list_display_join(self, two_cliques_source, rng):
        result = await detect_communities(two_cliques_source, rng=rng)
        assert [c.size for c in result.community_list] == [5, 5]
        dominant = {c.dominant_type for c in result.community_list}
        assert dominant == {"Process", "System"}
        member = result.community_list[0].members[0]
        assert member.name.startswith("Entity ")

    @pytest.mark.asyncio
    async def test_empty_graph(self, empty_source):
        result = await detect_communities(empty_source)
        assert result.communities == {}
        assert result.community_list == []
        assert result.modularity == 0.0
        assert result.metadata.node_count == 0
        assert result.metadata.community_count == 0

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self):
        source = AsyncMock()
        source.get_snapshot.side_effect = ConnectionError("store down")
        with pytest.raises(ConnectionError, match="store down"):
            await detect_communities(source)

    @pytest.mark.asyncio
    async def test_resolution_recorded(self, two_cliques_source, rng):
        result = await detect_communities(
            two_cliques_source, LouvainConfig(resolution=0.5), rng=rng,
        )
        assert result.metadata.resolution == 0.5

    def test_in_snapshot_dangling_edges_ignored(self, rng):
        snapshot = GraphSnapshot(
            nodes=[Node(id="a"), Node(id="b")],
            edges=[Edge(source="a", target="b"), Edge(source="a", target="ghost")],
        )
        result = detect_communities_in_snapshot(snapshot, rng=rng)
        assert set(result.communities) == {"a", "b"}


class TestSubgraphDetection:
    @pytest.mark.asyncio
    async def test_endpoints_by_name(self, rng):
        source = AsyncMock()
        source.get_subgraph.return_value = Subgraph(
            entities=[
                Node(id="1", name="Order"),
                Node(id="2", name="Invoice"),
                Node(id="3", name="Payment"),
            ],
            relationships=[
                Edge(source="Order", target="Invoice"),
                Edge(source="2", target="Payment"),
                Edge(source="Order", target="Unknown thing"),
            ],
        )
        result = await detect_subgraph_communities(source, ["1", "2", "3"], rng=rng)
        assert set(result.communities) == {"1", "2", "3"}
        assert result.metadata.edge_count == 2

    @pytest.mark.asyncio
    async def test_memory_source_subgraph(self, two_cliques_source, rng):
        result = await detect_subgraph_communities(
            two_cliques_source, ["a0", "a1", "a2", "b0"], rng=rng,
        )
        assert result.metadata.node_count == 4
        assert result.communities["a0"] == result.communities["a1"]
        assert result.communities["b0"] != result.communities["a0"]

    @pytest.mark.asyncio
    async def test_empty_subgraph(self, empty_source):
        result = await detect_subgraph_communities(empty_source, ["missing"])
        assert result.communities == {}
        assert result.metadata.node_count == 0


class TestCommunityLookups:
    @pytest.mark.asyncio
    async def test_entity_community(self, two_cliques_source):
        found = await get_entity_community(two_cliques_source, "a0", rng=random.Random(1))
        assert found is not None
        assert found.total_communities == 2
        assert found.community is not None
        assert "a0" in {m.id for m in found.community.members}

    @pytest.mark.asyncio
    async def test_entity_community_unknown(self, two_cliques_source):
        assert await get_entity_community(two_cliques_source, "nope") is None

    @pytest.mark.asyncio
    async def test_top_communities(self):
        source = MemoryGraphSource.from_snapshot(GraphSnapshot(
            nodes=[Node(id=i, type="Task") for i in "abcdef"],
            edges=[
                Edge(source="a", target="b"), Edge(source="b", target="c"),
                Edge(source="a", target="c"), Edge(source="d", target="e"),
            ],
        ))
        top = await get_top_communities(source, n=2, rng=random.Random(5))
        assert [c.size for c in top] == [3, 2]
