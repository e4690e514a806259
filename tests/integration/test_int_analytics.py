# tests/integration/test_int_analytics.py — v1
"""End-to-end analytics over a JSON-backed graph source.

Loads a process graph from disk, runs every engine, then evolves the graph
and checks the smart dispatcher picks the expected path each time.
"""

from __future__ import annotations

import json
import random
from datetime import datetime, timedelta, timezone

import networkx as nx
import pytest

from graphinsight.algorithms.betweenness import calculate_betweenness
from graphinsight.algorithms.louvain.incremental import detect_communities_smart
from graphinsight.algorithms.models import BetweennessConfig, DetectionMode
from graphinsight.algorithms.pagerank import calculate_pagerank
from graphinsight.config.settings import Settings
from graphinsight.core.models import Edge, Node
from graphinsight.graph_source.source_factory import create_graph_source

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)

DEPARTMENTS = {
    "sales": ["lead", "quote", "order", "contract", "crm"],
    "finance": ["invoice", "payment", "ledger", "audit", "erp"],
    "ops": ["pick", "pack", "ship", "track", "wms"],
}


def _process_graph() -> dict:
    nodes, edges = [], []
    for steps in DEPARTMENTS.values():
        for step in steps:
            nodes.append({
                "id": step,
                "name": step.title(),
                "type": "System" if step in {"crm", "erp", "wms"} else "Task",
                "created_at": T0.isoformat(),
            })
        for i, a in enumerate(steps):
            for b in steps[i + 1:]:
                edges.append({"source": a, "target": b, "created_at": T0.isoformat()})
    # Hand-offs between departments
    edges.append({"source": "order", "target": "invoice", "created_at": T0.isoformat()})
    edges.append({"source": "payment", "target": "pick", "created_at": T0.isoformat()})
    return {"nodes": nodes, "edges": edges}


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "process.json"
    path.write_text(json.dumps(_process_graph()))
    settings = Settings(_env_file=None, graph_source_type="json", graph_source_path=path)
    return create_graph_source(settings)


class TestAnalyticsLifecycle:
    @pytest.mark.asyncio
    async def test_departments_are_communities(self, source):
        result = await detect_communities_smart(source, rng=random.Random(0))
        assert result.metadata.community_count == 3
        for steps in DEPARTMENTS.values():
            assert len({result.communities[s] for s in steps}) == 1
        assert result.modularity > 0.5

    @pytest.mark.asyncio
    async def test_evolving_graph(self, source):
        first = await detect_communities_smart(source, rng=random.Random(0))

        since = T0 + timedelta(hours=1)
        cached = await detect_communities_smart(source, first, since=since)
        assert cached.metadata.mode == DetectionMode.CACHED

        when = T0 + timedelta(hours=2)
        source.add_node(Node(id="refund", name="Refund", type="Task", created_at=when))
        source.add_edge(Edge(source="refund", target="payment", created_at=when))
        source.add_edge(Edge(source="refund", target="ledger", created_at=when))

        second = await detect_communities_smart(
            source, first, since=since, rng=random.Random(1),
        )
        assert second.metadata.mode == DetectionMode.INCREMENTAL
        assert second.communities["refund"] == second.communities["payment"]
        assert second.communities["order"] != second.communities["pick"]
        assert second.communities["payment"] in second.changed_communities
        assert second.communities["lead"] not in second.changed_communities

    @pytest.mark.asyncio
    async def test_centrality_agrees_with_networkx(self, source):
        pagerank = await calculate_pagerank(source)
        betweenness = await calculate_betweenness(source, BetweennessConfig())

        g = nx.DiGraph(source.to_networkx())
        expected = nx.betweenness_centrality(g, normalized=True)
        for node_id, score in expected.items():
            assert betweenness.scores[node_id] == pytest.approx(score)

        assert pagerank.metadata.converged
        # Hand-off targets collect more rank than the department entry points
        assert pagerank.scores["invoice"] > pagerank.scores["lead"]
        assert pagerank.scores["pick"] > pagerank.scores["lead"]
