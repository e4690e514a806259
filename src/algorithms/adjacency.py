# src/algorithms/adjacency.py — v1
"""Adjacency builders shared by all analytics engines.

Turns a node/edge snapshot into the structures each algorithm family
consumes:
  - undirected adjacency sets + degree map + total edge weight (Louvain)
  - directed in-link lists + out-degree counts (PageRank)
  - neighbour lists, directed or undirected (Brandes betweenness)

Edges whose endpoints are not in the node list are always dropped.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from graphinsight.core.models import Edge


@dataclass
class UndirectedAdjacency:
    """Symmetric adjacency used for modularity optimization.

    total_weight counts each accepted edge once (W = m).
    """

    adjacency: dict[str, set[str]] = field(default_factory=dict)
    degrees: dict[str, int] = field(default_factory=dict)
    total_weight: int = 0

    def neighbors(self, node_id: str) -> set[str]:
        return self.adjacency.get(node_id, set())


@dataclass
class DirectedLinks:
    """In-links and out-degree counts for power iteration."""

    node_ids: list[str] = field(default_factory=list)
    in_links: dict[str, list[str]] = field(default_factory=dict)
    out_degree: dict[str, int] = field(default_factory=dict)


def build_undirected_adjacency(
    node_ids: Iterable[str],
    edges: Iterable[Edge],
) -> UndirectedAdjacency:
    """Build symmetric adjacency sets and degrees.

    Self-loops and edges referencing unknown endpoints are skipped.
    Duplicate edges collapse in the adjacency set but still count toward
    degree and total weight.

    Args:
        node_ids: Ids of every node in the snapshot.
        edges: Snapshot edges (direction ignored).

    Returns:
        UndirectedAdjacency with one entry per node, isolated nodes included.
    """
    result = UndirectedAdjacency()
    for node_id in node_ids:
        result.adjacency[node_id] = set()
        result.degrees[node_id] = 0

    known = result.adjacency
    for edge in edges:
        source, target = edge.source, edge.target
        if source == target or source not in known or target not in known:
            continue
        known[source].add(target)
        known[target].add(source)
        result.degrees[source] += 1
        result.degrees[target] += 1
        result.total_weight += 1

    return result


def build_directed_links(
    node_ids: Iterable[str],
    edges: Iterable[Edge],
) -> DirectedLinks:
    """Build in-link lists and out-degree counts.

    Self-loops and duplicate edges are kept: each occurrence is one link.
    """
    ids = list(node_ids)
    links = DirectedLinks(
        node_ids=ids,
        in_links={node_id: [] for node_id in ids},
        out_degree={node_id: 0 for node_id in ids},
    )
    for edge in edges:
        if edge.source not in links.in_links or edge.target not in links.in_links:
            continue
        links.in_links[edge.target].append(edge.source)
        links.out_degree[edge.source] += 1
    return links


def build_neighbor_lists(
    node_ids: Iterable[str],
    edges: Iterable[Edge],
    directed: bool = True,
) -> dict[str, list[str]]:
    """Build neighbour lists for BFS.

    When undirected, every edge is also added in reverse. Duplicate edges
    are kept, so parallel edges multiply shortest-path counts.
    """
    neighbors: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
    for edge in edges:
        if edge.source not in neighbors or edge.target not in neighbors:
            continue
        neighbors[edge.source].append(edge.target)
        if not directed:
            neighbors[edge.target].append(edge.source)
    return neighbors
