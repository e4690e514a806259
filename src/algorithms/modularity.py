# src/algorithms/modularity.py — v1
"""Modularity score and per-move modularity gain.

Both use the same total edge weight W, counted once per undirected edge:

    Q  = sum_c [ internal_c / W - resolution * (degree_sum_c / (2W))^2 ]
    dQ = (edges_to_target - edges_to_current) / W
         - resolution * k_i * (sum_target - sum_current) / (2 * W^2)

The final Q is always computed from scratch on a finished assignment; it is
never accumulated from the gains used during the search.
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping, Set


def calculate_modularity(
    assignment: Mapping[str, Hashable],
    adjacency: Mapping[str, Set[str]],
    degrees: Mapping[str, int],
    total_weight: float,
    resolution: float = 1.0,
) -> float:
    """Modularity of a complete community assignment.

    Args:
        assignment: node_id -> community id.
        adjacency: Symmetric adjacency sets.
        degrees: node_id -> degree.
        total_weight: W (edge count, each undirected edge once).
        resolution: Resolution parameter.

    Returns:
        Modularity Q, 0.0 when the graph has no edges.
    """
    if total_weight == 0:
        return 0.0

    degree_sums: dict[Hashable, float] = {}
    for node_id, community in assignment.items():
        degree_sums[community] = degree_sums.get(community, 0) + degrees.get(node_id, 0)

    # Each internal edge is seen from both endpoints
    internal_ends: dict[Hashable, int] = {}
    for node_id, neighbors in adjacency.items():
        community = assignment.get(node_id)
        for neighbor in neighbors:
            if assignment.get(neighbor) == community:
                internal_ends[community] = internal_ends.get(community, 0) + 1

    modularity = 0.0
    for community, degree_sum in degree_sums.items():
        internal = internal_ends.get(community, 0) / 2
        modularity += (
            internal / total_weight
            - resolution * (degree_sum / (2 * total_weight)) ** 2
        )
    return modularity


def community_degree_sums(
    assignment: Mapping[str, Hashable],
    degrees: Mapping[str, int],
) -> dict[Hashable, int]:
    """Sum of member degrees per community."""
    sums: dict[Hashable, int] = {}
    for node_id, community in assignment.items():
        sums[community] = sums.get(community, 0) + degrees.get(node_id, 0)
    return sums


def modularity_gain(
    node_id: str,
    target: Hashable,
    assignment: Mapping[str, Hashable],
    adjacency: Mapping[str, Set[str]],
    degrees: Mapping[str, int],
    total_weight: float,
    resolution: float = 1.0,
    degree_sums: Mapping[Hashable, int] | None = None,
) -> float:
    """Modularity change from moving node_id into community target.

    Args:
        degree_sums: Optional precomputed community -> degree sum (node
            included in its current community). Computed on the fly if None.

    Returns:
        Gain (may be negative). 0.0 for a no-op move or an edgeless graph.
    """
    if total_weight == 0:
        return 0.0

    current = assignment.get(node_id)
    if current == target:
        return 0.0

    k_i = degrees.get(node_id, 0)
    edges_to_current = 0
    edges_to_target = 0
    for neighbor in adjacency.get(node_id, ()):
        neighbor_community = assignment.get(neighbor)
        if neighbor_community == current and neighbor != node_id:
            edges_to_current += 1
        if neighbor_community == target:
            edges_to_target += 1

    if degree_sums is None:
        degree_sums = community_degree_sums(assignment, degrees)
    sum_current = degree_sums.get(current, 0) - k_i
    sum_target = degree_sums.get(target, 0)

    return (
        (edges_to_target - edges_to_current) / total_weight
        - resolution * k_i * (sum_target - sum_current) / (2 * total_weight * total_weight)
    )
