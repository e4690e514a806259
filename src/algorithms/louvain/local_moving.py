# src/algorithms/louvain/local_moving.py — v1
"""Louvain phase 1: greedy local moving of nodes between communities.

Each sweep visits the nodes in a freshly shuffled order. A node only
considers communities that one of its neighbours belongs to, so the work
per node is bounded by its degree. The node moves to the best candidate
when that gain exceeds min_modularity_gain; on equal gains the first
evaluated candidate wins.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Hashable, Iterable, Mapping, Set
from dataclasses import dataclass

from graphinsight.algorithms.models import LouvainConfig
from graphinsight.algorithms.modularity import community_degree_sums, modularity_gain
from graphinsight.core.random_source import resolve_rng

logger = logging.getLogger(__name__)


@dataclass
class LocalMovingResult:
    """Outcome of one local-moving phase."""

    assignment: dict[str, Hashable]
    moved: bool
    sweeps: int
    moves: int
    total_gain: float


def local_moving_phase(
    assignment: Mapping[str, Hashable],
    adjacency: Mapping[str, Set[str]],
    degrees: Mapping[str, int],
    total_weight: float,
    config: LouvainConfig,
    rng: random.Random | None = None,
    frontier: Iterable[str] | None = None,
) -> LocalMovingResult:
    """Run sweeps until one produces no move or max_iterations is hit.

    Args:
        assignment: Starting node -> community mapping. Not mutated.
        adjacency: Symmetric adjacency sets for the current level.
        degrees: Node degrees for the current level.
        total_weight: W, constant across hierarchy levels.
        config: Louvain parameters.
        rng: Random source for the sweep order.
        frontier: When given, only these nodes may move; every other node
            keeps its community.

    Returns:
        LocalMovingResult with a new assignment dict.
    """
    rng = resolve_rng(rng)
    current_assignment: dict[str, Hashable] = dict(assignment)
    degree_sums = community_degree_sums(current_assignment, degrees)

    if frontier is None:
        order = list(current_assignment)
    else:
        allowed = set(frontier)
        order = [node_id for node_id in current_assignment if node_id in allowed]

    sweeps = 0
    moves = 0
    total_gain = 0.0
    improved = True

    while improved and sweeps < config.max_iterations:
        improved = False
        sweeps += 1
        rng.shuffle(order)

        for node_id in order:
            current = current_assignment[node_id]
            candidates = dict.fromkeys(
                current_assignment[neighbor]
                for neighbor in sorted(adjacency.get(node_id, ()))
                if neighbor in current_assignment
            )

            best_community = current
            best_gain = 0.0
            for target in candidates:
                if target == current:
                    continue
                gain = modularity_gain(
                    node_id,
                    target,
                    current_assignment,
                    adjacency,
                    degrees,
                    total_weight,
                    config.resolution,
                    degree_sums=degree_sums,
                )
                if gain > best_gain:
                    best_gain = gain
                    best_community = target

            if best_gain > config.min_modularity_gain:
                k_i = degrees.get(node_id, 0)
                degree_sums[current] -= k_i
                degree_sums[best_community] = degree_sums.get(best_community, 0) + k_i
                current_assignment[node_id] = best_community
                improved = True
                moves += 1
                total_gain += best_gain

    logger.debug(
        "Local moving phase completed: sweeps=%d, moves=%d", sweeps, moves,
        extra={"data": {
            "sweeps": sweeps,
            "moves": moves,
            "total_gain": total_gain,
            "candidate_nodes": len(order),
        }},
    )
    return LocalMovingResult(
        assignment=current_assignment,
        moved=moves > 0,
        sweeps=sweeps,
        moves=moves,
        total_gain=total_gain,
    )
