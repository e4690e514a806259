# src/core/random_source.py — v1
"""Random source used for Louvain sweep order and betweenness sampling.

Every randomized operation accepts an ``rng`` argument; callers that need
reproducible output pass a seeded generator, production passes None.
"""

from __future__ import annotations

import random


def make_rng(seed: int | None = None) -> random.Random:
    """Build a generator. seed=None draws from OS entropy."""
    return random.Random(seed)


def resolve_rng(rng: random.Random | None) -> random.Random:
    """Return rng, or a fresh entropy-seeded generator when None."""
    return rng if rng is not None else make_rng()
