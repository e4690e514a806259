# src/logging/context.py — v1
"""Contextual logging support: attach run_id, algorithm and phase to records.

Context variables are per asyncio task, so concurrent analytics calls keep
their own values.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_algorithm: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "algorithm", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    run_id: str | None = None
    algorithm: str | None = None
    phase: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        algorithm=_algorithm.get(),
        phase=_phase.get(),
    )


def new_run_id() -> str:
    """Short random id correlating all records of one analytics call."""
    return uuid.uuid4().hex[:12]


def set_phase(phase: str | None) -> None:
    """Mark the current phase boundary (fetch, adjacency, iterate, rank...)."""
    _phase.set(phase)


@contextmanager
def algorithm_context(algorithm: str, run_id: str | None = None) -> Iterator[str]:
    """Scope run_id/algorithm/phase for one analytics call.

    Nested calls (e.g. incremental falling back to full detection) reuse
    the outer run_id. Yields the active run_id.
    """
    active_run = run_id or _run_id.get() or new_run_id()
    tokens = (
        _run_id.set(active_run),
        _algorithm.set(algorithm),
        _phase.set(None),
    )
    try:
        yield active_run
    finally:
        _phase.reset(tokens[2])
        _algorithm.reset(tokens[1])
        _run_id.reset(tokens[0])


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _algorithm.set(None)
    _phase.set(None)
