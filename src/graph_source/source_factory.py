# src/graph_source/source_factory.py — v1
"""Factory: instantiate a graph source from configuration."""

from __future__ import annotations

import logging

from graphinsight.config.settings import Settings
from graphinsight.graph_source.base_graph_source import BaseGraphSource

logger = logging.getLogger(__name__)


class UnsupportedGraphSourceError(ValueError):
    """Raised when a graph source type is not supported."""


def create_graph_source(settings: Settings) -> BaseGraphSource:
    """Instantiate the configured graph source.

    Args:
        settings: Application settings (GRAPH_SOURCE_TYPE, GRAPH_SOURCE_PATH).

    Returns:
        Configured BaseGraphSource instance.

    Raises:
        UnsupportedGraphSourceError: If type is not supported.
    """
    source_type = settings.graph_source_type

    if source_type == "memory":
        from graphinsight.graph_source.memory_source import MemoryGraphSource
        return MemoryGraphSource()

    if source_type == "json":
        from graphinsight.graph_source.memory_source import MemoryGraphSource
        logger.debug("Loading JSON graph source from %s", settings.graph_source_path)
        return MemoryGraphSource.from_json_file(settings.graph_source_path)

    raise UnsupportedGraphSourceError(
        f"Unsupported graph source type: {source_type!r}. "
        f"Available: memory, json"
    )
