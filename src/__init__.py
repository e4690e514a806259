# src/__init__.py — v1
"""graphinsight: structural analytics for business-process knowledge graphs."""

from graphinsight.version import __version__

__all__ = ["__version__"]
