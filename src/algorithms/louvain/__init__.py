# src/algorithms/louvain/__init__.py — v1
