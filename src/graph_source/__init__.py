# src/graph_source/__init__.py — v1
