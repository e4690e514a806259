# src/algorithms/__init__.py — v1
