# src/main.py — v1
"""CLI entry point — communities, pagerank, betweenness, bridges, analyze.

Usage:
    graphinsight communities <snapshot.json> [--seed N] [--resolution R]
    graphinsight pagerank <snapshot.json> [--top N]
    graphinsight betweenness <snapshot.json> [--undirected] [--sample-size K]
    graphinsight bridges <snapshot.json> [--threshold T]
    graphinsight analyze <snapshot.json>

Snapshots are JSON documents of the form {"nodes": [...], "edges": [...]}.
Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from graphinsight.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _entry() -> None:
    sys.exit(main())


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="graphinsight",
        description=f"graphinsight v{__version__} — Knowledge-graph analytics",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    # Options shared by every sub-command
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("snapshot", type=Path, help="Path to graph snapshot JSON")
    common.add_argument(
        "--top", type=int, default=None,
        help="Only print the N highest-ranked entries",
    )
    common.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for reproducible runs (default: RANDOM_SEED or none)",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- communities ---
    p_comm = subparsers.add_parser(
        "communities", parents=[common], help="Detect communities (Louvain)",
    )
    p_comm.add_argument(
        "--resolution", type=float, default=None,
        help="Modularity resolution (default: LOUVAIN_RESOLUTION or 1.0)",
    )
    p_comm.set_defaults(func=_cmd_communities)

    # --- pagerank ---
    p_pr = subparsers.add_parser(
        "pagerank", parents=[common], help="Rank entities by PageRank",
    )
    p_pr.add_argument(
        "--damping", type=float, default=None,
        help="Damping factor (default: PAGERANK_DAMPING_FACTOR or 0.85)",
    )
    p_pr.set_defaults(func=_cmd_pagerank)

    # --- betweenness ---
    p_bc = subparsers.add_parser(
        "betweenness", parents=[common], help="Rank entities by betweenness",
    )
    _add_betweenness_options(p_bc)
    p_bc.set_defaults(func=_cmd_betweenness)

    # --- bridges ---
    p_br = subparsers.add_parser(
        "bridges", parents=[common], help="List bridge entities",
    )
    _add_betweenness_options(p_br)
    p_br.add_argument(
        "--threshold", type=float, default=None,
        help="Minimum normalized betweenness (default: BRIDGE_THRESHOLD or 0.1)",
    )
    p_br.set_defaults(func=_cmd_bridges)

    # --- analyze ---
    p_an = subparsers.add_parser(
        "analyze", parents=[common], help="Run every engine and print one report",
    )
    p_an.set_defaults(func=_cmd_analyze)

    return parser


def _add_betweenness_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--undirected", action="store_true",
        help="Treat edges as undirected",
    )
    parser.add_argument(
        "--sample-size", type=int, default=None,
        help="Approximate with K sampled source nodes",
    )


def _load_settings(args: argparse.Namespace, **overrides: object):
    """Settings from .env with the snapshot path and CLI flags applied."""
    from graphinsight.config.settings import load_settings

    values = {k: v for k, v in overrides.items() if v is not None}
    values["graph_source_type"] = "json"
    values["graph_source_path"] = args.snapshot
    if args.seed is not None:
        values["random_seed"] = args.seed
    return load_settings(**values)


def _open_source(args: argparse.Namespace, settings):
    from graphinsight.graph_source.source_factory import create_graph_source

    if not args.snapshot.is_file():
        raise FileNotFoundError(f"Snapshot not found: {args.snapshot}")
    return create_graph_source(settings)


async def _cmd_communities(args: argparse.Namespace) -> int:
    """Detect communities in a snapshot."""
    from graphinsight.algorithms.louvain.detector import detect_communities
    from graphinsight.core.random_source import make_rng

    settings = _load_settings(args, louvain_resolution=args.resolution)
    source = _open_source(args, settings)
    result = await detect_communities(
        source,
        settings.louvain_config(),
        make_rng(settings.random_seed),
        settings.snapshot_limit,
    )
    if args.top is not None:
        result = result.model_copy(update={"community_list": result.community_list[: args.top]})
    _print_json(result.model_dump(mode="json"))
    return 0


async def _cmd_pagerank(args: argparse.Namespace) -> int:
    """Rank a snapshot's entities by PageRank."""
    from graphinsight.algorithms.pagerank import calculate_pagerank

    settings = _load_settings(args, pagerank_damping_factor=args.damping)
    source = _open_source(args, settings)
    result = await calculate_pagerank(source, settings.pagerank_config(), settings.snapshot_limit)
    if args.top is not None:
        result = result.model_copy(update={"ranked_entities": result.ranked_entities[: args.top]})
    _print_json(result.model_dump(mode="json"))
    return 0


async def _cmd_betweenness(args: argparse.Namespace) -> int:
    """Rank a snapshot's entities by betweenness."""
    from graphinsight.algorithms.betweenness import calculate_betweenness
    from graphinsight.core.random_source import make_rng

    settings = _load_betweenness_settings(args)
    source = _open_source(args, settings)
    result = await calculate_betweenness(
        source,
        settings.betweenness_config(),
        make_rng(settings.random_seed),
        settings.snapshot_limit,
    )
    if args.top is not None:
        result = result.model_copy(update={"ranked_entities": result.ranked_entities[: args.top]})
    _print_json(result.model_dump(mode="json"))
    return 0


async def _cmd_bridges(args: argparse.Namespace) -> int:
    """List bridge entities of a snapshot."""
    from graphinsight.algorithms.betweenness import identify_bridge_entities
    from graphinsight.core.random_source import make_rng

    settings = _load_betweenness_settings(args, bridge_threshold=args.threshold)
    source = _open_source(args, settings)
    bridges = await identify_bridge_entities(
        source,
        settings.bridge_threshold,
        settings.betweenness_config(),
        make_rng(settings.random_seed),
    )
    if args.top is not None:
        bridges = bridges[: args.top]
    _print_json([b.model_dump(mode="json") for b in bridges])
    return 0


async def _cmd_analyze(args: argparse.Namespace) -> int:
    """Run every engine on a snapshot."""
    from graphinsight.api.facade import analyze

    settings = _load_settings(args)
    source = _open_source(args, settings)
    report = await analyze(source, settings)
    if args.top is not None:
        for result in (report.pagerank, report.betweenness):
            result.ranked_entities = result.ranked_entities[: args.top]
        report.communities.community_list = report.communities.community_list[: args.top]
    _print_json(report.model_dump(mode="json"))
    return 0


def _load_betweenness_settings(args: argparse.Namespace, **overrides: object):
    if args.undirected:
        overrides["betweenness_directed"] = False
    return _load_settings(args, betweenness_sample_size=args.sample_size, **overrides)


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from graphinsight.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else "WARNING",
        log_format="text",
        stream=sys.stderr,
    )


if __name__ == "__main__":
    sys.exit(main())
