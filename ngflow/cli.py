"""Command-line interface for ngflow."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from time import perf_counter
from typing import List, Optional

from ngflow.config import DINIC_CONFIG, DinicConfig
from ngflow.lib.algorithms.dinic import Dinic
from ngflow.lib.io import load_graph
from ngflow.logging import get_logger, set_global_log_level

logger = get_logger(__name__)


def _format_duration(seconds: float) -> str:
    """Return a short duration string, e.g. "12.3 ms" or "1.23 s"."""
    if seconds < 1.0:
        return f"{seconds * 1000.0:.1f} ms"
    return f"{seconds:.2f} s"


def _resolve_node(graph, name: str):
    """Map a command-line node name to a graph node, accepting integer IDs."""
    if name in graph:
        return name
    try:
        as_int = int(name)
    except ValueError:
        return name
    return as_int if as_int in graph else name


def _run_maxflow(
    path: Path,
    source: str,
    target: str,
    capacity_attr: str,
    epsilon: float,
    workers: int,
    flows: bool,
) -> None:
    """Load a graph file, compute the max flow and print it."""
    try:
        graph = load_graph(path, capacity_attr=capacity_attr)
        config = DinicConfig(
            epsilon=epsilon, capacity_attr=capacity_attr, workers=workers
        )
        dinic = Dinic(
            graph,
            _resolve_node(graph, source),
            _resolve_node(graph, target),
            config=config,
        )

        start = perf_counter()
        dinic.run()
        elapsed = perf_counter() - start
    except FileNotFoundError:
        logger.error("Graph file not found: %s", path)
        sys.exit(1)
    except (ValueError, RuntimeError) as e:
        logger.error("Failed to compute max flow: %s", e)
        sys.exit(1)

    max_flow = dinic.get_max_flow()
    logger.info(
        "Max flow %s -> %s: %g (%d phases, %s)",
        source,
        target,
        max_flow,
        dinic.phases,
        _format_duration(elapsed),
    )

    if flows:
        payload = {
            "source": source,
            "target": target,
            "max_flow": max_flow,
            "flows": {
                str(u): {str(v): f for v, f in heads.items() if f > 0.0}
                for u, heads in dinic.get_flow_dict().items()
            },
        }
        print(json.dumps(payload, indent=2))
    else:
        print(f"{max_flow:g}")


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``ngflow`` command.

    Args:
        argv: Optional list of command-line arguments. If ``None``, ``sys.argv``
            is used.
    """
    parser = argparse.ArgumentParser(
        prog="ngflow",
        description="Compute maximum flows on capacitated directed graphs.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and errors"
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
        title="Available commands",
        metavar="{maxflow}",
    )

    mf_parser = subparsers.add_parser(
        "maxflow", help="Compute the maximum flow between two nodes"
    )
    mf_parser.add_argument("graph", type=Path, help="Path to graph YAML/JSON")
    mf_parser.add_argument("--source", "-s", required=True, help="Source node")
    mf_parser.add_argument("--target", "-t", required=True, help="Target node")
    mf_parser.add_argument(
        "--capacity-attr",
        default=DINIC_CONFIG.capacity_attr,
        help="Edge attribute holding capacities (default: %(default)s)",
    )
    mf_parser.add_argument(
        "--epsilon",
        type=float,
        default=DINIC_CONFIG.epsilon,
        help="Phase flows within this tolerance of zero stop the run",
    )
    mf_parser.add_argument(
        "--workers",
        type=int,
        default=DINIC_CONFIG.workers,
        help="Threads used to build the residual graph",
    )
    mf_parser.add_argument(
        "--flows",
        action="store_true",
        help="Print the per-edge flow assignment as JSON",
    )

    effective_args = sys.argv[1:] if argv is None else argv
    if not effective_args:
        parser.print_help()
        raise SystemExit(0)

    args = parser.parse_args(effective_args)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
        logger.debug("Debug logging enabled")
    elif args.quiet:
        set_global_log_level(logging.WARNING)
    else:
        set_global_log_level(logging.INFO)

    if args.command == "maxflow":
        _run_maxflow(
            path=args.graph,
            source=args.source,
            target=args.target,
            capacity_attr=args.capacity_attr,
            epsilon=args.epsilon,
            workers=args.workers,
            flows=args.flows,
        )


if __name__ == "__main__":
    main()
