"""ngflow: maximum flow on capacitated directed graphs.

Primary API:
    Dinic - Dinic's blocking-flow max-flow engine (run / get_max_flow)
    calc_max_flow() - One-call functional wrapper around Dinic
    StrictMultiDiGraph - Strict directed multigraph for building flow networks
    DinicConfig - Engine settings (epsilon, capacity attribute, workers)

Example:
    from ngflow import Dinic, StrictMultiDiGraph

    g = StrictMultiDiGraph()
    g.add_node("S")
    g.add_node("T")
    g.add_edge("S", "T", capacity=5.0)

    dinic = Dinic(g, "S", "T")
    dinic.run()
    dinic.get_max_flow()  # 5.0
"""

from __future__ import annotations

from ngflow import logging
from ngflow.config import DINIC_CONFIG, DinicConfig
from ngflow.lib.algorithms.dinic import Dinic
from ngflow.lib.algorithms.max_flow import calc_max_flow
from ngflow.lib.algorithms.types import DinicSummary
from ngflow.lib.graph import StrictMultiDiGraph

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Dinic",
    "DinicConfig",
    "DinicSummary",
    "DINIC_CONFIG",
    "StrictMultiDiGraph",
    "calc_max_flow",
    "logging",
]
