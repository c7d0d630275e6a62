"""Max-flow algorithms."""

from ngflow.lib.algorithms.dinic import Dinic
from ngflow.lib.algorithms.max_flow import calc_max_flow

__all__ = ["Dinic", "calc_max_flow"]
