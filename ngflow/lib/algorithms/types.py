"""Types and data structures for max-flow results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ngflow.lib.graph import NodeID

#: Ordered node pair identifying a (merged) edge: (source_node, destination_node).
NodePair = Tuple[NodeID, NodeID]


@dataclass(frozen=True)
class DinicSummary:
    """Summary of a Dinic max-flow computation.

    Attributes:
        total_flow: The maximum flow value achieved.
        edge_flow: Flow on each ordered node pair that has at least one edge.
        residual_cap: Remaining forward capacity on each such pair.
        phases: Number of blocking-flow phases that added flow.
    """

    total_flow: float
    edge_flow: Dict[NodePair, float]
    residual_cap: Dict[NodePair, float]
    phases: int
