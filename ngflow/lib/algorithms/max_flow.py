from __future__ import annotations

from typing import Literal, Optional, Tuple, Union, overload

import networkx as nx

from ngflow.config import DinicConfig
from ngflow.lib.algorithms.dinic import Dinic
from ngflow.lib.algorithms.types import DinicSummary
from ngflow.lib.graph import NodeID


@overload
def calc_max_flow(
    graph: nx.DiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    *,
    return_summary: Literal[False] = False,
    capacity_attr: Optional[str] = None,
    config: Optional[DinicConfig] = None,
) -> float: ...


@overload
def calc_max_flow(
    graph: nx.DiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    *,
    return_summary: Literal[True],
    capacity_attr: Optional[str] = None,
    config: Optional[DinicConfig] = None,
) -> Tuple[float, DinicSummary]: ...


def calc_max_flow(
    graph: nx.DiGraph,
    src_node: NodeID,
    dst_node: NodeID,
    *,
    return_summary: bool = False,
    capacity_attr: Optional[str] = None,
    config: Optional[DinicConfig] = None,
) -> Union[float, Tuple[float, DinicSummary]]:
    """Compute the maximum flow between two nodes of a directed graph.

    Thin functional wrapper around :class:`Dinic`. The input graph is not
    modified.

    Args:
        graph (nx.DiGraph):
            Directed graph (DiGraph, MultiDiGraph or StrictMultiDiGraph) with
            a capacity attribute on every edge.
        src_node (NodeID):
            The source node for flow.
        dst_node (NodeID):
            The destination node for flow.
        return_summary (bool):
            If True, also return a DinicSummary with per-pair flows and
            residual capacities. Defaults to False.
        capacity_attr (Optional[str]):
            Name of the capacity attribute on edges. Defaults to
            ``config.capacity_attr`` ("capacity").
        config (Optional[DinicConfig]):
            Engine settings (epsilon, workers). Defaults to ``DINIC_CONFIG``.

    Returns:
        Union[float, tuple]:
            - If return_summary is False: float (total flow)
            - Otherwise: tuple[float, DinicSummary]

    Raises:
        ValueError: If the graph is undirected or unweighted, if the nodes
            coincide or are missing, or if a capacity is negative.

    Examples:
        >>> g = StrictMultiDiGraph()
        >>> for n in "ABC":
        ...     g.add_node(n)
        >>> _ = g.add_edge("A", "B", capacity=10.0)
        >>> _ = g.add_edge("B", "C", capacity=5.0)
        >>> calc_max_flow(g, "A", "C")
        5.0
        >>> flow, summary = calc_max_flow(g, "A", "C", return_summary=True)
        >>> summary.edge_flow[("A", "B")]
        5.0
    """
    dinic = Dinic(
        graph, src_node, dst_node, capacity_attr=capacity_attr, config=config
    )
    dinic.run()
    max_flow = dinic.get_max_flow()

    if not return_summary:
        return max_flow
    return max_flow, _build_summary(dinic)


def _build_summary(dinic: Dinic) -> DinicSummary:
    """Collect per-pair flows and residual capacities from a finished run."""
    flow_dict = dinic.get_flow_dict()
    edge_flow = {}
    residual_cap = {}
    for u, heads in dinic.get_pair_capacities().items():
        for v in heads:
            edge_flow[(u, v)] = flow_dict[u][v]
            residual_cap[(u, v)] = dinic.get_residual_capacity(u, v)

    return DinicSummary(
        total_flow=dinic.get_max_flow(),
        edge_flow=edge_flow,
        residual_cap=residual_cap,
        phases=dinic.phases,
    )
