from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, ItemsView, Iterator, List, Mapping

import networkx as nx

from ngflow.lib.graph import NodeID
from ngflow.logging import get_logger

logger = get_logger(__name__)


class ResidualGraph:
    """
    Directed, weighted graph over integer node indices ``0..n-1``.

    Each node owns an insertion-ordered mapping ``head -> residual capacity``
    describing its outgoing arcs. An arc is addressed by its (tail, head)
    pair; a forward arc and its reverse are two independent entries.
    """

    def __init__(self, num_nodes: int) -> None:
        self._succ: List[Dict[int, float]] = [{} for _ in range(num_nodes)]

    def number_of_nodes(self) -> int:
        return len(self._succ)

    def number_of_arcs(self) -> int:
        return sum(len(arcs) for arcs in self._succ)

    def add_arc(self, u: int, v: int, weight: float) -> None:
        """Add an arc u->v; if it already exists, ``weight`` is added onto it."""
        arcs = self._succ[u]
        arcs[v] = arcs.get(v, 0.0) + weight

    def has_arc(self, u: int, v: int) -> bool:
        return v in self._succ[u]

    def weight(self, u: int, v: int) -> float:
        """
        Return the residual capacity of arc u->v.

        Raises:
            ValueError: If the arc does not exist.
        """
        try:
            return self._succ[u][v]
        except KeyError:
            raise ValueError(f"No residual arc from {u} to {v}.") from None

    def set_weight(self, u: int, v: int, weight: float) -> None:
        """
        Overwrite the residual capacity of an existing arc u->v.

        Raises:
            ValueError: If the arc does not exist.
        """
        arcs = self._succ[u]
        if v not in arcs:
            raise ValueError(f"No residual arc from {u} to {v}.")
        arcs[v] = weight

    def neighbors(self, u: int) -> Iterator[int]:
        """Iterate over the heads of u's outgoing arcs in insertion order."""
        return iter(self._succ[u])

    def arcs(self, u: int) -> ItemsView[int, float]:
        return self._succ[u].items()

    def set_out_arcs(self, u: int, arcs: Mapping[int, float]) -> None:
        """Install the complete outgoing arc map of node ``u``."""
        self._succ[u] = dict(arcs)


def _node_arcs(
    graph: nx.DiGraph,
    node: NodeID,
    index: Mapping[NodeID, int],
    capacity_attr: str,
) -> Dict[int, float]:
    """
    Compute the outgoing residual arcs owned by ``node``.

    Outgoing edges become forward arcs carrying their (summed) capacity.
    Incoming edges become zero-capacity reverse arcs unless a forward arc to
    the same neighbor already exists. Self-loops are ignored.
    """
    arcs: Dict[int, float] = {}
    for _, head, data in graph.out_edges(node, data=True):
        if head == node:
            continue
        j = index[head]
        arcs[j] = arcs.get(j, 0.0) + float(data[capacity_attr])
    for tail, _ in graph.in_edges(node):
        if tail == node:
            continue
        arcs.setdefault(index[tail], 0.0)
    return arcs


def build_residual_graph(
    graph: nx.DiGraph,
    index: Mapping[NodeID, int],
    capacity_attr: str = "capacity",
    workers: int = 1,
) -> ResidualGraph:
    """
    Build the residual graph of a directed, capacitated network.

    For every edge u->v with capacity c the result holds a forward arc u->v
    with residual capacity c and a reverse arc v->u with residual capacity 0.
    Parallel edges are merged into one arc; antiparallel edges share their
    arc pair, so ``r(u,v) + r(v,u) == c(u,v) + c(v,u)`` for every node pair.

    Every node computes and installs only its own outgoing arc map, so with
    ``workers > 1`` nodes are processed concurrently on a thread pool without
    any shared mutable state.

    Args:
        graph: Directed networkx graph carrying ``capacity_attr`` on every edge.
        index: Mapping from node ID to a dense integer index.
        capacity_attr: Name of the capacity attribute on edges.
        workers: Number of threads; 1 builds serially.

    Returns:
        ResidualGraph: A new residual graph indexed by ``index``.
    """
    residual = ResidualGraph(len(index))

    def build_one(node: NodeID) -> None:
        residual.set_out_arcs(
            index[node], _node_arcs(graph, node, index, capacity_attr)
        )

    if workers > 1 and len(index) > 1:
        logger.debug(
            "Building residual graph for %d nodes with %d workers",
            len(index),
            workers,
        )
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # Consume the iterator so worker exceptions are re-raised here.
            list(executor.map(build_one, index))
    else:
        for node in index:
            build_one(node)

    return residual
