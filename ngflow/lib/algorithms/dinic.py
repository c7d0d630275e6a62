from __future__ import annotations

import math
from collections import deque
from numbers import Real
from typing import Deque, Dict, List, Optional, cast

import networkx as nx

from ngflow.config import DINIC_CONFIG, DinicConfig
from ngflow.lib.graph import NodeID
from ngflow.lib.numeric import is_zero
from ngflow.lib.residual import ResidualGraph, build_residual_graph
from ngflow.logging import get_logger

logger = get_logger(__name__)

#: Level of a node not reached by the breadth-first layering.
UNREACHED = -1


def _check_capacities(graph: nx.DiGraph, capacity_attr: str) -> None:
    """
    Ensure every edge carries a usable capacity.

    Raises:
        ValueError: If some edge has no numeric ``capacity_attr`` (the graph
            is unweighted), or a capacity is negative, infinite or NaN.
    """
    for u, v, data in graph.edges(data=True):
        cap = data.get(capacity_attr)
        if cap is None or isinstance(cap, bool) or not isinstance(cap, Real):
            raise ValueError(
                "Dinic algorithm requires a weighted graph: edge "
                f"{u!r}->{v!r} has no numeric '{capacity_attr}' attribute."
            )
        if not math.isfinite(cap) or cap < 0:
            raise ValueError(
                f"Capacity of edge {u!r}->{v!r} must be a finite non-negative "
                f"number, got {cap}."
            )


class Dinic:
    """
    Maximum flow between two nodes using Dinic's blocking-flow algorithm.

    Every phase layers the residual graph by breadth-first distance from the
    source, recording for each node all of its predecessors one level closer
    to the source. Augmenting paths are then walked from the target back to
    the source over those predecessor lists until the level graph is blocked.
    Phases repeat until the target is no longer reachable.

    The input graph is never modified, so it may be shared with other
    readers. Node IDs can be any hashable; internally they are mapped to
    dense indices in ``graph.nodes`` order.

    Example:
        >>> g = StrictMultiDiGraph()
        >>> for n in "ST":
        ...     g.add_node(n)
        >>> _ = g.add_edge("S", "T", capacity=5.0)
        >>> d = Dinic(g, "S", "T")
        >>> d.run()
        >>> d.get_max_flow()
        5.0

    Args:
        graph: A directed networkx graph (DiGraph, MultiDiGraph or
            StrictMultiDiGraph) whose edges all carry a capacity.
        source: The node flow leaves from.
        target: The node flow arrives at.
        capacity_attr: Name of the edge capacity attribute. Defaults to
            ``config.capacity_attr``.
        config: Engine settings. Defaults to the global ``DINIC_CONFIG``.

    Raises:
        ValueError: If the graph is undirected or unweighted, if
            ``source == target``, if either node is missing, or if a
            capacity is negative or not finite.
    """

    def __init__(
        self,
        graph: nx.DiGraph,
        source: NodeID,
        target: NodeID,
        *,
        capacity_attr: Optional[str] = None,
        config: Optional[DinicConfig] = None,
    ) -> None:
        config = config or DINIC_CONFIG
        config.validate()
        capacity_attr = capacity_attr or config.capacity_attr

        if not graph.is_directed():
            raise ValueError("Dinic algorithm requires a directed graph.")
        _check_capacities(graph, capacity_attr)
        if source == target:
            raise ValueError(
                "Dinic algorithm requires `source` and `target` to be different."
            )
        if source not in graph:
            raise ValueError(f"Source node '{source}' does not exist.")
        if target not in graph:
            raise ValueError(f"Target node '{target}' does not exist.")

        self._graph = graph
        self._config = config
        self._capacity_attr = capacity_attr
        self._nodes: List[NodeID] = list(graph.nodes)
        self._index: Dict[NodeID, int] = {n: i for i, n in enumerate(self._nodes)}
        self._source = self._index[source]
        self._target = self._index[target]

        self._parents: List[Deque[int]] = [deque() for _ in self._nodes]
        self._residual: Optional[ResidualGraph] = None
        self._max_flow = 0.0
        self._phases = 0
        self._has_run = False

    @property
    def source(self) -> NodeID:
        return self._nodes[self._source]

    @property
    def target(self) -> NodeID:
        return self._nodes[self._target]

    @property
    def capacity_attr(self) -> str:
        return self._capacity_attr

    @property
    def phases(self) -> int:
        """Number of phases that added flow during the last run."""
        self._assure_finished()
        return self._phases

    @property
    def residual_graph(self) -> ResidualGraph:
        """The residual graph left behind by the last run."""
        self._assure_finished()
        return cast(ResidualGraph, self._residual)

    def node_index(self, node: NodeID) -> int:
        """Return the residual-graph index of ``node``."""
        try:
            return self._index[node]
        except KeyError:
            raise ValueError(f"Node '{node}' does not exist.") from None

    #
    # Algorithm
    #
    def run(self) -> None:
        """
        Compute the maximum flow.

        The residual graph is rebuilt from the input graph on every call, so
        running twice gives the same result.
        """
        self._has_run = False
        self._residual = build_residual_graph(
            self._graph,
            self._index,
            capacity_attr=self._capacity_attr,
            workers=self._config.workers,
        )
        self._max_flow = 0.0
        self._phases = 0

        while self._can_reach_target_in_level_graph():
            flow = self._compute_blocking_flow()
            if is_zero(flow, self._config.epsilon):
                logger.debug(
                    "Phase %d pushed %g, within epsilon=%g of zero; stopping",
                    self._phases + 1,
                    flow,
                    self._config.epsilon,
                )
                break
            self._max_flow += flow
            self._phases += 1
            logger.debug(
                "Phase %d pushed %g (total %g)",
                self._phases,
                flow,
                self._max_flow,
            )

        self._has_run = True
        logger.debug(
            "Max flow %r -> %r: %g after %d phases",
            self.source,
            self.target,
            self._max_flow,
            self._phases,
        )

    def _can_reach_target_in_level_graph(self) -> bool:
        """
        Layer the residual graph breadth-first from the source.

        Rebuilds every node's parent list with all predecessors one level
        closer to the source that still have residual capacity into it.

        Returns:
            bool: True if the target was reached.
        """
        residual = self._residual
        parents = self._parents
        for parent_list in parents:
            parent_list.clear()

        level = [UNREACHED] * len(parents)
        level[self._source] = 0
        queue: Deque[int] = deque([self._source])

        while queue:
            parent = queue.popleft()
            next_level = level[parent] + 1
            for child, capacity in residual.arcs(parent):
                if capacity <= 0.0:
                    continue
                if level[child] == UNREACHED:
                    level[child] = next_level
                    parents[child].append(parent)
                    queue.append(child)
                elif level[child] == next_level:
                    parents[child].append(parent)

        return level[self._target] != UNREACHED

    def _compute_blocking_flow(self) -> float:
        """
        Push flow along level-graph paths until none is left.

        Paths are grown from the target towards the source by always taking
        the front entry of the tail's parent list. A tail with no parents is
        a dead end: it is dropped from the path and from the parent list of
        the node before it.

        Returns:
            float: Total flow pushed in this phase.
        """
        parents = self._parents
        total_flow = 0.0
        path: List[int] = [self._target]

        while path:
            tail = path[-1]
            if parents[tail]:
                node = parents[tail][0]
                path.append(node)
                if node == self._source:
                    total_flow += self._augment(path)
                    path = [self._target]
            else:
                path.pop()
                if path:
                    parents[path[-1]].popleft()

        return total_flow

    def _augment(self, path: List[int]) -> float:
        """
        Push the bottleneck amount along ``path`` (target first, source last).

        Saturated arcs are removed from the parent list of their head, so they
        are not walked again in this phase.
        """
        residual = self._residual
        parents = self._parents

        bottleneck = min(
            residual.weight(parent, child) for child, parent in zip(path, path[1:])
        )
        for child, parent in zip(path, path[1:]):
            remaining = residual.weight(parent, child) - bottleneck
            residual.set_weight(parent, child, remaining)
            if residual.has_arc(child, parent):
                residual.set_weight(
                    child, parent, residual.weight(child, parent) + bottleneck
                )
            else:
                residual.add_arc(child, parent, bottleneck)
            if remaining == 0 and parents[child]:
                parents[child].popleft()

        return bottleneck

    #
    # Results
    #
    def _assure_finished(self) -> None:
        if not self._has_run:
            raise RuntimeError("Dinic has not been run yet. Call run() first.")

    def get_max_flow(self) -> float:
        """
        Return the maximum flow value.

        Raises:
            RuntimeError: If ``run()`` has not completed.
        """
        self._assure_finished()
        return self._max_flow

    def get_residual_capacity(self, u: NodeID, v: NodeID) -> float:
        """
        Return the residual capacity of arc u->v, or 0.0 if there is no arc.

        Raises:
            RuntimeError: If ``run()`` has not completed.
            ValueError: If either node does not exist.
        """
        self._assure_finished()
        i, j = self.node_index(u), self.node_index(v)
        if not self._residual.has_arc(i, j):
            return 0.0
        return self._residual.weight(i, j)

    def get_pair_capacities(self) -> Dict[NodeID, Dict[NodeID, float]]:
        """Summed capacity per ordered node pair, self-loops excluded."""
        caps: Dict[NodeID, Dict[NodeID, float]] = {n: {} for n in self._nodes}
        for u, v, data in self._graph.edges(data=True):
            if u == v:
                continue
            caps[u][v] = caps[u].get(v, 0.0) + float(data[self._capacity_attr])
        return caps

    def get_flow_dict(self) -> Dict[NodeID, Dict[NodeID, float]]:
        """
        Return the flow assignment after the run.

        Follows the networkx ``maximum_flow`` convention: ``flow[u][v]`` is
        the flow on the (merged) edge u->v and every node has an entry.
        Antiparallel flow is cancelled, so at most one of ``flow[u][v]`` and
        ``flow[v][u]`` is positive. Self-loops carry no flow.

        Raises:
            RuntimeError: If ``run()`` has not completed.
        """
        self._assure_finished()
        residual = self._residual
        flow: Dict[NodeID, Dict[NodeID, float]] = {n: {} for n in self._nodes}
        for u, heads in self.get_pair_capacities().items():
            i = self._index[u]
            for v, cap in heads.items():
                net = cap - residual.weight(i, self._index[v])
                flow[u][v] = net if net > 0.0 else 0.0
        for u, v in self._graph.edges():
            if u == v:
                flow[u][v] = 0.0
        return flow
