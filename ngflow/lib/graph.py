from __future__ import annotations

import math
from numbers import Real
from typing import Any, Dict, Hashable, Optional, Tuple

import networkx as nx

NodeID = Hashable
EdgeID = Hashable
AttrDict = Dict[str, Any]
EdgeTuple = Tuple[NodeID, NodeID, EdgeID, AttrDict]


class StrictMultiDiGraph(nx.MultiDiGraph):
    """
    Directed multigraph for describing flow networks.

    Compared to a plain ``networkx.MultiDiGraph``:
      - adding an edge never creates its endpoints implicitly;
      - a node can only be added once;
      - every edge key is unique across the whole graph, and generated keys
        are consecutive integers;
      - a ``capacity`` given to :meth:`add_edge` must be a finite,
        non-negative number.

    Parallel edges between the same ordered pair are allowed. Flow
    algorithms treat them as one arc whose capacity is the sum of the
    parallel capacities (see :meth:`capacity_between`).
    """

    def __init__(self, *args, **kwargs) -> None:
        # Edge key -> (tail, head). Entries whose edge was later removed
        # through the networkx API are treated as absent.
        self._edge_ends: Dict[EdgeID, Tuple[NodeID, NodeID]] = {}
        self._next_key = 0
        super().__init__(*args, **kwargs)

    def _has_key(self, key: EdgeID) -> bool:
        ends = self._edge_ends.get(key)
        if ends is None:
            return False
        if self.has_edge(ends[0], ends[1], key):
            return True
        del self._edge_ends[key]
        return False

    def new_edge_key(self, src_node: NodeID, dst_node: NodeID) -> EdgeID:
        """Return the lowest unused integer key at or above the key counter."""
        while self._has_key(self._next_key):
            self._next_key += 1
        key = self._next_key
        self._next_key += 1
        return key

    def add_node(self, n: NodeID, **attr: Any) -> None:
        """
        Add a node to the network.

        Raises:
            ValueError: If the node already exists.
        """
        if n in self:
            raise ValueError(f"Node '{n}' already exists in this graph.")
        super().add_node(n, **attr)

    def add_edge(
        self,
        u_for_edge: NodeID,
        v_for_edge: NodeID,
        key: Optional[EdgeID] = None,
        **attr: Any,
    ) -> EdgeID:
        """
        Add a directed edge between two existing nodes.

        Args:
            u_for_edge: Tail of the edge.
            v_for_edge: Head of the edge.
            key: Edge key; generated when omitted.
            **attr: Edge attributes, e.g. ``capacity=10.0``.

        Returns:
            EdgeID: The key of the new edge.

        Raises:
            ValueError: If an endpoint is missing, the key is taken, or the
                ``capacity`` attribute is negative or not a finite number.
        """
        if u_for_edge not in self:
            raise ValueError(f"Source node '{u_for_edge}' does not exist.")
        if v_for_edge not in self:
            raise ValueError(f"Target node '{v_for_edge}' does not exist.")
        if "capacity" in attr:
            _check_capacity(u_for_edge, v_for_edge, attr["capacity"])

        if key is None:
            key = self.new_edge_key(u_for_edge, v_for_edge)
        elif self._has_key(key):
            raise ValueError(f"Edge with id '{key}' already exists.")

        super().add_edge(u_for_edge, v_for_edge, key=key, **attr)
        self._edge_ends[key] = (u_for_edge, v_for_edge)
        return key

    def get_nodes(self) -> Dict[NodeID, AttrDict]:
        """Return all nodes and their attributes as a dictionary."""
        return dict(self.nodes(data=True))

    def get_edges(self) -> Dict[EdgeID, EdgeTuple]:
        """Map each edge key to ``(tail, head, key, attributes)`` in insertion order."""
        return {
            key: (u, v, key, self[u][v][key])
            for key, (u, v) in list(self._edge_ends.items())
            if self._has_key(key)
        }

    def get_edge_attr(self, key: EdgeID) -> AttrDict:
        """
        Return the live attribute dictionary of an edge.

        Raises:
            ValueError: If no edge has this key.
        """
        if not self._has_key(key):
            raise ValueError(f"Edge with id='{key}' not found.")
        u, v = self._edge_ends[key]
        return self[u][v][key]

    #
    # Capacity helpers
    #
    def capacity_between(
        self, u: NodeID, v: NodeID, capacity_attr: str = "capacity"
    ) -> float:
        """Sum of capacities over all parallel edges from u to v."""
        return float(
            sum(d.get(capacity_attr, 0) for d in self.succ[u].get(v, {}).values())
        )

    def out_capacity(self, n: NodeID, capacity_attr: str = "capacity") -> float:
        """Total capacity of edges leaving ``n``, excluding self-loops."""
        return float(
            sum(
                d.get(capacity_attr, 0)
                for _, v, d in self.out_edges(n, data=True)
                if v != n
            )
        )

    def in_capacity(self, n: NodeID, capacity_attr: str = "capacity") -> float:
        """Total capacity of edges entering ``n``, excluding self-loops."""
        return float(
            sum(
                d.get(capacity_attr, 0)
                for u, _, d in self.in_edges(n, data=True)
                if u != n
            )
        )


def _check_capacity(u: NodeID, v: NodeID, capacity: Any) -> None:
    if (
        isinstance(capacity, bool)
        or not isinstance(capacity, Real)
        or not math.isfinite(capacity)
        or capacity < 0
    ):
        raise ValueError(
            f"Capacity of edge {u!r}->{v!r} must be a finite non-negative "
            f"number, got {capacity!r}."
        )
