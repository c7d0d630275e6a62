import networkx as nx
import pytest

from ngflow.lib.graph import StrictMultiDiGraph
from ngflow.lib.residual import ResidualGraph, build_residual_graph


def _index(graph):
    return {n: i for i, n in enumerate(graph.nodes)}


class TestResidualGraph:
    def test_empty(self):
        r = ResidualGraph(3)
        assert r.number_of_nodes() == 3
        assert r.number_of_arcs() == 0
        assert list(r.neighbors(0)) == []

    def test_add_and_query_arc(self):
        r = ResidualGraph(2)
        r.add_arc(0, 1, 4.0)
        assert r.has_arc(0, 1)
        assert not r.has_arc(1, 0)
        assert r.weight(0, 1) == 4.0
        assert list(r.neighbors(0)) == [1]

    def test_add_arc_accumulates(self):
        r = ResidualGraph(2)
        r.add_arc(0, 1, 4.0)
        r.add_arc(0, 1, 1.5)
        assert r.weight(0, 1) == 5.5
        assert r.number_of_arcs() == 1

    def test_set_weight(self):
        r = ResidualGraph(2)
        r.add_arc(1, 0, 0.0)
        r.set_weight(1, 0, 3.0)
        assert r.weight(1, 0) == 3.0

    def test_missing_arc_raises(self):
        r = ResidualGraph(2)
        with pytest.raises(ValueError, match="No residual arc"):
            r.weight(0, 1)
        with pytest.raises(ValueError, match="No residual arc"):
            r.set_weight(0, 1, 1.0)

    def test_neighbors_keep_insertion_order(self):
        r = ResidualGraph(4)
        for head in (3, 1, 2):
            r.add_arc(0, head, 1.0)
        assert list(r.neighbors(0)) == [3, 1, 2]
        assert list(r.arcs(0)) == [(3, 1.0), (1, 1.0), (2, 1.0)]

    def test_set_out_arcs_copies_mapping(self):
        r = ResidualGraph(3)
        arcs = {1: 2.0, 2: 0.0}
        r.set_out_arcs(0, arcs)
        arcs[1] = 99.0
        assert r.weight(0, 1) == 2.0
        assert r.number_of_arcs() == 2


class TestBuildResidualGraph:
    def test_forward_and_reverse_arcs(self):
        g = nx.DiGraph()
        g.add_edge("A", "B", capacity=5)
        r = build_residual_graph(g, _index(g))
        assert r.weight(0, 1) == 5.0
        assert r.weight(1, 0) == 0.0
        assert r.number_of_arcs() == 2

    def test_parallel_edges_merged(self):
        g = StrictMultiDiGraph()
        g.add_node("A")
        g.add_node("B")
        g.add_edge("A", "B", capacity=1)
        g.add_edge("A", "B", capacity=3)
        r = build_residual_graph(g, _index(g))
        assert r.weight(0, 1) == 4.0
        assert r.weight(1, 0) == 0.0

    def test_antiparallel_edges_share_arcs(self):
        g = nx.DiGraph()
        g.add_edge("A", "B", capacity=5)
        g.add_edge("B", "A", capacity=2)
        r = build_residual_graph(g, _index(g))
        assert r.weight(0, 1) == 5.0
        assert r.weight(1, 0) == 2.0
        assert r.number_of_arcs() == 2

    def test_self_loops_ignored(self):
        g = nx.DiGraph()
        g.add_edge("A", "A", capacity=5)
        g.add_edge("A", "B", capacity=1)
        r = build_residual_graph(g, _index(g))
        assert not r.has_arc(0, 0)
        assert r.number_of_arcs() == 2

    def test_custom_capacity_attr(self):
        g = nx.DiGraph()
        g.add_edge("A", "B", bw=7)
        r = build_residual_graph(g, _index(g), capacity_attr="bw")
        assert r.weight(0, 1) == 7.0

    def test_isolated_nodes(self):
        g = nx.DiGraph()
        g.add_nodes_from(["A", "B", "C"])
        r = build_residual_graph(g, _index(g))
        assert r.number_of_nodes() == 3
        assert r.number_of_arcs() == 0

    @pytest.mark.parametrize("workers", [2, 4, 8])
    def test_threaded_build_matches_serial(self, workers):
        g = nx.gnp_random_graph(40, 0.15, seed=7, directed=True)
        for i, (u, v) in enumerate(g.edges()):
            g[u][v]["capacity"] = float(i % 9)
        index = _index(g)
        serial = build_residual_graph(g, index)
        threaded = build_residual_graph(g, index, workers=workers)
        for node in range(len(index)):
            assert list(threaded.arcs(node)) == list(serial.arcs(node))

    def test_worker_error_propagates(self):
        g = nx.DiGraph()
        g.add_edge("A", "B", capacity="not a number")
        g.add_edge("B", "C", capacity=1)
        with pytest.raises(ValueError):
            build_residual_graph(g, _index(g), workers=2)
