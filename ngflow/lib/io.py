from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from ngflow.lib.graph import NodeID, StrictMultiDiGraph
from ngflow.logging import get_logger

logger = get_logger(__name__)


def graph_to_node_link(graph: StrictMultiDiGraph) -> Dict[str, Any]:
    """
    Convert a flow network into a JSON-friendly node-link dict.

    The result looks like::

        {
            "graph": {...},
            "nodes": [{"id": node_id, "attr": {...}}, ...],
            "links": [
                {"source": <node index>, "target": <node index>,
                 "key": <edge id>, "attr": {...}},
                ...
            ],
        }

    Node indices follow the graph's node order.
    """
    node_dict = graph.get_nodes()
    node_list = list(node_dict)
    position = {node_id: i for i, node_id in enumerate(node_list)}

    return {
        "graph": dict(graph.graph),
        "nodes": [{"id": n, "attr": dict(node_dict[n])} for n in node_list],
        "links": [
            {
                "source": position[src],
                "target": position[dst],
                "key": edge_id,
                "attr": dict(edge_attrs),
            }
            for edge_id, (src, dst, _, edge_attrs) in graph.get_edges().items()
        ],
    }


def node_link_to_graph(data: Dict[str, Any]) -> StrictMultiDiGraph:
    """Rebuild a flow network from the output of :func:`graph_to_node_link`."""
    graph = StrictMultiDiGraph(**data.get("graph", {}))

    node_at: Dict[int, NodeID] = {}
    for idx, node_obj in enumerate(data.get("nodes", [])):
        graph.add_node(node_obj["id"], **node_obj.get("attr", {}))
        node_at[idx] = node_obj["id"]

    for link in data.get("links", []):
        graph.add_edge(
            node_at[link["source"]],
            node_at[link["target"]],
            key=link.get("key"),
            **link.get("attr", {}),
        )
    return graph


def edgelist_to_graph(
    lines: Iterable[str],
    columns: List[str],
    separator: str = " ",
    graph: Optional[StrictMultiDiGraph] = None,
    source: str = "src",
    target: str = "dst",
    key: str = "key",
    capacity_attr: str = "capacity",
) -> StrictMultiDiGraph:
    """
    Build (or extend) a flow network from edge-list lines.

    Each line is split by ``separator`` and its tokens are matched to
    ``columns``. The ``source`` and ``target`` columns name the endpoints
    (created on demand), an optional ``key`` column gives the edge ID, and
    every other column becomes an edge attribute. The ``capacity_attr``
    column, if present, is parsed as a float; other attributes stay strings.
    Blank lines are skipped.

    Raises:
        RuntimeError: If a line has the wrong number of tokens.
        ValueError: If a capacity token is not a number.
    """
    if graph is None:
        graph = StrictMultiDiGraph()

    for line in lines:
        line = line.rstrip("\r\n")
        if not line.strip():
            continue
        tokens = line.split(separator)
        if len(tokens) != len(columns):
            raise RuntimeError(
                f"Line '{line}' does not match expected columns {columns} "
                "(token count mismatch)."
            )

        row = dict(zip(columns, tokens))
        src_id, dst_id = row[source], row[target]
        attrs: Dict[str, Any] = {
            k: v for k, v in row.items() if k not in (source, target, key)
        }
        if capacity_attr in attrs:
            attrs[capacity_attr] = float(attrs[capacity_attr])

        for node in (src_id, dst_id):
            if node not in graph:
                graph.add_node(node)
        graph.add_edge(src_id, dst_id, key=row.get(key), **attrs)

    return graph


def graph_to_edgelist(
    graph: StrictMultiDiGraph,
    columns: Optional[List[str]] = None,
    separator: str = " ",
    source_col: str = "src",
    target_col: str = "dst",
    key_col: str = "key",
) -> List[str]:
    """
    Export a flow network as edge-list lines.

    Default columns are ``[source_col, target_col, key_col]`` followed by the
    sorted attribute names seen on any edge. Missing values become empty
    strings.
    """
    rows: List[Dict[str, str]] = []
    attr_names = set()
    for edge_id, (src, dst, _, edge_attrs) in graph.get_edges().items():
        row = {source_col: str(src), target_col: str(dst), key_col: str(edge_id)}
        for name, value in edge_attrs.items():
            row[name] = str(value)
            attr_names.add(name)
        rows.append(row)

    if columns is None:
        columns = [source_col, target_col, key_col] + sorted(attr_names)

    return [separator.join(row.get(col, "") for col in columns) for row in rows]


def graph_from_dict(
    data: Dict[str, Any], capacity_attr: str = "capacity"
) -> StrictMultiDiGraph:
    """
    Build a flow network from a plain mapping.

    Expected shape (as loaded from YAML or JSON)::

        nodes: [A, B, C]            # optional; endpoints are added on demand
        links:
          - {source: A, target: B, capacity: 5}
          - {source: B, target: C, capacity: 3, key: bc}

    Any other link fields become edge attributes. Capacities are coerced to
    float.

    Raises:
        ValueError: If the document is not a mapping, a link lacks an
            endpoint, or a capacity is not a number.
    """
    if not isinstance(data, dict):
        raise ValueError("Graph document must be a mapping with 'nodes'/'links'.")

    graph = StrictMultiDiGraph()
    for node in data.get("nodes") or []:
        graph.add_node(node)

    for i, link in enumerate(data.get("links") or []):
        if not isinstance(link, dict) or "source" not in link or "target" not in link:
            raise ValueError(f"Link #{i} must define 'source' and 'target'.")
        attrs = {
            k: v for k, v in link.items() if k not in ("source", "target", "key")
        }
        if capacity_attr in attrs:
            try:
                attrs[capacity_attr] = float(attrs[capacity_attr])
            except (TypeError, ValueError):
                raise ValueError(
                    f"Link #{i} has a non-numeric '{capacity_attr}': "
                    f"{attrs[capacity_attr]!r}"
                ) from None
        for node in (link["source"], link["target"]):
            if node not in graph:
                graph.add_node(node)
        graph.add_edge(link["source"], link["target"], key=link.get("key"), **attrs)

    return graph


def load_graph(
    path: Union[str, Path], capacity_attr: str = "capacity"
) -> StrictMultiDiGraph:
    """
    Load a flow network from a YAML (or JSON) file; see :func:`graph_from_dict`.

    Raises:
        ValueError: If the file is not valid YAML or does not describe a graph.
    """
    path = Path(path)
    logger.debug("Loading graph from %s", path)
    with path.open("r", encoding="utf-8") as fd:
        try:
            data = yaml.safe_load(fd)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid graph file {path}: {e}") from e
    graph = graph_from_dict(data, capacity_attr=capacity_attr)
    logger.debug(
        "Loaded %d nodes and %d edges from %s",
        graph.number_of_nodes(),
        graph.number_of_edges(),
        path,
    )
    return graph
