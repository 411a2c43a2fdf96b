from __future__ import annotations

import networkx as nx
from typing import Dict, Iterable, List, Optional

from ontograph.graph.graph_schema import Graph, Node, Edge


class GraphStore:
    """
    Read-only adjacency index over an immutable Graph value.

    Parallel edges and self-loops are kept (edges are keyed by id).
    Dangling edge endpoints become bare index vertices with no Node attached.
    """

    def __init__(self, graph: Graph) -> None:
        self.graph = graph
        self._graph = nx.MultiDiGraph()
        self._edge_position: Dict[str, int] = {}

        for node in graph.nodes:
            self._graph.add_node(node.id, data=node)

        for position, edge in enumerate(graph.edges):
            self._graph.add_edge(edge.source_id, edge.target_id, key=edge.id, data=edge)
            self._edge_position[edge.id] = position

    # -------------------- Nodes --------------------

    def has_node(self, node_id: str) -> bool:
        return node_id in self._graph and "data" in self._graph.nodes[node_id]

    def contains(self, node_id: str) -> bool:
        return node_id in self._graph

    def get_node(self, node_id: str) -> Optional[Node]:
        if node_id not in self._graph:
            return None
        return self._graph.nodes[node_id].get("data")

    def vertices(self) -> List[str]:
        """
        Every index vertex: graph nodes first, then dangling endpoints.
        """
        return list(self._graph.nodes)

    # -------------------- Edges --------------------

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        position = self._edge_position.get(edge_id)
        if position is None:
            return None
        return self.graph.edges[position]

    def get_edges(self) -> List[Edge]:
        return list(self.graph.edges)

    def edges_between(self, source_id: str, target_id: str) -> List[Edge]:
        if not self._graph.has_edge(source_id, target_id):
            return []
        data = self._graph.get_edge_data(source_id, target_id)
        return self._in_graph_order(d["data"] for d in data.values())

    def get_edges_within(self, node_ids: Iterable[str]) -> List[Edge]:
        node_set = set(node_ids)
        return [
            e for e in self.graph.edges
            if e.source_id in node_set and e.target_id in node_set
        ]

    def in_edges(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return self._in_graph_order(
            d["data"] for _, _, d in self._graph.in_edges(node_id, data=True)
        )

    def out_edges(self, node_id: str) -> List[Edge]:
        if node_id not in self._graph:
            return []
        return self._in_graph_order(
            d["data"] for _, _, d in self._graph.out_edges(node_id, data=True)
        )

    # -------------------- Traversal --------------------

    def neighbors(self, node_id: str) -> List[str]:
        if node_id not in self._graph:
            return []
        return list(self._graph.successors(node_id))

    def predecessors(self, node_id: str) -> List[str]:
        if node_id not in self._graph:
            return []
        return list(self._graph.predecessors(node_id))

    def reverse(self) -> "GraphStore":
        """
        Reversed-edge view sharing this index's node and edge objects.
        """
        reversed_store = GraphStore.__new__(GraphStore)
        reversed_store.graph = self.graph
        reversed_store._graph = self._graph.reverse(copy=False)
        reversed_store._edge_position = self._edge_position
        return reversed_store

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return len(self.graph.nodes)

    def edge_count(self) -> int:
        return len(self.graph.edges)

    # -------------------- Internals --------------------

    def _in_graph_order(self, edges: Iterable[Edge]) -> List[Edge]:
        return sorted(edges, key=lambda e: self._edge_position[e.id])
