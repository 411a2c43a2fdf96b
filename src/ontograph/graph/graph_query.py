from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set

from ontograph.graph.graph_schema import Graph
from ontograph.graph.graph_store import GraphStore
from ontograph.graph.identifiers import IdFactory, generate_graph_id


class GraphQueryEngine:
    """
    Boundary-constrained reachability over a graph.

    Defines which vertices and edges lie on some directed path from
    a source set to a target set.
    """

    def __init__(self, graph: Graph, *, id_factory: Optional[IdFactory] = None) -> None:
        self.graph = graph
        self.store = GraphStore(graph)
        self.id_factory = id_factory

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def reachable(self, start: Iterable[str], *, reverse: bool = False) -> Set[str]:
        """
        Vertices reachable from any start vertex along out-edges
        (in-edges when ``reverse``). Unknown start ids are ignored.
        """
        store = self.store.reverse() if reverse else self.store

        visited: Set[str] = set()
        stack: List[str] = [s for s in start if store.contains(s)]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            for nbr in store.neighbors(current):
                if nbr not in visited:
                    stack.append(nbr)

        return visited

    def incident(self, sources: List[str], targets: List[str]) -> Graph:
        """
        Maximal subgraph whose vertices lie on a source -> target path,
        with no edge entering a source and no edge leaving a target.

        A vertex that is both source and target keeps its place in the
        result but loses every edge touching it.
        """
        forward = self.reachable(sources)
        backward = self.reachable(targets, reverse=True)
        on_path = forward & backward

        if not on_path:
            logging.getLogger("ontograph.reachability").info(
                "no source->target path sources=%s targets=%s",
                len(sources),
                len(targets),
            )
            return Graph(id=generate_graph_id(self.id_factory), nodes=[], edges=[])

        nodes = [n for n in self.graph.nodes if n.id in on_path]
        induced = self.store.get_edges_within(on_path)

        source_set = set(sources)
        target_set = set(targets)
        edges = [
            e for e in induced
            if e.target_id not in source_set and e.source_id not in target_set
        ]

        logging.getLogger("ontograph.reachability").info(
            "incident nodes=%s edges=%s (dropped %s boundary edges)",
            len(nodes),
            len(edges),
            len(induced) - len(edges),
        )

        return Graph(id=generate_graph_id(self.id_factory), nodes=nodes, edges=edges)


def incident(
    graph: Graph,
    sources: List[str],
    targets: List[str],
    *,
    id_factory: Optional[IdFactory] = None,
) -> Graph:
    return GraphQueryEngine(graph, id_factory=id_factory).incident(sources, targets)
