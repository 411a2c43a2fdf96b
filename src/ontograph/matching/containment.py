"""Similarity-based containment and graph set operations.

An entity of one graph is "contained" in another graph when the other
graph holds an entity whose embedding is at least ``threshold`` similar
to it. Edges additionally need both endpoints contained and must join
exactly the matched endpoints.
"""

from __future__ import annotations

from typing import List, Optional

from ontograph.config.settings import MatchConfig
from ontograph.embeddings.similarity import SimilarityComputer
from ontograph.graph.graph_schema import Edge, Graph, Node
from ontograph.graph.identifiers import IdFactory, generate_graph_id

DEFAULT_THRESHOLD = MatchConfig().threshold


def find_node(graph: Graph, node: Node, *, threshold: float = DEFAULT_THRESHOLD) -> Optional[Node]:
    """Most similar node of ``graph`` at or above ``threshold``."""
    embedding = node.require_embedding()
    if not graph.nodes:
        return None

    best = SimilarityComputer.top_k(
        embedding,
        [n.require_embedding() for n in graph.nodes],
        k=1,
        threshold=threshold,
    )
    if not best:
        return None
    return graph.nodes[int(best[0]["index"])]


def find_edge(
    graph: Graph,
    source: Node,
    target: Node,
    edge: Edge,
    *,
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[Edge]:
    """Most similar edge of ``graph`` joining the matches of ``source`` and ``target``."""
    embedding = edge.require_embedding()

    matched_source = find_node(graph, source, threshold=threshold)
    matched_target = find_node(graph, target, threshold=threshold)
    if matched_source is None or matched_target is None:
        return None

    connecting: List[Edge] = [
        e for e in graph.edges
        if e.source_id == matched_source.id and e.target_id == matched_target.id
    ]
    if not connecting:
        return None

    best = SimilarityComputer.top_k(
        embedding,
        [e.require_embedding() for e in connecting],
        k=1,
        threshold=threshold,
    )
    if not best:
        return None
    return connecting[int(best[0]["index"])]


def contains_node(graph: Graph, node: Node, *, threshold: float = DEFAULT_THRESHOLD) -> bool:
    return find_node(graph, node, threshold=threshold) is not None


def contains_edge(
    graph: Graph,
    source: Node,
    target: Node,
    edge: Edge,
    *,
    threshold: float = DEFAULT_THRESHOLD,
) -> bool:
    return find_edge(graph, source, target, edge, threshold=threshold) is not None


def intersect(
    a: Graph,
    b: Graph,
    *,
    threshold: float = DEFAULT_THRESHOLD,
    id_factory: Optional[IdFactory] = None,
) -> Graph:
    """The nodes and edges of ``b`` that are contained in ``a``."""
    nodes = [n for n in b.nodes if contains_node(a, n, threshold=threshold)]

    b_nodes = b.node_lookup()
    edges: List[Edge] = []
    for edge in b.edges:
        source = b_nodes.get(edge.source_id)
        target = b_nodes.get(edge.target_id)
        if source is None or target is None:
            continue
        if contains_edge(a, source, target, edge, threshold=threshold):
            edges.append(edge)

    return Graph(id=generate_graph_id(id_factory), nodes=nodes, edges=edges)


def merge(
    a: Graph,
    b: Graph,
    *,
    threshold: float = DEFAULT_THRESHOLD,
    id_factory: Optional[IdFactory] = None,
) -> Graph:
    """All of ``a`` plus whatever of ``b`` is not already contained in ``a``."""
    nodes = list(a.nodes)
    for node in b.nodes:
        if not contains_node(a, node, threshold=threshold):
            nodes.append(node)

    b_nodes = b.node_lookup()
    edges = list(a.edges)
    for edge in b.edges:
        source = b_nodes.get(edge.source_id)
        target = b_nodes.get(edge.target_id)
        if source is None or target is None:
            continue
        if not contains_edge(a, source, target, edge, threshold=threshold):
            edges.append(edge)

    return Graph(id=generate_graph_id(id_factory), nodes=nodes, edges=edges)
