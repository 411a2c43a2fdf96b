from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from ontograph.config.settings import MatchConfig
from ontograph.embeddings.similarity import SimilarityComputer
from ontograph.errors import InputError
from ontograph.graph.graph_schema import (
    Edge,
    EdgeCandidate,
    Graph,
    Node,
    NodeCandidate,
)
from ontograph.graph.identifiers import IdFactory, generate_graph_id
from ontograph.matching import containment
from ontograph.utils.iteration import cartesian_product, take


class SubgraphMatcher:
    """
    Similarity-based subgraph matching.

    Candidates for each query node (and, given a node assignment, each
    query edge) are ranked by cosine similarity, most similar first,
    and composed lazily with a capped cartesian product. The first
    composed candidate is returned as the match; it is not guaranteed
    to be the globally best one.
    """

    def __init__(
        self,
        config: Optional[MatchConfig] = None,
        *,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self.config = config or MatchConfig()
        self.id_factory = id_factory

    # ------------------------------------------------------------------
    # Candidate generation
    # ------------------------------------------------------------------

    def similar_nodes(self, graph: Graph, query: Graph) -> Iterator[List[NodeCandidate]]:
        """
        Node assignments for the whole query, one candidate per query node.
        """
        if not graph.nodes:
            raise InputError("Graph has no nodes")
        if not query.nodes:
            raise InputError("Query has no nodes")

        graph_embeddings = [n.require_embedding() for n in graph.nodes]

        per_query_node: List[List[NodeCandidate]] = []
        for query_node in query.nodes:
            scores = SimilarityComputer.cosine_batch(
                query_node.require_embedding(), graph_embeddings
            )
            candidates = [
                NodeCandidate(
                    reference_id=query_node.id,
                    candidate_id=graph_node.id,
                    similarity=score,
                )
                for graph_node, score in zip(graph.nodes, scores)
                if score >= self.config.threshold
            ]

            if not candidates:
                logging.getLogger("ontograph.matching").info(
                    "no candidates for node %s in graph %s", query_node.id, graph.id
                )

            candidates.sort(key=lambda c: c.similarity, reverse=True)
            per_query_node.append(candidates)

        return take(cartesian_product(per_query_node), self.config.n)

    def similar_edges(
        self,
        graph: Graph,
        query: Graph,
        node_candidates: List[NodeCandidate],
    ) -> Iterator[List[EdgeCandidate]]:
        """
        Edge assignments consistent with one node assignment.

        Only graph edges joining the mapped endpoints of a query edge
        are considered for it.
        """
        mapping: Dict[str, str] = {
            c.reference_id: c.candidate_id for c in node_candidates
        }
        assigned = {c.candidate_id for c in node_candidates}
        within = [
            e for e in graph.edges
            if e.source_id in assigned and e.target_id in assigned
        ]

        per_query_edge: List[List[EdgeCandidate]] = []
        for query_edge in query.edges:
            query_embedding = query_edge.require_embedding()

            expected_source = mapping.get(query_edge.source_id)
            expected_target = mapping.get(query_edge.target_id)
            if expected_source is None or expected_target is None:
                continue

            candidates: List[EdgeCandidate] = []
            for graph_edge in within:
                if (
                    graph_edge.source_id != expected_source
                    or graph_edge.target_id != expected_target
                ):
                    continue

                similarity = SimilarityComputer.cosine(
                    query_embedding, graph_edge.require_embedding()
                )
                if similarity < self.config.threshold:
                    continue

                candidates.append(
                    EdgeCandidate(
                        reference_id=query_edge.id,
                        candidate_id=graph_edge.id,
                        similarity=similarity,
                    )
                )

            if not candidates:
                logging.getLogger("ontograph.matching").info(
                    "no candidates for edge %s in graph %s", query_edge.id, graph.id
                )

            candidates.sort(key=lambda c: c.similarity, reverse=True)
            per_query_edge.append(candidates)

        return take(cartesian_product(per_query_edge), self.config.n)

    def similar_subgraphs(self, graph: Graph, query: Graph) -> Iterator[Graph]:
        """
        Lazily yield matched subgraphs, most similar node assignments first.
        """
        nodes_by_id: Dict[str, Node] = graph.node_lookup()
        edges_by_id: Dict[str, Edge] = graph.edge_lookup()

        for node_candidates in self.similar_nodes(graph, query):
            nodes = [nodes_by_id[c.candidate_id] for c in node_candidates]

            if not query.edges:
                yield Graph(id=generate_graph_id(self.id_factory), nodes=nodes, edges=[])
                continue

            for edge_candidates in self.similar_edges(graph, query, node_candidates):
                yield Graph(
                    id=generate_graph_id(self.id_factory),
                    nodes=nodes,
                    edges=[edges_by_id[c.candidate_id] for c in edge_candidates],
                )

    def match(self, graph: Graph, query: Graph) -> Optional[Graph]:
        """
        First subgraph of ``graph`` matching ``query``, or None.
        """
        if not graph.is_valid():
            raise InputError("Invalid graph")
        if not query.is_valid():
            raise InputError("Invalid query graph")

        return next(self.similar_subgraphs(graph, query), None)

    # ------------------------------------------------------------------
    # Containment and set operations
    # ------------------------------------------------------------------

    def find_node(self, graph: Graph, node: Node) -> Optional[Node]:
        return containment.find_node(graph, node, threshold=self.config.threshold)

    def find_edge(self, graph: Graph, source: Node, target: Node, edge: Edge) -> Optional[Edge]:
        return containment.find_edge(
            graph, source, target, edge, threshold=self.config.threshold
        )

    def contains_node(self, graph: Graph, node: Node) -> bool:
        return self.find_node(graph, node) is not None

    def contains_edge(self, graph: Graph, source: Node, target: Node, edge: Edge) -> bool:
        return self.find_edge(graph, source, target, edge) is not None

    def intersect(self, a: Graph, b: Graph) -> Graph:
        return containment.intersect(
            a, b, threshold=self.config.threshold, id_factory=self.id_factory
        )

    def merge(self, a: Graph, b: Graph) -> Graph:
        return containment.merge(
            a, b, threshold=self.config.threshold, id_factory=self.id_factory
        )


# ---------------------------------------------------------------------
# Module-level entry points
# ---------------------------------------------------------------------


def similar_nodes(
    graph: Graph, query: Graph, config: Optional[MatchConfig] = None
) -> Iterator[List[NodeCandidate]]:
    return SubgraphMatcher(config).similar_nodes(graph, query)


def similar_edges(
    graph: Graph,
    query: Graph,
    node_candidates: List[NodeCandidate],
    config: Optional[MatchConfig] = None,
) -> Iterator[List[EdgeCandidate]]:
    return SubgraphMatcher(config).similar_edges(graph, query, node_candidates)


def similar_subgraphs(
    graph: Graph,
    query: Graph,
    config: Optional[MatchConfig] = None,
    *,
    id_factory: Optional[IdFactory] = None,
) -> Iterator[Graph]:
    return SubgraphMatcher(config, id_factory=id_factory).similar_subgraphs(graph, query)


def match(
    graph: Graph,
    query: Graph,
    config: Optional[MatchConfig] = None,
    *,
    id_factory: Optional[IdFactory] = None,
) -> Optional[Graph]:
    return SubgraphMatcher(config, id_factory=id_factory).match(graph, query)
