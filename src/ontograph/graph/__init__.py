"""
Graph subsystem for ontograph.

Defines the shared entity/relationship data model, its construction
surface, an adjacency index, and boundary-constrained reachability.
"""

from ontograph.graph.graph_schema import (
    Embedding,
    Property,
    Node,
    Edge,
    Graph,
    NodeCandidate,
    EdgeCandidate,
)
from ontograph.graph.graph_store import GraphStore
from ontograph.graph.graph_builder import GraphBuilder, await_ready
from ontograph.graph.graph_query import GraphQueryEngine, incident
from ontograph.graph.identifiers import (
    RandomIdFactory,
    CounterIdFactory,
    generate_graph_id,
)

__all__ = [
    "Embedding",
    "Property",
    "Node",
    "Edge",
    "Graph",
    "NodeCandidate",
    "EdgeCandidate",
    "GraphStore",
    "GraphBuilder",
    "await_ready",
    "GraphQueryEngine",
    "incident",
    "RandomIdFactory",
    "CounterIdFactory",
    "generate_graph_id",
]
