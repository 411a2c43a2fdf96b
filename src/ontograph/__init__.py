"""
ontograph
=========

A graph analytics core for ontology-style knowledge graphs:
embedding similarity, fuzzy subgraph matching, boundary-constrained
reachability and causal property propagation.

Core idea:
- Vertices and edges carry meaning through embeddings, so queries
  match by similarity instead of exact labels.

Public API:
- GraphBuilder
- GraphStore
- match
- incident
- infer
"""

from ontograph.errors import OntographError, InputError, CollaboratorError
from ontograph.graph.graph_schema import Property, Node, Edge, Graph
from ontograph.graph.graph_store import GraphStore
from ontograph.graph.graph_builder import GraphBuilder, await_ready
from ontograph.graph.graph_query import incident
from ontograph.matching.matcher import SubgraphMatcher, match
from ontograph.inference.propagation import PropagationEngine, InferenceResult, infer
from ontograph.config.settings import OntographConfig

__all__ = [
    "OntographError",
    "InputError",
    "CollaboratorError",
    "Property",
    "Node",
    "Edge",
    "Graph",
    "GraphStore",
    "GraphBuilder",
    "await_ready",
    "incident",
    "SubgraphMatcher",
    "match",
    "PropagationEngine",
    "InferenceResult",
    "infer",
    "OntographConfig",
]

__version__ = "0.1.0"
