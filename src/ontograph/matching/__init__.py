"""
Matching subsystem for ontograph.

Finds subgraphs of a graph that resemble a query graph structurally
and semantically, and combines graphs by similarity containment.
"""

from ontograph.matching.containment import (
    find_node,
    find_edge,
    contains_node,
    contains_edge,
    intersect,
    merge,
)
from ontograph.matching.matcher import (
    SubgraphMatcher,
    similar_nodes,
    similar_edges,
    similar_subgraphs,
    match,
)

__all__ = [
    "SubgraphMatcher",
    "similar_nodes",
    "similar_edges",
    "similar_subgraphs",
    "match",
    "find_node",
    "find_edge",
    "contains_node",
    "contains_edge",
    "intersect",
    "merge",
]
