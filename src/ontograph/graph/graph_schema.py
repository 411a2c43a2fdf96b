from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ontograph.errors import InputError


Embedding = Tuple[float, ...]


def as_embedding(vector: Sequence[float]) -> Embedding:
    """
    Normalize any float sequence (list, numpy array) to an immutable embedding.
    """
    return tuple(float(x) for x in vector)


# ---------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------


class _Embeddable:
    """
    Shared embedding slot.

    The embedding starts absent and is filled at most once by the
    readiness task attached at construction time.
    """

    def attach_embedding(self, vector: Sequence[float]) -> None:
        if self.embedding is not None:
            raise InputError(f"{self.id} already has an embedding")
        self.embedding = as_embedding(vector)

    @property
    def is_ready(self) -> bool:
        return self.embedding is not None

    @property
    def ready_task(self) -> Optional[asyncio.Task]:
        return self._ready

    def require_embedding(self) -> Embedding:
        if self.embedding is None:
            raise InputError(f"{self.id} must be ready")
        return self.embedding


@dataclass
class Property(_Embeddable):
    """
    Scalar semantic attribute.
    """

    id: str
    name: str
    description: str
    embedding: Optional[Embedding] = None
    _ready: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    def text(self) -> str:
        return f"{self.name}: {self.description}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "embedding": list(self.embedding) if self.embedding is not None else None,
        }


@dataclass
class Node(_Embeddable):
    """
    Semantic entity in the knowledge graph.
    """

    id: str
    name: str
    description: str
    properties: List[Property] = field(default_factory=list)
    embedding: Optional[Embedding] = None
    _ready: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    def text(self) -> str:
        return compose_text(self.name, self.description, self.properties)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "embedding": list(self.embedding) if self.embedding is not None else None,
            "properties": [p.to_dict() for p in self.properties],
        }


@dataclass
class Edge(_Embeddable):
    """
    Directed, typed relationship between two nodes.

    Endpoints reference nodes by id only; they may dangle.
    """

    id: str
    name: str
    description: str
    source_id: str
    target_id: str
    properties: List[Property] = field(default_factory=list)
    embedding: Optional[Embedding] = None
    _ready: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    @property
    def is_self_loop(self) -> bool:
        return self.source_id == self.target_id

    def text(self) -> str:
        return compose_text(self.name, self.description, self.properties)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "embedding": list(self.embedding) if self.embedding is not None else None,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "properties": [p.to_dict() for p in self.properties],
        }


Entity = Union[Property, Node, Edge]


def compose_text(name: str, description: str, properties: Sequence[Property]) -> str:
    """
    Text an entity is embedded from: its own line, then one line per property.
    """
    lines = [f"{name}: {description}"]
    lines.extend(p.text() for p in properties)
    return "\n".join(lines)


# ---------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class Graph:
    """
    Immutable collection of nodes and edges.

    Operations never mutate a graph; they return a new one that reuses
    the node and edge objects of their inputs.
    """

    id: str
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    _ready: Optional[asyncio.Task] = field(default=None, repr=False, compare=False)

    @property
    def ready_task(self) -> Optional[asyncio.Task]:
        return self._ready

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def edge_ids(self) -> List[str]:
        return [e.id for e in self.edges]

    def node_lookup(self) -> Dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def edge_lookup(self) -> Dict[str, Edge]:
        return {e.id: e for e in self.edges}

    def is_valid(self) -> bool:
        """
        Node ids are pairwise distinct and edge ids are pairwise distinct.
        """
        node_ids = self.node_ids()
        edge_ids = self.edge_ids()
        return len(set(node_ids)) == len(node_ids) and len(set(edge_ids)) == len(edge_ids)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


# ---------------------------------------------------------------------
# Match candidates
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class NodeCandidate:
    """
    Scored pairing of a query node with a graph node.
    """

    reference_id: str
    candidate_id: str
    similarity: float


@dataclass(frozen=True)
class EdgeCandidate:
    """
    Scored pairing of a query edge with a graph edge.
    """

    reference_id: str
    candidate_id: str
    similarity: float
