from __future__ import annotations

from typing import Callable, Dict, List, Sequence

import numpy as np
import pytest

from ontograph.embeddings.encoder import EmbeddingEncoder
from ontograph.graph.graph_schema import Edge, Graph, Node, Property
from ontograph.inference.suggester import (
    EdgeContext,
    PredecessorContext,
    Suggestion,
    VertexContext,
)


# ---------------------------------------------------------------------
# Entity helpers
# ---------------------------------------------------------------------


def make_node(local_id: str, embedding: Sequence[float] | None = (1.0, 0.0, 0.0)) -> Node:
    return Node(
        id=f"node_{local_id}",
        name=f"Node {local_id}",
        description=f"Node {local_id}",
        embedding=tuple(embedding) if embedding is not None else None,
    )


def make_edge(
    local_id: str,
    source_id: str,
    target_id: str,
    embedding: Sequence[float] | None = (1.0, 0.0),
) -> Edge:
    return Edge(
        id=f"edge_{local_id}",
        name=f"Edge {local_id}",
        description=f"Edge from {source_id} to {target_id}",
        source_id=source_id,
        target_id=target_id,
        embedding=tuple(embedding) if embedding is not None else None,
    )


def make_graph(local_id: str, nodes: List[Node], edges: List[Edge]) -> Graph:
    return Graph(id=f"graph_{local_id}", nodes=nodes, edges=edges)


def chain(*names: str) -> Graph:
    """Graph with one node per name and an edge between consecutive names."""
    nodes = [make_node(n) for n in names]
    edges = [
        make_edge(f"{a}{b}", f"node_{a}", f"node_{b}")
        for a, b in zip(names, names[1:])
    ]
    return make_graph("chain", nodes, edges)


# ---------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------


class DummyEncoder(EmbeddingEncoder):
    def __init__(self, dimension: int = 8) -> None:
        super().__init__(dimension=dimension)
        self.calls: List[str] = []

    def _encode_one(self, text: str) -> np.ndarray:
        self.calls.append(text)
        return np.ones(self.dimension, dtype=float)


class StaticProvider:
    """Async embedding provider returning a fixed vector."""

    def __init__(self, vector: Sequence[float] = (1.0, 0.0, 0.0)) -> None:
        self.vector = np.asarray(vector, dtype=float)
        self.texts: List[str] = []

    async def embed(self, text: str) -> np.ndarray:
        self.texts.append(text)
        return self.vector


class FailingProvider:
    async def embed(self, text: str) -> np.ndarray:
        raise RuntimeError("embedding service unavailable")


class ScriptedSuggester:
    """
    Suggester whose answer depends only on the current vertex name.

    Records every call so tests can assert on the batched inputs.
    """

    def __init__(self, answers: Dict[str, List[Suggestion]]) -> None:
        self.answers = answers
        self.calls: List[tuple] = []

    async def suggest(
        self,
        predecessors: Sequence[PredecessorContext],
        edges: Sequence[EdgeContext],
        current: VertexContext,
    ) -> List[Suggestion]:
        self.calls.append((list(predecessors), list(edges), current))
        return list(self.answers.get(current.vertex_name, []))


class FailingSuggester:
    def __init__(self) -> None:
        self.calls = 0

    async def suggest(self, predecessors, edges, current) -> List[Suggestion]:
        self.calls += 1
        raise RuntimeError("suggestion service unavailable")


class EchoBackend:
    """Generation backend returning a canned response."""

    def __init__(self, response: str) -> None:
        self.response = response
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.response


def suggestion(prop_id: str, confidence: float) -> Suggestion:
    return Suggestion(
        id=prop_id,
        name=prop_id.title(),
        description=f"{prop_id} property",
        confidence=confidence,
    )


def prop(prop_id: str) -> Property:
    return Property(id=prop_id, name=prop_id.title(), description=f"{prop_id} property")


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------


@pytest.fixture()
def encoder() -> DummyEncoder:
    return DummyEncoder()


@pytest.fixture()
def provider() -> StaticProvider:
    return StaticProvider()


@pytest.fixture()
def graph_factory() -> Callable[..., Graph]:
    return make_graph
