from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import Callable, List, Protocol, Sequence

from pydantic import BaseModel, Field, ValidationError

from ontograph.errors import CollaboratorError
from ontograph.graph.graph_schema import Property


# ---------------------------------------------------------------------
# Collaborator inputs
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class PredecessorContext:
    """Properties already propagated to one direct predecessor."""

    vertex_name: str
    properties: List[Property] = field(default_factory=list)


@dataclass(frozen=True)
class EdgeContext:
    """Semantics of the edge joining a predecessor to the current vertex."""

    name: str
    description: str


@dataclass(frozen=True)
class VertexContext:
    """The vertex receiving suggestions."""

    vertex_name: str
    existing_properties: List[Property] = field(default_factory=list)


# ---------------------------------------------------------------------
# Collaborator output (wire schema)
# ---------------------------------------------------------------------


class Suggestion(BaseModel):
    id: str
    name: str
    description: str
    confidence: float = Field(ge=0.0, le=1.0)

    def to_property(self) -> Property:
        return Property(id=self.id, name=self.name, description=self.description)


class SuggestionList(BaseModel):
    suggestions: List[Suggestion]


# ---------------------------------------------------------------------
# Contracts
# ---------------------------------------------------------------------


class PropertySuggester(Protocol):
    """
    Proposes properties a vertex may inherit from its predecessors.

    Called once per vertex per propagation pass.
    """

    async def suggest(
        self,
        predecessors: Sequence[PredecessorContext],
        edges: Sequence[EdgeContext],
        current: VertexContext,
    ) -> List[Suggestion]: ...


class GenerationBackend(Protocol):
    """
    Text generation backend: prompt in, generated text out.
    """

    def generate(self, prompt: str) -> str: ...


PromptBuilder = Callable[
    [Sequence[PredecessorContext], Sequence[EdgeContext], VertexContext],
    str,
]


# ---------------------------------------------------------------------
# LLM-backed suggester
# ---------------------------------------------------------------------


class LLMPropertySuggester:
    """
    Property suggester that prompts an LLM backend and parses a JSON
    ``{"suggestions": [...]}`` answer.

    The backend is synchronous; it runs in a worker thread.
    """

    def __init__(
        self,
        backend: GenerationBackend,
        prompt_builder: PromptBuilder | None = None,
    ) -> None:
        if backend is None:
            raise ValueError("LLM backend must be provided")

        self.backend = backend
        self.prompt_builder = prompt_builder or default_prompt

    async def suggest(
        self,
        predecessors: Sequence[PredecessorContext],
        edges: Sequence[EdgeContext],
        current: VertexContext,
    ) -> List[Suggestion]:
        if not predecessors:
            return []

        prompt = self.prompt_builder(predecessors, edges, current)
        text = await asyncio.to_thread(self.backend.generate, prompt)
        return parse_suggestions(text)


def _properties_json(properties: Sequence[Property]) -> str:
    return json.dumps(
        [{"id": p.id, "name": p.name, "description": p.description} for p in properties],
        indent=2,
    )


def default_prompt(
    predecessors: Sequence[PredecessorContext],
    edges: Sequence[EdgeContext],
    current: VertexContext,
) -> str:
    predecessor_text = "\n".join(
        f"\nPredecessor {i} ({p.vertex_name}):\n{_properties_json(p.properties)}"
        for i, p in enumerate(predecessors, start=1)
    )
    edge_text = "\n".join(
        f"\nEdge {i}: {e.name}: {e.description}"
        for i, e in enumerate(edges, start=1)
    )

    return f"""
You are an ontology expert helping propagate properties through a knowledge graph.

Multiple predecessor nodes have these properties:
{predecessor_text}

These predecessors connect to the current node via edges:
{edge_text}

Current node '{current.vertex_name}' has existing properties:
{_properties_json(current.existing_properties)}

Considering ALL predecessor properties and edge semantics together, suggest new
properties that the current node might inherit. Look for:
- Direct property inheritance through individual edges
- Emergent properties from combining multiple predecessor properties
- Contextual properties arising from the specific combination of edges

For each suggestion give an id, name, description and a confidence between 0 and 1.
Respond ONLY with JSON of the form:
{{"suggestions": [{{"id": "...", "name": "...", "description": "...", "confidence": 0.5}}]}}
""".strip()


def parse_suggestions(text: str) -> List[Suggestion]:
    """
    Parse the first JSON object or array in ``text``.

    A bare array is accepted as the suggestion list.
    """
    starts = [i for i in (text.find("{"), text.find("[")) if i >= 0]
    if not starts:
        raise CollaboratorError("no JSON found in suggestion response")

    try:
        payload, _ = json.JSONDecoder().raw_decode(text[min(starts):])
    except json.JSONDecodeError as exc:
        raise CollaboratorError(f"malformed suggestion JSON: {exc}") from exc

    if isinstance(payload, list):
        payload = {"suggestions": payload}

    try:
        return SuggestionList.model_validate(payload).suggestions
    except ValidationError as exc:
        raise CollaboratorError(f"invalid suggestion payload: {exc}") from exc
