from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ontograph.config.settings import InferenceConfig
from ontograph.graph.graph_query import incident
from ontograph.graph.graph_schema import Graph, Property
from ontograph.graph.graph_store import GraphStore
from ontograph.graph.identifiers import IdFactory
from ontograph.inference.ordering import pseudo_topological_order
from ontograph.inference.suggester import (
    EdgeContext,
    PredecessorContext,
    PropertySuggester,
    Suggestion,
    VertexContext,
)
from ontograph.utils.helpers import clamp, combine_confidences, geometric_mean


# ---------------------------------------------------------------------
# Propagation state
# ---------------------------------------------------------------------


@dataclass
class Propagation:
    """
    A property held by a vertex, with confidence and the direct
    predecessor it is attributed to.
    """

    property: Property
    confidence: float
    origin: str


PropagationTable = Dict[str, List[Propagation]]

# vertex id -> ((property id, confidence), ...)
Snapshot = Dict[str, Tuple[Tuple[str, float], ...]]


def snapshot(table: PropagationTable) -> Snapshot:
    """
    Owned, immutable copy of the table for convergence checks.
    """
    return {
        vertex: tuple((p.property.id, p.confidence) for p in props)
        for vertex, props in table.items()
    }


def snapshots_equal(before: Snapshot, after: Snapshot, tolerance: float) -> bool:
    if before.keys() != after.keys():
        return False

    for vertex, entries in before.items():
        other = dict(after[vertex])
        if len(entries) != len(other):
            return False
        for property_id, confidence in entries:
            if property_id not in other:
                return False
            if abs(other[property_id] - confidence) > tolerance:
                return False

    return True


def aggregate_confidence(propagations: Sequence[Propagation]) -> float:
    """
    Geometric mean of the held confidences; more conservative than
    the arithmetic mean.
    """
    return geometric_mean(p.confidence for p in propagations)


# ---------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class InferenceResult:
    """
    Predicted properties for one target vertex.

    ``converged`` is False when propagation stopped at the iteration
    limit; the prediction is still the best available.
    """

    target_node_id: str
    predicted_properties: List[Property] = field(default_factory=list)
    confidence: float = 0.0
    reasoning: str = ""
    iterations: int = 0
    converged: bool = True


# ---------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------


class PropagationEngine:
    """
    Multi-pass causal property propagation.

    Interventions seed source vertices at confidence 1. Each pass walks
    the boundary-constrained source -> target subgraph in
    pseudo-topological order and asks the suggester which properties
    every reached vertex inherits from its predecessors. Passes repeat
    until the propagation table stops changing or the iteration limit
    is hit.
    """

    def __init__(
        self,
        suggester: PropertySuggester,
        config: Optional[InferenceConfig] = None,
        *,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self.suggester = suggester
        self.config = config or InferenceConfig()
        self.id_factory = id_factory

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def infer(
        self,
        graph: Graph,
        sources: List[str],
        targets: List[str],
        intervention: Mapping[str, Property],
    ) -> List[InferenceResult]:
        logger = logging.getLogger("ontograph.inference")

        sub = incident(graph, sources, targets, id_factory=self.id_factory)
        if not sub.nodes:
            logger.info("no source->target path; nothing to propagate")
            return [
                InferenceResult(
                    target_node_id=t,
                    reasoning="No source->target path",
                )
                for t in targets
            ]

        store = GraphStore(sub)
        order = pseudo_topological_order(store, sources)

        scheduled = set(order)
        missing = [n.id for n in sub.nodes if n.id not in scheduled]
        if missing:
            logger.warning("%s nodes missing from propagation order", len(missing))

        table: PropagationTable = {}
        for s in sources:
            prop = intervention.get(s)
            if prop is not None:
                table[s] = [Propagation(property=prop, confidence=1.0, origin=s)]

        source_set = set(sources)
        iteration = 0
        converged = False

        while iteration < self.config.max_iterations and not converged:
            iteration += 1
            before = snapshot(table)

            for vertex in order:
                if vertex in source_set:
                    continue
                await self._propagate_to(store, table, vertex)

            converged = snapshots_equal(before, snapshot(table), self.config.tolerance)
            logger.info(
                "pass %s: vertices=%s propagations=%s converged=%s",
                iteration,
                len(table),
                sum(len(p) for p in table.values()),
                converged,
            )

        if not converged:
            logger.warning(
                "propagation did not converge after %s iterations", iteration
            )

        return [
            self._result_for(t, table.get(t, []), iteration, converged)
            for t in targets
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _propagate_to(
        self,
        store: GraphStore,
        table: PropagationTable,
        vertex: str,
    ) -> None:
        current = store.get_node(vertex)
        if current is None:
            return

        predecessors: List[PredecessorContext] = []
        edges: List[EdgeContext] = []
        contributors: List[str] = []

        for edge in store.in_edges(vertex):
            held = table.get(edge.source_id)
            if not held:
                continue
            predecessor = store.get_node(edge.source_id)
            if predecessor is None:
                continue

            predecessors.append(
                PredecessorContext(
                    vertex_name=predecessor.name,
                    properties=[p.property for p in held],
                )
            )
            edges.append(EdgeContext(name=edge.name, description=edge.description))
            contributors.append(edge.source_id)

        if not predecessors:
            return

        suggestions = await self._suggest(
            predecessors,
            edges,
            VertexContext(
                vertex_name=current.name,
                existing_properties=list(current.properties),
            ),
            vertex,
        )

        origin = contributors[0]
        entries = table.setdefault(vertex, [])
        for suggestion in suggestions:
            if suggestion.confidence < self.config.conf_threshold:
                continue

            existing = next(
                (p for p in entries if p.property.id == suggestion.id), None
            )
            if existing is None:
                entries.append(
                    Propagation(
                        property=suggestion.to_property(),
                        confidence=suggestion.confidence,
                        origin=origin,
                    )
                )
                continue

            previous = existing.confidence
            existing.confidence = clamp(
                combine_confidences(previous, suggestion.confidence)
            )
            if suggestion.confidence > previous:
                existing.origin = origin

        if not entries:
            del table[vertex]

    async def _suggest(
        self,
        predecessors: List[PredecessorContext],
        edges: List[EdgeContext],
        current: VertexContext,
        vertex: str,
    ) -> List[Suggestion]:
        try:
            return list(await self.suggester.suggest(predecessors, edges, current))
        except Exception:
            logging.getLogger("ontograph.inference").warning(
                "suggestion provider failed for %s; skipping this pass",
                vertex,
                exc_info=True,
            )
            return []

    @staticmethod
    def _result_for(
        target: str,
        propagated: List[Propagation],
        iterations: int,
        converged: bool,
    ) -> InferenceResult:
        if not propagated:
            return InferenceResult(
                target_node_id=target,
                reasoning="No strong propagation",
                iterations=iterations,
                converged=converged,
            )

        confidence = aggregate_confidence(propagated)

        counts: Dict[str, int] = {}
        for p in propagated:
            counts[p.origin] = counts.get(p.origin, 0) + 1
        derived = ", ".join(f"{origin}({count})" for origin, count in counts.items())

        status = (
            f"Converged after {iterations} iterations"
            if converged
            else f"Stopped after {iterations} iterations without converging"
        )

        return InferenceResult(
            target_node_id=target,
            predicted_properties=[p.property for p in propagated],
            confidence=confidence,
            reasoning=f"{status}. Derived via {derived}. Average confidence: {confidence:.3f}",
            iterations=iterations,
            converged=converged,
        )


async def infer(
    graph: Graph,
    sources: List[str],
    targets: List[str],
    intervention: Mapping[str, Property],
    suggester: PropertySuggester,
    config: Optional[InferenceConfig] = None,
) -> List[InferenceResult]:
    return await PropagationEngine(suggester, config).infer(
        graph, sources, targets, intervention
    )
