"""
Causal inference subsystem for ontograph.

Propagates intervention properties from source vertices to target
vertices through the incident subgraph, with an external suggester
deciding what each vertex inherits.
"""

from ontograph.inference.ordering import (
    Condensation,
    condense,
    strongly_connected_components,
    pseudo_topological_order,
)
from ontograph.inference.suggester import (
    PredecessorContext,
    EdgeContext,
    VertexContext,
    Suggestion,
    PropertySuggester,
    GenerationBackend,
    LLMPropertySuggester,
    default_prompt,
    parse_suggestions,
)
from ontograph.inference.propagation import (
    Propagation,
    InferenceResult,
    PropagationEngine,
    infer,
)

__all__ = [
    "Condensation",
    "condense",
    "strongly_connected_components",
    "pseudo_topological_order",
    "PredecessorContext",
    "EdgeContext",
    "VertexContext",
    "Suggestion",
    "PropertySuggester",
    "GenerationBackend",
    "LLMPropertySuggester",
    "default_prompt",
    "parse_suggestions",
    "Propagation",
    "InferenceResult",
    "PropagationEngine",
    "infer",
]
