from __future__ import annotations

from dataclasses import dataclass, field

from ontograph.errors import InputError


# ---------------------------------------------------------------------
# Subgraph matching
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class MatchConfig:
    """
    Controls similarity matching between a graph and a query graph.

    ``n`` caps how many composed candidates each enumeration yields;
    ``threshold`` is the minimum cosine similarity for a candidate.
    """

    n: int = 10
    threshold: float = 0.5

    def __post_init__(self) -> None:
        if not -1.0 <= self.threshold <= 1.0:
            raise InputError(f"threshold must be in [-1, 1], got {self.threshold}")


# ---------------------------------------------------------------------
# Causal property propagation
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class InferenceConfig:
    """
    Controls multi-pass property propagation toward target vertices.
    """

    conf_threshold: float = 0.15
    max_iterations: int = 3
    tolerance: float = 0.001

    def __post_init__(self) -> None:
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise InputError(
                f"conf_threshold must be in [0, 1], got {self.conf_threshold}"
            )
        if self.max_iterations < 1:
            raise InputError(
                f"max_iterations must be positive, got {self.max_iterations}"
            )
        if self.tolerance < 0.0:
            raise InputError(f"tolerance must be non-negative, got {self.tolerance}")


# ---------------------------------------------------------------------
# External collaborators
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class EmbeddingConfig:
    """
    Embedding provider selection.
    """

    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"
    normalize: bool = True


@dataclass(frozen=True)
class SuggesterConfig:
    """
    LLM property-suggestion backend.
    """

    model_name: str = "TinyLlama/TinyLlama-1.1B-Chat-v1.0"
    max_new_tokens: int = 600
    temperature: float = 0.2
    hf_token: str | None = None


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class OntographConfig:
    """
    Root configuration object.

    Constructed explicitly and passed to the subsystems that need it;
    there is no global configuration.
    """

    match: MatchConfig = field(default_factory=MatchConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    suggester: SuggesterConfig = field(default_factory=SuggesterConfig)
