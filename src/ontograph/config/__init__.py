"""
Configuration layer for ontograph.

Configuration is:
- Explicit (passed, not global)
- Typed (validated at construction time)
- Loadable from the environment via Dynaconf
"""

from ontograph.config.settings import (
    MatchConfig,
    InferenceConfig,
    EmbeddingConfig,
    SuggesterConfig,
    OntographConfig,
)
from ontograph.config.environment import load_config, load_settings

__all__ = [
    "MatchConfig",
    "InferenceConfig",
    "EmbeddingConfig",
    "SuggesterConfig",
    "OntographConfig",
    "load_config",
    "load_settings",
]
