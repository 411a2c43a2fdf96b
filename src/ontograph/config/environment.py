from __future__ import annotations

from typing import Iterable, Optional

from dynaconf import Dynaconf

from ontograph.config.constants import DEFAULTS
from ontograph.config.settings import (
    EmbeddingConfig,
    InferenceConfig,
    MatchConfig,
    OntographConfig,
    SuggesterConfig,
)


def load_settings(settings_files: Optional[Iterable[str]] = None) -> Dynaconf:
    """
    Settings from ``ONTOGRAPH_*`` environment variables, an optional
    ``.env`` file and ``settings_files``, over the built-in defaults.
    """
    settings = Dynaconf(
        envvar_prefix="ONTOGRAPH",
        load_dotenv=True,
        settings_files=list(settings_files or []),
    )
    for key, value in DEFAULTS.items():
        if settings.get(key) is None:
            settings.set(key, value)
    return settings


def load_config(settings: Optional[Dynaconf] = None) -> OntographConfig:
    settings = settings if settings is not None else load_settings()

    return OntographConfig(
        match=MatchConfig(
            n=int(settings.get("MATCH_N")),
            threshold=float(settings.get("MATCH_THRESHOLD")),
        ),
        inference=InferenceConfig(
            conf_threshold=float(settings.get("INFERENCE_CONF_THRESHOLD")),
            max_iterations=int(settings.get("INFERENCE_MAX_ITERATIONS")),
            tolerance=float(settings.get("INFERENCE_TOLERANCE")),
        ),
        embedding=EmbeddingConfig(
            model_name=settings.get("EMBEDDING_MODEL"),
            device=settings.get("EMBEDDING_DEVICE"),
            normalize=bool(settings.get("EMBEDDING_NORMALIZE")),
        ),
        suggester=SuggesterConfig(
            model_name=settings.get("SUGGESTER_MODEL"),
            max_new_tokens=int(settings.get("SUGGESTER_MAX_NEW_TOKENS")),
            temperature=float(settings.get("SUGGESTER_TEMPERATURE")),
            hf_token=settings.get("HF_TOKEN"),
        ),
    )
