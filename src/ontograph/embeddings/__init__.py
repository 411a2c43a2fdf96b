"""
Embedding subsystem for ontograph.

Provides the embedding-provider contract used by graph construction
and the similarity primitives used by matching.
"""

from ontograph.embeddings.encoder import (
    EmbeddingEncoder,
    EmbeddingProvider,
    EncoderEmbeddingProvider,
)
from ontograph.embeddings.similarity import (
    SimilarityComputer,
    dot,
    magnitude,
    cosine_similarity,
    cosine_similarity_one_to_many,
    cosine_similarity_matrix,
    find_top_similar,
)

__all__ = [
    "EmbeddingEncoder",
    "EmbeddingProvider",
    "EncoderEmbeddingProvider",
    "SimilarityComputer",
    "dot",
    "magnitude",
    "cosine_similarity",
    "cosine_similarity_one_to_many",
    "cosine_similarity_matrix",
    "find_top_similar",
]
