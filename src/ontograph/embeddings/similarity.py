from __future__ import annotations

import numpy as np
from typing import Dict, List, Sequence

from ontograph.errors import InputError


Vector = Sequence[float]


def _as_array(v: Vector) -> np.ndarray:
    return np.asarray(v, dtype=float).reshape(-1)


def _as_matrix(vectors: Sequence[Vector], dimension: int, *, what: str) -> np.ndarray:
    for i, v in enumerate(vectors):
        if len(v) != dimension:
            raise InputError(
                f"All vectors must have the same length. "
                f"{what} has {dimension}, vector[{i}] has {len(v)}"
            )
    if dimension == 0:
        return np.zeros((len(vectors), 0), dtype=float)
    return np.asarray(vectors, dtype=float)


class SimilarityComputer:
    """
    Vector similarity primitives.

    All functions treat zero-magnitude and zero-length vectors as
    "no similarity" (0.0) rather than producing NaN.
    """

    # ------------------------------------------------------------------
    # Core vector math
    # ------------------------------------------------------------------

    @staticmethod
    def dot(a: Vector, b: Vector) -> float:
        if len(a) != len(b):
            raise InputError("Vectors must have the same length")
        if len(a) == 0:
            return 0.0
        return float(np.dot(_as_array(a), _as_array(b)))

    @staticmethod
    def magnitude(a: Vector) -> float:
        return float(np.sqrt(SimilarityComputer.dot(a, a)))

    @staticmethod
    def cosine(a: Vector, b: Vector) -> float:
        """
        Compute cosine similarity with numerical safety.
        """
        if len(a) != len(b):
            raise InputError("Vectors must have the same length")
        if len(a) == 0:
            return 0.0

        denom = SimilarityComputer.magnitude(a) * SimilarityComputer.magnitude(b)
        if denom == 0.0:
            return 0.0
        return SimilarityComputer.dot(a, b) / denom

    # ------------------------------------------------------------------
    # Batched similarities
    # ------------------------------------------------------------------

    @staticmethod
    def cosine_batch(query: Vector, targets: Sequence[Vector]) -> List[float]:
        """
        Cosine similarity between one query and many targets.

        The query magnitude is computed once; a zero-magnitude target
        scores 0.0 for its own slot only.
        """
        if len(targets) == 0:
            return []

        matrix = _as_matrix(targets, len(query), what="Query")

        if len(query) == 0:
            return [0.0] * len(targets)

        q = _as_array(query)
        q_norm = float(np.linalg.norm(q))
        if q_norm == 0.0:
            return [0.0] * len(targets)

        norms = np.linalg.norm(matrix, axis=1)
        dots = matrix @ q
        denom = norms * q_norm
        scores = np.divide(dots, denom, out=np.zeros_like(dots), where=denom != 0.0)
        return [float(s) for s in scores]

    @staticmethod
    def cosine_matrix(vectors: Sequence[Vector]) -> List[List[float]]:
        """
        Symmetric pairwise similarity matrix with a unit diagonal.

        Only the upper triangle is used; the lower triangle mirrors it.
        """
        n = len(vectors)
        if n == 0:
            return []
        if n == 1:
            return [[1.0]]

        matrix = _as_matrix(vectors, len(vectors[0]), what="Vector[0]")
        norms = np.linalg.norm(matrix, axis=1)

        dots = matrix @ matrix.T
        denom = np.outer(norms, norms)
        full = np.divide(dots, denom, out=np.zeros_like(dots), where=denom != 0.0)

        upper = np.triu(full, k=1)
        result = upper + upper.T
        np.fill_diagonal(result, 1.0)

        return result.tolist()

    # ------------------------------------------------------------------
    # Ranking helpers
    # ------------------------------------------------------------------

    @staticmethod
    def top_k(
        query: Vector,
        targets: Sequence[Vector],
        k: int,
        threshold: float = 0.0,
    ) -> List[Dict[str, float]]:
        """
        Up to ``k`` ``{"index", "similarity"}`` pairs at or above
        ``threshold``, most similar first. Ties keep target order.
        """
        if k <= 0 or len(targets) == 0:
            return []

        scores = SimilarityComputer.cosine_batch(query, targets)
        candidates = [
            {"index": i, "similarity": s}
            for i, s in enumerate(scores)
            if s >= threshold
        ]
        candidates.sort(key=lambda c: c["similarity"], reverse=True)
        return candidates[:k]


dot = SimilarityComputer.dot
magnitude = SimilarityComputer.magnitude
cosine_similarity = SimilarityComputer.cosine
cosine_similarity_one_to_many = SimilarityComputer.cosine_batch
cosine_similarity_matrix = SimilarityComputer.cosine_matrix
find_top_similar = SimilarityComputer.top_k
