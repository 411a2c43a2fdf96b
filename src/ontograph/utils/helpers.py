from __future__ import annotations

from typing import Iterable
import numpy as np


def combine_confidences(c1: float, c2: float) -> float:
    """
    Probabilistic OR of two independent confidences.
    """
    return c1 + c2 - c1 * c2


def geometric_mean(values: Iterable[float]) -> float:
    vals = list(values)
    if not vals:
        return 0.0
    if len(vals) == 1:
        return float(vals[0])
    return float(np.prod(vals) ** (1.0 / len(vals)))


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))
