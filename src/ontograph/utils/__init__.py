"""
Utility functions for ontograph.

Low-level helpers used across the system. No graph logic lives here.
"""

from ontograph.utils.iteration import cartesian_product, take
from ontograph.utils.helpers import combine_confidences, geometric_mean, clamp

__all__ = [
    "cartesian_product",
    "take",
    "combine_confidences",
    "geometric_mean",
    "clamp",
]
