"""ID generation for graph entities.

Fresh graph ids are produced by an injectable factory so tests can
assert on generated structure without patching global randomness.
"""

from __future__ import annotations

import itertools
import random
import string
from typing import Callable, Optional


IdFactory = Callable[[], str]

_ALPHABET = string.ascii_lowercase + string.digits


class RandomIdFactory:
    """Random base-36 suffixes (default)."""

    def __init__(self, length: int = 6, rng: Optional[random.Random] = None) -> None:
        self.length = length
        self._rng = rng or random.Random()

    def __call__(self) -> str:
        return "".join(self._rng.choice(_ALPHABET) for _ in range(self.length))


class CounterIdFactory:
    """Deterministic, monotonically increasing suffixes."""

    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return str(next(self._counter))


def generate_graph_id(id_factory: Optional[IdFactory] = None) -> str:
    """Generate a fresh graph id (``graph_<suffix>``)."""
    factory = id_factory or RandomIdFactory(length=13)
    return f"graph_{factory()}"


def namespaced_id(kind: str, local_id: str, id_factory: Optional[IdFactory] = None) -> str:
    """Build ``<kind>_<local_id>_<suffix>``."""
    factory = id_factory or RandomIdFactory()
    return f"{kind}_{local_id}_{factory()}"
