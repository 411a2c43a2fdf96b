from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Dict, Protocol
import asyncio
import hashlib
import threading
import numpy as np


class EmbeddingProvider(Protocol):
    """
    Asynchronous text -> vector collaborator.

    Implementations may raise; the caller logs the failure and leaves
    the entity's embedding unset.
    """

    async def embed(self, text: str) -> np.ndarray: ...


class EmbeddingEncoder(ABC):
    """
    Abstract synchronous embedding encoder.

    Concrete implementations may wrap:
    - sentence transformers
    - LLM embedding APIs
    - deterministic test encoders

    Calls are serialized by an internal lock: tokenizers and models
    behind an encoder are not safe to share between threads.
    """

    def __init__(self, dimension: int) -> None:
        self.dimension = dimension
        self._cache: Dict[str, np.ndarray] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def encode(self, texts: Iterable[str]) -> List[np.ndarray]:
        """
        Encode multiple texts into embeddings, caching by text.

        Texts missing from the cache are encoded together in one
        ``_encode_many`` call.
        """
        texts = list(texts)

        with self._lock:
            missing = [
                t for t in dict.fromkeys(texts) if self._hash(t) not in self._cache
            ]
            if missing:
                for text, vector in zip(missing, self._encode_many(missing)):
                    self._cache[self._hash(text)] = vector

            return [self._cache[self._hash(t)] for t in texts]

    def encode_one(self, text: str) -> np.ndarray:
        return self.encode([text])[0]

    # ------------------------------------------------------------------
    # Implementation contract
    # ------------------------------------------------------------------

    @abstractmethod
    def _encode_one(self, text: str) -> np.ndarray:
        raise NotImplementedError

    def _encode_many(self, texts: List[str]) -> List[np.ndarray]:
        """
        Override to batch; called with the lock held.
        """
        return [self._encode_one(t) for t in texts]

    # ------------------------------------------------------------------
    # Utilities
    # ------------------------------------------------------------------

    def _hash(self, text: str) -> str:
        """
        Cache key incorporating encoder identity, so different
        models/configs never share entries.
        """
        payload = f"{self.__class__.__name__}:{self.dimension}:{text}"
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class EncoderEmbeddingProvider:
    """
    Exposes a synchronous EmbeddingEncoder as an EmbeddingProvider.

    Encoding runs in a worker thread so the event loop is not blocked
    by model inference. Concurrent ``embed`` calls queue on the
    encoder's lock, so one entity is encoded at a time.
    """

    def __init__(self, encoder: EmbeddingEncoder) -> None:
        self.encoder = encoder

    async def embed(self, text: str) -> np.ndarray:
        return await asyncio.to_thread(self.encoder.encode_one, text)
