from __future__ import annotations

from typing import List

import numpy as np
import torch
from transformers import AutoTokenizer, AutoModel

from ontograph.config.settings import EmbeddingConfig
from ontograph.embeddings.encoder import EmbeddingEncoder, EncoderEmbeddingProvider


class HuggingFaceEmbeddingEncoder(EmbeddingEncoder):
    """
    HuggingFace sentence encoder for graph entity text.

    Cache misses are tokenized and run through the model in batches of
    ``batch_size``; token states are mean-pooled over the attention mask
    so padding never leaks into an embedding. Requires the ``hf`` extra.
    """

    def __init__(
        self,
        *,
        model_name: str,
        device: str = "cpu",
        normalize: bool = True,
        batch_size: int = 16,
    ) -> None:
        self.model_name = model_name
        self.device = device
        self.normalize = normalize
        self.batch_size = batch_size

        self.tokenizer = AutoTokenizer.from_pretrained(model_name)
        self.model = AutoModel.from_pretrained(model_name)
        self.model.to(device)
        self.model.eval()

        super().__init__(dimension=int(self.model.config.hidden_size))

    @classmethod
    def from_config(cls, config: EmbeddingConfig) -> "HuggingFaceEmbeddingEncoder":
        return cls(
            model_name=config.model_name,
            device=config.device,
            normalize=config.normalize,
        )

    def provider(self) -> EncoderEmbeddingProvider:
        """
        Async embedding provider for ``GraphBuilder``.
        """
        return EncoderEmbeddingProvider(self)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def _encode_one(self, text: str) -> np.ndarray:
        return self._encode_many([text])[0]

    def _encode_many(self, texts: List[str]) -> List[np.ndarray]:
        vectors: List[np.ndarray] = []
        for start in range(0, len(texts), self.batch_size):
            vectors.extend(self._encode_batch(texts[start:start + self.batch_size]))
        return vectors

    def _encode_batch(self, texts: List[str]) -> List[np.ndarray]:
        with torch.no_grad():
            inputs = self.tokenizer(
                texts,
                return_tensors="pt",
                truncation=True,
                padding=True,
            ).to(self.device)

            hidden = self.model(**inputs).last_hidden_state
            mask = inputs["attention_mask"].unsqueeze(-1).to(hidden.dtype)

            pooled = (hidden * mask).sum(dim=1) / mask.sum(dim=1).clamp(min=1e-9)

        matrix = pooled.cpu().numpy().astype(float)

        if self.normalize:
            norms = np.linalg.norm(matrix, axis=1, keepdims=True)
            matrix = np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms > 0)

        return list(matrix)
