import asyncio
import threading
import time

import numpy as np

from conftest import DummyEncoder
from ontograph.embeddings.encoder import EncoderEmbeddingProvider
from ontograph.graph.graph_builder import GraphBuilder, await_ready


def test_encoder_caches_by_text(encoder):
    first = encoder.encode(["a", "b", "a"])

    assert len(first) == 3
    assert encoder.calls == ["a", "b"]
    assert np.array_equal(encoder.encode_one("a"), np.ones(8))


def test_cache_key_includes_encoder_identity():
    assert DummyEncoder(dimension=4)._hash("x") != DummyEncoder(dimension=8)._hash("x")


def test_provider_adapter_feeds_builder(encoder):
    async def scenario():
        builder = GraphBuilder(EncoderEmbeddingProvider(encoder))
        node = builder.create_node("a", name="A", description="first")
        await await_ready(node)
        return node

    node = asyncio.run(scenario())

    assert node.embedding == tuple([1.0] * 8)
    assert encoder.calls == ["A: first"]


class ConcurrencyCountingEncoder(DummyEncoder):
    def __init__(self) -> None:
        super().__init__(dimension=4)
        self.active = 0
        self.peak = 0
        self._counter = threading.Lock()

    def _encode_one(self, text: str) -> np.ndarray:
        with self._counter:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.01)
        with self._counter:
            self.active -= 1
        return super()._encode_one(text)


def test_builder_never_runs_encoder_concurrently():
    encoder = ConcurrencyCountingEncoder()

    async def scenario():
        builder = GraphBuilder(EncoderEmbeddingProvider(encoder))
        nodes = [
            builder.create_node(str(i), name=f"N{i}", description="node")
            for i in range(8)
        ]
        graph = builder.create_graph("g", nodes=nodes)
        await await_ready(graph)
        return graph

    graph = asyncio.run(scenario())

    assert encoder.peak == 1
    assert all(n.is_ready for n in graph.nodes)
    assert len(encoder.calls) == 8


def test_encode_batches_only_cache_misses():
    class BatchRecordingEncoder(DummyEncoder):
        def __init__(self) -> None:
            super().__init__(dimension=2)
            self.batches = []

        def _encode_many(self, texts):
            self.batches.append(list(texts))
            return super()._encode_many(texts)

    encoder = BatchRecordingEncoder()
    encoder.encode(["a", "b"])
    encoder.encode(["b", "c", "c", "d"])

    assert encoder.batches == [["a", "b"], ["c", "d"]]
