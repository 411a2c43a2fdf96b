import asyncio
import json
from types import SimpleNamespace

import pytest

torch = pytest.importorskip("torch")
pytest.importorskip("transformers")

from ontograph.config.settings import EmbeddingConfig, SuggesterConfig  # noqa: E402
from ontograph.embeddings import hf_encoder  # noqa: E402
from ontograph.errors import CollaboratorError  # noqa: E402
from ontograph.graph.graph_builder import GraphBuilder, await_ready  # noqa: E402
from ontograph.inference import hf_backend  # noqa: E402
from ontograph.inference.suggester import (  # noqa: E402
    EdgeContext,
    PredecessorContext,
    VertexContext,
)


# ---------------------------------------------------------------------
# Encoder fakes
# ---------------------------------------------------------------------


class FakeBatch(dict):
    def to(self, device):
        self.device = device
        return self


class FakeTokenizer:
    def __init__(self):
        self.calls = []

    @classmethod
    def from_pretrained(cls, name, **kwargs):
        tokenizer = cls()
        tokenizer.name = name
        return tokenizer

    def __call__(self, texts, return_tensors, truncation, padding):
        self.calls.append(list(texts))
        lengths = [len(t.split()) for t in texts]
        width = max(lengths)
        mask = torch.tensor([[1] * n + [0] * (width - n) for n in lengths])
        return FakeBatch(input_ids=mask.clone(), attention_mask=mask)


class FakeEncoderModel:
    """Every real token state is [1, 2, 2]; padding states are 100."""

    def __init__(self):
        self.config = SimpleNamespace(hidden_size=3)
        self.device = None
        self.evaluated = False

    @classmethod
    def from_pretrained(cls, name, **kwargs):
        return cls()

    def to(self, device):
        self.device = device
        return self

    def eval(self):
        self.evaluated = True
        return self

    def __call__(self, input_ids, attention_mask):
        mask = attention_mask.unsqueeze(-1).float()
        token = torch.tensor([1.0, 2.0, 2.0])
        return SimpleNamespace(last_hidden_state=mask * token + (1 - mask) * 100.0)


@pytest.fixture()
def fake_hf_encoder(monkeypatch):
    monkeypatch.setattr(hf_encoder, "AutoTokenizer", FakeTokenizer)
    monkeypatch.setattr(hf_encoder, "AutoModel", FakeEncoderModel)


def test_encoder_from_config_loads_model(fake_hf_encoder):
    encoder = hf_encoder.HuggingFaceEmbeddingEncoder.from_config(
        EmbeddingConfig(model_name="mini", device="cpu", normalize=True)
    )

    assert encoder.dimension == 3
    assert encoder.tokenizer.name == "mini"
    assert encoder.model.device == "cpu"
    assert encoder.model.evaluated


def test_encoder_mean_pools_over_attention_mask(fake_hf_encoder):
    encoder = hf_encoder.HuggingFaceEmbeddingEncoder(model_name="mini")

    long_text, short_text = encoder.encode(["pump moves water", "pump"])

    assert list(long_text) == pytest.approx([1 / 3, 2 / 3, 2 / 3])
    assert list(short_text) == pytest.approx([1 / 3, 2 / 3, 2 / 3])


def test_encoder_batches_cache_misses(fake_hf_encoder):
    encoder = hf_encoder.HuggingFaceEmbeddingEncoder(
        model_name="mini", normalize=False, batch_size=2
    )

    encoder.encode(["a", "b", "c"])
    encoder.encode(["a", "d"])

    assert encoder.tokenizer.calls == [["a", "b"], ["c"], ["d"]]
    assert list(encoder.encode_one("a")) == pytest.approx([1.0, 2.0, 2.0])


def test_encoder_provider_embeds_graph_entities(fake_hf_encoder):
    encoder = hf_encoder.HuggingFaceEmbeddingEncoder(model_name="mini")

    async def scenario():
        builder = GraphBuilder(encoder.provider())
        node = builder.create_node("pump", name="Pump", description="Moves water")
        await await_ready(node)
        return node

    node = asyncio.run(scenario())

    assert node.embedding == pytest.approx((1 / 3, 2 / 3, 2 / 3))


# ---------------------------------------------------------------------
# Generation backend fakes
# ---------------------------------------------------------------------


class FakeChatTokenizer:
    pad_token = None
    eos_token = "</s>"
    eos_token_id = 2
    chat_template = "chat"

    @classmethod
    def from_pretrained(cls, name, **kwargs):
        tokenizer = cls()
        tokenizer.kwargs = kwargs
        return tokenizer

    def apply_chat_template(self, messages, tokenize, add_generation_prompt):
        return "|".join(f"{m['role']}:{m['content']}" for m in messages)


class FakeCausalModel:
    @classmethod
    def from_pretrained(cls, name, **kwargs):
        model = cls()
        model.kwargs = kwargs
        return model


class FakePipeline:
    response = ""

    def __init__(self, model, tokenizer, **kwargs):
        self.kwargs = kwargs
        self.calls = []

    def __call__(self, text, **kwargs):
        self.calls.append((text, kwargs))
        return [{"generated_text": self.response}]


ANSWER = (
    'Sure. {"suggestions": [{"id": "warm", "name": "Warm", '
    '"description": "Gets warm", "confidence": 0.7}]} Hope this helps.'
)


@pytest.fixture()
def fake_hf_backend(monkeypatch):
    monkeypatch.setattr(hf_backend, "AutoTokenizer", FakeChatTokenizer)
    monkeypatch.setattr(hf_backend, "AutoModelForCausalLM", FakeCausalModel)
    monkeypatch.setattr(hf_backend, "TextGenerationPipeline", FakePipeline)
    monkeypatch.setattr(hf_backend.torch.cuda, "is_available", lambda: False)
    monkeypatch.setattr(FakePipeline, "response", ANSWER)


def test_backend_from_config_on_cpu(fake_hf_backend):
    backend = hf_backend.HuggingFaceBackend.from_config(
        SuggesterConfig(model_name="tiny", hf_token="secret", max_new_tokens=50, temperature=0.0)
    )

    assert backend.tokenizer.kwargs == {"use_fast": True, "token": "secret"}
    assert backend.tokenizer.pad_token == "</s>"
    assert backend.model.kwargs["torch_dtype"] == torch.float32
    assert backend.model.kwargs["device_map"] is None
    assert backend.pipeline.kwargs == {"device": -1}
    assert backend.max_new_tokens == 50


def test_backend_generate_normalizes_to_suggestion_object(fake_hf_backend):
    backend = hf_backend.HuggingFaceBackend(model_name="tiny", temperature=0.0)

    payload = json.loads(backend.generate("Suggest properties"))

    assert payload == {
        "suggestions": [
            {"id": "warm", "name": "Warm", "description": "Gets warm", "confidence": 0.7}
        ]
    }
    text, kwargs = backend.pipeline.calls[0]
    assert text == f"system:{hf_backend.SYSTEM_PROMPT}|user:Suggest properties"
    assert kwargs["do_sample"] is False
    assert kwargs["return_full_text"] is False
    assert kwargs["pad_token_id"] == 2


def test_backend_without_chat_template_prefixes_system_prompt(fake_hf_backend, monkeypatch):
    monkeypatch.setattr(FakeChatTokenizer, "chat_template", None)
    backend = hf_backend.HuggingFaceBackend(model_name="tiny")

    backend.generate("Suggest properties")

    text, kwargs = backend.pipeline.calls[0]
    assert text == f"{hf_backend.SYSTEM_PROMPT}\n\nSuggest properties"
    assert kwargs["do_sample"] is True
    assert kwargs["temperature"] == 0.2


def test_backend_rejects_completion_without_json(fake_hf_backend, monkeypatch):
    monkeypatch.setattr(FakePipeline, "response", "I cannot help with that.")
    backend = hf_backend.HuggingFaceBackend(model_name="tiny")

    with pytest.raises(CollaboratorError):
        backend.generate("Suggest properties")


def test_backend_suggester_round_trip(fake_hf_backend):
    suggester = hf_backend.HuggingFaceBackend(model_name="tiny").suggester()

    result = asyncio.run(
        suggester.suggest(
            [PredecessorContext(vertex_name="Boiler")],
            [EdgeContext(name="heats", description="Boiler heats the radiator")],
            VertexContext(vertex_name="Radiator"),
        )
    )

    assert [(s.id, s.confidence) for s in result] == [("warm", 0.7)]
