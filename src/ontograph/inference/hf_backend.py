from __future__ import annotations

from typing import List, Optional
import torch
from transformers import (
    AutoModelForCausalLM,
    AutoTokenizer,
    TextGenerationPipeline,
)

from ontograph.config.settings import SuggesterConfig
from ontograph.inference.suggester import (
    LLMPropertySuggester,
    PromptBuilder,
    SuggestionList,
    parse_suggestions,
)


SYSTEM_PROMPT = (
    "You extend ontology graphs. Answer with a single JSON object "
    '{"suggestions": [{"id", "name", "description", "confidence"}]} and nothing else.'
)


class HuggingFaceBackend:
    """
    HuggingFace causal-LM backend for property suggestions.

    Wraps the prompt in the model's chat template with a JSON-only
    system message, and normalizes the completion to the
    ``{"suggestions": [...]}`` object. Completions with no usable JSON
    raise ``CollaboratorError``. Requires the ``hf`` extra.
    """

    def __init__(
        self,
        *,
        model_name: str,
        hf_token: Optional[str] = None,
        device: Optional[str] = None,
        max_new_tokens: int = 600,
        temperature: float = 0.2,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:

        if device is None:
            device = "cuda" if torch.cuda.is_available() else "cpu"

        auth = {"token": hf_token} if hf_token else {}

        self.tokenizer = AutoTokenizer.from_pretrained(model_name, use_fast=True, **auth)
        if self.tokenizer.pad_token is None:
            self.tokenizer.pad_token = self.tokenizer.eos_token

        on_gpu = device == "cuda"
        self.model = AutoModelForCausalLM.from_pretrained(
            model_name,
            torch_dtype=torch.float16 if on_gpu else torch.float32,
            device_map="auto" if on_gpu else None,
            **auth,
        )

        # device_map="auto" already placed the model on GPU
        pipeline_kwargs = {} if on_gpu else {"device": -1}
        self.pipeline = TextGenerationPipeline(
            model=self.model,
            tokenizer=self.tokenizer,
            **pipeline_kwargs,
        )

        self.max_new_tokens = max_new_tokens
        self.temperature = temperature
        self.system_prompt = system_prompt

    @classmethod
    def from_config(cls, config: SuggesterConfig) -> "HuggingFaceBackend":
        return cls(
            model_name=config.model_name,
            hf_token=config.hf_token,
            max_new_tokens=config.max_new_tokens,
            temperature=config.temperature,
        )

    def suggester(self, prompt_builder: Optional[PromptBuilder] = None) -> LLMPropertySuggester:
        return LLMPropertySuggester(self, prompt_builder)

    # ------------------------------------------------------------------
    # GenerationBackend
    # ------------------------------------------------------------------

    def generate(self, prompt: str) -> str:
        completion = self._complete(self._chat(prompt))
        return SuggestionList(suggestions=parse_suggestions(completion)).model_dump_json()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _chat(self, prompt: str) -> str:
        if not getattr(self.tokenizer, "chat_template", None):
            return f"{self.system_prompt}\n\n{prompt}"

        messages: List[dict] = [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": prompt},
        ]
        return self.tokenizer.apply_chat_template(
            messages,
            tokenize=False,
            add_generation_prompt=True,
        )

    def _complete(self, text: str) -> str:
        if self.temperature > 0:
            sampling = {"do_sample": True, "temperature": self.temperature}
        else:
            sampling = {"do_sample": False}

        out = self.pipeline(
            text,
            max_new_tokens=self.max_new_tokens,
            pad_token_id=self.tokenizer.eos_token_id,
            eos_token_id=self.tokenizer.eos_token_id,
            return_full_text=False,
            **sampling,
        )
        return out[0]["generated_text"].strip() if out else ""
