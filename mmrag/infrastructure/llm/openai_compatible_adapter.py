from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any, cast

from mmrag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from mmrag.domain.errors import GenerationUnavailable


@dataclass
class OpenAICompatibleLLMAdapter(LLMPort):
    base_url: str  # e.g. "http://localhost:8000/v1" for vLLM, or the OpenAI API
    api_key: str = "EMPTY"
    model: str = "meta-llama/Meta-Llama-3.1-8B-Instruct"

    def __post_init__(self) -> None:
        # Defer import of OpenAI to chat() to avoid hard dependency in tests
        self._client: Any | None = None

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.3, max_tokens: int = 800
    ) -> LLMResponse:
        try:
            if self._client is None:
                module = import_module("openai")
                OpenAI = module.OpenAI
                self._client = OpenAI(base_url=self.base_url, api_key=self.api_key)
            assert self._client is not None
            payload: Any = [{"role": m.role, "content": m.content} for m in messages]
            resp: Any = self._client.chat.completions.create(
                model=self.model,
                messages=cast(Any, payload),
                temperature=temperature,
                max_tokens=max_tokens,
            )
            choice = resp.choices[0]
            usage = getattr(resp, "usage", None)
            return LLMResponse(
                text=choice.message.content or "",
                finish_reason=choice.finish_reason or "stop",
                usage_tokens=getattr(usage, "total_tokens", None),
            )
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise GenerationUnavailable(f"LLM communication failed: {ex}", details=str(ex)) from ex

    def generate(self, prompt: str, temperature: float = 0.3, max_tokens: int = 800) -> str:
        msg = ChatMessage(role="user", content=prompt)
        return self.chat([msg], temperature=temperature, max_tokens=max_tokens).text
