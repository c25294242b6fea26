from collections.abc import Sequence
from dataclasses import dataclass

from mmrag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse

_CONTEXT_START = "Retrieved Context:\n"
_CONTEXT_END = "\n\nProvide a well-structured answer"


@dataclass
class ExtractiveLLMAdapter(LLMPort):
    """Deterministic stand-in for a generation model: answers with the retrieved context.

    Useful offline and in tests; the reply is the context block found in the
    last user message, or that whole message when no context block is present.
    """

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.3, max_tokens: int = 800
    ) -> LLMResponse:
        last_user = next((m.content for m in reversed(messages) if m.role == "user"), "")
        start = last_user.find(_CONTEXT_START)
        if start == -1:
            return LLMResponse(text=last_user)
        start += len(_CONTEXT_START)
        end = last_user.find(_CONTEXT_END, start)
        text = last_user[start:] if end == -1 else last_user[start:end]
        return LLMResponse(text=text.strip())

    def generate(self, prompt: str, temperature: float = 0.3, max_tokens: int = 800) -> str:
        msg = ChatMessage(role="user", content=prompt)
        return self.chat([msg], temperature=temperature, max_tokens=max_tokens).text
