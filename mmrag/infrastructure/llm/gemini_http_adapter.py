from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from mmrag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from mmrag.domain.errors import GenerationUnavailable

logger = logging.getLogger(__name__)


@dataclass
class GeminiLLMAdapter(LLMPort):
    """Google Generative Language ``generateContent`` over plain HTTP."""

    api_key: str
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout_s: float = 60.0
    client: httpx.Client | None = field(default=None, repr=False)

    def _post(self, url: str, body: dict[str, Any]) -> httpx.Response:
        if self.client is not None:
            return self.client.post(url, json=body, params={"key": self.api_key})
        with httpx.Client(timeout=self.timeout_s) as client:
            return client.post(url, json=body, params={"key": self.api_key})

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.3, max_tokens: int = 800
    ) -> LLMResponse:
        logger.info("Calling Gemini API: model=%s, temp=%s", self.model, temperature)

        system_instruction = None
        contents = []
        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
            else:
                # Gemini calls the assistant role "model"
                role = "model" if msg.role == "assistant" else "user"
                contents.append({"role": role, "parts": [{"text": msg.content}]})

        body: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = self._post(url, body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Gemini HTTP error: %s", e)
            raise GenerationUnavailable(
                f"Gemini API error: {e.response.status_code}", details=e.response.text
            ) from e
        except httpx.TimeoutException as e:
            logger.error("Gemini request timed out")
            raise GenerationUnavailable("Gemini API timed out") from e
        except httpx.RequestError as e:
            logger.error("Gemini connection error: %s", e)
            raise GenerationUnavailable("Could not connect to Gemini API") from e
        except ValueError as e:
            raise GenerationUnavailable("Invalid JSON from Gemini API") from e

        if not isinstance(data, dict):
            raise GenerationUnavailable("Malformed completion from Gemini API")
        candidates = data.get("candidates")
        if not candidates:
            reason = (data.get("promptFeedback") or {}).get("blockReason")
            if reason:
                raise GenerationUnavailable(f"Request blocked by Gemini: {reason}")
            raise GenerationUnavailable("No response from Gemini API")

        try:
            candidate = candidates[0]
            text = candidate["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationUnavailable("Malformed completion from Gemini API") from e
        if not isinstance(text, str) or not text.strip():
            raise GenerationUnavailable("Empty text in Gemini response")

        usage = (data.get("usageMetadata") or {}).get("totalTokenCount")
        logger.info("Gemini response: %d chars", len(text))
        return LLMResponse(
            text=text,
            finish_reason=str(candidate.get("finishReason", "STOP")).lower(),
            usage_tokens=usage,
        )

    def generate(self, prompt: str, temperature: float = 0.3, max_tokens: int = 800) -> str:
        msg = ChatMessage(role="user", content=prompt)
        return self.chat([msg], temperature=temperature, max_tokens=max_tokens).text
