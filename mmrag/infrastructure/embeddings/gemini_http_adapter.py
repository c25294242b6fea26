from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import httpx

from mmrag.application.ports.embedding_port import EmbeddingPort
from mmrag.domain.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)


@dataclass
class GeminiEmbeddingAdapter(EmbeddingPort):
    """Google Generative Language ``embedContent`` over plain HTTP."""

    api_key: str
    model: str = "text-embedding-004"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    dimension: int = 384
    task_type: str = "RETRIEVAL_DOCUMENT"
    timeout_s: float = 30.0
    client: httpx.Client | None = field(default=None, repr=False)

    def _post(self, url: str, body: dict[str, Any]) -> httpx.Response:
        if self.client is not None:
            return self.client.post(url, json=body, params={"key": self.api_key})
        with httpx.Client(timeout=self.timeout_s) as client:
            return client.post(url, json=body, params={"key": self.api_key})

    def embed(self, text: str) -> list[float]:
        if not text:
            raise EmbeddingUnavailable("cannot embed empty text")
        url = f"{self.base_url}/models/{self.model}:embedContent"
        body = {
            "content": {"parts": [{"text": text}]},
            "taskType": self.task_type,
            "outputDimensionality": self.dimension,
        }
        try:
            response = self._post(url, body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Gemini embedding request failed: %s", e)
            raise EmbeddingUnavailable(
                f"Embedding service error: {e.response.status_code}",
                details=e.response.text,
            ) from e
        except httpx.RequestError as e:
            logger.error("Gemini embedding connection error: %s", e)
            raise EmbeddingUnavailable("Could not connect to embedding service") from e
        except ValueError as e:
            raise EmbeddingUnavailable("Invalid JSON from embedding service") from e

        try:
            values = data["embedding"]["values"]
        except (KeyError, TypeError) as e:
            logger.error("Unexpected Gemini embedding response format: %s", e)
            raise EmbeddingUnavailable("Invalid response from embedding service") from e
        return _validate(values, self.dimension)


def _validate(values: Any, dimension: int) -> list[float]:
    if not isinstance(values, list) or len(values) != dimension:
        got = len(values) if isinstance(values, list) else type(values).__name__
        raise EmbeddingUnavailable(f"Embedding dimension mismatch: expected {dimension}, got {got}")
    out: list[float] = []
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            raise EmbeddingUnavailable("Embedding contains non-numeric values")
        out.append(float(v))
    return out
