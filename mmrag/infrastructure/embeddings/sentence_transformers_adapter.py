from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, cast

from mmrag.application.ports.embedding_port import EmbeddingPort
from mmrag.domain.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)

# Lazy import for testability (allow monkeypatching fake SentenceTransformer)
SentenceTransformer: Any | None
try:  # pragma: no cover - exercised via tests with monkeypatch
    from sentence_transformers import SentenceTransformer as _SentenceTransformer
except Exception:  # noqa: BLE001
    SentenceTransformer = None
else:  # pragma: no cover - exercised in integration
    SentenceTransformer = _SentenceTransformer


@dataclass
class SentenceTransformerEmbeddingAdapter(EmbeddingPort):
    """Local Sentence-Transformers embeddings; MiniLM-L6 matches the 384-d vector column."""

    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"  # switch to "cuda" when available
    dimension: int = 384
    local_files_only: bool = False  # support offline deployments
    _model: Any | None = None

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        if SentenceTransformer is None:
            raise EmbeddingUnavailable("sentence-transformers not installed.")
        try:
            self._model = SentenceTransformer(
                self.model_name,
                device=self.device,
                local_files_only=self.local_files_only,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingUnavailable(
                f"Failed to load embedding model '{self.model_name}': {ex}"
            ) from ex
        logger.info("Loaded embedding model %s on %s", self.model_name, self.device)
        return self._model

    def model_dimension(self) -> int:
        """Load the model and report the size of the vectors it produces."""
        model = self._ensure_model()
        dim = model.get_sentence_embedding_dimension()
        if not dim:
            raise EmbeddingUnavailable(
                f"Embedding model '{self.model_name}' does not report its dimension"
            )
        return int(dim)

    def embed(self, text: str) -> list[float]:
        if not text:
            raise EmbeddingUnavailable("cannot embed empty text")
        model = self._ensure_model()
        try:
            raw_vector = model.encode(
                text,
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
            vector = [float(x) for x in cast(Sequence[float], raw_vector)]
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingUnavailable(f"Embedding query failed: {ex}") from ex
        if len(vector) != self.dimension:
            raise EmbeddingUnavailable(
                f"Embedding dimension mismatch: expected {self.dimension}, got {len(vector)}"
            )
        return vector
