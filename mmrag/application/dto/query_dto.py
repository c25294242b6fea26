# mmrag/application/dto/query_dto.py
from __future__ import annotations

from dataclasses import dataclass

from mmrag.domain.errors import ConfigurationError

NO_RESULTS_ANSWER = (
    "I could not find any relevant information in your documents to answer this question. "
    "Please ensure you have uploaded documents related to this topic."
)


@dataclass(frozen=True)
class QueryRequest:
    """
    DTO for querying the knowledge base.

    - question: user question (non-empty, not whitespace-only)
    - user_id:  already-authenticated owner identifier; scopes retrieval to their documents
    """

    question: str | None
    user_id: str | None


@dataclass(frozen=True)
class PipelineConfig:
    """
    Per-deployment knobs passed to the orchestrator at construction.

    - similarity_threshold: fragments must score strictly above this (0-1)
    - max_results:          cap on retrieved fragments
    - temperature / max_output_tokens: generation sampling budget
    - embedding_dimension:  must match the fragment store's vector column
    - no_results_answer:    fixed reply when nothing clears the threshold
    """

    similarity_threshold: float = 0.3
    max_results: int = 10
    temperature: float = 0.3
    max_output_tokens: int = 800
    embedding_dimension: int = 384
    no_results_answer: str = NO_RESULTS_ANSWER

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ConfigurationError(
                f"similarity_threshold must be in [0, 1], got {self.similarity_threshold}"
            )
        if self.max_results <= 0:
            raise ConfigurationError(f"max_results must be > 0, got {self.max_results}")
        if self.max_output_tokens <= 0:
            raise ConfigurationError(
                f"max_output_tokens must be > 0, got {self.max_output_tokens}"
            )
        if self.embedding_dimension <= 0:
            raise ConfigurationError(
                f"embedding_dimension must be > 0, got {self.embedding_dimension}"
            )
        if not self.no_results_answer.strip():
            raise ConfigurationError("no_results_answer must not be empty")
