"""Domain errors (typed).

Adapters raise these; use cases turn them into ``Result.failure``; the HTTP
layer maps them onto the JSON error envelope.
"""

from typing import Any


class DomainError(Exception):
    """Base class for domain-specific errors."""

    def __init__(self, message: str = "", details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequest(DomainError):
    """Caller error: empty question or missing owner identifier."""


class ConfigurationError(DomainError):
    """Misconfiguration detected while wiring the pipeline (fatal at startup)."""


class EmbeddingUnavailable(DomainError):
    """Embedding capability unreachable or returned malformed data."""


class RetrievalUnavailable(DomainError):
    """Fragment store search failed."""


class GenerationUnavailable(DomainError):
    """Text generation capability unreachable or returned an empty completion."""


class HistoryUnavailable(DomainError):
    """Query history could not be persisted."""
