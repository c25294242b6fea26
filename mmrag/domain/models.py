# mmrag/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mmrag.domain.types import Vector


class Modality(str, Enum):
    """Source modality of an ingested document."""

    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"
    IMAGE = "image"
    AUDIO = "audio"

    @property
    def label(self) -> str:
        # Only the first character is upper-cased: "pdf" -> "Pdf", not "PDF".
        return self.value[:1].upper() + self.value[1:]


class DocumentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class Fragment:
    """
    Immutable unit of previously extracted content belonging to a document.

    - id:           chunk identifier
    - document_id:  owning document identifier
    - text:         extracted text content
    - chunk_index:  position of the fragment within its document
    - metadata:     free-form mapping (may carry page_number, timestamp, or neither)
    - filename:     source document filename
    - modality:     source modality tag
    """

    id: str
    document_id: str
    text: str
    chunk_index: int
    filename: str
    modality: Modality
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RankedFragment:
    """A fragment with its cosine similarity to the query."""

    fragment: Fragment
    similarity: float


@dataclass(frozen=True)
class StoredFragment:
    """Row as held by a fragment store: fragment plus ownership and index state."""

    fragment: Fragment
    owner_id: str
    status: DocumentStatus = DocumentStatus.COMPLETED
    embedding: Vector | None = None


@dataclass(frozen=True)
class Citation:
    """Citation reference for a generated answer."""

    source: str
    type: str
    reference: str
    document_id: str

    def to_dict(self) -> dict[str, str]:
        return {
            "source": self.source,
            "type": self.type,
            "reference": self.reference,
            "document_id": self.document_id,
        }


@dataclass(frozen=True)
class RetrievedChunkRef:
    """Retrieval trace entry: which chunk was used and how similar it was."""

    chunk_id: str
    document_id: str
    score: float

    @classmethod
    def from_ranked(cls, ranked: RankedFragment) -> RetrievedChunkRef:
        return cls(
            chunk_id=ranked.fragment.id,
            document_id=ranked.fragment.document_id,
            score=ranked.similarity,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"chunk_id": self.chunk_id, "document_id": self.document_id, "score": self.score}


@dataclass(frozen=True)
class QueryResult:
    """Answer, citations and retrieval trace for one query execution."""

    answer: str
    citations: tuple[Citation, ...] = ()
    retrieved_chunks: tuple[RetrievedChunkRef, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "citations": [c.to_dict() for c in self.citations],
            "retrieved_chunks": [r.to_dict() for r in self.retrieved_chunks],
        }
