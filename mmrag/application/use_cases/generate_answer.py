# mmrag/application/use_cases/generate_answer.py
from __future__ import annotations

import logging

from mmrag.application.ports.llm_port import LLMPort
from mmrag.domain.errors import DomainError, GenerationUnavailable

logger = logging.getLogger(__name__)

# Part of the external contract: keep verbatim.
SYSTEM_PROMPT = """You are an advanced Multimodal Retrieval-Augmented Generation (RAG) Assistant for an Intelligence Centre.
You analyze and reason across multiple data types including text, PDFs, images, videos, and audio transcripts.

Your goal is to accurately answer the user's query using ONLY the provided retrieved context.
Every statement must be grounded in the source data. Do not make assumptions or add information not present in the context.

Provide a clear, concise answer in 2-3 paragraphs that directly addresses the query.
If the context doesn't contain sufficient information, clearly state this limitation."""


def build_prompt(question: str, context_block: str) -> str:
    return (
        f"{SYSTEM_PROMPT}\n\n"
        f"User Query: {question}\n\n"
        f"Retrieved Context:\n{context_block}\n\n"
        "Provide a well-structured answer based solely on the above context."
    )


class AnswerGenerator:
    """
    Produces a grounded answer from the question and the assembled context.

    Grounding is a prompt-level contract only; the completion is returned as-is
    and never checked against the context.
    """

    def __init__(self, llm: LLMPort, temperature: float = 0.3, max_tokens: int = 800) -> None:
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens

    def generate(self, question: str, context_block: str) -> str:
        prompt = build_prompt(question, context_block)
        try:
            text = self.llm.generate(
                prompt, temperature=self.temperature, max_tokens=self.max_tokens
            )
        except GenerationUnavailable:
            raise
        except DomainError as ex:
            raise GenerationUnavailable(f"llm generation failed: {ex}", details=ex.details) from ex
        except Exception as ex:  # noqa: BLE001
            raise GenerationUnavailable(f"llm generation failed: {ex}", details=str(ex)) from ex

        if not isinstance(text, str) or not text.strip():
            raise GenerationUnavailable("llm returned an empty completion")
        logger.debug("Generated answer: %d chars", len(text))
        return text
