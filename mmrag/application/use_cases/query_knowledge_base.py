# mmrag/application/use_cases/query_knowledge_base.py
from __future__ import annotations

import logging
import math
import time

from mmrag.application.dto.query_dto import PipelineConfig, QueryRequest
from mmrag.application.ports.embedding_port import EmbeddingPort
from mmrag.application.ports.fragment_store_port import FragmentStorePort
from mmrag.application.ports.llm_port import LLMPort
from mmrag.application.ports.telemetry_port import TelemetryPort
from mmrag.application.use_cases.generate_answer import AnswerGenerator
from mmrag.application.use_cases.retrieve_fragments import FragmentRetriever
from mmrag.domain.errors import (
    DomainError,
    EmbeddingUnavailable,
    GenerationUnavailable,
    InvalidRequest,
    RetrievalUnavailable,
)
from mmrag.domain.models import QueryResult, RetrievedChunkRef
from mmrag.domain.services.citations import build_citations
from mmrag.domain.services.context import assemble_context
from mmrag.domain.types import Result

logger = logging.getLogger(__name__)


class QueryKnowledgeBase:
    """
    Application Use-Case orchestrating one RAG query.

    Validating -> Embedding -> Retrieving -> (EmptyResult | Grounding) -> Responding.
    Every upstream failure short-circuits into Result.failure; partial answers are
    never returned. No retries happen here.
    """

    def __init__(
        self,
        embedding: EmbeddingPort,
        fragment_store: FragmentStorePort,
        llm: LLMPort,
        config: PipelineConfig | None = None,
        telemetry: TelemetryPort | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self.embedding = embedding
        self.retriever = FragmentRetriever(fragment_store)
        self.generator = AnswerGenerator(
            llm,
            temperature=self.config.temperature,
            max_tokens=self.config.max_output_tokens,
        )
        self.telemetry = telemetry

    def execute(self, req: QueryRequest) -> Result[QueryResult, DomainError]:
        started = time.perf_counter()
        result = self._run(req)
        status = "success" if result.ok else type(result.error).__name__
        self._record(status, started, result)
        return result

    def _run(self, req: QueryRequest) -> Result[QueryResult, DomainError]:
        # 1) Validate
        if not isinstance(req.question, str) or not req.question.strip():
            return Result.failure(InvalidRequest("Query and user_id are required"))
        if not isinstance(req.user_id, str) or not req.user_id:
            return Result.failure(InvalidRequest("Query and user_id are required"))
        logger.debug("Validated query for user %s", req.user_id)

        # 2) Embed query
        try:
            q_vec = self.embedding.embed(req.question)
        except EmbeddingUnavailable as ex:
            return Result.failure(ex)
        except Exception as ex:  # noqa: BLE001
            return Result.failure(EmbeddingUnavailable(f"embedding failed: {ex}", details=str(ex)))
        if len(q_vec) != self.config.embedding_dimension or not all(
            isinstance(x, (int, float)) and math.isfinite(x) for x in q_vec
        ):
            return Result.failure(
                EmbeddingUnavailable(
                    f"malformed embedding: expected {self.config.embedding_dimension} "
                    f"finite floats, got {len(q_vec)} values"
                )
            )

        # 3) Retrieve
        try:
            ranked = self.retriever.search(
                q_vec,
                owner_id=req.user_id,
                threshold=self.config.similarity_threshold,
                max_results=self.config.max_results,
            )
        except RetrievalUnavailable as ex:
            return Result.failure(ex)
        logger.debug("Retrieved %d fragments", len(ranked))

        # 4a) Nothing cleared the threshold: fixed answer, no generation call
        if not ranked:
            logger.info("No relevant fragments for user %s", req.user_id)
            return Result.success(QueryResult(answer=self.config.no_results_answer))

        # 4b) Ground: context and citations share the same order
        context = assemble_context(ranked)
        citations = build_citations(ranked)
        try:
            answer = self.generator.generate(req.question, context)
        except GenerationUnavailable as ex:
            return Result.failure(ex)

        # 5) Respond
        logger.info(
            "Answered query for user %s with %d citations", req.user_id, len(citations)
        )
        return Result.success(
            QueryResult(
                answer=answer,
                citations=tuple(citations),
                retrieved_chunks=tuple(RetrievedChunkRef.from_ranked(r) for r in ranked),
            )
        )

    def _record(
        self, status: str, started: float, result: Result[QueryResult, DomainError]
    ) -> None:
        if self.telemetry is None:
            return
        tags = {"status": status}
        self.telemetry.incr("rag.queries.total", tags)
        self.telemetry.observe("rag.query.latency_ms", (time.perf_counter() - started) * 1000, tags)
        if result.ok and result.value is not None:
            self.telemetry.observe(
                "rag.fragments.retrieved", float(len(result.value.retrieved_chunks)), tags
            )
