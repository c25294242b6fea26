"""Composition root: chooses adapters from settings and wires the use cases."""

import logging

from mmrag.application.ports.embedding_port import EmbeddingPort
from mmrag.application.ports.fragment_store_port import FragmentStorePort
from mmrag.application.ports.llm_port import LLMPort
from mmrag.application.ports.query_history_port import QueryHistoryPort
from mmrag.application.ports.telemetry_port import TelemetryPort
from mmrag.application.use_cases.query_knowledge_base import QueryKnowledgeBase
from mmrag.application.use_cases.record_query_history import RecordQueryHistory
from mmrag.config.settings import AppSettings
from mmrag.domain.errors import ConfigurationError, EmbeddingUnavailable
from mmrag.infrastructure.embeddings.gemini_http_adapter import GeminiEmbeddingAdapter
from mmrag.infrastructure.embeddings.hashing_adapter import HashingEmbeddingAdapter
from mmrag.infrastructure.embeddings.sentence_transformers_adapter import (
    SentenceTransformerEmbeddingAdapter,
)
from mmrag.infrastructure.history.in_memory_history import InMemoryQueryHistory
from mmrag.infrastructure.history.supabase_history import SupabaseQueryHistory
from mmrag.infrastructure.llm.extractive_adapter import ExtractiveLLMAdapter
from mmrag.infrastructure.llm.gemini_http_adapter import GeminiLLMAdapter
from mmrag.infrastructure.llm.openai_compatible_adapter import OpenAICompatibleLLMAdapter
from mmrag.infrastructure.telemetry.noop import NoopTelemetry
from mmrag.infrastructure.telemetry.otel_adapter import OpenTelemetryAdapter, OtelConfig
from mmrag.infrastructure.vectorstore.in_memory_store import InMemoryFragmentStore
from mmrag.infrastructure.vectorstore.supabase_rpc_store import SupabaseFragmentStore

logger = logging.getLogger(__name__)


def _require(value: str, env_name: str, backend: str) -> str:
    if not value:
        raise ConfigurationError(f"{env_name} must be set for the '{backend}' backend")
    return value


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    backend = settings.embedding_backend

    if backend == "gemini":
        return GeminiEmbeddingAdapter(
            api_key=_require(settings.google_api_key, "GOOGLE_AI_API_KEY", backend),
            model=settings.gemini_embedding_model,
            base_url=settings.google_base_url,
            dimension=settings.vector_dimension,
            task_type=settings.gemini_embedding_task_type,
            timeout_s=settings.http_timeout_s,
        )

    if backend == "sentence_transformers":
        adapter = SentenceTransformerEmbeddingAdapter(
            model_name=settings.st_embedding_model,
            device=settings.embedding_device,
        )
        # the model decides the vector size, not VECTOR_DIMENSION
        try:
            adapter.dimension = adapter.model_dimension()
        except EmbeddingUnavailable as ex:
            raise ConfigurationError(str(ex)) from ex
        return adapter

    if backend == "hashing":
        return HashingEmbeddingAdapter(dimension=settings.vector_dimension)

    raise ConfigurationError(f"Unknown EMBEDDING_BACKEND '{backend}'")


def build_llm(settings: AppSettings) -> LLMPort:
    backend = settings.llm_backend

    if backend == "gemini":
        return GeminiLLMAdapter(
            api_key=_require(settings.google_api_key, "GOOGLE_AI_API_KEY", backend),
            model=settings.gemini_llm_model,
            base_url=settings.google_base_url,
            timeout_s=settings.http_timeout_s,
        )

    if backend == "openai":
        return OpenAICompatibleLLMAdapter(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
        )

    if backend == "extractive":
        return ExtractiveLLMAdapter()

    raise ConfigurationError(f"Unknown LLM_BACKEND '{backend}'")


def build_fragment_store(settings: AppSettings) -> FragmentStorePort:
    backend = settings.vector_backend

    if backend == "supabase":
        return SupabaseFragmentStore(
            url=_require(settings.supabase_url, "SUPABASE_URL", backend),
            service_key=_require(
                settings.supabase_service_key, "SUPABASE_SERVICE_ROLE_KEY", backend
            ),
            timeout_s=settings.http_timeout_s,
        )

    if backend == "memory":
        return InMemoryFragmentStore(dimension=settings.vector_dimension)

    raise ConfigurationError(f"Unknown VECTOR_BACKEND '{backend}'")


def build_query_history(settings: AppSettings) -> QueryHistoryPort | None:
    backend = settings.history_backend

    if backend == "supabase":
        return SupabaseQueryHistory(
            url=_require(settings.supabase_url, "SUPABASE_URL", backend),
            service_key=_require(
                settings.supabase_service_key, "SUPABASE_SERVICE_ROLE_KEY", backend
            ),
            timeout_s=settings.http_timeout_s,
        )

    if backend == "memory":
        return InMemoryQueryHistory()

    if backend == "none":
        return None

    raise ConfigurationError(f"Unknown HISTORY_BACKEND '{backend}'")


def build_telemetry(settings: AppSettings) -> TelemetryPort:
    if not settings.telemetry_enabled:
        return NoopTelemetry()
    cfg = OtelConfig(
        service_name="mmrag-query",
        otlp_endpoint=settings.otlp_endpoint or None,
        environment=settings.telemetry_environment,
    )
    return OpenTelemetryAdapter(cfg)


def check_dimensions(embedding: EmbeddingPort, settings: AppSettings) -> None:
    """Embedding size must equal the store's vector column; a mismatch is fatal."""
    if embedding.dimension != settings.vector_dimension:
        raise ConfigurationError(
            f"Embedding dimension {embedding.dimension} does not match "
            f"VECTOR_DIMENSION {settings.vector_dimension}"
        )


def build_query_use_case(settings: AppSettings | None = None) -> QueryKnowledgeBase:
    settings = settings or AppSettings()
    embedding = build_embedding(settings)
    check_dimensions(embedding, settings)
    use_case = QueryKnowledgeBase(
        embedding=embedding,
        fragment_store=build_fragment_store(settings),
        llm=build_llm(settings),
        config=settings.pipeline_config(),
        telemetry=build_telemetry(settings),
    )
    logger.info(
        "Query pipeline ready: embedding=%s llm=%s store=%s threshold=%.2f max_results=%d",
        settings.embedding_backend,
        settings.llm_backend,
        settings.vector_backend,
        settings.match_threshold,
        settings.match_count,
    )
    return use_case


def build_record_history(settings: AppSettings | None = None) -> RecordQueryHistory | None:
    settings = settings or AppSettings()
    history = build_query_history(settings)
    return RecordQueryHistory(history) if history is not None else None
