"""Tests for adapter selection in the composition root."""

from dataclasses import replace

import pytest

from mmrag.application.use_cases.query_knowledge_base import QueryKnowledgeBase
from mmrag.application.use_cases.record_query_history import RecordQueryHistory
from mmrag.config import composition
from mmrag.config.settings import AppSettings
from mmrag.domain.errors import ConfigurationError
from mmrag.infrastructure.embeddings import sentence_transformers_adapter as st_mod
from mmrag.infrastructure.embeddings.gemini_http_adapter import GeminiEmbeddingAdapter
from mmrag.infrastructure.embeddings.hashing_adapter import HashingEmbeddingAdapter
from mmrag.infrastructure.history.in_memory_history import InMemoryQueryHistory
from mmrag.infrastructure.llm.extractive_adapter import ExtractiveLLMAdapter
from mmrag.infrastructure.llm.gemini_http_adapter import GeminiLLMAdapter
from mmrag.infrastructure.llm.openai_compatible_adapter import OpenAICompatibleLLMAdapter
from mmrag.infrastructure.telemetry.noop import NoopTelemetry
from mmrag.infrastructure.vectorstore.in_memory_store import InMemoryFragmentStore
from mmrag.infrastructure.vectorstore.supabase_rpc_store import SupabaseFragmentStore


@pytest.fixture
def offline() -> AppSettings:
    return replace(
        AppSettings(),
        embedding_backend="hashing",
        llm_backend="extractive",
        vector_backend="memory",
        history_backend="memory",
        telemetry_enabled=False,
        vector_dimension=384,
    )


def test_offline_pipeline_wires_local_adapters(offline):
    uc = composition.build_query_use_case(offline)
    assert isinstance(uc, QueryKnowledgeBase)
    assert isinstance(uc.embedding, HashingEmbeddingAdapter)
    assert isinstance(uc.retriever.store, InMemoryFragmentStore)
    assert isinstance(uc.generator.llm, ExtractiveLLMAdapter)
    assert isinstance(uc.telemetry, NoopTelemetry)


def test_remote_backends(offline):
    settings = replace(
        offline,
        embedding_backend="gemini",
        llm_backend="gemini",
        vector_backend="supabase",
        google_api_key="g-key",
        supabase_url="https://x.supabase.co",
        supabase_service_key="svc",
    )
    embedding = composition.build_embedding(settings)
    assert isinstance(embedding, GeminiEmbeddingAdapter)
    assert embedding.dimension == 384
    assert isinstance(composition.build_llm(settings), GeminiLLMAdapter)
    assert isinstance(composition.build_fragment_store(settings), SupabaseFragmentStore)


def test_openai_backend(offline):
    llm = composition.build_llm(replace(offline, llm_backend="openai", llm_model="m"))
    assert isinstance(llm, OpenAICompatibleLLMAdapter)
    assert llm.model == "m"


@pytest.mark.parametrize(
    "builder, field_name",
    [
        (composition.build_embedding, "embedding_backend"),
        (composition.build_llm, "llm_backend"),
        (composition.build_fragment_store, "vector_backend"),
        (composition.build_query_history, "history_backend"),
    ],
)
def test_unknown_backend_is_configuration_error(offline, builder, field_name):
    with pytest.raises(ConfigurationError):
        builder(replace(offline, **{field_name: "bogus"}))


def test_missing_credentials_are_configuration_errors(offline):
    with pytest.raises(ConfigurationError, match="GOOGLE_AI_API_KEY"):
        composition.build_embedding(replace(offline, embedding_backend="gemini", google_api_key=""))
    with pytest.raises(ConfigurationError, match="SUPABASE_URL"):
        composition.build_fragment_store(
            replace(offline, vector_backend="supabase", supabase_url="")
        )


class _FakeMiniLM:
    """384-d stand-in for sentence_transformers.SentenceTransformer."""

    def __init__(self, model_name, device="cpu", local_files_only=False):  # noqa: ANN001
        self.model_name = model_name

    def get_sentence_embedding_dimension(self) -> int:
        return 384

    def encode(self, text, **kwargs):  # noqa: ANN001
        return [1.0] + [0.0] * 383


def test_model_dimension_mismatch_fails_at_startup(offline, monkeypatch):
    monkeypatch.setattr(st_mod, "SentenceTransformer", _FakeMiniLM)
    settings = replace(offline, embedding_backend="sentence_transformers", vector_dimension=768)

    with pytest.raises(ConfigurationError, match="VECTOR_DIMENSION 768"):
        composition.build_query_use_case(settings)


def test_model_dimension_match_starts(offline, monkeypatch):
    monkeypatch.setattr(st_mod, "SentenceTransformer", _FakeMiniLM)
    settings = replace(offline, embedding_backend="sentence_transformers", vector_dimension=384)

    uc = composition.build_query_use_case(settings)

    assert uc.embedding.dimension == 384


def test_unloadable_model_fails_at_startup(offline, monkeypatch):
    monkeypatch.setattr(st_mod, "SentenceTransformer", None)
    with pytest.raises(ConfigurationError, match="not installed"):
        composition.build_query_use_case(replace(offline, embedding_backend="sentence_transformers"))


def test_history_backends(offline):
    recorder = composition.build_record_history(offline)
    assert isinstance(recorder, RecordQueryHistory)
    assert isinstance(recorder.history, InMemoryQueryHistory)
    assert composition.build_record_history(replace(offline, history_backend="none")) is None
