import math

import pytest

from mmrag.domain.errors import EmbeddingUnavailable
from mmrag.domain.similarity import cosine_similarity
from mmrag.infrastructure.embeddings import sentence_transformers_adapter as st_mod
from mmrag.infrastructure.embeddings.hashing_adapter import HashingEmbeddingAdapter
from mmrag.infrastructure.embeddings.sentence_transformers_adapter import (
    SentenceTransformerEmbeddingAdapter,
)


class _FakeST:
    """Stand-in for sentence_transformers.SentenceTransformer."""

    instances: list["_FakeST"] = []

    def __init__(self, model_name, device="cpu", local_files_only=False):  # noqa: ANN001
        self.model_name = model_name
        self.device = device
        self.local_files_only = local_files_only
        self.encode_kwargs: dict = {}
        _FakeST.instances.append(self)

    def get_sentence_embedding_dimension(self) -> int:
        return 4

    def encode(self, text, **kwargs):  # noqa: ANN001
        self.encode_kwargs = kwargs
        vec = [1.0] * 4
        norm = math.sqrt(sum(x * x for x in vec))
        return [x / norm for x in vec]


class _BrokenST:
    def __init__(self, *args, **kwargs):  # noqa: ANN002, ANN003
        raise OSError("model not found in cache")


def test_st_adapter_embeds_with_normalization(monkeypatch):
    _FakeST.instances.clear()
    monkeypatch.setattr(st_mod, "SentenceTransformer", _FakeST)
    adapter = SentenceTransformerEmbeddingAdapter(dimension=4, local_files_only=True)

    vec = adapter.embed("hello")

    assert len(vec) == 4
    assert math.isclose(math.sqrt(sum(x * x for x in vec)), 1.0, rel_tol=1e-6)
    model = _FakeST.instances[0]
    assert model.model_name == "sentence-transformers/all-MiniLM-L6-v2"
    assert model.local_files_only is True
    assert model.encode_kwargs["normalize_embeddings"] is True


def test_st_adapter_loads_model_once(monkeypatch):
    _FakeST.instances.clear()
    monkeypatch.setattr(st_mod, "SentenceTransformer", _FakeST)
    adapter = SentenceTransformerEmbeddingAdapter(dimension=4)
    adapter.embed("a")
    adapter.embed("b")
    assert len(_FakeST.instances) == 1


def test_st_adapter_reports_model_dimension(monkeypatch):
    _FakeST.instances.clear()
    monkeypatch.setattr(st_mod, "SentenceTransformer", _FakeST)
    adapter = SentenceTransformerEmbeddingAdapter()

    assert adapter.model_dimension() == 4
    adapter.dimension = 4
    adapter.embed("hello")
    assert len(_FakeST.instances) == 1


def test_st_adapter_dimension_mismatch(monkeypatch):
    monkeypatch.setattr(st_mod, "SentenceTransformer", _FakeST)
    with pytest.raises(EmbeddingUnavailable, match="dimension mismatch"):
        SentenceTransformerEmbeddingAdapter(dimension=384).embed("hello")


def test_st_adapter_without_library(monkeypatch):
    monkeypatch.setattr(st_mod, "SentenceTransformer", None)
    with pytest.raises(EmbeddingUnavailable, match="not installed"):
        SentenceTransformerEmbeddingAdapter().embed("hello")


def test_st_adapter_model_load_failure(monkeypatch):
    monkeypatch.setattr(st_mod, "SentenceTransformer", _BrokenST)
    with pytest.raises(EmbeddingUnavailable, match="Failed to load"):
        SentenceTransformerEmbeddingAdapter().embed("hello")


def test_hashing_adapter_is_deterministic_and_normalized():
    adapter = HashingEmbeddingAdapter(dimension=64)
    a = adapter.embed("refund policy for orders")
    b = adapter.embed("refund policy for orders")

    assert a == b
    assert len(a) == 64
    assert math.isclose(sum(x * x for x in a), 1.0, rel_tol=1e-9)


def test_hashing_adapter_shared_words_are_closer():
    adapter = HashingEmbeddingAdapter(dimension=256)
    query = adapter.embed("refund policy")
    near = adapter.embed("our refund policy lasts 30 days")
    far = adapter.embed("quarterly revenue grew")
    assert cosine_similarity(query, near) > cosine_similarity(query, far)


def test_hashing_adapter_rejects_empty_text():
    with pytest.raises(EmbeddingUnavailable):
        HashingEmbeddingAdapter().embed("")
