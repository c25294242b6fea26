"""Tests for query DTOs and pipeline configuration."""

import pytest

from mmrag.application.dto.query_dto import NO_RESULTS_ANSWER, PipelineConfig, QueryRequest
from mmrag.domain.errors import ConfigurationError


def test_pipeline_defaults():
    cfg = PipelineConfig()
    assert cfg.similarity_threshold == 0.3
    assert cfg.max_results == 10
    assert cfg.temperature == 0.3
    assert cfg.max_output_tokens == 800
    assert cfg.embedding_dimension == 384
    assert cfg.no_results_answer == NO_RESULTS_ANSWER


def test_no_results_answer_text():
    assert NO_RESULTS_ANSWER == (
        "I could not find any relevant information in your documents to answer this question. "
        "Please ensure you have uploaded documents related to this topic."
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"similarity_threshold": -0.1},
        {"similarity_threshold": 1.5},
        {"max_results": 0},
        {"max_output_tokens": 0},
        {"embedding_dimension": 0},
        {"no_results_answer": "  "},
    ],
)
def test_invalid_config_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        PipelineConfig(**kwargs)


def test_threshold_bounds_are_inclusive():
    PipelineConfig(similarity_threshold=0.0)
    PipelineConfig(similarity_threshold=1.0)


def test_query_request_is_frozen():
    req = QueryRequest(question="q", user_id="u1")
    with pytest.raises(AttributeError):
        req.question = "other"  # type: ignore[misc]
