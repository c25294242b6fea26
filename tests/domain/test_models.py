"""Tests for domain value objects."""

import pytest

from mmrag.domain.models import (
    Citation,
    Fragment,
    Modality,
    QueryResult,
    RankedFragment,
    RetrievedChunkRef,
)


def make_fragment(**overrides) -> Fragment:
    fields = dict(
        id="c1",
        document_id="d1",
        text="Refunds within 30 days.",
        chunk_index=2,
        filename="policy.pdf",
        modality=Modality.PDF,
        metadata={"page_number": 4},
    )
    fields.update(overrides)
    return Fragment(**fields)


@pytest.mark.parametrize(
    ("modality", "label"),
    [
        (Modality.PDF, "Pdf"),
        (Modality.DOCX, "Docx"),
        (Modality.TXT, "Txt"),
        (Modality.IMAGE, "Image"),
        (Modality.AUDIO, "Audio"),
    ],
)
def test_modality_label_capitalizes_first_character_only(modality, label):
    assert modality.label == label


def test_modality_rejects_unknown_tag():
    with pytest.raises(ValueError):
        Modality("video")


def test_fragment_is_frozen():
    frag = make_fragment()
    with pytest.raises(AttributeError):
        frag.text = "changed"  # type: ignore[misc]


def test_retrieved_chunk_ref_from_ranked():
    ranked = RankedFragment(fragment=make_fragment(), similarity=0.81)
    ref = RetrievedChunkRef.from_ranked(ranked)
    assert ref == RetrievedChunkRef(chunk_id="c1", document_id="d1", score=0.81)


def test_query_result_to_dict_shape():
    result = QueryResult(
        answer="Refunds are accepted within 30 days.",
        citations=(Citation(source="policy.pdf", type="Pdf", reference="Page 4", document_id="d1"),),
        retrieved_chunks=(RetrievedChunkRef(chunk_id="c1", document_id="d1", score=0.81),),
    )
    assert result.to_dict() == {
        "answer": "Refunds are accepted within 30 days.",
        "citations": [
            {"source": "policy.pdf", "type": "Pdf", "reference": "Page 4", "document_id": "d1"}
        ],
        "retrieved_chunks": [{"chunk_id": "c1", "document_id": "d1", "score": 0.81}],
    }


def test_empty_query_result_has_empty_lists():
    assert QueryResult(answer="nothing").to_dict() == {
        "answer": "nothing",
        "citations": [],
        "retrieved_chunks": [],
    }
