"""Tests for threshold/order/cap ranking of fragments."""

from mmrag.domain.models import Fragment, Modality, RankedFragment
from mmrag.domain.services.ranking import rank_fragments


def ranked(id_: str, score: float) -> RankedFragment:
    return RankedFragment(
        fragment=Fragment(
            id=id_,
            document_id=f"doc-{id_}",
            text=f"text {id_}",
            chunk_index=0,
            filename="a.txt",
            modality=Modality.TXT,
        ),
        similarity=score,
    )


def ids(items: list[RankedFragment]) -> list[str]:
    return [r.fragment.id for r in items]


def test_sorts_by_descending_similarity():
    out = rank_fragments([ranked("a", 0.4), ranked("b", 0.9), ranked("c", 0.6)], 0.3, 10)
    assert ids(out) == ["b", "c", "a"]


def test_threshold_is_strict():
    out = rank_fragments([ranked("a", 0.3), ranked("b", 0.30001)], 0.3, 10)
    assert ids(out) == ["b"]


def test_ties_keep_incoming_order():
    out = rank_fragments(
        [ranked("a", 0.5), ranked("b", 0.7), ranked("c", 0.5), ranked("d", 0.7)], 0.0, 10
    )
    assert ids(out) == ["b", "d", "a", "c"]


def test_caps_results():
    out = rank_fragments([ranked(str(i), 0.5 + i / 100) for i in range(20)], 0.3, 10)
    assert len(out) == 10
    assert out[0].fragment.id == "19"


def test_empty_and_non_positive_cap():
    assert rank_fragments([], 0.3, 10) == []
    assert rank_fragments([ranked("a", 0.9)], 0.3, 0) == []


def test_output_is_non_increasing_and_above_threshold():
    scores = [0.31, 0.99, 0.2, 0.55, 0.55, 0.8, 0.3, 0.45]
    out = rank_fragments([ranked(str(i), s) for i, s in enumerate(scores)], 0.3, 5)
    sims = [r.similarity for r in out]
    assert all(s > 0.3 for s in sims)
    assert sims == sorted(sims, reverse=True)
