"""Tests for context assembly."""

import pytest

from mmrag.domain.models import Fragment, Modality, RankedFragment
from mmrag.domain.services.context import assemble_context


def ranked(id_: str, text: str, filename: str, modality: Modality, score: float) -> RankedFragment:
    return RankedFragment(
        fragment=Fragment(
            id=id_,
            document_id="d",
            text=text,
            chunk_index=0,
            filename=filename,
            modality=modality,
        ),
        similarity=score,
    )


def test_single_entry_format():
    ctx = assemble_context(
        [ranked("c1", "Refunds within 30 days.", "policy.pdf", Modality.PDF, 0.81)]
    )
    assert ctx == "[1] From policy.pdf (pdf):\nRefunds within 30 days.\n"


def test_entries_numbered_in_order_and_separated_by_blank_line():
    ctx = assemble_context(
        [
            ranked("c1", "First.", "a.pdf", Modality.PDF, 0.9),
            ranked("c2", "Second.", "call.mp3", Modality.AUDIO, 0.8),
        ]
    )
    assert ctx == "[1] From a.pdf (pdf):\nFirst.\n\n[2] From call.mp3 (audio):\nSecond.\n"


def test_text_is_not_truncated():
    long_text = "word " * 2000
    ctx = assemble_context([ranked("c1", long_text, "a.txt", Modality.TXT, 0.9)])
    assert long_text in ctx


def test_empty_input_is_a_programming_error():
    with pytest.raises(ValueError):
        assemble_context([])
