# mmrag/domain/services/context.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

from collections.abc import Sequence

from mmrag.domain.models import RankedFragment


def format_entry(ordinal: int, ranked: RankedFragment) -> str:
    f = ranked.fragment
    return f"[{ordinal}] From {f.filename} ({f.modality.value}):\n{f.text}\n"


def assemble_context(ranked: Sequence[RankedFragment]) -> str:
    """
    Linearize ranked fragments into the numbered context block given to the LLM.

    Entry [N] is the N-th fragment in retrieval order, which is also the N-th
    citation, so "[2]" in an answer points at citations[1]. Text is passed
    through untouched; nothing is truncated or reordered.
    """
    if not ranked:
        raise ValueError("assemble_context requires at least one fragment")
    return "\n".join(format_entry(i, r) for i, r in enumerate(ranked, start=1))
