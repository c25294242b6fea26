# mmrag/domain/services/citations.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from typing import Any

from mmrag.domain.models import Citation, Fragment, RankedFragment


def _present(value: Any) -> bool:
    """A metadata value counts only if it is a non-empty string or a non-zero, non-NaN number."""
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    return False


def _render(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def reference_for(fragment: Fragment) -> str:
    """
    Pick the citation reference with fixed precedence: page, then timestamp, then chunk.

    Malformed metadata never raises; it falls through to the chunk form.
    """
    meta = fragment.metadata if isinstance(fragment.metadata, Mapping) else {}
    page = meta.get("page_number")
    if _present(page):
        return f"Page {_render(page)}"
    timestamp = meta.get("timestamp")
    if _present(timestamp):
        return f"Timestamp {_render(timestamp)}"
    return f"Chunk {fragment.chunk_index}"


def build_citation(ranked: RankedFragment) -> Citation:
    f = ranked.fragment
    return Citation(
        source=f.filename,
        type=f.modality.label,
        reference=reference_for(f),
        document_id=f.document_id,
    )


def build_citations(ranked: Sequence[RankedFragment]) -> list[Citation]:
    """One citation per fragment, in retrieval order (aligned with context entries)."""
    return [build_citation(r) for r in ranked]
