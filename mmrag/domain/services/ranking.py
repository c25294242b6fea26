# mmrag/domain/services/ranking.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

from collections.abc import Iterable

from mmrag.domain.models import RankedFragment


def rank_fragments(
    candidates: Iterable[RankedFragment],
    threshold: float,
    max_results: int,
) -> list[RankedFragment]:
    """
    Keep fragments scoring strictly above ``threshold``, highest similarity first.

    - Ties keep their incoming order (``sorted`` is stable).
    - At most ``max_results`` fragments are returned; an empty list is a valid outcome.
    """
    if max_results <= 0:
        return []
    eligible = [c for c in candidates if c.similarity > threshold]
    eligible = sorted(eligible, key=lambda c: c.similarity, reverse=True)
    return eligible[:max_results]
