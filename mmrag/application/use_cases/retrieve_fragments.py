# mmrag/application/use_cases/retrieve_fragments.py
from __future__ import annotations

import logging
from collections.abc import Sequence

from mmrag.application.ports.fragment_store_port import FragmentStorePort
from mmrag.domain.errors import DomainError, RetrievalUnavailable
from mmrag.domain.models import RankedFragment
from mmrag.domain.services.ranking import rank_fragments

logger = logging.getLogger(__name__)


class FragmentRetriever:
    """
    Vector retrieval contract on top of any fragment store.

    The store does the heavy lifting (owner/status/embedding filters, similarity);
    results are re-ranked here so the strict threshold, the descending order with
    stable ties, and the cap hold whichever backend answered.
    """

    def __init__(self, store: FragmentStorePort) -> None:
        self.store = store

    def search(
        self,
        query_vector: Sequence[float],
        owner_id: str | None,
        threshold: float,
        max_results: int,
    ) -> list[RankedFragment]:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be in [0, 1], got {threshold}")
        if max_results <= 0:
            raise ValueError(f"max_results must be > 0, got {max_results}")

        try:
            raw = self.store.match_fragments(
                query_vector,
                threshold=threshold,
                max_results=max_results,
                owner_id=owner_id,
            )
        except RetrievalUnavailable:
            raise
        except DomainError as ex:
            raise RetrievalUnavailable(f"fragment search failed: {ex}", details=ex.details) from ex
        except Exception as ex:  # noqa: BLE001
            raise RetrievalUnavailable(f"fragment search failed: {ex}", details=str(ex)) from ex

        ranked = rank_fragments(raw, threshold=threshold, max_results=max_results)
        if len(ranked) != len(raw):
            logger.warning(
                "Store returned %d fragments, %d kept after threshold/cap", len(raw), len(ranked)
            )
        return ranked
