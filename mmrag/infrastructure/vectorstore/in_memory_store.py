from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from mmrag.application.ports.fragment_store_port import FragmentStorePort, RankedFragment
from mmrag.domain.errors import RetrievalUnavailable
from mmrag.domain.models import DocumentStatus, StoredFragment
from mmrag.domain.services.ranking import rank_fragments
from mmrag.domain.similarity import cosine_similarity


@dataclass
class InMemoryFragmentStore(FragmentStorePort):
    """Exact similarity scan over fragments held in memory.

    Same eligibility as the database procedure: owner match (when filtered),
    completed document, non-null embedding, similarity strictly above threshold.
    Ties keep insertion order.
    """

    dimension: int = 384
    rows: list[StoredFragment] = field(default_factory=list)

    def add(self, items: Iterable[StoredFragment]) -> None:
        for item in items:
            if item.embedding is not None and len(item.embedding) != self.dimension:
                raise ValueError(
                    f"fragment {item.fragment.id}: embedding has {len(item.embedding)} "
                    f"dimensions, store expects {self.dimension}"
                )
            self.rows.append(item)

    def match_fragments(
        self,
        query_vector: Sequence[float],
        threshold: float,
        max_results: int,
        owner_id: str | None = None,
    ) -> list[RankedFragment]:
        if len(query_vector) != self.dimension:
            raise RetrievalUnavailable(
                f"query vector has {len(query_vector)} dimensions, store expects {self.dimension}"
            )
        scored: list[RankedFragment] = []
        for row in self.rows:
            if owner_id is not None and row.owner_id != owner_id:
                continue
            if row.status is not DocumentStatus.COMPLETED or row.embedding is None:
                continue
            scored.append(
                RankedFragment(
                    fragment=row.fragment,
                    similarity=cosine_similarity(query_vector, row.embedding),
                )
            )
        return rank_fragments(scored, threshold=threshold, max_results=max_results)
