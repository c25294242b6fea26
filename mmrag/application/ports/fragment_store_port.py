from collections.abc import Sequence
from typing import Protocol, runtime_checkable

# Import domain model and re-export for convenience
from mmrag.domain.models import RankedFragment

__all__ = ["FragmentStorePort", "RankedFragment"]


@runtime_checkable
class FragmentStorePort(Protocol):
    """Single retrieval operation of the fragment store.

    Equivalent to the ``match_document_chunks`` stored procedure: fragments of
    completed documents owned by ``owner_id`` (any owner when None), with a
    non-null embedding and similarity strictly above ``threshold``, best first.
    """

    def match_fragments(
        self,
        query_vector: Sequence[float],
        threshold: float,
        max_results: int,
        owner_id: str | None = None,
    ) -> list[RankedFragment]: ...
