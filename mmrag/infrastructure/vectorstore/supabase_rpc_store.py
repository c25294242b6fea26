from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from mmrag.application.ports.fragment_store_port import FragmentStorePort, RankedFragment
from mmrag.domain.errors import RetrievalUnavailable
from mmrag.domain.models import Fragment, Modality

logger = logging.getLogger(__name__)


def supabase_headers(service_key: str) -> dict[str, str]:
    return {
        "apikey": service_key,
        "Authorization": f"Bearer {service_key}",
        "Content-Type": "application/json",
    }


def row_to_ranked(row: Mapping[str, Any]) -> RankedFragment:
    """Map one ``match_document_chunks`` row onto the domain model."""
    metadata = row.get("chunk_metadata") or {}
    if not isinstance(metadata, Mapping):
        metadata = {}
    fragment = Fragment(
        id=str(row["id"]),
        document_id=str(row["document_id"]),
        text=str(row["chunk_text"]),
        chunk_index=int(row["chunk_index"]),
        filename=str(row["filename"]),
        modality=Modality(row["file_type"]),
        metadata=dict(metadata),
    )
    return RankedFragment(fragment=fragment, similarity=float(row["similarity"]))


@dataclass
class SupabaseFragmentStore(FragmentStorePort):
    """Calls the ``match_document_chunks`` stored procedure through PostgREST.

    The procedure joins chunks with their document, filters by owner, completed
    processing status, non-null embedding and ``similarity > match_threshold``,
    and orders by cosine distance.
    """

    url: str  # project URL, e.g. "https://xyz.supabase.co"
    service_key: str
    function: str = "match_document_chunks"
    timeout_s: float = 30.0
    client: httpx.Client | None = field(default=None, repr=False)

    def _post(self, endpoint: str, body: dict[str, Any]) -> httpx.Response:
        headers = supabase_headers(self.service_key)
        if self.client is not None:
            return self.client.post(endpoint, json=body, headers=headers)
        with httpx.Client(timeout=self.timeout_s) as client:
            return client.post(endpoint, json=body, headers=headers)

    def match_fragments(
        self,
        query_vector: Sequence[float],
        threshold: float,
        max_results: int,
        owner_id: str | None = None,
    ) -> list[RankedFragment]:
        endpoint = f"{self.url.rstrip('/')}/rest/v1/rpc/{self.function}"
        body = {
            "query_embedding": list(query_vector),
            "match_threshold": threshold,
            "match_count": max_results,
            "user_id_filter": owner_id,
        }
        try:
            response = self._post(endpoint, body)
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Search error: %s", e)
            try:
                details: Any = e.response.json()
            except ValueError:
                details = e.response.text
            raise RetrievalUnavailable(
                f"{self.function} failed: {e.response.status_code}", details=details
            ) from e
        except httpx.RequestError as e:
            logger.error("Search connection error: %s", e)
            raise RetrievalUnavailable("Could not connect to fragment store", details=str(e)) from e
        except ValueError as e:
            raise RetrievalUnavailable("Invalid JSON from fragment store") from e

        if rows is None:
            return []
        if not isinstance(rows, list):
            raise RetrievalUnavailable("Unexpected search response", details=rows)
        try:
            return [row_to_ranked(row) for row in rows]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed search row: %s", e)
            raise RetrievalUnavailable(f"Malformed search row: {e}") from e
