from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from mmrag.application.ports.query_history_port import QueryHistoryPort
from mmrag.domain.errors import HistoryUnavailable
from mmrag.domain.models import QueryResult
from mmrag.infrastructure.vectorstore.supabase_rpc_store import supabase_headers

logger = logging.getLogger(__name__)


@dataclass
class SupabaseQueryHistory(QueryHistoryPort):
    """Inserts answered queries into the ``queries`` audit table via PostgREST."""

    url: str
    service_key: str
    table: str = "queries"
    timeout_s: float = 30.0
    client: httpx.Client | None = field(default=None, repr=False)

    def record(self, user_id: str, question: str, result: QueryResult) -> None:
        payload = result.to_dict()
        row = {
            "user_id": user_id,
            "query_text": question,
            "retrieved_chunks": payload["retrieved_chunks"],
            "generated_response": payload["answer"],
            "citations": payload["citations"],
        }
        endpoint = f"{self.url.rstrip('/')}/rest/v1/{self.table}"
        headers = {**supabase_headers(self.service_key), "Prefer": "return=minimal"}
        try:
            if self.client is not None:
                response = self.client.post(endpoint, json=row, headers=headers)
            else:
                with httpx.Client(timeout=self.timeout_s) as client:
                    response = client.post(endpoint, json=row, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise HistoryUnavailable(
                f"insert into {self.table} failed: {e.response.status_code}",
                details=e.response.text,
            ) from e
        except httpx.RequestError as e:
            raise HistoryUnavailable(f"could not reach history store: {e}") from e
        logger.debug("Recorded query history for user %s", user_id)
