from typing import Protocol

from mmrag.domain.models import QueryResult


class QueryHistoryPort(Protocol):
    """Audit trail of answered queries (the ``queries`` table)."""

    def record(self, user_id: str, question: str, result: QueryResult) -> None: ...
