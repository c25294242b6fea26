# mmrag/application/use_cases/record_query_history.py
from __future__ import annotations

import logging

from mmrag.application.ports.query_history_port import QueryHistoryPort
from mmrag.domain.errors import HistoryUnavailable
from mmrag.domain.models import QueryResult
from mmrag.domain.types import Result

logger = logging.getLogger(__name__)


class RecordQueryHistory:
    """Best-effort audit of answered queries; a failure here never fails the query."""

    def __init__(self, history: QueryHistoryPort) -> None:
        self.history = history

    def execute(
        self, user_id: str, question: str, result: QueryResult
    ) -> Result[None, HistoryUnavailable]:
        try:
            self.history.record(user_id, question, result)
        except Exception as ex:  # noqa: BLE001
            logger.error("Failed to record query history for user %s: %s", user_id, ex)
            if isinstance(ex, HistoryUnavailable):
                return Result.failure(ex)
            return Result.failure(HistoryUnavailable(f"history write failed: {ex}"))
        return Result.success(None)
