from dataclasses import dataclass, field

from mmrag.application.ports.query_history_port import QueryHistoryPort
from mmrag.domain.models import QueryResult


@dataclass(frozen=True)
class QueryRecord:
    user_id: str
    question: str
    result: QueryResult


@dataclass
class InMemoryQueryHistory(QueryHistoryPort):
    records: list[QueryRecord] = field(default_factory=list)

    def record(self, user_id: str, question: str, result: QueryResult) -> None:
        self.records.append(QueryRecord(user_id=user_id, question=question, result=result))

    def for_user(self, user_id: str) -> list[QueryRecord]:
        return [r for r in self.records if r.user_id == user_id]
