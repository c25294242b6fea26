"""Application ports package.

Re-exports the ports from their individual modules.
"""

from mmrag.application.ports.embedding_port import EmbeddingPort
from mmrag.application.ports.fragment_store_port import FragmentStorePort, RankedFragment
from mmrag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from mmrag.application.ports.query_history_port import QueryHistoryPort
from mmrag.application.ports.telemetry_port import TelemetryPort

__all__ = [
    "ChatMessage",
    "EmbeddingPort",
    "FragmentStorePort",
    "LLMPort",
    "LLMResponse",
    "QueryHistoryPort",
    "RankedFragment",
    "TelemetryPort",
]
