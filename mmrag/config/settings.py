"""Application settings with environment-driven configuration.

This is the ONLY place where environment variables are read. All other layers
receive settings (or the PipelineConfig derived from them) via injection.
"""

import os
from dataclasses import dataclass, field

from mmrag.application.dto.query_dto import PipelineConfig


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables."""

    # ===== Backends =====
    embedding_backend: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_BACKEND", "gemini").lower()
    )
    # Supported: "gemini" | "sentence_transformers" | "hashing"

    llm_backend: str = field(default_factory=lambda: os.getenv("LLM_BACKEND", "gemini").lower())
    # Supported: "gemini" | "openai" | "extractive"

    vector_backend: str = field(
        default_factory=lambda: os.getenv("VECTOR_BACKEND", "supabase").lower()
    )
    # Supported: "supabase" | "memory"

    history_backend: str = field(
        default_factory=lambda: os.getenv("HISTORY_BACKEND", "supabase").lower()
    )
    # Supported: "supabase" | "memory" | "none"

    # ===== Google Generative Language =====
    google_api_key: str = field(default_factory=lambda: os.getenv("GOOGLE_AI_API_KEY", ""))
    google_base_url: str = field(
        default_factory=lambda: os.getenv(
            "GOOGLE_AI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )
    )
    gemini_embedding_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_EMBEDDING_MODEL", "text-embedding-004")
    )
    gemini_embedding_task_type: str = field(
        default_factory=lambda: os.getenv("GEMINI_EMBEDDING_TASK_TYPE", "RETRIEVAL_DOCUMENT")
    )
    gemini_llm_model: str = field(
        default_factory=lambda: os.getenv("GEMINI_LLM_MODEL", "gemini-1.5-flash")
    )

    # ===== Local embeddings =====
    st_embedding_model: str = field(
        default_factory=lambda: os.getenv(
            "ST_EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"
        )
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps"

    # ===== OpenAI-compatible LLM =====
    llm_base_url: str = field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "http://localhost:8000/v1")
    )
    llm_api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", "EMPTY"))
    llm_model: str = field(
        default_factory=lambda: os.getenv("LLM_MODEL", "meta-llama/Meta-Llama-3.1-8B-Instruct")
    )

    # ===== Supabase =====
    supabase_url: str = field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_service_key: str = field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    )

    # ===== Retrieval / generation =====
    vector_dimension: int = field(default_factory=lambda: int(os.getenv("VECTOR_DIMENSION", "384")))
    match_threshold: float = field(
        default_factory=lambda: float(os.getenv("MATCH_THRESHOLD", "0.3"))
    )
    match_count: int = field(default_factory=lambda: int(os.getenv("MATCH_COUNT", "10")))
    llm_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.3"))
    )
    llm_max_tokens: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "800")))
    http_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("HTTP_TIMEOUT_S", "60"))
    )

    # ===== Logging / telemetry =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    telemetry_enabled: bool = field(default_factory=lambda: _flag("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export
    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )

    def pipeline_config(self) -> PipelineConfig:
        return PipelineConfig(
            similarity_threshold=self.match_threshold,
            max_results=self.match_count,
            temperature=self.llm_temperature,
            max_output_tokens=self.llm_max_tokens,
            embedding_dimension=self.vector_dimension,
        )
