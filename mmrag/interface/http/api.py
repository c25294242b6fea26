"""HTTP API for the query pipeline.

Thin layer: parse the request, delegate to the use case, map Result onto the
JSON envelope the front-end expects.
"""

import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError

from mmrag.application.dto.query_dto import QueryRequest
from mmrag.application.use_cases.query_knowledge_base import QueryKnowledgeBase
from mmrag.application.use_cases.record_query_history import RecordQueryHistory
from mmrag.config.settings import AppSettings
from mmrag.domain.errors import DomainError, InvalidRequest, RetrievalUnavailable
from mmrag.domain.models import QueryResult

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}

REQUIRED_FIELDS_ERROR = "Query and user_id are required"


class QueryRequestModel(BaseModel):
    """Request body for the query endpoint."""

    query: str | None = None
    user_id: str | None = None


class CitationModel(BaseModel):
    source: str
    type: str
    reference: str
    document_id: str


class RetrievedChunkModel(BaseModel):
    chunk_id: str
    document_id: str
    score: float


class QueryResponseModel(BaseModel):
    """Successful answer (including the no-results answer)."""

    answer: str
    citations: list[CitationModel]
    retrieved_chunks: list[RetrievedChunkModel]

    @classmethod
    def from_result(cls, result: QueryResult) -> "QueryResponseModel":
        return cls.model_validate(result.to_dict())


class ErrorResponseModel(BaseModel):
    error: str
    details: Any | None = None


def _error(status_code: int, error: str, details: Any | None = None) -> JSONResponse:
    body = ErrorResponseModel(error=error, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=status_code < 500),
    )


def error_response(err: DomainError) -> JSONResponse:
    if isinstance(err, InvalidRequest):
        return _error(400, REQUIRED_FIELDS_ERROR)
    if isinstance(err, RetrievalUnavailable):
        return _error(500, "Search failed", err.details if err.details is not None else str(err))
    return _error(500, "Internal server error", str(err))


async def _parse_body(request: Request) -> QueryRequestModel:
    try:
        payload = await request.json()
        return QueryRequestModel.model_validate(payload)
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        # unreadable bodies are treated like missing fields
        return QueryRequestModel()


def create_app(
    use_case: QueryKnowledgeBase | None = None,
    record_history: RecordQueryHistory | None = None,
    settings: AppSettings | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    When ``use_case`` is omitted the pipeline is composed from settings on
    startup; configuration errors abort startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.use_case is None:
            from mmrag.config.composition import build_query_use_case, build_record_history

            cfg = settings or AppSettings()
            app.state.use_case = build_query_use_case(cfg)
            app.state.record_history = build_record_history(cfg)
            logger.info("Query service ready")
        yield
        logger.info("Shutting down query service")

    app = FastAPI(title="Multimodal RAG Query API", version="1.0.0", lifespan=lifespan)
    app.state.use_case = use_case
    app.state.record_history = record_history

    @app.middleware("http")
    async def cors_and_logging(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        start = time.perf_counter()
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        logger.info(
            "%s %s status=%d time=%.2fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
        )
        return response

    async def query_rag(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        uc: QueryKnowledgeBase | None = request.app.state.use_case
        if uc is None:
            return _error(503, "Service not initialized")

        body = await _parse_body(request)
        dto = QueryRequest(question=body.query, user_id=body.user_id)
        try:
            result = await run_in_threadpool(uc.execute, dto)
        except Exception as ex:  # noqa: BLE001
            logger.exception("Unexpected error while answering query")
            return _error(500, "Internal server error", str(ex))

        if not result.ok or result.value is None:
            err = result.error or DomainError("unknown failure")
            logger.error("Query failed: %s: %s", type(err).__name__, err)
            return error_response(err)

        recorder: RecordQueryHistory | None = request.app.state.record_history
        if recorder is not None and dto.user_id and dto.question:
            # written after the response is sent; a slow insert never delays the answer
            background_tasks.add_task(recorder.execute, dto.user_id, dto.question, result.value)

        return JSONResponse(
            status_code=200,
            content=QueryResponseModel.from_result(result.value).model_dump(),
        )

    app.add_api_route("/functions/v1/query-rag", query_rag, methods=["POST"])
    app.add_api_route("/query-rag", query_rag, methods=["POST"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "service": "mmrag-query"}

    return app


app = create_app()


def main() -> None:
    import uvicorn

    from mmrag.config.logging_config import setup_logging

    settings = AppSettings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings=settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
