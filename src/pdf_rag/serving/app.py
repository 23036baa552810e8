"""FastAPI application exposing the knowledge base as a REST API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from pdf_rag.config import Settings
from pdf_rag.context import EngineHolder
from pdf_rag.errors import (
    DimensionMismatch,
    EmbeddingProviderFailure,
    ExtractionFailure,
    NoContentExtracted,
    RAGError,
)
from pdf_rag.retrieval.engine import RAGEngine, format_search_results
from pdf_rag.retrieval.models import DocumentSummary, IndexReport, RAGResult

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[RAGError], int]] = [
    (ExtractionFailure, 422),
    (NoContentExtracted, 422),
    (DimensionMismatch, 409),
    (EmbeddingProviderFailure, 502),
]


# ── Request / Response schemas ────────────────────────────────────────
class IndexRequest(BaseModel):
    """Files to add to the knowledge base."""

    paths: list[str] = Field(min_length=1)


class QueryRequest(BaseModel):
    """Incoming search from the user."""

    query: str
    max_results: int | None = Field(default=None, ge=1)


class QueryResponse(BaseModel):
    results: list[RAGResult]


class ContextResponse(BaseModel):
    context: str


class SearchResponse(BaseModel):
    report: str


class CountResponse(BaseModel):
    count: int


# ── Dependencies ──────────────────────────────────────────────────────
def get_holder(request: Request) -> EngineHolder:
    return request.app.state.holder


def get_engine(holder: EngineHolder = Depends(get_holder)) -> RAGEngine:
    if holder.engine is None:
        raise HTTPException(status_code=503, detail="RAG engine not initialized")
    return holder.engine


def _max_results(holder: EngineHolder, requested: int | None) -> int:
    if requested:
        return requested
    return holder.settings.max_results if holder.settings is not None else 5


# ── App factory ───────────────────────────────────────────────────────
def create_app(holder: EngineHolder | None = None) -> FastAPI:
    """Build the API.

    When *holder* is omitted the engine is built from environment
    settings at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.holder.engine is None:
            settings = Settings()
            logging.basicConfig(level=settings.log_level)
            app.state.holder.reconfigure(settings)
        yield

    app = FastAPI(
        title="PDF RAG API",
        version="0.1.0",
        description="Index PDF documents and search them by semantic similarity.",
        lifespan=lifespan,
    )
    app.state.holder = holder or EngineHolder()

    @app.exception_handler(RAGError)
    async def rag_error_handler(request: Request, exc: RAGError) -> JSONResponse:
        status = 500
        for error_type, code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                status = code
                break
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health(holder: EngineHolder = Depends(get_holder)) -> dict[str, str]:
        """Report readiness; the store is degraded when its file is gone."""
        engine = holder.engine
        if engine is None:
            return {"status": "initializing"}
        return {"status": "ok" if engine.health_check() else "degraded"}

    @app.post("/index", response_model=IndexReport)
    def index(request: IndexRequest, engine: RAGEngine = Depends(get_engine)) -> IndexReport:
        """Extract, chunk, embed and store the given files."""
        return engine.index(request.paths)

    @app.post("/query", response_model=QueryResponse)
    def query(
        request: QueryRequest,
        engine: RAGEngine = Depends(get_engine),
        holder: EngineHolder = Depends(get_holder),
    ) -> QueryResponse:
        """Return the passages most similar to the query."""
        k = _max_results(holder, request.max_results)
        return QueryResponse(results=engine.query(request.query, k))

    @app.post("/context", response_model=ContextResponse)
    def context(
        request: QueryRequest,
        engine: RAGEngine = Depends(get_engine),
        holder: EngineHolder = Depends(get_holder),
    ) -> ContextResponse:
        """Return query results formatted for a language model prompt."""
        k = _max_results(holder, request.max_results)
        return ContextResponse(context=engine.format_context(request.query, k))

    @app.post("/search", response_model=SearchResponse)
    def search(
        request: QueryRequest,
        engine: RAGEngine = Depends(get_engine),
        holder: EngineHolder = Depends(get_holder),
    ) -> SearchResponse:
        """Return query results as a Markdown report."""
        k = _max_results(holder, request.max_results)
        results = engine.query(request.query, k)
        return SearchResponse(report=format_search_results(request.query, results))

    @app.get("/documents", response_model=list[DocumentSummary])
    def list_documents(engine: RAGEngine = Depends(get_engine)) -> list[DocumentSummary]:
        """List indexed sources with their chunk counts."""
        return engine.list_documents()

    @app.delete("/documents")
    def clear_documents(engine: RAGEngine = Depends(get_engine)) -> dict[str, str]:
        """Remove every indexed chunk."""
        engine.clear()
        return {"status": "cleared"}

    @app.get("/count", response_model=CountResponse)
    def count(engine: RAGEngine = Depends(get_engine)) -> CountResponse:
        return CountResponse(count=engine.count())

    @app.post("/reload")
    def reload(holder: EngineHolder = Depends(get_holder)) -> dict[str, str]:
        """Rebuild the engine from current environment settings."""
        engine = holder.reconfigure(Settings())
        logger.info("Configuration reloaded")
        return {"status": "reloaded", "documents": str(engine.count())}

    return app


app = create_app()
