"""FastAPI application exposing bootstrap, ingestion and search over HTTP.

Endpoints are plain ``def`` functions so the blocking pipeline runs in
FastAPI's worker threadpool.  Provider clients are resolved through
dependencies, which tests replace via ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from case_search.config import Settings, settings
from case_search.ingestion.bootstrap import BootstrapResult, BootstrapStatus, bootstrap_index
from case_search.ingestion.embedder import Embedder, build_embeddings
from case_search.logging_config import configure_logging
from case_search.retrieval import CaseSearcher, VectorStoreBase, build_vector_store

logger = logging.getLogger(__name__)


# ── Dependencies ──────────────────────────────────────────────────────
def get_settings() -> Settings:
    return settings


@lru_cache(maxsize=1)
def get_vector_store() -> VectorStoreBase:
    return build_vector_store(settings)


@lru_cache(maxsize=1)
def get_embedder() -> Embedder:
    return Embedder(build_embeddings(settings))


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    yield


app = FastAPI(
    title="Legal Case Search API",
    version="0.1.0",
    description="Bootstraps the case-law vector index and serves natural-language search.",
    lifespan=lifespan,
)


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ── Request / Response schemas ────────────────────────────────────────
class IngestRequest(BaseModel):
    """Target index for a full ingestion run."""

    targetIndex: str  # noqa: N815


class SearchRequest(BaseModel):
    """Incoming search from the UI."""

    query: str = ""


def _bootstrap_response(result: BootstrapResult) -> JSONResponse:
    if result.ok:
        return JSONResponse({"success": True}, status_code=200)
    if result.status is BootstrapStatus.TIMEOUT:
        return JSONResponse({"error": "Operation timed out - please try again"}, status_code=504)
    if result.status is BootstrapStatus.INVALID_INPUT:
        return JSONResponse({"error": result.error}, status_code=400)
    return JSONResponse({"error": "Bootstrap procedure failed"}, status_code=500)


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.get("/ready")
def ready(store: VectorStoreBase = Depends(get_vector_store)) -> JSONResponse:
    """Readiness probe: 503 until the vector store answers."""
    if not store.health_check():
        return JSONResponse({"status": "unavailable"}, status_code=503)
    return JSONResponse({"status": "ready"}, status_code=200)


@app.post("/api/bootstrap")
def bootstrap(
    config: Settings = Depends(get_settings),
    store: VectorStoreBase = Depends(get_vector_store),
    embedder: Embedder = Depends(get_embedder),
) -> JSONResponse:
    """Check the configured index and ingest the corpus if it is empty."""
    result = bootstrap_index(config.pinecone_index, config, store=store, embedder=embedder)
    return _bootstrap_response(result)


@app.post("/api/ingest")
def ingest(
    request: IngestRequest,
    config: Settings = Depends(get_settings),
    store: VectorStoreBase = Depends(get_vector_store),
    embedder: Embedder = Depends(get_embedder),
) -> JSONResponse:
    """Run the full ingestion pipeline against ``targetIndex``."""
    result = bootstrap_index(request.targetIndex, config, store=store, embedder=embedder)
    return _bootstrap_response(result)


@app.post("/api/search")
def search(
    request: SearchRequest,
    config: Settings = Depends(get_settings),
    store: VectorStoreBase = Depends(get_vector_store),
    embedder: Embedder = Depends(get_embedder),
) -> JSONResponse:
    """Embed the query, run an MMR search and return de-duplicated hits."""
    if not request.query.strip():
        return JSONResponse({"error": "Query is required"}, status_code=400)

    searcher = CaseSearcher(
        store,
        embedder,
        config.pinecone_index,
        k=config.search_k,
        fetch_k=config.search_fetch_k,
        lambda_mult=config.search_lambda_mult,
    )
    try:
        results = searcher.search(request.query)
    except Exception:
        logger.exception("Error performing similarity search")
        return JSONResponse({"error": "Failed to perform similarity search"}, status_code=500)
    return JSONResponse({"results": [r.model_dump() for r in results]}, status_code=200)


def serve() -> None:
    """Console entry point: run the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
