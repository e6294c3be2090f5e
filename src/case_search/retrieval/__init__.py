"""
Retrieval: vector-store backends, the index gate, and case search.

This module wraps the vector store behind a clean interface so that the
bootstrap pipeline and the search service never need to know which DB is
backing the index.

Public surface
--------------
- :class:`VectorStoreBase`: abstract backend.
- :class:`PineconeVectorStore`: production backend.
- :class:`ChromaVectorStore`: local-development backend.
- :class:`CaseSearcher`: query-mode embedding + MMR + de-duplication.
- :func:`build_vector_store`: backend factory driven by settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from case_search.retrieval.base import VectorStoreBase
from case_search.retrieval.models import IndexStats, SearchResult, VectorMatch, VectorRecord
from case_search.retrieval.retriever import CaseSearcher

if TYPE_CHECKING:
    from case_search.config import Settings

__all__ = [
    "CaseSearcher",
    "ChromaVectorStore",
    "IndexStats",
    "PineconeVectorStore",
    "SearchResult",
    "VectorMatch",
    "VectorRecord",
    "VectorStoreBase",
    "build_vector_store",
]


def build_vector_store(config: Settings) -> VectorStoreBase:
    """Construct the backend selected by ``config.vector_store_backend``."""
    backend = config.vector_store_backend.lower()
    if backend == "pinecone":
        from case_search.retrieval.pinecone_store import PineconeVectorStore

        return PineconeVectorStore(
            config.pinecone_api_key,
            cloud=config.pinecone_cloud,
            region=config.pinecone_region,
            metric=config.pinecone_metric,
        )
    if backend == "chroma":
        from case_search.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore(config.chroma_host, config.chroma_port)
    raise ValueError(
        f"Unsupported vector_store_backend={config.vector_store_backend!r}. "
        "Choose from: pinecone, chroma."
    )


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import SDK-backed stores to avoid pulling in their clients at import time."""
    if name == "ChromaVectorStore":
        from case_search.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    if name == "PineconeVectorStore":
        from case_search.retrieval.pinecone_store import PineconeVectorStore

        return PineconeVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
