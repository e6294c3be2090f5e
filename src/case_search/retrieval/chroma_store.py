"""Chroma implementation of the vector-store abstraction.

Used for local development: each logical index maps to one Chroma
collection on a Chroma server.
"""

from __future__ import annotations

import logging
from typing import Any

import chromadb

from case_search.retrieval.base import VectorStoreBase
from case_search.retrieval.models import IndexStats, VectorMatch, VectorRecord

logger = logging.getLogger(__name__)


def _chroma_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Chroma metadata values must be flat str/int/float/bool."""
    return {k: v for k, v in metadata.items() if isinstance(v, (str, int, float, bool))}


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    distance_metric:
        ``cosine`` | ``l2`` | ``ip`` for newly created collections.
    client:
        Pre-built Chroma client (e.g. ``chromadb.EphemeralClient()`` in tests).
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8000,
        *,
        distance_metric: str = "cosine",
        client: Any | None = None,
    ) -> None:
        self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)
        self._distance_metric = distance_metric

    # -- VectorStoreBase overrides --------------------------------------------

    def index_exists(self, name: str) -> bool:
        # Older chromadb releases return Collection objects, newer ones names.
        names = [getattr(c, "name", c) for c in self._client.list_collections()]
        return name in names

    def create_index(self, name: str, *, dimension: int) -> None:
        # Chroma fixes the dimension on first insert; the argument is informational.
        self._client.get_or_create_collection(
            name=name,
            metadata={"hnsw:space": self._distance_metric, "dimension": dimension},
        )

    def describe_index_stats(self, name: str) -> IndexStats:
        return IndexStats(total_record_count=self._client.get_collection(name).count())

    def upsert(self, name: str, records: list[VectorRecord]) -> None:
        collection = self._client.get_collection(name)
        collection.upsert(
            ids=[r.id for r in records],
            embeddings=[r.values for r in records],
            documents=[str(r.metadata.get("pageContent", "")) for r in records],
            metadatas=[_chroma_metadata(r.metadata) for r in records],
        )

    def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 20,
        include_values: bool = False,
    ) -> list[VectorMatch]:
        include = ["metadatas", "distances"]
        if include_values:
            include.append("embeddings")
        results = self._client.get_collection(name).query(
            query_embeddings=[vector],
            n_results=top_k,
            include=include,
        )

        ids = results.get("ids", [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]
        embeddings = results.get("embeddings")
        vectors = embeddings[0] if embeddings is not None and include_values else [None] * len(ids)

        matches: list[VectorMatch] = []
        for doc_id, meta, dist, values in zip(ids, metas, distances, vectors):
            matches.append(
                VectorMatch(
                    id=doc_id,
                    # Chroma returns distances; convert to a 0-1 similarity score.
                    score=1.0 / (1.0 + dist),
                    values=[float(v) for v in values] if values is not None else [],
                    metadata=dict(meta or {}),
                )
            )
        return matches

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
