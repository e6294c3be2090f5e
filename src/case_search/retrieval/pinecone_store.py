"""Pinecone implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from typing import Any

from pinecone import Pinecone, ServerlessSpec
from pinecone.exceptions import PineconeApiException

from case_search.retrieval.base import VectorStoreBase
from case_search.retrieval.models import IndexStats, VectorMatch, VectorRecord

logger = logging.getLogger(__name__)


class PineconeVectorStore(VectorStoreBase):
    """Pinecone serverless backend.

    Parameters
    ----------
    api_key:
        Pinecone API key.  Ignored when *client* is given.
    cloud / region:
        Serverless placement for newly created indexes.
    metric:
        Distance metric for newly created indexes.
    client:
        Pre-built ``pinecone.Pinecone`` handle (mainly for tests).
    """

    def __init__(
        self,
        api_key: str = "",
        *,
        cloud: str = "aws",
        region: str = "us-east-1",
        metric: str = "cosine",
        client: Any | None = None,
    ) -> None:
        self._client = client if client is not None else Pinecone(api_key=api_key)
        self._spec = ServerlessSpec(cloud=cloud, region=region)
        self._metric = metric
        self._indexes: dict[str, Any] = {}

    def _index(self, name: str) -> Any:
        if name not in self._indexes:
            self._indexes[name] = self._client.Index(name)
        return self._indexes[name]

    # -- VectorStoreBase overrides --------------------------------------------

    def index_exists(self, name: str) -> bool:
        return name in self._client.list_indexes().names()

    def create_index(self, name: str, *, dimension: int) -> None:
        try:
            # create_index blocks until the index reports ready.
            self._client.create_index(
                name=name,
                dimension=dimension,
                metric=self._metric,
                spec=self._spec,
            )
        except PineconeApiException as exc:
            if getattr(exc, "status", None) != 409:
                raise
            logger.info("Pinecone index %r was created concurrently; continuing", name)

    def describe_index_stats(self, name: str) -> IndexStats:
        stats = self._index(name).describe_index_stats()
        return IndexStats(total_record_count=int(stats.total_vector_count or 0))

    def upsert(self, name: str, records: list[VectorRecord]) -> None:
        self._index(name).upsert(vectors=[r.as_pinecone() for r in records])

    def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 20,
        include_values: bool = False,
    ) -> list[VectorMatch]:
        response = self._index(name).query(
            vector=vector,
            top_k=top_k,
            include_values=include_values,
            include_metadata=True,
        )
        return [
            VectorMatch(
                id=m.id,
                score=m.score,
                values=list(m.values or []),
                metadata=dict(m.metadata or {}),
            )
            for m in response.matches
        ]

    def health_check(self) -> bool:
        try:
            self._client.list_indexes()
            return True
        except Exception:
            logger.warning("Pinecone health-check failed", exc_info=True)
            return False
