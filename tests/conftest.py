"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import math

import pytest
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings

from case_search.config import Settings
from case_search.ingestion.embedder import Embedder
from case_search.retrieval.base import VectorStoreBase
from case_search.retrieval.models import IndexStats, VectorMatch, VectorRecord


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ───────────────────────────────────────────────────────────────


def _vector_for(text: str) -> list[float]:
    return [float(len(text)), float(sum(map(ord, text)) % 97) + 1.0, 1.0]


class StubEmbeddings(Embeddings):
    """Deterministic embeddings with scriptable failures.

    ``fail_on_calls`` / ``short_on_calls`` are 1-based ``embed_documents``
    call numbers that raise or drop the last vector respectively.
    """

    def __init__(self, *, fail_on_calls: set[int] | None = None, short_on_calls: set[int] | None = None) -> None:
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []
        self._fail_on = fail_on_calls or set()
        self._short_on = short_on_calls or set()

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        call_no = len(self.document_calls)
        if call_no in self._fail_on:
            raise RuntimeError(f"embedding provider unavailable (call {call_no})")
        vectors = [_vector_for(t) for t in texts]
        if call_no in self._short_on:
            vectors = vectors[:-1]
        return vectors

    def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return _vector_for(text)


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store that records every call."""

    def __init__(self, *, stats_error: Exception | None = None) -> None:
        self.indexes: dict[str, dict[str, VectorRecord]] = {}
        self.created: list[tuple[str, int]] = []
        self.upsert_calls: list[tuple[str, list[str]]] = []
        self.stats_error = stats_error

    def seed(self, name: str, count: int) -> None:
        self.indexes.setdefault(name, {})
        for i in range(count):
            rid = f"seed-{i}"
            self.indexes[name][rid] = VectorRecord(id=rid, values=[1.0, 0.0, 0.0], metadata={"id": rid})

    def index_exists(self, name: str) -> bool:
        return name in self.indexes

    def create_index(self, name: str, *, dimension: int) -> None:
        self.created.append((name, dimension))
        self.indexes.setdefault(name, {})

    def describe_index_stats(self, name: str) -> IndexStats:
        if self.stats_error is not None:
            raise self.stats_error
        return IndexStats(total_record_count=len(self.indexes[name]))

    def upsert(self, name: str, records: list[VectorRecord]) -> None:
        self.upsert_calls.append((name, [r.id for r in records]))
        for record in records:
            self.indexes[name][record.id] = record

    def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 20,
        include_values: bool = False,
    ) -> list[VectorMatch]:
        def cosine(a: list[float], b: list[float]) -> float:
            dot = sum(x * y for x, y in zip(a, b))
            return dot / (math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b)))

        scored = sorted(
            (
                VectorMatch(
                    id=r.id,
                    score=cosine(vector, r.values),
                    values=r.values if include_values else [],
                    metadata=dict(r.metadata),
                )
                for r in self.indexes.get(name, {}).values()
            ),
            key=lambda m: m.score,
            reverse=True,
        )
        return scored[:top_k]

    def health_check(self) -> bool:
        return True


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def stub_embeddings() -> StubEmbeddings:
    return StubEmbeddings()


@pytest.fixture()
def embedder(stub_embeddings: StubEmbeddings) -> Embedder:
    return Embedder(stub_embeddings)


@pytest.fixture()
def pipeline_settings(tmp_path) -> Settings:
    """Settings pointing at an empty temp corpus, with no inter-batch delay."""
    return Settings(
        docs_dir=str(tmp_path / "docs"),
        metadata_path=str(tmp_path / "docs" / "db.json"),
        chunk_size=1000,
        chunk_overlap=200,
        outer_batch_size=5,
        inner_batch_size=2,
        batch_delay_seconds=0,
        embedding_dimension=3,
    )


def make_page(text: str, source: str = "docs/case1.pdf", page: int = 0) -> Document:
    """A page as ``PyPDFLoader`` would produce it."""
    return Document(page_content=text, metadata={"source": source, "page": page, "total_pages": 1})
