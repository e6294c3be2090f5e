"""Case search: query embedding, diversity-aware selection and de-duplication.

Usage::

    from case_search.retrieval import CaseSearcher, build_vector_store

    searcher = CaseSearcher(build_vector_store(settings), embedder, "legal-cases")
    for hit in searcher.search("Cases about the right to remain silent"):
        print(hit.metadata.get("title"), hit.pageContent[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from langchain_community.vectorstores.utils import maximal_marginal_relevance

from case_search.retrieval.models import SearchResult, VectorMatch

if TYPE_CHECKING:
    from case_search.ingestion.embedder import Embedder
    from case_search.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


def dedupe_matches(matches: list[VectorMatch]) -> list[VectorMatch]:
    """Keep the first match per ``metadata["id"]``, preserving order."""
    seen: set[str] = set()
    unique: list[VectorMatch] = []
    for match in matches:
        key = str(match.metadata.get("id", match.id))
        if key in seen:
            continue
        seen.add(key)
        unique.append(match)
    return unique


class CaseSearcher:
    """Runs natural-language searches against one index.

    Parameters
    ----------
    store:
        A concrete vector-store backend.
    embedder:
        Embedder used in query mode.
    index_name:
        The index to search.
    k:
        Number of results returned after MMR selection.
    fetch_k:
        Number of nearest neighbours fetched before MMR selection.
    lambda_mult:
        MMR trade-off: 1 favours pure relevance, 0 favours diversity.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder,
        index_name: str,
        *,
        k: int = 20,
        fetch_k: int = 20,
        lambda_mult: float = 0.5,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.index_name = index_name
        self.k = k
        self.fetch_k = max(fetch_k, k)
        self.lambda_mult = lambda_mult

    def search(self, query: str) -> list[SearchResult]:
        """Return up to ``k`` diverse, de-duplicated hits for *query*."""
        logger.info("Searching %r for query: %s", self.index_name, query)
        query_vector = self._embedder.embed_query(query)
        candidates = self._store.query(
            self.index_name,
            query_vector,
            top_k=self.fetch_k,
            include_values=True,
        )
        candidates = [m for m in candidates if m.values]
        if not candidates:
            return []

        selected = maximal_marginal_relevance(
            np.array(query_vector, dtype=np.float32),
            [m.values for m in candidates],
            lambda_mult=self.lambda_mult,
            k=self.k,
        )
        ranked = dedupe_matches([candidates[i] for i in selected])
        return [
            SearchResult(
                pageContent=str(m.metadata.get("pageContent", "")),
                metadata=m.metadata,
                score=m.score,
            )
            for m in ranked
        ]
