"""Embedding: mode-aware wrapper around a LangChain ``Embeddings`` provider.

Voyage's legal model embeds documents and queries into asymmetric spaces,
so every call names its :class:`EmbeddingMode` explicitly.  Ingestion uses
``DOCUMENT``; search uses ``QUERY``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from case_search.config import Settings, settings

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class EmbeddingMode(str, Enum):
    """Which side of the asymmetric embedding space a text belongs to."""

    DOCUMENT = "document"
    QUERY = "query"


class EmbeddingAlignmentError(RuntimeError):
    """The provider returned vectors that do not line up with the inputs."""

    def __init__(self, expected: int, received: int | None) -> None:
        super().__init__(f"Invalid embeddings response: expected {expected} vectors, received {received}")
        self.expected = expected
        self.received = received


def ensure_aligned(texts: Sequence[str], vectors: Sequence[Sequence[float]] | None) -> None:
    """Raise :class:`EmbeddingAlignmentError` unless ``vectors[i]`` can embed ``texts[i]``.

    Counts must match and no vector may be empty.
    """
    if vectors is None or len(vectors) != len(texts):
        raise EmbeddingAlignmentError(len(texts), None if vectors is None else len(vectors))
    for vector in vectors:
        if vector is None or len(vector) == 0:
            raise EmbeddingAlignmentError(len(texts), len(vectors))


class Embedder:
    """Turns batches of text into fixed-dimension vectors.

    Parameters
    ----------
    embeddings:
        Any LangChain ``Embeddings`` implementation.  Constructed by the
        caller (see :func:`build_embeddings`) so tests can pass a fake.
    """

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings

    def embed(self, texts: Sequence[str], mode: EmbeddingMode) -> list[list[float]]:
        """Embed *texts* in *mode* with one provider call per batch.

        The result is returned as-is; callers verify it with
        :func:`ensure_aligned` before consuming it.
        """
        mode = EmbeddingMode(mode)
        if not texts:
            return []
        if mode is EmbeddingMode.DOCUMENT:
            logger.info("Generating embeddings for %d chunks", len(texts))
            return self._embeddings.embed_documents(list(texts))
        return [self._embeddings.embed_query(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        """Embed a single search query."""
        (vector,) = self.embed([text], EmbeddingMode.QUERY)
        return vector


def build_embeddings(config: Settings = settings) -> Embeddings:
    """Return the configured LangChain embedding provider."""
    provider = config.embedding_provider.lower()
    if provider == "voyage":
        from langchain_voyageai import VoyageAIEmbeddings

        kwargs: dict = {"model": config.embedding_model}
        # Without an explicit key the client falls back to VOYAGE_API_KEY.
        if config.voyage_api_key:
            kwargs["voyage_api_key"] = config.voyage_api_key
        return VoyageAIEmbeddings(**kwargs)
    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=config.embedding_model)
    raise ValueError(
        f"Unsupported embedding_provider={config.embedding_provider!r}. "
        "Choose from: voyage, huggingface."
    )
