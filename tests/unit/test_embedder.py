"""Unit tests for the mode-aware embedder."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from case_search.config import Settings
from case_search.ingestion.embedder import (
    Embedder,
    EmbeddingAlignmentError,
    EmbeddingMode,
    build_embeddings,
    ensure_aligned,
)


class TestEmbedder:
    def test_document_mode_uses_one_batch_call(self) -> None:
        provider = MagicMock()
        provider.embed_documents.return_value = [[0.1], [0.2]]
        vectors = Embedder(provider).embed(["a", "b"], EmbeddingMode.DOCUMENT)
        assert vectors == [[0.1], [0.2]]
        provider.embed_documents.assert_called_once_with(["a", "b"])
        provider.embed_query.assert_not_called()

    def test_query_mode_uses_query_embedding(self) -> None:
        provider = MagicMock()
        provider.embed_query.side_effect = lambda t: [float(len(t))]
        vectors = Embedder(provider).embed(["ab", "abc"], EmbeddingMode.QUERY)
        assert vectors == [[2.0], [3.0]]
        provider.embed_documents.assert_not_called()

    def test_mode_accepts_plain_string(self) -> None:
        provider = MagicMock()
        provider.embed_documents.return_value = [[1.0]]
        assert Embedder(provider).embed(["a"], "document") == [[1.0]]

    def test_unknown_mode_raises(self) -> None:
        with pytest.raises(ValueError):
            Embedder(MagicMock()).embed(["a"], "passage")

    def test_mode_is_required(self) -> None:
        with pytest.raises(TypeError):
            Embedder(MagicMock()).embed(["a"])  # type: ignore[call-arg]

    def test_empty_input_makes_no_call(self) -> None:
        provider = MagicMock()
        assert Embedder(provider).embed([], EmbeddingMode.DOCUMENT) == []
        provider.embed_documents.assert_not_called()

    def test_embed_query_returns_single_vector(self, stub_embeddings) -> None:
        vector = Embedder(stub_embeddings).embed_query("guns")
        assert len(vector) == 3
        assert stub_embeddings.query_calls == ["guns"]


class TestEnsureAligned:
    def test_matching_counts_pass(self) -> None:
        ensure_aligned(["a", "b"], [[0.1], [0.2]])

    def test_short_response_raises(self) -> None:
        with pytest.raises(EmbeddingAlignmentError) as info:
            ensure_aligned(["a", "b", "c"], [[0.1], [0.2]])
        assert info.value.expected == 3
        assert info.value.received == 2

    def test_none_response_raises(self) -> None:
        with pytest.raises(EmbeddingAlignmentError):
            ensure_aligned(["a"], None)

    def test_empty_vector_raises(self) -> None:
        with pytest.raises(EmbeddingAlignmentError):
            ensure_aligned(["a", "b"], [[0.1], []])


class TestBuildEmbeddings:
    def test_voyage_provider(self) -> None:
        config = Settings(embedding_provider="voyage", voyage_api_key="vk-test")
        with patch("langchain_voyageai.VoyageAIEmbeddings") as voyage:
            build_embeddings(config)
        voyage.assert_called_once_with(model="voyage-law-2", voyage_api_key="vk-test")

    def test_huggingface_provider(self) -> None:
        config = Settings(embedding_provider="huggingface", embedding_model="BAAI/bge-large-en-v1.5")
        with patch("langchain_huggingface.HuggingFaceEmbeddings") as hf:
            build_embeddings(config)
        hf.assert_called_once_with(model_name="BAAI/bge-large-en-v1.5")

    def test_unsupported_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unsupported embedding_provider"):
            build_embeddings(Settings(embedding_provider="word2vec"))
