"""Unit tests for settings validation."""

import pytest
from pydantic import ValidationError

from case_search.config import Settings


def test_defaults_match_production_pipeline() -> None:
    config = Settings(_env_file=None)
    assert (config.chunk_size, config.chunk_overlap) == (1000, 200)
    assert (config.outer_batch_size, config.inner_batch_size) == (5, 2)
    assert config.embedding_model == "voyage-law-2"
    assert config.embedding_dimension == 1024
    assert config.max_content_length == 8192


def test_overlap_must_be_smaller_than_chunk_size() -> None:
    with pytest.raises(ValidationError, match="chunk_overlap"):
        Settings(chunk_size=100, chunk_overlap=100)


def test_inner_batch_cannot_exceed_outer_batch() -> None:
    with pytest.raises(ValidationError, match="inner_batch_size"):
        Settings(outer_batch_size=2, inner_batch_size=3)


def test_negative_delay_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(batch_delay_seconds=-1)


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PINECONE_INDEX", "scratch-cases")
    monkeypatch.setenv("OUTER_BATCH_SIZE", "10")
    config = Settings()
    assert config.pinecone_index == "scratch-cases"
    assert config.outer_batch_size == 10
