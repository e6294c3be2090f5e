"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Vector store
    vector_store_backend: str = Field(
        default="pinecone",
        description="Vector-store backend: 'pinecone' (production) or 'chroma' (local development)",
    )
    pinecone_api_key: str = Field(default="", description="Pinecone API key")
    pinecone_index: str = Field(default="legal-cases", description="Index used by /api/bootstrap and search")
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"
    pinecone_metric: str = "cosine"
    chroma_host: str = "localhost"
    chroma_port: int = 8000

    # Embedding
    embedding_provider: str = Field(
        default="voyage",
        description="Embedding provider: 'voyage' or 'huggingface'",
    )
    voyage_api_key: str = Field(default="", description="Voyage AI API key")
    embedding_model: str = "voyage-law-2"
    embedding_dimension: int = Field(default=1024, gt=0, description="Must match the index dimension")

    # Document source
    docs_dir: str = "docs"
    metadata_path: str = "docs/db.json"

    # Chunking / validation
    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)
    max_content_length: int = Field(
        default=8192,
        gt=0,
        description="Upper bound (exclusive) on trimmed text length sent to the embedding model",
    )

    # Batching
    outer_batch_size: int = Field(default=5, ge=1, description="Chunks per embedding call")
    inner_batch_size: int = Field(default=2, ge=1, description="Records per upsert call")
    batch_delay_seconds: float = Field(default=1.0, ge=0, description="Pause between outer batches")

    # Search
    search_k: int = Field(default=20, ge=1)
    search_fetch_k: int = Field(default=20, ge=1)
    search_lambda_mult: float = Field(default=0.5, ge=0, le=1)

    # Serving
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Logging
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @model_validator(mode="after")
    def _check_consistency(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be < chunk_size ({self.chunk_size})"
            )
        if self.inner_batch_size > self.outer_batch_size:
            raise ValueError(
                f"inner_batch_size ({self.inner_batch_size}) must be <= "
                f"outer_batch_size ({self.outer_batch_size})"
            )
        return self


# Singleton: import `settings` wherever needed.
settings = Settings()
