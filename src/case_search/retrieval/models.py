"""Domain models exchanged with the vector store."""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, Field

MetadataValue = Union[str, int, float, bool, list[str]]


class VectorRecord(BaseModel):
    """A single vector written to the index.

    Attributes
    ----------
    id:
        Unique record identifier (a fresh UUID per chunk).  Re-upserting the
        same id overwrites the record.
    values:
        The embedding.
    metadata:
        Flat, primitive-only metadata; always includes ``id`` and the
        trimmed chunk text under ``pageContent``.
    """

    id: str
    values: list[float]
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    def as_pinecone(self) -> dict[str, Any]:
        """Return the dict shape accepted by ``Index.upsert``."""
        return {"id": self.id, "values": self.values, "metadata": self.metadata}


class VectorMatch(BaseModel):
    """One nearest-neighbour hit returned by :meth:`VectorStoreBase.query`."""

    id: str
    score: float | None = None
    values: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class IndexStats(BaseModel):
    """Subset of index statistics the bootstrap gate relies on."""

    total_record_count: int = 0


class SearchResult(BaseModel):
    """A search hit as returned over HTTP."""

    pageContent: str  # noqa: N815
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float | None = None
