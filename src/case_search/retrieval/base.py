"""Abstract base class for vector-store backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing the abstract methods.  The bootstrap pipeline and the
search service are backend-agnostic, and tests substitute an in-memory
implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from case_search.retrieval.models import IndexStats, VectorMatch, VectorRecord


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Every method takes the target index name explicitly; one store handle
    can serve several indexes.
    """

    # -- index management -----------------------------------------------------

    @abstractmethod
    def index_exists(self, name: str) -> bool:
        """Return ``True`` when the index *name* exists."""
        ...

    @abstractmethod
    def create_index(self, name: str, *, dimension: int) -> None:
        """Create index *name* and block until it is ready.

        Losing a creation race to another writer is not an error.
        """
        ...

    @abstractmethod
    def describe_index_stats(self, name: str) -> IndexStats:
        """Return statistics for *name*; raises if the backend cannot answer."""
        ...

    # -- data -----------------------------------------------------------------

    @abstractmethod
    def upsert(self, name: str, records: list[VectorRecord]) -> None:
        """Insert or overwrite *records* by id in a single call."""
        ...

    @abstractmethod
    def query(
        self,
        name: str,
        vector: list[float],
        *,
        top_k: int = 20,
        include_values: bool = False,
    ) -> list[VectorMatch]:
        """Return the *top_k* nearest records to *vector*, most similar first."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
