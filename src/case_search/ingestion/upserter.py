"""Batched writes of vector records into the index."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from case_search.retrieval.base import VectorStoreBase
    from case_search.retrieval.models import VectorRecord

logger = logging.getLogger(__name__)


def upsert_records(
    store: VectorStoreBase,
    index_name: str,
    records: Sequence[VectorRecord],
    sub_batch_size: int = 2,
) -> int:
    """Upsert *records* in consecutive sub-batches of at most *sub_batch_size*.

    One store call per sub-batch, issued sequentially to stay under the
    provider's payload limit.  Upsert is by id, so retrying a sub-batch is
    safe.  Returns the number of records written.
    """
    if sub_batch_size < 1:
        raise ValueError(f"sub_batch_size must be >= 1, got {sub_batch_size}")

    written = 0
    for start in range(0, len(records), sub_batch_size):
        batch = list(records[start : start + sub_batch_size])
        logger.debug("Upserting records %d-%d into %r", start + 1, start + len(batch), index_name)
        store.upsert(index_name, batch)
        written += len(batch)
    return written
