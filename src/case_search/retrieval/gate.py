"""Index existence / readiness gate.

Bootstrap is invoked on every cold start; these two checks make repeat
invocations cheap once the index holds data.
"""

from __future__ import annotations

import logging

from case_search.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


def ensure_index(store: VectorStoreBase, name: str, *, dimension: int) -> bool:
    """Create index *name* with *dimension* unless it already exists.

    Returns ``True`` when this call created the index.
    """
    if store.index_exists(name):
        logger.debug("Index %r already exists", name)
        return False
    logger.info("Creating index %r (dimension=%d)", name, dimension)
    store.create_index(name, dimension=dimension)
    return True


def index_has_vectors(store: VectorStoreBase, name: str) -> bool:
    """Return ``True`` iff index *name* reports at least one record.

    A failing stats query is treated as "empty": re-ingesting into a
    populated index only overwrites records, whereas skipping an empty one
    would leave search with nothing to return.
    """
    try:
        stats = store.describe_index_stats(name)
    except Exception:
        logger.warning(
            "Could not read stats for index %r; treating it as empty", name, exc_info=True
        )
        return False
    logger.info("Index %r reports %d records", name, stats.total_record_count)
    return stats.total_record_count > 0
