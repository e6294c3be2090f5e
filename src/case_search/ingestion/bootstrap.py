"""Bootstrap orchestrator: builds the case index exactly once.

The run walks a fixed sequence of states::

    NOT_STARTED → INDEX_ENSURED → SKIPPED
                                → LOADING → MERGING → SPLITTING → BATCHING → DONE

with ``FAILED`` reachable from any state.  A populated index short-circuits
the run, so calling it on every cold start is cheap.  Inside ``BATCHING``
each outer batch is embedded in one call and upserted in small inner
batches; a failing batch is logged and skipped and the run carries on.

Run from the command line::

    python -m case_search.ingestion.bootstrap --index legal-cases
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

import requests
import urllib3
from pydantic import BaseModel, Field

from case_search.config import Settings, settings
from case_search.ingestion.chunker import split_documents
from case_search.ingestion.embedder import Embedder, EmbeddingMode, build_embeddings, ensure_aligned
from case_search.ingestion.loader import load_documents
from case_search.ingestion.metadata import (
    PAGE_CONTENT_KEY,
    flatten_metadata,
    index_side_metadata,
    merge_metadata,
    read_side_metadata,
)
from case_search.ingestion.upserter import upsert_records
from case_search.ingestion.validation import is_valid_content
from case_search.retrieval import build_vector_store
from case_search.retrieval.gate import ensure_index, index_has_vectors
from case_search.retrieval.models import VectorRecord

if TYPE_CHECKING:
    from langchain_core.documents import Document

    from case_search.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class BootstrapConfigError(ValueError):
    """The run cannot start: bad configuration or input."""


class NoDocumentsFoundError(BootstrapConfigError):
    """The document directory yielded no PDFs."""


class BootstrapState(str, Enum):
    NOT_STARTED = "not_started"
    INDEX_ENSURED = "index_ensured"
    SKIPPED = "skipped"
    LOADING = "loading"
    MERGING = "merging"
    SPLITTING = "splitting"
    BATCHING = "batching"
    DONE = "done"
    FAILED = "failed"


class BootstrapStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"
    INVALID_INPUT = "invalid_input"
    TIMEOUT = "timeout"


class BootstrapResult(BaseModel):
    """Outcome of one bootstrap run.

    ``error`` carries diagnostics for logs and the CLI.  Over HTTP only the
    status is exposed, plus the message for ``INVALID_INPUT``.
    """

    index_name: str
    status: BootstrapStatus = BootstrapStatus.FAILED
    state: BootstrapState = BootstrapState.NOT_STARTED
    documents_loaded: int = 0
    valid_documents: int = 0
    chunks_created: int = 0
    batches_total: int = 0
    records_upserted: int = 0
    failed_batches: list[int] = Field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status in (BootstrapStatus.SUCCESS, BootstrapStatus.SKIPPED)


def is_connect_timeout(exc: BaseException) -> bool:
    """Return ``True`` if *exc* or anything in its cause chain is a connect timeout.

    A read timeout in the chain means the connection was established, so it
    never counts, even when raised while handling a socket-level timeout.
    """
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, (requests.exceptions.ReadTimeout, urllib3.exceptions.ReadTimeoutError)):
            return False
        if isinstance(
            current,
            (TimeoutError, requests.exceptions.ConnectTimeout, urllib3.exceptions.ConnectTimeoutError),
        ):
            return True
        if isinstance(current, urllib3.exceptions.MaxRetryError) and isinstance(
            current.reason, urllib3.exceptions.ConnectTimeoutError
        ):
            return True
        current = current.__cause__ or current.__context__
    return False


class BootstrapOrchestrator:
    """Composes gate, loader, merge, split, embed and upsert into one run.

    Parameters
    ----------
    store:
        Vector-store backend holding the target index.
    embedder:
        Embedder used in document mode.
    config:
        Pipeline settings (paths, chunking, batching, dimension).
    sleep:
        Called with ``batch_delay_seconds`` between outer batches.
    id_factory:
        Produces a fresh record id per chunk.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder,
        config: Settings = settings,
        *,
        sleep: Callable[[float], None] = time.sleep,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._config = config
        self._sleep = sleep
        self._id_factory = id_factory

    def run(self, index_name: str) -> BootstrapResult:
        """Bootstrap *index_name*; never raises."""
        result = BootstrapResult(index_name=index_name or "")
        try:
            if not index_name or not index_name.strip():
                raise BootstrapConfigError("A target index name is required")

            logger.info("Running bootstrap procedure against index %r", index_name)
            ensure_index(self._store, index_name, dimension=self._config.embedding_dimension)
            result.state = BootstrapState.INDEX_ENSURED

            if index_has_vectors(self._store, index_name):
                logger.info("Index %r already exists and has vectors in it - returning early", index_name)
                result.state = BootstrapState.SKIPPED
                result.status = BootstrapStatus.SKIPPED
                return result

            result.state = BootstrapState.LOADING
            logger.info("Loading documents and metadata...")
            documents = load_documents(self._config.docs_dir)
            result.documents_loaded = len(documents)
            if not documents:
                logger.warning("No PDF documents found in %s", self._config.docs_dir)
                raise NoDocumentsFoundError("No documents found")
            side_table = index_side_metadata(read_side_metadata(self._config.metadata_path))

            result.state = BootstrapState.MERGING
            enriched = self._enrich(documents, side_table)
            result.valid_documents = len(enriched)
            logger.info("Found %d valid documents", len(enriched))

            result.state = BootstrapState.SPLITTING
            chunks = split_documents(enriched, self._config.chunk_size, self._config.chunk_overlap)
            result.chunks_created = len(chunks)
            logger.info("Created %d chunks", len(chunks))

            result.state = BootstrapState.BATCHING
            self._run_batches(index_name, chunks, result)

            result.state = BootstrapState.DONE
            result.status = BootstrapStatus.SUCCESS
            logger.info(
                "Bootstrap procedure completed: %d records upserted, %d of %d batches failed",
                result.records_upserted,
                len(result.failed_batches),
                result.batches_total,
            )
        except BootstrapConfigError as exc:
            logger.error("Bootstrap of %r aborted in state %s: %s", index_name, result.state.value, exc)
            result.state = BootstrapState.FAILED
            result.status = BootstrapStatus.INVALID_INPUT
            result.error = str(exc)
        except Exception as exc:
            logger.exception("Error during bootstrap procedure in state %s", result.state.value)
            result.state = BootstrapState.FAILED
            result.status = BootstrapStatus.TIMEOUT if is_connect_timeout(exc) else BootstrapStatus.FAILED
            result.error = f"{type(exc).__name__}: {exc}"
        return result

    # -- stages ---------------------------------------------------------------

    def _enrich(self, documents: list[Document], side_table: dict) -> list[Document]:
        max_length = self._config.max_content_length
        return [
            merge_metadata(doc, side_table)
            for doc in documents
            if is_valid_content(doc.page_content, max_length)
        ]

    def _run_batches(self, index_name: str, chunks: list[Document], result: BootstrapResult) -> None:
        size = self._config.outer_batch_size
        result.batches_total = math.ceil(len(chunks) / size)
        called_provider = False

        for batch_no, start in enumerate(range(0, len(chunks), size), start=1):
            batch = chunks[start : start + size]
            logger.info("Processing batch %d of %d", batch_no, result.batches_total)

            valid_batch = [
                chunk
                for chunk in batch
                if is_valid_content(chunk.page_content, self._config.max_content_length)
            ]
            if not valid_batch:
                logger.info("Skipping batch %d - no valid content", batch_no)
                continue

            if called_provider:
                self._sleep(self._config.batch_delay_seconds)
            called_provider = True

            try:
                result.records_upserted += self._process_batch(index_name, valid_batch)
            except Exception as exc:
                logger.error(
                    "Error processing batch %d (batch_size=%d): %s: %s",
                    batch_no,
                    len(valid_batch),
                    type(exc).__name__,
                    exc,
                )
                result.failed_batches.append(batch_no)

    def _process_batch(self, index_name: str, batch: list[Document]) -> int:
        texts = [chunk.page_content.strip() for chunk in batch]
        metadatas = []
        for chunk, text in zip(batch, texts):
            record_id = self._id_factory()
            metadatas.append({**flatten_metadata(chunk.metadata), "id": record_id, PAGE_CONTENT_KEY: text})

        vectors = self._embedder.embed(texts, EmbeddingMode.DOCUMENT)
        ensure_aligned(texts, vectors)

        records = [
            VectorRecord(id=meta["id"], values=list(vector), metadata=meta)
            for meta, vector in zip(metadatas, vectors)
        ]
        return upsert_records(self._store, index_name, records, self._config.inner_batch_size)


def bootstrap_index(
    index_name: str,
    config: Settings | None = None,
    *,
    store: VectorStoreBase | None = None,
    embedder: Embedder | None = None,
) -> BootstrapResult:
    """Build provider clients from *config* (unless given) and run the bootstrap."""
    config = config or settings
    try:
        store = store or build_vector_store(config)
        embedder = embedder or Embedder(build_embeddings(config))
    except Exception as exc:
        logger.error("Could not construct provider clients: %s", exc)
        return BootstrapResult(
            index_name=index_name or "",
            status=BootstrapStatus.FAILED,
            state=BootstrapState.FAILED,
            error=f"Provider configuration error: {exc}",
        )
    return BootstrapOrchestrator(store, embedder, config).run(index_name)


# ──────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> int:
    import argparse

    from case_search.logging_config import configure_logging

    parser = argparse.ArgumentParser(description="Bootstrap the legal-case vector index")
    parser.add_argument("--index", default=settings.pinecone_index, help="Target index name")
    parser.add_argument("--docs-dir", default=None, help="Directory of case PDFs")
    parser.add_argument("--metadata-path", default=None, help="Side-table JSON file")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    overrides = {}
    if args.docs_dir:
        overrides["docs_dir"] = args.docs_dir
    if args.metadata_path:
        overrides["metadata_path"] = args.metadata_path
    config = settings.model_copy(update=overrides)

    result = bootstrap_index(args.index, config)
    print(result.model_dump_json(indent=2))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
