"""Text chunking strategies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_text_splitters import RecursiveCharacterTextSplitter

if TYPE_CHECKING:
    from langchain_core.documents import Document

DEFAULT_SEPARATORS = ["\n\n", "\n", " ", ""]


def split_documents(
    documents: list[Document],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> list[Document]:
    """Split *documents* into overlapping windows for embedding.

    Parameters
    ----------
    documents:
        Enriched pages produced by the loader and metadata merge.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of characters shared by consecutive chunks of one document.

    Returns
    -------
    list[Document]
        Chunks in document order, left to right within a document.  Each
        chunk is an exact substring of its parent and carries the parent's
        metadata unchanged.  Trimming happens later, when records are built.
    """
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
        )
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=DEFAULT_SEPARATORS,
        keep_separator=True,
        strip_whitespace=False,
    )
    return splitter.split_documents(documents)
