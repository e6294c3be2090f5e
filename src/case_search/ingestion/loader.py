"""Document loaders: thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import DirectoryLoader, PyPDFLoader

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

PDF_GLOB = "**/*.pdf"


def load_documents(source_dir: str | Path, glob: str = PDF_GLOB) -> list[Document]:
    """Recursively load every PDF under *source_dir*, one ``Document`` per page.

    Parameters
    ----------
    source_dir:
        Root directory containing the case PDFs.
    glob:
        File-matching pattern forwarded to ``DirectoryLoader``.  Files that
        do not match (text files, images, the metadata JSON …) are ignored.

    Returns
    -------
    list[Document]
        Pages in sorted file order.  ``metadata["source"]`` holds the file
        path; ``PyPDFLoader`` adds page and document-info fields.
    """
    root = Path(source_dir)
    if not root.is_dir():
        logger.warning("Document directory %s does not exist", root)
        return []

    loader = DirectoryLoader(
        str(root),
        glob=glob,
        loader_cls=PyPDFLoader,  # type: ignore[arg-type]
        recursive=True,
        show_progress=False,
        use_multithreading=False,
    )
    documents = loader.load()
    documents.sort(key=lambda d: (str(d.metadata.get("source", "")), d.metadata.get("page", 0)))
    logger.info("Loaded %d pages from %s", len(documents), root)
    return documents

