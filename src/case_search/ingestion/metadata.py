"""Side-table metadata: reading, joining onto pages, and flattening for the vector store.

The curated table lives next to the PDFs as ``db.json``::

    {"documents": [{"filename": "case12.pdf", "title": "Roe v. Wade", ...}]}

Rows are joined onto loader output by file basename.  The vector store only
accepts flat primitive metadata values, so everything is passed through
:func:`flatten_metadata` before upsert.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from langchain_core.documents import Document
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)

PAGE_CONTENT_KEY = "pageContent"


class CaseMetadata(BaseModel):
    """One curated row describing a case file.

    Attributes
    ----------
    filename:
        Basename of the PDF the row describes (join key).
    title, plaintiff, defendant, date, topic, outcome:
        Descriptive fields shown in search results.  Any of them may be
        absent from the table.  Numeric values (e.g. a bare year) are
        stored as strings.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    filename: str
    title: str | None = None
    plaintiff: str | None = None
    defendant: str | None = None
    date: str | None = None
    topic: str | None = None
    outcome: str | None = None

    def descriptive_fields(self) -> dict[str, str]:
        """Return the populated fields, ``filename`` included."""
        return self.model_dump(exclude_none=True)


def read_side_metadata(path: str | Path) -> list[CaseMetadata]:
    """Parse the side table at *path*.

    A missing or corrupt table is not fatal: a warning is logged and an
    empty list returned so ingestion proceeds with loader metadata only.
    Malformed rows are skipped individually.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            payload = json.load(fh)
    except FileNotFoundError:
        logger.warning("Side-table metadata %s not found; continuing without it", path)
        return []
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read side-table metadata from %s: %s", path, exc)
        return []

    if not isinstance(payload, dict) or not isinstance(payload.get("documents", []), list):
        logger.warning("Side-table metadata %s has unexpected shape; ignoring it", path)
        return []

    rows: list[CaseMetadata] = []
    for i, raw in enumerate(payload.get("documents", [])):
        try:
            rows.append(CaseMetadata.model_validate(raw))
        except ValidationError as exc:
            logger.warning("Skipping side-table row %d: %s", i, exc.errors()[0]["msg"])
    logger.info("Read %d side-table rows from %s", len(rows), path)
    return rows


def index_side_metadata(rows: Iterable[CaseMetadata]) -> dict[str, CaseMetadata]:
    """Key *rows* by filename.  A later duplicate replaces an earlier one."""
    return {row.filename: row for row in rows}


def merge_metadata(doc: Document, side_table: Mapping[str, CaseMetadata]) -> Document:
    """Return a new document whose metadata is overlaid with its side-table row.

    On a match, curated fields take precedence over loader fields and the
    page text is copied under ``pageContent`` for display.  Without a match
    the loader metadata passes through untouched.
    """
    source = doc.metadata.get("source")
    row = side_table.get(os.path.basename(str(source))) if source else None
    if row is None:
        return Document(page_content=doc.page_content, metadata=dict(doc.metadata))

    metadata = {
        **doc.metadata,
        **row.descriptive_fields(),
        PAGE_CONTENT_KEY: doc.page_content,
    }
    return Document(page_content=doc.page_content, metadata=metadata)


def _is_primitive(value: Any) -> bool:
    if isinstance(value, (str, bool, int, float)):
        return True
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def flatten_metadata(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Reduce *raw* to the primitive-only schema the vector store accepts.

    ``pdf.pageCount`` is hoisted to ``totalPages``; ``loc`` spans and any
    other nested or ``None`` value are dropped.  Applying it twice gives the
    same result as applying it once.
    """
    flat: dict[str, Any] = {}
    pdf = raw.get("pdf")
    if isinstance(pdf, Mapping) and pdf.get("pageCount"):
        flat["totalPages"] = pdf["pageCount"]

    for key, value in raw.items():
        if key in ("pdf", "loc") or key in flat:
            continue
        if _is_primitive(value):
            flat[key] = list(value) if isinstance(value, list) else value
    return flat
