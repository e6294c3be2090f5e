"""
Ingestion: the bootstrap pipeline that builds the case-law vector index.

Raw PDFs are loaded page by page, joined with the curated side-table
metadata, split into overlapping chunks, embedded and upserted into the
vector index.  :mod:`case_search.ingestion.bootstrap` composes the steps
and owns per-batch failure isolation.
"""
