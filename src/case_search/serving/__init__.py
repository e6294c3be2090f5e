"""
Serving: FastAPI application for bootstrap, ingestion and search.

The UI calls ``/api/bootstrap`` on load and ``/api/search`` per query.
"""
