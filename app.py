"""
App assembly entry point.

Re-exports the FastAPI `app` from `region_catalog.api.main` so the service can
be started with `uvicorn app:app`.
"""

from region_catalog.api.main import app  # noqa: F401
