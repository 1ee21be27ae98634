"""
FastAPI app assembly: logging, store lifecycle, error mapping and router wiring.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError
from starlette.requests import Request
from starlette.responses import JSONResponse

from region_catalog.utils.settings import get_settings

# Configure logging
LOG_LEVEL_NAME = get_settings().log_level
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)

from region_catalog.db.database import Database
from region_catalog.api.health import router as health_router
from region_catalog.api.regions import router as regions_router
from region_catalog.services.errors import (
    CatalogError,
    KIND_CONFLICT,
    KIND_INVALID_STATE,
    KIND_NOT_FOUND,
)

_STATUS_BY_KIND = {
    KIND_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    KIND_CONFLICT: status.HTTP_409_CONFLICT,
    KIND_INVALID_STATE: status.HTTP_400_BAD_REQUEST,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Optional[Database] = getattr(app.state, "database", None)
    if database is None:
        database = Database()
        app.state.database = database
    # Only close what this lifespan opened; an injected open store stays with its owner
    opened_here = not database.is_open
    database.open()
    logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)
    try:
        yield
    finally:
        if opened_here:
            database.close()


async def catalog_error_handler(request: Request, exc: CatalogError):
    return JSONResponse(
        {"detail": exc.message, "code": exc.code, "kind": exc.kind},
        status_code=_STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST),
    )


async def store_unavailable_handler(request: Request, exc: Exception):
    """Connectivity failures and pool or statement timeouts are retryable."""
    logger.error(f"Store unavailable for {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        {"detail": "Store unavailable, retry later", "code": "STORE_UNAVAILABLE"},
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        headers={"Retry-After": "1"},
    )


def create_app(database: Optional[Database] = None) -> FastAPI:
    app = FastAPI(
        title="Region Catalog Service",
        description="API for managing translate regions and their supported locales.",
        version="1.0.0",
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(get_settings().cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(OperationalError, store_unavailable_handler)
    app.add_exception_handler(PoolTimeoutError, store_unavailable_handler)

    app.include_router(health_router)
    app.include_router(regions_router)
    return app


app = create_app()
