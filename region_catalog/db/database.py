"""
Database engine and session management.

`Database` owns the SQLAlchemy engine for the lifetime of the application:
it is opened on startup, handed to request handlers through `get_db`, and
disposed on shutdown. Test runs fall back to in-memory SQLite.
"""
import logging
import math
import os
import sys
from typing import Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from region_catalog.utils.settings import get_settings

logger = logging.getLogger(__name__)

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while an individual test is running, so
    also look for the pytest package in ``sys.modules``, which is present once
    collection has started.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


def get_database_url() -> str:
    """Resolve the store URL from the environment.

    Precedence: CATALOG_TEST_DB, DATABASE_URL, then the individual POSTGRES_*
    components. Under pytest with nothing configured, in-memory SQLite is used.
    """
    explicit_test_db = os.getenv("CATALOG_TEST_DB")
    if explicit_test_db:
        return explicit_test_db

    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    db_user = os.getenv("POSTGRES_USER")
    db_password = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST")
    db_port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("POSTGRES_DB")

    if not all([db_user, db_password, db_host, db_port, db_name]):
        if _is_pytest_runtime():
            return SQLITE_MEMORY_URL
        missing = []
        if not db_user: missing.append("POSTGRES_USER")
        if not db_password: missing.append("POSTGRES_PASSWORD")
        if not db_host: missing.append("POSTGRES_HOST")
        if not db_port: missing.append("POSTGRES_PORT")
        if not db_name: missing.append("POSTGRES_DB")
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _engine_kwargs(url: str, timeout: float) -> dict:
    if url.startswith("sqlite"):
        if ":memory:" in url:
            # StaticPool so the schema persists across connections
            return {
                "connect_args": {"check_same_thread": False},
                "poolclass": StaticPool,
            }
        return {"connect_args": {"check_same_thread": False, "timeout": timeout}}
    return {
        "pool_pre_ping": True,
        "pool_timeout": timeout,
        "connect_args": {"connect_timeout": max(1, math.ceil(timeout))},
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # pragma: no cover - trivial
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owner of the engine and session factory for the persistence port."""

    def __init__(self, url: Optional[str] = None, *, timeout: Optional[float] = None, **engine_kwargs):
        self.url = url or get_database_url()
        self.timeout = timeout if timeout is not None else get_settings().store_timeout_seconds
        self._engine_kwargs = engine_kwargs
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Database":
        if self.engine is not None:
            return self
        kwargs = _engine_kwargs(self.url, self.timeout)
        kwargs.update(self._engine_kwargs)
        engine = create_engine(self.url, **kwargs)
        if engine.dialect.name == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        # Schema bootstrap; there is no migration tooling.
        from region_catalog.db import models  # local import to avoid circular import at module load
        models.Base.metadata.create_all(bind=engine)

        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("database_open: dialect=%s", engine.dialect.name)
        return self

    def close(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        logger.info("database_closed: dialect=%s", self.engine.dialect.name)
        self.engine = None
        self.SessionLocal = None

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database is not open; call open() before requesting a session")
        return self.SessionLocal()

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def apply_statement_timeout(db: Session, timeout: Optional[float]) -> None:
    """Bound every statement of the current transaction to ``timeout`` seconds.

    Only PostgreSQL supports a per-transaction statement timeout; other
    dialects rely on the connection-level timeouts set when the engine is built.
    """
    if timeout is None:
        return
    bind = db.get_bind()
    if bind.dialect.name != "postgresql":
        return
    # SET LOCAL does not accept bind parameters
    db.execute(text(f"SET LOCAL statement_timeout = {max(1, int(timeout * 1000))}"))


def get_db(request: Request):
    """Dependency to get a database session."""
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
