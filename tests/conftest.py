import os
import pytest
from fastapi.testclient import TestClient

# Keep the suite on in-memory SQLite unless a store is explicitly requested
os.environ.setdefault("PYTEST_RUNNING", "1")

from region_catalog.db.database import Database, SQLITE_MEMORY_URL, get_db
from region_catalog.db import schemas
from region_catalog.api.main import create_app
from region_catalog.services.region_catalog_service import RegionCatalogService


@pytest.fixture
def database():
    db = Database(SQLITE_MEMORY_URL)
    db.open()
    try:
        yield db
    finally:
        db.close()


# Per-test session bound to the in-memory store
@pytest.fixture
def db_session(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def service(db_session):
    return RegionCatalogService(db_session)


@pytest.fixture
def app(database, db_session):
    application = create_app(database)

    # FastAPI dependency override so endpoints share the test session
    def _override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = _override_get_db
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def region_factory(service):
    def _create(code: str = "th", default_locale: str = "th", locales=None, **fields):
        payload = {
            "code": code,
            "name": fields.pop("name", code.upper()),
            "native_name": fields.pop("native_name", code.upper()),
            "icon_ref": fields.pop("icon_ref", f"/translate/{code}.png"),
            "default_locale": default_locale,
            "supported_locales": locales if locales is not None else [],
            **fields,
        }
        return service.create_region(schemas.RegionCreate(**payload))
    return _create
