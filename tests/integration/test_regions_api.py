from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import QueuePool

from region_catalog.api.main import create_app
from region_catalog.db.database import Database
from region_catalog.db.repositories import regions as repo_regions


def _thailand(**overrides):
    payload = {
        "code": "th",
        "name": "Thailand",
        "native_name": "ประเทศไทย",
        "icon_ref": "/translate/th.png",
        "default_locale": "th",
        "supported_locales": [
            {"locale_code": "th", "sort_rank": 0},
            {"locale_code": "en", "sort_rank": 1},
        ],
    }
    payload.update(overrides)
    return payload


def test_create_and_get_region(client):
    r = client.post("/translate-regions", json=_thailand())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["supported_locales"] == ["th", "en"]
    assert body["is_active"] is True
    assert body["sort_rank"] is None

    r = client.get("/translate-regions/th")
    assert r.status_code == 200
    assert r.json()["native_name"] == "ประเทศไทย"


def test_create_region_errors(client):
    assert client.post("/translate-regions", json=_thailand()).status_code == 201

    dup = client.post("/translate-regions", json=_thailand())
    assert dup.status_code == 409
    assert dup.json()["code"] == "DUPLICATE_REGION"
    assert dup.json()["kind"] == "conflict"

    bad = client.post("/translate-regions", json=_thailand(code="kh", default_locale="km"))
    assert bad.status_code == 400
    assert bad.json()["code"] == "INVALID_DEFAULT_LOCALE"

    invalid = client.post("/translate-regions", json=_thailand(code="x" * 40))
    assert invalid.status_code == 422

    extra = client.post("/translate-regions", json=_thailand(code="la", unexpected=True))
    assert extra.status_code == 422


def test_list_regions_with_active_filter(client):
    client.post("/translate-regions", json=_thailand(sort_rank=1))
    client.post(
        "/translate-regions",
        json=_thailand(code="kh", default_locale="km", supported_locales=[], is_active=False, sort_rank=0),
    )

    assert [r["code"] for r in client.get("/translate-regions").json()] == ["kh", "th"]
    assert [r["code"] for r in client.get("/translate-regions?is_active=true").json()] == ["th"]
    assert [r["code"] for r in client.get("/translate-regions?is_active=false").json()] == ["kh"]
    # Unrecognized values do not filter
    assert len(client.get("/translate-regions?is_active=maybe").json()) == 2


def test_region_lifecycle_scenario(client):
    client.post("/translate-regions", json=_thailand())

    r = client.delete("/translate-regions/th/locales/th")
    assert r.status_code == 400
    assert r.json()["code"] == "DEFAULT_LOCALE_REMOVAL_FORBIDDEN"

    r = client.patch("/translate-regions/th", json={"default_locale": "en"})
    assert r.status_code == 200
    assert r.json()["default_locale"] == "en"

    r = client.delete("/translate-regions/th/locales/th")
    assert r.status_code == 204
    assert client.get("/translate-regions/th").json()["supported_locales"] == ["en"]

    r = client.post("/translate-regions/th/locales", json={"locale_code": "kh"})
    assert r.status_code == 201
    assert r.json() == {"region_code": "th", "locale_code": "kh", "sort_rank": 2}
    assert client.get("/translate-regions/th").json()["supported_locales"] == ["en", "kh"]


def test_patch_region_partial_and_validation(client):
    client.post("/translate-regions", json=_thailand(sort_rank=4))

    r = client.patch("/translate-regions/th", json={"is_active": False})
    assert r.status_code == 200
    assert r.json()["is_active"] is False
    assert r.json()["sort_rank"] == 4

    r = client.patch("/translate-regions/th", json={"sort_rank": None})
    assert r.json()["sort_rank"] is None

    assert client.patch("/translate-regions/th", json={"name": None}).status_code == 422
    assert client.patch("/translate-regions/th", json={"code": "kh"}).status_code == 422

    r = client.patch("/translate-regions/th", json={"default_locale": "fr"})
    assert r.status_code == 400
    assert client.patch("/translate-regions/nope", json={"name": "x"}).status_code == 404


def test_delete_region_then_locales_404(client):
    client.post("/translate-regions", json=_thailand())
    assert client.delete("/translate-regions/th").status_code == 204
    assert client.get("/translate-regions/th").status_code == 404
    r = client.get("/translate-regions/th/locales")
    assert r.status_code == 404
    assert r.json()["code"] == "REGION_NOT_FOUND"
    assert client.delete("/translate-regions/th").status_code == 404


def test_locale_endpoints(client):
    client.post("/translate-regions", json=_thailand())

    r = client.get("/translate-regions/th/locales")
    assert r.status_code == 200
    assert r.json() == [
        {"region_code": "th", "locale_code": "th", "sort_rank": 0},
        {"region_code": "th", "locale_code": "en", "sort_rank": 1},
    ]

    dup = client.post("/translate-regions/th/locales", json={"locale_code": "en"})
    assert dup.status_code == 409
    assert dup.json()["code"] == "DUPLICATE_MEMBERSHIP"

    r = client.patch("/translate-regions/th/locales/en", json={"sort_rank": 0})
    assert r.status_code == 200
    assert r.json()["sort_rank"] == 0

    r = client.patch("/translate-regions/th/locales/en", json={})
    assert r.status_code == 200
    assert r.json()["sort_rank"] == 0

    missing = client.patch("/translate-regions/th/locales/lo", json={"sort_rank": 3})
    assert missing.status_code == 404
    assert missing.json()["code"] == "MEMBERSHIP_NOT_FOUND"

    assert client.post("/translate-regions/th/locales", json={"locale_code": "lo", "sort_rank": -1}).status_code == 422
    assert client.post("/translate-regions/nope/locales", json={"locale_code": "lo"}).status_code == 404
    assert client.delete("/translate-regions/th/locales/lo").status_code == 404


def test_store_failure_maps_to_503(client, monkeypatch):
    def _unavailable(db, code, **kw):
        raise OperationalError("SELECT", {}, Exception("could not connect to server"))

    monkeypatch.setattr(repo_regions, "get_region", _unavailable)
    r = client.get("/translate-regions/th")
    assert r.status_code == 503
    assert r.headers["retry-after"] == "1"
    assert r.json()["code"] == "STORE_UNAVAILABLE"


def test_health_endpoints(client):
    assert client.get("/health").json() == {"status": "ok"}
    r = client.get("/health/db")
    assert r.status_code == 200
    assert r.json()["status"] == "success"
    assert r.json()["data"] == {"dialect": "sqlite"}


def test_pool_timeout_maps_to_503(tmp_path):
    database = Database(
        f"sqlite:///{tmp_path / 'catalog.db'}",
        poolclass=QueuePool,
        pool_size=1,
        max_overflow=0,
        pool_timeout=0.2,
    )
    database.open()
    held = database.engine.connect()
    try:
        with TestClient(create_app(database)) as c:
            r = c.get("/translate-regions")
        assert r.status_code == 503
        assert r.headers["retry-after"] == "1"
        assert r.json()["code"] == "STORE_UNAVAILABLE"
    finally:
        held.close()
        database.close()
