import logging

import pytest
from fastapi.testclient import TestClient

from audit import repository as audit_repository
from core import db


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.text == "OK"


def test_logs_are_listed_newest_first(client, category):
    client.put(f"/api/categories/{category['id']}", json={"name": "Renamed"})

    actions = [row["action"] for row in client.get("/api/logs").json()]

    assert actions == [
        f"Category updated with ID: {category['id']}",
        "Category created: Guides",
    ]


def test_audit_failure_does_not_fail_the_request(client, fake_db, monkeypatch, caplog):
    async def broken_insert(action):
        raise RuntimeError("logs table locked")

    monkeypatch.setattr(audit_repository, "insert_log", broken_insert)

    with caplog.at_level(logging.ERROR, logger="audit.service"):
        resp = client.post("/api/categories", json={"name": "Audio"})

    assert resp.status_code == 201
    assert fake_db.logs == []
    assert "audit_log_failed" in caplog.text


def test_unexpected_errors_become_generic_500(client, monkeypatch, caplog):
    from categories import repository as categories_repository

    async def broken_list():
        raise ConnectionError("db host unreachable")

    monkeypatch.setattr(categories_repository, "list_categories", broken_list)

    with caplog.at_level(logging.ERROR, logger="core.errors"):
        resp = client.get("/api/categories")

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error."}
    assert "unreachable" not in resp.text
    assert "unhandled_error" in caplog.text


def test_invalid_path_id_is_a_client_error(client):
    resp = client.delete("/api/categories/abc")
    assert resp.status_code == 400


def test_cors_allows_configured_origin(client):
    resp = client.options(
        "/api/categories",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert resp.headers.get("access-control-allow-origin") == "http://localhost:5173"


def test_database_url_drops_sslmode_only():
    url = db.database_url(" postgresql://u:p@host:5432/app?sslmode=require&application_name=api ")
    assert url == "postgresql://u:p@host:5432/app?application_name=api"


def test_database_url_is_required():
    with pytest.raises(RuntimeError):
        db.database_url("")


def test_pool_must_be_initialized():
    with pytest.raises(RuntimeError):
        db.pool()


def test_schema_file_defines_all_tables():
    sql = db.SCHEMA_PATH.read_text(encoding="utf-8")
    for table in ("users", "categories", "resources", "logs"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in sql


def test_lifespan_wires_pool_schema_and_storage(monkeypatch, settings, fake_db):
    import main
    from core.storage import LocalStorage

    calls = []

    async def fake_init_pool(dsn, **kwargs):
        calls.append(("init", dsn, kwargs["max_size"]))

    async def fake_apply_schema():
        calls.append(("schema",))

    async def fake_close_pool():
        calls.append(("close",))

    monkeypatch.setattr(db, "init_pool", fake_init_pool)
    monkeypatch.setattr(db, "apply_schema", fake_apply_schema)
    monkeypatch.setattr(db, "close_pool", fake_close_pool)

    app = main.create_app(settings)
    with TestClient(app) as client:
        assert isinstance(app.state.storage, LocalStorage)
        assert client.get("/healthz").text == "OK"

    assert calls == [("init", settings.database_url, settings.db_pool_max_size), ("schema",), ("close",)]


def test_internal_error_detail_stays_server_side(client, monkeypatch, caplog):
    from categories import repository as categories_repository
    from core.errors import InternalError

    async def no_row(name):
        raise InternalError("Failed to create category.")

    monkeypatch.setattr(categories_repository, "create_category", no_row)

    with caplog.at_level(logging.ERROR, logger="core.errors"):
        resp = client.post("/api/categories", json={"name": "Audio"})

    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error."}
    assert "Failed to create category." in caplog.text
