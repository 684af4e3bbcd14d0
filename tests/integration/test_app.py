"""
HTTP-level tests for the FastAPI adapter.

Covers the full route table, the error-to-status mapping, and that the
redirect route counts clicks while the JSON routes never do.
"""

from fastapi.testclient import TestClient

from main import create_app
from tinylink.errors import LinkError, StorageUnavailable
from tinylink.storage.storage import Storage


def _create(client, code="go", url="golang.org"):
    return client.post("/api/links", json={"code": code, "url": url})


def test_health_returns_ok(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "version": "1.0"}


def test_create_link(client):
    resp = _create(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["ok"] is True
    assert body["link"]["code"] == "go"
    assert body["link"]["url"] == "https://golang.org"
    assert body["link"]["clicks"] == 0
    assert body["link"]["last_clicked"] is None


def test_create_missing_fields_is_400(client):
    resp = client.post("/api/links", json={"url": "golang.org"})
    assert resp.status_code == 400
    assert "Missing fields" in resp.json()["error"]

    resp = client.post("/api/links", json={"code": "go", "url": "  "})
    assert resp.status_code == 400


def test_create_duplicate_is_409(client):
    assert _create(client).status_code == 201
    resp = _create(client, url="go.dev")
    assert resp.status_code == 409
    assert resp.json()["error"] == "Code exists: go"
    assert client.get("/api/links/go").json()["url"] == "https://golang.org"


def test_list_links_newest_first(client):
    for code in ("a", "b", "c"):
        _create(client, code=code, url=f"{code}.example")
    resp = client.get("/api/links")
    assert resp.status_code == 200
    assert [link["code"] for link in resp.json()] == ["c", "b", "a"]


def test_get_link(client):
    _create(client)
    resp = client.get("/api/links/go")
    assert resp.status_code == 200
    assert resp.json()["url"] == "https://golang.org"


def test_get_missing_is_404(client):
    resp = client.get("/api/links/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found: nope"}


def test_delete_link(client):
    _create(client)
    resp = client.delete("/api/links/go")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert client.get("/api/links/go").status_code == 404
    assert client.get("/go", follow_redirects=False).status_code == 404


def test_delete_missing_is_404(client):
    assert client.delete("/api/links/nope").status_code == 404


def test_redirect_counts_clicks(client):
    _create(client)
    for _ in range(3):
        resp = client.get("/go", follow_redirects=False)
        assert resp.status_code == 302
        assert resp.headers["location"] == "https://golang.org"

    link = client.get("/api/links/go").json()
    assert link["clicks"] == 3
    assert link["last_clicked"] is not None


def test_redirect_missing_is_404_and_creates_nothing(client, storage):
    resp = client.get("/nope", follow_redirects=False)
    assert resp.status_code == 404
    assert storage.get("nope") is None


def test_browser_redirect_is_followed(client):
    # Internal target so the TestClient can follow the hop inside the app
    original = "http://testserver/healthz"
    _create(client, code="hz", url=original)

    resp = client.get("/hz")
    assert resp.status_code == 200
    assert resp.history, "Expected at least one redirect hop in history"
    assert resp.history[0].status_code == 302
    assert resp.history[0].headers.get("location") == original


def test_storage_failure_is_503():
    class BrokenStorage(Storage):
        def list(self):
            raise StorageUnavailable("Database error: disk I/O error")

    client = TestClient(create_app(store=BrokenStorage()))
    resp = client.get("/api/links")
    assert resp.status_code == 503
    assert "disk I/O error" in resp.json()["error"]


def test_lifespan_closes_injected_store():
    store = Storage()
    with TestClient(create_app(store=store)) as client:
        assert client.get("/healthz").status_code == 200
    assert store.closed is True


def test_lifespan_builds_store_from_config(monkeypatch):
    monkeypatch.setenv("TINYLINK_STORAGE_BACKEND", "memory")
    app = create_app()
    with TestClient(app) as client:
        assert _create(client).status_code == 201
        assert isinstance(app.state.store, Storage)
    assert app.state.store.closed is True


def test_create_without_body_is_400(client):
    resp = client.post("/api/links")
    assert resp.status_code == 400
    assert "Missing fields" in resp.json()["error"]


def test_create_non_object_body_is_400(client):
    resp = client.post("/api/links", json=["go", "golang.org"])
    assert resp.status_code == 400
    assert "Missing fields" in resp.json()["error"]


def test_create_non_string_code_is_400(client, storage):
    resp = client.post("/api/links", json={"code": 123, "url": "golang.org"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing fields: code"}
    assert storage.list() == []


def test_create_malformed_json_is_400(client):
    resp = client.post(
        "/api/links", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400


def test_bare_link_error_is_500_and_logged(caplog):
    class FailingStorage(Storage):
        def list(self):
            raise LinkError("unexpected")

    client = TestClient(create_app(store=FailingStorage()))
    with caplog.at_level("ERROR", logger="tinylink"):
        resp = client.get("/api/links")
    assert resp.status_code == 500
    assert resp.json() == {"error": "unexpected"}
    assert "GET /api/links failed: unexpected" in caplog.text
