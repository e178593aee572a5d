import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.main import create_app


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("STORE_PROFILE", "Entrepreneurship")
    monkeypatch.setenv("ADMIN_USER", "ops")
    monkeypatch.setenv("ADMIN_PASS", "hunter2")
    monkeypatch.setenv("SEED_ON_STARTUP", "0")
    monkeypatch.delenv("PORT", raising=False)
    s = Settings.from_env()
    assert s.profile_name == "entrepreneurship"
    assert s.listen_port == 3001
    assert not s.seed_on_startup
    assert not s.uses_default_admin_credentials


def test_settings_defaults(monkeypatch):
    for var in ("STORE_PROFILE", "PORT", "ADMIN_USER", "ADMIN_PASS", "DATABASE_URL"):
        monkeypatch.delenv(var, raising=False)
    s = Settings.from_env()
    assert s.profile.title == "Toko Online"
    assert s.listen_port == 3000
    assert s.database_url == "sqlite:///store.db"
    assert s.uses_default_admin_credentials


def test_unknown_profile_is_rejected():
    with pytest.raises(ValueError):
        create_app(Settings(profile_name="warung"))


def test_entrepreneurship_profile_seeds_its_catalog(tmp_path):
    app = create_app(Settings(profile_name="entrepreneurship", database_url=f"sqlite:///{tmp_path / 'e.db'}"))
    with TestClient(app) as c:
        products = c.get("/api/products", params={"sort": "price_asc"}).json()
        assert [p["name"] for p in products][:2] == ["Merch HME - Pin", "Merch HME - Keychain"]
        assert c.get("/api/categories").json() == ["Jersey Kobarkan", "Merchandise HME"]


def test_seeding_is_idempotent(tmp_path):
    url = f"sqlite:///{tmp_path / 'store.db'}"
    for _ in range(2):
        with TestClient(create_app(Settings(database_url=url))) as c:
            assert len(c.get("/api/products").json()) == 5


def test_seeding_can_be_disabled(tmp_path):
    app = create_app(Settings(database_url=f"sqlite:///{tmp_path / 'store.db'}", seed_on_startup=False))
    with TestClient(app) as c:
        assert c.get("/api/products").json() == []


def test_default_credentials_warning(tmp_path, caplog):
    app = create_app(Settings(database_url=f"sqlite:///{tmp_path / 'store.db'}"))
    with caplog.at_level("WARNING", logger="storefront.main"):
        with TestClient(app):
            pass
    assert any("ADMIN_USER/ADMIN_PASS" in r.getMessage() for r in caplog.records)


def test_health_and_metrics(client, order_body):
    assert client.get("/health").text == "ok"
    client.post("/api/orders", json=order_body())
    body = client.get("/metrics").text
    assert "http_requests_total" in body
    assert "orders_created_total" in body


def test_unknown_route_uses_error_body(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_in_memory_database_is_shared_across_threads(order_body):
    app = create_app(Settings(database_url="sqlite://", admin_pass="s3cret"))
    with TestClient(app) as c:
        assert len(c.get("/api/products").json()) == 5
        resp = c.post("/api/orders", json=order_body())
        assert resp.status_code == 201
        assert c.get("/api/products/1").json()["stock"] == 23
