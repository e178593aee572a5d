import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        profile_name="toko",
        database_url=f"sqlite:///{tmp_path / 'store.db'}",
        admin_user="admin",
        admin_pass="s3cret",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # entering the client runs startup: tables are created and the toko catalog seeded
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session(app, client):
    s = app.state.session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def order_body():
    def make(items=None, **overrides):
        body = {
            "customer": {
                "name": "Budi Santoso",
                "phone": "081234567890",
                "email": "budi@example.com",
                "address": "Jl. Merdeka No. 1",
                "city": "Bandung",
                "postal_code": "40111",
            },
            "shipping_method": "REGULER",
            "payment_method": "COD",
            "notes": "",
            "items": [{"product_id": 1, "qty": 2}] if items is None else items,
        }
        body.update(overrides)
        return body

    return make
