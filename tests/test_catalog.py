import pytest

from storefront.catalog import LIST_LIMIT, get_product, list_products, parse_id
from storefront.errors import InvalidArgument, NotFound
from storefront.models import Product


def names(resp):
    return [p["name"] for p in resp.json()]


def test_list_products_defaults_to_newest_first(client):
    resp = client.get("/api/products")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [5, 4, 3, 2, 1]
    first = resp.json()[-1]
    assert first["name"] == "Kaos Basic Premium"
    assert first["price"] == 79000
    assert first["stock"] == 25
    assert set(first) == {"id", "name", "price", "stock", "category", "image_url", "description", "created_at"}


def test_text_filter_is_case_insensitive_on_name_and_category(client):
    assert names(client.get("/api/products", params={"q": "HEADSET"})) == ["Headset Wireless"]
    by_category = names(client.get("/api/products", params={"q": "fash", "sort": "price_asc"}))
    assert by_category == ["Kaos Basic Premium", "Sepatu Sneakers Urban"]


def test_text_filter_treats_wildcards_literally(client):
    assert client.get("/api/products", params={"q": "%"}).json() == []


def test_category_filter_and_all_sentinel(client):
    home = client.get("/api/products", params={"category": "Home", "sort": "price_desc"})
    assert names(home) == ["Lampu Meja Minimalis", "Botol Minum Stainless 600ml"]
    assert len(client.get("/api/products", params={"category": "ALL"}).json()) == 5
    assert client.get("/api/products", params={"category": "home"}).json() == []


def test_sort_orders(client):
    asc = [p["price"] for p in client.get("/api/products", params={"sort": "price_asc"}).json()]
    desc = [p["price"] for p in client.get("/api/products", params={"sort": "price_desc"}).json()]
    assert asc == sorted(asc)
    assert desc == sorted(desc, reverse=True)
    unknown = client.get("/api/products", params={"sort": "bogus"}).json()
    assert [p["id"] for p in unknown] == [5, 4, 3, 2, 1]


def test_listing_is_capped(session, client):
    session.add_all(
        Product(name=f"Sticker {i}", price=1000, stock=1, category="Bulk", image_url="x", description="")
        for i in range(LIST_LIMIT + 10)
    )
    session.commit()
    assert len(list_products(session)) == LIST_LIMIT
    assert len(client.get("/api/products", params={"category": "Bulk"}).json()) == LIST_LIMIT


def test_get_product(client):
    resp = client.get("/api/products/2")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Sepatu Sneakers Urban"


@pytest.mark.parametrize("raw", ["abc", "1.5", "0", "-3", "1e3"])
def test_get_product_rejects_malformed_id(client, raw):
    resp = client.get(f"/api/products/{raw}")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid id"}


def test_get_product_not_found(client, session):
    resp = client.get("/api/products/999")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Product not found"}
    with pytest.raises(NotFound):
        get_product(session, 999)


def test_parse_id():
    assert parse_id("42") == 42
    assert parse_id(7) == 7
    for bad in (None, "", " ", "x1", 0, True):
        with pytest.raises(InvalidArgument):
            parse_id(bad)


def test_categories(client):
    assert client.get("/api/categories").json() == ["Elektronik", "Fashion", "Home"]


@pytest.mark.parametrize("raw", ["99999999999999999999", str(2**63)])
def test_get_product_oversized_id_is_not_found(client, raw):
    resp = client.get(f"/api/products/{raw}")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Product not found"}
