"""
Tests for API endpoints.

Sessions and repository calls are replaced with fakes so no database is
needed. The client is not used as a context manager, so the startup
connection check does not run.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from catalog.api.main import app
from catalog.api.routes import facets, health, products as product_routes
from catalog.config import settings
from catalog.db import repository
from catalog.db.postgres import Product
from catalog.db.query_builder import build_list_query, build_search_query
from catalog.errors import ProductNotFoundError, StoreQueryFailureError, StoreUnavailableError

client = TestClient(app)
API = settings.api_prefix


@asynccontextmanager
async def fake_get_session():
    yield None


@pytest.fixture(autouse=True)
def no_database(monkeypatch):
    for module in (product_routes, facets, health):
        monkeypatch.setattr(module, "get_session", fake_get_session)


def make_product(**overrides) -> Product:
    fields = {
        "id": 1,
        "name": "Widget",
        "category": "Tools",
        "price": Decimal("9.99"),
        "image_url": None,
        "attributes": {},
        "tags": [],
        "description": "",
        "created_at": datetime(2026, 1, 15, 12, 0, 0),
    }
    fields.update(overrides)
    return Product(**fields)


def test_health_check():
    """Test basic health check endpoint."""
    response = client.get(f"{API}/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == settings.app_name
    assert "version" in data


def test_detailed_health_check(monkeypatch):
    async def count(session):
        return 10

    monkeypatch.setattr(repository, "count_products", count)
    response = client.get(f"{API}/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["components"]["postgresql"] == {"status": "healthy", "products_count": 10}


def test_detailed_health_check_degraded(monkeypatch):
    async def count(session):
        raise StoreUnavailableError("Database unavailable: connection refused")

    monkeypatch.setattr(repository, "count_products", count)
    response = client.get(f"{API}/health/detailed")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["components"]["postgresql"]["status"] == "unhealthy"


class TestListProducts:

    def test_passes_filters(self, monkeypatch):
        seen = {}

        async def fake_list(session, filters):
            seen["filters"] = filters
            return [make_product(id=6, name="1984", category="Books")]

        monkeypatch.setattr(repository, "list_products", fake_list)
        response = client.get(
            f"{API}/products",
            params={"category": "Books", "tag": "classic", "attribute": "author", "attrValue": "George Orwell"},
        )

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["1984"]
        filters = seen["filters"]
        assert filters.category == "Books"
        assert filters.tag == "classic"
        assert filters.search is None
        assert filters.attribute == "author"
        assert filters.attr_value == "George Orwell"

    def test_serializes_product(self, monkeypatch):
        async def fake_list(session, filters):
            return [make_product(attributes={"brand": "Acme", "in_stock": True}, tags=["diy"])]

        monkeypatch.setattr(repository, "list_products", fake_list)
        data = client.get(f"{API}/products").json()

        assert data == [{
            "id": 1,
            "name": "Widget",
            "category": "Tools",
            "price": 9.99,
            "image_url": None,
            "attributes": {"brand": "Acme", "in_stock": True},
            "tags": ["diy"],
            "description": "",
            "created_at": "2026-01-15T12:00:00",
        }]

    def test_null_columns_use_defaults(self, monkeypatch):
        async def fake_list(session, filters):
            return [make_product(attributes=None, tags=None, description=None)]

        monkeypatch.setattr(repository, "list_products", fake_list)
        product = client.get(f"{API}/products").json()[0]

        assert product["attributes"] == {}
        assert product["tags"] == []
        assert product["description"] == ""

    def test_nested_attribute_values(self, monkeypatch):
        attributes = {"dims": {"w": 10, "h": 2}, "colors": ["red", "blue"], "brand": "Acme"}

        async def fake_list(session, filters):
            return [make_product(attributes=attributes)]

        monkeypatch.setattr(repository, "list_products", fake_list)
        response = client.get(f"{API}/products")

        assert response.status_code == 200
        assert response.json()[0]["attributes"] == attributes

    def test_rejects_unsafe_attribute_name(self, monkeypatch):
        async def fake_list(session, filters):
            build_list_query(filters)
            return []

        monkeypatch.setattr(repository, "list_products", fake_list)
        response = client.get(
            f"{API}/products", params={"attribute": "brand' OR '1'='1", "attrValue": "x"}
        )

        assert response.status_code == 400
        assert "Invalid attribute name" in response.json()["detail"]

    def test_store_unavailable(self, monkeypatch):
        async def fake_list(session, filters):
            raise StoreUnavailableError("Database unavailable: timeout")

        monkeypatch.setattr(repository, "list_products", fake_list)
        response = client.get(f"{API}/products")

        assert response.status_code == 500
        assert response.json() == {"detail": "Database unavailable: timeout"}

    def test_unexpected_error(self, monkeypatch):
        async def fake_list(session, filters):
            raise RuntimeError("boom")

        monkeypatch.setattr(repository, "list_products", fake_list)
        response = client.get(f"{API}/products")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to list products: boom"}


class TestSearchProducts:

    def test_missing_query(self, monkeypatch):
        async def fake_search(session, query):
            build_search_query(query)
            return []

        monkeypatch.setattr(repository, "search_products", fake_search)

        for params in ({}, {"q": ""}, {"q": "  "}):
            response = client.get(f"{API}/products/search", params=params)
            assert response.status_code == 400
            assert response.json() == {"detail": "Search query required"}

    def test_results_carry_rank(self, monkeypatch):
        async def fake_search(session, query):
            assert query == "noise cancellation"
            return [
                (make_product(id=3, name="AirPods Pro"), 0.0759),
                (make_product(id=8, name="Sony WH-1000XM4"), 0.0608),
            ]

        monkeypatch.setattr(repository, "search_products", fake_search)
        response = client.get(f"{API}/products/search", params={"q": "noise cancellation"})

        assert response.status_code == 200
        data = response.json()
        assert [(p["id"], p["rank"]) for p in data] == [(3, 0.0759), (8, 0.0608)]
        assert data[0]["price"] == 9.99

    def test_no_matches(self, monkeypatch):
        async def fake_search(session, query):
            return []

        monkeypatch.setattr(repository, "search_products", fake_search)
        response = client.get(f"{API}/products/search", params={"q": "zeppelin"})

        assert response.status_code == 200
        assert response.json() == []


class TestGetProduct:

    def test_found(self, monkeypatch):
        async def fake_get(session, product_id):
            return make_product(id=product_id)

        monkeypatch.setattr(repository, "get_product", fake_get)
        response = client.get(f"{API}/products/5")

        assert response.status_code == 200
        assert response.json()["id"] == 5

    def test_not_found(self, monkeypatch):
        async def fake_get(session, product_id):
            raise ProductNotFoundError(product_id)

        monkeypatch.setattr(repository, "get_product", fake_get)
        response = client.get(f"{API}/products/999")

        assert response.status_code == 404
        assert response.json() == {"detail": "Product not found"}

    def test_non_numeric_id(self):
        response = client.get(f"{API}/products/abc")
        assert response.status_code == 400


class TestCreateProduct:

    def test_missing_required_fields(self):
        # The real repository check runs before the session is touched.
        response = client.post(f"{API}/products", json={"name": "Widget"})

        assert response.status_code == 400
        assert response.json() == {"detail": "Missing required fields: category, price"}

    def test_invalid_body(self):
        response = client.post(f"{API}/products", json={"name": "Widget", "category": "Tools", "price": "cheap"})
        assert response.status_code == 400

    def test_created(self, monkeypatch):
        seen = {}

        async def fake_create(session, data):
            seen["data"] = data
            return make_product(id=11, name=data["name"], category=data["category"], price=data["price"])

        monkeypatch.setattr(repository, "create_product", fake_create)
        response = client.post(f"{API}/products", json={"name": "Widget", "category": "Tools", "price": 9.99})

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 11
        assert body["attributes"] == {}
        assert body["tags"] == []
        assert body["description"] == ""
        assert seen["data"]["price"] == Decimal("9.99")
        assert seen["data"]["attributes"] is None

    def test_created_with_nested_attributes(self, monkeypatch):
        attributes = {"dims": {"w": 10}, "ports": ["usb-c", "hdmi"]}
        seen = {}

        async def fake_create(session, data):
            seen["data"] = data
            return make_product(id=12, attributes=data["attributes"])

        monkeypatch.setattr(repository, "create_product", fake_create)
        response = client.post(
            f"{API}/products",
            json={"name": "Dock", "category": "Electronics", "price": 49, "attributes": attributes},
        )

        assert response.status_code == 201
        assert seen["data"]["attributes"] == attributes
        assert response.json()["attributes"] == attributes

    def test_store_query_failure(self, monkeypatch):
        async def fake_create(session, data):
            raise StoreQueryFailureError("Database query failed: value too long for type character varying(255)")

        monkeypatch.setattr(repository, "create_product", fake_create)
        response = client.post(f"{API}/products", json={"name": "W" * 300, "category": "Tools", "price": 1})

        assert response.status_code == 500
        assert "value too long" in response.json()["detail"]


class TestUpdateProduct:

    def test_partial_update(self, monkeypatch):
        seen = {}

        async def fake_update(session, product_id, data):
            seen["id"] = product_id
            seen["data"] = data
            return make_product(id=product_id, price=Decimal("12.50"))

        monkeypatch.setattr(repository, "update_product", fake_update)
        response = client.put(f"{API}/products/4", json={"price": 12.50})

        assert response.status_code == 200
        body = response.json()
        assert body["price"] == 12.5
        assert body["name"] == "Widget"
        assert seen["id"] == 4
        assert seen["data"]["price"] == Decimal("12.5")
        assert seen["data"]["name"] is None

    def test_not_found(self, monkeypatch):
        async def fake_update(session, product_id, data):
            raise ProductNotFoundError(product_id)

        monkeypatch.setattr(repository, "update_product", fake_update)
        response = client.put(f"{API}/products/404", json={"name": "Gadget"})

        assert response.status_code == 404


class TestDeleteProduct:

    def test_deleted(self, monkeypatch):
        async def fake_delete(session, product_id):
            return product_id

        monkeypatch.setattr(repository, "delete_product", fake_delete)
        response = client.delete(f"{API}/products/5")

        assert response.status_code == 200
        assert response.json() == {"message": "Product deleted successfully", "id": 5}

    def test_not_found(self, monkeypatch):
        async def fake_delete(session, product_id):
            raise ProductNotFoundError(product_id)

        monkeypatch.setattr(repository, "delete_product", fake_delete)
        response = client.delete(f"{API}/products/5")

        assert response.status_code == 404


def test_categories(monkeypatch):
    async def fake_categories(session):
        return ["Books", "Electronics"]

    monkeypatch.setattr(repository, "list_categories", fake_categories)
    response = client.get(f"{API}/categories")

    assert response.status_code == 200
    assert response.json() == ["Books", "Electronics"]


def test_tags(monkeypatch):
    async def fake_tags(session):
        return ["apple", "audio", "classic"]

    monkeypatch.setattr(repository, "list_tags", fake_tags)
    response = client.get(f"{API}/tags")

    assert response.status_code == 200
    assert response.json() == ["apple", "audio", "classic"]


def test_process_time_header(monkeypatch):
    response = client.get(f"{API}/health")
    assert "x-process-time" in response.headers
