"""
Catalog API: /products Endpoint Tests
======================================

What:  End-to-end tests of every /products endpoint.
How:   HTTPX AsyncClient → FastAPI app → in-memory SQLite (see conftest.py).
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from catalog.config import settings
from catalog.database import get_db_session


def _product(**overrides):
    product = {
        "title": "Plain Tee",
        "category": "shirts",
        "image": "https://cdn.example.com/img/tee.jpg",
        "price": 499,
        "rating": 4.0,
    }
    product.update(overrides)
    return product


async def _add(client, **overrides) -> str:
    response = await client.post("/products/add", json=_product(**overrides))
    assert response.status_code == 200, response.text
    return response.json()["id"]


class TestAddAndGet:

    @pytest.mark.asyncio
    async def test_added_product_is_retrievable(self, test_client, sample_product_payload):
        response = await test_client.post("/products/add", json=sample_product_payload)

        assert response.status_code == 200
        body = response.json()
        assert body["msg"] == "Product added successfully"

        fetched = await test_client.get(f"/products/search/{body['id']}")
        assert fetched.status_code == 200
        record = fetched.json()
        for key, value in sample_product_payload.items():
            assert record[key] == value
        assert record["id"] == body["id"]

    @pytest.mark.asyncio
    async def test_missing_required_field_is_400(self, test_client):
        payload = _product()
        del payload["title"]

        response = await test_client.post("/products/add", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unknown_field_is_400(self, test_client):
        response = await test_client.post("/products/add", json=_product(catagory="typo"))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_price_beyond_integer_column_is_400(self, test_client):
        response = await test_client.post("/products/add", json=_product(price=10**20))

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert (await test_client.get("/products/")).json() == []

    @pytest.mark.asyncio
    async def test_get_unknown_id_returns_null(self, test_client):
        response = await test_client.get(f"/products/search/{uuid4()}")

        assert response.status_code == 200
        assert response.json() is None

    @pytest.mark.asyncio
    async def test_get_malformed_id_is_400(self, test_client):
        response = await test_client.get("/products/search/not-an-id")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert "errors" in body["details"]


class TestListAll:

    @pytest.mark.asyncio
    async def test_empty_query_returns_everything(self, test_client):
        for title in ("A", "B", "C"):
            await _add(test_client, title=title)

        response = await test_client.get("/products/")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_query_pairs_are_equality_filters(self, test_client):
        await _add(test_client, title="Tee", category="shirts", price=499)
        await _add(test_client, title="Polo", category="shirts", price=899)
        await _add(test_client, title="Chinos", category="pants", price=499)

        response = await test_client.get("/products/", params={"category": "shirts", "price": "499"})

        assert [p["title"] for p in response.json()] == ["Tee"]

    @pytest.mark.asyncio
    async def test_repeated_key_matches_any_value(self, test_client):
        await _add(test_client, title="Tee", brand="Roadster")
        await _add(test_client, title="Polo", brand="Puma")
        await _add(test_client, title="Henley", brand="Nike")

        response = await test_client.get("/products/?brand=Roadster&brand=Puma")

        assert sorted(p["title"] for p in response.json()) == ["Polo", "Tee"]

    @pytest.mark.asyncio
    async def test_unknown_key_is_400(self, test_client):
        response = await test_client.get("/products/", params={"colour": "red"})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "colour"

    @pytest.mark.asyncio
    async def test_bad_numeric_value_is_400(self, test_client):
        response = await test_client.get("/products/", params={"price": "cheap"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_price_beyond_integer_column_is_400(self, test_client):
        response = await test_client.get("/products/", params={"price": "100000000000000000000"})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "price"

    @pytest.mark.asyncio
    async def test_nan_rating_is_400(self, test_client):
        response = await test_client.get("/products/", params={"rating": "nan"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_served_without_trailing_slash(self, test_client):
        await _add(test_client, title="Tee")

        response = await test_client.get("/products", params={"title": "Tee"})

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["Tee"]


class TestFilter:

    @pytest.mark.asyncio
    async def test_default_rating_ceiling(self, test_client):
        await _add(test_client, title="Good", rating=4.5)
        await _add(test_client, title="Perfect", rating=5)
        await _add(test_client, title="Unrated", rating=None)
        await _add(test_client, title="Okay", rating=3)

        response = await test_client.get("/products/filter")

        assert response.status_code == 200
        assert sorted(p["title"] for p in response.json()) == ["Good", "Okay"]

    @pytest.mark.asyncio
    async def test_explicit_rating(self, test_client):
        await _add(test_client, title="Good", rating=4.5)
        await _add(test_client, title="Okay", rating=3)

        response = await test_client.get("/products/filter", params={"rating": 4})

        assert [p["title"] for p in response.json()] == ["Okay"]

    @pytest.mark.asyncio
    async def test_price_band_is_exclusive(self, test_client):
        for price in (50, 100, 250, 499, 500, 600):
            await _add(test_client, title=f"P{price}", strike_price=price)

        response = await test_client.get(
            "/products/filter", params={"strike_price": "x 100 x x 500"}
        )

        assert response.status_code == 200
        assert sorted(p["strike_price"] for p in response.json()) == [250, 499]

    @pytest.mark.asyncio
    async def test_category_brand_and_order(self, test_client):
        await _add(test_client, title="Cheap", category="shirts", brand="Roadster", strike_price=200)
        await _add(test_client, title="Pricey", category="shirts", brand="Roadster", strike_price=900)
        await _add(test_client, title="Other brand", category="shirts", brand="Puma", strike_price=300)
        await _add(test_client, title="Other category", category="pants", brand="Roadster", strike_price=400)

        response = await test_client.get(
            "/products/filter",
            params={"category": "shirts", "brand": "Roadster", "order": "desc"},
        )

        assert [p["title"] for p in response.json()] == ["Pricey", "Cheap"]

    @pytest.mark.asyncio
    async def test_ascending_order(self, test_client):
        await _add(test_client, title="Mid", strike_price=500)
        await _add(test_client, title="High", strike_price=900)
        await _add(test_client, title="Low", strike_price=200)

        response = await test_client.get("/products/filter", params={"order": "asc"})

        assert [p["title"] for p in response.json()] == ["Low", "Mid", "High"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("label", ["x nan x x 500", "x 100 x x inf", ""])
    async def test_non_numeric_price_band_is_400(self, test_client, label):
        await _add(test_client, title="Tee", strike_price=300)

        response = await test_client.get("/products/filter", params={"strike_price": label})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "strike_price"

    @pytest.mark.asyncio
    async def test_nan_rating_is_400(self, test_client):
        response = await test_client.get("/products/filter", params={"rating": "nan"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_result_is_not_an_error(self, test_client):
        response = await test_client.get("/products/filter", params={"category": "none"})

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_malformed_price_band_is_400(self, test_client):
        response = await test_client.get("/products/filter", params={"strike_price": "100-500"})

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "strike_price"

    @pytest.mark.asyncio
    async def test_unknown_order_is_400(self, test_client):
        response = await test_client.get("/products/filter", params={"order": "sideways"})

        assert response.status_code == 400


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client):
        product_id = await _add(test_client, title="Tee", price=499)

        response = await test_client.patch(f"/products/{product_id}", json={"price": 399})

        assert response.status_code == 200
        assert response.json() == {"msg": "Product updated successfully"}
        record = (await test_client.get(f"/products/search/{product_id}")).json()
        assert record["price"] == 399
        assert record["title"] == "Tee"

    @pytest.mark.asyncio
    async def test_update_unknown_id_is_404_without_mutation(self, test_client):
        await _add(test_client, title="Tee", price=499)
        before = (await test_client.get("/products/")).json()

        response = await test_client.patch(f"/products/{uuid4()}", json={"price": 1})

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert (await test_client.get("/products/")).json() == before

    @pytest.mark.asyncio
    async def test_empty_body_on_existing_id(self, test_client):
        product_id = await _add(test_client, title="Tee", price=499)
        before = (await test_client.get(f"/products/search/{product_id}")).json()

        response = await test_client.patch(f"/products/{product_id}", json={})

        assert response.status_code == 200
        assert response.json() == {"msg": "Product updated successfully"}
        assert (await test_client.get(f"/products/search/{product_id}")).json() == before

    @pytest.mark.asyncio
    async def test_price_beyond_integer_column_is_400(self, test_client):
        product_id = await _add(test_client, price=499)

        response = await test_client.patch(f"/products/{product_id}", json={"price": 2**31})

        assert response.status_code == 400
        assert (await test_client.get(f"/products/search/{product_id}")).json()["price"] == 499

    @pytest.mark.asyncio
    async def test_null_required_field_is_400(self, test_client):
        product_id = await _add(test_client)

        response = await test_client.patch(f"/products/{product_id}", json={"title": None})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, test_client):
        response = await test_client.patch("/products/42", json={"price": 1})

        assert response.status_code == 400


class TestDelete:

    @pytest.mark.asyncio
    async def test_second_delete_is_404(self, test_client):
        product_id = await _add(test_client)

        first = await test_client.delete(f"/products/{product_id}")
        second = await test_client.delete(f"/products/{product_id}")

        assert first.status_code == 200
        assert first.json() == {"msg": "Product deleted successfully"}
        assert second.status_code == 404
        assert (await test_client.get(f"/products/search/{product_id}")).json() is None


class TestPagination:

    @pytest.mark.asyncio
    async def test_second_page_is_offset_three(self, test_client):
        for i in range(8):
            await _add(test_client, title=f"Item {i}")
        everything = (await test_client.get("/products/pagination", params={"limit": 100})).json()

        response = await test_client.get("/products/pagination", params={"page": 2, "limit": 3})

        assert response.status_code == 200
        assert response.json() == everything[3:6]
        assert response.headers["X-Total-Count"] == "8"

    @pytest.mark.asyncio
    async def test_defaults_to_first_three(self, test_client):
        for i in range(5):
            await _add(test_client, title=f"Item {i}")

        response = await test_client.get("/products/pagination")

        assert [p["title"] for p in response.json()] == ["Item 0", "Item 1", "Item 2"]

    @pytest.mark.asyncio
    async def test_category_filter_and_short_last_page(self, test_client):
        for i in range(4):
            await _add(test_client, title=f"Shirt {i}", category="shirts")
        await _add(test_client, title="Chinos", category="pants")

        response = await test_client.get(
            "/products/pagination", params={"page": 2, "limit": 3, "category": "shirts"}
        )

        assert [p["title"] for p in response.json()] == ["Shirt 3"]
        assert response.headers["X-Total-Count"] == "4"

    @pytest.mark.asyncio
    async def test_page_zero_is_400(self, test_client):
        response = await test_client.get("/products/pagination", params={"page": 0})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_limit_above_max_page_size_is_400(self, test_client):
        response = await test_client.get(
            "/products/pagination", params={"limit": settings.max_page_size + 1}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestSearch:

    @pytest.mark.asyncio
    async def test_case_insensitive_substring(self, test_client):
        for title in ("Blue Shirt", "SHIRTS Inc", "Pants"):
            await _add(test_client, title=title)

        response = await test_client.get("/products/search", params={"q": "shirt"})

        assert response.status_code == 200
        assert sorted(p["title"] for p in response.json()) == ["Blue Shirt", "SHIRTS Inc"]

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, test_client):
        await _add(test_client, title="100% Cotton Tee")
        await _add(test_client, title="Wool Sweater")

        response = await test_client.get("/products/search", params={"q": "%"})

        assert [p["title"] for p in response.json()] == ["100% Cotton Tee"]

    @pytest.mark.asyncio
    async def test_missing_q_returns_everything(self, test_client):
        await _add(test_client, title="Blue Shirt")
        await _add(test_client, title="Pants")

        response = await test_client.get("/products/search")

        assert len(response.json()) == 2


class TestAmbient:

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/products/", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.delete(f"/products/{uuid4()}", headers={"X-Request-ID": "abc"})

        assert response.json()["request_id"] == "abc"

    @pytest.mark.asyncio
    async def test_store_failure_is_generic_500(self, test_client):
        from catalog.main import app

        async def failing_session():
            session = AsyncMock()
            session.execute = AsyncMock(
                side_effect=OperationalError("SELECT", {}, Exception("connection refused by db-host"))
            )
            yield session

        app.dependency_overrides[get_db_session] = failing_session

        response = await test_client.get("/products/search", params={"q": "shirt"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert body["message"] == "An internal error occurred. Please try again later."
        assert body["details"] is None
        assert "connection refused" not in response.text
        assert "db-host" not in response.text

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
