"""HTTP tests for the favorites endpoints."""

from __future__ import annotations

from tests.api.conftest import auth


def test_add_favorite_returns_updated_ids(client, memory_store):
    memory_store.seed(1, favorites="2")

    response = client.post("/api/v1/favorites", json={"productId": 5}, headers=auth(1))

    assert response.status_code == 200
    assert response.json() == {"productId": 5, "favoriteProductId": [2, 5]}


def test_add_existing_favorite_conflicts(client, memory_store):
    memory_store.seed(1, favorites=[5])

    response = client.post("/api/v1/favorites", json={"productId": 5}, headers=auth(1))

    assert response.status_code == 409
    body = response.json()
    assert body["error_type"] == "conflict"
    assert body["path"] == "/api/v1/favorites"
    assert memory_store.raw_payloads(1)[1] == [5]


def test_remove_favorite(client, memory_store):
    memory_store.seed(1, favorites=[5, 6])

    response = client.request(
        "DELETE", "/api/v1/favorites", json={"productId": 5}, headers=auth(1)
    )

    assert response.status_code == 200
    assert response.json() == {"productId": 5, "favoriteProductId": [6]}


def test_remove_absent_favorite_is_not_present(client, memory_store):
    memory_store.seed(1, favorites=[6])

    response = client.request(
        "DELETE", "/api/v1/favorites", json={"productId": 5}, headers=auth(1)
    )

    assert response.status_code == 400
    assert response.json()["error_type"] == "not_present"


def test_get_favorites_in_insertion_order_with_details(client, memory_store):
    memory_store.seed(1, favorites=[3, 999, 1])

    response = client.get("/api/v1/favorites", headers=auth(1))

    assert response.status_code == 200
    body = response.json()
    assert [favorite["productID"] for favorite in body] == [3, 999, 1]
    assert body[0]["productName"] == "Cat Tree"
    assert body[1] == {"productID": 999}
    assert body[2]["productNameTH"] == "อาหารเม็ดแซลมอน"


def test_favorite_body_requires_integer_product_id(client, memory_store):
    memory_store.seed(1)

    response = client.post(
        "/api/v1/favorites", json={"productId": "5"}, headers=auth(1)
    )

    assert response.status_code == 422


def test_favorites_require_authenticated_user(client):
    assert client.get("/api/v1/favorites").status_code == 401


def test_favorites_for_unknown_user(client):
    response = client.post("/api/v1/favorites", json={"productId": 1}, headers=auth(3))

    assert response.status_code == 404
