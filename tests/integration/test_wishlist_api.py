"""Integration tests for the /api/wishlist endpoints."""

import pytest
from tests.conftest import make_customer_user, override_auth
from tests.factories import CategoryFactory, ProductFactory, UserFactory, persist


async def _seed(db):
    user = await persist(db, UserFactory.create())
    category = await persist(db, CategoryFactory.create())
    product = await persist(
        db, ProductFactory.create(category.id, name="Red Rose Dozen")
    )
    return user.id, product.id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_is_idempotent(client, db_session, store_app):
    user_id, product_id = await _seed(db_session)

    with override_auth(store_app, make_customer_user(user_id)):
        first = await client.post("/api/wishlist", json={"product_id": product_id})
        second = await client.post("/api/wishlist", json={"product_id": product_id})
        listing = await client.get("/api/wishlist")

    assert first.status_code == 201, first.text
    assert second.json()["id"] == first.json()["id"]
    assert first.json()["product"]["name"] == "Red Rose Dozen"
    assert [entry["product_id"] for entry in listing.json()] == [product_id]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_add_unknown_product(client, db_session, store_app):
    user_id, _ = await _seed(db_session)

    with override_auth(store_app, make_customer_user(user_id)):
        response = await client.post("/api/wishlist", json={"product_id": 31337})

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_remove_from_wishlist(client, db_session, store_app):
    user_id, product_id = await _seed(db_session)

    with override_auth(store_app, make_customer_user(user_id)):
        await client.post("/api/wishlist", json={"product_id": product_id})
        removed = await client.delete(f"/api/wishlist/{product_id}")
        again = await client.delete(f"/api/wishlist/{product_id}")
        listing = await client.get("/api/wishlist")

    assert removed.status_code == 200
    assert again.status_code == 404
    assert listing.json() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_wishlists_are_per_user(client, db_session, store_app):
    user_id, product_id = await _seed(db_session)
    other = await persist(db_session, UserFactory.create())
    other_id = other.id

    with override_auth(store_app, make_customer_user(user_id)):
        await client.post("/api/wishlist", json={"product_id": product_id})
    with override_auth(store_app, make_customer_user(other_id)):
        listing = await client.get("/api/wishlist")
        removal = await client.delete(f"/api/wishlist/{product_id}")

    assert listing.json() == []
    assert removal.status_code == 404
