"""Integration tests for the /api/orders endpoints."""

from decimal import Decimal

import pytest
from services.store_service.models import Product
from sqlalchemy import select
from tests.conftest import make_admin_user, make_customer_user, override_auth
from tests.factories import (
    AdminFactory,
    CategoryFactory,
    ProductFactory,
    UserFactory,
    persist,
)

SHIPPING = {"shipping_address": "Jhamsikhel, Lalitpur", "phone": "9841000000"}


async def _seed(db, stock=5, price="100.00"):
    """Return (customer_id, customer_email, product_id)."""
    customer = await persist(db, UserFactory.create(name="Asha Gurung"))
    category = await persist(db, CategoryFactory.create())
    product = await persist(
        db, ProductFactory.create(category.id, stock=stock, price=Decimal(price))
    )
    return customer.id, customer.email, product.id


async def _stock(db, product_id):
    return await db.scalar(select(Product.stock).where(Product.id == product_id))


async def _place(client, product_id, quantity):
    return await client.post(
        "/api/orders",
        json={**SHIPPING, "items": [{"product_id": product_id, "quantity": quantity}]},
    )


# ---------------------------------------------------------------------------
# POST /api/orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session)

    with override_auth(store_app, make_customer_user(customer_id, email)):
        response = await _place(client, product_id, 3)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["user_id"] == customer_id
    assert data["status"] == "pending"
    assert data["payment_status"] == "pending"
    assert Decimal(data["total_amount"]) == Decimal("300.00")
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 3
    assert data["items"][0]["product"]["id"] == product_id
    assert await _stock(db_session, product_id) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_insufficient_stock(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session, stock=2)

    with override_auth(store_app, make_customer_user(customer_id, email)):
        response = await _place(client, product_id, 3)

    assert response.status_code == 400
    assert "Insufficient stock" in response.json()["detail"]
    assert await _stock(db_session, product_id) == 2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_unknown_product(client, db_session, store_app):
    customer_id, email, _ = await _seed(db_session)

    with override_auth(store_app, make_customer_user(customer_id, email)):
        response = await _place(client, 987654, 1)

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_rejects_empty_items(client, db_session, store_app):
    customer_id, email, _ = await _seed(db_session)

    with override_auth(store_app, make_customer_user(customer_id, email)):
        response = await client.post("/api/orders", json={**SHIPPING, "items": []})

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_rejects_blank_shipping(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session)
    items = [{"product_id": product_id, "quantity": 1}]

    with override_auth(store_app, make_customer_user(customer_id, email)):
        blank_address = await client.post(
            "/api/orders",
            json={"shipping_address": "   ", "phone": "9841000000", "items": items},
        )
        blank_phone = await client.post(
            "/api/orders",
            json={"shipping_address": "Jhamsikhel", "phone": " \t ", "items": items},
        )

    assert blank_address.status_code == 422
    assert blank_phone.status_code == 422
    assert await _stock(db_session, product_id) == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_rejects_huge_quantity(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session)

    with override_auth(store_app, make_customer_user(customer_id, email)):
        response = await _place(client, product_id, 10**12)

    assert response.status_code == 422
    assert await _stock(db_session, product_id) == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_order_requires_token(client):
    response = await client.post("/api/orders", json={**SHIPPING, "items": []})

    assert response.status_code in (401, 403)


# ---------------------------------------------------------------------------
# Reading orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_orders_and_visibility(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session)
    stranger = await persist(db_session, UserFactory.create())
    stranger_id = stranger.id

    with override_auth(store_app, make_customer_user(customer_id, email)):
        order_id = (await _place(client, product_id, 1)).json()["id"]
        mine = await client.get("/api/orders/my-orders")
        own = await client.get(f"/api/orders/{order_id}")

    assert mine.status_code == 200
    assert [o["id"] for o in mine.json()] == [order_id]
    assert own.status_code == 200

    with override_auth(store_app, make_customer_user(stranger_id)):
        other = await client.get(f"/api/orders/{order_id}")
        theirs = await client.get("/api/orders/my-orders")

    assert other.status_code == 404
    assert theirs.json() == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_lists_orders_with_status_filter(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session, stock=10)
    admin = await persist(db_session, AdminFactory.create())
    admin_id = admin.id

    with override_auth(store_app, make_customer_user(customer_id, email)):
        first = (await _place(client, product_id, 1)).json()["id"]
        await _place(client, product_id, 1)
        await client.patch(f"/api/orders/{first}/cancel")

    with override_auth(store_app, make_admin_user(admin_id)):
        everything = await client.get("/api/orders")
        cancelled = await client.get("/api/orders", params={"status": "cancelled"})

    assert everything.status_code == 200
    assert everything.json()["pagination"]["total"] == 2
    body = cancelled.json()
    assert [o["id"] for o in body["orders"]] == [first]
    assert body["pagination"]["total"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_customer_cannot_list_all_orders(client, db_session, store_app):
    customer_id, email, _ = await _seed(db_session)

    with override_auth(store_app, make_customer_user(customer_id, email)):
        response = await client.get("/api/orders")

    assert response.status_code == 403


# ---------------------------------------------------------------------------
# PATCH /api/orders/{id}/cancel
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancel_order_restores_stock(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session)

    with override_auth(store_app, make_customer_user(customer_id, email)):
        order_id = (await _place(client, product_id, 4)).json()["id"]
        response = await client.patch(f"/api/orders/{order_id}/cancel")
        again = await client.patch(f"/api/orders/{order_id}/cancel")

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "cancelled"
    assert again.status_code == 400
    assert await _stock(db_session, product_id) == 5


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancel_someone_elses_order(client, db_session, store_app):
    customer_id, email, product_id = await _seed(db_session)
    stranger = await persist(db_session, UserFactory.create())
    stranger_id = stranger.id

    with override_auth(store_app, make_customer_user(customer_id, email)):
        order_id = (await _place(client, product_id, 2)).json()["id"]

    with override_auth(store_app, make_customer_user(stranger_id)):
        response = await client.patch(f"/api/orders/{order_id}/cancel")

    assert response.status_code == 404
    assert await _stock(db_session, product_id) == 3


# ---------------------------------------------------------------------------
# PATCH /api/orders/{id}/status
# ---------------------------------------------------------------------------


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture order status emails instead of sending them."""
    calls = []

    async def fake_send(to_email, customer_name, order_id, status, total_amount):
        calls.append((to_email, customer_name, order_id, status, total_amount))
        return True

    monkeypatch.setattr(
        "services.store_service.routers.orders.send_order_status_email", fake_send
    )
    return calls


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_status_update_emails_customer(
    client, db_session, store_app, sent_emails
):
    customer_id, email, product_id = await _seed(db_session)
    admin = await persist(db_session, AdminFactory.create())
    admin_id = admin.id

    with override_auth(store_app, make_customer_user(customer_id, email)):
        order_id = (await _place(client, product_id, 2)).json()["id"]

    with override_auth(store_app, make_admin_user(admin_id)):
        response = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "shipped"}
        )

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "shipped"
    assert len(sent_emails) == 1
    to_email, name, sent_order_id, sent_status, total = sent_emails[0]
    assert (to_email, name, sent_order_id, sent_status) == (
        email,
        "Asha Gurung",
        order_id,
        "shipped",
    )
    assert total == Decimal("200.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_cancel_through_status_restores_stock(
    client, db_session, store_app, sent_emails
):
    customer_id, email, product_id = await _seed(db_session)
    admin = await persist(db_session, AdminFactory.create())
    admin_id = admin.id

    with override_auth(store_app, make_customer_user(customer_id, email)):
        order_id = (await _place(client, product_id, 5)).json()["id"]
    assert await _stock(db_session, product_id) == 0

    with override_auth(store_app, make_admin_user(admin_id)):
        response = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "cancelled"}
        )
        reopen = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "processing"}
        )

    assert response.status_code == 200
    assert reopen.status_code == 400
    assert await _stock(db_session, product_id) == 5
    assert [call[3] for call in sent_emails] == ["cancelled"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_status_update_survives_email_failure(
    client, db_session, store_app, monkeypatch
):
    async def broken_send(*args, **kwargs):
        raise RuntimeError("SMTP is down")

    monkeypatch.setattr(
        "services.store_service.routers.orders.send_order_status_email", broken_send
    )
    customer_id, email, product_id = await _seed(db_session)
    admin = await persist(db_session, AdminFactory.create())
    admin_id = admin.id

    with override_auth(store_app, make_customer_user(customer_id, email)):
        order_id = (await _place(client, product_id, 1)).json()["id"]

    with override_auth(store_app, make_admin_user(admin_id)):
        response = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "delivered"}
        )

    assert response.status_code == 200
    assert response.json()["status"] == "delivered"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_status_update_rejects_unknown_status(client, db_session, store_app):
    admin = await persist(db_session, AdminFactory.create())
    admin_id = admin.id

    with override_auth(store_app, make_admin_user(admin_id)):
        response = await client.patch(
            "/api/orders/1/status", json={"status": "lost-in-transit"}
        )

    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_status_update_unknown_order(client, db_session, store_app):
    admin = await persist(db_session, AdminFactory.create())
    admin_id = admin.id

    with override_auth(store_app, make_admin_user(admin_id)):
        response = await client.patch(
            "/api/orders/4040/status", json={"status": "shipped"}
        )

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delivered_order_cannot_be_moved_back(
    client, db_session, store_app, sent_emails
):
    customer_id, email, product_id = await _seed(db_session)
    admin = await persist(db_session, AdminFactory.create())
    admin_id = admin.id

    with override_auth(store_app, make_customer_user(customer_id, email)):
        order_id = (await _place(client, product_id, 2)).json()["id"]

    with override_auth(store_app, make_admin_user(admin_id)):
        delivered = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "delivered"}
        )
        reopen = await client.patch(
            f"/api/orders/{order_id}/status", json={"status": "pending"}
        )

    with override_auth(store_app, make_customer_user(customer_id, email)):
        cancel = await client.patch(f"/api/orders/{order_id}/cancel")

    assert delivered.status_code == 200
    assert reopen.status_code == 400
    assert cancel.status_code == 400
    assert await _stock(db_session, product_id) == 3
    assert [call[3] for call in sent_emails] == ["delivered"]
