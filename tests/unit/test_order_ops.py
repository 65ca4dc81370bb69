"""Unit tests for order_ops core business logic.

Tests call order_ops functions directly with the db_session fixture.
No HTTP layer involved. Values are always re-read from the database since a
failed operation rolls back and expires everything in the session.
"""

from decimal import Decimal

import pytest
from libs.common.error_handler import (
    InsufficientStockError,
    NotFoundError,
    OrderStateError,
    ValidationFailedError,
)
from services.store_service.models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
)
from services.store_service.services.order_ops import (
    OrderLine,
    ShippingDetails,
    _decrement_stock,
    cancel_order,
    create_order,
    merge_lines,
    update_order_status,
)
from sqlalchemy import func, select
from tests.factories import CategoryFactory, ProductFactory, UserFactory, persist

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _shipping(**overrides) -> ShippingDetails:
    values = {"shipping_address": "Lazimpat, Kathmandu", "phone": "9812345678"}
    values.update(overrides)
    return ShippingDetails(**values)


async def _make_products(db, *specs):
    """Create one category and a product per (price, stock); return ids."""
    category = await persist(db, CategoryFactory.create())
    products = [
        ProductFactory.create(category.id, price=Decimal(price), stock=stock)
        for price, stock in specs
    ]
    await persist(db, *products)
    return [p.id for p in products]


async def _make_user(db) -> int:
    user = await persist(db, UserFactory.create())
    return user.id


async def _stock(db, product_id: int) -> int:
    return await db.scalar(select(Product.stock).where(Product.id == product_id))


async def _count(db, model) -> int:
    return await db.scalar(select(func.count(model.id)))


# ---------------------------------------------------------------------------
# merge_lines
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_merge_lines_sums_repeated_products():
    lines = merge_lines(
        [OrderLine(1, 2), OrderLine(2, 1), OrderLine(1, 3)],
    )

    assert [(line.product_id, line.quantity) for line in lines] == [(1, 5), (2, 1)]


# ---------------------------------------------------------------------------
# create_order
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_order_totals_and_decrements_stock(db_session):
    """Total is the sum of price x quantity; each stock drops by its quantity."""
    user_id = await _make_user(db_session)
    rose, lily = await _make_products(db_session, ("100.00", 5), ("25.50", 10))

    result = await create_order(
        db_session,
        user_id=user_id,
        lines=[OrderLine(rose, 2), OrderLine(lily, 4)],
        shipping=_shipping(),
    )

    assert result.total_amount == Decimal("302.00")
    order = await db_session.get(Order, result.order_id)
    assert order.total_amount == Decimal("302.00")
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING

    items = (
        await db_session.execute(
            select(OrderItem.product_id, OrderItem.price, OrderItem.subtotal)
            .where(OrderItem.order_id == result.order_id)
            .order_by(OrderItem.product_id)
        )
    ).all()
    assert [(i.product_id, i.price, i.subtotal) for i in items] == [
        (rose, Decimal("100.00"), Decimal("200.00")),
        (lily, Decimal("25.50"), Decimal("102.00")),
    ]

    assert await _stock(db_session, rose) == 3
    assert await _stock(db_session, lily) == 6


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_order_over_remaining_stock_fails(db_session):
    """Stock 5: ordering 3 leaves 2; ordering 3 again is refused."""
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("100.00", 5))

    first = await create_order(
        db_session,
        user_id=user_id,
        lines=[OrderLine(product_id, 3)],
        shipping=_shipping(),
    )
    assert first.total_amount == Decimal("300.00")
    assert await _stock(db_session, product_id) == 2

    with pytest.raises(InsufficientStockError):
        await create_order(
            db_session,
            user_id=user_id,
            lines=[OrderLine(product_id, 3)],
            shipping=_shipping(),
        )

    assert await _stock(db_session, product_id) == 2
    assert await _count(db_session, Order) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_one_line_over_stock_leaves_nothing_behind(db_session):
    """No order, no items and no stock change when any line is short."""
    user_id = await _make_user(db_session)
    plenty, scarce = await _make_products(db_session, ("50.00", 10), ("80.00", 1))
    scarce_name = await db_session.scalar(
        select(Product.name).where(Product.id == scarce)
    )

    with pytest.raises(InsufficientStockError) as exc_info:
        await create_order(
            db_session,
            user_id=user_id,
            lines=[OrderLine(plenty, 2), OrderLine(scarce, 2)],
            shipping=_shipping(),
        )

    assert exc_info.value.product_id == scarce
    assert scarce_name in exc_info.value.message
    assert await _count(db_session, Order) == 0
    assert await _count(db_session, OrderItem) == 0
    assert await _stock(db_session, plenty) == 10
    assert await _stock(db_session, scarce) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_order_unknown_product(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 3))

    with pytest.raises(NotFoundError):
        await create_order(
            db_session,
            user_id=user_id,
            lines=[OrderLine(product_id, 1), OrderLine(999_999, 1)],
            shipping=_shipping(),
        )

    assert await _count(db_session, Order) == 0
    assert await _stock(db_session, product_id) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_total_over_money_column_is_refused(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("60000000.00", 5))

    with pytest.raises(ValidationFailedError, match="too large"):
        await create_order(
            db_session,
            user_id=user_id,
            lines=[OrderLine(product_id, 2)],
            shipping=_shipping(),
        )

    assert await _count(db_session, Order) == 0
    assert await _stock(db_session, product_id) == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_repeated_product_lines_checked_as_one(db_session):
    """Two lines of 2 against stock 3 are treated as a single line of 4."""
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 3))

    with pytest.raises(InsufficientStockError):
        await create_order(
            db_session,
            user_id=user_id,
            lines=[OrderLine(product_id, 2), OrderLine(product_id, 2)],
            shipping=_shipping(),
        )
    assert await _stock(db_session, product_id) == 3

    result = await create_order(
        db_session,
        user_id=user_id,
        lines=[OrderLine(product_id, 1), OrderLine(product_id, 2)],
        shipping=_shipping(),
    )
    quantities = (
        await db_session.scalars(
            select(OrderItem.quantity).where(OrderItem.order_id == result.order_id)
        )
    ).all()
    assert quantities == [3]
    assert await _stock(db_session, product_id) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_guarded_decrement_refuses_to_go_negative(db_session):
    (product_id,) = await _make_products(db_session, ("10.00", 5))

    assert await _decrement_stock(db_session, product_id, 6) is False
    assert await _decrement_stock(db_session, product_id, 5) is True
    await db_session.commit()

    assert await _stock(db_session, product_id) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_create_order_keeps_shipping_and_payment_details(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))

    result = await create_order(
        db_session,
        user_id=user_id,
        lines=[OrderLine(product_id, 1)],
        shipping=_shipping(
            latitude=Decimal("27.71720000"),
            longitude=Decimal("85.32400000"),
            notes="Leave at the gate",
        ),
        payment_status=PaymentStatus.PAID,
    )

    order = await db_session.get(Order, result.order_id)
    assert order.payment_status == PaymentStatus.PAID
    assert order.notes == "Leave at the gate"
    assert order.latitude == Decimal("27.71720000")


# ---------------------------------------------------------------------------
# cancel_order
# ---------------------------------------------------------------------------


async def _place(db, user_id, product_id, quantity) -> int:
    result = await create_order(
        db,
        user_id=user_id,
        lines=[OrderLine(product_id, quantity)],
        shipping=_shipping(),
    )
    return result.order_id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancel_restores_stock_exactly_once(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, user_id, product_id, 4)
    assert await _stock(db_session, product_id) == 1

    order = await cancel_order(db_session, order_id=order_id, user_id=user_id)
    assert order.status == OrderStatus.CANCELLED
    assert await _stock(db_session, product_id) == 5

    with pytest.raises(OrderStateError, match="already cancelled"):
        await cancel_order(db_session, order_id=order_id, user_id=user_id)

    assert await _stock(db_session, product_id) == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cannot_cancel_delivered_order(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, user_id, product_id, 2)
    await update_order_status(
        db_session, order_id=order_id, status=OrderStatus.DELIVERED
    )

    with pytest.raises(OrderStateError, match="delivered"):
        await cancel_order(db_session, order_id=order_id, user_id=user_id)

    status = await db_session.scalar(select(Order.status).where(Order.id == order_id))
    assert status == OrderStatus.DELIVERED
    assert await _stock(db_session, product_id) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cannot_cancel_someone_elses_order(db_session):
    owner_id = await _make_user(db_session)
    other_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, owner_id, product_id, 2)

    with pytest.raises(NotFoundError):
        await cancel_order(db_session, order_id=order_id, user_id=other_id)

    assert await _stock(db_session, product_id) == 3


# ---------------------------------------------------------------------------
# update_order_status
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_cancel_goes_through_stock_restore(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, user_id, product_id, 5)

    order = await update_order_status(
        db_session, order_id=order_id, status=OrderStatus.CANCELLED
    )

    assert order.status == OrderStatus.CANCELLED
    assert await _stock(db_session, product_id) == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_plain_transition_leaves_stock_alone(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, user_id, product_id, 2)

    order = await update_order_status(
        db_session, order_id=order_id, status=OrderStatus.SHIPPED
    )

    assert order.status == OrderStatus.SHIPPED
    assert await _stock(db_session, product_id) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancelled_order_cannot_be_reopened(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, user_id, product_id, 2)
    await cancel_order(db_session, order_id=order_id, user_id=user_id)

    with pytest.raises(OrderStateError):
        await update_order_status(
            db_session, order_id=order_id, status=OrderStatus.PROCESSING
        )

    assert await _stock(db_session, product_id) == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delivered_order_cannot_be_reopened(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, user_id, product_id, 2)
    await update_order_status(
        db_session, order_id=order_id, status=OrderStatus.DELIVERED
    )

    with pytest.raises(OrderStateError, match="delivered"):
        await update_order_status(
            db_session, order_id=order_id, status=OrderStatus.PENDING
        )

    # Still delivered, so the owner cannot cancel it for a stock refund.
    with pytest.raises(OrderStateError):
        await cancel_order(db_session, order_id=order_id, user_id=user_id)

    status = await db_session.scalar(select(Order.status).where(Order.id == order_id))
    assert status == OrderStatus.DELIVERED
    assert await _stock(db_session, product_id) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_setting_delivered_again_is_allowed(db_session):
    user_id = await _make_user(db_session)
    (product_id,) = await _make_products(db_session, ("10.00", 5))
    order_id = await _place(db_session, user_id, product_id, 1)
    await update_order_status(
        db_session, order_id=order_id, status=OrderStatus.DELIVERED
    )

    order = await update_order_status(
        db_session, order_id=order_id, status=OrderStatus.DELIVERED
    )

    assert order.status == OrderStatus.DELIVERED
    assert await _stock(db_session, product_id) == 4


@pytest.mark.asyncio
@pytest.mark.unit
async def test_update_status_unknown_order(db_session):
    with pytest.raises(NotFoundError):
        await update_order_status(
            db_session, order_id=12345, status=OrderStatus.SHIPPED
        )
