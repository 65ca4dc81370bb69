"""Core order operations: guarded checkout, cancellation with stock restore."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.error_handler import (
    InsufficientStockError,
    NotFoundError,
    OrderStateError,
    ValidationFailedError,
)
from libs.common.logging import get_logger
from services.store_service.models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
)
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Largest value a Numeric(10, 2) money column holds.
MAX_AMOUNT = Decimal("99999999.99")


@dataclass
class OrderLine:
    product_id: int
    quantity: int


@dataclass
class ShippingDetails:
    shipping_address: str
    phone: str
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass
class OrderResult:
    order_id: int
    total_amount: Decimal
    lines: list[OrderLine] = field(default_factory=list)


def merge_lines(lines: Iterable[OrderLine]) -> list[OrderLine]:
    """Sum quantities of repeated products, keeping first-seen order."""
    merged: dict[int, int] = {}
    for line in lines:
        if line.quantity <= 0:
            raise ValidationFailedError("Quantity must be at least 1")
        merged[line.product_id] = merged.get(line.product_id, 0) + line.quantity
    return [OrderLine(product_id=pid, quantity=qty) for pid, qty in merged.items()]


async def _decrement_stock(db: AsyncSession, product_id: int, quantity: int) -> bool:
    """Take ``quantity`` units only if that many remain. Returns False otherwise."""
    result = await db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _restore_stock(db: AsyncSession, product_id: int, quantity: int) -> None:
    await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity)
        .execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


async def create_order(
    db: AsyncSession,
    *,
    user_id: int,
    lines: Iterable[OrderLine],
    shipping: ShippingDetails,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
) -> OrderResult:
    """Create an order and take its stock as one unit of work.

    Prices are read from the database, never from the caller. Any failure
    rolls back the whole transaction so no order row, item row or stock
    change survives.
    """
    lines = merge_lines(lines)
    if not lines:
        raise ValidationFailedError("Order must contain at least one item")

    try:
        rows = await db.execute(
            select(Product.id, Product.name, Product.price, Product.stock).where(
                Product.id.in_([line.product_id for line in lines])
            )
        )
        products = {row.id: row for row in rows}

        total = Decimal("0.00")
        priced: list[tuple[OrderLine, Decimal, Decimal]] = []
        for line in lines:
            product = products.get(line.product_id)
            if product is None:
                raise NotFoundError(f"Product with ID {line.product_id} not found")
            if product.stock < line.quantity:
                raise InsufficientStockError(product.id, product.name)

            subtotal = product.price * line.quantity
            total += subtotal
            priced.append((line, product.price, subtotal))

        if total > MAX_AMOUNT:
            raise ValidationFailedError("Order total is too large")

        order = Order(
            user_id=user_id,
            total_amount=total,
            status=OrderStatus.PENDING,
            payment_status=payment_status,
            shipping_address=shipping.shipping_address,
            phone=shipping.phone,
            latitude=shipping.latitude,
            longitude=shipping.longitude,
            notes=shipping.notes,
        )
        db.add(order)
        await db.flush()

        for line, price, subtotal in priced:
            db.add(
                OrderItem(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=price,
                    subtotal=subtotal,
                )
            )
            # Stock may have moved since the read above.
            if not await _decrement_stock(db, line.product_id, line.quantity):
                raise InsufficientStockError(
                    line.product_id, products[line.product_id].name
                )

        await db.flush()
        order_id = order.id
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Created order %s for user %s (items=%d, total=%s)",
        order_id,
        user_id,
        len(lines),
        total,
    )
    return OrderResult(order_id=order_id, total_amount=total, lines=lines)


# ---------------------------------------------------------------------------
# Cancellation / status changes
# ---------------------------------------------------------------------------


async def _lock_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _cancel_locked(db: AsyncSession, order: Order) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise OrderStateError("Order is already cancelled")
    if order.status == OrderStatus.DELIVERED:
        raise OrderStateError("Cannot cancel a delivered order")

    items = await db.execute(
        select(OrderItem.product_id, OrderItem.quantity).where(
            OrderItem.order_id == order.id
        )
    )
    for product_id, quantity in items:
        await _restore_stock(db, product_id, quantity)

    order.status = OrderStatus.CANCELLED


async def cancel_order(db: AsyncSession, *, order_id: int, user_id: int) -> Order:
    """Cancel a customer's own order and put its stock back."""
    try:
        order = await _lock_order(db, order_id)
        if order is None or order.user_id != user_id:
            raise NotFoundError("Order not found")

        await _cancel_locked(db, order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Order %s cancelled by user %s", order_id, user_id)
    return order


async def update_order_status(
    db: AsyncSession, *, order_id: int, status: OrderStatus
) -> Order:
    """Admin status change.

    Moving to ``cancelled`` goes through the same stock restore as a customer
    cancellation. Cancelled and delivered orders are terminal.
    """
    try:
        order = await _lock_order(db, order_id)
        if order is None:
            raise NotFoundError("Order not found")

        if status == OrderStatus.CANCELLED:
            await _cancel_locked(db, order)
        elif order.status == OrderStatus.CANCELLED:
            raise OrderStateError("Cannot change the status of a cancelled order")
        elif order.status == OrderStatus.DELIVERED and status != OrderStatus.DELIVERED:
            raise OrderStateError("Cannot change the status of a delivered order")
        else:
            order.status = status

        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Order %s status set to %s", order_id, status.value)
    return order
