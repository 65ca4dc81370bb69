"""Turn an accepted, quoted customization request into an order."""

from typing import Optional

from libs.common.error_handler import NotFoundError, ValidationFailedError
from libs.common.logging import get_logger
from services.store_service.models import (
    Customization,
    CustomizationStatus,
    Order,
    OrderStatus,
    PaymentStatus,
)
from services.store_service.services.order_ops import OrderResult, ShippingDetails
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def default_order_note(customization_id: int, title: str) -> str:
    return f"Custom order from customization #{customization_id}: {title}"


async def _convert(
    db: AsyncSession,
    *,
    customization_id: int,
    owner_id: Optional[int],
    shipping: ShippingDetails,
    payment_status: PaymentStatus,
) -> OrderResult:
    try:
        result = await db.execute(
            select(Customization)
            .where(Customization.id == customization_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        customization = result.scalar_one_or_none()
        # Someone else's request is reported exactly like a missing one.
        if customization is None or (
            owner_id is not None and customization.user_id != owner_id
        ):
            raise NotFoundError("Customization request not found")

        if customization.status != CustomizationStatus.ACCEPTED:
            raise ValidationFailedError(
                "Customization must be accepted before an order can be created "
                f"(current status: {customization.status.value})"
            )
        if customization.quoted_price is None:
            raise ValidationFailedError("Customization has no quoted price")

        order = Order(
            user_id=customization.user_id,
            total_amount=customization.quoted_price,
            status=OrderStatus.PENDING,
            payment_status=payment_status,
            shipping_address=shipping.shipping_address,
            phone=shipping.phone,
            latitude=shipping.latitude,
            longitude=shipping.longitude,
            notes=shipping.notes
            or default_order_note(customization.id, customization.title),
        )
        db.add(order)
        customization.status = CustomizationStatus.COMPLETED
        await db.flush()

        order_id = order.id
        total = order.total_amount
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Customization %s converted to order %s (total=%s)",
        customization_id,
        order_id,
        total,
    )
    return OrderResult(order_id=order_id, total_amount=total)


async def create_order_from_customization(
    db: AsyncSession,
    *,
    customization_id: int,
    shipping: ShippingDetails,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
) -> OrderResult:
    """Admin entry point: convert any customization."""
    return await _convert(
        db,
        customization_id=customization_id,
        owner_id=None,
        shipping=shipping,
        payment_status=payment_status,
    )


async def complete_customization_order(
    db: AsyncSession,
    *,
    customization_id: int,
    user_id: int,
    shipping: ShippingDetails,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
) -> OrderResult:
    """Customer entry point: only the request's owner may convert it."""
    return await _convert(
        db,
        customization_id=customization_id,
        owner_id=user_id,
        shipping=shipping,
        payment_status=payment_status,
    )
