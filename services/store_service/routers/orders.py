"""Store orders router: checkout, order history, cancellation, admin status."""

from typing import Optional

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Query,
    status,
)
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.emails.store import send_order_status_email
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.models import Order, OrderStatus, User
from services.store_service.routers._helpers import (
    PageParams,
    load_order_or_404,
    order_query,
)
from services.store_service.schemas import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    Pagination,
)
from services.store_service.services import order_ops
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


async def _notify_status_change(email: str, name: str, order: OrderResponse) -> None:
    """Background task; failures are logged and dropped."""
    try:
        await send_order_status_email(
            email, name, order.id, order.status.value, order.total_amount
        )
    except Exception as e:
        logger.error(f"Failed to send status email for order {order.id}: {e}")


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order. Stock is checked and taken atomically."""
    result = await order_ops.create_order(
        db,
        user_id=current_user.user_id,
        lines=[
            order_ops.OrderLine(product_id=i.product_id, quantity=i.quantity)
            for i in payload.items
        ],
        shipping=order_ops.ShippingDetails(
            shipping_address=payload.shipping_address.strip(),
            phone=payload.phone.strip(),
            latitude=payload.latitude,
            longitude=payload.longitude,
            notes=payload.notes,
        ),
        payment_status=payload.payment_status,
    )
    return await load_order_or_404(db, result.order_id)


@router.get("", response_model=OrderListResponse)
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    page: PageParams = Depends(),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """All orders, newest first. Filter with ``?status=``."""
    count_query = select(func.count(Order.id))
    query = order_query()
    if status_filter:
        count_query = count_query.where(Order.status == status_filter)
        query = query.where(Order.status == status_filter)

    total = await db.scalar(count_query) or 0
    result = await db.execute(
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    return OrderListResponse(
        orders=[OrderResponse.model_validate(o) for o in result.scalars().all()],
        pagination=Pagination.build(page.page, page.limit, total),
    )


@router.get("/my-orders", response_model=list[OrderResponse])
async def list_my_orders(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        order_query()
        .where(Order.user_id == current_user.user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return result.scalars().all()


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    order = await load_order_or_404(db, order_id)
    if order.user_id != current_user.user_id and not current_user.is_admin:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.patch("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel your own order and release its stock."""
    await order_ops.cancel_order(db, order_id=order_id, user_id=current_user.user_id)
    return await load_order_or_404(db, order_id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    background_tasks: BackgroundTasks,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Admin status change; the customer is emailed after the response."""
    await order_ops.update_order_status(db, order_id=order_id, status=payload.status)
    order = OrderResponse.model_validate(await load_order_or_404(db, order_id))

    customer = await db.execute(
        select(User.email, User.name).where(User.id == order.user_id)
    )
    row = customer.one_or_none()
    if row:
        background_tasks.add_task(_notify_status_change, row.email, row.name, order)

    logger.info(
        "Admin %s moved order %s to %s", admin.user_id, order_id, order.status.value
    )
    return order
