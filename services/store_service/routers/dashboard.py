"""Admin and customer dashboard statistics."""

from decimal import Decimal

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    User,
    UserRole,
    Wishlist,
)
from services.store_service.routers._helpers import order_query
from services.store_service.schemas import (
    AdminDashboardStats,
    CustomerDashboardStats,
    OrderResponse,
    RecentOrder,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["dashboard"])

RECENT_ORDER_LIMIT = 5
ACTIVE_ORDER_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
)


@router.get("/dashboard/stats", response_model=AdminDashboardStats)
async def admin_dashboard_stats(
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    total_products = await db.scalar(select(func.count(Product.id)))
    total_orders = await db.scalar(select(func.count(Order.id)))
    total_customers = await db.scalar(
        select(func.count(User.id)).where(User.role == UserRole.CUSTOMER)
    )
    revenue = await db.scalar(
        select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            Order.payment_status == PaymentStatus.PAID
        )
    )

    result = await db.execute(
        select(Order)
        .options(
            selectinload(Order.user),
            selectinload(Order.items).selectinload(OrderItem.product),
        )
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDER_LIMIT)
        .execution_options(populate_existing=True)
    )
    recent = [
        RecentOrder(
            id=order.id,
            total_amount=order.total_amount,
            status=order.status,
            payment_status=order.payment_status,
            created_at=order.created_at,
            user_name=order.user.name if order.user else "Unknown",
            items=", ".join(i.product.name for i in order.items) or "No items",
        )
        for order in result.scalars().all()
    ]

    return AdminDashboardStats(
        total_products=total_products or 0,
        total_orders=total_orders or 0,
        total_customers=total_customers or 0,
        total_revenue=Decimal(str(revenue or 0)),
        recent_orders=recent,
    )


@router.get("/customer/dashboard/stats", response_model=CustomerDashboardStats)
async def customer_dashboard_stats(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    user_id = current_user.user_id
    total_orders = await db.scalar(
        select(func.count(Order.id)).where(Order.user_id == user_id)
    )
    active_orders = await db.scalar(
        select(func.count(Order.id)).where(
            Order.user_id == user_id, Order.status.in_(ACTIVE_ORDER_STATUSES)
        )
    )
    wishlist_count = await db.scalar(
        select(func.count(Wishlist.id)).where(Wishlist.user_id == user_id)
    )

    result = await db.execute(
        order_query()
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDER_LIMIT)
    )

    return CustomerDashboardStats(
        total_orders=total_orders or 0,
        active_orders=active_orders or 0,
        wishlist_count=wishlist_count or 0,
        recent_orders=[
            OrderResponse.model_validate(o) for o in result.scalars().all()
        ],
    )
