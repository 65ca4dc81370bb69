"""Shared helper functions for store routers."""

from typing import Optional, TypeVar

from fastapi import HTTPException, Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from services.store_service.models import Order, OrderItem, Product
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

ModelT = TypeVar("ModelT", bound=BaseModel)


class PageParams:
    """``?page=&limit=`` query parameters."""

    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_form(model: type[ModelT], **values) -> ModelT:
    """Validate multipart form fields with a pydantic model.

    Missing and blank values are dropped so partial-update models only see the
    fields the client filled in.
    """
    try:
        return model(**{k: v for k, v in values.items() if v not in (None, "")})
    except ValidationError as e:
        raise RequestValidationError(
            e.errors(include_url=False, include_context=False)
        )


async def count_rows(db: AsyncSession, query) -> int:
    return await db.scalar(select(func.count()).select_from(query.subquery())) or 0


def order_query():
    """Orders with items and products; refreshes rows already in the session."""
    return (
        select(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.product))
        .execution_options(populate_existing=True)
    )


async def load_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    result = await db.execute(order_query().where(Order.id == order_id))
    return result.scalar_one_or_none()


async def load_order_or_404(db: AsyncSession, order_id: int) -> Order:
    order = await load_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


async def load_product(db: AsyncSession, product_id: int) -> Optional[Product]:
    result = await db.execute(
        select(Product)
        .options(selectinload(Product.category))
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
