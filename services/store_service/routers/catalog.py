"""Store catalog router: categories and products."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from libs.db.session import get_async_db
from services.store_service.models import Category, Product
from services.store_service.routers._helpers import PageParams, load_product
from services.store_service.schemas import (
    CategoryResponse,
    Pagination,
    ProductListResponse,
    ProductResponse,
)
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["store"])


def _with_count(category: Category, product_count: int) -> CategoryResponse:
    return CategoryResponse.model_validate(category).model_copy(
        update={"product_count": product_count}
    )


def _category_counts():
    return (
        select(Category, func.count(Product.id))
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id)
    )


# ============================================================================
# CATALOG - CATEGORIES
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_async_db),
):
    """List all categories with how many products each holds."""
    result = await db.execute(_category_counts().order_by(Category.name))
    return [_with_count(category, count) for category, count in result.all()]


@router.get("/categories/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(_category_counts().where(Category.id == category_id))
    row = result.one_or_none()
    if not row:
        raise HTTPException(status_code=404, detail="Category not found")
    return _with_count(*row)


# ============================================================================
# CATALOG - PRODUCTS
# ============================================================================


async def _list_products(
    db: AsyncSession,
    page: PageParams,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
) -> ProductListResponse:
    filters = []
    if category_id is not None:
        filters.append(Product.category_id == category_id)
    if search:
        pattern = f"%{search.lower()}%"
        filters.append(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.description).like(pattern),
            )
        )

    total = await db.scalar(select(func.count(Product.id)).where(*filters)) or 0
    result = await db.execute(
        select(Product)
        .options(selectinload(Product.category))
        .where(*filters)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in result.scalars().all()],
        pagination=Pagination.build(page.page, page.limit, total),
    )


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_async_db),
):
    """List products, newest first."""
    return await _list_products(db, page, category_id=category_id, search=search)


@router.get("/products/category/{category_id}", response_model=ProductListResponse)
async def list_products_by_category(
    category_id: int,
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_async_db),
):
    if not await db.get(Category, category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return await _list_products(db, page, category_id=category_id)


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_async_db),
):
    product = await load_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
