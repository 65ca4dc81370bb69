"""Admin catalog router: category and product management."""

from decimal import Decimal
from typing import Optional

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    UploadFile,
    status,
)
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.error_handler import ConflictError
from libs.common.logging import get_logger
from libs.common.media_utils import delete_image, store_upload
from libs.db.session import get_async_db
from libs.db.updates import apply_changes, changed_fields
from services.store_service.models import Category, OrderItem, Product
from services.store_service.routers._helpers import load_product, parse_form
from services.store_service.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MessageResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["admin-store"])


async def _product_count(db: AsyncSession, category_id: int) -> int:
    return (
        await db.scalar(
            select(func.count(Product.id)).where(Product.category_id == category_id)
        )
        or 0
    )


async def _ensure_category_name_free(
    db: AsyncSession, name: str, category_id: Optional[int] = None
) -> None:
    query = select(Category.id).where(func.lower(Category.name) == name.lower())
    if category_id is not None:
        query = query.where(Category.id != category_id)
    if await db.scalar(query):
        raise ConflictError("Category with this name already exists")


def _schedule_image_cleanup(
    background_tasks: BackgroundTasks,
    previous: Optional[dict],
    new_url: Optional[str],
) -> None:
    old_url = (previous or {}).get("image_url")
    if new_url and old_url and old_url != new_url:
        background_tasks.add_task(delete_image, old_url)


# ============================================================================
# CATEGORIES
# ============================================================================


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    name: str = Form(...),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    payload = parse_form(CategoryCreate, name=name.strip(), description=description)
    await _ensure_category_name_free(db, payload.name)

    category = Category(**payload.model_dump())
    category.image_url = await store_upload(image, "categories")
    db.add(category)
    await db.commit()
    await db.refresh(category)

    logger.info("Created category %s (%s)", category.id, category.name)
    return CategoryResponse.model_validate(category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    background_tasks: BackgroundTasks,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    category = await db.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    payload = parse_form(CategoryUpdate, name=name, description=description)
    changes = changed_fields(payload, drop_empty=True)
    if "name" in changes:
        changes["name"] = changes["name"].strip()
        await _ensure_category_name_free(db, changes["name"], category_id)

    image_url = await store_upload(image, "categories")
    if image_url:
        changes["image_url"] = image_url
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    previous = apply_changes(category, changes)
    await db.commit()
    await db.refresh(category)
    _schedule_image_cleanup(background_tasks, previous, image_url)

    return CategoryResponse.model_validate(category).model_copy(
        update={"product_count": await _product_count(db, category_id)}
    )


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: int,
    background_tasks: BackgroundTasks,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    category = await db.get(Category, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    if await _product_count(db, category_id) > 0:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete category with existing products",
        )

    image_url = category.image_url
    await db.delete(category)
    await db.commit()
    if image_url:
        background_tasks.add_task(delete_image, image_url)

    logger.info("Deleted category %s", category_id)
    return MessageResponse(message="Category deleted successfully")


# ============================================================================
# PRODUCTS
# ============================================================================


@router.post(
    "/products",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    name: str = Form(...),
    price: Decimal = Form(...),
    category_id: int = Form(...),
    description: Optional[str] = Form(None),
    stock: int = Form(0),
    image: Optional[UploadFile] = File(None),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    payload = parse_form(
        ProductCreate,
        name=name.strip(),
        price=price,
        category_id=category_id,
        description=description,
        stock=stock,
    )
    if not await db.get(Category, payload.category_id):
        raise HTTPException(status_code=400, detail="Category not found")

    product = Product(**payload.model_dump())
    product.image_url = await store_upload(image, "products")
    db.add(product)
    await db.commit()

    logger.info("Created product %s (%s)", product.id, product.name)
    return await load_product(db, product.id)


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    background_tasks: BackgroundTasks,
    name: Optional[str] = Form(None),
    price: Optional[Decimal] = Form(None),
    category_id: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    stock: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    payload = parse_form(
        ProductUpdate,
        name=name,
        price=price,
        category_id=category_id,
        description=description,
        stock=stock,
    )
    changes = changed_fields(payload, drop_empty=True)
    if "category_id" in changes and not await db.get(
        Category, changes["category_id"]
    ):
        raise HTTPException(status_code=400, detail="Category not found")

    image_url = await store_upload(image, "products")
    if image_url:
        changes["image_url"] = image_url
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    previous = apply_changes(product, changes)
    await db.commit()
    _schedule_image_cleanup(background_tasks, previous, image_url)

    logger.info("Updated product %s: %s", product_id, list(changes))
    return await load_product(db, product_id)


@router.delete("/products/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: int,
    background_tasks: BackgroundTasks,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    ordered = await db.scalar(
        select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
    )
    if ordered:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete a product that appears in orders",
        )

    image_url = product.image_url
    await db.delete(product)
    await db.commit()
    if image_url:
        background_tasks.add_task(delete_image, image_url)

    logger.info("Deleted product %s", product_id)
    return MessageResponse(message="Product deleted successfully")
