"""Customer wishlist router."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import Product, Wishlist
from services.store_service.schemas import (
    MessageResponse,
    WishlistAdd,
    WishlistItemResponse,
)
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(prefix="/wishlist", tags=["wishlist"])


def _entry_query(user_id: int):
    return (
        select(Wishlist)
        .options(selectinload(Wishlist.product))
        .where(Wishlist.user_id == user_id)
    )


@router.get("", response_model=list[WishlistItemResponse])
async def get_wishlist(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        _entry_query(current_user.user_id).order_by(
            Wishlist.created_at.desc(), Wishlist.id.desc()
        )
    )
    return result.scalars().all()


@router.post(
    "", response_model=WishlistItemResponse, status_code=status.HTTP_201_CREATED
)
async def add_to_wishlist(
    payload: WishlistAdd,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Save a product. Adding one that is already saved is a no-op."""
    if not await db.get(Product, payload.product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    query = _entry_query(current_user.user_id).where(
        Wishlist.product_id == payload.product_id
    )
    existing = (await db.execute(query)).scalar_one_or_none()
    if existing:
        return existing

    db.add(Wishlist(user_id=current_user.user_id, product_id=payload.product_id))
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent request saved the same product first.
        await db.rollback()

    result = await db.execute(query.execution_options(populate_existing=True))
    return result.scalar_one()


@router.delete("/{product_id}", response_model=MessageResponse)
async def remove_from_wishlist(
    product_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    entry = await db.scalar(
        select(Wishlist).where(
            Wishlist.user_id == current_user.user_id,
            Wishlist.product_id == product_id,
        )
    )
    if not entry:
        raise HTTPException(status_code=404, detail="Product not in wishlist")

    await db.delete(entry)
    await db.commit()
    return MessageResponse(message="Removed from wishlist")
