"""Storefront social content (TikTok links)."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from libs.db.updates import apply_changes, changed_fields
from services.store_service.models import Content
from services.store_service.routers._helpers import PageParams
from services.store_service.schemas import (
    ContentCreate,
    ContentListResponse,
    ContentResponse,
    ContentUpdate,
    MessageResponse,
    Pagination,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/contents", tags=["content"])


async def _get_content_or_404(db: AsyncSession, content_id: int) -> Content:
    content = await db.get(Content, content_id)
    if not content:
        raise HTTPException(status_code=404, detail="Content not found")
    return content


@router.get("", response_model=ContentListResponse)
async def list_contents(
    page: PageParams = Depends(),
    db: AsyncSession = Depends(get_async_db),
):
    total = await db.scalar(select(func.count(Content.id))) or 0
    result = await db.execute(
        select(Content)
        .order_by(Content.created_at.desc(), Content.id.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    return ContentListResponse(
        contents=[ContentResponse.model_validate(c) for c in result.scalars().all()],
        pagination=Pagination.build(page.page, page.limit, total),
    )


@router.get("/{content_id}", response_model=ContentResponse)
async def get_content(
    content_id: int,
    db: AsyncSession = Depends(get_async_db),
):
    return await _get_content_or_404(db, content_id)


@router.post("", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    payload: ContentCreate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    content = Content(**payload.model_dump())
    db.add(content)
    await db.commit()
    await db.refresh(content)
    return content


@router.put("/{content_id}", response_model=ContentResponse)
async def update_content(
    content_id: int,
    payload: ContentUpdate,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    changes = changed_fields(payload, drop_empty=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    content = await _get_content_or_404(db, content_id)
    apply_changes(content, changes)
    await db.commit()
    await db.refresh(content)
    return content


@router.delete("/{content_id}", response_model=MessageResponse)
async def delete_content(
    content_id: int,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    content = await _get_content_or_404(db, content_id)
    await db.delete(content)
    await db.commit()
    return MessageResponse(message="Content deleted successfully")
