"""Custom-order requests: submission, admin review, conversion to orders."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from libs.db.updates import apply_changes, changed_fields
from services.store_service.models import Customization, CustomizationStatus
from services.store_service.routers._helpers import PageParams, load_order_or_404
from services.store_service.schemas import (
    CustomizationCreate,
    CustomizationListResponse,
    CustomizationResponse,
    CustomizationStatusUpdate,
    OrderResponse,
    Pagination,
    ShippingInput,
)
from services.store_service.services import customization_ops
from services.store_service.services.order_ops import ShippingDetails
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(prefix="/customizations", tags=["customizations"])


def _shipping(payload: ShippingInput) -> ShippingDetails:
    return ShippingDetails(
        shipping_address=payload.shipping_address.strip(),
        phone=payload.phone.strip(),
        latitude=payload.latitude,
        longitude=payload.longitude,
        notes=payload.notes,
    )


@router.post(
    "", response_model=CustomizationResponse, status_code=status.HTTP_201_CREATED
)
async def create_customization(
    payload: CustomizationCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Submit a custom arrangement request."""
    customization = Customization(
        user_id=current_user.user_id,
        status=CustomizationStatus.PENDING,
        **payload.model_dump(),
    )
    db.add(customization)
    await db.commit()
    await db.refresh(customization)

    logger.info(
        "User %s submitted customization %s", current_user.user_id, customization.id
    )
    return customization


@router.get("/my-customizations", response_model=list[CustomizationResponse])
async def list_my_customizations(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Customization)
        .where(Customization.user_id == current_user.user_id)
        .order_by(Customization.created_at.desc(), Customization.id.desc())
    )
    return result.scalars().all()


@router.get("", response_model=CustomizationListResponse)
async def list_customizations(
    status_filter: Optional[CustomizationStatus] = Query(None, alias="status"),
    page: PageParams = Depends(),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    filters = []
    if status_filter:
        filters.append(Customization.status == status_filter)

    total = await db.scalar(select(func.count(Customization.id)).where(*filters))
    result = await db.execute(
        select(Customization)
        .where(*filters)
        .order_by(Customization.created_at.desc(), Customization.id.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    return CustomizationListResponse(
        customizations=[
            CustomizationResponse.model_validate(c) for c in result.scalars().all()
        ],
        pagination=Pagination.build(page.page, page.limit, total or 0),
    )


@router.get("/{customization_id}", response_model=CustomizationResponse)
async def get_customization(
    customization_id: int,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    customization = await db.get(Customization, customization_id)
    if not customization or (
        customization.user_id != current_user.user_id and not current_user.is_admin
    ):
        raise HTTPException(status_code=404, detail="Customization request not found")
    return customization


@router.patch("/{customization_id}/status", response_model=CustomizationResponse)
async def update_customization_status(
    customization_id: int,
    payload: CustomizationStatusUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Review a request: move its status, add notes or a quote."""
    changes = changed_fields(payload)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")
    if "status" in changes and changes["status"] is None:
        raise HTTPException(status_code=400, detail="Status cannot be empty")
    # Only conversion into an order marks a request completed.
    if changes.get("status") == CustomizationStatus.COMPLETED:
        raise HTTPException(
            status_code=400,
            detail="Customizations are completed by creating an order",
        )

    customization = await db.get(Customization, customization_id)
    if not customization:
        raise HTTPException(status_code=404, detail="Customization request not found")
    if customization.status == CustomizationStatus.COMPLETED:
        raise HTTPException(
            status_code=400, detail="Completed customizations cannot be changed"
        )

    apply_changes(customization, changes)
    await db.commit()
    await db.refresh(customization)

    logger.info(
        "Admin %s updated customization %s: %s",
        admin.user_id,
        customization_id,
        list(changes),
    )
    return customization


@router.post(
    "/{customization_id}/create-order",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_order_from_customization(
    customization_id: int,
    payload: ShippingInput,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await customization_ops.create_order_from_customization(
        db,
        customization_id=customization_id,
        shipping=_shipping(payload),
        payment_status=payload.payment_status,
    )
    return await load_order_or_404(db, result.order_id)


@router.post(
    "/{customization_id}/complete-order",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
)
async def complete_customization_order(
    customization_id: int,
    payload: ShippingInput,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """The owner supplies delivery details for their accepted request."""
    result = await customization_ops.complete_customization_order(
        db,
        customization_id=customization_id,
        user_id=current_user.user_id,
        shipping=_shipping(payload),
        payment_status=payload.payment_status,
    )
    return await load_order_or_404(db, result.order_id)
