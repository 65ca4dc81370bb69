"""User administration and self-service profile router."""

from typing import Optional

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
)
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.auth.security import hash_password, verify_password
from libs.common.emails.store import send_account_status_email
from libs.common.error_handler import AuthorizationError, ConflictError
from libs.common.logging import get_logger
from libs.common.media_utils import delete_image, store_upload
from libs.db.session import get_async_db
from libs.db.updates import apply_changes, changed_fields
from services.store_service.models import Order, User, UserRole
from services.store_service.routers._helpers import PageParams, parse_form
from services.store_service.schemas import (
    MessageResponse,
    Pagination,
    PasswordChange,
    ProfileUpdate,
    UserListResponse,
    UserResponse,
    UserStatusUpdate,
    UserUpdate,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def _ensure_email_free(db: AsyncSession, email: str, user_id: int) -> None:
    taken = await db.scalar(
        select(User.id).where(
            func.lower(User.email) == email.lower(), User.id != user_id
        )
    )
    if taken:
        raise ConflictError("Email is already in use")


# ============================================================================
# SELF-SERVICE PROFILE
# ============================================================================


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    background_tasks: BackgroundTasks,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update the caller's own profile. Blank form fields are ignored."""
    payload = parse_form(
        ProfileUpdate, name=name, email=email, phone=phone, address=address
    )
    changes = changed_fields(payload, drop_empty=True)

    image_url = await store_upload(profile_image, "profiles")
    if image_url:
        changes["profile_image_url"] = image_url
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    user = await _get_user_or_404(db, current_user.user_id)
    if "email" in changes:
        changes["email"] = changes["email"].lower()
        await _ensure_email_free(db, changes["email"], user.id)

    previous = apply_changes(user, changes)
    await db.commit()
    await db.refresh(user)

    old_image = previous.get("profile_image_url") if image_url else None
    if old_image and old_image != image_url:
        background_tasks.add_task(delete_image, old_image)

    return user


@router.put("/profile/password", response_model=MessageResponse)
async def change_password(
    payload: PasswordChange,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    user = await _get_user_or_404(db, current_user.user_id)
    if not verify_password(payload.current_password, user.password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    user.password = hash_password(payload.new_password)
    await db.commit()
    logger.info("User %s changed password", user.id)
    return MessageResponse(message="Password updated successfully")


# ============================================================================
# ADMIN
# ============================================================================


@router.get("", response_model=UserListResponse)
async def list_users(
    role: Optional[UserRole] = None,
    search: Optional[str] = None,
    page: PageParams = Depends(),
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(User)
    count_query = select(func.count(User.id))
    if role:
        query = query.where(User.role == role)
        count_query = count_query.where(User.role == role)
    if search:
        pattern = f"%{search.lower()}%"
        condition = func.lower(User.name).like(pattern) | func.lower(
            User.email
        ).like(pattern)
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = await db.scalar(count_query) or 0
    result = await db.execute(
        query.order_by(User.created_at.desc(), User.id.desc())
        .offset(page.offset)
        .limit(page.limit)
    )
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in result.scalars().all()],
        pagination=Pagination.build(page.page, page.limit, total),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await _get_user_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    changes = changed_fields(payload, drop_empty=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No fields to update")

    if changes.get("role") == UserRole.SUPERADMIN and admin.role != "superadmin":
        raise AuthorizationError("Only a superadmin can grant the superadmin role")

    user = await _get_user_or_404(db, user_id)
    if "email" in changes:
        changes["email"] = changes["email"].lower()
        await _ensure_email_free(db, changes["email"], user.id)

    apply_changes(user, changes)
    await db.commit()
    await db.refresh(user)

    logger.info("Admin %s updated user %s: %s", admin.user_id, user_id, list(changes))
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    if user_id == admin.user_id:
        raise HTTPException(
            status_code=400, detail="You cannot delete your own account"
        )

    user = await _get_user_or_404(db, user_id)
    order_count = await db.scalar(
        select(func.count(Order.id)).where(Order.user_id == user_id)
    )
    if order_count:
        raise HTTPException(
            status_code=400,
            detail="Cannot delete a user with existing orders. Deactivate instead.",
        )

    await db.delete(user)
    await db.commit()

    logger.info("Admin %s deleted user %s", admin.user_id, user_id)
    return MessageResponse(message="User deleted successfully")


@router.patch("/{user_id}/status", response_model=UserResponse)
async def set_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    background_tasks: BackgroundTasks,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Activate or deactivate an account and tell its owner."""
    if user_id == admin.user_id and not payload.is_active:
        raise HTTPException(
            status_code=400, detail="You cannot deactivate your own account"
        )

    user = await _get_user_or_404(db, user_id)
    changed = user.is_active != payload.is_active
    user.is_active = payload.is_active
    await db.commit()
    await db.refresh(user)

    if changed:
        background_tasks.add_task(
            send_account_status_email, user.email, user.name, user.is_active
        )
    logger.info(
        "Admin %s set user %s active=%s", admin.user_id, user_id, user.is_active
    )
    return user
