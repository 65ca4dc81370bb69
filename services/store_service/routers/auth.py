"""Authentication router: register, login, token refresh."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.auth.security import create_access_token, hash_password, verify_password
from libs.common.error_handler import ConflictError
from libs.common.logging import get_logger
from libs.db.base import utc_now
from libs.db.session import get_async_db
from services.store_service.models import User, UserRole
from services.store_service.schemas import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_for(user: User) -> TokenResponse:
    token = create_access_token(user.id, user.email, user.role.value)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


async def _active_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated"
        )
    return user


@router.post(
    "/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create a customer account and sign it in."""
    email = payload.email.lower()
    existing = await db.scalar(select(User.id).where(func.lower(User.email) == email))
    if existing:
        raise ConflictError("User with this email already exists")

    user = User(
        name=payload.name.strip(),
        email=email,
        password=hash_password(payload.password),
        role=UserRole.CUSTOMER,
        phone=payload.phone,
        address=payload.address,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Registered customer %s", user.id)
    return _token_for(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(User).where(func.lower(User.email) == payload.email.lower())
    )
    user = result.scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Your account has been deactivated. Please contact support.",
        )

    user.last_login = utc_now()
    await db.commit()
    await db.refresh(user)

    logger.info("User %s logged in", user.id)
    return _token_for(user)


@router.get("/me", response_model=UserResponse)
async def me(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    user = await db.get(User, current_user.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Issue a fresh token with the account's current role."""
    user = await _active_user(db, current_user.user_id)
    return _token_for(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: AuthUser = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy.
    return MessageResponse(message="Logged out successfully")
