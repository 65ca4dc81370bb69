"""Pydantic schemas for store service."""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from services.store_service.models import (
    ContentPlatform,
    CustomizationStatus,
    CustomizationType,
    OrderStatus,
    PaymentStatus,
    UserRole,
)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=-(-total // limit))


class MessageResponse(BaseModel):
    message: str


# ============================================================================
# AUTH / USER SCHEMAS
# ============================================================================


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    address: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserUpdate(BaseModel):
    """Admin edit of any account."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class UserStatusUpdate(BaseModel):
    is_active: bool


class UserListResponse(BaseModel):
    users: list[UserResponse]
    pagination: Pagination


# ============================================================================
# CATEGORY SCHEMAS
# ============================================================================


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class CategoryResponse(CategoryBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    image_url: Optional[str] = None
    product_count: int = 0
    created_at: datetime
    updated_at: datetime


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    category_id: int
    stock: int = Field(0, ge=0)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[int] = None
    stock: Optional[int] = Field(None, ge=0)


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    image_url: Optional[str] = None
    category_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    pagination: Pagination


class ProductBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: Decimal
    image_url: Optional[str] = None


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


MAX_LINE_QUANTITY = 1000


class OrderItemInput(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0, le=MAX_LINE_QUANTITY)


class ShippingInput(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    shipping_address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=20)
    latitude: Optional[Decimal] = Field(None, ge=-90, le=90)
    longitude: Optional[Decimal] = Field(None, ge=-180, le=180)
    notes: Optional[str] = None
    payment_status: PaymentStatus = PaymentStatus.PENDING


class OrderCreate(ShippingInput):
    items: list[OrderItemInput] = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal
    product: Optional[ProductBrief] = None


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    total_amount: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    shipping_address: str
    phone: str
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    notes: Optional[str] = None
    items: list[OrderItemResponse] = []
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: Pagination


# ============================================================================
# CUSTOMIZATION SCHEMAS
# ============================================================================


class CustomizationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    type: CustomizationType = CustomizationType.BOUQUET
    occasion: Optional[str] = Field(None, max_length=100)
    preferred_colors: Optional[str] = Field(None, max_length=255)
    budget: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    delivery_date: Optional[date] = None
    special_requirements: Optional[str] = None


class CustomizationStatusUpdate(BaseModel):
    status: Optional[CustomizationStatus] = None
    admin_notes: Optional[str] = None
    quoted_price: Optional[Decimal] = Field(
        None, ge=0, max_digits=10, decimal_places=2
    )


class CustomizationResponse(CustomizationCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    status: CustomizationStatus
    admin_notes: Optional[str] = None
    quoted_price: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime


class CustomizationListResponse(BaseModel):
    customizations: list[CustomizationResponse]
    pagination: Pagination


# ============================================================================
# WISHLIST / CONTENT SCHEMAS
# ============================================================================


class WishlistAdd(BaseModel):
    product_id: int


class WishlistItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    created_at: datetime
    product: ProductBrief


class ContentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=500)
    platform: ContentPlatform = ContentPlatform.TIKTOK


class ContentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    url: Optional[str] = Field(None, min_length=1, max_length=500)
    platform: Optional[ContentPlatform] = None


class ContentResponse(ContentCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class ContentListResponse(BaseModel):
    contents: list[ContentResponse]
    pagination: Pagination


# ============================================================================
# DASHBOARD / PAYMENT SCHEMAS
# ============================================================================


class RecentOrder(BaseModel):
    id: int
    total_amount: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime
    user_name: str
    items: str


class AdminDashboardStats(BaseModel):
    total_products: int
    total_orders: int
    total_customers: int
    total_revenue: Decimal
    recent_orders: list[RecentOrder]


class CustomerDashboardStats(BaseModel):
    total_orders: int
    active_orders: int
    wishlist_count: int
    recent_orders: list[OrderResponse]


class CheckoutSessionRequest(BaseModel):
    items: list[OrderItemInput] = Field(..., min_length=1)
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None


class CheckoutSessionResponse(BaseModel):
    url: str
    session_id: str
