"""Store Service models package."""

from services.store_service.models.catalog import Category, Product
from services.store_service.models.commerce import Order, OrderItem, Wishlist
from services.store_service.models.core import User
from services.store_service.models.customization import Content, Customization
from services.store_service.models.enums import (
    ContentPlatform,
    CustomizationStatus,
    CustomizationType,
    OrderStatus,
    PaymentStatus,
    UserRole,
)

__all__ = [
    "Category",
    "Content",
    "ContentPlatform",
    "Customization",
    "CustomizationStatus",
    "CustomizationType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "Product",
    "User",
    "UserRole",
    "Wishlist",
]
