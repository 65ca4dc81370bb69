"""Store service routers package."""

from services.store_service.routers.admin_catalog import router as admin_catalog_router
from services.store_service.routers.auth import router as auth_router
from services.store_service.routers.catalog import router as catalog_router
from services.store_service.routers.content import router as content_router
from services.store_service.routers.customizations import (
    router as customizations_router,
)
from services.store_service.routers.dashboard import router as dashboard_router
from services.store_service.routers.orders import router as orders_router
from services.store_service.routers.payments import router as payments_router
from services.store_service.routers.users import router as users_router
from services.store_service.routers.wishlist import router as wishlist_router

__all__ = [
    "admin_catalog_router",
    "auth_router",
    "catalog_router",
    "content_router",
    "customizations_router",
    "dashboard_router",
    "orders_router",
    "payments_router",
    "users_router",
    "wishlist_router",
]
