"""FastAPI application for the Buneko Blooms store."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import configure_logging, get_logger
from libs.common.middleware import add_observability_middleware
from libs.db.config import build_engine, build_session_factory
from services.store_service.routers import (
    admin_catalog_router,
    auth_router,
    catalog_router,
    content_router,
    customizations_router,
    dashboard_router,
    orders_router,
    payments_router,
    users_router,
    wishlist_router,
)

API_PREFIX = "/api"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    engine = build_engine(settings)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    logger.info("Store service started (environment=%s)", settings.ENVIRONMENT)
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Store service stopped")


def create_app() -> FastAPI:
    """Create and configure the store FastAPI app."""
    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title="Buneko Blooms Store API",
        version="1.0.0",
        description=(
            "Handmade flower shop - catalog, checkout, orders, "
            "custom arrangements and admin back-office."
        ),
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "buneko-blooms-store"}

    # Customer-facing routes
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(catalog_router, prefix=API_PREFIX)
    app.include_router(orders_router, prefix=API_PREFIX)
    app.include_router(customizations_router, prefix=API_PREFIX)
    app.include_router(wishlist_router, prefix=API_PREFIX)
    app.include_router(content_router, prefix=API_PREFIX)
    app.include_router(payments_router, prefix=API_PREFIX)
    app.include_router(dashboard_router, prefix=API_PREFIX)

    # Back-office routes
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(admin_catalog_router, prefix=API_PREFIX)

    return app


app = create_app()
