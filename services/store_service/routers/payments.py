"""Card payments through Stripe Checkout."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.db.session import get_async_db
from services.store_service.models import Product
from services.store_service.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
)
from services.store_service.services.order_ops import OrderLine, merge_lines
from services.store_service.stripe_client import (
    CheckoutLine,
    StripeCheckoutClient,
    StripeClientError,
    get_stripe_client,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
async def create_checkout_session(
    payload: CheckoutSessionRequest,
    current_user: AuthUser = Depends(get_current_user),
    stripe_client: Optional[StripeCheckoutClient] = Depends(get_stripe_client),
    db: AsyncSession = Depends(get_async_db),
):
    """Start a hosted checkout priced from the catalog, never from the client."""
    if stripe_client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Stripe is not configured on the server",
        )

    lines = merge_lines(
        OrderLine(product_id=i.product_id, quantity=i.quantity) for i in payload.items
    )
    rows = await db.execute(
        select(Product.id, Product.name, Product.price).where(
            Product.id.in_([line.product_id for line in lines])
        )
    )
    products = {row.id: row for row in rows}

    checkout_lines = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            raise HTTPException(
                status_code=404,
                detail=f"Product with ID {line.product_id} not found",
            )
        checkout_lines.append(
            CheckoutLine(
                name=product.name, unit_price=product.price, quantity=line.quantity
            )
        )

    frontend_url = get_settings().FRONTEND_URL.rstrip("/")
    try:
        session = await stripe_client.create_checkout_session(
            checkout_lines,
            success_url=payload.success_url or f"{frontend_url}/cart?payment=success",
            cancel_url=payload.cancel_url or f"{frontend_url}/cart?payment=cancelled",
        )
    except StripeClientError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    return CheckoutSessionResponse(url=session.url, session_id=session.session_id)
