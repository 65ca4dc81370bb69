"""
Stripe Checkout client for card payments.

Prices always come from the database; this module only turns already-priced
line items into a hosted checkout session.
"""

import asyncio
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import stripe
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CheckoutLine:
    """A priced line ready for Stripe."""

    name: str
    unit_price: Decimal
    quantity: int


@dataclass
class CheckoutSession:
    session_id: str
    url: str


class StripeClientError(Exception):
    """Raised when Stripe rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def to_minor_units(amount: Decimal) -> int:
    """Rupees to paisa, rounded half-up."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripeCheckoutClient:
    """Thin wrapper over ``stripe.checkout.Session``."""

    def __init__(self, api_key: str, currency: str = "npr"):
        self.api_key = api_key
        self.currency = currency

    def _line_items(self, lines: list[CheckoutLine]) -> list[dict]:
        return [
            {
                "quantity": line.quantity,
                "price_data": {
                    "currency": self.currency,
                    "unit_amount": to_minor_units(line.unit_price),
                    "product_data": {"name": line.name},
                },
            }
            for line in lines
        ]

    async def create_checkout_session(
        self,
        lines: list[CheckoutLine],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                api_key=self.api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=self._line_items(lines),
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session failed: {e}")
            raise StripeClientError(
                e.user_message or str(e), status_code=e.http_status
            ) from e

        logger.info(f"Created Stripe checkout session {session.id}")
        return CheckoutSession(session_id=session.id, url=session.url)


def get_stripe_client() -> Optional[StripeCheckoutClient]:
    """FastAPI dependency; ``None`` when Stripe is not configured."""
    settings = get_settings()
    if not settings.STRIPE_SECRET_KEY:
        return None
    return StripeCheckoutClient(settings.STRIPE_SECRET_KEY, settings.STRIPE_CURRENCY)
