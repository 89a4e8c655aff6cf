"""
Stripe payment intents for online checkout.
"""
import logging
from typing import Dict

import stripe
from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool

from ..config.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def to_minor_units(amount: float) -> int:
    """Stripe expects the smallest currency unit (paise, cents)."""
    return int(round(amount * 100))


async def create_payment_intent(amount: float, currency: str) -> Dict[str, str]:
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=503, detail="Stripe API key not configured")

    try:
        intent = await run_in_threadpool(
            stripe.PaymentIntent.create,
            api_key=settings.stripe_secret_key,
            amount=to_minor_units(amount),
            currency=currency.lower(),
            automatic_payment_methods={"enabled": True},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error: {e}")
        raise HTTPException(status_code=502, detail=e.user_message or "Failed to create payment intent")

    logger.info(f"Payment intent created: {intent.id} for {amount} {currency}")
    return {"client_secret": intent.client_secret, "payment_id": intent.id}
