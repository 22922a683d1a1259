"""
Stripe integration for checkout.

The backend only creates payment intents and, optionally, reads them back.
Card details go from the browser straight to Stripe using the client secret.
"""
import logging

import stripe
from fastapi import HTTPException

import settings

logger = logging.getLogger(__name__)


def get_stripe():
    api_key = settings.stripe_secret_key()
    if not api_key or not api_key.strip():
        logger.error("STRIPE_SECRET_KEY is not set; refusing payment call")
        raise HTTPException(status_code=500, detail="STRIPE_SECRET_KEY is not configured")
    stripe.api_key = api_key.strip()
    return stripe


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def _stripe_message(e: "stripe.StripeError") -> str:
    return e.user_message or str(e)


def create_payment_intent(order_id: str, amount: float):
    client = get_stripe()
    cents = to_minor_units(amount)
    try:
        intent = client.PaymentIntent.create(
            amount=cents,
            currency=settings.STRIPE_CURRENCY,
            metadata={"order_id": order_id},
        )
    except stripe.StripeError as e:
        logger.error("Stripe rejected payment intent for order %s: %s", order_id, e)
        raise HTTPException(status_code=500, detail=f"Stripe error: {_stripe_message(e)}")
    logger.info("Created payment intent %s for order %s (%s %s)", intent.id, order_id, cents, settings.STRIPE_CURRENCY)
    return intent


def verify_payment_intent(payment_intent_id: str, order_id: str) -> None:
    """Check with Stripe that the intent succeeded and was made for this order."""
    client = get_stripe()
    try:
        intent = client.PaymentIntent.retrieve(payment_intent_id)
    except stripe.StripeError as e:
        logger.error("Could not fetch payment intent %s: %s", payment_intent_id, e)
        raise HTTPException(status_code=500, detail=f"Stripe error: {_stripe_message(e)}")

    metadata = intent.metadata or {}
    if metadata.get("order_id") != order_id:
        logger.warning("Payment intent %s does not belong to order %s", payment_intent_id, order_id)
        raise HTTPException(status_code=400, detail="Payment intent does not match order")
    if intent.status != "succeeded":
        logger.warning("Payment intent %s has status %s", payment_intent_id, intent.status)
        raise HTTPException(status_code=400, detail=f"Payment not completed (status: {intent.status})")
