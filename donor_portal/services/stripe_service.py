"""
Stripe Service

Creates PaymentIntents for the donation checkout.
"""

from typing import Any, Dict, Iterable, Mapping

import stripe

from donor_portal.config import settings
from donor_portal.utils.exceptions import StripeException
from donor_portal.utils.logging_config import get_logger

logger = get_logger(__name__)

# Configure Stripe
stripe.api_key = settings.stripe_api_key
if settings.stripe_api_version:
    stripe.api_version = settings.stripe_api_version


def calculate_order_amount(items: Iterable[Mapping[str, Any]]) -> int:
    """Total of the line item amounts, in the smallest currency unit."""
    return sum(int(item["amount"]) for item in items)


class StripeService:
    """Stripe PaymentIntent API service"""

    def __init__(self):
        self.currency = settings.stripe_currency

    async def create_payment_intent(self, items: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Create a PaymentIntent for the given line items.

        Args:
            items: Line items with an ``amount`` in the smallest currency unit

        Returns:
            {"id": ..., "client_secret": ..., "amount": ...}

        Raises:
            StripeException: If Stripe rejects the request
        """
        amount = calculate_order_amount(items)

        try:
            payment_intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=self.currency,
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as e:
            logger.error(
                f"Failed to create payment intent: {e}",
                extra={"amount": amount, "error": str(e)},
            )
            raise StripeException(
                "Failed to create payment intent",
                details={
                    "error": e.json_body or {"message": str(e)},
                    "http_status": e.http_status,
                },
            ) from e

        logger.info(
            "Created Stripe payment intent",
            extra={"payment_intent_id": payment_intent["id"], "amount": amount},
        )

        return {
            "id": payment_intent["id"],
            "client_secret": payment_intent["client_secret"],
            "amount": amount,
        }


# Global Stripe service instance
stripe_service = StripeService()
