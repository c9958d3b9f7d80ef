"""
Stripe Payment Endpoints
"""

from fastapi import APIRouter

from donor_portal.models.requests import PaymentIntentRequest
from donor_portal.routes.responses import upstream_failure
from donor_portal.services.stripe_service import stripe_service
from donor_portal.utils.exceptions import StripeException

router = APIRouter(tags=["payments"])


@router.post("/create-payment-intent")
async def create_payment_intent(request: PaymentIntentRequest):
    """
    Create a PaymentIntent for the checkout.

    Returns the client secret the browser needs to confirm the payment.
    """
    try:
        payment_intent = await stripe_service.create_payment_intent(
            item.model_dump() for item in request.items
        )
    except StripeException as e:
        return upstream_failure("Failed to create payment intent", e)

    return {"clientSecret": payment_intent["client_secret"]}
