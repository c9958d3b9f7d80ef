"""
Test Stripe PaymentIntent Endpoint
"""

from unittest.mock import patch

import pytest
import stripe

from donor_portal.services.stripe_service import calculate_order_amount


def test_calculate_order_amount():
    assert calculate_order_amount([{"amount": 1000}, {"amount": 2550}]) == 3550
    assert calculate_order_amount([]) == 0


@pytest.mark.asyncio
async def test_create_payment_intent(async_client):
    with patch(
        "donor_portal.services.stripe_service.stripe.PaymentIntent.create",
        return_value={"id": "pi_test123", "client_secret": "pi_test123_secret_abc"},
    ) as mock_create:
        response = await async_client.post(
            "/create-payment-intent", json={"items": [{"amount": 1000}, {"amount": 500}]}
        )

    assert response.status_code == 200
    assert response.json() == {"clientSecret": "pi_test123_secret_abc"}
    mock_create.assert_called_once_with(
        amount=1500,
        currency="usd",
        automatic_payment_methods={"enabled": True},
    )


@pytest.mark.asyncio
async def test_create_payment_intent_stripe_error(async_client):
    error = stripe.InvalidRequestError(
        "Amount must be at least $0.50 usd",
        "amount",
        http_status=400,
        json_body={"error": {"code": "amount_too_small", "param": "amount"}},
    )

    with patch(
        "donor_portal.services.stripe_service.stripe.PaymentIntent.create",
        side_effect=error,
    ):
        response = await async_client.post("/create-payment-intent", json={"items": [{"amount": 1}]})

    assert response.status_code == 500
    data = response.json()
    assert data["message"] == "Failed to create payment intent"
    assert data["error"] == {"error": {"code": "amount_too_small", "param": "amount"}}
    assert data["success"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"items": []},
        {"items": [{"amount": -5}]},
        {},
    ],
)
async def test_create_payment_intent_rejects_invalid_items(async_client, body):
    with patch("donor_portal.services.stripe_service.stripe.PaymentIntent.create") as mock_create:
        response = await async_client.post("/create-payment-intent", json=body)

    assert response.status_code == 422
    mock_create.assert_not_called()


@pytest.mark.asyncio
async def test_payment_route_needs_no_salesforce_token(async_client):
    with patch(
        "donor_portal.auth.dependencies.salesforce_oauth"
    ) as mock_oauth, patch(
        "donor_portal.services.stripe_service.stripe.PaymentIntent.create",
        return_value={"id": "pi_test123", "client_secret": "secret"},
    ):
        response = await async_client.post("/create-payment-intent", json={"items": [{"amount": 100}]})

    assert response.status_code == 200
    mock_oauth.get_access_token.assert_not_called()
