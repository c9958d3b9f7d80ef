"""
Donation and Newsletter Endpoints
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from donor_portal.auth.dependencies import ensure_salesforce_access_token
from donor_portal.handlers.donation_handler import donation_handler
from donor_portal.handlers.newsletter_handler import get_client_ip, newsletter_handler
from donor_portal.models.requests import DonationRequest, NewsletterRequest
from donor_portal.routes.responses import upstream_failure
from donor_portal.utils.exceptions import SalesforceException
from donor_portal.utils.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(
    tags=["donations"],
    dependencies=[Depends(ensure_salesforce_access_token)],
)


@router.post("/api/donate/create")
async def create_donation(request: DonationRequest):
    """
    Record a donation with its category breakdown.

    Payment is taken separately through /create-payment-intent or offline.
    """
    try:
        return await donation_handler.process_donation(request)
    except SalesforceException as e:
        return upstream_failure("Failed to process donation.", e)


@router.post("/api/newsletter")
async def subscribe_newsletter(body: NewsletterRequest, request: Request):
    ip_address = get_client_ip(
        request.headers.get("X-Forwarded-For"),
        request.client.host if request.client else None,
    )
    if not ip_address:
        logger.error("Could not determine subscriber IP address")
        return JSONResponse(
            status_code=500,
            content={"message": "Unable to fetch public IP address.", "success": False},
        )

    try:
        result = await newsletter_handler.subscribe(body, ip_address)
    except SalesforceException as e:
        return upstream_failure("Something went wrong, please try again later.", e)
    return JSONResponse(status_code=201, content=result)
