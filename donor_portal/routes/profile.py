"""
Profile Endpoints

Contact details and Account address of the signed-in portal user.
"""

from fastapi import APIRouter, Depends, Query

from donor_portal.auth.dependencies import ensure_salesforce_access_token
from donor_portal.handlers.profile_handler import profile_handler
from donor_portal.models.requests import AddressUpdateRequest, ProfileUpdateRequest
from donor_portal.routes.responses import upstream_failure
from donor_portal.utils.exceptions import SalesforceException

router = APIRouter(
    tags=["profile"],
    dependencies=[Depends(ensure_salesforce_access_token)],
)


@router.get("/api/contact")
async def get_contact(email: str = Query(..., description="Email of the portal user")):
    try:
        return await profile_handler.get_profile(email)
    except SalesforceException as e:
        return upstream_failure("Failed to fetch profile", e)


@router.post("/api/profile/update")
async def update_profile(request: ProfileUpdateRequest):
    try:
        return await profile_handler.update_profile(request)
    except SalesforceException as e:
        return upstream_failure("Profile update failed", e)


@router.patch("/api/profile/address")
async def update_address(request: AddressUpdateRequest):
    try:
        return await profile_handler.update_address(request)
    except SalesforceException as e:
        return upstream_failure("Address update failed", e)
