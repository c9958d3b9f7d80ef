"""
Household Member Endpoints
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from donor_portal.auth.dependencies import ensure_salesforce_access_token
from donor_portal.handlers.member_handler import member_handler
from donor_portal.models.requests import DeleteMemberRequest, MemberRequest
from donor_portal.routes.responses import upstream_failure
from donor_portal.utils.exceptions import SalesforceException

router = APIRouter(
    tags=["members"],
    dependencies=[Depends(ensure_salesforce_access_token)],
)


@router.post("/api/member/add")
@router.post("/api/add-member")
async def save_member(request: MemberRequest):
    """
    Add a household member, or update one when contactId is given.

    Returns 201 on create and 200 on update.
    """
    try:
        status_code, result = await member_handler.save_member(request)
    except SalesforceException as e:
        return upstream_failure("Something went wrong, please try again later.", e)
    return JSONResponse(status_code=status_code, content=result)


@router.post("/api/delete-member")
async def delete_member(request: DeleteMemberRequest):
    try:
        return await member_handler.delete_member(request)
    except SalesforceException as e:
        return upstream_failure("Error deleting member.", e)
