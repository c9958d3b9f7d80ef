"""
Record Endpoints

Direct create and update of the portal's Salesforce records, used by
front-end flows that assemble the payload themselves.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from donor_portal.auth.dependencies import ensure_salesforce_access_token
from donor_portal.models.salesforce_records import (
    SalesforceContact,
    SalesforceDonationSummary,
    SalesforceOpportunity,
)
from donor_portal.routes.responses import upstream_failure
from donor_portal.services.salesforce_service import salesforce_service
from donor_portal.utils.exceptions import SalesforceException
from donor_portal.utils.passwords import hash_password

router = APIRouter(
    tags=["records"],
    dependencies=[Depends(ensure_salesforce_access_token)],
)


@router.post("/api/contact")
async def create_contact(contact: SalesforceContact):
    """Create a Contact. A plain Password__c is stored hashed."""
    if contact.Password__c:
        contact.Password__c = hash_password(contact.Password__c)

    try:
        data = await salesforce_service.create_record("Contact", contact.to_record())
    except SalesforceException as e:
        return upstream_failure("Failed to create contact", e)

    return JSONResponse(
        status_code=201,
        content={"message": "Contact created successfully", "success": True, "data": data},
    )


@router.post("/api/opportunity")
async def create_opportunity(opportunity: SalesforceOpportunity):
    try:
        data = await salesforce_service.create_record("Opportunity", opportunity.to_record())
    except SalesforceException as e:
        return upstream_failure("Failed to create opportunity", e)

    return JSONResponse(
        status_code=201,
        content={"message": "Opportunity created successfully", "success": True, "data": data},
    )


@router.patch("/api/opportunity/{opportunity_id}")
async def update_opportunity(opportunity_id: str, opportunity: SalesforceOpportunity):
    try:
        await salesforce_service.update_record(
            "Opportunity", opportunity_id, opportunity.to_record()
        )
    except SalesforceException as e:
        return upstream_failure("Failed to update opportunity", e)

    return {"message": "Opportunity updated successfully", "success": True}


@router.post("/api/donationsummary")
async def create_donation_summary(summary: SalesforceDonationSummary):
    try:
        data = await salesforce_service.create_record("DonationSummary__c", summary.to_record())
    except SalesforceException as e:
        return upstream_failure("Failed to create donation summary", e)

    return JSONResponse(
        status_code=201,
        content={"message": "Donation summary created successfully", "success": True, "data": data},
    )
