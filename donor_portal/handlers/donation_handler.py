"""
Donation Handler

Records a portal donation in Salesforce:

1. Find the donor Contact by email, or create it (and fill in the billing
   address of its new Account)
2. Create a Donation Opportunity on the donor's Account
3. Create one DonationSummary__c per category in a single Composite Batch
4. Stamp the transaction id on the Opportunity

Payment itself happens in Stripe (or offline for cheque and Zelle); the
Opportunity is left in "Payment Pending".
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from donor_portal.config import settings
from donor_portal.handlers.auth_handler import get_record_type_id
from donor_portal.models.requests import DonationCategory, DonationRequest
from donor_portal.models.salesforce_records import (
    SalesforceAccountAddress,
    SalesforceContact,
    SalesforceDonationSummary,
    SalesforceOpportunity,
)
from donor_portal.services.salesforce_service import salesforce_service
from donor_portal.utils.logging_config import get_logger
from donor_portal.utils.soql import build_soql
from donor_portal.utils.tokens import generate_random_string

logger = get_logger(__name__)

STAGE_PAYMENT_PENDING = "Payment Pending"

# Offline payment methods: (transaction id prefix, random suffix length)
OFFLINE_PAYMENT_PREFIXES = {
    "cheque": ("Check-", 12),
    "zelle": ("Zelle-", 13),
}


def split_donor_name(name: str) -> Tuple[str, str]:
    """
    Split a full name into (FirstName, LastName).

    The last word is the last name; a single word fills both.
    """
    name = name.strip()
    if " " not in name:
        return name, name
    first_name, last_name = name.rsplit(" ", 1)
    return first_name.strip(), last_name


def make_transaction_id(tnx_id: Optional[str]) -> Optional[str]:
    """Generated id for offline payments, otherwise the payment id as given."""
    offline = OFFLINE_PAYMENT_PREFIXES.get((tnx_id or "").lower())
    if offline:
        prefix, length = offline
        return f"{prefix}{generate_random_string(length)}"
    return tnx_id


def billing_address(request: DonationRequest) -> Optional[SalesforceAccountAddress]:
    """Billing address from the donation form, or None when no field is filled."""
    address = SalesforceAccountAddress(
        BillingStreet=request.donorBillSt or None,
        BillingCity=request.donorCity or None,
        BillingState=request.donorState or None,
        BillingPostalCode=request.donorZip or None,
        BillingCountry=request.donorCountry or None,
    )
    return address if address.to_record() else None


class DonationHandler:
    """Handler for donation processing"""

    async def _get_or_create_donor(self, request: DonationRequest) -> Tuple[str, Optional[str]]:
        """
        Contact Id and AccountId of the donor.

        A new donor Contact gets its Account created by Salesforce; the
        billing address from the form is written to that Account.
        """
        donor = await salesforce_service.query_first(
            build_soql(
                "SELECT Id, AccountId FROM Contact WHERE Email = {email}",
                email=request.donorEmail,
            )
        )
        if donor:
            logger.info("Found existing donor", extra={"contact_id": donor["Id"]})
            return donor["Id"], donor.get("AccountId")

        first_name, last_name = split_donor_name(request.donorName)
        contact = SalesforceContact(
            FirstName=first_name,
            LastName=last_name,
            Email=request.donorEmail,
            MobilePhone=request.donorMobile,
        )
        created = await salesforce_service.create_record("Contact", contact.to_record())
        contact_id = created["id"]

        new_donor = await salesforce_service.query_first(
            build_soql("SELECT AccountId FROM Contact WHERE Id = {id}", id=contact_id)
        )
        account_id = new_donor.get("AccountId") if new_donor else None

        address = billing_address(request)
        if account_id and address:
            await salesforce_service.update_record("Account", account_id, address.to_record())

        logger.info(
            "Created donor contact",
            extra={"contact_id": contact_id, "account_id": account_id},
        )
        return contact_id, account_id

    async def _create_summaries(
        self, opportunity_id: str, categories: List[DonationCategory]
    ) -> List[int]:
        """
        Create one DonationSummary__c per category in one batch call.

        Returns:
            Indexes of the categories whose summary could not be created
        """
        if not categories:
            return []

        url = salesforce_service.sobject_url("DonationSummary__c")
        batch_requests = [
            {
                "method": "POST",
                "url": url,
                "richInput": SalesforceDonationSummary(
                    Opportunity__c=opportunity_id,
                    Campaign_Name__c=category.projectName,
                    Amount__c=category.unitAmount,
                    Quantity__c=category.quantity,
                    Remark__c=category.remark,
                ).to_record(),
            }
            for category in categories
        ]

        response = await salesforce_service.composite_batch(batch_requests)

        results = (response or {}).get("results", [])
        return [
            index for index, result in enumerate(results) if result.get("statusCode", 0) >= 400
        ]

    async def process_donation(self, request: DonationRequest) -> Dict[str, Any]:
        """
        Record a donation and its category breakdown.

        Failed category lines are reported in ``failedCategories``; the
        donation itself still succeeds.

        Raises:
            SalesforceException: Any upstream failure outside the batch
        """
        transaction_id = make_transaction_id(request.tnxId)
        contact_id, account_id = await self._get_or_create_donor(request)

        record_type_id = await get_record_type_id(settings.donation_record_type)
        opportunity = SalesforceOpportunity(
            AccountId=account_id,
            Amount=request.donAmt,
            StageName=STAGE_PAYMENT_PENDING,
            CloseDate=date.today(),
            Name=request.displayName,
            Donor__c=contact_id,
            RecordTypeId=record_type_id,
        )
        created = await salesforce_service.create_record(
            "Opportunity", opportunity.to_record()
        )
        opportunity_id = created["id"]

        failed_categories = await self._create_summaries(
            opportunity_id, request.donationCategories
        )

        await salesforce_service.update_record(
            "Opportunity",
            opportunity_id,
            {"Transaction_ID__c": transaction_id, "EmailTriggered__c": False},
        )

        logger.info(
            "Processed donation",
            extra={
                "opportunity_id": opportunity_id,
                "category_count": len(request.donationCategories),
                "failed_category_count": len(failed_categories),
            },
        )

        return {
            "message": "Donation processed successfully.",
            "success": True,
            "data": {
                "opportunityId": opportunity_id,
                "transactionId": transaction_id,
                "failedCategories": failed_categories,
            },
        }


# Global donation handler instance
donation_handler = DonationHandler()
