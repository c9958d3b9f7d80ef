"""
Profile Handler

Reads and updates a portal user's Contact and the address on its Account.
"""

from typing import Any, Dict, Optional

from donor_portal.models.requests import AddressUpdateRequest, ProfileUpdateRequest
from donor_portal.models.salesforce_records import SalesforceAccountAddress, SalesforceContact
from donor_portal.services.salesforce_service import salesforce_service
from donor_portal.utils.exceptions import NotFoundException
from donor_portal.utils.logging_config import get_logger
from donor_portal.utils.soql import build_soql

logger = get_logger(__name__)

ADDRESS_PARTS = ("Street", "City", "State", "PostalCode", "Country")


def is_same_address(account: Dict[str, Any]) -> bool:
    """True when every billing address field equals its shipping counterpart."""
    return all(
        account.get(f"Billing{part}") == account.get(f"Shipping{part}")
        for part in ADDRESS_PARTS
    )


async def get_contact_account_id(contact_id: str) -> Optional[str]:
    """AccountId of a Contact, or None when the Contact does not exist."""
    record = await salesforce_service.query_first(
        build_soql("SELECT Id, AccountId FROM Contact WHERE Id = {id}", id=contact_id)
    )
    return record.get("AccountId") if record else None


class ProfileHandler:
    """Handler for profile operations"""

    async def get_profile(self, email: str) -> Dict[str, Any]:
        """
        Contact details and Account address for the portal profile page.

        Raises:
            NotFoundException: No Contact with this email
        """
        contact = await salesforce_service.query_first(
            build_soql(
                "SELECT Id, Email, FirstName, LastName, Phone, MobilePhone, AccountId "
                "FROM Contact WHERE Email = {email}",
                email=email,
            )
        )
        if not contact:
            raise NotFoundException("User not found")

        account: Dict[str, Any] = {}
        if contact.get("AccountId"):
            account = (
                await salesforce_service.query_first(
                    build_soql(
                        "SELECT Id, BillingStreet, BillingCity, BillingState, BillingCountry, "
                        "BillingPostalCode, ShippingStreet, ShippingCity, ShippingCountry, "
                        "ShippingState, ShippingPostalCode FROM Account WHERE Id = {id}",
                        id=contact["AccountId"],
                    )
                )
                or {}
            )

        return {
            "id": contact.get("Id"),
            "firstName": contact.get("FirstName"),
            "lastName": contact.get("LastName"),
            "email": contact.get("Email"),
            "mobile": contact.get("MobilePhone") or contact.get("Phone"),
            "billingStreet": account.get("BillingStreet"),
            "billingCity": account.get("BillingCity"),
            "billingState": account.get("BillingState"),
            "billingCountry": account.get("BillingCountry"),
            "billingPostalCode": account.get("BillingPostalCode"),
            "shippingStreet": account.get("ShippingStreet"),
            "shippingCity": account.get("ShippingCity"),
            "shippingCountry": account.get("ShippingCountry"),
            "shippingState": account.get("ShippingState"),
            "shippingPostalCode": account.get("ShippingPostalCode"),
            "sameAddress": is_same_address(account),
        }

    async def update_profile(self, request: ProfileUpdateRequest) -> Dict[str, Any]:
        contact = SalesforceContact(
            FirstName=request.firstName,
            LastName=request.lastName,
            MobilePhone=request.mobile,
        )
        await salesforce_service.update_record("Contact", request.Id, contact.to_record())

        return {
            "message": "Profile updated successfully",
            "success": True,
            "userData": {
                "firstName": request.firstName,
                "lastName": request.lastName,
                "mobile": request.mobile,
            },
        }

    async def update_address(self, request: AddressUpdateRequest) -> Dict[str, Any]:
        """
        Patch billing and shipping address on the Contact's Account.

        Raises:
            NotFoundException: Contact missing or not linked to an Account
        """
        account_id = await get_contact_account_id(request.contactId)
        if not account_id:
            raise NotFoundException("Account not found.")

        address = SalesforceAccountAddress(
            BillingStreet=request.billingStreet,
            BillingCity=request.billingCity,
            BillingState=request.billingState,
            BillingPostalCode=request.billingPostalCode,
            BillingCountry=request.billingCountry,
            ShippingStreet=request.shippingStreet,
            ShippingCity=request.shippingCity,
            ShippingState=request.shippingState,
            ShippingPostalCode=request.shippingPostalCode,
            ShippingCountry=request.shippingCountry,
        )
        data = await salesforce_service.update_record("Account", account_id, address.to_record())

        return {"message": "Address updated successfully", "success": True, "data": data}


# Global profile handler instance
profile_handler = ProfileHandler()
