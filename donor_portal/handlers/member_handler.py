"""
Household Member Handler

Household owners manage member Contacts on their own Account.

A member is updated when the request carries a contactId that the server
confirms belongs to the owner's Account; without a contactId a new member
is created, provided its email is not already used by any Contact.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from donor_portal.config import settings
from donor_portal.handlers.auth_handler import STATUS_APPROVED, STATUS_REJECTED
from donor_portal.handlers.profile_handler import get_contact_account_id
from donor_portal.models.requests import DeleteMemberRequest, MemberRequest
from donor_portal.models.salesforce_records import SalesforceContact
from donor_portal.services.salesforce_service import salesforce_service
from donor_portal.utils.exceptions import (
    DuplicateRecordException,
    NotFoundException,
    ValidationException,
)
from donor_portal.utils.logging_config import get_logger
from donor_portal.utils.passwords import hash_password
from donor_portal.utils.soql import build_soql
from donor_portal.utils.tokens import build_activation_link, build_reset_password_link

logger = get_logger(__name__)


def parse_birthdate(value: Optional[str]) -> Optional[date]:
    """Parse the front end's dd/mm/yyyy birth date."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        raise ValidationException("Invalid date of birth, expected dd/mm/yyyy")


def default_member_password(today: Optional[date] = None) -> str:
    today = today or date.today()
    return settings.member_default_password_template.format(year=today.year)


class MemberHandler:
    """Handler for household member operations"""

    async def _get_household(self, owner_email: str) -> Tuple[str, str]:
        """
        AccountId and Account Name of the household owner.

        Raises:
            NotFoundException: Owner or Account missing
        """
        owner = await salesforce_service.query_first(
            build_soql("SELECT AccountId FROM Contact WHERE Email = {email}", email=owner_email)
        )
        if not owner or not owner.get("AccountId"):
            raise NotFoundException("User email not found.")

        account = await salesforce_service.query_first(
            build_soql("SELECT Name FROM Account WHERE Id = {id}", id=owner["AccountId"])
        )
        if not account:
            raise NotFoundException("Account not found.")

        return owner["AccountId"], account["Name"]

    async def _is_household_member(self, contact_id: str, account_id: str) -> bool:
        record = await salesforce_service.query_first(
            build_soql(
                "SELECT Id FROM Contact WHERE Id = {id} AND AccountId = {account_id}",
                id=contact_id,
                account_id=account_id,
            )
        )
        return record is not None

    async def save_member(self, request: MemberRequest) -> Tuple[int, Dict[str, Any]]:
        """
        Add a member to the owner's household, or update an existing one.

        Returns:
            (HTTP status, response body): 200 on update, 201 on create
        """
        account_id, household_name = await self._get_household(request.useremail)
        birthdate = parse_birthdate(request.memDOB)
        create_account = request.memCreateAcc == "Yes"

        if request.contactId:
            if not await self._is_household_member(request.contactId, account_id):
                raise NotFoundException("No matching contact found to update.")

            member = SalesforceContact(
                FirstName=request.memFname,
                LastName=request.memLname,
                MobilePhone=request.memMobile,
                Birthdate=birthdate,
                Member_Relationship__c=request.relName,
                Member_Account__c=create_account,
                Household__c=household_name,
            )
            await salesforce_service.update_record(
                "Contact", request.contactId, member.to_record()
            )

            logger.info(
                "Updated household member",
                extra={"contact_id": request.contactId, "account_id": account_id},
            )
            return 200, {"message": "Member updated successfully.", "success": True}

        if request.memEmailAddr:
            existing = await salesforce_service.query_first(
                build_soql(
                    "SELECT Id FROM Contact WHERE Email = {email}", email=request.memEmailAddr
                )
            )
            if existing:
                raise DuplicateRecordException(
                    "This email already exists with another account."
                )

        activation_link = ""
        reset_link = ""
        if create_account and request.memEmailAddr:
            activation_link = build_activation_link(request.memEmailAddr)
            reset_link = build_reset_password_link(request.memEmailAddr)

        member = SalesforceContact(
            FirstName=request.memFname,
            LastName=request.memLname,
            Email=request.memEmailAddr,
            MobilePhone=request.memMobile,
            AccountId=account_id,
            Password__c=hash_password(default_member_password()),
            Birthdate=birthdate,
            Member_Relationship__c=request.relName,
            Member_Account__c=create_account,
            Activate_Link__c=activation_link,
            Base_URL__c=settings.public_base_url,
            Is_Email_Verify__c=True,
            Is_Member_Email__c=True,
            CHF_Account_Status__c=STATUS_APPROVED,
            Reset_Pwd_Link__c=reset_link,
            Household__c=household_name,
        )
        data = await salesforce_service.create_record("Contact", member.to_record())

        logger.info(
            "Added household member",
            extra={"contact_id": data.get("id"), "account_id": account_id},
        )
        return 201, {"message": "Member added successfully.", "success": True, "data": data}

    async def delete_member(self, request: DeleteMemberRequest) -> Dict[str, Any]:
        """
        Reject a member and clear its email, then list the remaining members.

        Raises:
            NotFoundException: Owner unknown or member not in the household
        """
        account_id = await get_contact_account_id(request.contactId)
        if not account_id:
            raise NotFoundException("Account not found.")

        if not await self._is_household_member(request.memberId, account_id):
            raise NotFoundException("Member not found.")

        await salesforce_service.update_record(
            "Contact",
            request.memberId,
            {"CHF_Account_Status__c": STATUS_REJECTED, "Email": ""},
        )

        members: List[Dict[str, Any]] = await salesforce_service.query_records(
            build_soql(
                "SELECT Id, FirstName, LastName FROM Contact "
                "WHERE AccountId = {account_id} AND CHF_Account_Status__c = {status}",
                account_id=account_id,
                status=STATUS_APPROVED,
            )
        )

        return {"message": "Member deleted successfully.", "members": members, "success": True}


# Global member handler instance
member_handler = MemberHandler()
