"""
Portal Account Handler

Registration, login, email activation and password reset for portal users.
Portal accounts are Contacts; credentials and link state live in custom
Contact fields.
"""

from typing import Any, Dict, Optional

from donor_portal.config import settings
from donor_portal.models.requests import (
    CheckEmailRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from donor_portal.models.salesforce_records import SalesforceContact
from donor_portal.services.salesforce_service import salesforce_service
from donor_portal.utils.exceptions import (
    DuplicateRecordException,
    ForbiddenException,
    InvalidCredentialsException,
    NotFoundException,
    SalesforceException,
    ValidationException,
)
from donor_portal.utils.logging_config import get_logger
from donor_portal.utils.passwords import hash_password, needs_rehash, verify_password
from donor_portal.utils.soql import build_soql
from donor_portal.utils.tokens import (
    build_activation_link,
    build_reset_password_link,
    decode_email,
)

logger = get_logger(__name__)

STATUS_APPROVED = "Approve"
STATUS_REJECTED = "Reject"


def _check_password_pair(password: str, confirmation: str) -> None:
    if password != confirmation:
        raise ValidationException("Passwords do not match")


async def get_record_type_id(name: str) -> str:
    """Id of the RecordType with the given name."""
    record = await salesforce_service.query_first(
        build_soql("SELECT Id FROM RecordType WHERE Name = {name}", name=name)
    )
    if not record:
        raise NotFoundException(f"Record type not found: {name}")
    return record["Id"]


async def find_household_contact(email: str, fields: str = "Id") -> Optional[Dict[str, Any]]:
    """Contact with this email whose Account is a household account."""
    record_type_id = await get_record_type_id(settings.household_record_type)
    return await salesforce_service.query_first(
        build_soql(
            f"SELECT {fields} FROM Contact "
            "WHERE Account.RecordTypeId = {record_type_id} AND Email = {email}",
            record_type_id=record_type_id,
            email=email,
        )
    )


class AuthHandler:
    """Handler for portal account operations"""

    async def register(self, request: RegisterRequest) -> Dict[str, Any]:
        """
        Create a portal Contact with a hashed password and activation link.

        Raises:
            ValidationException: Password confirmation mismatch
            DuplicateRecordException: Email already registered
        """
        _check_password_pair(request.userpwd, request.userconfirmPassword)

        if await find_household_contact(request.emailid):
            raise DuplicateRecordException("Email already exists")

        activation_link = build_activation_link(request.emailid)

        contact = SalesforceContact(
            FirstName=request.firstname,
            LastName=request.lastname,
            Email=request.emailid,
            Phone=request.usernumber,
            Password__c=hash_password(request.userpwd),
            Activate_Link__c=activation_link,
        )
        data = await salesforce_service.create_record("Contact", contact.to_record())

        logger.info("Registered portal contact", extra={"contact_id": data.get("id")})

        return {
            "message": "Registration successful",
            "success": True,
            "data": data,
            "activationLink": activation_link,
        }

    async def login(self, request: LoginRequest) -> Dict[str, Any]:
        """
        Check credentials of an approved, verified portal Contact.

        Raises:
            NotFoundException: No Contact with this email
            ForbiddenException: Account not approved or email not verified
            InvalidCredentialsException: Password does not match
        """
        record = await salesforce_service.query_first(
            build_soql(
                "SELECT Id, Password__c, Is_Email_Verify__c, CHF_Account_Status__c, "
                "FirstName, LastName FROM Contact WHERE Email = {email}",
                email=request.email,
            )
        )
        if not record:
            raise NotFoundException("User not found")

        if record.get("CHF_Account_Status__c") != STATUS_APPROVED or not record.get(
            "Is_Email_Verify__c"
        ):
            raise ForbiddenException("Account not verified or approved")

        stored_password = record.get("Password__c")
        if not verify_password(request.password, stored_password):
            logger.info("Rejected login", extra={"contact_id": record["Id"]})
            raise InvalidCredentialsException()

        if needs_rehash(stored_password):
            await self._upgrade_password_hash(record["Id"], request.password)

        return {
            "message": "Login successful",
            "success": True,
            "data": {
                "userId": record["Id"],
                "email": request.email,
                "firstName": record.get("FirstName"),
                "lastName": record.get("LastName"),
            },
        }

    async def _upgrade_password_hash(self, contact_id: str, password: str) -> None:
        try:
            await salesforce_service.update_record(
                "Contact", contact_id, {"Password__c": hash_password(password)}
            )
            logger.info("Upgraded stored password hash", extra={"contact_id": contact_id})
        except SalesforceException as e:
            # The login itself succeeded; the upgrade is retried on the next login
            logger.warning(
                f"Failed to upgrade password hash: {e.message}",
                extra={"contact_id": contact_id},
            )

    async def activate(self, uidb64: str, token: str) -> Dict[str, Any]:
        """
        Mark the Contact's email as verified.

        Raises:
            ValidationException: Undecodable link, unknown or already
                verified Contact, or token not matching the issued link
        """
        try:
            email = decode_email(uidb64)
        except ValueError:
            raise ValidationException("Invalid Link.")

        record = await salesforce_service.query_first(
            build_soql(
                "SELECT Id, Is_Email_Verify__c, Activate_Link__c FROM Contact WHERE Email = {email}",
                email=email,
            )
        )
        if not record or record.get("Is_Email_Verify__c"):
            raise ValidationException("Invalid Link.")

        issued_link = record.get("Activate_Link__c")
        if issued_link and not issued_link.endswith(f"/{token}"):
            raise ValidationException("Invalid Link.")

        await salesforce_service.update_record(
            "Contact", record["Id"], {"Is_Email_Verify__c": True}
        )

        return {"message": "Email activation successful", "success": True}

    async def check_email(self, request: CheckEmailRequest) -> Dict[str, Any]:
        """
        Issue a password reset link for a registered, verified Contact.

        Raises:
            NotFoundException: Email not registered
            ForbiddenException: User locked or email not verified
        """
        email = request.forgot_email
        record = await find_household_contact(
            email, fields="Id, CHF_Account_Status__c, Is_Email_Verify__c"
        )
        if not record:
            raise NotFoundException("Email not registered")

        if record.get("CHF_Account_Status__c") == STATUS_REJECTED:
            raise ForbiddenException("User is locked")

        if not record.get("Is_Email_Verify__c"):
            raise ForbiddenException("Email not verified")

        reset_link = build_reset_password_link(email)
        await salesforce_service.update_record(
            "Contact", record["Id"], {"Reset_Pwd_Link__c": reset_link}
        )

        return {
            "message": "Password reset link is sent to the registered email",
            "success": True,
            "link": reset_link,
        }

    async def reset_password(self, request: ResetPasswordRequest) -> Dict[str, Any]:
        """Set a new password for the Contact with this email."""
        _check_password_pair(request.newPassword, request.confirmPassword)
        await self._set_password(request.email, request.newPassword, "Invalid credentials")
        return {"message": "Password reset successful", "success": True}

    async def forgot_password(self, request: ForgotPasswordRequest) -> Dict[str, Any]:
        """
        Set a new password for the Contact named by a reset link.

        The link's token must match the last issued Reset_Pwd_Link__c, and
        the stored link is cleared so it works once.
        """
        _check_password_pair(request.newPassword, request.confirmPassword)
        try:
            email = decode_email(request.uidb64)
        except ValueError:
            raise NotFoundException("Invalid reset link")

        record = await salesforce_service.query_first(
            build_soql(
                "SELECT Id, Reset_Pwd_Link__c FROM Contact WHERE Email = {email}",
                email=email,
            )
        )
        issued_link = (record or {}).get("Reset_Pwd_Link__c")
        if not issued_link or not issued_link.endswith(f"/{request.token}"):
            raise NotFoundException("Invalid reset link")

        await salesforce_service.update_record(
            "Contact",
            record["Id"],
            {"Password__c": hash_password(request.newPassword), "Reset_Pwd_Link__c": ""},
        )
        return {"message": "Password reset successful", "success": True}

    async def _set_password(self, email: str, password: str, not_found_message: str) -> None:
        record = await salesforce_service.query_first(
            build_soql("SELECT Id FROM Contact WHERE Email = {email}", email=email)
        )
        if not record:
            raise NotFoundException(not_found_message)

        await salesforce_service.update_record(
            "Contact", record["Id"], {"Password__c": hash_password(password)}
        )


# Global auth handler instance
auth_handler = AuthHandler()
