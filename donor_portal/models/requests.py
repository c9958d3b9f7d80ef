"""
Portal Request Models

Request bodies posted by the portal front end. Field names follow the
front end's form names.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PortalRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")


class RegisterRequest(PortalRequest):
    firstname: Optional[str] = None
    lastname: str
    emailid: str
    usernumber: Optional[str] = None
    userpwd: str
    userconfirmPassword: str


class LoginRequest(PortalRequest):
    email: str
    password: str


class CheckEmailRequest(PortalRequest):
    forgot_email: str


class ResetPasswordRequest(PortalRequest):
    email: str
    newPassword: str
    confirmPassword: str


class ForgotPasswordRequest(PortalRequest):
    uidb64: str
    token: str
    newPassword: str
    confirmPassword: str


class ProfileUpdateRequest(PortalRequest):
    Id: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    mobile: Optional[str] = None


class AddressUpdateRequest(PortalRequest):
    contactId: str
    billingStreet: Optional[str] = None
    billingCity: Optional[str] = None
    billingState: Optional[str] = None
    billingPostalCode: Optional[str] = None
    billingCountry: Optional[str] = None
    shippingStreet: Optional[str] = None
    shippingCity: Optional[str] = None
    shippingState: Optional[str] = None
    shippingPostalCode: Optional[str] = None
    shippingCountry: Optional[str] = None


class MemberRequest(PortalRequest):
    """Household member add or update"""

    useremail: str = Field(description="Email of the household owner")
    contactId: Optional[str] = Field(None, description="Member Contact Id when updating")
    relName: Optional[str] = None
    memFname: Optional[str] = None
    memLname: str
    memEmailAddr: Optional[str] = None
    memMobile: Optional[str] = None
    memDOB: Optional[str] = Field(None, description="Birth date as dd/mm/yyyy")
    memCreateAcc: Optional[str] = Field(None, description='"Yes" to give the member a login')


class DeleteMemberRequest(PortalRequest):
    memberId: str
    contactId: str = Field(description="Contact Id of the household owner")


class DonationCategory(PortalRequest):
    projectName: Optional[str] = None
    unitAmount: Optional[float] = None
    quantity: Optional[float] = None
    remark: Optional[str] = None


class DonationRequest(PortalRequest):
    donAmt: float
    donorName: str
    displayName: Optional[str] = None
    donorEmail: str
    donorMobile: Optional[str] = None
    donorBillSt: Optional[str] = None
    donorCity: Optional[str] = None
    donorState: Optional[str] = None
    donorZip: Optional[str] = None
    donorCountry: Optional[str] = None
    tnxId: Optional[str] = Field(None, description="Payment id, or 'cheque' / 'zelle'")
    donationCategories: List[DonationCategory] = Field(default_factory=list)


class NewsletterRequest(PortalRequest):
    SubscriberEmail: str


class PaymentItem(PortalRequest):
    amount: int = Field(ge=0, description="Amount in the smallest currency unit")


class PaymentIntentRequest(PortalRequest):
    items: List[PaymentItem] = Field(min_length=1)
