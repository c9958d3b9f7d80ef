"""
Salesforce Record Models

Pydantic models for the sObject payloads the portal writes.
Contact, Opportunity and DonationSummary__c keep fields they do not declare,
so bodies written through the record endpoints reach Salesforce whole.
Dump with ``to_record()`` so unset fields are left out of the request.
"""

from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SalesforceRecord(BaseModel):
    """Base for sObject payloads"""

    model_config = ConfigDict(populate_by_name=True)

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class SalesforceContact(SalesforceRecord):
    """Salesforce Contact record with portal account fields"""

    FirstName: Optional[str] = None
    LastName: Optional[str] = None
    Email: Optional[str] = None
    Phone: Optional[str] = None
    MobilePhone: Optional[str] = None
    AccountId: Optional[str] = None
    Birthdate: Optional[date] = None
    Password__c: Optional[str] = Field(None, description="Salted password hash")
    Activate_Link__c: Optional[str] = None
    Reset_Pwd_Link__c: Optional[str] = None
    Base_URL__c: Optional[str] = None
    Is_Email_Verify__c: Optional[bool] = None
    Is_Member_Email__c: Optional[bool] = None
    CHF_Account_Status__c: Optional[str] = Field(
        None, description="Portal approval status (Approve / Reject)"
    )
    Member_Relationship__c: Optional[str] = None
    Member_Account__c: Optional[bool] = None
    Household__c: Optional[str] = None

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "FirstName": "Jane",
                "LastName": "Doe",
                "Email": "jane.doe@example.com",
                "Phone": "+15555550100",
            }
        }
    )


class SalesforceAccountAddress(SalesforceRecord):
    """Billing and shipping address fields of an Account"""

    BillingStreet: Optional[str] = None
    BillingCity: Optional[str] = None
    BillingState: Optional[str] = None
    BillingPostalCode: Optional[str] = None
    BillingCountry: Optional[str] = None
    ShippingStreet: Optional[str] = None
    ShippingCity: Optional[str] = None
    ShippingState: Optional[str] = None
    ShippingPostalCode: Optional[str] = None
    ShippingCountry: Optional[str] = None


class SalesforceOpportunity(SalesforceRecord):
    """Donation Opportunity"""

    model_config = ConfigDict(extra="allow")

    AccountId: Optional[str] = None
    Amount: Optional[float] = None
    StageName: Optional[str] = None
    CloseDate: Optional[date] = None
    Name: Optional[str] = None
    Donor__c: Optional[str] = Field(None, description="Lookup to Contact")
    RecordTypeId: Optional[str] = None
    Transaction_ID__c: Optional[str] = None
    EmailTriggered__c: Optional[bool] = None


class SalesforceDonationSummary(SalesforceRecord):
    """DonationSummary__c line for one donation category"""

    model_config = ConfigDict(extra="allow")

    Opportunity__c: str = Field(description="Lookup to Opportunity")
    Campaign_Name__c: Optional[str] = None
    Amount__c: Optional[float] = None
    Quantity__c: Optional[float] = None
    Remark__c: Optional[str] = None


class SalesforceNewsletter(SalesforceRecord):
    """Newsletter__c subscription"""

    Subscriber_Email__c: str
    Subscriber_IP_Address__c: Optional[str] = None
