"""
Newsletter Handler
"""

from typing import Any, Dict, Optional

from donor_portal.models.requests import NewsletterRequest
from donor_portal.models.salesforce_records import SalesforceNewsletter
from donor_portal.services.salesforce_service import salesforce_service
from donor_portal.utils.exceptions import DuplicateRecordException
from donor_portal.utils.logging_config import get_logger
from donor_portal.utils.soql import build_soql

logger = get_logger(__name__)


def get_client_ip(forwarded_for: Optional[str], peer_host: Optional[str]) -> Optional[str]:
    """First X-Forwarded-For entry, falling back to the socket peer."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer_host or None


class NewsletterHandler:
    """Handler for newsletter subscriptions"""

    async def subscribe(self, request: NewsletterRequest, ip_address: str) -> Dict[str, Any]:
        """
        Create a Newsletter__c subscription.

        Raises:
            DuplicateRecordException: Email already subscribed
        """
        existing = await salesforce_service.query_first(
            build_soql(
                "SELECT Id FROM Newsletter__c WHERE Subscriber_Email__c = {email}",
                email=request.SubscriberEmail,
            )
        )
        if existing:
            raise DuplicateRecordException("Already Subscribed!")

        subscription = SalesforceNewsletter(
            Subscriber_Email__c=request.SubscriberEmail,
            Subscriber_IP_Address__c=ip_address,
        )
        data = await salesforce_service.create_record(
            "Newsletter__c", subscription.to_record()
        )

        logger.info("Added newsletter subscriber", extra={"record_id": data.get("id")})

        return {"message": "Subscribed Successfully.", "success": True, "data": data}


# Global newsletter handler instance
newsletter_handler = NewsletterHandler()
