"""Request handlers composing Salesforce calls for each portal feature"""

from donor_portal.handlers.auth_handler import auth_handler
from donor_portal.handlers.donation_handler import donation_handler
from donor_portal.handlers.member_handler import member_handler
from donor_portal.handlers.newsletter_handler import newsletter_handler
from donor_portal.handlers.profile_handler import profile_handler

__all__ = [
    "auth_handler",
    "donation_handler",
    "member_handler",
    "newsletter_handler",
    "profile_handler",
]
