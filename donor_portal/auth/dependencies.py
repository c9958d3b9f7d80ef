"""
Route Dependencies

FastAPI dependencies run before the body of authenticated routes.
"""

from typing import Optional

from fastapi import Header

from donor_portal.auth.salesforce_oauth import salesforce_oauth
from donor_portal.config import settings
from donor_portal.utils.exceptions import ForbiddenException
from donor_portal.utils.logging_config import get_logger

logger = get_logger(__name__)


async def ensure_salesforce_access_token() -> str:
    """
    Block until a Salesforce bearer token is available.

    Raises SalesforceAuthException, which the application maps to a 500
    "Salesforce authentication error" response.
    """
    token = await salesforce_oauth.get_access_token(
        force_refresh=settings.salesforce_always_refresh_token
    )
    logger.debug("Salesforce access token ready")
    return token


async def require_internal_key(
    x_internal_key: Optional[str] = Header(default=None),
) -> None:
    """Guard /internal routes when an internal API key is configured."""
    if settings.internal_api_key and x_internal_key != settings.internal_api_key:
        raise ForbiddenException("Invalid internal API key")
