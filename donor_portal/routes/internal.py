"""
Internal Endpoints

Operational hooks not used by the portal front end.
"""

from fastapi import APIRouter, Depends

from donor_portal.auth.dependencies import require_internal_key
from donor_portal.auth.salesforce_oauth import salesforce_oauth
from donor_portal.utils.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/internal",
    tags=["internal"],
    dependencies=[Depends(require_internal_key)],
)


@router.post("/refresh-token")
async def refresh_token():
    """Force a Salesforce token refresh."""
    await salesforce_oauth.get_access_token(force_refresh=True)
    logger.info("Salesforce access token refreshed on request")
    return {
        "message": "Salesforce access token refreshed",
        "success": True,
        "instance_url": await salesforce_oauth.get_instance_url(),
    }
