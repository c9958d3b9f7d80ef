"""
Shared route responses
"""

from typing import Union

from fastapi.responses import JSONResponse

from donor_portal.utils.exceptions import SalesforceException, StripeException
from donor_portal.utils.logging_config import get_logger

logger = get_logger(__name__)


def upstream_failure(
    message: str, exc: Union[SalesforceException, StripeException]
) -> JSONResponse:
    """500 response carrying the raw upstream error body."""
    logger.error(message, extra={"error": exc.to_dict()})
    return JSONResponse(
        status_code=500,
        content={"message": message, "error": exc.upstream_error, "success": False},
    )
