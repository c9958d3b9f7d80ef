"""
Health Check Endpoints

Liveness and dependency checks for the portal API.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from donor_portal.auth.salesforce_oauth import salesforce_oauth
from donor_portal.config import settings
from donor_portal.utils.exceptions import SalesforceException
from donor_portal.utils.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if application is running.
    """
    return JSONResponse(
        status_code=200,
        content={
            "message": "Server Health is Fine",
            "status": "healthy",
            "timestamp": _now(),
            "version": settings.app_version,
        },
    )


@router.get("/health/ready")
async def readiness_check():
    """
    Readiness check endpoint.
    Verifies that Salesforce OAuth succeeds and a Stripe key is configured.
    """
    dependencies: Dict[str, Any] = {}

    try:
        await salesforce_oauth.get_access_token()
        dependencies["salesforce_oauth"] = {
            "status": "healthy",
            "authenticated": True,
            "instance_url": await salesforce_oauth.get_instance_url(),
        }
    except SalesforceException as e:
        logger.warning(f"Readiness check failed for Salesforce: {e.message}")
        dependencies["salesforce_oauth"] = {
            "status": "unhealthy",
            "authenticated": False,
            "error": e.message,
        }

    dependencies["stripe"] = {
        "status": "healthy" if settings.stripe_api_key else "unhealthy",
        "configured": bool(settings.stripe_api_key),
    }

    overall_healthy = all(d["status"] == "healthy" for d in dependencies.values())

    return JSONResponse(
        status_code=200 if overall_healthy else 503,
        content={
            "status": "ready" if overall_healthy else "not_ready",
            "timestamp": _now(),
            "dependencies": dependencies,
        },
    )
