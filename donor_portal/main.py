"""
Donor Portal API

Backend for the donor and membership portal: proxies portal requests to
the Salesforce REST API and creates Stripe PaymentIntents for checkout.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from donor_portal.auth.salesforce_oauth import salesforce_oauth
from donor_portal.config import settings
from donor_portal.routes import (
    auth,
    donations,
    health,
    internal,
    members,
    payments,
    profile,
    records,
)
from donor_portal.services.salesforce_service import salesforce_service
from donor_portal.utils.exceptions import (
    PortalException,
    RequestException,
    SalesforceAuthException,
)
from donor_portal.utils.logging_config import (
    get_logger,
    set_correlation_id,
    setup_logging,
)

# Setup logging
setup_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.
    Closes the shared HTTP clients on shutdown.
    """
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version}",
        extra={"environment": settings.environment},
    )

    yield

    logger.info("Shutting down application...")
    await salesforce_service.close()
    await salesforce_oauth.close()
    logger.info("Application shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Salesforce and Stripe backend for the donor portal",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Add correlation ID to all requests for tracing"""
    correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))

    response = await call_next(request)

    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.exception_handler(RequestException)
async def request_exception_handler(request: Request, exc: RequestException):
    """Local precondition failures: the exception carries its own status"""
    logger.info(
        f"Request rejected: {exc.message}",
        extra={"status_code": exc.status_code, "path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "success": False},
    )


@app.exception_handler(SalesforceAuthException)
async def salesforce_auth_exception_handler(request: Request, exc: SalesforceAuthException):
    logger.error(
        f"Salesforce authentication error: {exc.message}",
        extra={"error": exc.to_dict()},
    )
    return JSONResponse(
        status_code=500,
        content={
            "message": "Salesforce authentication error",
            "error": exc.details,
            "success": False,
        },
    )


@app.exception_handler(PortalException)
async def portal_exception_handler(request: Request, exc: PortalException):
    """Handle remaining portal exceptions"""
    logger.error(
        f"Portal exception: {exc.message}",
        extra={"error": exc.to_dict()},
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
            "success": False,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.error(
        f"Unexpected exception: {exc}",
        extra={"error": str(exc), "type": type(exc).__name__},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
            "success": False,
        },
    )


app.include_router(health.router)
app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(members.router)
app.include_router(donations.router)
app.include_router(records.router)
app.include_router(payments.router)
app.include_router(internal.router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "docs_url": "/docs" if settings.is_development else None,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "donor_portal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
