"""
Portal Account Endpoints

Registration, login, email activation and password reset.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from donor_portal.auth.dependencies import ensure_salesforce_access_token
from donor_portal.handlers.auth_handler import auth_handler
from donor_portal.models.requests import (
    CheckEmailRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from donor_portal.routes.responses import upstream_failure
from donor_portal.utils.exceptions import SalesforceException

router = APIRouter(
    tags=["auth"],
    dependencies=[Depends(ensure_salesforce_access_token)],
)


@router.post("/api/auth/register")
async def register(request: RegisterRequest):
    try:
        result = await auth_handler.register(request)
    except SalesforceException as e:
        return upstream_failure("Registration failed", e)
    return JSONResponse(status_code=201, content=result)


@router.post("/api/auth/login")
async def login(request: LoginRequest):
    try:
        return await auth_handler.login(request)
    except SalesforceException as e:
        return upstream_failure("Login failed", e)


@router.get("/activate/{uidb64}/{token}")
async def activate(uidb64: str, token: str):
    """Email activation link target."""
    try:
        result = await auth_handler.activate(uidb64, token)
    except SalesforceException as e:
        return upstream_failure("Activation failed", e)
    return JSONResponse(status_code=201, content=result)


@router.post("/api/auth/check-email")
async def check_email(request: CheckEmailRequest):
    """Issue a password reset link."""
    try:
        return await auth_handler.check_email(request)
    except SalesforceException as e:
        return upstream_failure("Check email failed", e)


@router.post("/api/auth/reset-password")
async def reset_password(request: ResetPasswordRequest):
    try:
        return await auth_handler.reset_password(request)
    except SalesforceException as e:
        return upstream_failure("Reset password failed", e)


@router.post("/api/auth/forgot-password")
async def forgot_password(request: ForgotPasswordRequest):
    """Complete a password reset from an emailed link."""
    try:
        return await auth_handler.forgot_password(request)
    except SalesforceException as e:
        return upstream_failure("Reset password failed", e)
