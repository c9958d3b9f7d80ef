"""
Custom Exception Classes

Defines application-specific exceptions. Upstream failures (Salesforce,
Stripe) surface as HTTP 500 with the raw upstream error body; request
exceptions carry their own client-facing status code.
"""

from typing import Any, Dict, Optional


class PortalException(Exception):
    """Base exception for all portal errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "PORTAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/API responses"""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class SalesforceException(PortalException):
    """Salesforce API related errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="SALESFORCE_ERROR", details=details)

    @property
    def upstream_error(self) -> Any:
        """Raw upstream error body, or the exception itself when there is none"""
        return self.details.get("error", self.to_dict())


class SalesforceAuthException(SalesforceException):
    """Salesforce OAuth authentication errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            details={**(details or {}), "auth_failed": True},
        )


class SalesforceAPIException(SalesforceException):
    """Salesforce REST API call errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details=details)

    @property
    def upstream_status(self) -> Optional[int]:
        return self.details.get("status_code")


class StripeException(PortalException):
    """Stripe API related errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="STRIPE_ERROR", details=details)

    @property
    def upstream_error(self) -> Any:
        return self.details.get("error", self.to_dict())


class RequestException(PortalException):
    """Local precondition failures answered with a 4xx status"""

    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str = "BAD_REQUEST",
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(
            message, error_code=error_code, details=details, status_code=status_code
        )


class ValidationException(RequestException):
    """Request data validation errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="VALIDATION_ERROR", details=details)


class DuplicateRecordException(RequestException):
    """A record that must be unique already exists"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="DUPLICATE_RECORD", details=details)


class InvalidCredentialsException(RequestException):
    """Supplied password does not match the stored one"""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, error_code="INVALID_CREDENTIALS")


class ForbiddenException(RequestException):
    """Account state does not allow the operation"""

    status_code = 403

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="FORBIDDEN", details=details)


class NotFoundException(RequestException):
    """Lookup performed before a write found nothing"""

    status_code = 404

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="NOT_FOUND", details=details)
