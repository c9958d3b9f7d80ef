"""
Pytest Configuration and Fixtures

Provides common fixtures and test utilities for the portal API tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SALESFORCE_CLIENT_ID", "test_client_id")
os.environ.setdefault("SALESFORCE_CLIENT_SECRET", "test_client_secret")
os.environ.setdefault("SALESFORCE_USERNAME", "integration@example.com")
os.environ.setdefault("SALESFORCE_PASSWORD", "test_password")
os.environ.setdefault("SALESFORCE_INSTANCE_URL", "https://test.salesforce.com")
os.environ.setdefault("STRIPE_API_KEY", "sk_test_123")
os.environ.setdefault("PUBLIC_DOMAIN", "portal.example.org")
os.environ.setdefault("PUBLIC_SCHEME", "https")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from donor_portal.main import app

# Modules that hold a reference to the global Salesforce service
SALESFORCE_SERVICE_TARGETS = (
    "donor_portal.handlers.auth_handler.salesforce_service",
    "donor_portal.handlers.profile_handler.salesforce_service",
    "donor_portal.handlers.member_handler.salesforce_service",
    "donor_portal.handlers.donation_handler.salesforce_service",
    "donor_portal.handlers.newsletter_handler.salesforce_service",
    "donor_portal.routes.records.salesforce_service",
)


@pytest.fixture
def test_client():
    """FastAPI test client"""
    return TestClient(app)


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client for testing"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_salesforce_oauth():
    """Mock Salesforce OAuth client used by the route dependency"""
    mock = AsyncMock()
    mock.get_access_token.return_value = "test_access_token"
    mock.get_instance_url.return_value = "https://test.salesforce.com"
    with patch("donor_portal.auth.dependencies.salesforce_oauth", mock):
        yield mock


@pytest.fixture
def mock_salesforce_service(mock_salesforce_oauth):
    """
    Mock Salesforce service patched into every handler.

    Queries return no records unless a test sets query_first.side_effect.
    """
    mock = AsyncMock()
    mock.query_first.return_value = None
    mock.query_records.return_value = []
    mock.create_record.return_value = {"id": "003000000000001AAA", "success": True, "errors": []}
    mock.update_record.return_value = None
    mock.composite_batch.return_value = {"hasErrors": False, "results": []}
    mock.sobject_url = MagicMock(
        side_effect=lambda sobject: f"/services/data/v57.0/sobjects/{sobject}"
    )

    patchers = [patch(target, mock) for target in SALESFORCE_SERVICE_TARGETS]
    for patcher in patchers:
        patcher.start()
    yield mock
    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def contact_id() -> str:
    return "003000000000001AAA"


@pytest.fixture
def account_id() -> str:
    return "001000000000001AAA"


@pytest.fixture
def sample_donation() -> Dict[str, Any]:
    """Donation form body as posted by the portal"""
    return {
        "donAmt": 150,
        "donorName": "Jane Q Doe",
        "displayName": "Jane Doe Donation",
        "donorEmail": "jane.doe@example.com",
        "donorMobile": "+15555550100",
        "donorBillSt": "1 Main St",
        "donorCity": "Springfield",
        "donorState": "IL",
        "donorZip": "62701",
        "donorCountry": "USA",
        "tnxId": "pi_test123",
        "donationCategories": [
            {"projectName": "Education", "unitAmount": 100, "quantity": 1, "remark": ""},
            {"projectName": "Food", "unitAmount": 25, "quantity": 2, "remark": "Monthly"},
        ],
    }
