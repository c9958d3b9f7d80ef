"""
Salesforce OAuth 2.0 Authentication

Implements the OAuth 2.0 username-password flow for the portal's
integration user. The access token is held in-process by a single
SalesforceOAuth instance; refreshes are serialized with an asyncio lock and
a fetched token is reused until it nears expiry.
"""

import asyncio
import time
from typing import Dict, Optional

import httpx

from donor_portal.config import TOKEN_EXPIRY_MARGIN_SECONDS, settings
from donor_portal.utils.exceptions import SalesforceAuthException
from donor_portal.utils.logging_config import get_logger

logger = get_logger(__name__)


class SalesforceOAuth:
    """Salesforce OAuth 2.0 client with token management"""

    def __init__(self):
        self.client_id = settings.salesforce_client_id
        self.client_secret = settings.salesforce_client_secret
        self.username = settings.salesforce_username
        self.password = settings.salesforce_password
        self.token_url = settings.salesforce_token_url
        self.token_ttl = settings.salesforce_token_ttl

        self._access_token: Optional[str] = None
        self._instance_url: Optional[str] = None
        self._expires_at: float = 0.0
        self._lock = asyncio.Lock()

        # HTTP client for OAuth requests
        self.http_client = httpx.AsyncClient(timeout=settings.http_timeout)

    @property
    def has_valid_token(self) -> bool:
        return (
            self._access_token is not None
            and time.monotonic() + TOKEN_EXPIRY_MARGIN_SECONDS < self._expires_at
        )

    async def get_access_token(self, force_refresh: bool = False) -> str:
        """
        Get a valid access token, reusing the cached one when possible.

        Args:
            force_refresh: Fetch a new token even if the cached one is valid

        Returns:
            Valid access token

        Raises:
            SalesforceAuthException: If authentication fails
        """
        if not force_refresh and self.has_valid_token:
            logger.debug("Using cached Salesforce access token")
            return self._access_token

        stale_token = self._access_token

        async with self._lock:
            # Another request refreshed while this one waited for the lock
            if self._access_token is not None and self._access_token != stale_token:
                if self.has_valid_token:
                    return self._access_token

            if not force_refresh and self.has_valid_token:
                return self._access_token

            logger.info("Acquiring new Salesforce access token")
            token_data = await self._authenticate()
            self._store_token(token_data)

            return self._access_token

    async def get_instance_url(self) -> str:
        """
        Get the Salesforce instance URL returned with the current token.

        Raises:
            SalesforceAuthException: If instance URL not available
        """
        if self._instance_url:
            return self._instance_url

        await self.get_access_token()

        if not self._instance_url:
            raise SalesforceAuthException("Failed to retrieve instance URL")

        return self._instance_url

    def invalidate(self) -> None:
        """Drop the cached token so the next call authenticates again."""
        self._access_token = None
        self._expires_at = 0.0

    async def _authenticate(self) -> Dict[str, str]:
        """
        Authenticate with Salesforce using the OAuth 2.0 password flow.

        Returns:
            OAuth response with access_token and instance_url

        Raises:
            SalesforceAuthException: If authentication fails
        """
        data = {
            "grant_type": "password",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "username": self.username,
            "password": self.password,
        }

        logger.info(
            "Authenticating with Salesforce",
            extra={
                "token_url": self.token_url,
                "client_id": self.client_id[:10] + "..." if self.client_id else None,
                "grant_type": data["grant_type"],
            },
        )

        try:
            response = await self.http_client.post(
                self.token_url,
                data=data,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
            token_data = response.json()

        except httpx.HTTPStatusError as e:
            try:
                error_data = e.response.json()
            except ValueError:
                error_data = {"message": e.response.text}

            logger.error(
                f"Salesforce authentication failed with HTTP {e.response.status_code}",
                extra={
                    "status_code": e.response.status_code,
                    "error": error_data,
                },
            )

            raise SalesforceAuthException(
                "Failed to refresh Salesforce access token",
                details={
                    "status_code": e.response.status_code,
                    "error": error_data,
                },
            ) from e

        except httpx.RequestError as e:
            logger.error(f"Network error during authentication: {e}")
            raise SalesforceAuthException(
                "Failed to refresh Salesforce access token",
                details={"error": str(e)},
            ) from e

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            raise SalesforceAuthException(
                "Invalid OAuth response: missing access_token",
                details={"response": token_data},
            )

        logger.info(
            "Successfully authenticated with Salesforce",
            extra={"instance_url": token_data.get("instance_url")},
        )

        return token_data

    def _store_token(self, token_data: Dict[str, str]) -> None:
        self._access_token = token_data["access_token"]
        self._instance_url = (
            token_data.get("instance_url") or settings.salesforce_instance_url
        ).rstrip("/")
        self._expires_at = time.monotonic() + self.token_ttl

    async def close(self) -> None:
        """Close HTTP client"""
        await self.http_client.aclose()


# Global OAuth client instance
salesforce_oauth = SalesforceOAuth()
