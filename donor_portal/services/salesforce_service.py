"""
Salesforce REST API Service

Thin dispatcher for the Salesforce REST API: signs every call with the
current bearer token, replays once after a 401, and surfaces upstream error
bodies verbatim through SalesforceAPIException.
"""

from typing import Any, Dict, List, Optional

import httpx

from donor_portal.auth.salesforce_oauth import salesforce_oauth
from donor_portal.config import settings
from donor_portal.utils.exceptions import SalesforceAPIException, ValidationException
from donor_portal.utils.logging_config import get_logger
from donor_portal.utils.soql import is_salesforce_id

logger = get_logger(__name__)


class SalesforceService:
    """Service for interacting with the Salesforce REST API"""

    def __init__(self):
        self.api_version = settings.salesforce_api_version
        self.http_client = httpx.AsyncClient(timeout=settings.http_timeout)

    async def _get_api_url(self, endpoint: str = "") -> str:
        """
        Get full API URL with instance URL.

        Args:
            endpoint: API endpoint path relative to the versioned data API
        """
        instance_url = await salesforce_oauth.get_instance_url()
        base_url = f"{instance_url}/services/data/{self.api_version}"
        return f"{base_url}/{endpoint.lstrip('/')}" if endpoint else base_url

    async def _get_headers(self, force_refresh: bool = False) -> Dict[str, str]:
        """Get HTTP headers with OAuth token"""
        access_token = await salesforce_oauth.get_access_token(force_refresh=force_refresh)
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _send(
        self,
        method: str,
        url: str,
        json_data: Optional[Any],
        params: Optional[Dict[str, Any]],
        force_refresh: bool = False,
    ) -> httpx.Response:
        headers = await self._get_headers(force_refresh=force_refresh)
        return await self.http_client.request(
            method=method,
            url=url,
            headers=headers,
            json=json_data,
            params=params,
        )

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send one Salesforce REST call, replaying it once with a fresh token
        if the current one is rejected.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            endpoint: Path relative to the versioned data API
            json_data: Optional JSON body
            params: Optional query parameters

        Returns:
            Parsed JSON body, or None for 204 No Content

        Raises:
            SalesforceAPIException: Transport failure or any status >= 400;
                ``details["error"]`` holds the upstream body unchanged
            SalesforceAuthException: Token refresh failed
        """
        url = await self._get_api_url(endpoint)

        try:
            response = await self._send(method, url, json_data, params)
            if response.status_code == 401:
                logger.warning(
                    "Salesforce rejected the access token, refreshing and replaying",
                    extra={"endpoint": endpoint},
                )
                response = await self._send(method, url, json_data, params, force_refresh=True)
        except httpx.RequestError as e:
            logger.error(
                f"Salesforce unreachable: {e}",
                extra={"endpoint": endpoint, "method": method},
            )
            raise SalesforceAPIException(
                f"Network error: {e}",
                details={"error": str(e), "endpoint": endpoint},
            ) from e

        if response.status_code >= 400:
            try:
                upstream_body = response.json()
            except ValueError:
                upstream_body = {"message": response.text}

            logger.error(
                f"{method} {endpoint} failed with HTTP {response.status_code}",
                extra={"status_code": response.status_code, "error": upstream_body},
            )
            raise SalesforceAPIException(
                f"Salesforce returned HTTP {response.status_code}",
                status_code=response.status_code,
                details={"error": upstream_body, "endpoint": endpoint},
            )

        if response.status_code == 204:
            return None
        return response.json()

    def _record_endpoint(self, sobject_type: str, record_id: Optional[str] = None) -> str:
        if record_id is None:
            return f"sobjects/{sobject_type}"
        if not is_salesforce_id(record_id):
            raise ValidationException(
                f"Invalid {sobject_type} id",
                details={"record_id": record_id},
            )
        return f"sobjects/{sobject_type}/{record_id}"

    def sobject_url(self, sobject_type: str) -> str:
        """Server-relative sObject URL for composite sub-requests"""
        return f"/services/data/{self.api_version}/sobjects/{sobject_type}"

    async def query(self, soql: str) -> Dict[str, Any]:
        """
        Execute SOQL query.

        Args:
            soql: SOQL query string (build it with utils.soql.build_soql)

        Returns:
            Query results with totalSize and records
        """
        logger.debug(f"Executing SOQL query: {soql}")

        response = await self._request("GET", "query", params={"q": soql})

        logger.info(
            f"Query returned {response.get('totalSize', 0)} records",
            extra={"total_size": response.get("totalSize", 0)},
        )

        return response

    async def query_records(self, soql: str) -> List[Dict[str, Any]]:
        response = await self.query(soql)
        return response.get("records", [])

    async def query_first(self, soql: str) -> Optional[Dict[str, Any]]:
        """First matching record, or None when the query matched nothing"""
        records = await self.query_records(soql)
        return records[0] if records else None

    async def create_record(
        self,
        sobject_type: str,
        record_data: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Create a new record.

        Returns:
            Create response with record ID
        """
        endpoint = self._record_endpoint(sobject_type)

        logger.info(f"Creating {sobject_type} record")

        response = await self._request("POST", endpoint, json_data=record_data)

        logger.info(
            f"Successfully created {sobject_type}",
            extra={
                "sobject_type": sobject_type,
                "record_id": response.get("id") if response else None,
            },
        )

        return response

    async def update_record(
        self,
        sobject_type: str,
        record_id: str,
        record_data: Dict[str, Any],
    ) -> None:
        """
        Update an existing record.

        Raises:
            ValidationException: If record_id is not a Salesforce id
            SalesforceAPIException: If update fails
        """
        endpoint = self._record_endpoint(sobject_type, record_id)

        logger.info(f"Updating {sobject_type} record", extra={"record_id": record_id})

        await self._request("PATCH", endpoint, json_data=record_data)

        logger.info(
            f"Successfully updated {sobject_type}",
            extra={"record_id": record_id},
        )

    async def composite_batch(
        self,
        batch_requests: List[Dict[str, Any]],
        halt_on_error: bool = False,
    ) -> Dict[str, Any]:
        """
        Execute independent sub-requests in a single Composite Batch call.

        Each sub-request succeeds or fails on its own; failures are reported
        per item in ``results[i]["statusCode"]`` and are logged here, not
        raised.

        Args:
            batch_requests: Sub-requests of the form
                {"method": "POST", "url": "/services/data/vXX.X/sobjects/X", "richInput": {...}}
            halt_on_error: Stop processing after the first failed sub-request

        Returns:
            Batch response {"hasErrors": bool, "results": [...]}
        """
        logger.info(
            f"Executing composite batch with {len(batch_requests)} sub-requests",
            extra={"operation_count": len(batch_requests)},
        )

        response = await self._request(
            "POST",
            "composite/batch",
            json_data={"haltOnError": halt_on_error, "batchRequests": batch_requests},
        )

        results = (response or {}).get("results", [])
        failed = [
            {"index": index, "result": result.get("result")}
            for index, result in enumerate(results)
            if result.get("statusCode", 0) >= 400
        ]

        if failed:
            logger.error(
                f"Composite batch had {len(failed)} failed sub-requests",
                extra={"failed_requests": failed},
            )
        else:
            logger.info("Composite batch completed without errors")

        return response

    async def close(self) -> None:
        """Close HTTP client"""
        await self.http_client.aclose()


# Global Salesforce service instance
salesforce_service = SalesforceService()
