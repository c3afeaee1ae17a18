"""
ZeroDB Client Wrapper

HTTP client for the ZeroDB NoSQL tables API used as the challenge and user
document store. Every call is a single request/response round trip; failures
surface as ZeroDB exceptions and are never retried here.
"""

import os
from typing import Any, Optional

import httpx

from .exceptions import (
    ZeroDBAuthError,
    ZeroDBError,
    ZeroDBNotFound,
    ZeroDBRateLimitError,
    ZeroDBTimeoutError,
)

DEFAULT_BASE_URL = "https://api.ainative.studio"


class ZeroDBClient:
    """
    ZeroDB API client.

    Features:
    - Bearer API key authentication
    - Status codes mapped onto ZeroDB exceptions
    - Async context manager support
    - Configurable timeout (default 30s)

    Example:
        async with ZeroDBClient(api_key="...", project_id="...") as client:
            rows = await client.tables.query_rows("challenges", limit=10)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        project_id: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
    ):
        """
        Initialize ZeroDB client.

        Args:
            api_key: ZeroDB API key (or ZERODB_API_KEY env var)
            project_id: ZeroDB project ID (or ZERODB_PROJECT_ID env var)
            base_url: API base URL
            timeout: Request timeout in seconds

        Raises:
            ValueError: If api_key or project_id is not provided
        """
        self.api_key = api_key or os.getenv("ZERODB_API_KEY")
        self.project_id = project_id or os.getenv("ZERODB_PROJECT_ID")
        self.base_url = base_url or os.getenv("ZERODB_BASE_URL", DEFAULT_BASE_URL)
        self.timeout = timeout

        if not self.api_key:
            raise ValueError("api_key is required (set via parameter or ZERODB_API_KEY env var)")
        if not self.project_id:
            raise ValueError(
                "project_id is required (set via parameter or ZERODB_PROJECT_ID env var)"
            )

        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        self._tables = None

    @property
    def tables(self):
        """Access Tables API operations"""
        if self._tables is None:
            from .tables import TablesAPI

            self._tables = TablesAPI(self)
        return self._tables

    @staticmethod
    def _error_body(response: httpx.Response) -> Optional[dict[str, Any]]:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return {"raw": response.text}

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Translate an error status code into the matching ZeroDB exception."""
        status_code = response.status_code
        if status_code < 400:
            return

        body = self._error_body(response)
        if status_code in (401, 403):
            message = (
                "Authentication failed - invalid API key"
                if status_code == 401
                else "Permission denied - insufficient privileges"
            )
            raise ZeroDBAuthError(message, status_code=status_code, response=body)
        if status_code == 404:
            raise ZeroDBNotFound("Resource not found", response=body)
        if status_code == 429:
            raise ZeroDBRateLimitError("Rate limit exceeded - please retry later", response=body)

        message = f"API error: {status_code}"
        if isinstance(body, dict) and isinstance(body.get("error"), str):
            message = body["error"]
        raise ZeroDBError(message, status_code=status_code, response=body)

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs,
    ) -> dict[str, Any]:
        """
        Make a single HTTP request and decode the JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            path: API path (e.g., "/v1/public/projects/{id}")
            **kwargs: Additional arguments passed to httpx.request

        Returns:
            Dict: JSON response from API

        Raises:
            ZeroDBAuthError: Authentication failed (401, 403)
            ZeroDBNotFound: Resource not found (404)
            ZeroDBRateLimitError: Rate limit exceeded (429)
            ZeroDBTimeoutError: Request timed out
            ZeroDBError: Other API errors
        """
        try:
            response = await self._http_client.request(method, path, **kwargs)
            self._raise_for_status(response)
            return response.json() if response.content else {}

        except httpx.TimeoutException as e:
            raise ZeroDBTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.NetworkError as e:
            raise ZeroDBError(f"Network error: {str(e)}") from e
        except ZeroDBError:
            raise
        except Exception as e:
            raise ZeroDBError(f"Unexpected error: {str(e)}") from e

    async def get_project_info(self) -> dict[str, Any]:
        """
        Get project information.

        Returns:
            Dict containing project details (project_id, name, database_enabled, etc.)
        """
        path = f"/v1/public/projects/{self.project_id}"
        return await self._request("GET", path)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._http_client.aclose()

    async def close(self):
        """Close the HTTP client connection"""
        await self._http_client.aclose()
