"""
ZeroDB Tables API Wrapper

NoSQL table operations. Rows are JSON documents; filters and updates use
MongoDB-style operators (equality filters, ``$set`` and ``$push`` updates).
"""

import json
from typing import Any, List, Optional


class TablesAPI:
    """
    Wrapper for ZeroDB Tables API operations.

    Provides methods for:
    - Creating and listing tables
    - Inserting and querying rows
    - Updating rows by filter
    """

    def __init__(self, client):
        """
        Initialize TablesAPI wrapper.

        Args:
            client: ZeroDBClient instance
        """
        self.client = client

    def _tables_path(self) -> str:
        return f"/v1/public/projects/{self.client.project_id}/database/tables"

    def _rows_path(self, table_name: str) -> str:
        return f"{self._tables_path()}/{table_name}/rows"

    async def create(
        self,
        name: str,
        schema: dict[str, Any],
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Create a new table.

        Args:
            name: Table name
            schema: Table schema definition
            description: Optional table description

        Returns:
            Dict with table details
        """
        payload = {"name": name, "schema": schema}
        if description:
            payload["description"] = description

        return await self.client._request("POST", self._tables_path(), json=payload)

    async def list(self, skip: int = 0, limit: int = 100) -> list[dict[str, Any]]:
        """List all tables in the project."""
        params = {"skip": skip, "limit": limit}
        response = await self.client._request("GET", self._tables_path(), params=params)
        return response.get("tables", [])

    async def insert_rows(
        self,
        table_name: str,
        rows: List[dict[str, Any]],
    ) -> dict[str, Any]:
        """
        Insert rows into a table.

        Args:
            table_name: Name of the table
            rows: List of row documents to insert

        Returns:
            Dict with inserted row IDs
        """
        payload = {"rows": rows}
        return await self.client._request("POST", self._rows_path(table_name), json=payload)

    async def query_rows(
        self,
        table_name: str,
        filter: Optional[dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[dict[str, Any]]:
        """
        Query rows from a table.

        Args:
            table_name: Name of the table
            filter: MongoDB-style equality filter (optional)
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of matching rows

        Example:
            rows = await client.tables.query_rows(
                "users",
                filter={"email": "a@x.com"},
                limit=1
            )
        """
        params: dict[str, Any] = {"skip": skip, "limit": limit}
        if filter:
            params["filter"] = json.dumps(filter)

        response = await self.client._request("GET", self._rows_path(table_name), params=params)
        return response.get("rows", [])

    async def update_rows(
        self,
        table_name: str,
        filter: dict[str, Any],
        update: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Update every row matching ``filter``.

        Each matched row is updated atomically by the store; there is no
        multi-row transaction.

        Args:
            table_name: Name of the table
            filter: MongoDB-style equality filter
            update: Update document, e.g. ``{"$set": {...}}`` or
                ``{"$push": {"submissions": {...}}}``

        Returns:
            Dict with the matched/modified counts
        """
        payload = {"filter": filter, "update": update}
        return await self.client._request("PATCH", self._rows_path(table_name), json=payload)
