"""
Pytest configuration and fixtures for FastAPI testing.

Provides an in-memory stand-in for the ZeroDB tables API so service and
endpoint tests can run whole flows without a network.
"""

import copy
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

# Set environment variables BEFORE the app's settings are imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient


class InMemoryTables:
    """
    Minimal in-memory version of TablesAPI.

    Supports equality and ``$ne`` filters (with dotted paths into lists of
    sub-documents) and the ``$set`` / ``$push`` update operators (including
    ``$each`` and ``$position``) that the services use.
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}

    @staticmethod
    def _values(row: Dict[str, Any], path: str) -> List[Any]:
        values = [row]
        for key in path.split("."):
            found = []
            for value in values:
                items = value if isinstance(value, list) else [value]
                found.extend(item[key] for item in items if isinstance(item, dict) and key in item)
            values = found
        return values

    @classmethod
    def _matches(cls, row: Dict[str, Any], filter: Optional[Dict[str, Any]]) -> bool:
        for path, condition in (filter or {}).items():
            values = cls._values(row, path)
            if isinstance(condition, dict) and "$ne" in condition:
                if condition["$ne"] in values:
                    return False
            elif condition not in values:
                return False
        return True

    async def insert_rows(self, table_id: str, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        stored = self.tables.setdefault(table_id, [])
        stored.extend(copy.deepcopy(rows))
        return {"success": True, "row_ids": [str(uuid.uuid4()) for _ in rows]}

    async def query_rows(
        self,
        table_id: str,
        filter: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        rows = [r for r in self.tables.get(table_id, []) if self._matches(r, filter)]
        return copy.deepcopy(rows)

    async def update_rows(
        self,
        table_id: str,
        filter: Dict[str, Any],
        update: Dict[str, Any],
    ) -> Dict[str, Any]:
        updated = 0
        for row in self.tables.get(table_id, []):
            if not self._matches(row, filter):
                continue
            for key, value in (update.get("$set") or {}).items():
                row[key] = copy.deepcopy(value)
            for key, value in (update.get("$push") or {}).items():
                target = row.setdefault(key, [])
                if isinstance(value, dict) and "$each" in value:
                    items = copy.deepcopy(value["$each"])
                    position = value.get("$position", len(target))
                    target[position:position] = items
                else:
                    target.append(copy.deepcopy(value))
            updated += 1
        return {"success": True, "updated": updated}


@pytest.fixture
def memory_tables() -> InMemoryTables:
    return InMemoryTables()


@pytest.fixture
def memory_zerodb(memory_tables):
    """ZeroDB client double backed by InMemoryTables."""
    client = MagicMock()
    client.tables = memory_tables
    client.project_id = "test-project-123"
    return client


@pytest.fixture
def mock_zerodb_client():
    """Create a mock ZeroDB client."""
    client = MagicMock()
    client.tables = MagicMock()
    client.project_id = "test-project-123"
    return client


@pytest.fixture
def token_service():
    from integrations.auth.tokens import AccessTokenService

    return AccessTokenService(secret="test-secret", algorithm="HS256", expire_hours=24)


def future(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def challenge_payload() -> Dict[str, Any]:
    """A valid creation payload as the route hands it to the service."""
    return {
        "title": "Clean Water Challenge",
        "problem_statement": "Design a low-cost water filter for rural areas",
        "goals": ["Affordable", "Easy to maintain"],
        "challenge_type": "Design",
        "audience": {
            "geographic_constraints": [],
            "languages": ["English"],
            "teams_allowed": True,
            "max_team_size": 5,
        },
        "communication": {"forum_enabled": True, "question_board_enabled": True},
        "submission": {"format": "url", "requirements": ["Link to design files"]},
        "prizes": {
            "structure": "single",
            "amounts": [{"rank": 1, "amount": 100, "description": "Winner"}],
            "total_prize": 100,
        },
        "timeline": {
            "start_date": future(7),
            "end_date": future(30),
            "milestones": [],
        },
        "evaluation": {
            "model": "post-submission",
            "reviewers": [],
            "criteria": [],
            "minimum_reviews": 1,
            "rubric": {"use_ai_review": False, "use_peer_review": False, "scoring_system": "points"},
        },
    }


@pytest.fixture
def app_client(memory_zerodb, token_service):
    """
    TestClient wired to the in-memory store and a fixed token secret.

    Dependency overrides are cleared after the test.
    """
    from api.dependencies import get_token_service
    from integrations.zerodb.dependencies import get_zerodb_client
    from main import app

    app.dependency_overrides[get_zerodb_client] = lambda: memory_zerodb
    app.dependency_overrides[get_token_service] = lambda: token_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client():
    """
    Create a test client for the FastAPI application.

    This fixture is imported late to avoid circular dependencies
    and to ensure the app is properly configured before testing.
    """
    from main import app

    return TestClient(app)


@pytest.fixture
def mock_env(monkeypatch):
    """
    Set up mock environment variables for testing.
    """
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.setenv("API_VERSION", "v1")
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173")
