"""
Tests for User Service

Registration, login and profile operations against the in-memory tables
double, with real bcrypt hashing (low cost factor) and real tokens.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException
from integrations.zerodb.exceptions import ZeroDBError
from services.errors import AuthenticationError, BadRequestError, NotFoundError
from services.user_service import (
    authenticate_user,
    get_profile,
    list_reviewers,
    register_user,
    update_profile,
)


async def _register(zerodb, token_service, email="alice@example.com", **kwargs):
    return await register_user(
        zerodb,
        token_service,
        name=kwargs.pop("name", "Alice"),
        email=email,
        password=kwargs.pop("password", "secret123"),
        bcrypt_rounds=4,
        **kwargs,
    )


class TestRegisterUser:
    """Tests for register_user()."""

    @pytest.mark.asyncio
    async def test_register_returns_token_for_new_user(self, memory_zerodb, memory_tables, token_service):
        # Act
        token = await _register(memory_zerodb, token_service)

        # Assert
        identity = token_service.verify_token(token)
        stored = memory_tables.tables["users"][0]
        assert identity["id"] == stored["user_id"]
        assert stored["email"] == "alice@example.com"
        assert stored["role"] == "participant"
        assert stored["password_hash"] != "secret123"
        assert stored["preferences"] == {
            "notifications": {"email": True, "platform": True},
            "language": "en",
        }

    @pytest.mark.asyncio
    async def test_email_is_normalized(self, memory_zerodb, memory_tables, token_service):
        await _register(memory_zerodb, token_service, email="  Alice@Example.COM ")

        assert memory_tables.tables["users"][0]["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected_case_insensitively(self, memory_zerodb, token_service):
        # Arrange
        await _register(memory_zerodb, token_service)

        # Act & Assert
        with pytest.raises(BadRequestError) as exc_info:
            await _register(memory_zerodb, token_service, email="ALICE@example.com")

        assert exc_info.value.detail == "User already exists"

    @pytest.mark.asyncio
    async def test_short_password_rejected(self, memory_zerodb, token_service):
        with pytest.raises(BadRequestError):
            await _register(memory_zerodb, token_service, password="12345")

    @pytest.mark.asyncio
    async def test_password_over_72_bytes_rejected(self, memory_zerodb, memory_tables, token_service):
        # 40 characters but 80 bytes in UTF-8
        with pytest.raises(BadRequestError, match="72 bytes"):
            await _register(memory_zerodb, token_service, password="\u00e9" * 40)

        assert memory_tables.tables.get("users", []) == []

    @pytest.mark.asyncio
    async def test_missing_name_rejected(self, memory_zerodb, token_service):
        with pytest.raises(BadRequestError):
            await _register(memory_zerodb, token_service, name="  ")

    @pytest.mark.asyncio
    async def test_database_error(self, mock_zerodb_client, token_service):
        mock_zerodb_client.tables.query_rows = AsyncMock(side_effect=ZeroDBError("boom"))

        with pytest.raises(HTTPException) as exc_info:
            await _register(mock_zerodb_client, token_service)

        assert exc_info.value.status_code == 500


class TestAuthenticateUser:
    """Tests for authenticate_user()."""

    @pytest.mark.asyncio
    async def test_login_success(self, memory_zerodb, memory_tables, token_service):
        # Arrange
        await _register(memory_zerodb, token_service)

        # Act
        token = await authenticate_user(memory_zerodb, token_service, "ALICE@example.com", "secret123")

        # Assert
        assert token_service.verify_token(token)["id"] == memory_tables.tables["users"][0]["user_id"]

    @pytest.mark.asyncio
    async def test_wrong_password(self, memory_zerodb, token_service):
        await _register(memory_zerodb, token_service)

        with pytest.raises(AuthenticationError) as exc_info:
            await authenticate_user(memory_zerodb, token_service, "alice@example.com", "nope-nope")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_unknown_email_same_message(self, memory_zerodb, token_service):
        with pytest.raises(AuthenticationError) as exc_info:
            await authenticate_user(memory_zerodb, token_service, "ghost@example.com", "secret123")

        assert exc_info.value.detail == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_missing_password(self, memory_zerodb, token_service):
        with pytest.raises(BadRequestError):
            await authenticate_user(memory_zerodb, token_service, "alice@example.com", "")


class TestProfile:
    """Tests for get_profile(), update_profile() and list_reviewers()."""

    @pytest.mark.asyncio
    async def test_profile_hides_password_hash(self, memory_zerodb, memory_tables, token_service):
        # Arrange
        await _register(memory_zerodb, token_service)
        user_id = memory_tables.tables["users"][0]["user_id"]

        # Act
        profile = await get_profile(memory_zerodb, user_id)

        # Assert
        assert "password_hash" not in profile
        assert profile["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_profile_populates_challenges(self, memory_zerodb, memory_tables, token_service):
        # Arrange
        await _register(memory_zerodb, token_service)
        user = memory_tables.tables["users"][0]
        user["created_challenges"] = ["ch-1", "ch-gone"]
        user["participating_challenges"] = [
            {"challenge_id": "ch-1", "role": "participant", "joined_at": "2026-01-01T00:00:00+00:00"}
        ]
        memory_tables.tables["challenges"] = [
            {"challenge_id": "ch-1", "title": "Water", "status": "active", "challenge_type": "Design"}
        ]

        # Act
        profile = await get_profile(memory_zerodb, user["user_id"])

        # Assert
        assert profile["created_challenges"][0]["title"] == "Water"
        assert profile["created_challenges"][1] == "ch-gone"
        assert profile["participating_challenges"][0]["challenge"]["challenge_id"] == "ch-1"

    @pytest.mark.asyncio
    async def test_unknown_user(self, memory_zerodb):
        with pytest.raises(NotFoundError):
            await get_profile(memory_zerodb, "ghost")

    @pytest.mark.asyncio
    async def test_update_changes_only_supplied_fields(self, memory_zerodb, memory_tables, token_service):
        # Arrange
        await _register(memory_zerodb, token_service, organization={"name": "Acme", "role": "CTO"})
        user_id = memory_tables.tables["users"][0]["user_id"]

        # Act
        profile = await update_profile(
            memory_zerodb, user_id, {"expertise": ["Design"], "email": "hijack@example.com"}
        )

        # Assert
        assert profile["expertise"] == ["Design"]
        assert profile["name"] == "Alice"
        assert profile["email"] == "alice@example.com"
        assert profile["organization"] == {"name": "Acme", "role": "CTO"}

    @pytest.mark.asyncio
    async def test_list_reviewers(self, memory_zerodb, token_service):
        # Arrange
        await _register(memory_zerodb, token_service)
        await _register(memory_zerodb, token_service, email="rev@example.com", name="Rita", role="reviewer")

        # Act
        reviewers = await list_reviewers(memory_zerodb)

        # Assert
        assert len(reviewers) == 1
        assert reviewers[0]["name"] == "Rita"
        assert "password_hash" not in reviewers[0]
