"""
User API Routes

Registration, login and profile endpoints. Register and login answer with an
access token to send back in the auth header on later requests.
"""

import logging
from typing import Any, Dict, List

from api.dependencies import get_current_user, get_token_service
from api.schemas.challenge import ErrorResponse
from api.schemas.user import (
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    ReviewerProfile,
    TokenResponse,
    UserResponse,
)
from config import settings
from fastapi import APIRouter, Depends
from integrations.auth.tokens import AccessTokenService
from integrations.zerodb.client import ZeroDBClient
from integrations.zerodb.dependencies import get_zerodb_client
from services import user_service

# Configure logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    responses={
        400: {"model": ErrorResponse, "description": "Validation Error"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
    },
)


@router.post(
    "/register",
    response_model=TokenResponse,
    summary="Register a user",
    description="Create an account. Email addresses are unique (case-insensitive).",
)
async def register(
    request: RegisterRequest,
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
    token_service: AccessTokenService = Depends(get_token_service),
) -> TokenResponse:
    token = await user_service.register_user(
        zerodb_client=zerodb_client,
        token_service=token_service,
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role.value,
        expertise=[e.value for e in request.expertise],
        organization=request.organization.model_dump() if request.organization else None,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    return TokenResponse(token=token)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log in",
    description="Exchange email and password for an access token.",
)
async def login(
    request: LoginRequest,
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
    token_service: AccessTokenService = Depends(get_token_service),
) -> TokenResponse:
    token = await user_service.authenticate_user(
        zerodb_client=zerodb_client,
        token_service=token_service,
        email=request.email,
        password=request.password,
    )
    return TokenResponse(token=token)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get my profile",
    description="Profile of the authenticated user with created and participating challenges populated.",
)
async def get_me(
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> UserResponse:
    profile = await user_service.get_profile(zerodb_client, str(current_user["id"]))
    return UserResponse(**profile)


@router.put(
    "/me",
    response_model=UserResponse,
    summary="Update my profile",
    description="Update name, expertise, organization and/or preferences. Omitted fields are unchanged.",
)
async def update_me(
    request: ProfileUpdateRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> UserResponse:
    profile = await user_service.update_profile(
        zerodb_client=zerodb_client,
        user_id=str(current_user["id"]),
        update_data=request.model_dump(mode="json", exclude_none=True),
    )
    return UserResponse(**profile)


@router.get(
    "/reviewers",
    response_model=List[ReviewerProfile],
    summary="List reviewers",
    description="Users with the reviewer role.",
)
async def list_reviewers(
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> List[ReviewerProfile]:
    reviewers = await user_service.list_reviewers(zerodb_client)
    return [ReviewerProfile(**reviewer) for reviewer in reviewers]
