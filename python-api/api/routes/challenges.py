"""
Challenge API Routes

RESTful endpoints for creating, browsing and managing challenges, posting
announcements, changing status and recording submissions.
"""

import logging
from typing import Any, Dict, List

from api.dependencies import get_current_user
from api.schemas.challenge import (
    AnnouncementCreateRequest,
    AnnouncementResponse,
    ChallengeCreateRequest,
    ChallengeResponse,
    ChallengeUpdateRequest,
    ErrorResponse,
    StatusChangeRequest,
    SubmissionCreateRequest,
    SubmissionResponse,
)
from fastapi import APIRouter, Depends, status
from integrations.zerodb.client import ZeroDBClient
from integrations.zerodb.dependencies import get_zerodb_client
from services import challenge_service, submission_service

# Configure logger
logger = logging.getLogger(__name__)

# Create router with prefix and tags
router = APIRouter(
    prefix="/api/challenges",
    tags=["Challenges"],
    responses={
        400: {"model": ErrorResponse, "description": "Validation Error"},
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        404: {"model": ErrorResponse, "description": "Not Found"},
        500: {"model": ErrorResponse, "description": "Internal Server Error"},
        504: {"model": ErrorResponse, "description": "Gateway Timeout"},
    },
)


@router.post(
    "",
    response_model=ChallengeResponse,
    status_code=status.HTTP_200_OK,
    summary="Create a challenge",
    description="""
    Create a new challenge owned by the authenticated user.

    **Authentication Required:** Yes (access token header)

    **Rules:**
    - timeline.start_date must be in the future and before timeline.end_date
    - prizes.total_prize must equal the sum of prizes.amounts
    - evaluation.criteria, when given, need positive weights totalling 100
    - audience.max_team_size must be > 1 when teams are allowed
    - milestones must have name, date and description

    New challenges start in the **active** status.
    """,
)
async def create_challenge(
    request: ChallengeCreateRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> ChallengeResponse:
    """Create a challenge for the caller."""
    logger.info(f"Create challenge request from user {current_user.get('id')}: {request.title}")

    challenge = await challenge_service.create_challenge(
        zerodb_client=zerodb_client,
        creator_id=str(current_user["id"]),
        challenge_data=request.model_dump(mode="json"),
    )

    logger.info(f"Challenge created successfully: {challenge['challenge_id']}")
    return ChallengeResponse(**challenge)


@router.get(
    "",
    response_model=List[ChallengeResponse],
    summary="List challenges",
    description="All challenges, newest first, with creator name and organization.",
)
async def list_challenges(
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> List[ChallengeResponse]:
    challenges = await challenge_service.list_challenges(zerodb_client)
    return [ChallengeResponse(**challenge) for challenge in challenges]


@router.get(
    "/{challenge_id}",
    response_model=ChallengeResponse,
    summary="Get challenge details",
    description="A single challenge with creator and evaluation reviewers populated.",
)
async def get_challenge(
    challenge_id: str,
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> ChallengeResponse:
    challenge = await challenge_service.get_challenge(zerodb_client, challenge_id)
    return ChallengeResponse(**challenge)


@router.put(
    "/{challenge_id}",
    response_model=ChallengeResponse,
    summary="Update a challenge",
    description="""
    Replace top-level fields of a challenge. Creator only.

    Fields not supplied are left untouched. The updated challenge must still
    satisfy the challenge rules, and a changed status must be a legal move.
    """,
)
async def update_challenge(
    challenge_id: str,
    request: ChallengeUpdateRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> ChallengeResponse:
    """Update a challenge the caller created."""
    logger.info(f"Update challenge {challenge_id} request from user {current_user.get('id')}")

    challenge = await challenge_service.update_challenge(
        zerodb_client=zerodb_client,
        challenge_id=challenge_id,
        user_id=str(current_user["id"]),
        update_data=request.model_dump(mode="json", exclude_none=True),
    )
    return ChallengeResponse(**challenge)


@router.patch(
    "/{challenge_id}/status",
    response_model=ChallengeResponse,
    summary="Change challenge status",
    description="""
    Move a challenge along its lifecycle. Creator only.

    **Allowed transitions:** draft → active, draft → cancelled,
    active → completed, active → cancelled. A status-change announcement is
    posted automatically.
    """,
)
async def change_challenge_status(
    challenge_id: str,
    request: StatusChangeRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> ChallengeResponse:
    challenge = await challenge_service.change_status(
        zerodb_client=zerodb_client,
        challenge_id=challenge_id,
        user_id=str(current_user["id"]),
        new_status=request.status.value,
    )
    return ChallengeResponse(**challenge)


@router.post(
    "/{challenge_id}/announcements",
    response_model=List[AnnouncementResponse],
    summary="Post an announcement",
    description="Prepend an announcement to the challenge. Creator only. Returns all announcements, newest first.",
)
async def add_announcement(
    challenge_id: str,
    request: AnnouncementCreateRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> List[AnnouncementResponse]:
    announcements = await challenge_service.add_announcement(
        zerodb_client=zerodb_client,
        challenge_id=challenge_id,
        user_id=str(current_user["id"]),
        title=request.title,
        content=request.content,
    )
    return [AnnouncementResponse(**announcement) for announcement in announcements]


@router.post(
    "/{challenge_id}/submissions",
    response_model=SubmissionResponse,
    summary="Submit a solution",
    description="""
    Record a solution for an **active** challenge.

    Any authenticated user may submit, any number of times.
    """,
)
async def submit_solution(
    challenge_id: str,
    request: SubmissionCreateRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    zerodb_client: ZeroDBClient = Depends(get_zerodb_client),
) -> SubmissionResponse:
    logger.info(f"Submission to challenge {challenge_id} from user {current_user.get('id')}")

    submission = await submission_service.submit_solution(
        zerodb_client=zerodb_client,
        challenge_id=challenge_id,
        user_id=str(current_user["id"]),
        url=request.url,
        description=request.description,
    )
    return SubmissionResponse(**submission)
