"""
Submission Service

Records solution submissions against active challenges. Submissions are
append-only: no dedupe by submitter, earlier entries are never modified.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException
from fastapi import status as http_status
from integrations.zerodb.client import ZeroDBClient
from integrations.zerodb.exceptions import (
    ZeroDBError,
    ZeroDBNotFound,
    ZeroDBTimeoutError,
)
from services import challenge_rules
from services.challenge_service import CHALLENGES_TABLE, USERS_TABLE, fetch_challenge

# Configure logger
logger = logging.getLogger(__name__)


async def _record_participation(
    zerodb_client: ZeroDBClient,
    user_id: str,
    challenge_id: str,
    joined_at: str,
) -> None:
    """
    Add the challenge to the user's participating_challenges once.

    Check and push happen in one filtered update.
    """
    await zerodb_client.tables.update_rows(
        USERS_TABLE,
        filter={
            "user_id": user_id,
            "participating_challenges.challenge_id": {"$ne": challenge_id},
        },
        update={
            "$push": {
                "participating_challenges": {
                    "challenge_id": challenge_id,
                    "role": "participant",
                    "joined_at": joined_at,
                }
            }
        },
    )


async def submit_solution(
    zerodb_client: ZeroDBClient,
    challenge_id: str,
    user_id: str,
    url: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Append a submission to an active challenge.

    Args:
        zerodb_client: ZeroDB client instance
        challenge_id: Challenge being submitted to
        user_id: ID of the authenticated submitter
        url: Where the solution lives
        description: Optional free-text description

    Returns:
        Dict with the created submission record

    Raises:
        NotFoundError: 404 if the challenge does not exist
        BadRequestError: 400 if the challenge is not active
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors

    Example:
        >>> record = await submit_solution(client, "ch-1", "user-2", "https://github.com/x/y")
        >>> record["submitter"]
        'user-2'
    """
    try:
        challenge = await fetch_challenge(zerodb_client, challenge_id)
        challenge_rules.check_accepting_submissions(challenge)

        now = datetime.now(timezone.utc).isoformat()
        submission = {
            "submission_id": str(uuid.uuid4()),
            "submitter": user_id,
            "url": url,
            "description": description or "",
            "created_at": now,
        }

        logger.info(f"Recording submission {submission['submission_id']} on challenge {challenge_id}")
        await zerodb_client.tables.update_rows(
            CHALLENGES_TABLE,
            filter={"challenge_id": challenge_id},
            update={
                "$push": {"submissions": submission},
                "$set": {"updated_at": now},
            },
        )

        await _record_participation(zerodb_client, user_id, challenge_id, now)

        logger.info(f"Successfully recorded submission from {user_id} on challenge {challenge_id}")
        return submission

    except HTTPException:
        raise

    except ZeroDBTimeoutError as e:
        logger.error(f"Timeout recording submission on {challenge_id}: {str(e)}")
        raise HTTPException(
            status_code=http_status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Submission timed out. Please try again.",
        )

    except (ZeroDBError, ZeroDBNotFound) as e:
        logger.error(f"ZeroDB error recording submission on {challenge_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record submission. Please contact support.",
        )

    except Exception as e:
        logger.error(f"Unexpected error recording submission on {challenge_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to record submission. Please contact support.",
        )
