"""
Challenge Service

Lifecycle operations for challenges: creation, reads with creator/reviewer
population, owner-only updates, announcements and status transitions.
Every mutation re-checks the invariants in services.challenge_rules before it
writes.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from fastapi import status as http_status
from integrations.zerodb.client import ZeroDBClient
from integrations.zerodb.exceptions import (
    ZeroDBError,
    ZeroDBNotFound,
    ZeroDBTimeoutError,
)
from services import challenge_rules
from services.errors import AuthorizationError, BadRequestError, NotFoundError

# Configure logger
logger = logging.getLogger(__name__)

CHALLENGES_TABLE = "challenges"
USERS_TABLE = "users"

# Top-level fields a creator may replace through update_challenge
UPDATABLE_FIELDS = (
    "title",
    "problem_statement",
    "goals",
    "challenge_type",
    "audience",
    "communication",
    "submission",
    "prizes",
    "timeline",
    "evaluation",
    "status",
)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def _timeout_error() -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_504_GATEWAY_TIMEOUT,
        detail="Request timed out. Please try again.",
    )


def _store_error(action: str) -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}. Please contact support.",
    )


async def fetch_challenge(zerodb_client: ZeroDBClient, challenge_id: str) -> Dict[str, Any]:
    """
    Load the stored challenge row.

    Raises:
        NotFoundError: If no challenge has this id
    """
    rows = await zerodb_client.tables.query_rows(
        CHALLENGES_TABLE,
        filter={"challenge_id": challenge_id},
    )
    if not rows:
        logger.warning(f"Challenge {challenge_id} not found")
        raise NotFoundError("Challenge not found")
    return rows[0]


def ensure_owner(challenge: Dict[str, Any], user_id: str) -> None:
    """Raise AuthorizationError unless ``user_id`` created the challenge."""
    if challenge.get("creator") != user_id:
        logger.warning(
            f"Authorization failed: User {user_id} does not own challenge "
            f"{challenge.get('challenge_id')}"
        )
        raise AuthorizationError("User not authorized")


def status_announcement(old_status: str, new_status: str, now: str) -> Dict[str, Any]:
    return {
        "title": "Challenge status changed",
        "content": f"Status changed from {old_status} to {new_status}",
        "trigger": "status_change",
        "date": now,
    }


async def _user_summary(zerodb_client: ZeroDBClient, user_id: str) -> Dict[str, Any]:
    rows = await zerodb_client.tables.query_rows(USERS_TABLE, filter={"user_id": user_id})
    if not rows:
        return {"user_id": user_id, "name": None, "organization": None}
    user = rows[0]
    return {
        "user_id": user_id,
        "name": user.get("name"),
        "organization": user.get("organization"),
    }


async def _populate_creators(
    zerodb_client: ZeroDBClient, challenges: List[Dict[str, Any]]
) -> List[Dict[str, Any]]:
    summaries: Dict[str, Dict[str, Any]] = {}
    for creator_id in {c.get("creator") for c in challenges if c.get("creator")}:
        summaries[creator_id] = await _user_summary(zerodb_client, creator_id)

    return [
        {**challenge, "creator": summaries.get(challenge.get("creator"), challenge.get("creator"))}
        for challenge in challenges
    ]


async def _enrich_reviewers(
    zerodb_client: ZeroDBClient, evaluation: Optional[Dict[str, Any]]
) -> Optional[Dict[str, Any]]:
    if not evaluation or not evaluation.get("reviewers"):
        return evaluation

    reviewers = []
    for reviewer in evaluation["reviewers"]:
        email = (reviewer.get("email") or "").strip().lower()
        rows = await zerodb_client.tables.query_rows(USERS_TABLE, filter={"email": email})
        if rows:
            reviewer = {
                **reviewer,
                "name": rows[0].get("name"),
                "expertise": rows[0].get("expertise", []),
            }
        reviewers.append(reviewer)

    return {**evaluation, "reviewers": reviewers}


async def create_challenge(
    zerodb_client: ZeroDBClient,
    creator_id: str,
    challenge_data: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Create a new challenge owned by the caller.

    The challenge is stored as ``active`` with empty announcements and
    submissions, and its id is appended to the creator's created_challenges.

    Args:
        zerodb_client: ZeroDB client instance
        creator_id: ID of the authenticated user
        challenge_data: Validated creation payload (JSON-compatible dict)

    Returns:
        Dict with the stored challenge including challenge_id

    Raises:
        BadRequestError: 400 if start_date is not in the future or any other
            challenge invariant fails
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors

    Example:
        >>> challenge = await create_challenge(client, "user-123", payload)
        >>> challenge["status"]
        'active'
    """
    try:
        missing = challenge_rules.missing_fields(
            challenge_data,
            ["title", "problem_statement", "goals", "challenge_type", "submission", "prizes", "timeline"],
        )
        if missing:
            raise BadRequestError(f"Missing required fields: {', '.join(missing)}")

        challenge_rules.check_new_challenge(challenge_data, now=datetime.now(timezone.utc))

        challenge_id = str(uuid.uuid4())
        now = _utcnow()
        challenge_row = {
            **challenge_data,
            "challenge_id": challenge_id,
            "status": "active",
            "creator": creator_id,
            "announcements": [],
            "submissions": [],
            "created_at": now,
            "updated_at": now,
        }

        logger.info(f"Creating challenge: {challenge_row.get('title')} (ID: {challenge_id})")
        await zerodb_client.tables.insert_rows(CHALLENGES_TABLE, rows=[challenge_row])

        # Challenge is stored from here on; a failed link is logged, not raised
        try:
            await zerodb_client.tables.update_rows(
                USERS_TABLE,
                filter={"user_id": creator_id},
                update={"$push": {"created_challenges": challenge_id}},
            )
        except ZeroDBError as e:
            logger.error(
                f"Challenge {challenge_id} stored but not linked to creator {creator_id}: {str(e)}",
                exc_info=True,
            )

        logger.info(f"Successfully created challenge {challenge_id} for creator {creator_id}")
        return challenge_row

    except HTTPException:
        raise

    except ZeroDBTimeoutError as e:
        logger.error(f"Timeout creating challenge: {str(e)}")
        raise _timeout_error()

    except (ZeroDBError, ZeroDBNotFound) as e:
        logger.error(f"ZeroDB error creating challenge: {str(e)}", exc_info=True)
        raise _store_error("create challenge")

    except Exception as e:
        logger.error(f"Unexpected error creating challenge: {str(e)}", exc_info=True)
        raise _store_error("create challenge")


async def list_challenges(zerodb_client: ZeroDBClient) -> List[Dict[str, Any]]:
    """
    List every challenge, newest first, with the creator populated as
    ``{user_id, name, organization}``.

    Raises:
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        challenges = await zerodb_client.tables.query_rows(CHALLENGES_TABLE)
        challenges = sorted(challenges, key=lambda c: c.get("created_at") or "", reverse=True)

        logger.info(f"Retrieved {len(challenges)} challenges")
        return await _populate_creators(zerodb_client, challenges)

    except HTTPException:
        raise

    except ZeroDBTimeoutError as e:
        logger.error(f"Timeout listing challenges: {str(e)}")
        raise _timeout_error()

    except (ZeroDBError, ZeroDBNotFound) as e:
        logger.error(f"ZeroDB error listing challenges: {str(e)}", exc_info=True)
        raise _store_error("list challenges")

    except Exception as e:
        logger.error(f"Unexpected error listing challenges: {str(e)}", exc_info=True)
        raise _store_error("list challenges")


async def get_challenge(zerodb_client: ZeroDBClient, challenge_id: str) -> Dict[str, Any]:
    """
    Get a single challenge with its creator populated and its evaluation
    reviewers enriched with name/expertise where a matching user exists.

    Raises:
        NotFoundError: 404 if the challenge does not exist
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        challenge = await fetch_challenge(zerodb_client, challenge_id)

        challenge = (await _populate_creators(zerodb_client, [challenge]))[0]
        challenge["evaluation"] = await _enrich_reviewers(zerodb_client, challenge.get("evaluation"))

        logger.info(f"Retrieved challenge {challenge_id}: {challenge.get('title')}")
        return challenge

    except HTTPException:
        raise

    except ZeroDBTimeoutError as e:
        logger.error(f"Timeout retrieving challenge {challenge_id}: {str(e)}")
        raise _timeout_error()

    except (ZeroDBError, ZeroDBNotFound) as e:
        logger.error(f"ZeroDB error retrieving challenge {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("retrieve challenge")

    except Exception as e:
        logger.error(f"Unexpected error retrieving challenge {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("retrieve challenge")


async def update_challenge(
    zerodb_client: ZeroDBClient,
    challenge_id: str,
    user_id: str,
    update_data: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Update a challenge (creator only).

    Supplied top-level fields replace the stored ones; everything else is left
    untouched. The merged document must still satisfy the challenge invariants
    (start-in-future is not re-checked) and a changed status must be a legal
    transition, which also posts a status_change announcement.

    Args:
        zerodb_client: ZeroDB client instance
        challenge_id: ID of the challenge to update
        user_id: ID of the user attempting the update
        update_data: Dict of fields to update

    Returns:
        Dict with the updated challenge

    Raises:
        NotFoundError: 404 if the challenge does not exist
        AuthorizationError: 401 if the caller is not the creator
        BadRequestError: 400 for an empty update or a violated invariant
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        challenge = await fetch_challenge(zerodb_client, challenge_id)
        ensure_owner(challenge, user_id)

        update_fields = {
            key: value
            for key, value in update_data.items()
            if key in UPDATABLE_FIELDS and value is not None
        }
        if not update_fields:
            raise BadRequestError("No fields to update")

        current_status = challenge.get("status")
        if update_fields.get("status") == current_status:
            update_fields.pop("status")

        if "status" in update_fields:
            challenge_rules.check_status_transition(current_status, update_fields["status"])

        merged = {**challenge, **update_fields}
        challenge_rules.check_document(merged)

        now = _utcnow()
        update_fields["updated_at"] = now
        update: Dict[str, Any] = {"$set": update_fields}
        if "status" in update_fields:
            update["$push"] = {
                "announcements": {
                    "$each": [status_announcement(current_status, update_fields["status"], now)],
                    "$position": 0,
                }
            }

        logger.info(f"Updating challenge {challenge_id} with fields: {list(update_fields.keys())}")
        await zerodb_client.tables.update_rows(
            CHALLENGES_TABLE,
            filter={"challenge_id": challenge_id},
            update=update,
        )

        updated = await fetch_challenge(zerodb_client, challenge_id)
        logger.info(f"Successfully updated challenge {challenge_id}")
        return updated

    except HTTPException:
        raise

    except ZeroDBTimeoutError as e:
        logger.error(f"Timeout updating challenge {challenge_id}: {str(e)}")
        raise _timeout_error()

    except (ZeroDBError, ZeroDBNotFound) as e:
        logger.error(f"ZeroDB error updating challenge {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("update challenge")

    except Exception as e:
        logger.error(f"Unexpected error updating challenge {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("update challenge")


async def add_announcement(
    zerodb_client: ZeroDBClient,
    challenge_id: str,
    user_id: str,
    title: str,
    content: str,
) -> List[Dict[str, Any]]:
    """
    Post an announcement (creator only).

    The announcement is placed at the front of the list so the list stays
    newest first.

    Returns:
        The full announcement list after the append

    Raises:
        NotFoundError: 404 if the challenge does not exist
        AuthorizationError: 401 if the caller is not the creator
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        challenge = await fetch_challenge(zerodb_client, challenge_id)
        ensure_owner(challenge, user_id)

        now = _utcnow()
        announcement = {
            "title": title,
            "content": content,
            "trigger": "manual",
            "date": now,
        }

        logger.info(f"Posting announcement on challenge {challenge_id}: {title}")
        await zerodb_client.tables.update_rows(
            CHALLENGES_TABLE,
            filter={"challenge_id": challenge_id},
            update={
                "$push": {"announcements": {"$each": [announcement], "$position": 0}},
                "$set": {"updated_at": now},
            },
        )

        updated = await fetch_challenge(zerodb_client, challenge_id)
        return updated.get("announcements", [])

    except HTTPException:
        raise

    except ZeroDBTimeoutError as e:
        logger.error(f"Timeout posting announcement on {challenge_id}: {str(e)}")
        raise _timeout_error()

    except (ZeroDBError, ZeroDBNotFound) as e:
        logger.error(f"ZeroDB error posting announcement on {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("post announcement")

    except Exception as e:
        logger.error(f"Unexpected error posting announcement on {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("post announcement")


async def change_status(
    zerodb_client: ZeroDBClient,
    challenge_id: str,
    user_id: str,
    new_status: str,
) -> Dict[str, Any]:
    """
    Move a challenge along the status state machine (creator only).

    Legal moves: draft -> active, draft -> cancelled, active -> completed,
    active -> cancelled. A status_change announcement is posted.

    Raises:
        NotFoundError: 404 if the challenge does not exist
        AuthorizationError: 401 if the caller is not the creator
        BadRequestError: 400 for an illegal transition
        HTTPException: 500 for database errors
        HTTPException: 504 for timeout errors
    """
    try:
        challenge = await fetch_challenge(zerodb_client, challenge_id)
        ensure_owner(challenge, user_id)

        current_status = challenge.get("status")
        challenge_rules.check_status_transition(current_status, new_status)

        now = _utcnow()
        logger.info(f"Changing status of challenge {challenge_id}: {current_status} -> {new_status}")
        await zerodb_client.tables.update_rows(
            CHALLENGES_TABLE,
            filter={"challenge_id": challenge_id},
            update={
                "$set": {"status": new_status, "updated_at": now},
                "$push": {
                    "announcements": {
                        "$each": [status_announcement(current_status, new_status, now)],
                        "$position": 0,
                    }
                },
            },
        )

        return await fetch_challenge(zerodb_client, challenge_id)

    except HTTPException:
        raise

    except ZeroDBTimeoutError as e:
        logger.error(f"Timeout changing status of {challenge_id}: {str(e)}")
        raise _timeout_error()

    except (ZeroDBError, ZeroDBNotFound) as e:
        logger.error(f"ZeroDB error changing status of {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("change challenge status")

    except Exception as e:
        logger.error(f"Unexpected error changing status of {challenge_id}: {str(e)}", exc_info=True)
        raise _store_error("change challenge status")
