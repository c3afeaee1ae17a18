"""
Challenge Rules

Guard functions for the invariants every stored challenge must satisfy, plus
the status state machine. Guards take plain challenge dicts (as stored in
ZeroDB, dates as ISO strings) and raise BadRequestError on violation.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from services.errors import BadRequestError

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[str, frozenset] = {
    "draft": frozenset({"active", "cancelled"}),
    "active": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp (or pass through a datetime) as an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def is_valid_criteria(criteria: Optional[Iterable[Any]]) -> bool:
    """
    Check an evaluation criteria list.

    True iff the list is non-empty, every criterion has a non-empty name and
    description and a positive weight, and the weights sum to exactly 100.

    Example:
        >>> is_valid_criteria([{"name": "Impact", "weight": 100, "description": "..."}])
        True
    """
    if not criteria:
        return False

    total = 0
    for criterion in criteria:
        name = _field(criterion, "name")
        description = _field(criterion, "description")
        weight = _field(criterion, "weight")
        if not name or not str(name).strip():
            return False
        if not description or not str(description).strip():
            return False
        if not isinstance(weight, (int, float)) or isinstance(weight, bool) or weight <= 0:
            return False
        total += weight

    return total == 100


def check_prize_total(prizes: Dict[str, Any]) -> None:
    """total_prize must equal the sum of the individual amounts."""
    amounts = prizes.get("amounts") or []
    expected = sum(entry.get("amount", 0) for entry in amounts)
    total = prizes.get("total_prize")
    if total is None or not math.isclose(expected, total, rel_tol=0.0, abs_tol=1e-6):
        raise BadRequestError(
            f"total_prize ({total}) must equal the sum of prize amounts ({expected})"
        )


def check_criteria(evaluation: Optional[Dict[str, Any]]) -> None:
    criteria = (evaluation or {}).get("criteria") or []
    if criteria and not is_valid_criteria(criteria):
        raise BadRequestError(
            "Evaluation criteria need a name, description and positive weight each, "
            "and weights must total 100"
        )


def check_timeline_order(timeline: Dict[str, Any]) -> None:
    start = parse_datetime(timeline.get("start_date"))
    end = parse_datetime(timeline.get("end_date"))
    if start is None or end is None:
        raise BadRequestError("Timeline requires start_date and end_date")
    if end <= start:
        raise BadRequestError("end_date must be after start_date")


def check_start_in_future(timeline: Dict[str, Any], now: Optional[datetime] = None) -> None:
    """Creation-time only: the challenge must start strictly after now."""
    now = now or datetime.now(timezone.utc)
    start = parse_datetime(timeline.get("start_date"))
    if start is None or start <= parse_datetime(now):
        raise BadRequestError("start_date must be in the future")


def check_team_size(audience: Optional[Dict[str, Any]]) -> None:
    if not audience or not audience.get("teams_allowed", True):
        return
    max_team_size = audience.get("max_team_size")
    if max_team_size is None or max_team_size <= 1:
        raise BadRequestError("max_team_size must be greater than 1 when teams are allowed")


def check_languages(audience: Optional[Dict[str, Any]]) -> None:
    if audience is not None and not audience.get("languages"):
        raise BadRequestError("At least one language is required")


def check_milestones(timeline: Dict[str, Any]) -> None:
    """Each milestone needs a name, date and description."""
    for index, milestone in enumerate(timeline.get("milestones") or []):
        missing = [
            key for key in ("name", "date", "description")
            if not milestone.get(key) or not str(milestone.get(key)).strip()
        ]
        if missing:
            raise BadRequestError(
                f"Milestone {index + 1} is incomplete (missing: {', '.join(missing)})"
            )


def check_status_transition(current: str, new: str) -> None:
    """Raise unless ``current -> new`` is a legal status transition."""
    allowed = ALLOWED_TRANSITIONS.get(current, frozenset())
    if new not in allowed:
        logger.warning(f"Rejected status transition {current} -> {new}")
        raise BadRequestError(
            f"Cannot change status from '{current}' to '{new}'",
            error_code="INVALID_STATUS_TRANSITION",
        )


def check_accepting_submissions(challenge: Dict[str, Any]) -> None:
    status = challenge.get("status")
    if status != "active":
        raise BadRequestError(
            f"Challenge is not accepting submissions (status: {status})",
            error_code="CHALLENGE_NOT_ACTIVE",
        )


def check_document(challenge: Dict[str, Any]) -> None:
    """Invariants that must hold for every persisted challenge."""
    check_prize_total(challenge.get("prizes") or {})
    check_criteria(challenge.get("evaluation"))
    timeline = challenge.get("timeline") or {}
    check_timeline_order(timeline)
    check_milestones(timeline)
    audience = challenge.get("audience")
    check_languages(audience)
    check_team_size(audience)


def check_new_challenge(challenge: Dict[str, Any], now: Optional[datetime] = None) -> None:
    """All invariants, including the start-in-future rule."""
    check_start_in_future(challenge.get("timeline") or {}, now)
    check_document(challenge)


def missing_fields(payload: Dict[str, Any], required: List[str]) -> List[str]:
    return [key for key in required if payload.get(key) in (None, "", [], {})]
