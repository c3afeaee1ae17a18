"""
Challenge Draft

Immutable, step-by-step builder for a challenge creation payload. Each
``apply_*`` step validates its own part of the challenge and returns a new
draft with that step marked complete; ``to_payload`` produces the body for
``POST /api/challenges`` once the required steps are done.

Example:
    >>> draft = (
    ...     ChallengeDraft()
    ...     .apply_intake("Clean water", "Design a filter", ["Cheap"], "Design")
    ...     .apply_submission("url", ["Link to prototype"])
    ...     .apply_prizes("single", [{"rank": 1, "amount": 500}])
    ...     .apply_timeline(start, end)
    ... )
    >>> payload = draft.to_payload()
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from api.schemas.challenge import (
    Audience,
    ChallengeCreateRequest,
    ChallengeType,
    Communication,
    Criterion,
    Evaluation,
    EvaluationModel,
    Milestone,
    PrizeEntry,
    Prizes,
    Reviewer,
    Rubric,
    SubmissionRequirements,
    Timeline,
    as_utc,
)
from services.challenge_rules import is_valid_criteria

STEPS = ("intake", "audience", "submission", "prizes", "timeline", "evaluation")
REQUIRED_STEPS = ("intake", "submission", "prizes", "timeline")

DEFAULT_MAX_TEAM_SIZE = 5

DEFAULT_MILESTONES = (
    ("Registration Opens", "Start accepting participant registrations"),
    ("Registration Closes", "Last day to register for the challenge"),
    ("Submission Opens", "Start accepting challenge submissions"),
    ("Submission Closes", "Final deadline for all submissions"),
    ("Review Period", "Evaluation of submitted solutions"),
    ("Winners Announced", "Announcement of challenge winners"),
)


class DraftStepError(ValueError):
    """A wizard step was given invalid input."""

    def __init__(self, step: str, errors: List[str]):
        super().__init__(f"{step}: {'; '.join(errors)}")
        self.step = step
        self.errors = errors


class DraftIncompleteError(ValueError):
    """to_payload was called before every required step was applied."""

    def __init__(self, missing: Sequence[str]):
        super().__init__(f"Draft is missing steps: {', '.join(missing)}")
        self.missing = list(missing)


def _amount(entry: Any) -> float:
    if isinstance(entry, dict):
        value = entry.get("amount")
    else:
        value = getattr(entry, "amount", None)
    # Form input arrives as strings
    return float(value) if value not in (None, "") else 0.0


def calculate_total_prize(amounts: Iterable[Any]) -> float:
    """Sum of the prize amounts (dicts or PrizeEntry objects)."""
    return sum(_amount(entry) for entry in amounts)


def default_milestones(start: datetime, end: datetime) -> List[Milestone]:
    """
    Six standard milestones spread over the challenge: at the start, 20% and
    30% in, 20% and 10% before the end, and at the end.
    """
    start, end = as_utc(start), as_utc(end)
    duration = end - start
    dates = (
        start,
        start + duration * 0.2,
        start + duration * 0.3,
        end - duration * 0.2,
        end - duration * 0.1,
        end,
    )
    return [
        Milestone(name=name, date=date, description=description)
        for (name, description), date in zip(DEFAULT_MILESTONES, dates)
    ]


def _step_errors(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        if error["loc"] else error["msg"]
        for error in exc.errors()
    ]


class ChallengeDraft(BaseModel):
    """Partially built challenge. Every step returns a new draft."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    problem_statement: Optional[str] = None
    goals: Tuple[str, ...] = ()
    challenge_type: Optional[ChallengeType] = None
    audience: Optional[Audience] = None
    communication: Communication = Communication()
    submission: Optional[SubmissionRequirements] = None
    prizes: Optional[Prizes] = None
    timeline: Optional[Timeline] = None
    evaluation: Optional[Evaluation] = None
    completed_steps: Tuple[str, ...] = ()

    def _with(self, step: str, **changes: Any) -> "ChallengeDraft":
        completed = self.completed_steps
        if step not in completed:
            completed = tuple(s for s in STEPS if s in completed or s == step)
        return self.model_copy(update={**changes, "completed_steps": completed})

    @property
    def missing_steps(self) -> List[str]:
        return [step for step in REQUIRED_STEPS if step not in self.completed_steps]

    @property
    def total_prize(self) -> float:
        return self.prizes.total_prize if self.prizes else 0

    def apply_intake(
        self,
        title: str,
        problem_statement: str,
        goals: Sequence[str],
        challenge_type: Any,
    ) -> "ChallengeDraft":
        errors = []
        if not title or not title.strip():
            errors.append("Title is required")
        if not problem_statement or not problem_statement.strip():
            errors.append("Problem statement is required")
        cleaned_goals = list(dict.fromkeys(g.strip() for g in goals if g and g.strip()))
        if not cleaned_goals:
            errors.append("At least one goal is required")
        if not challenge_type:
            errors.append("Challenge type is required")
        if errors:
            raise DraftStepError("intake", errors)

        try:
            challenge_type = ChallengeType(challenge_type)
        except ValueError:
            raise DraftStepError("intake", [f"Unknown challenge type '{challenge_type}'"])

        return self._with(
            "intake",
            title=title.strip(),
            problem_statement=problem_statement.strip(),
            goals=tuple(cleaned_goals),
            challenge_type=challenge_type,
        )

    def apply_audience(
        self,
        languages: Sequence[str],
        geographic_constraints: Sequence[str] = (),
        teams_allowed: bool = True,
        max_team_size: Optional[int] = DEFAULT_MAX_TEAM_SIZE,
        communication: Optional[Communication] = None,
    ) -> "ChallengeDraft":
        audience = Audience(
            languages=list(languages),
            geographic_constraints=list(geographic_constraints),
            teams_allowed=teams_allowed,
            max_team_size=max_team_size if teams_allowed else None,
        )
        errors = []
        if not audience.languages:
            errors.append("At least one language is required")
        if teams_allowed and (max_team_size is None or max_team_size <= 1):
            errors.append("Maximum team size must be greater than 1")
        if errors:
            raise DraftStepError("audience", errors)

        return self._with(
            "audience",
            audience=audience,
            communication=communication or self.communication,
        )

    def apply_submission(self, format: Any, requirements: Sequence[str]) -> "ChallengeDraft":
        try:
            submission = SubmissionRequirements(format=format, requirements=list(requirements))
        except ValidationError as e:
            raise DraftStepError("submission", _step_errors(e))
        return self._with("submission", submission=submission)

    def apply_prizes(self, structure: Any, amounts: Sequence[Any]) -> "ChallengeDraft":
        try:
            values = [_amount(entry) for entry in amounts]
        except (TypeError, ValueError):
            raise DraftStepError("prizes", ["Prize amounts must be numbers"])

        errors = []
        if not amounts:
            errors.append("At least one prize amount is required")
        if any(value <= 0 for value in values):
            errors.append("All prize amounts must be greater than 0")
        total = sum(values)
        if total <= 0:
            errors.append("Total prize pool must be greater than 0")
        if errors:
            raise DraftStepError("prizes", errors)

        try:
            prizes = Prizes(
                structure=structure,
                amounts=[
                    entry if isinstance(entry, PrizeEntry) else PrizeEntry(**entry)
                    for entry in amounts
                ],
                total_prize=total,
            )
        except (ValidationError, TypeError) as e:
            details = _step_errors(e) if isinstance(e, ValidationError) else [str(e)]
            raise DraftStepError("prizes", details)
        return self._with("prizes", prizes=prizes)

    def apply_timeline(
        self,
        start_date: datetime,
        end_date: datetime,
        milestones: Optional[Sequence[Any]] = None,
    ) -> "ChallengeDraft":
        """Record the timeline. Without milestones the defaults are used."""
        if not start_date or not end_date:
            raise DraftStepError("timeline", ["Start and end dates are required"])
        if as_utc(end_date) <= as_utc(start_date):
            raise DraftStepError("timeline", ["End date must be after start date"])

        if milestones is None:
            milestone_models = default_milestones(start_date, end_date)
        else:
            milestone_models = [
                m if isinstance(m, Milestone) else Milestone(**m) for m in milestones
            ]
        incomplete = [
            str(index + 1)
            for index, m in enumerate(milestone_models)
            if not (m.name and m.name.strip() and m.date and m.description and m.description.strip())
        ]
        if incomplete:
            raise DraftStepError(
                "timeline", [f"Milestones must be complete (check: {', '.join(incomplete)})"]
            )

        timeline = Timeline(start_date=start_date, end_date=end_date, milestones=milestone_models)
        return self._with("timeline", timeline=timeline)

    def apply_evaluation(
        self,
        criteria: Sequence[Any],
        reviewers: Sequence[Any] = (),
        model: Any = EvaluationModel.POST_SUBMISSION,
        minimum_reviews: int = 1,
        rubric: Optional[Rubric] = None,
    ) -> "ChallengeDraft":
        errors = []
        criteria_data = [c.model_dump() if isinstance(c, Criterion) else dict(c) for c in criteria]
        if not is_valid_criteria(criteria_data):
            errors.append(
                "Each criterion needs a name, description and weight, and weights must total 100"
            )
        reviewer_data = [r.model_dump() if isinstance(r, Reviewer) else dict(r) for r in reviewers]
        if any(not r.get("email") or not r.get("role") for r in reviewer_data):
            errors.append("Each reviewer needs an email and a role")
        if errors:
            raise DraftStepError("evaluation", errors)

        try:
            evaluation = Evaluation(
                model=model,
                reviewers=reviewer_data,
                criteria=criteria_data,
                minimum_reviews=minimum_reviews,
                rubric=rubric or Rubric(),
            )
        except ValidationError as e:
            raise DraftStepError("evaluation", _step_errors(e))
        return self._with("evaluation", evaluation=evaluation)

    def to_payload(self) -> Dict[str, Any]:
        """
        Build the creation request body.

        Raises:
            DraftIncompleteError: If a required step has not been applied
        """
        if self.missing_steps:
            raise DraftIncompleteError(self.missing_steps)

        request = ChallengeCreateRequest(
            title=self.title,
            problem_statement=self.problem_statement,
            goals=list(self.goals),
            challenge_type=self.challenge_type,
            audience=self.audience,
            communication=self.communication,
            submission=self.submission,
            prizes=self.prizes,
            timeline=self.timeline,
            evaluation=self.evaluation or Evaluation(),
        )
        return request.model_dump(mode="json")
