"""
Pydantic schemas for challenge endpoints.

Defines the challenge document (with its audience, communication, submission,
prize, timeline and evaluation sub-documents), the closed enumerations it
uses, and the request/response models for the challenge routes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator


class ChallengeType(str, Enum):
    """Kind of work a challenge asks for."""
    IDEATION = "Ideation"
    DESIGN = "Design"
    DEVELOPMENT = "Development"
    DATA_SCIENCE = "Data Science"


class SubmissionFormat(str, Enum):
    ZIP = "zip"
    GIT = "git"
    URL = "url"
    FILE = "file"


class PrizeStructure(str, Enum):
    SINGLE = "single"
    TIERED = "tiered"
    MILESTONE = "milestone"


class EvaluationModel(str, Enum):
    ROLLING = "rolling"
    POST_SUBMISSION = "post-submission"


class ReviewerRole(str, Enum):
    EXPERT = "expert"
    PEER = "peer"
    MODERATOR = "moderator"


class ScoringSystem(str, Enum):
    POINTS = "points"
    PERCENTAGE = "percentage"
    CUSTOM = "custom"


class ChallengeStatus(str, Enum):
    """Challenge lifecycle status. See services.challenge_rules for transitions."""
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AnnouncementTrigger(str, Enum):
    """What caused an announcement to be posted."""
    MANUAL = "manual"
    STATUS_CHANGE = "status_change"


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _clean_string_list(values: List[str]) -> List[str]:
    """Strip entries, drop blanks and duplicates, keep first-seen order."""
    cleaned: List[str] = []
    for value in values:
        item = value.strip()
        if item and item not in cleaned:
            cleaned.append(item)
    return cleaned


# ---------------------------------------------------------------------------
# Sub-documents
# ---------------------------------------------------------------------------


class Audience(BaseModel):
    """Who may take part in a challenge."""
    geographic_constraints: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list, description="Required languages (>= 1)")
    teams_allowed: bool = True
    max_team_size: Optional[int] = Field(None, description="Required and > 1 when teams are allowed")

    @field_validator("geographic_constraints", "languages")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return _clean_string_list(v)


class Communication(BaseModel):
    forum_enabled: bool = True
    question_board_enabled: bool = True


class SubmissionRequirements(BaseModel):
    """What participants must hand in."""
    format: SubmissionFormat
    requirements: List[str] = Field(..., min_length=1)

    @field_validator("requirements")
    @classmethod
    def validate_requirements(cls, v: List[str]) -> List[str]:
        cleaned = _clean_string_list(v)
        if not cleaned:
            raise ValueError("At least one submission requirement is needed")
        return cleaned


class PrizeEntry(BaseModel):
    rank: int = Field(..., ge=1)
    amount: float = Field(..., gt=0)
    description: str = ""


class Prizes(BaseModel):
    """Prize configuration. total_prize must equal the sum of amounts."""
    structure: PrizeStructure
    amounts: List[PrizeEntry] = Field(..., min_length=1)
    total_prize: float = Field(..., gt=0)


class Milestone(BaseModel):
    """Timeline checkpoint. Name, date and description are all required; omit the milestone otherwise."""
    name: Optional[str] = None
    date: Optional[datetime] = None
    description: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class Timeline(BaseModel):
    start_date: datetime
    end_date: datetime
    milestones: List[Milestone] = Field(default_factory=list)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return as_utc(v)


class Reviewer(BaseModel):
    email: EmailStr
    role: ReviewerRole


class Criterion(BaseModel):
    """Weighted evaluation dimension. Weights across a challenge total 100."""
    name: str = ""
    weight: int = Field(..., ge=0, le=100)
    description: str = ""


class Rubric(BaseModel):
    use_ai_review: bool = False
    use_peer_review: bool = False
    scoring_system: ScoringSystem = ScoringSystem.POINTS


class Evaluation(BaseModel):
    model: EvaluationModel = EvaluationModel.POST_SUBMISSION
    reviewers: List[Reviewer] = Field(default_factory=list)
    criteria: List[Criterion] = Field(default_factory=list)
    minimum_reviews: int = Field(default=1, ge=1)
    rubric: Rubric = Field(default_factory=Rubric)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ChallengeCreateRequest(BaseModel):
    """
    Request schema for creating a challenge.

    title, problem_statement, goals, challenge_type, submission, prizes and
    timeline are required. audience, communication and evaluation fall back to
    defaults when omitted.
    """
    title: str = Field(..., min_length=1, max_length=200, description="Challenge title")
    problem_statement: str = Field(..., min_length=1, max_length=10000)
    goals: List[str] = Field(..., min_length=1, description="Ordered, de-duplicated goals")
    challenge_type: ChallengeType
    audience: Optional[Audience] = None
    communication: Communication = Field(default_factory=Communication)
    submission: SubmissionRequirements
    prizes: Prizes
    timeline: Timeline
    evaluation: Evaluation = Field(default_factory=Evaluation)

    @field_validator("title", "problem_statement")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Ensure text fields are not just whitespace."""
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace")
        return v.strip()

    @field_validator("goals")
    @classmethod
    def validate_goals(cls, v: List[str]) -> List[str]:
        cleaned = _clean_string_list(v)
        if not cleaned:
            raise ValueError("At least one goal is required")
        return cleaned


class ChallengeUpdateRequest(BaseModel):
    """
    Request schema for updating a challenge.

    All fields are optional; supplied top-level fields replace the stored
    ones wholesale. creator, announcements and submissions cannot be updated.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    problem_statement: Optional[str] = Field(None, min_length=1, max_length=10000)
    goals: Optional[List[str]] = Field(None, min_length=1)
    challenge_type: Optional[ChallengeType] = None
    audience: Optional[Audience] = None
    communication: Optional[Communication] = None
    submission: Optional[SubmissionRequirements] = None
    prizes: Optional[Prizes] = None
    timeline: Optional[Timeline] = None
    evaluation: Optional[Evaluation] = None
    status: Optional[ChallengeStatus] = None

    @field_validator("title", "problem_statement")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Field cannot be empty or whitespace")
        return v.strip() if v else None

    @field_validator("goals")
    @classmethod
    def validate_goals(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return None
        cleaned = _clean_string_list(v)
        if not cleaned:
            raise ValueError("At least one goal is required")
        return cleaned


class AnnouncementCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=5000)


class StatusChangeRequest(BaseModel):
    status: ChallengeStatus


class SubmissionCreateRequest(BaseModel):
    """A solution reference: where it lives and what it is."""
    url: str = Field(..., min_length=1, max_length=2000)
    description: str = Field(default="", max_length=5000)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("url cannot be empty or whitespace")
        return v.strip()


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class Organization(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None


class CreatorSummary(BaseModel):
    user_id: str
    name: Optional[str] = None
    organization: Optional[Organization] = None


class ReviewerResponse(BaseModel):
    email: str
    role: ReviewerRole
    name: Optional[str] = None
    expertise: Optional[List[ChallengeType]] = None


class EvaluationResponse(Evaluation):
    reviewers: List[ReviewerResponse] = Field(default_factory=list)


class AnnouncementResponse(BaseModel):
    title: str
    content: str
    trigger: AnnouncementTrigger = AnnouncementTrigger.MANUAL
    date: datetime


class SubmissionResponse(BaseModel):
    submission_id: str
    submitter: str
    url: str
    description: str = ""
    created_at: datetime


class ChallengeResponse(BaseModel):
    """
    Response schema for a single challenge.

    ``creator`` is the creator's user id, or a CreatorSummary on read
    endpoints that populate it.
    """
    challenge_id: str
    title: str
    problem_statement: str
    goals: List[str]
    challenge_type: ChallengeType
    audience: Optional[Audience] = None
    communication: Communication = Field(default_factory=Communication)
    submission: SubmissionRequirements
    prizes: Prizes
    timeline: Timeline
    evaluation: EvaluationResponse = Field(default_factory=EvaluationResponse)
    status: ChallengeStatus
    creator: Union[CreatorSummary, str]
    announcements: List[AnnouncementResponse] = Field(default_factory=list)
    submissions: List[SubmissionResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ErrorResponse(BaseModel):
    """
    Standard error response schema.

    Attributes:
        error: Error envelope with status_code, message and path
    """
    error: dict
