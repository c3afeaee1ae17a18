"""
Pydantic schemas for user endpoints.

Defines request and response models for registration, login and profile
management.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, EmailStr, Field, field_validator

from api.schemas.challenge import ChallengeStatus, ChallengeType, Organization
from integrations.auth.passwords import MAX_PASSWORD_BYTES, password_too_long


class UserRole(str, Enum):
    """Platform role of a user."""
    PARTICIPANT = "participant"
    REVIEWER = "reviewer"
    ADMINISTRATOR = "administrator"


class ParticipationRole(str, Enum):
    PARTICIPANT = "participant"
    REVIEWER = "reviewer"
    MENTOR = "mentor"


class NotificationPreferences(BaseModel):
    email: bool = True
    platform: bool = True


class Preferences(BaseModel):
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    language: str = "en"


class RegisterRequest(BaseModel):
    """
    Request schema for registering a user.

    Attributes:
        name: Display name (required)
        email: Unique email address (stored lower-cased)
        password: Password, at least 6 characters and at most 72 bytes
        role: Optional platform role (defaults to participant)
        expertise: Optional set of challenge types
        organization: Optional organization name and role
    """
    name: str = Field(..., min_length=1, max_length=200, description="Display name")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=6, max_length=72, description="Password")
    role: UserRole = Field(default=UserRole.PARTICIPANT)
    expertise: List[ChallengeType] = Field(default_factory=list)
    organization: Optional[Organization] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure name is not just whitespace."""
        if not v.strip():
            raise ValueError("Name cannot be empty or whitespace")
        return v.strip()

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v

    @field_validator("expertise")
    @classmethod
    def dedupe_expertise(cls, v: List[ChallengeType]) -> List[ChallengeType]:
        return list(dict.fromkeys(v))


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class ProfileUpdateRequest(BaseModel):
    """Only supplied fields change."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    expertise: Optional[List[ChallengeType]] = None
    organization: Optional[Organization] = None
    preferences: Optional[Preferences] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Name cannot be empty or whitespace")
        return v.strip() if v else None

    @field_validator("expertise")
    @classmethod
    def dedupe_expertise(cls, v: Optional[List[ChallengeType]]) -> Optional[List[ChallengeType]]:
        return list(dict.fromkeys(v)) if v is not None else None


class TokenResponse(BaseModel):
    token: str


class ChallengeSummary(BaseModel):
    challenge_id: str
    title: Optional[str] = None
    status: Optional[ChallengeStatus] = None
    challenge_type: Optional[ChallengeType] = None


class Participation(BaseModel):
    challenge: Union[ChallengeSummary, str]
    role: ParticipationRole = ParticipationRole.PARTICIPANT
    joined_at: Optional[datetime] = None


class UserResponse(BaseModel):
    """
    Response schema for the authenticated user's profile.

    The password hash is never part of this model. created_challenges and
    participating_challenges[].challenge are populated with summaries; ids
    whose challenge no longer resolves are returned as plain strings.
    """
    user_id: str
    name: str
    email: str
    role: UserRole = UserRole.PARTICIPANT
    expertise: List[ChallengeType] = Field(default_factory=list)
    organization: Optional[Organization] = None
    preferences: Preferences = Field(default_factory=Preferences)
    created_challenges: List[Union[ChallengeSummary, str]] = Field(default_factory=list)
    participating_challenges: List[Participation] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class ReviewerProfile(BaseModel):
    user_id: str
    name: str
    email: str
    expertise: List[ChallengeType] = Field(default_factory=list)
    organization: Optional[Organization] = None
