"""
Pydantic schemas for AI suggestion endpoints.
"""

from typing import Any, List

from pydantic import BaseModel, Field

from api.schemas.challenge import ChallengeType


class AnalyzeProblemRequest(BaseModel):
    problem_statement: str = Field(..., min_length=1, max_length=10000)
    goals: List[str] = Field(default_factory=list)


class ValidateRequirementsRequest(BaseModel):
    requirements: Any = Field(..., description="Requirements list or object to review")


class SuggestPrizeRequest(BaseModel):
    challenge_type: ChallengeType
    complexity: str = Field(..., min_length=1, max_length=100, description="e.g. low, medium, high")
    duration: str = Field(..., min_length=1, max_length=100, description="e.g. 4 weeks")


class EvaluationCriteriaRequest(BaseModel):
    challenge_type: ChallengeType
    goals: List[str] = Field(default_factory=list)


class RecommendationsResponse(BaseModel):
    recommendations: str


class ValidationResponse(BaseModel):
    validation: str


class PrizeSuggestionResponse(BaseModel):
    suggestion: str


class CriteriaResponse(BaseModel):
    criteria: str
