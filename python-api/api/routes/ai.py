"""
AI Suggestion API Routes

Endpoints that ask the generative-text service for help with parts of a
challenge definition. Each answers with the generated text under one key.
"""

import logging
from typing import Any, Dict

from api.dependencies import get_current_user, get_text_generator
from api.schemas.ai import (
    AnalyzeProblemRequest,
    CriteriaResponse,
    EvaluationCriteriaRequest,
    PrizeSuggestionResponse,
    RecommendationsResponse,
    SuggestPrizeRequest,
    ValidateRequirementsRequest,
    ValidationResponse,
)
from api.schemas.challenge import ErrorResponse
from fastapi import APIRouter, Depends
from services import suggestion_service
from services.suggestion_service import TextGenerator

# Configure logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/ai",
    tags=["AI Suggestions"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        500: {"model": ErrorResponse, "description": "Generation failed or not configured"},
    },
)


@router.post(
    "/analyze-problem",
    response_model=RecommendationsResponse,
    summary="Analyze a problem statement",
)
async def analyze_problem(
    request: AnalyzeProblemRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    generator: TextGenerator = Depends(get_text_generator),
) -> RecommendationsResponse:
    logger.info(f"Problem analysis requested by user {current_user.get('id')}")
    result = await suggestion_service.analyze_problem(
        generator, request.problem_statement, request.goals
    )
    return RecommendationsResponse(**result)


@router.post(
    "/validate-requirements",
    response_model=ValidationResponse,
    summary="Review submission requirements",
)
async def validate_requirements(
    request: ValidateRequirementsRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    generator: TextGenerator = Depends(get_text_generator),
) -> ValidationResponse:
    result = await suggestion_service.validate_requirements(generator, request.requirements)
    return ValidationResponse(**result)


@router.post(
    "/suggest-prize",
    response_model=PrizeSuggestionResponse,
    summary="Suggest a prize structure",
)
async def suggest_prize(
    request: SuggestPrizeRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    generator: TextGenerator = Depends(get_text_generator),
) -> PrizeSuggestionResponse:
    result = await suggestion_service.suggest_prize(
        generator, request.challenge_type.value, request.complexity, request.duration
    )
    return PrizeSuggestionResponse(**result)


@router.post(
    "/evaluation-criteria",
    response_model=CriteriaResponse,
    summary="Suggest evaluation criteria",
)
async def evaluation_criteria(
    request: EvaluationCriteriaRequest,
    current_user: Dict[str, Any] = Depends(get_current_user),
    generator: TextGenerator = Depends(get_text_generator),
) -> CriteriaResponse:
    result = await suggestion_service.generate_evaluation_criteria(
        generator, request.challenge_type.value, request.goals
    )
    return CriteriaResponse(**result)
