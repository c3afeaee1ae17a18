"""
Suggestion Service

AI suggestions for parts of a challenge definition. Each operation renders a
fixed prompt template, asks a TextGenerator for text once (no retries) and
returns the text unmodified under a single response key.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Protocol

from integrations.gemini.client import GeminiClient
from integrations.gemini.exceptions import GenerativeConfigError, GenerativeServiceError
from services.errors import UpstreamServiceError

logger = logging.getLogger(__name__)


PROMPT_TEMPLATES: Dict[str, str] = {
    "analyze_problem": (
        "You are helping an organizer design an innovation challenge.\n"
        "Problem statement: {problem_statement}\n"
        "Goals: {goals}\n\n"
        "Recommend:\n"
        "1. The most suitable challenge type\n"
        "2. The target audience\n"
        "3. A submission format\n"
        "4. A prize structure\n"
        "5. A realistic timeline"
    ),
    "validate_requirements": (
        "Review these challenge submission requirements:\n"
        "{requirements}\n\n"
        "Comment on:\n"
        "1. Clarity and completeness\n"
        "2. Technical feasibility\n"
        "3. Improvements worth making\n"
        "4. Alignment with challenge best practices"
    ),
    "suggest_prize": (
        "Suggest prizes for a {challenge_type} challenge of {complexity} complexity "
        "running for {duration}.\n\n"
        "Include:\n"
        "1. A recommended prize structure\n"
        "2. Suggested amounts per rank\n"
        "3. Justification\n"
        "4. Industry benchmarks"
    ),
    "evaluation_criteria": (
        "Propose evaluation criteria for a {challenge_type} challenge with these goals: {goals}\n\n"
        "Include:\n"
        "1. Specific criteria\n"
        "2. Suggested weights totalling 100\n"
        "3. Scoring guidelines\n"
        "4. Whether AI, peer or expert review suits each criterion"
    ),
}


def render_prompt(template_id: str, parameters: Mapping[str, Any]) -> str:
    """
    Fill a named prompt template.

    Raises:
        ValueError: If the template is unknown or a parameter is missing
    """
    template = PROMPT_TEMPLATES.get(template_id)
    if template is None:
        raise ValueError(f"Unknown prompt template '{template_id}'")
    try:
        return template.format(**parameters)
    except KeyError as e:
        raise ValueError(f"Missing parameter {e} for template '{template_id}'") from e


class TextGenerator(Protocol):
    """Anything that turns a template id and parameters into text."""

    async def generate(self, template_id: str, parameters: Mapping[str, Any]) -> str:
        ...


class GeminiTextGenerator:
    """
    TextGenerator backed by the Gemini generateContent API.

    A client is opened per call so a missing API key surfaces as a
    GenerativeConfigError on use, not at application start.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-pro",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout

    async def generate(self, template_id: str, parameters: Mapping[str, Any]) -> str:
        prompt = render_prompt(template_id, parameters)
        async with GeminiClient(
            api_key=self.api_key,
            model=self.model,
            base_url=self.base_url,
            timeout=self.timeout,
        ) as client:
            return await client.generate_content(prompt)


async def _run(
    generator: TextGenerator,
    template_id: str,
    parameters: Mapping[str, Any],
    response_key: str,
) -> Dict[str, str]:
    try:
        text = await generator.generate(template_id, parameters)
    except GenerativeConfigError as e:
        logger.error(f"Suggestion '{template_id}' unavailable: {e.message}")
        raise UpstreamServiceError("AI suggestions are not configured")
    except GenerativeServiceError as e:
        logger.error(f"Suggestion '{template_id}' failed: {e.message}", exc_info=True)
        raise UpstreamServiceError("Failed to generate suggestion. Please try again later.")

    logger.info(f"Generated '{template_id}' suggestion ({len(text)} chars)")
    return {response_key: text}


async def analyze_problem(
    generator: TextGenerator, problem_statement: str, goals: List[str]
) -> Dict[str, str]:
    """Recommendations for type, audience, submission format, prizes and timeline."""
    return await _run(
        generator,
        "analyze_problem",
        {"problem_statement": problem_statement, "goals": ", ".join(goals)},
        "recommendations",
    )


async def validate_requirements(generator: TextGenerator, requirements: Any) -> Dict[str, str]:
    """Critique of a submission requirements list (any JSON-compatible shape)."""
    return await _run(
        generator,
        "validate_requirements",
        {"requirements": json.dumps(requirements, indent=2)},
        "validation",
    )


async def suggest_prize(
    generator: TextGenerator, challenge_type: str, complexity: str, duration: str
) -> Dict[str, str]:
    return await _run(
        generator,
        "suggest_prize",
        {"challenge_type": challenge_type, "complexity": complexity, "duration": duration},
        "suggestion",
    )


async def generate_evaluation_criteria(
    generator: TextGenerator, challenge_type: str, goals: List[str]
) -> Dict[str, str]:
    return await _run(
        generator,
        "evaluation_criteria",
        {"challenge_type": challenge_type, "goals": ", ".join(goals)},
        "criteria",
    )
