"""
Tests for Suggestion Service
"""

from unittest.mock import AsyncMock, patch

import pytest
from integrations.gemini.exceptions import (
    EmptyGenerationError,
    GenerativeConfigError,
    GenerativeTimeoutError,
)
from services.errors import UpstreamServiceError
from services.suggestion_service import (
    PROMPT_TEMPLATES,
    GeminiTextGenerator,
    analyze_problem,
    generate_evaluation_criteria,
    render_prompt,
    suggest_prize,
    validate_requirements,
)


@pytest.fixture
def generator():
    mock = AsyncMock()
    mock.generate = AsyncMock(return_value="generated text")
    return mock


class TestRenderPrompt:
    def test_templates_cover_every_operation(self):
        assert set(PROMPT_TEMPLATES) == {
            "analyze_problem",
            "validate_requirements",
            "suggest_prize",
            "evaluation_criteria",
        }

    def test_fills_parameters(self):
        prompt = render_prompt(
            "suggest_prize",
            {"challenge_type": "Design", "complexity": "high", "duration": "6 weeks"},
        )

        assert "Design challenge of high complexity running for 6 weeks" in prompt

    def test_unknown_template(self):
        with pytest.raises(ValueError, match="Unknown prompt template"):
            render_prompt("poem", {})

    def test_missing_parameter(self):
        with pytest.raises(ValueError, match="Missing parameter"):
            render_prompt("suggest_prize", {"challenge_type": "Design"})


class TestOperations:
    @pytest.mark.asyncio
    async def test_analyze_problem(self, generator):
        result = await analyze_problem(generator, "Dirty water", ["Cheap", "Durable"])

        assert result == {"recommendations": "generated text"}
        generator.generate.assert_awaited_once_with(
            "analyze_problem", {"problem_statement": "Dirty water", "goals": "Cheap, Durable"}
        )

    @pytest.mark.asyncio
    async def test_validate_requirements_dumps_json(self, generator):
        result = await validate_requirements(generator, ["Working demo", "README"])

        assert result == {"validation": "generated text"}
        parameters = generator.generate.call_args[0][1]
        assert '"Working demo"' in parameters["requirements"]

    @pytest.mark.asyncio
    async def test_suggest_prize(self, generator):
        result = await suggest_prize(generator, "Development", "medium", "4 weeks")

        assert result == {"suggestion": "generated text"}

    @pytest.mark.asyncio
    async def test_evaluation_criteria(self, generator):
        result = await generate_evaluation_criteria(generator, "Ideation", ["Novelty"])

        assert result == {"criteria": "generated text"}
        generator.generate.assert_awaited_once_with(
            "evaluation_criteria", {"challenge_type": "Ideation", "goals": "Novelty"}
        )

    @pytest.mark.asyncio
    async def test_text_returned_unmodified(self, generator):
        generator.generate.return_value = "  **Markdown**\n\n- kept as is  "

        result = await suggest_prize(generator, "Design", "low", "1 week")

        assert result["suggestion"] == "  **Markdown**\n\n- kept as is  "

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [GenerativeConfigError(), GenerativeTimeoutError(), EmptyGenerationError()],
    )
    async def test_upstream_failures_become_500(self, generator, error):
        generator.generate.side_effect = error

        with pytest.raises(UpstreamServiceError) as exc_info:
            await analyze_problem(generator, "Dirty water", [])

        assert exc_info.value.status_code == 500


class TestGeminiTextGenerator:
    @pytest.mark.asyncio
    async def test_missing_key_raises_config_error(self):
        generator = GeminiTextGenerator(api_key="")

        with pytest.raises(GenerativeConfigError):
            await generator.generate("suggest_prize", {
                "challenge_type": "Design", "complexity": "low", "duration": "1 week",
            })

    @pytest.mark.asyncio
    async def test_renders_prompt_and_calls_gemini(self):
        generator = GeminiTextGenerator(api_key="gemini-key")

        with patch(
            "integrations.gemini.client.GeminiClient.generate_content",
            new_callable=AsyncMock,
            return_value="answer",
        ) as mock_generate:
            text = await generator.generate("suggest_prize", {
                "challenge_type": "Design", "complexity": "low", "duration": "1 week",
            })

        assert text == "answer"
        prompt = mock_generate.call_args[0][0]
        assert "Design challenge of low complexity" in prompt
