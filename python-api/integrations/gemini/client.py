"""
Gemini Client

Thin async wrapper around the Google Generative Language ``generateContent``
REST endpoint. One prompt in, one text out; no retries, no streaming.
"""

import logging
from typing import Any, Optional

import httpx

from .exceptions import (
    EmptyGenerationError,
    GenerativeConfigError,
    GenerativeServiceError,
    GenerativeTimeoutError,
)

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Client for the Gemini generateContent API.

    Example:
        >>> async with GeminiClient(api_key="...") as gemini:
        ...     text = await gemini.generate_content("Suggest a prize structure")
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-pro",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 30.0,
    ):
        """
        Args:
            api_key: Generative Language API key
            model: Model name (default: gemini-pro)
            base_url: API base URL
            timeout: Request timeout in seconds

        Raises:
            GenerativeConfigError: If api_key is empty
        """
        if not api_key:
            raise GenerativeConfigError()

        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(base_url=base_url, timeout=httpx.Timeout(timeout))

    @staticmethod
    def extract_text(body: dict[str, Any]) -> str:
        """
        Pull the generated text out of a generateContent response body.

        Raises:
            EmptyGenerationError: If the body has no candidate text
        """
        candidates = body.get("candidates") if isinstance(body, dict) else None
        if not candidates or not isinstance(candidates, list):
            raise EmptyGenerationError("Generation returned no candidates", response=body)

        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise EmptyGenerationError("Generation returned a malformed candidate", response=body)

        text = "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        if not text.strip():
            raise EmptyGenerationError(response=body)
        return text

    async def generate_content(self, prompt: str) -> str:
        """
        Send a prompt and return the model's text.

        Args:
            prompt: Fully rendered prompt text

        Returns:
            Generated text, unmodified

        Raises:
            GenerativeTimeoutError: If the request times out
            EmptyGenerationError: If the response carries no text
            GenerativeServiceError: For any other failure
        """
        path = f"/v1beta/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        logger.info(
            "Requesting generation",
            extra={"event": "generation_start", "model": self.model, "prompt_chars": len(prompt)},
        )

        try:
            response = await self._http_client.post(
                path, params={"key": self.api_key}, json=payload
            )
        except httpx.TimeoutException as e:
            logger.error("Generation timed out", extra={"event": "generation_error"})
            raise GenerativeTimeoutError() from e
        except httpx.HTTPError as e:
            logger.error(
                "Generation request failed",
                extra={"event": "generation_error", "error": str(e)},
            )
            raise GenerativeServiceError(f"Network error: {str(e)}") from e

        if response.status_code >= 400:
            logger.error(
                "Generation rejected by upstream",
                extra={"event": "generation_error", "status_code": response.status_code},
            )
            raise GenerativeServiceError(
                f"Generative API error: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise GenerativeServiceError("Generative API returned malformed JSON") from e
        if not isinstance(body, dict):
            raise EmptyGenerationError("Generative API returned an unexpected payload")

        text = self.extract_text(body)
        logger.info(
            "Generation complete",
            extra={"event": "generation_success", "response_chars": len(text)},
        )
        return text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._http_client.aclose()

    async def close(self):
        """Close the HTTP client connection"""
        await self._http_client.aclose()
