"""Gemini generative-language client over the REST API."""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog
from fastapi import Request

from career_guide_api.analysis_parser import (
    NEXT_STEPS_HEADER,
    PROFILE_HEADER,
    RECOMMENDATIONS_HEADER,
)
from career_guide_api.config import get_settings

logger = structlog.get_logger()


class GeminiError(Exception):
    """Base exception for Gemini client errors."""

    pass


class GeminiAuthError(GeminiError):
    """Raised when the API key is missing or rejected."""

    pass


class GeminiRateLimitError(GeminiError):
    """Raised when the Gemini quota is exhausted."""

    pass


@dataclass
class LLMResponse:
    """Response from a generateContent call."""

    content: str
    tokens_used: int
    finish_reason: str | None = None


MOCK_ANALYSIS = f"""{PROFILE_HEADER}
This is a mock analysis (MOCK_GEMINI=true). You enjoy solving problems and prefer structured work.

{RECOMMENDATIONS_HEADER}
1. Data Analyst - Turns raw data into business insight. Match: 88%
2. Software Engineer - Builds and maintains software products. Match: 82%
3. Product Manager - Guides products from idea to launch. Match: 75%

{NEXT_STEPS_HEADER}
- Set GEMINI_API_KEY to enable real AI responses
- Take an introductory data analysis course
- Build a small portfolio project
- Talk to people working in your target role
- Update your resume with relevant skills"""


class GeminiClient:
    """Async client for the Gemini generateContent API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_output_tokens: int | None = None,
        temperature: float | None = None,
        timeout: float | None = None,
    ):
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key. Defaults to config value.
            base_url: API base URL. Defaults to config value.
            model: Model ID to use. Defaults to config value.
            max_output_tokens: Maximum tokens in response. Defaults to config value.
            temperature: Sampling temperature. Defaults to config value.
            timeout: Request timeout in seconds. Defaults to config value.
        """
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self._base_url = base_url or settings.gemini_base_url
        self._model = model or settings.gemini_model
        self._max_output_tokens = max_output_tokens or settings.llm_max_tokens
        self._temperature = temperature if temperature is not None else settings.llm_temperature
        self._timeout = timeout or settings.gemini_timeout_seconds
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GeminiClient":
        """Enter async context."""
        await self.connect()
        return self

    async def __aexit__(self, _exc_type: Any, _exc_val: Any, _exc_tb: Any) -> None:
        """Exit async context."""
        await self.close()

    @property
    def model(self) -> str:
        return self._model

    @property
    def is_configured(self) -> bool:
        """Check if the client has an API key."""
        return bool(self._api_key and self._api_key.strip())

    async def connect(self) -> None:
        """Create the HTTP client.

        Without an API key there is nothing to call, so no HTTP client is
        created; requests are then served by the mock or rejected.
        """
        if not self.is_configured:
            logger.info("Gemini API key not set, skipping HTTP client creation", model=self._model)
            return

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "x-goog-api-key": self._api_key,
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(self._timeout, connect=10.0),
        )
        logger.info("Gemini client connected", model=self._model)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Gemini client closed")

    def _build_payload(
        self,
        prompt: str,
        temperature: float | None,
        top_p: float | None,
        top_k: int | None,
        max_output_tokens: int | None,
    ) -> dict[str, Any]:
        """Build the generateContent request body."""
        generation_config = {
            "temperature": temperature if temperature is not None else self._temperature,
            "maxOutputTokens": max_output_tokens or self._max_output_tokens,
        }
        if top_p is not None:
            generation_config["topP"] = top_p
        if top_k is not None:
            generation_config["topK"] = top_k

        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

    async def generate(
        self,
        prompt: str,
        *,
        temperature: float | None = None,
        top_p: float | None = None,
        top_k: int | None = None,
        max_output_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate text for a single-turn prompt.

        Args:
            prompt: Full prompt text sent as one user turn.
            temperature: Sampling temperature. Defaults to the client value.
            top_p: Nucleus sampling cutoff, omitted when None.
            top_k: Top-k sampling cutoff, omitted when None.
            max_output_tokens: Response token limit. Defaults to the client value.

        Returns:
            LLM response with content and token usage.

        Raises:
            GeminiAuthError: If no API key is set with MOCK_GEMINI=false, or the key is rejected.
            GeminiRateLimitError: If the quota is exhausted.
            GeminiError: If the request fails for any other reason.
        """
        if not self.is_configured:
            if get_settings().mock_gemini:
                logger.info("MOCK_GEMINI=true: Using mock LLM response")
                return self._mock_generate(prompt)
            error_msg = (
                "Gemini API key not configured with MOCK_GEMINI=false. "
                "Either set GEMINI_API_KEY or set MOCK_GEMINI=true for testing."
            )
            logger.error(error_msg)
            raise GeminiAuthError(error_msg)

        if not self._client:
            await self.connect()

        payload = self._build_payload(prompt, temperature, top_p, top_k, max_output_tokens)

        try:
            response = await self._client.post(
                f"/models/{self._model}:generateContent", json=payload
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            self._handle_http_error(e)
            raise
        except httpx.RequestError as e:
            logger.error("Gemini request failed", error=str(e))
            raise GeminiError(f"Request failed: {e}") from e
        except ValueError as e:
            logger.error("Gemini returned a non-JSON body", error=str(e))
            raise GeminiError(f"Invalid response body: {e}") from e

        try:
            return self._parse_response(data)
        except (AttributeError, TypeError, KeyError, IndexError) as e:
            logger.error("Gemini response has an unexpected shape", error=str(e))
            raise GeminiError(f"Malformed response: {e}") from e

    def _parse_response(self, data: dict[str, Any]) -> LLMResponse:
        """Extract text, token usage and finish reason from a generateContent body."""
        candidates = data.get("candidates") or []
        if not candidates:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason")
            raise GeminiError(f"No candidates returned (block reason: {block_reason})")

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        content = "".join(part.get("text") or "" for part in parts)
        tokens_used = (data.get("usageMetadata") or {}).get("totalTokenCount") or 0
        finish_reason = candidate.get("finishReason")

        logger.info(
            "LLM response received",
            tokens=tokens_used,
            finish_reason=finish_reason,
        )

        return LLMResponse(
            content=content,
            tokens_used=tokens_used,
            finish_reason=finish_reason,
        )

    async def list_models(self, limit: int = 5) -> list[str]:
        """List model names available to the configured key.

        Raises:
            GeminiAuthError: If no API key is configured.
            GeminiError: If the request fails.
        """
        if not self.is_configured:
            raise GeminiAuthError("Gemini API key not configured")

        if not self._client:
            await self.connect()

        try:
            response = await self._client.get("/models", params={"pageSize": limit})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._handle_http_error(e)
            raise
        except httpx.RequestError as e:
            raise GeminiError(f"Request failed: {e}") from e

        models = response.json().get("models", [])
        return [model["name"] for model in models[:limit] if "name" in model]

    def _handle_http_error(self, error: httpx.HTTPStatusError) -> None:
        """Translate Gemini HTTP errors into client exceptions."""
        status = error.response.status_code
        try:
            detail = error.response.json().get("error", {}).get("message", str(error))
        except Exception:
            detail = str(error)

        logger.error("Gemini API error", status=status, detail=detail)

        if status in (401, 403):
            raise GeminiAuthError(f"Authentication failed: {detail}")
        elif status == 429:
            raise GeminiRateLimitError(f"Rate limit exceeded: {detail}")
        else:
            raise GeminiError(f"API error ({status}): {detail}")

    def _mock_generate(self, prompt: str) -> LLMResponse:
        """Return a canned response shaped like the prompt asks for."""
        if RECOMMENDATIONS_HEADER in prompt:
            content = MOCK_ANALYSIS
        else:
            content = (
                "This is a mock response (MOCK_GEMINI=true). "
                f"In production, this would be a real AI response to: '{prompt[-50:]}'. "
                "Set GEMINI_API_KEY to enable real AI responses."
            )
        return LLMResponse(content=content, tokens_used=len(content.split()), finish_reason="STOP")


def get_gemini_client(request: Request) -> GeminiClient:
    """FastAPI dependency returning the client created in the app lifespan."""
    return request.app.state.gemini_client
