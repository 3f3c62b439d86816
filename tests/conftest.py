"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest

# Set test environment variables before importing app modules
os.environ["GEMINI_API_KEY"] = ""
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("MOCK_GEMINI", "true")
# Increase rate limit for testing
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")

from career_guide_api.config import Settings  # noqa: E402
from career_guide_api.gemini_client import GeminiError, LLMResponse  # noqa: E402


@pytest.fixture(autouse=True)
def reset_caches() -> Iterator[None]:
    """Reset cached settings and rate limiter storage before each test."""
    from career_guide_api.config import get_settings

    get_settings.cache_clear()

    try:
        from career_guide_api.main import limiter

        if hasattr(limiter, "_storage") and limiter._storage:
            limiter._storage.reset()
    except (ImportError, AttributeError):
        pass

    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Callable[..., Settings]:
    """Fixture to set test settings."""

    def _mock_settings(**kwargs: str) -> Settings:
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        from career_guide_api.config import get_settings

        get_settings.cache_clear()
        return get_settings()

    return _mock_settings


class FakeGeminiClient:
    """Stand-in for GeminiClient that records prompts and returns canned text."""

    def __init__(
        self,
        content: str = "Fake reply",
        error: Exception | None = None,
        configured: bool = True,
    ):
        self.content = content
        self.error = error
        self.configured = configured
        self.calls: list[dict] = []

    @property
    def model(self) -> str:
        return "gemini-test"

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def generate(self, prompt: str, **generation) -> LLMResponse:
        self.calls.append({"prompt": prompt, **generation})
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, tokens_used=42, finish_reason="STOP")


@pytest.fixture
def fake_gemini() -> FakeGeminiClient:
    return FakeGeminiClient()


@pytest.fixture
def failing_gemini() -> FakeGeminiClient:
    return FakeGeminiClient(error=GeminiError("API error (500): boom"))


@pytest.fixture
def make_gemini() -> Callable[..., FakeGeminiClient]:
    """Factory for fake Gemini clients with custom content or errors."""

    def _make(**kwargs: Any) -> FakeGeminiClient:
        return FakeGeminiClient(**kwargs)

    return _make
