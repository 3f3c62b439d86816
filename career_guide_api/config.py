"""Environment configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Mock control (opt-in feature gate for testing)
    mock_gemini: bool = False  # Use canned LLM responses when no API key is set

    # Gemini configuration
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.0-flash-001"
    gemini_timeout_seconds: float = 60.0
    llm_max_tokens: int = 1000
    llm_temperature: float = 0.7
    llm_top_p: float = 0.8
    llm_top_k: int = 40

    # Industry insights cache
    insights_cache_ttl: int = 600  # 10 minutes, 0 disables
    insights_cache_size: int = 64
    default_industry: str = "technology"

    # Rate limiting
    rate_limit_per_minute: int = 30

    # Server configuration
    service_name: str = "AI Career Guide Backend"
    port: int = 3000
    host: str = "0.0.0.0"
    cors_allow_origins: list[str] = ["*"]
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    environment: Literal["development", "production"] = "development"

    # System prompt for the career counsellor persona
    system_prompt: str = """You are an expert AI Career Counselor. You provide personalized, actionable career advice with deep knowledge of:
- Global job market trends
- Industry-specific insights and salary ranges
- Skills development and certification paths
- Career transition strategies
- Interview preparation and resume optimization
- Emerging technologies and their career impact

PERSONALITY: Professional yet conversational, encouraging, and practical. Always provide specific, actionable advice."""

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def has_gemini_key(self) -> bool:
        """Check if a Gemini API key is configured."""
        return bool(self.gemini_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
