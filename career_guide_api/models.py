"""Pydantic models for API requests, responses and derived records."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    """Immutable camelCase record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# =============================================================================
# Derived Records
# =============================================================================


class CareerProfile(FrozenCamelModel):
    """Career-interest profile derived from quiz answers."""

    interests: tuple[str, ...] = Field(default=(), description="Interest tags from question 1")
    skills: tuple[str, ...] = Field(default=(), description="Skill tags from question 7")
    work_style: str = Field(default="", description="Preferred work style (question 2)")
    career_goals: str = Field(default="", description="Career goal sentence (question 3)")
    industry: str = Field(default="", description="Preferred industry (question 4)")
    experience: str = Field(default="", description="Experience level (question 10)")


class Recommendation(FrozenCamelModel):
    """A single parsed career recommendation."""

    title: str = Field(..., description="Job title")
    description: str = Field(..., description="Brief description of the role")
    match: int = Field(..., ge=0, le=100, description="Match percentage")


class StructuredAnalysis(FrozenCamelModel):
    """Summary, recommendations and next steps parsed from generated text."""

    summary: str = ""
    recommendations: tuple[Recommendation, ...] = ()
    next_steps: tuple[str, ...] = ()


# =============================================================================
# Chat API Models
# =============================================================================


class UserProfile(CamelModel):
    """Profile the client stores after completing the career quiz."""

    interests: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    experience: str = ""
    work_style: str = ""
    career_goals: str = ""
    industry: str = ""
    quiz_completed: bool = False


class ChatRequest(CamelModel):
    """Request body for the chat endpoint."""

    message: str = Field(..., min_length=1, description="User message")
    user_profile: UserProfile | None = Field(default=None, description="Quiz-derived profile")
    timestamp: str | None = Field(default=None, description="Client-side request timestamp")


class ChatResponse(CamelModel):
    """Chat reply from the career counsellor."""

    reply: str = Field(..., description="Assistant response")
    model: str = Field(..., description="Model that generated the reply")
    timestamp: datetime = Field(default_factory=utc_now)


# =============================================================================
# Quiz Analysis API Models
# =============================================================================


class QuizAnalysisRequest(CamelModel):
    """Request body for quiz analysis: question id -> answer code."""

    answers: dict[str, Any] = Field(..., description="Quiz answers keyed by question id")


class QuizAnalysisResponse(CamelModel):
    """Structured quiz analysis."""

    analysis: str = Field(..., description="Career profile summary")
    recommendations: list[Recommendation] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    profile: CareerProfile
    timestamp: datetime = Field(default_factory=utc_now)


# =============================================================================
# Career Assessment API Models
# =============================================================================


class CareerAssessmentRequest(CamelModel):
    """Free-form career profile for an assessment."""

    experience: str | None = None
    work_style: str | None = None
    skills: str | list[str] | None = None
    goals: str | None = None


class CareerAssessmentResponse(CamelModel):
    """Generated career assessment with the submitted profile echoed back."""

    assessment: str
    profile: CareerAssessmentRequest
    timestamp: datetime = Field(default_factory=utc_now)


# =============================================================================
# Industry Insights API Models
# =============================================================================


class IndustryInsightsResponse(CamelModel):
    """Generated outlook for one industry."""

    industry: str
    insights: str
    cached: bool = Field(default=False, description="Served from the insights cache")
    timestamp: datetime = Field(default_factory=utc_now)


# =============================================================================
# Health / Error Models
# =============================================================================


class HealthResponse(CamelModel):
    """Response for health check endpoint."""

    status: Literal["healthy", "degraded"] = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    model: str = Field(..., description="Configured Gemini model")
    version: str = Field(..., description="API version")
    gemini_configured: bool = Field(..., description="Whether an API key is configured")
    timestamp: datetime = Field(default_factory=utc_now)


class ErrorResponse(BaseModel):
    """Error body returned by every failing route."""

    error: str
    message: str
