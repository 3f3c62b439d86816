"""FastAPI application entrypoint for the AI Career Guide API."""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from career_guide_api import __version__
from career_guide_api.analysis_parser import parse_analysis
from career_guide_api.config import get_settings
from career_guide_api.gemini_client import (
    GeminiAuthError,
    GeminiClient,
    GeminiError,
    get_gemini_client,
)
from career_guide_api.insights_cache import InsightsCache
from career_guide_api.models import (
    CareerAssessmentRequest,
    CareerAssessmentResponse,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    IndustryInsightsResponse,
    QuizAnalysisRequest,
    QuizAnalysisResponse,
)
from career_guide_api.observability import (
    generate_trace_id,
    log_llm_request,
    log_llm_response,
    set_trace_id,
)
from career_guide_api.profile_extractor import extract_profile
from career_guide_api.prompts import (
    build_assessment_prompt,
    build_chat_prompt,
    build_insights_prompt,
    build_quiz_analysis_prompt,
)

settings = get_settings()

logging.basicConfig(format="%(message)s", level=settings.log_level)

# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Rate limiter
limiter = Limiter(key_func=get_remote_address)


class APIError(Exception):
    """Error rendered as an ``{error, message}`` body with the given status."""

    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message


# Per-route bodies for a missing body or a bad required field: (field, error, message)
VALIDATION_ERRORS = {
    "/api/chat": ("message", "Invalid request format", "Message is required"),
    "/api/quiz-analysis": ("answers", "Invalid request", "Quiz answers are required"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the Gemini client and insights cache, close the client on shutdown."""
    logger.info("Starting AI Career Guide API", version=__version__, port=settings.port)

    gemini_client = GeminiClient()
    await gemini_client.connect()
    app.state.gemini_client = gemini_client
    app.state.insights_cache = InsightsCache()

    if not gemini_client.is_configured:
        logger.warning("GEMINI_API_KEY not configured", mock_gemini=settings.mock_gemini)
    else:
        logger.info("Gemini API key configured", model=gemini_client.model)
        try:
            models = await gemini_client.list_models(limit=5)
            logger.info("Available Gemini models", models=models)
        except GeminiError as e:
            logger.warning("Could not list Gemini models", error=str(e))

    yield

    logger.info("Shutting down AI Career Guide API")
    await gemini_client.close()


# Create FastAPI app
app = FastAPI(
    title="AI Career Guide API",
    description="Career guidance chat, quiz analysis and industry insights powered by Gemini",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def trace_id_middleware(request: Request, call_next):
    """Add trace ID to every request for log correlation."""
    trace_id = request.headers.get("X-Trace-ID", generate_trace_id())
    set_trace_id(trace_id)

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(trace_id=trace_id)

    response = await call_next(request)
    response.headers["X-Trace-ID"] = trace_id
    return response


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

Instrumentator().instrument(app).expose(app)


# =============================================================================
# Error Handlers
# =============================================================================


def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return _error_response(exc.status_code, exc.error, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.info("Request validation failed", path=request.url.path, errors=len(errors))

    locations = [_body_location(error) for error in errors]
    route = VALIDATION_ERRORS.get(request.url.path)
    if route is not None:
        field, error, message = route
        # Missing/unparseable body or a bad required field gets the route's body
        if any(not loc or loc[0] == field or isinstance(loc[0], int) for loc in locations):
            return _error_response(400, error, message)
    else:
        error = "Invalid request"

    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in locations[0]) if locations else ""
    message = f"{location}: {first.get('msg', 'invalid value')}" if location else "Invalid body"
    return _error_response(400, error, message)


def _body_location(error: dict[str, Any]) -> tuple[Any, ...]:
    return tuple(part for part in error.get("loc", ()) if part != "body")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
    return _error_response(500, "Internal server error", "Something went wrong on the server")


# =============================================================================
# Dependencies / Helpers
# =============================================================================


def get_insights_cache(request: Request) -> InsightsCache:
    """FastAPI dependency returning the cache created in the app lifespan."""
    return request.app.state.insights_cache


async def _generate(
    client: GeminiClient,
    route: str,
    prompt: str,
    error: str,
    message: str,
    **generation: Any,
) -> str:
    """Call Gemini with request/response logging, mapping failures to APIError."""
    request_log = log_llm_request(model=client.model, route=route, prompt=prompt)
    try:
        response = await client.generate(prompt, **generation)
    except GeminiAuthError as e:
        log_llm_response(request_log, error=str(e))
        raise APIError(
            503,
            "AI service not configured",
            "AI service not configured. Please contact the administrator.",
        ) from e
    except GeminiError as e:
        log_llm_response(request_log, error=str(e))
        raise APIError(500, error, message) from e
    except Exception as e:
        log_llm_response(request_log, error=str(e))
        raise

    log_llm_response(
        request_log,
        tokens_total=response.tokens_used,
        finish_reason=response.finish_reason or "unknown",
        response_chars=len(response.content),
    )
    return response.content


def _tuned_generation() -> dict[str, Any]:
    """Sampling settings for chat and quiz analysis."""
    return {
        "temperature": settings.llm_temperature,
        "top_p": settings.llm_top_p,
        "top_k": settings.llm_top_k,
        "max_output_tokens": settings.llm_max_tokens,
    }


def _basic_generation() -> dict[str, Any]:
    """Sampling settings for assessments and insights."""
    return {
        "temperature": settings.llm_temperature,
        "max_output_tokens": settings.llm_max_tokens,
    }


# =============================================================================
# Health Endpoint
# =============================================================================


@app.get("/api/health", response_model=HealthResponse)
async def health_check(client: GeminiClient = Depends(get_gemini_client)) -> HealthResponse:
    """Report service status and the configured model."""
    configured = client.is_configured
    return HealthResponse(
        status="healthy" if configured or settings.mock_gemini else "degraded",
        service=settings.service_name,
        model=client.model,
        version=__version__,
        gemini_configured=configured,
    )


# =============================================================================
# Chat Endpoint
# =============================================================================


@app.post("/api/chat", response_model=ChatResponse)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def chat(
    request: Request,
    chat_request: ChatRequest,
    client: GeminiClient = Depends(get_gemini_client),
) -> ChatResponse:
    """
    Answer a career question, personalised with the user's quiz profile when present.

    - **message**: The user's question
    - **userProfile**: Optional quiz-derived profile (used when `quizCompleted` is true)
    - **timestamp**: Optional client timestamp, logged for correlation
    """
    has_profile = bool(chat_request.user_profile and chat_request.user_profile.quiz_completed)
    logger.info(
        "Processing chat",
        client_timestamp=chat_request.timestamp,
        message_length=len(chat_request.message),
        has_profile=has_profile,
    )

    prompt = build_chat_prompt(settings.system_prompt, chat_request.message, chat_request.user_profile)
    reply = await _generate(
        client,
        "chat",
        prompt,
        "Internal server error",
        "Failed to generate AI response",
        **_tuned_generation(),
    )
    logger.info("Generated chat reply", reply_preview=reply[:100])

    return ChatResponse(reply=reply, model=client.model)


# =============================================================================
# Quiz Analysis Endpoint
# =============================================================================


@app.post("/api/quiz-analysis", response_model=QuizAnalysisResponse)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def quiz_analysis(
    request: Request,
    quiz_request: QuizAnalysisRequest,
    client: GeminiClient = Depends(get_gemini_client),
) -> QuizAnalysisResponse:
    """
    Analyze career quiz answers.

    Returns:
    - **analysis**: Career profile summary
    - **recommendations**: Parsed `{title, description, match}` records
    - **nextSteps**: Suggested actions
    - **profile**: Profile derived directly from the answers
    """
    logger.info("Quiz analysis request", answers=len(quiz_request.answers))

    prompt = build_quiz_analysis_prompt(quiz_request.answers)
    text = await _generate(
        client,
        "quiz-analysis",
        prompt,
        "Analysis failed",
        "Failed to analyze quiz responses",
        **_tuned_generation(),
    )

    profile = extract_profile(quiz_request.answers)
    structured = parse_analysis(text)

    logger.info(
        "Quiz analysis parsed",
        summary_chars=len(structured.summary),
        recommendations=len(structured.recommendations),
        next_steps=len(structured.next_steps),
    )

    return QuizAnalysisResponse(
        analysis=structured.summary,
        recommendations=list(structured.recommendations),
        next_steps=list(structured.next_steps),
        profile=profile,
    )


# =============================================================================
# Career Assessment Endpoint
# =============================================================================


@app.post("/api/career-assessment", response_model=CareerAssessmentResponse)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def career_assessment(
    request: Request,
    assessment_request: CareerAssessmentRequest,
    client: GeminiClient = Depends(get_gemini_client),
) -> CareerAssessmentResponse:
    """Generate a free-form career assessment for a self-described profile."""
    prompt = build_assessment_prompt(
        experience=assessment_request.experience,
        work_style=assessment_request.work_style,
        skills=assessment_request.skills,
        goals=assessment_request.goals,
    )
    assessment = await _generate(
        client,
        "career-assessment",
        prompt,
        "Assessment failed",
        "Failed to generate career assessment",
        **_basic_generation(),
    )

    return CareerAssessmentResponse(assessment=assessment, profile=assessment_request)


# =============================================================================
# Industry Insights Endpoint
# =============================================================================


@app.get("/api/industry-insights", response_model=IndustryInsightsResponse)
@app.get("/api/industry-insights/{industry}", response_model=IndustryInsightsResponse)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def industry_insights(
    request: Request,
    industry: str | None = None,
    client: GeminiClient = Depends(get_gemini_client),
    insights_cache: InsightsCache = Depends(get_insights_cache),
) -> IndustryInsightsResponse:
    """Describe trends, skills, roles and salaries for an industry (default: technology)."""
    industry = (industry or "").strip() or settings.default_industry

    cached = insights_cache.get(industry)
    if cached is not None:
        logger.info("Industry insights served from cache", industry=industry)
        return IndustryInsightsResponse(industry=industry, insights=cached, cached=True)

    insights = await _generate(
        client,
        "industry-insights",
        build_insights_prompt(industry),
        "Failed to fetch insights",
        "Unable to generate industry insights",
        **_basic_generation(),
    )
    insights_cache.set(industry, insights)

    return IndustryInsightsResponse(industry=industry, insights=insights)


# =============================================================================
# Entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "career_guide_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
