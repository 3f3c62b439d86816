"""Observability utilities: trace IDs, LLM metrics, and request logging.

This module provides:
- Trace ID generation and propagation via context vars
- Prometheus metrics for Gemini calls (tokens, latency, errors)
- Structured logging helpers for LLM request/response correlation
"""

import secrets
import time
from contextvars import ContextVar
from dataclasses import dataclass, field

import structlog
from prometheus_client import Counter, Gauge, Histogram

logger = structlog.get_logger()

# =============================================================================
# Trace ID Context
# =============================================================================

trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")


def generate_trace_id() -> str:
    """Generate cryptographically secure trace ID for request tracking."""
    return secrets.token_hex(16)


def get_trace_id() -> str:
    """Get current trace ID from context, or empty string if not set."""
    return trace_id_ctx.get()


def set_trace_id(trace_id: str) -> None:
    """Set trace ID in context."""
    trace_id_ctx.set(trace_id)


# =============================================================================
# Prometheus Metrics for LLM
# =============================================================================

llm_requests_total = Counter(
    "llm_requests_total",
    "Total Gemini API requests",
    ["model", "route", "status"],
)

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens used in Gemini calls",
    ["model", "route"],
)

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "Gemini response latency in seconds",
    ["model", "route"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

llm_prompt_chars = Histogram(
    "llm_prompt_chars",
    "Characters in prompts sent to Gemini",
    buckets=[0, 500, 1000, 2000, 5000, 10000, 20000],
)

llm_active_requests = Gauge(
    "llm_active_requests",
    "Currently active Gemini requests",
    ["model"],
)


# =============================================================================
# LLM Payload Logging
# =============================================================================


@dataclass
class LLMRequestLog:
    """Structured log data for a Gemini request."""

    trace_id: str
    model: str
    route: str
    prompt_chars: int
    prompt_preview: str  # First 100 chars
    timestamp: float = field(default_factory=time.time)


def log_llm_request(model: str, route: str, prompt: str) -> LLMRequestLog:
    """Log a Gemini request and return a handle for correlating the response."""
    log_data = LLMRequestLog(
        trace_id=get_trace_id(),
        model=model,
        route=route,
        prompt_chars=len(prompt),
        prompt_preview=prompt[:100] + ("..." if len(prompt) > 100 else ""),
    )

    logger.info(
        "llm_request",
        trace_id=log_data.trace_id,
        model=log_data.model,
        route=log_data.route,
        prompt_chars=log_data.prompt_chars,
    )
    logger.debug("llm_request_prompt", prompt_preview=log_data.prompt_preview)

    llm_active_requests.labels(model=model).inc()
    llm_prompt_chars.observe(log_data.prompt_chars)

    return log_data


def log_llm_response(
    request_log: LLMRequestLog,
    tokens_total: int = 0,
    finish_reason: str = "unknown",
    response_chars: int = 0,
    error: str | None = None,
) -> int:
    """Log a Gemini response with metrics and correlation.

    Returns:
        Latency in milliseconds since the request was logged.
    """
    latency_ms = int((time.time() - request_log.timestamp) * 1000)

    if error:
        logger.error(
            "llm_response",
            trace_id=request_log.trace_id,
            model=request_log.model,
            route=request_log.route,
            latency_ms=latency_ms,
            error=error,
        )
        status = "error"
    else:
        logger.info(
            "llm_response",
            trace_id=request_log.trace_id,
            model=request_log.model,
            route=request_log.route,
            tokens_total=tokens_total,
            response_chars=response_chars,
            latency_ms=latency_ms,
            finish_reason=finish_reason,
        )
        status = "success"

    llm_active_requests.labels(model=request_log.model).dec()
    llm_requests_total.labels(
        model=request_log.model,
        route=request_log.route,
        status=status,
    ).inc()

    if tokens_total > 0:
        llm_tokens_total.labels(model=request_log.model, route=request_log.route).inc(tokens_total)

    llm_latency_seconds.labels(
        model=request_log.model,
        route=request_log.route,
    ).observe(latency_ms / 1000.0)

    return latency_ms
