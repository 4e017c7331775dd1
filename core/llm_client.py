"""
LLM Client for Contract Advisor.

Centralized Gemini call handler with:
- Singleton client (API key or Vertex AI)
- Retry logic via tenacity for rate limits and transient faults
- LLMCallResult instead of exceptions, so callers decide how to fail
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from google.genai.errors import ClientError as GenaiClientError, ServerError as GenaiServerError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

from config.settings import (
    GOOGLE_API_KEY, PROJECT_ID, VERTEX_LOCATION, MODEL_PRO, MAX_OUTPUT_TOKENS,
)
from core.errors import UpstreamGenerationFailure
from models.schemas import LLMCallResult

logger = logging.getLogger(__name__)


# =============================================================================
# Singleton Client Cache (avoid creating new client per call)
# =============================================================================

_client_cache: dict[str, Any] = {}


class MissingCredentials(Exception):
    """Neither GOOGLE_API_KEY nor GOOGLE_CLOUD_PROJECT is configured."""


def _get_client():
    """Return a cached genai.Client instance (created once, reused)."""
    if "client" not in _client_cache:
        from google import genai
        if GOOGLE_API_KEY:
            _client_cache["client"] = genai.Client(api_key=GOOGLE_API_KEY)
            logger.info("Created singleton genai.Client with API key")
        elif PROJECT_ID:
            _client_cache["client"] = genai.Client(
                vertexai=True, project=PROJECT_ID, location=VERTEX_LOCATION
            )
            logger.info("Created singleton genai.Client for project=%s", PROJECT_ID)
        else:
            raise MissingCredentials(
                "Set GOOGLE_API_KEY or GOOGLE_CLOUD_PROJECT to use the LLM analysis engine"
            )
    return _client_cache["client"]


# =============================================================================
# Retry configuration
# =============================================================================

RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    GenaiServerError,
    httpx.RemoteProtocolError,
    httpx.ReadError,
    httpx.ConnectError,
    httpx.TimeoutException,
)


def _is_retryable(exception: BaseException) -> bool:
    """Check if an exception is retryable (rate limit or transient error)."""
    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return True
    # ClientError covers 429 (retryable) but also 400/401/403 (not retryable)
    if isinstance(exception, GenaiClientError):
        return getattr(exception, "code", 0) == 429
    msg = str(exception).lower()
    return any(kw in msg for kw in ("resource exhausted", "rate limit", "peer closed connection"))


# =============================================================================
# Core LLM Call
# =============================================================================

@retry(
    retry=retry_if_exception(_is_retryable),
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=2, min=2, max=60),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
def _call_gemini(
    prompt: str,
    model: str,
    temperature: float,
    max_tokens: int,
    system_instruction: str | None = None,
) -> Any:
    """
    Raw Gemini API call with retry.

    Returns the raw response object for the caller to process.
    """
    from google.genai import types

    client = _get_client()

    config = types.GenerateContentConfig(
        temperature=temperature,
        max_output_tokens=max_tokens,
        system_instruction=system_instruction,
    )

    return client.models.generate_content(
        model=model,
        contents=prompt,
        config=config,
    )


def call_llm(
    prompt: str,
    model: str = MODEL_PRO,
    temperature: float = 0.7,
    max_tokens: int = MAX_OUTPUT_TOKENS,
    system_instruction: str | None = None,
    agent_name: str = "LLM",
) -> LLMCallResult:
    """
    Call Gemini with retry.

    Args:
        prompt: The user prompt text
        model: Model name
        temperature: Sampling temperature
        max_tokens: Maximum output tokens
        system_instruction: Optional system persona
        agent_name: Caller label (for logs)

    Returns:
        LLMCallResult; success=False carries the error instead of raising
    """
    start_time = time.time()
    try:
        response = _call_gemini(
            prompt=prompt,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            system_instruction=system_instruction,
        )
    except Exception as e:
        logger.error("LLM call failed for %s: %s", agent_name, e, exc_info=True)
        return LLMCallResult(
            text="",
            model=model,
            agent_name=agent_name,
            duration_ms=int((time.time() - start_time) * 1000),
            success=False,
            error=f"{type(e).__name__}: {e}",
        )

    duration_ms = int((time.time() - start_time) * 1000)

    # response.text can raise if there are no candidates (safety block, cancelled)
    try:
        result_text = response.text or ""
    except (ValueError, AttributeError):
        result_text = ""

    tokens_in = tokens_out = 0
    usage = getattr(response, "usage_metadata", None)
    if usage is not None:
        tokens_in = getattr(usage, "prompt_token_count", 0) or 0
        tokens_out = getattr(usage, "candidates_token_count", 0) or 0

    if not result_text.strip():
        logger.warning("Empty response from %s for %s", model, agent_name)
        return LLMCallResult(
            text="",
            model=model,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            duration_ms=duration_ms,
            agent_name=agent_name,
            success=False,
            error="Model returned no text (empty or blocked output)",
        )

    logger.info(
        "%s: %s returned %d chars in %dms (in=%d, out=%d tokens)",
        agent_name, model, len(result_text), duration_ms, tokens_in, tokens_out,
    )
    return LLMCallResult(
        text=result_text,
        model=model,
        tokens_in=tokens_in,
        tokens_out=tokens_out,
        duration_ms=duration_ms,
        agent_name=agent_name,
        success=True,
    )


def require_success(result: LLMCallResult, agent_name: str = "") -> LLMCallResult:
    """Validate that an LLM call succeeded. Raises UpstreamGenerationFailure on failure."""
    if not result.success:
        name = agent_name or result.agent_name
        raise UpstreamGenerationFailure(f"LLM call failed for {name}: {result.error}")
    return result
