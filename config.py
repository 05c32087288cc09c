"""Environment, logging and Gemini access shared by the review backend."""

import functools
import json
import logging
import os
import time

from dotenv import load_dotenv
from google import genai
from google.api_core.exceptions import (
    DeadlineExceeded,
    InternalServerError,
    ServiceUnavailable,
    TooManyRequests,
)

# ---------------------------------------------------------------------------
# Environment & logging (initialised once on first import)
# ---------------------------------------------------------------------------
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

USE_MOCK: bool = os.getenv("USE_MOCK", "false").lower() == "true"
MOCK_DELAY: float = float(os.getenv("MOCK_DELAY", "2.0"))
DEFAULT_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite")

# Seconds to wait for the analyzer; 0 disables the timeout
ANALYZER_TIMEOUT: float | None = (
    float(os.getenv("ANALYZER_TIMEOUT", "300")) or None
)

# Rate limits and server-side hiccups; anything else fails the chunk at once
GEMINI_TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    TooManyRequests,
    ServiceUnavailable,
    InternalServerError,
    DeadlineExceeded,
)


def with_retry(
    max_retries: int = 3,
    base_delay: float = 1.0,
    retryable: tuple[type[Exception], ...] = (Exception,),
):
    """Retry the decorated call on *retryable* errors.

    The wait doubles after each failure (``base_delay``, ``2 * base_delay``,
    ...). The last error is re-raised once ``max_retries`` calls have failed.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            delay = base_delay
            for attempt in range(1, max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except retryable as exc:
                    if attempt == max_retries:
                        logger.error(
                            "%s failed after %d attempt(s): %s",
                            func.__name__,
                            attempt,
                            exc,
                        )
                        raise
                    logger.warning(
                        "%s attempt %d/%d failed (%s); sleeping %.1fs",
                        func.__name__,
                        attempt,
                        max_retries,
                        exc,
                        delay,
                    )
                    time.sleep(delay)
                    delay *= 2

        return wrapper

    return decorator


@functools.lru_cache(maxsize=1)
def get_gemini_client() -> genai.Client:
    """One Gemini client per process, built from ``GEMINI_API_KEY``."""
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise ValueError(
            "GEMINI_API_KEY is not set. Add it to .env or run with --mock."
        )
    return genai.Client(api_key=api_key)


@with_retry(max_retries=3, base_delay=2.0, retryable=GEMINI_TRANSIENT_ERRORS)
def call_gemini(prompt: str, model: str = DEFAULT_MODEL) -> str:
    """Send *prompt* to Gemini in JSON mode and return the reply text."""
    logger.debug("Gemini %s <- %d character prompt", model, len(prompt))
    reply = get_gemini_client().models.generate_content(
        model=model,
        contents=prompt,
        config={"response_mime_type": "application/json"},
    )
    return reply.text


def parse_llm_json(text: str | None) -> dict | None:
    """Extract the first JSON object from *text*.

    Individual findings are validated later, so a single bad record does
    not discard the whole response.
    """
    if not text:
        logger.warning("Empty LLM response")
        return None

    start = text.find("{")
    if start == -1:
        logger.warning("No JSON object found in LLM response")
        return None

    try:
        decoder = json.JSONDecoder()
        obj, _ = decoder.raw_decode(text[start:])
    except json.JSONDecodeError as e:
        logger.warning("JSON decode error: %s", e)
        return None

    if not isinstance(obj, dict):
        logger.warning("LLM response is not a JSON object")
        return None
    return obj
