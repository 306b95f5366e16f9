"""Shared google-genai client and the retry predicate for Gemini calls.

The client is built without HttpRetryOptions; transcription retries with
tenacity using is_retryable, and streams are never retried.
"""

from google import genai
from google.genai import types
from google.genai.errors import ClientError, ServerError

from notion_desk.config import get_settings

_client: genai.Client | None = None


def get_gemini_client() -> genai.Client:
    """Return the process-wide Gemini client, creating it on first use."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = genai.Client(
            api_key=settings.gemini_api_key,
            http_options=types.HttpOptions(timeout=settings.gemini_timeout_ms),
        )
    return _client


def reset_client() -> None:
    """Drop the cached client (after a key change, and in tests)."""
    global _client
    _client = None


def is_retryable(error: BaseException) -> bool:
    """True for Gemini 5xx errors and 429 rate limits; other errors are permanent."""
    if isinstance(error, ServerError):
        return True
    return isinstance(error, ClientError) and error.code == 429
