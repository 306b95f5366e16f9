"""Transcription tests with mocked Gemini client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai.errors import ClientError, ServerError
from tenacity import wait_none

from notion_desk.llm.client import is_retryable
from notion_desk.llm.transcribe import _call_transcription, transcribe_audio


def _make_response(text: str | None) -> MagicMock:
    """Return a mock Gemini response with text and usage metadata."""
    response = MagicMock()
    response.text = text
    response.usage_metadata.prompt_token_count = 120
    response.usage_metadata.candidates_token_count = 30
    return response


def _make_client(**generate_kwargs) -> MagicMock:
    """Return a mock genai client whose generate_content is an AsyncMock."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(**generate_kwargs)
    return client


async def test_transcribe_audio_strips_text():
    """Transcript text is returned without surrounding whitespace."""
    client = _make_client(return_value=_make_response("  hello world \n"))

    with patch("notion_desk.llm.transcribe.get_gemini_client", return_value=client):
        text = await transcribe_audio(b"audio-bytes", "audio/webm")

    assert text == "hello world"
    kwargs = client.aio.models.generate_content.call_args.kwargs
    assert kwargs["model"] == "gemini-3-flash-preview"
    assert len(kwargs["contents"]) == 2
    assert kwargs["config"].temperature == 0.2


async def test_transcribe_audio_includes_base_prompt(monkeypatch):
    """The configured STT base prompt is sent as context."""
    from notion_desk.config import get_settings

    monkeypatch.setenv("STT_BASE_PROMPT", "Vocabulary: Notion, Gemini")
    get_settings.cache_clear()
    client = _make_client(return_value=_make_response("ok"))

    with patch("notion_desk.llm.transcribe.get_gemini_client", return_value=client):
        await transcribe_audio(b"audio-bytes")

    instruction = client.aio.models.generate_content.call_args.kwargs["contents"][1]
    assert "Vocabulary: Notion, Gemini" in instruction.text


async def test_transcribe_audio_empty_response():
    """A response without text yields an empty transcript."""
    client = _make_client(return_value=_make_response(None))

    with patch("notion_desk.llm.transcribe.get_gemini_client", return_value=client):
        assert await transcribe_audio(b"audio-bytes") == ""


async def test_transcribe_audio_rejects_empty_audio():
    """Empty audio raises ValueError without calling Gemini."""
    with patch("notion_desk.llm.transcribe.get_gemini_client") as mock_get_client:
        with pytest.raises(ValueError):
            await transcribe_audio(b"")

    mock_get_client.assert_not_called()


async def test_call_transcription_retries_transient_errors():
    """A 5xx error is retried and the next attempt's response is returned."""
    response = _make_response("ok")
    client = _make_client(
        side_effect=[ServerError(500, {"error": {"message": "internal", "status": "INTERNAL"}}), response]
    )
    call = _call_transcription.retry_with(wait=wait_none())

    result = await call(client, b"audio", "audio/webm", "Transcribe")

    assert result is response
    assert client.aio.models.generate_content.await_count == 2


async def test_call_transcription_does_not_retry_client_errors():
    """A 400 error propagates after a single attempt."""
    client = _make_client(
        side_effect=ClientError(400, {"error": {"message": "bad audio", "status": "INVALID_ARGUMENT"}})
    )
    call = _call_transcription.retry_with(wait=wait_none())

    with pytest.raises(ClientError):
        await call(client, b"audio", "audio/webm", "Transcribe")

    assert client.aio.models.generate_content.await_count == 1


# --- is_retryable ---


def test_is_retryable_server_error():
    """ServerError(500) returns True."""
    assert is_retryable(ServerError(500, {"error": {"message": "internal"}})) is True


def test_is_retryable_rate_limit():
    """ClientError(429) returns True."""
    assert is_retryable(ClientError(429, {"error": {"message": "rate limit exceeded"}})) is True


def test_is_retryable_permanent_client_errors():
    """ClientError(400/401) returns False."""
    assert is_retryable(ClientError(400, {"error": {"message": "bad request"}})) is False
    assert is_retryable(ClientError(401, {"error": {"message": "unauthorized"}})) is False


def test_is_retryable_other_exceptions():
    """Non-Gemini exceptions are not retried."""
    assert is_retryable(ValueError("nope")) is False
