"""Speech-to-text via Gemini audio understanding.

Sends the recorded audio inline together with a transcription instruction
and returns the transcript text. Transient Gemini errors are retried with
tenacity; permanent errors propagate.
"""

import logging

from google import genai
from google.genai import types
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from notion_desk.config import get_settings
from notion_desk.cost import extract_usage, log_usage
from notion_desk.llm.client import get_gemini_client, is_retryable
from notion_desk.llm.prompts import GEMINI_MODEL, build_transcription_prompt

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_MIME_TYPE = "audio/webm"


@retry(
    retry=retry_if_exception(is_retryable),
    wait=wait_exponential_jitter(initial=1, max=30, jitter=2),
    stop=stop_after_attempt(4),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def _call_transcription(
    client: genai.Client,
    audio: bytes,
    mime_type: str,
    prompt_text: str,
) -> object:
    """Call Gemini with inline audio, retrying on transient errors."""
    return await client.aio.models.generate_content(
        model=GEMINI_MODEL,
        contents=[
            types.Part.from_bytes(data=audio, mime_type=mime_type),
            types.Part(text=prompt_text),
        ],
        config=types.GenerateContentConfig(temperature=0.2),
    )


async def transcribe_audio(audio: bytes, mime_type: str = DEFAULT_AUDIO_MIME_TYPE) -> str:
    """Transcribe an audio recording to text.

    The configured STT base prompt is passed along as context to bias
    vocabulary and spelling.

    Raises:
        ValueError: If the audio is empty.
        google.genai.errors.APIError: On non-retryable errors or after retries.
    """
    if not audio:
        raise ValueError("Audio recording is empty")

    settings = get_settings()
    client = get_gemini_client()
    response = await _call_transcription(
        client,
        audio,
        mime_type or DEFAULT_AUDIO_MIME_TYPE,
        build_transcription_prompt(settings.stt_base_prompt),
    )

    text = (getattr(response, "text", None) or "").strip()
    log_usage("transcribe", extract_usage(response))
    logger.info("Transcription complete (%d words)", len(text.split()))
    return text
