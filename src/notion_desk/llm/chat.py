"""Streaming chat completions via Gemini.

open_chat_stream starts the request (so connection and auth errors surface
before any response is sent) and returns an async iterator of text chunks.
Token usage is logged once the stream is exhausted. Streams are not retried.
"""

import logging
from collections.abc import AsyncIterator

from google.genai import types

from notion_desk.cost import extract_usage, log_usage
from notion_desk.llm.client import get_gemini_client
from notion_desk.llm.prompts import GEMINI_MODEL, VOICE_NOTE_SYSTEM_PROMPT, build_voice_note_message

logger = logging.getLogger(__name__)


async def _relay(stream: AsyncIterator, operation: str) -> AsyncIterator[str]:
    """Yield the text of each chunk, then log usage from the final chunk."""
    last = None
    async for chunk in stream:
        last = chunk
        text = getattr(chunk, "text", None)
        if text:
            yield text
    if last is not None:
        log_usage(operation, extract_usage(last))


async def open_chat_stream(
    prompt: str,
    system_prompt: str | None = None,
    operation: str = "chat",
) -> AsyncIterator[str]:
    """Start a streaming completion and return an iterator of text chunks.

    Raises:
        google.genai.errors.APIError: If the request is rejected up front.
    """
    client = get_gemini_client()
    stream = await client.aio.models.generate_content_stream(
        model=GEMINI_MODEL,
        contents=prompt,
        config=types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=1.0,
        ),
    )
    logger.info("Chat stream opened", extra={"operation": operation, "prompt_chars": len(prompt)})
    return _relay(stream, operation)


async def open_voice_note_stream(transcript: str) -> AsyncIterator[str]:
    """Stream a cleaned-up Markdown note (H1 title first) for a raw transcript."""
    return await open_chat_stream(
        build_voice_note_message(transcript),
        system_prompt=VOICE_NOTE_SYSTEM_PROMPT,
        operation="voice_note",
    )
