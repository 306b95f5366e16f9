"""LLM processing via Gemini: transcription and streaming chat.

Public API:
    transcribe_audio(audio, mime_type) -> str
    open_chat_stream(prompt, system_prompt) -> AsyncIterator[str]
    open_voice_note_stream(transcript) -> AsyncIterator[str]
"""

from notion_desk.llm.chat import open_chat_stream, open_voice_note_stream
from notion_desk.llm.client import get_gemini_client, is_retryable, reset_client
from notion_desk.llm.router import router
from notion_desk.llm.transcribe import transcribe_audio

__all__ = [
    "get_gemini_client",
    "is_retryable",
    "open_chat_stream",
    "open_voice_note_stream",
    "reset_client",
    "router",
    "transcribe_audio",
]
