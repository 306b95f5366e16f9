"""Payloads of the LLM proxy routes."""

from pydantic import BaseModel, Field


class TranscriptionResponse(BaseModel):
    """Returned by POST /api/transcribe."""

    text: str


class ChatRequest(BaseModel):
    """Body of POST /api/chat."""

    prompt: str = Field(min_length=1)


class VoiceNoteRequest(BaseModel):
    """Body of POST /api/voice-note: a raw transcript to clean up."""

    transcript: str = Field(min_length=1)
