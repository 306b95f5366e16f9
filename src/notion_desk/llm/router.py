"""LLM proxy routes: transcription, voice-note cleanup and page chat."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import StreamingResponse
from google.genai.errors import APIError

from notion_desk.config import get_settings
from notion_desk.llm.chat import open_chat_stream, open_voice_note_stream
from notion_desk.llm.transcribe import DEFAULT_AUDIO_MIME_TYPE, transcribe_audio
from notion_desk.models.llm import ChatRequest, TranscriptionResponse, VoiceNoteRequest
from notion_desk.notion.errors import bad_request, error_detail

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["llm"])

_STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


async def require_gemini_key() -> None:
    """Reject the request with 500 when the Gemini API key is not configured."""
    if not get_settings().gemini_api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail(
                "Gemini API key not configured",
                "Please add GEMINI_API_KEY to your environment variables",
            ),
        )


def _stream_failed(exc: APIError, what: str) -> HTTPException:
    """Map a rejected stream request to a 502 carrying the upstream message."""
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=error_detail(f"Failed to {what}", getattr(exc, "message", None) or str(exc)),
    )


@router.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    dependencies=[Depends(require_gemini_key)],
)
async def post_transcribe(audio: UploadFile | None = File(default=None)) -> TranscriptionResponse:
    """Transcribe an uploaded audio recording (multipart field "audio")."""
    if audio is None:
        raise bad_request("No audio file provided")

    data = await audio.read()
    if not data:
        raise bad_request("No audio file provided")

    try:
        text = await transcribe_audio(data, audio.content_type or DEFAULT_AUDIO_MIME_TYPE)
    except Exception as exc:
        logger.error("Transcription error: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Failed to transcribe audio"),
        ) from exc

    return TranscriptionResponse(text=text)


@router.post("/voice-note", dependencies=[Depends(require_gemini_key)])
async def post_voice_note(payload: VoiceNoteRequest) -> StreamingResponse:
    """Stream a cleaned-up Markdown note for a transcript."""
    try:
        stream = await open_voice_note_stream(payload.transcript)
    except APIError as exc:
        logger.error("Voice note processing error: %s", exc, exc_info=True)
        raise _stream_failed(exc, "process voice note") from exc
    return StreamingResponse(stream, media_type=_STREAM_MEDIA_TYPE)


@router.post("/chat", dependencies=[Depends(require_gemini_key)])
async def post_chat(payload: ChatRequest) -> StreamingResponse:
    """Stream a chat reply for a single prompt."""
    try:
        stream = await open_chat_stream(payload.prompt)
    except APIError as exc:
        logger.error("Chat error: %s", exc, exc_info=True)
        raise _stream_failed(exc, "run chat") from exc
    return StreamingResponse(stream, media_type=_STREAM_MEDIA_TYPE)
