"""Data models shared by the API routes and the dashboard."""

from notion_desk.models.llm import ChatRequest, TranscriptionResponse, VoiceNoteRequest
from notion_desk.models.notion import (
    CreatedPage,
    CreatePageRequest,
    CreatePageResponse,
    Database,
    DatabaseListResponse,
    DatabaseProperty,
    MarkdownConversionRequest,
    MarkdownConversionResult,
    Page,
    PageListResponse,
)

__all__ = [
    "ChatRequest",
    "CreatedPage",
    "CreatePageRequest",
    "CreatePageResponse",
    "Database",
    "DatabaseListResponse",
    "DatabaseProperty",
    "MarkdownConversionRequest",
    "MarkdownConversionResult",
    "Page",
    "PageListResponse",
    "TranscriptionResponse",
    "VoiceNoteRequest",
]
