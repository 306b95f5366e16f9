"""HTTP gateway from the dashboard to the notion-desk API routes.

Thin async wrapper over httpx implementing the collaborator contracts the
store and the command dispatcher consume. Every non-success response and
every transport failure surfaces as a GatewayError carrying the server's
error message.
"""

import logging
from collections.abc import AsyncIterator

import httpx

from notion_desk.config import get_settings
from notion_desk.models.llm import ChatRequest, TranscriptionResponse, VoiceNoteRequest
from notion_desk.models.notion import (
    CreatePageRequest,
    CreatePageResponse,
    DatabaseListResponse,
    MarkdownConversionRequest,
    MarkdownConversionResult,
    PageListResponse,
)

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """A dashboard request failed (network error or non-success status)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of an error response.

    Prefers detail.message, then detail.error, then a plain-string detail.
    """
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    detail = body.get("detail", body) if isinstance(body, dict) else body
    if isinstance(detail, dict):
        return detail.get("message") or detail.get("error") or fallback
    if isinstance(detail, str) and detail:
        return detail
    return fallback


class DashboardGateway:
    """Async client for the notion-desk API.

    Pass http_client to share a connection pool or to inject a transport in
    tests; otherwise one is created against base_url (defaults to the
    DASHBOARD_BASE_URL setting) and closed by aclose().
    """

    def __init__(
        self,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url or get_settings().dashboard_base_url,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "DashboardGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", path, exc)
            raise GatewayError(f"Request failed: {exc}") from exc
        if response.is_error:
            raise GatewayError(_error_message(response), response.status_code)
        return response

    async def _stream(self, path: str, payload: dict) -> AsyncIterator[str]:
        try:
            async with self._http.stream("POST", path, json=payload) as response:
                if response.is_error:
                    await response.aread()
                    raise GatewayError(_error_message(response), response.status_code)
                async for chunk in response.aiter_text():
                    if chunk:
                        yield chunk
        except httpx.HTTPError as exc:
            logger.warning("Stream from %s failed: %s", path, exc)
            raise GatewayError(f"Request failed: {exc}") from exc

    async def list_databases(
        self,
        page_size: int | None = None,
        cursor: str | None = None,
    ) -> DatabaseListResponse:
        params: dict = {}
        if page_size is not None:
            params["page_size"] = page_size
        if cursor:
            params["start_cursor"] = cursor
        response = await self._request("GET", "/api/notion/databases", params=params)
        return DatabaseListResponse.model_validate(response.json())

    async def list_pages(
        self,
        database_id: str,
        page_size: int | None = None,
        cursor: str | None = None,
        filter: str | None = None,
        sorts: str | None = None,
    ) -> PageListResponse:
        """List pages of a database. filter and sorts are JSON strings passed through."""
        params: dict = {}
        if page_size is not None:
            params["page_size"] = page_size
        if cursor:
            params["start_cursor"] = cursor
        if filter:
            params["filter"] = filter
        if sorts:
            params["sorts"] = sorts
        response = await self._request(
            "GET", f"/api/notion/databases/{database_id}/pages", params=params
        )
        return PageListResponse.model_validate(response.json())

    async def create_page(
        self,
        database_id: str,
        markdown: str,
        title: str | None = None,
    ) -> CreatePageResponse:
        payload = CreatePageRequest(markdown=markdown, title=title).model_dump(exclude_none=True)
        response = await self._request(
            "POST", f"/api/notion/databases/{database_id}/pages", json=payload
        )
        return CreatePageResponse.model_validate(response.json())

    async def convert_pages_to_markdown(self, page_ids: list[str]) -> MarkdownConversionResult:
        """Export pages as Markdown. Raises ValueError for an empty id list."""
        if not page_ids:
            raise ValueError("Page IDs array cannot be empty")
        payload = MarkdownConversionRequest(page_ids=page_ids).model_dump(by_alias=True)
        response = await self._request("POST", "/api/notion/pages/markdown", json=payload)
        return MarkdownConversionResult.model_validate(response.json())

    async def transcribe_audio(
        self,
        audio: bytes,
        filename: str = "recording.webm",
        mime_type: str = "audio/webm",
    ) -> str:
        response = await self._request(
            "POST", "/api/transcribe", files={"audio": (filename, audio, mime_type)}
        )
        return TranscriptionResponse.model_validate(response.json()).text

    def stream_chat(self, prompt: str) -> AsyncIterator[str]:
        return self._stream("/api/chat", ChatRequest(prompt=prompt).model_dump())

    def stream_voice_note(self, transcript: str) -> AsyncIterator[str]:
        return self._stream("/api/voice-note", VoiceNoteRequest(transcript=transcript).model_dump())
