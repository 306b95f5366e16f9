"""Notion entities and the wire payloads of the /api/notion routes.

Python attribute names are snake_case; the markdown export payloads keep
their camelCase wire names through aliases.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DatabaseProperty(BaseModel):
    """One column of a database schema."""

    name: str
    type: str
    id: str


class Database(BaseModel):
    """Snapshot of a Notion database. Replaced wholesale on refresh."""

    id: str
    title: str
    description: str | None = None
    url: str = ""
    created_time: str = ""
    last_edited_time: str = ""
    properties: list[DatabaseProperty] = []
    archived: bool = False
    is_inline: bool = False


class Page(BaseModel):
    """A single record of a database, flattened for table rendering."""

    id: str
    title: str
    url: str | None = None
    created_time: str = ""
    last_edited_time: str = ""
    archived: bool = False
    in_trash: bool = False
    properties: dict[str, Any] = {}


class DatabaseListResponse(BaseModel):
    """Returned by GET /api/notion/databases."""

    databases: list[Database]
    has_more: bool = False
    next_cursor: str | None = None
    total_count: int = 0


class PageListResponse(BaseModel):
    """Returned by GET /api/notion/databases/{id}/pages."""

    pages: list[Page]
    has_more: bool = False
    next_cursor: str | None = None
    total_count: int = 0
    database_id: str


class CreatePageRequest(BaseModel):
    """Body of POST /api/notion/databases/{id}/pages."""

    markdown: str | None = None
    title: str | None = None


class CreatedPage(BaseModel):
    """Identity of a freshly created page."""

    id: str
    url: str | None = None


class CreatePageResponse(BaseModel):
    """Returned after a page was created from Markdown."""

    success: bool = True
    page: CreatedPage
    title: str


class MarkdownConversionRequest(BaseModel):
    """Body of POST /api/notion/pages/markdown."""

    model_config = ConfigDict(populate_by_name=True)

    page_ids: Any = Field(default=None, alias="pageIds")


class MarkdownConversionResult(BaseModel):
    """Per-page Markdown export with independent failures."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    data: dict[str, str] = {}
    errors: dict[str, str] | None = None
    processed_count: int = Field(default=0, alias="processedCount")
    error_count: int = Field(default=0, alias="errorCount")
