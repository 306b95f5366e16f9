"""Database discovery through Notion search.

Lists the data sources shared with the integration, most recently edited
first, and flattens them into Database models for the dashboard.
"""

import logging

from notion_desk.models.notion import Database, DatabaseListResponse, DatabaseProperty
from notion_desk.notion.client import get_notion_client

logger = logging.getLogger(__name__)

MAX_DATABASE_PAGE_SIZE = 100


def _first_plain_text(rich_text: list[dict] | None) -> str | None:
    """Return the plain_text of the first rich_text item, if any."""
    if not rich_text:
        return None
    return rich_text[0].get("plain_text") or None


def to_database(raw: dict) -> Database:
    """Flatten a Notion data source object into a Database.

    Properties become a list of {name, type, id} in schema order.
    """
    properties = [
        DatabaseProperty(name=name, type=prop.get("type", ""), id=prop.get("id", ""))
        for name, prop in (raw.get("properties") or {}).items()
    ]
    return Database(
        id=raw["id"],
        title=_first_plain_text(raw.get("title")) or "Untitled Database",
        description=_first_plain_text(raw.get("description")),
        url=raw.get("url") or "",
        created_time=raw.get("created_time", ""),
        last_edited_time=raw.get("last_edited_time", ""),
        properties=properties,
        archived=bool(raw.get("archived", False)),
        is_inline=bool(raw.get("is_inline", False)),
    )


async def list_databases(
    page_size: int = MAX_DATABASE_PAGE_SIZE,
    start_cursor: str | None = None,
) -> DatabaseListResponse:
    """Search the workspace for databases, newest edits first.

    page_size is clamped to 1..100. Lets notion_client errors propagate to
    the router, which maps them to HTTP responses.
    """
    client = await get_notion_client()
    kwargs: dict = {
        "filter": {"property": "object", "value": "data_source"},
        "sort": {"direction": "descending", "timestamp": "last_edited_time"},
        "page_size": min(max(page_size, 1), MAX_DATABASE_PAGE_SIZE),
    }
    if start_cursor:
        kwargs["start_cursor"] = start_cursor

    response = await client.search(**kwargs)
    databases = [to_database(raw) for raw in response.get("results", [])]

    logger.info("Listed %d database(s)", len(databases))
    return DatabaseListResponse(
        databases=databases,
        has_more=response.get("has_more", False),
        next_cursor=response.get("next_cursor"),
        total_count=len(databases),
    )
