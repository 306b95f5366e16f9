"""Shared notion-client AsyncClient for the proxy routes.

Databases are addressed by data source id (Notion API 2025-09-03), so the
databases, pages and markdown modules all talk to the data_sources, pages
and blocks endpoints through this one client.
"""

import logging

from notion_client import AsyncClient

from notion_desk.config import get_settings

_client: AsyncClient | None = None


async def get_notion_client() -> AsyncClient:
    """Return the process-wide Notion client, creating it on first use.

    The client logs through the "notion_desk.notion.http" logger so its
    request lines share the JSON log format.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = AsyncClient(
            auth=settings.notion_api_key,
            timeout_ms=settings.notion_timeout_ms,
            logger=logging.getLogger("notion_desk.notion.http"),
        )
    return _client


def reset_client() -> None:
    """Drop the cached client (after a key change, and in tests)."""
    global _client
    _client = None
