"""Page listing and Markdown page creation against a Notion database.

Lists pages of a data source for the dashboard table and creates new pages
from Markdown. The title property name is discovered from the data source
schema and cached with a 5-minute TTL. Handles the 100-block batch limit.
"""

import logging

from cachetools import TTLCache

from notion_desk.models.notion import CreatedPage, CreatePageResponse, Page, PageListResponse
from notion_desk.notion.blocks import build_page_content
from notion_desk.notion.client import get_notion_client

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50
DEFAULT_TITLE_PROPERTY = "Name"

_BLOCK_BATCH_SIZE = 100

_title_property_cache: TTLCache = TTLCache(maxsize=256, ttl=300)  # 5-minute TTL


def extract_page_title(raw: dict) -> str:
    """Return the plain text of the page's title property.

    "Untitled" when the title property is empty, "Untitled Page" when the
    page has no title property at all.
    """
    for prop in (raw.get("properties") or {}).values():
        if prop.get("type") == "title":
            items = prop.get("title") or []
            if items:
                return items[0].get("plain_text") or "Untitled"
            return "Untitled"
    return "Untitled Page"


def _is_full_page(raw: dict) -> bool:
    """Partial objects (no properties) are returned for pages the integration cannot read."""
    return raw.get("object") == "page" and "properties" in raw


def to_page(raw: dict) -> Page:
    """Flatten a Notion page object into a Page."""
    return Page(
        id=raw["id"],
        title=extract_page_title(raw),
        url=raw.get("url"),
        created_time=raw.get("created_time", ""),
        last_edited_time=raw.get("last_edited_time", ""),
        archived=bool(raw.get("archived", False)),
        in_trash=bool(raw.get("in_trash", False)),
        properties=raw.get("properties") or {},
    )


async def list_pages(
    database_id: str,
    page_size: int = MAX_PAGE_SIZE,
    start_cursor: str | None = None,
    filter: dict | None = None,
    sorts: list | None = None,
) -> PageListResponse:
    """Query one page of results from a database.

    page_size is clamped to 1..50. filter and sorts are forwarded verbatim.
    Lets notion_client errors propagate to the caller.
    """
    client = await get_notion_client()
    kwargs: dict = {
        "data_source_id": database_id,
        "page_size": min(max(page_size, 1), MAX_PAGE_SIZE),
    }
    if start_cursor:
        kwargs["start_cursor"] = start_cursor
    if filter:
        kwargs["filter"] = filter
    if sorts:
        kwargs["sorts"] = sorts

    response = await client.data_sources.query(**kwargs)
    pages = [to_page(raw) for raw in response.get("results", []) if _is_full_page(raw)]

    return PageListResponse(
        pages=pages,
        has_more=response.get("has_more", False),
        next_cursor=response.get("next_cursor"),
        total_count=len(pages),
        database_id=database_id,
    )


async def get_title_property_name(database_id: str) -> str:
    """Return the name of the database's title property.

    Fetches the schema on first call or after TTL expiry. Falls back to
    "Name" when the schema has no title property.
    """
    cached = _title_property_cache.get(database_id)
    if cached is not None:
        return cached

    client = await get_notion_client()
    data_source = await client.data_sources.retrieve(data_source_id=database_id)

    name = DEFAULT_TITLE_PROPERTY
    for prop_name, prop in (data_source.get("properties") or {}).items():
        if prop.get("type") == "title":
            name = prop_name
            break

    _title_property_cache[database_id] = name
    return name


def invalidate_title_property_cache() -> None:
    """Clear the title property cache. Used for testing."""
    _title_property_cache.clear()


async def create_page_from_markdown(
    database_id: str,
    markdown: str,
    title: str | None = None,
) -> CreatePageResponse:
    """Create a page in a database from a Markdown document.

    1. Convert Markdown to blocks and derive the title (leading H1 wins)
    2. Discover the title property name
    3. Create the page with the first 100 blocks
    4. Append overflow blocks in batches of 100

    Raises:
        EmptyDocumentError: If the Markdown yields no blocks (before any API call).
        notion_client.APIResponseError: Propagated to the router.
    """
    derived_title, blocks = build_page_content(markdown, title)
    title_property = await get_title_property_name(database_id)

    client = await get_notion_client()
    first_batch = blocks[:_BLOCK_BATCH_SIZE]
    overflow = blocks[_BLOCK_BATCH_SIZE:]

    created = await client.pages.create(
        parent={"type": "data_source_id", "data_source_id": database_id},
        properties={
            title_property: {
                "title": [{"type": "text", "text": {"content": derived_title[:2000]}}]
            },
        },
        children=first_batch,
    )

    page_id = created["id"]
    for i in range(0, len(overflow), _BLOCK_BATCH_SIZE):
        batch = overflow[i : i + _BLOCK_BATCH_SIZE]
        await client.blocks.children.append(block_id=page_id, children=batch)

    logger.info("Created Notion page: %s (%s)", derived_title, page_id)
    return CreatePageResponse(
        success=True,
        page=CreatedPage(id=page_id, url=created.get("url")),
        title=derived_title,
    )
