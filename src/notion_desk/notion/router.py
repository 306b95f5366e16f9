"""Notion proxy routes used by the dashboard."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from notion_client import APIResponseError

from notion_desk.config import get_settings
from notion_desk.models.notion import (
    CreatePageResponse,
    DatabaseListResponse,
    MarkdownConversionResult,
    PageListResponse,
)
from notion_desk.notion.blocks import EmptyDocumentError
from notion_desk.notion.databases import MAX_DATABASE_PAGE_SIZE, list_databases
from notion_desk.notion.errors import bad_request, error_detail, upstream_error
from notion_desk.notion.markdown import convert_pages_to_markdown
from notion_desk.notion.pages import MAX_PAGE_SIZE, create_page_from_markdown, list_pages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notion", tags=["notion"])


async def require_notion_key() -> None:
    """Reject the request with 500 when the Notion API key is not configured."""
    if not get_settings().notion_api_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail(
                "Notion API key not configured",
                "Please add NOTION_API_KEY to your environment variables",
            ),
        )


def _parse_json_param(raw: str | None, name: str, expected: str):
    """Decode a JSON-encoded query parameter, 400 on malformed input."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise bad_request(f"Invalid {name} format", f"{name.capitalize()} must be a valid JSON {expected}")


async def _read_json_body(request: Request) -> dict:
    """Return the request body as a dict, 400 when it is not a JSON object."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None
    if not isinstance(body, dict):
        raise bad_request("Invalid JSON body")
    return body


@router.get(
    "/databases",
    response_model=DatabaseListResponse,
    dependencies=[Depends(require_notion_key)],
)
async def get_databases(
    page_size: int = MAX_DATABASE_PAGE_SIZE,
    start_cursor: str | None = None,
) -> DatabaseListResponse:
    """List databases shared with the integration, newest edits first."""
    try:
        return await list_databases(page_size=page_size, start_cursor=start_cursor)
    except APIResponseError as exc:
        logger.error("Error fetching Notion databases: %s", exc, exc_info=True)
        raise upstream_error(exc) from exc
    except Exception as exc:
        logger.error("Error fetching Notion databases: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail(
                "Failed to fetch databases",
                "An error occurred while fetching databases from Notion",
                details=str(exc) or "Unknown error",
            ),
        ) from exc


@router.get(
    "/databases/{database_id}/pages",
    response_model=PageListResponse,
    dependencies=[Depends(require_notion_key)],
)
async def get_database_pages(
    database_id: str,
    page_size: int = MAX_PAGE_SIZE,
    start_cursor: str | None = None,
    filter: str | None = None,
    sorts: str | None = None,
) -> PageListResponse:
    """List one page of results from a database, with optional JSON filter and sorts."""
    parsed_filter = _parse_json_param(filter, "filter", "object")
    parsed_sorts = _parse_json_param(sorts, "sorts", "array")

    try:
        return await list_pages(
            database_id,
            page_size=page_size,
            start_cursor=start_cursor,
            filter=parsed_filter,
            sorts=parsed_sorts,
        )
    except APIResponseError as exc:
        logger.error("Error fetching pages from database %s: %s", database_id, exc)
        raise upstream_error(
            exc,
            not_found_message=(
                f"Database with ID {database_id} was not found or is not accessible"
            ),
        ) from exc
    except Exception as exc:
        logger.error("Error fetching pages from database %s: %s", database_id, exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail(
                "Internal server error",
                "An unexpected error occurred while fetching pages",
            ),
        ) from exc


@router.post(
    "/databases/{database_id}/pages",
    response_model=CreatePageResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_notion_key)],
)
async def post_database_page(database_id: str, request: Request) -> CreatePageResponse:
    """Create a page in the database from a Markdown document.

    A leading H1 becomes the page title; otherwise the optional "title"
    field is used, then "New Note".
    """
    body = await _read_json_body(request)
    markdown = body.get("markdown")
    title = body.get("title")

    if not isinstance(markdown, str) or not markdown.strip():
        raise bad_request("'markdown' must be a non-empty string")
    if not isinstance(title, str):
        title = None

    try:
        return await create_page_from_markdown(database_id, markdown, title)
    except EmptyDocumentError as exc:
        raise bad_request(str(exc)) from exc
    except APIResponseError as exc:
        logger.error("Error creating page in Notion: %s", exc)
        raise upstream_error(exc, not_found_message="Database not found or inaccessible") from exc
    except Exception as exc:
        logger.error("Error creating page in Notion: %s", exc, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail("Internal server error"),
        ) from exc


@router.post(
    "/pages/markdown",
    response_model=MarkdownConversionResult,
    response_model_exclude_none=True,
    dependencies=[Depends(require_notion_key)],
)
async def post_pages_markdown(request: Request) -> MarkdownConversionResult:
    """Convert the given pages to Markdown. Per-page failures are reported, not raised."""
    body = await _read_json_body(request)
    page_ids = body.get("pageIds")

    if not isinstance(page_ids, list):
        raise bad_request("pageIds must be an array of page IDs")
    if not page_ids:
        raise bad_request("pageIds array cannot be empty")
    if any(not isinstance(page_id, str) or not page_id.strip() for page_id in page_ids):
        raise bad_request("All page IDs must be non-empty strings")

    return await convert_pages_to_markdown(page_ids)
