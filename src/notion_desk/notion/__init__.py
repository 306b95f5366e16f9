"""Notion proxy: database/page listing, Markdown page creation and export."""

from notion_desk.notion.blocks import (
    EmptyDocumentError,
    build_page_content,
    extract_title,
    markdown_to_blocks,
)
from notion_desk.notion.client import get_notion_client, reset_client
from notion_desk.notion.databases import list_databases
from notion_desk.notion.markdown import convert_pages_to_markdown, page_to_markdown
from notion_desk.notion.pages import create_page_from_markdown, list_pages
from notion_desk.notion.router import router

__all__ = [
    "build_page_content",
    "convert_pages_to_markdown",
    "create_page_from_markdown",
    "EmptyDocumentError",
    "extract_title",
    "get_notion_client",
    "list_databases",
    "list_pages",
    "markdown_to_blocks",
    "page_to_markdown",
    "reset_client",
    "router",
]
