"""Export Notion pages as Markdown.

Fetches a page's block tree (child pages and child databases are not
descended into), renders it to Markdown and prefixes the page title as an
H1. Batch export converts every page independently: one failure is
recorded against its page id and never cancels the others.
"""

import asyncio
import logging

from notion_client.helpers import async_collect_paginated_api

from notion_desk.models.notion import MarkdownConversionResult
from notion_desk.notion.client import get_notion_client

logger = logging.getLogger(__name__)

_INDENT = "  "

# Block types whose children belong to another page
_NO_DESCEND = frozenset({"child_page", "child_database"})

_LINK_LABELS = {
    "image": "Image",
    "video": "Video",
    "audio": "Audio",
    "file": "File",
    "pdf": "PDF",
    "bookmark": "Bookmark",
    "embed": "Embed",
    "link_preview": "Link",
}


def render_rich_text(rich_text: list[dict]) -> str:
    """Render a rich_text array to inline Markdown (bold, italic, code, strike, links)."""
    parts: list[str] = []
    for item in rich_text or []:
        text = item.get("plain_text")
        if text is None:
            text = item.get("text", {}).get("content", "")
        if not text:
            continue
        annotations = item.get("annotations") or {}
        if annotations.get("code"):
            text = f"`{text}`"
        if annotations.get("bold"):
            text = f"**{text}**"
        if annotations.get("italic"):
            text = f"*{text}*"
        if annotations.get("strikethrough"):
            text = f"~~{text}~~"
        href = item.get("href") or (item.get("text", {}).get("link") or {}).get("url")
        if href:
            text = f"[{text}]({href})"
        parts.append(text)
    return "".join(parts)


def _file_url(data: dict) -> str:
    """Return the URL of a file-like block (external, hosted or bookmark)."""
    if data.get("url"):
        return data["url"]
    for key in ("external", "file", "file_upload"):
        if isinstance(data.get(key), dict) and data[key].get("url"):
            return data[key]["url"]
    return ""


def _render_table(block: dict) -> list[str]:
    """Render a table block's rows; the first row is treated as the header."""
    lines: list[str] = []
    for i, row in enumerate(block.get("children", [])):
        cells = row.get("table_row", {}).get("cells", [])
        lines.append("| " + " | ".join(render_rich_text(cell) for cell in cells) + " |")
        if i == 0:
            lines.append("|" + " --- |" * len(cells))
    return lines


def _render_block(block: dict, number: int) -> list[str]:
    """Render a single block (without its children) to Markdown lines."""
    kind = block.get("type", "")
    data = block.get(kind) or {}
    text = render_rich_text(data.get("rich_text", []))

    if kind == "paragraph":
        return [text]
    if kind in ("heading_1", "heading_2", "heading_3"):
        return [f"{'#' * int(kind[-1])} {text}"]
    if kind in ("bulleted_list_item", "toggle"):
        return [f"- {text}"]
    if kind == "numbered_list_item":
        return [f"{number}. {text}"]
    if kind == "to_do":
        mark = "x" if data.get("checked") else " "
        return [f"- [{mark}] {text}"]
    if kind == "quote":
        return [f"> {line}" for line in text.split("\n")]
    if kind == "callout":
        icon = (data.get("icon") or {}).get("emoji")
        return [f"> {icon} {text}" if icon else f"> {text}"]
    if kind == "code":
        language = data.get("language") or ""
        if language == "plain text":
            language = ""
        return [f"```{language}", render_rich_text(data.get("rich_text", [])), "```"]
    if kind == "divider":
        return ["---"]
    if kind == "equation":
        return ["$$", data.get("expression", ""), "$$"]
    if kind == "table":
        return _render_table(block)
    if kind in _LINK_LABELS:
        url = _file_url(data)
        if not url:
            return []
        label = render_rich_text(data.get("caption", [])) or _LINK_LABELS[kind]
        prefix = "!" if kind == "image" else ""
        return [f"{prefix}[{label}]({url})"]
    # unsupported and child page/database blocks render nothing
    return []


def blocks_to_markdown(blocks: list[dict], depth: int = 0) -> str:
    """Render a block tree to a Markdown string.

    Consecutive list items are separated by single newlines, everything
    else by blank lines. Children are indented two spaces per level.
    """
    chunks: list[tuple[str, bool]] = []
    number = 0
    indent = _INDENT * depth

    for block in blocks:
        kind = block.get("type", "")
        number = number + 1 if kind == "numbered_list_item" else 0
        lines = _render_block(block, number)
        if not lines:
            continue
        rendered = "\n".join(f"{indent}{line}" if line else line for line in lines)
        children = block.get("children") if kind != "table" else None
        if children:
            nested = blocks_to_markdown(children, depth + 1)
            if nested:
                rendered = f"{rendered}\n{nested}"
        is_list_item = kind in ("bulleted_list_item", "numbered_list_item", "to_do", "toggle")
        chunks.append((rendered, is_list_item))

    output = ""
    for i, (rendered, is_list_item) in enumerate(chunks):
        if i > 0:
            output += "\n" if is_list_item and chunks[i - 1][1] else "\n\n"
        output += rendered
    return output


async def fetch_block_tree(block_id: str) -> list[dict]:
    """Fetch all children of a block, recursively attaching nested children.

    Each block with has_children gets a "children" list, except child pages
    and child databases.
    """
    client = await get_notion_client()
    blocks = await async_collect_paginated_api(client.blocks.children.list, block_id=block_id)
    for block in blocks:
        if block.get("has_children") and block.get("type") not in _NO_DESCEND:
            block["children"] = await fetch_block_tree(block["id"])
    return blocks


async def get_page_title(page_id: str) -> str:
    """Return the joined plain text of the page's title property ("Untitled" if empty)."""
    client = await get_notion_client()
    page = await client.pages.retrieve(page_id=page_id)
    for prop in (page.get("properties") or {}).values():
        if prop.get("type") == "title" and prop.get("title"):
            return "".join(item.get("plain_text", "") for item in prop["title"])
    return "Untitled"


async def page_to_markdown(page_id: str) -> str:
    """Export one page as Markdown with its title as a leading H1."""
    title = await get_page_title(page_id)
    body = blocks_to_markdown(await fetch_block_tree(page_id))
    return f"# {title}\n\n{body}"


async def convert_pages_to_markdown(page_ids: list[str]) -> MarkdownConversionResult:
    """Convert several pages to Markdown with settle-all semantics.

    Every page is attempted concurrently. Failures are recorded per page id
    (keyed by the id as given) and never abort the batch.
    """
    data: dict[str, str] = {}
    errors: dict[str, str] = {}

    async def _convert(page_id: str) -> None:
        try:
            data[page_id] = await page_to_markdown(page_id.strip())
        except Exception as exc:
            logger.error("Error converting page %s to markdown: %s", page_id, exc, exc_info=True)
            errors[page_id] = str(exc) or "Unknown error occurred while converting page to markdown"

    await asyncio.gather(*(_convert(page_id) for page_id in page_ids))

    # Preserve request order in the response
    ordered = {page_id: data[page_id] for page_id in page_ids if page_id in data}
    logger.info(
        "Markdown conversion complete",
        extra={"processed_count": len(ordered), "error_count": len(errors)},
    )
    return MarkdownConversionResult(
        success=len(ordered) > 0,
        data=ordered,
        errors=errors or None,
        processed_count=len(ordered),
        error_count=len(errors),
    )
