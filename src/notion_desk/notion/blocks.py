"""Pure functions converting a Markdown document into Notion block objects.

Lexes Markdown with mistune's AST renderer and maps the block tokens to
Notion block dicts: headings (levels 1-3, deeper levels clamp to 3),
paragraphs, code and list items. Lists are flattened into bulleted items.
Every other token kind is dropped. Handles the 2000-char rich_text limit.
The caller handles the 100-block batch limit.
"""

import mistune

DEFAULT_TITLE = "New Note"
DEFAULT_CODE_LANGUAGE = "plain text"

_RICH_TEXT_LIMIT = 2000

_parse = mistune.create_markdown(renderer="ast", plugins=["strikethrough"])

# Inline token type -> Notion annotation it switches on
_ANNOTATIONS = {
    "strong": "bold",
    "emphasis": "italic",
    "strikethrough": "strikethrough",
    "codespan": "code",
}


class EmptyDocumentError(ValueError):
    """Raised when a Markdown document yields no convertible blocks."""


def _split_rich_text(text: str, limit: int = _RICH_TEXT_LIMIT) -> list[dict]:
    """Split text into multiple rich_text objects respecting Notion's 2000-char limit."""
    if not text:
        return [{"type": "text", "text": {"content": ""}}]
    chunks = []
    for i in range(0, len(text), limit):
        chunks.append({"type": "text", "text": {"content": text[i : i + limit]}})
    return chunks


def _collect_segments(
    children: list[dict],
    annotations: frozenset[str],
    link: str | None,
    out: list[tuple[str, frozenset[str], str | None]],
) -> None:
    """Flatten inline tokens into (text, annotations, link) segments. Images are skipped."""
    for child in children:
        kind = child.get("type")
        if kind == "image":
            continue
        if kind in ("text", "inline_html"):
            out.append((child.get("raw", ""), annotations, link))
        elif kind == "codespan":
            out.append((child.get("raw", ""), annotations | {"code"}, link))
        elif kind in ("softbreak", "linebreak"):
            out.append(("\n", annotations, link))
        elif kind == "link":
            url = child.get("attrs", {}).get("url") or link
            _collect_segments(child.get("children", []), annotations, url, out)
        elif kind in _ANNOTATIONS:
            _collect_segments(
                child.get("children", []), annotations | {_ANNOTATIONS[kind]}, link, out
            )
        elif "children" in child:
            _collect_segments(child["children"], annotations, link, out)
        elif "raw" in child:
            out.append((child["raw"], annotations, link))


def _inline_rich_text(children: list[dict]) -> list[dict]:
    """Build Notion rich_text from inline tokens, merging runs with equal formatting.

    Plain runs carry no annotations key. Annotated runs get an annotations
    dict; links get text.link. Long runs are split at the 2000-char limit.
    """
    segments: list[tuple[str, frozenset[str], str | None]] = []
    _collect_segments(children, frozenset(), None, segments)

    merged: list[tuple[str, frozenset[str], str | None]] = []
    for text, annotations, link in segments:
        if merged and merged[-1][1] == annotations and merged[-1][2] == link:
            merged[-1] = (merged[-1][0] + text, annotations, link)
        else:
            merged.append((text, annotations, link))

    rich_text: list[dict] = []
    for text, annotations, link in merged:
        if not text:
            continue
        for part in _split_rich_text(text):
            if link:
                part["text"]["link"] = {"url": link}
            if annotations:
                part["annotations"] = {name: True for name in sorted(annotations)}
            rich_text.append(part)
    return rich_text


def plain_text(rich_text: list[dict]) -> str:
    """Concatenate the text content of a rich_text array."""
    return "".join(item.get("text", {}).get("content", "") for item in rich_text)


def _heading_block(rich_text: list[dict], level: int) -> dict:
    """Create a heading block, clamping the level to Notion's 1-3 range."""
    key = f"heading_{min(max(level, 1), 3)}"
    return {"object": "block", "type": key, key: {"rich_text": rich_text}}


def _paragraph_block(rich_text: list[dict]) -> dict:
    """Create a paragraph block."""
    return {"object": "block", "type": "paragraph", "paragraph": {"rich_text": rich_text}}


def _code_block(code: str, language: str | None) -> dict:
    """Create a code block. Language defaults to plain text."""
    return {
        "object": "block",
        "type": "code",
        "code": {
            "rich_text": _split_rich_text(code),
            "language": language or DEFAULT_CODE_LANGUAGE,
        },
    }


def _bulleted_item_block(rich_text: list[dict]) -> dict:
    """Create a bulleted_list_item block."""
    return {
        "object": "block",
        "type": "bulleted_list_item",
        "bulleted_list_item": {"rich_text": rich_text},
    }


def _list_item_blocks(list_token: dict) -> list[dict]:
    """Flatten a (possibly nested, possibly ordered) list into bulleted items.

    Each item contributes one block built from its text; nested lists follow
    their parent item at the same level.
    """
    blocks: list[dict] = []
    for item in list_token.get("children", []):
        inline: list[dict] = []
        nested: list[dict] = []
        for child in item.get("children", []):
            if child.get("type") == "list":
                nested.append(child)
            elif child.get("type") in ("block_text", "paragraph"):
                if inline:
                    inline.append({"type": "softbreak"})
                inline.extend(child.get("children", []))
        rich_text = _inline_rich_text(inline)
        if rich_text:
            blocks.append(_bulleted_item_block(rich_text))
        for sub_list in nested:
            blocks.extend(_list_item_blocks(sub_list))
    return blocks


def markdown_to_blocks(markdown: str) -> list[dict]:
    """Convert a Markdown document to an ordered list of Notion block dicts.

    Supported: headings, paragraphs, code and lists. Tables, block quotes,
    thematic breaks, HTML and image-only paragraphs produce nothing.
    """
    tokens = _parse(markdown)
    if isinstance(tokens, str):
        return []

    blocks: list[dict] = []
    for token in tokens:
        kind = token.get("type")
        if kind == "heading":
            level = token.get("attrs", {}).get("level", 1)
            blocks.append(_heading_block(_inline_rich_text(token.get("children", [])), level))
        elif kind == "paragraph":
            rich_text = _inline_rich_text(token.get("children", []))
            if plain_text(rich_text).strip():
                blocks.append(_paragraph_block(rich_text))
        elif kind == "block_code":
            info = (token.get("attrs", {}).get("info") or "").strip()
            language = info.split()[0] if info else None
            blocks.append(_code_block(token.get("raw", "").rstrip("\n"), language))
        elif kind == "list":
            blocks.extend(_list_item_blocks(token))
        # blank lines and unsupported token kinds are skipped
    return blocks


def extract_title(blocks: list[dict], default: str = DEFAULT_TITLE) -> tuple[str, list[dict]]:
    """Use a leading heading_1 as the document title.

    Returns (title, remaining_blocks). A leading level-1 heading is always
    removed; an empty one falls back to the default title. Otherwise the
    default title is returned and the blocks are left untouched.
    """
    if blocks and blocks[0]["type"] == "heading_1":
        title = plain_text(blocks[0]["heading_1"]["rich_text"]).strip()
        return title or default, blocks[1:]
    return default, blocks


def build_page_content(markdown: str, explicit_title: str | None = None) -> tuple[str, list[dict]]:
    """Convert Markdown into (title, body blocks) for page creation.

    The leading H1 wins over the explicit title, which wins over "New Note".

    Raises:
        EmptyDocumentError: If the document yields no blocks at all.
    """
    blocks = markdown_to_blocks(markdown)
    if not blocks:
        raise EmptyDocumentError("No content could be derived from markdown")

    default = explicit_title.strip() if explicit_title and explicit_title.strip() else DEFAULT_TITLE
    return extract_title(blocks, default)
