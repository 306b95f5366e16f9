"""Command dispatcher: keyboard shortcuts and command-palette actions.

Maps discrete user intents onto the store and the gateway:
log/clear the selection, export selected pages as Markdown, summarize or
extract tasks through the chat stream, and record a voice note that ends
up as a new page in the active database.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from notion_desk.dashboard.gateway import DashboardGateway, GatewayError
from notion_desk.dashboard.store import DashboardStore
from notion_desk.dashboard.voice import ChunkRecorder
from notion_desk.llm.prompts import EXTRACT_TASKS_PROMPT, SUMMARIZE_PROMPT, build_selection_prompt
from notion_desk.models.notion import CreatePageResponse, MarkdownConversionResult, Page

logger = logging.getLogger(__name__)


class NoActiveDatabaseError(RuntimeError):
    """A voice note was recorded without a database to save it to."""


class Shortcut(str, Enum):
    """Global keyboard shortcuts."""

    TOGGLE_PALETTE = "toggle_palette"
    TOGGLE_RECORDING = "toggle_recording"


class PaletteAction(str, Enum):
    """Actions offered by the command palette."""

    TOGGLE_RECORDING = "toggle_recording"
    LOG_SELECTION = "log_selection"
    CONVERT_TO_MARKDOWN = "convert_to_markdown"
    SUMMARIZE = "summarize"
    EXTRACT_TASKS = "extract_tasks"
    CLEAR_SELECTION = "clear_selection"
    SELECT_DATABASE = "select_database"


@dataclass(frozen=True)
class PaletteItem:
    """One entry of the command palette."""

    action: PaletteAction
    label: str
    group: str
    shortcut: str
    disabled: bool = False


class CommandDispatcher:
    """Runs palette actions and shortcuts against the store and gateway."""

    def __init__(
        self,
        store: DashboardStore,
        gateway: DashboardGateway,
        recorder: ChunkRecorder | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._recorder = recorder or ChunkRecorder()
        self.palette_open = False
        self.database_picker_open = False
        self.transcribing = False

    @property
    def recording(self) -> bool:
        return self._recorder.recording

    # -- keyboard ---------------------------------------------------------

    async def handle_key(
        self,
        key: str,
        *,
        ctrl: bool = False,
        meta: bool = False,
        alt: bool = False,
        in_input: bool = False,
    ) -> Shortcut | None:
        """Handle a global key press. Returns the shortcut it triggered, if any.

        "/" (outside text inputs) and Ctrl/Cmd+K toggle the palette;
        Ctrl/Cmd+R (outside text inputs, not while transcribing) toggles
        voice recording.
        """
        modifier = ctrl or meta
        if key == "/" and not (modifier or alt) and not in_input:
            self.palette_open = not self.palette_open
            return Shortcut.TOGGLE_PALETTE
        if key.lower() == "k" and modifier:
            self.palette_open = not self.palette_open
            return Shortcut.TOGGLE_PALETTE
        if key.lower() == "r" and modifier and not in_input and not self.transcribing:
            await self.toggle_recording()
            return Shortcut.TOGGLE_RECORDING
        return None

    # -- palette ----------------------------------------------------------

    def available_actions(self) -> list[PaletteItem]:
        """Palette entries for the current state, in display order."""
        items: list[PaletteItem] = []

        if self.recording:
            items.append(
                PaletteItem(PaletteAction.TOGGLE_RECORDING, "Stop Recording Voice Note", "Active", "⌘R")
            )

        count = self._store.state.selected_count
        if count > 0:
            items.extend(
                [
                    PaletteItem(PaletteAction.LOG_SELECTION, f"Log Selected Pages ({count})", "Actions", "⌘L"),
                    PaletteItem(
                        PaletteAction.CONVERT_TO_MARKDOWN, f"Convert to Markdown ({count})", "Actions", "⌘M"
                    ),
                    PaletteItem(PaletteAction.SUMMARIZE, f"Summarize Pages ({count})", "Actions", "⌘S"),
                    PaletteItem(
                        PaletteAction.EXTRACT_TASKS, f"Extract Tasks from Pages ({count})", "Actions", "⌘E"
                    ),
                    PaletteItem(PaletteAction.CLEAR_SELECTION, f"Clear Selections ({count})", "Actions", "⌘⌫"),
                ]
            )

        if not self.recording:
            label = "Processing..." if self.transcribing else "Record Voice Note"
            items.append(
                PaletteItem(
                    PaletteAction.TOGGLE_RECORDING, label, "Voice", "⌘R", disabled=self.transcribing
                )
            )

        items.append(
            PaletteItem(PaletteAction.SELECT_DATABASE, "Select Database", "Navigation", "⌘D")
        )
        return items

    async def run(self, action: PaletteAction):
        """Close the palette and run an action. Returns the action's result."""
        self.palette_open = False
        handlers: dict[PaletteAction, Callable] = {
            PaletteAction.TOGGLE_RECORDING: self.toggle_recording,
            PaletteAction.LOG_SELECTION: self.log_selection,
            PaletteAction.CONVERT_TO_MARKDOWN: self.convert_selection_to_markdown,
            PaletteAction.SUMMARIZE: self.summarize_selection,
            PaletteAction.EXTRACT_TASKS: self.extract_tasks_from_selection,
            PaletteAction.CLEAR_SELECTION: self.clear_selection,
            PaletteAction.SELECT_DATABASE: self.open_database_picker,
        }
        result = handlers[action]()
        if hasattr(result, "__await__"):
            result = await result
        return result

    # -- selection commands -------------------------------------------------

    def log_selection(self) -> list[Page]:
        """Log the selected pages. Read-only."""
        pages = self._store.state.selected_pages
        logger.info(
            "Selected notion pages",
            extra={"count": len(pages), "page_ids": [page.id for page in pages]},
        )
        return pages

    def clear_selection(self) -> None:
        self._store.set_selection({})

    async def open_database_picker(self) -> None:
        """Open the database picker with a freshly loaded database list."""
        self.database_picker_open = True
        await self._store.load_databases()

    async def convert_selection_to_markdown(self) -> MarkdownConversionResult | None:
        """Export the selected pages as Markdown.

        Returns None when nothing is selected or the request itself failed.
        Per-page failures are reported inside the result.
        """
        pages = self._store.state.selected_pages
        if not pages:
            logger.info("No pages selected")
            return None

        logger.info("Converting %d selected page(s) to markdown", len(pages))
        try:
            result = await self._gateway.convert_pages_to_markdown([page.id for page in pages])
        except GatewayError as exc:
            logger.error("Failed to convert pages to markdown: %s", exc.message)
            return None

        logger.info("Converted %d page(s) to markdown", result.processed_count)
        if result.error_count > 0:
            logger.warning(
                "%d page(s) failed to convert",
                result.error_count,
                extra={"errors": result.errors},
            )
        return result

    async def run_chat_with_selection(
        self,
        prompt: str,
        on_chunk: Callable[[str], None] | None = None,
    ) -> str | None:
        """Send the selected pages' Markdown with an instruction to the chat stream.

        Returns the full reply, or None when nothing could be sent.
        """
        pages = self._store.state.selected_pages
        if not pages:
            logger.info("No pages selected")
            return None

        try:
            result = await self._gateway.convert_pages_to_markdown([page.id for page in pages])
        except GatewayError as exc:
            logger.error("Failed to run chat command %r: %s", prompt, exc.message)
            return None

        if result.processed_count == 0:
            logger.error("No pages could be converted to markdown")
            return None

        titles = {page.id: page.title for page in pages}
        sections = [(titles.get(page_id) or "Untitled", md) for page_id, md in result.data.items()]
        chat_prompt = build_selection_prompt(prompt, sections)

        chunks: list[str] = []
        try:
            async for chunk in self._gateway.stream_chat(chat_prompt):
                chunks.append(chunk)
                if on_chunk is not None:
                    on_chunk(chunk)
        except GatewayError as exc:
            logger.error("Failed to run chat command %r: %s", prompt, exc.message)
            return None

        reply = "".join(chunks)
        logger.info("Chat reply received (%d chars)", len(reply))
        return reply

    async def summarize_selection(self) -> str | None:
        return await self.run_chat_with_selection(SUMMARIZE_PROMPT)

    async def extract_tasks_from_selection(self) -> str | None:
        return await self.run_chat_with_selection(EXTRACT_TASKS_PROMPT)

    # -- voice notes ------------------------------------------------------

    def start_recording(self) -> None:
        """Begin capturing audio. Ignored while a previous note is transcribing."""
        if self.transcribing or self.recording:
            return
        self._recorder.start()

    def feed_audio(self, chunk: bytes) -> None:
        self._recorder.feed(chunk)

    async def stop_recording(self) -> CreatePageResponse | None:
        """Stop capturing and turn the recording into a page.

        Failures are logged and reported as None.
        """
        if not self.recording:
            return None
        audio = self._recorder.stop()
        if not audio:
            logger.warning("Recording stopped without audio")
            return None
        try:
            return await self.record_voice_note(audio)
        except (GatewayError, NoActiveDatabaseError) as exc:
            logger.error("Failed to save voice note to Notion: %s", exc)
            return None

    async def toggle_recording(self) -> CreatePageResponse | None:
        if self.recording:
            return await self.stop_recording()
        self.start_recording()
        return None

    async def record_voice_note(self, audio: bytes) -> CreatePageResponse:
        """Transcribe audio, clean it up into Markdown and save it as a page.

        The page goes to the database that is active when the note is ready.
        If that database is still on screen the page is prepended
        optimistically and the list is then refreshed.

        Raises:
            NoActiveDatabaseError: Before any request when no database is active,
                or when the database was deselected while processing.
            GatewayError: When transcription, cleanup or page creation fails.
        """
        if not self._store.state.active_database_id:
            raise NoActiveDatabaseError("Select a Notion database first.")

        self.transcribing = True
        try:
            transcript = await self._gateway.transcribe_audio(
                audio, filename=self._recorder.filename, mime_type=self._recorder.mime_type
            )
        finally:
            self.transcribing = False
        transcript = transcript or "(no text)"

        chunks = [chunk async for chunk in self._gateway.stream_voice_note(transcript)]
        markdown = "".join(chunks)

        database_id = self._store.state.active_database_id
        if not database_id:
            raise NoActiveDatabaseError("Select a Notion database first.")

        created = await self._gateway.create_page(database_id, markdown)
        logger.info("Voice note saved to Notion: %s (%s)", created.title, created.page.id)

        if self._store.state.active_database_id == database_id:
            self._store.create_page_optimistic(created.page, created.title)
            await self._store.refresh_after_create()
        return created
