"""Selection/sync store: single source of truth for the dashboard.

Mirrors the remote database and page lists, tracks loading/error flags and
the row selection, and merges newly created pages optimistically. State is
an immutable DashboardState snapshot; every mutation goes through a named
method that swaps in a new snapshot and notifies subscribers synchronously,
so no two updates interleave on the event loop.

Selection is keyed by row index (position in the current page list). It is
cleared whenever the page list is replaced or a fetch for a database starts.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from notion_desk.dashboard.gateway import DashboardGateway, GatewayError
from notion_desk.models.notion import CreatedPage, Database, Page

logger = logging.getLogger(__name__)

Selection = dict[int, bool]
SelectionUpdater = Mapping[int, bool] | Callable[[Selection], Mapping[int, bool]]
Listener = Callable[["DashboardState"], None]


@dataclass(frozen=True)
class DashboardState:
    """Snapshot of everything the dashboard renders."""

    databases: list[Database] = field(default_factory=list)
    active_database_id: str = ""
    pages: list[Page] = field(default_factory=list)
    is_loading: bool = False
    error: str | None = None
    selection: Selection = field(default_factory=dict)

    @property
    def selected_count(self) -> int:
        """Number of rows marked selected."""
        return sum(1 for selected in self.selection.values() if selected is True)

    @property
    def selected_pages(self) -> list[Page]:
        """Pages whose row index is selected, in list order."""
        return [page for index, page in enumerate(self.pages) if self.selection.get(index) is True]

    @property
    def active_database(self) -> Database | None:
        return next((db for db in self.databases if db.id == self.active_database_id), None)


class DashboardStore:
    """Owns DashboardState and the fetches that feed it.

    Page fetches carry a generation number; a response that resolves after
    a newer fetch was issued, or after the active database changed, is
    discarded without touching state.
    """

    def __init__(self, gateway: DashboardGateway) -> None:
        self._gateway = gateway
        self._state = DashboardState()
        self._listeners: list[Listener] = []
        self._fetch_generation = 0

    @property
    def state(self) -> DashboardState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    # -- primitive setters --------------------------------------------------

    def set_databases(self, databases: list[Database]) -> None:
        """Replace the database list (last write wins)."""
        self._update(databases=list(databases))

    def set_active_database(self, database_id: str) -> None:
        """Set the active database id. Pages and selection are left alone."""
        if database_id == self._state.active_database_id:
            return
        self._update(active_database_id=database_id)

    def set_pages(self, pages: list[Page]) -> None:
        """Replace the page list. Clears the selection, whose indices would be stale."""
        self._update(pages=list(pages), selection={})

    def set_loading(self, is_loading: bool) -> None:
        self._update(is_loading=is_loading)

    def set_error(self, error: str | None) -> None:
        self._update(error=error)

    def set_selection(self, updater: SelectionUpdater) -> None:
        """Replace the selection with a mapping, or with updater(current) when callable.

        Synchronous, so it can run inside a pointer handler.
        """
        current = dict(self._state.selection)
        new = updater(current) if callable(updater) else updater
        self._update(selection={int(index): bool(value) for index, value in new.items()})

    def clear_selection(self) -> None:
        self._update(selection={})

    # -- fetches ------------------------------------------------------------

    async def load_databases(self) -> None:
        """Fetch the database list (initial load or manual refresh).

        On failure the error is logged and the previous list is kept.
        """
        try:
            response = await self._gateway.list_databases()
        except GatewayError as exc:
            logger.error("Error fetching databases: %s", exc.message)
            return
        self.set_databases(response.databases)

    async def select_database(self, database_id: str) -> None:
        """Make a database active and fetch its pages. An empty id fetches nothing."""
        self.set_active_database(database_id)
        if database_id:
            await self.fetch_pages_for_active()

    async def fetch_pages_for_active(self) -> None:
        """Fetch the page list of the active database.

        Sets loading, clears error and selection, then requests the pages.
        Success replaces the page list; failure records the error message and
        leaves the previous pages in place. Superseded responses are dropped.
        """
        database_id = self._state.active_database_id
        if not database_id:
            return

        self._fetch_generation += 1
        generation = self._fetch_generation
        self._update(is_loading=True, error=None, selection={})

        try:
            response = await self._gateway.list_pages(database_id)
        except GatewayError as exc:
            if self._discard_if_stale(generation, database_id):
                return
            self._update(error=exc.message or "Failed to fetch pages", is_loading=False)
            return

        if self._discard_if_stale(generation, database_id):
            return
        self._update(pages=list(response.pages), selection={}, is_loading=False)

    def _is_stale(self, generation: int, database_id: str) -> bool:
        return (
            generation != self._fetch_generation
            or database_id != self._state.active_database_id
        )

    def _discard_if_stale(self, generation: int, database_id: str) -> bool:
        """True when a fetch result must be dropped.

        If no newer fetch owns the loading flag (the active database was
        cleared or changed without a fetch), the flag is reset here.
        """
        if not self._is_stale(generation, database_id):
            return False
        logger.info("Discarding stale page fetch for %s", database_id)
        if generation == self._fetch_generation and self._state.is_loading:
            self._update(is_loading=False)
        return True

    # -- optimistic create ----------------------------------------------------

    def create_page_optimistic(self, created: CreatedPage, title: str | None = None) -> Page:
        """Prepend a provisional row built from a page creation response.

        Timestamps are set to now and properties are empty until the next
        refresh. The selection is not renumbered.
        """
        now = datetime.now(timezone.utc).isoformat()
        page = Page(
            id=created.id,
            title=title or "Untitled",
            url=created.url,
            created_time=now,
            last_edited_time=now,
        )
        self._update(pages=[page, *self._state.pages])
        return page

    async def refresh_after_create(self) -> None:
        """Replace the page list with server truth after an optimistic create.

        On failure the optimistic row stays and nothing is rolled back.
        """
        database_id = self._state.active_database_id
        if not database_id:
            return

        # A refresh never supersedes an in-flight fetch, only the reverse
        generation = self._fetch_generation
        try:
            response = await self._gateway.list_pages(database_id)
        except GatewayError as exc:
            logger.warning("Background refresh for %s failed: %s", database_id, exc.message)
            return

        if self._is_stale(generation, database_id):
            logger.info("Discarding stale refresh for %s", database_id)
            return
        self.set_pages(response.pages)
