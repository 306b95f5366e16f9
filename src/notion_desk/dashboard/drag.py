"""Drag-selection controller: spreadsheet-style range select over table rows.

A pointer session state machine (IDLE -> DRAGGING -> IDLE) decoupled from
any rendering layer. Selection is only written to the store on commit
(pointer up); Escape aborts and leaves the selection untouched.

The whole dragged range gets one direction: it becomes selected when the
first row of the range was unselected before the drag began, and
deselected otherwise.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

from notion_desk.dashboard.store import DashboardStore, Selection


class DragState(str, Enum):
    """Pointer session states."""

    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass
class DragSession:
    """Transient drag record; lives between pointer down and pointer up/Escape."""

    anchor_index: int
    current_index: int
    baseline: Selection

    @property
    def range(self) -> tuple[int, int]:
        return min(self.anchor_index, self.current_index), max(self.anchor_index, self.current_index)


def apply_range_selection(
    baseline: Mapping[int, bool],
    anchor_index: int,
    current_index: int,
    row_keys: Sequence[int],
) -> Selection:
    """Compute the selection produced by dragging from anchor to current.

    row_keys maps display positions to selection keys. Positions outside
    row_keys are ignored; an empty range start selects.
    """
    start, end = min(anchor_index, current_index), max(anchor_index, current_index)
    result = dict(baseline)
    should_select = not baseline.get(row_keys[start], False) if 0 <= start < len(row_keys) else True
    for position in range(start, end + 1):
        if 0 <= position < len(row_keys):
            result[row_keys[position]] = should_select
    return result


class DragSelectionController:
    """Turns pointer events over an ordered row list into selection changes.

    row_keys returns the selection key for each display position; by
    default position i maps to row index i of the store's page list.
    """

    def __init__(
        self,
        store: DashboardStore,
        row_keys: Callable[[], Sequence[int]] | None = None,
    ) -> None:
        self._store = store
        self._row_keys = row_keys or (lambda: range(len(store.state.pages)))
        self.session: DragSession | None = None
        self.text_selection_enabled = True

    @property
    def state(self) -> DragState:
        return DragState.DRAGGING if self.session is not None else DragState.IDLE

    def pointer_down(
        self,
        row_index: int,
        *,
        ctrl: bool = False,
        meta: bool = False,
        on_control: bool = False,
    ) -> None:
        """Start a drag on a row, or toggle it when Ctrl/Cmd is held.

        Presses on a checkbox or link (on_control) are left to that control.
        """
        if on_control:
            return

        if ctrl or meta:
            keys = self._row_keys()
            if 0 <= row_index < len(keys):
                key = keys[row_index]
                self._store.set_selection(lambda current: {**current, key: not current.get(key, False)})
            return

        self.session = DragSession(
            anchor_index=row_index,
            current_index=row_index,
            baseline=dict(self._store.state.selection),
        )
        self.text_selection_enabled = False

    def pointer_enter(self, row_index: int) -> None:
        """Track the row under the pointer while dragging."""
        if self.session is not None:
            self.session.current_index = row_index

    def pointer_up(self) -> Selection | None:
        """Commit the drag to the store. Returns the new selection, or None when idle."""
        session = self.session
        if session is None:
            return None

        result = apply_range_selection(
            session.baseline,
            session.anchor_index,
            session.current_index,
            self._row_keys(),
        )
        self._store.set_selection(result)
        self._end()
        return result

    def key_down(self, key: str) -> None:
        if key == "Escape":
            self.cancel()

    def cancel(self) -> None:
        """Abort the drag without committing."""
        if self.session is not None:
            self._end()

    def is_in_drag_range(self, row_index: int) -> bool:
        """Whether a row is inside the live drag range (for highlighting)."""
        if self.session is None:
            return False
        start, end = self.session.range
        return start <= row_index <= end

    def _end(self) -> None:
        self.session = None
        self.text_selection_enabled = True
