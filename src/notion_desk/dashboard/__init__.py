"""Dashboard client core: state store, drag selection, commands and API gateway."""

from notion_desk.dashboard.commands import (
    CommandDispatcher,
    NoActiveDatabaseError,
    PaletteAction,
    PaletteItem,
    Shortcut,
)
from notion_desk.dashboard.drag import DragSelectionController, DragState, apply_range_selection
from notion_desk.dashboard.gateway import DashboardGateway, GatewayError
from notion_desk.dashboard.store import DashboardState, DashboardStore
from notion_desk.dashboard.voice import ChunkRecorder, RecorderError

__all__ = [
    "apply_range_selection",
    "ChunkRecorder",
    "CommandDispatcher",
    "DashboardGateway",
    "DashboardState",
    "DashboardStore",
    "DragSelectionController",
    "DragState",
    "GatewayError",
    "NoActiveDatabaseError",
    "PaletteAction",
    "PaletteItem",
    "RecorderError",
    "Shortcut",
]
