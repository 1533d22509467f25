"""Export-Modul: Terminal-Darstellung der Tagesansicht."""

from export.tui_renderer import render_room_rows, render_tick_header, render_timeline_bar

__all__ = ["render_room_rows", "render_tick_header", "render_timeline_bar"]
