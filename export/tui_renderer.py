"""Renderer für die Terminal-Tagesansicht.

Wird von cmd_show (Rich) verwendet. Liefert nur Strings; Farben und
Tabellenlayout bleiben beim Aufrufer.
"""

from typing import TYPE_CHECKING

from booking.timeline import hour_ticks, project_reservation

if TYPE_CHECKING:
    from models.reservation import Reservation
    from models.time_grid import TimeGrid


def _to_column(fraction: float, width: int) -> int:
    return max(0, min(width, round(fraction * width)))


def render_timeline_bar(
    reservations: list["Reservation"],
    grid: "TimeGrid",
    width: int = 60,
    highlight_id: str | None = None,
) -> str:
    """Eine Textzeile pro Raum: '█' für belegt, '▓' für die markierte Buchung.

    Jede belegte Buchung bekommt mindestens eine Spalte, damit auch
    kurze Termine sichtbar bleiben.
    """
    cells = ["·"] * width
    for r in reservations:
        pos = project_reservation(r, grid)
        first = _to_column(pos.offset_fraction, width)
        last = max(first + 1, _to_column(pos.end_fraction, width))
        mark = "▓" if highlight_id is not None and r.id == highlight_id else "█"
        for col in range(first, min(last, width)):
            cells[col] = mark
    return "".join(cells)


def render_tick_header(grid: "TimeGrid", width: int = 60) -> str:
    """Kopfzeile mit vollen Stunden über der Zeitleiste."""
    line = [" "] * (width + 5)
    for label, fraction in hour_ticks(grid):
        col = _to_column(fraction, width)
        # Nur die Stunde ("08"), damit sich Beschriftungen nicht überlagern
        text = label[:2]
        if col + len(text) <= len(line) and all(c == " " for c in line[col:col + len(text)]):
            line[col:col + len(text)] = list(text)
    return "".join(line).rstrip()


def render_room_rows(
    grouped: dict[str, list["Reservation"]],
) -> list[list[str]]:
    """Tabellenzeilen der Tagesliste: [Raum, Zeit, Name, Abteilung, Zweck, id].

    Räume ohne Buchung erscheinen mit einer Zeile 'keine Buchungen'.
    """
    rows: list[list[str]] = []
    for room, items in grouped.items():
        if not items:
            rows.append([room, "—", "keine Buchungen", "", "", ""])
            continue
        for i, r in enumerate(items):
            purpose = r.purpose
            if r.guest_name:
                purpose = f"{purpose} ({r.guest_name})"
            rows.append([
                room if i == 0 else "",
                f"{r.start_time}–{r.end_time}",
                f"{r.requester_name} ({r.guest_count})",
                r.department,
                purpose,
                r.id or "",
            ])
    return rows
