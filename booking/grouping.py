"""Gruppierung und Sortierung der Buchungen für die Anzeige."""

from collections import defaultdict
from typing import Iterable

from models.reservation import Reservation


def sort_chronologically(reservations: Iterable[Reservation]) -> list[Reservation]:
    """Sortiert nach Startzeit (numerisch, in Minuten).

    Stabil: gleiche Startzeiten behalten ihre Eingangsreihenfolge.
    """
    return sorted(reservations, key=lambda r: r.start_minutes)


def group_by_room(
    reservations: Iterable[Reservation],
    day: str,
    rooms: list[str],
) -> dict[str, list[Reservation]]:
    """Buchungen eines Tages pro Raum, jeweils chronologisch.

    Jeder konfigurierte Raum ist enthalten, auch ohne Buchung (leere
    Liste). Buchungen für nicht konfigurierte Räume werden hinten
    angehängt, in Reihenfolge ihres ersten Auftretens.
    """
    grouped: dict[str, list[Reservation]] = {room: [] for room in rooms}
    for r in reservations:
        if r.date != day:
            continue
        grouped.setdefault(r.room, []).append(r)
    return {room: sort_chronologically(items) for room, items in grouped.items()}


def group_by_date_and_room(
    reservations: Iterable[Reservation],
    rooms: list[str],
) -> dict[str, dict[str, list[Reservation]]]:
    """Mehrtages-Übersicht: Datum (aufsteigend) → Raum → Buchungen."""
    by_date: dict[str, list[Reservation]] = defaultdict(list)
    for r in reservations:
        by_date[r.date].append(r)
    return {
        day: group_by_room(by_date[day], day, rooms)
        for day in sorted(by_date)
    }
