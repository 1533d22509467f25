"""Projektion von Buchungsintervallen auf eine normierte Zeitleiste."""

from dataclasses import dataclass

from models.reservation import Reservation
from models.time_grid import TimeGrid, from_minutes


@dataclass(frozen=True)
class TimelinePosition:
    """Lage eines Balkens relativ zur Fensterbreite (0.0 bis 1.0)."""

    offset_fraction: float
    width_fraction: float

    @property
    def end_fraction(self) -> float:
        return self.offset_fraction + self.width_fraction


def project(start: int, end: int, window_start: int, window_end: int) -> TimelinePosition:
    """Bildet [start, end) auf das Fenster [window_start, window_end] ab.

    Alle Werte in Minuten. Intervalle außerhalb des Fensters werden nicht
    abgeschnitten; das Fenster selbst muss positive Länge haben.
    """
    span = window_end - window_start
    if span <= 0:
        raise ValueError(
            f"Zeitfenster ohne Länge: {window_start}-{window_end} Minuten")
    return TimelinePosition(
        offset_fraction=(start - window_start) / span,
        width_fraction=(end - start) / span,
    )


def project_reservation(reservation: Reservation, grid: TimeGrid) -> TimelinePosition:
    """Position einer Buchung in der Zeitleiste des Rasters."""
    return project(
        reservation.start_minutes, reservation.end_minutes,
        grid.opening, grid.closing,
    )


def hour_ticks(grid: TimeGrid) -> list[tuple[str, float]]:
    """Volle Stunden im Fenster als (Beschriftung, Position)."""
    first_hour = -(-grid.opening // 60) * 60
    return [
        (from_minutes(m), project(m, m, grid.opening, grid.closing).offset_fraction)
        for m in range(first_hour, grid.closing + 1, 60)
    ]
