"""Zeitraster eines Buchungstages.

Zeiten werden als nullgefüllte "HH:MM"-Strings gespeichert, verglichen
und sortiert wird aber immer über Minuten seit Mitternacht.
"""

import re
from dataclasses import dataclass

_HHMM = re.compile(r"^(\d{2}):(\d{2})$")

MINUTES_PER_DAY = 24 * 60


def to_minutes(value: str) -> int:
    """Wandelt "HH:MM" in Minuten seit Mitternacht um ("24:00" erlaubt)."""
    m = _HHMM.match(value) if isinstance(value, str) else None
    if m is None:
        raise ValueError(f"Ungültige Uhrzeit: {value!r} (erwartet HH:MM)")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if minutes > 59 or hours > 24 or (hours == 24 and minutes != 0):
        raise ValueError(f"Ungültige Uhrzeit: {value!r}")
    return hours * 60 + minutes


def from_minutes(total: int) -> str:
    """Wandelt Minuten seit Mitternacht in nullgefülltes "HH:MM" um."""
    if not 0 <= total <= MINUTES_PER_DAY:
        raise ValueError(f"Minutenwert außerhalb eines Tages: {total}")
    return f"{total // 60:02d}:{total % 60:02d}"


@dataclass(frozen=True)
class TimeGrid:
    """Diskretes Raster zwischen Öffnung und Schließung.

    Immutable, damit es gefahrlos zwischen Sitzung und Anzeige geteilt
    werden kann.
    """

    opening: int       # Minuten seit Mitternacht
    closing: int       # Minuten seit Mitternacht
    step: int = 30     # Rasterweite in Minuten

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError(f"Rasterweite muss positiv sein: {self.step}")
        if self.opening >= self.closing:
            raise ValueError(
                f"Öffnung {from_minutes(self.opening)} muss vor "
                f"Schließung {from_minutes(self.closing)} liegen")
        if (self.closing - self.opening) % self.step:
            raise ValueError(
                f"Fenster ist nicht durch {self.step} Minuten teilbar")

    @classmethod
    def from_config(cls, window) -> "TimeGrid":
        """Erzeugt das Raster aus einer TimeWindowConfig."""
        return cls(
            opening=to_minutes(window.opening),
            closing=to_minutes(window.closing),
            step=window.step_minutes,
        )

    @property
    def span(self) -> int:
        return self.closing - self.opening

    def slots(self) -> list[str]:
        """Alle Rastergrenzen inkl. Öffnung und Schließung, aufsteigend."""
        return [
            from_minutes(m)
            for m in range(self.opening, self.closing + 1, self.step)
        ]

    def start_options(self) -> list[str]:
        """Wählbare Startzeiten (Schließung kann nichts beginnen)."""
        return self.slots()[:-1]

    def end_options(self) -> list[str]:
        """Wählbare Endzeiten (Öffnung kann nichts beenden)."""
        return self.slots()[1:]

    def contains(self, start: str, end: str) -> bool:
        """True wenn [start, end) vollständig im Fenster liegt."""
        return (self.opening <= to_minutes(start)
                and to_minutes(end) <= self.closing)

    def is_aligned(self, value: str) -> bool:
        """True wenn die Zeit auf einer Rastergrenze liegt."""
        return (to_minutes(value) - self.opening) % self.step == 0
