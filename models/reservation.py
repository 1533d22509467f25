"""Datenmodell für eine Raumbuchung (Pydantic v2)."""

import re
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from models.time_grid import to_minutes

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


class Reservation(BaseModel):
    """Eine Buchung bzw. ein noch nicht gespeicherter Kandidat.

    Leere Pflichtfelder und verdrehte Intervalle sind hier erlaubt, damit
    ein Kandidat mit Begründung abgelehnt werden kann statt beim Bauen
    zu scheitern. Nur das Format von Datum und Uhrzeiten wird erzwungen.
    """

    id: Optional[str] = None     # vom Store vergeben, None für Kandidaten
    date: str                    # "YYYY-MM-DD", Partitionsschlüssel
    room: str
    requester_name: str
    department: str              # nur Anzeige
    purpose: str
    guest_name: str = ""         # Pflicht bei Besuch (strenge Variante)
    guest_count: str = "1"       # "1".."9" oder "10+"
    start_time: str              # "HH:MM", inklusiv
    end_time: str                # "HH:MM", exklusiv
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        # Nur die kanonische Schreibweise, sonst zerfällt ein Tag in mehrere Schlüssel
        if not _DATE_RE.fullmatch(v) or date.fromisoformat(v).isoformat() != v:
            raise ValueError(f"Ungültiges Datum: {v!r} (erwartet YYYY-MM-DD)")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        to_minutes(v)
        return v

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def to_fields(self) -> dict:
        """Felder für den Store (ohne id, JSON-kompatibel)."""
        return self.model_dump(mode="json", exclude={"id"})

    @classmethod
    def from_record(cls, reservation_id: str, fields: dict) -> "Reservation":
        """Baut eine Buchung aus einem Store-Datensatz."""
        return cls(id=reservation_id, **fields)

    def __str__(self) -> str:
        return (f"{self.date} {self.start_time}-{self.end_time} "
                f"{self.room} ({self.requester_name})")
