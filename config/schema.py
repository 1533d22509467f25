from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum

from models.time_grid import to_minutes


class ConflictPolicy(str, Enum):
    # Nur gleicher Raum + gleiches Datum kollidiert
    ROOM = "room"
    # Zusätzlich: gleiche Person am gleichen Tag, egal in welchem Raum
    ROOM_AND_REQUESTER = "room_and_requester"


# ─── BETRIEBSZEITEN ───

class TimeWindowConfig(BaseModel):
    """Buchbares Zeitfenster eines Tages und seine Rasterung.

    Beginn und Ende sind beide wählbare Rastergrenzen; das Ende kann
    jedoch keine Buchung beginnen.
    """
    # Öffnung im Format "HH:MM"
    opening: str = Field("08:00", description="Beginn des buchbaren Fensters")
    # Schließung im Format "HH:MM"
    closing: str = Field("18:00", description="Ende des buchbaren Fensters")
    # Rasterweite in Minuten
    step_minutes: int = Field(30, description="Rasterweite in Minuten")

    @field_validator("opening", "closing")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        to_minutes(v)
        return v

    @field_validator("step_minutes")
    @classmethod
    def validate_step(cls, v: int) -> int:
        if v not in (5, 10, 15, 30, 60):
            raise ValueError(f"Rasterweite {v} nicht erlaubt (5, 10, 15, 30, 60)")
        return v

    @model_validator(mode='after')
    def validate_window(self):
        """Öffnung vor Schließung, Fenster muss glatt im Raster aufgehen."""
        start = to_minutes(self.opening)
        end = to_minutes(self.closing)
        if start >= end:
            raise ValueError(
                f"Öffnung {self.opening} muss vor Schließung {self.closing} liegen")
        if (end - start) % self.step_minutes != 0:
            raise ValueError(
                f"Fenster {self.opening}-{self.closing} ist nicht durch "
                f"{self.step_minutes} Minuten teilbar")
        return self

    @property
    def total_minutes(self) -> int:
        """Länge des Fensters in Minuten."""
        return to_minutes(self.closing) - to_minutes(self.opening)


# ─── RÄUME + ABTEILUNGEN ───

class RoomDef(BaseModel):
    """Ein buchbarer Raum."""
    # Name, zugleich Schlüssel in den Buchungen
    name: str
    # Optionale Platzanzahl (nur Anzeige)
    capacity: int | None = Field(None, ge=1)


class DepartmentDef(BaseModel):
    """Abteilung mit Anzeigefarbe. Hat keinen Einfluss auf die Planung."""
    name: str
    # Farbe als "#RRGGBB"
    color: str = "#6b7280"

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        h = v.lstrip("#")
        if len(h) != 6 or any(c not in "0123456789abcdefABCDEF" for c in h):
            raise ValueError(f"Ungültige Farbe: {v}")
        return f"#{h.lower()}"


# ─── BUCHUNGSREGELN ───

class BookingPolicyConfig(BaseModel):
    """Regeln für Annahme und Vorbelegung einer Buchung."""
    # Welche Schlüssel eine Kollision auslösen
    conflict_policy: ConflictPolicy = Field(ConflictPolicy.ROOM)
    # Verwendungszwecke zur Auswahl
    purposes: list[str] = Field(
        default=["Meeting", "Visitor", "Consultation", "Interview", "Other"])
    # Zweck, bei dem ein Gastname verlangt wird
    visitor_purpose: str = "Visitor"
    # Strenge Variante: Gastname Pflicht bei Besuch
    require_guest_name_for_visitor: bool = True
    # Auswahl für die Teilnehmerzahl
    guest_count_options: list[str] = Field(
        default=[str(i) for i in range(1, 10)] + ["10+"])
    # Vorbelegung des Formulars
    default_start: str = "09:00"
    default_end: str = "09:30"

    @field_validator("default_start", "default_end")
    @classmethod
    def validate_hhmm(cls, v: str) -> str:
        to_minutes(v)
        return v

    @model_validator(mode='after')
    def validate_visitor_purpose(self):
        if self.visitor_purpose not in self.purposes:
            raise ValueError(
                f"Besuchszweck '{self.visitor_purpose}' fehlt in purposes")
        if not self.guest_count_options:
            raise ValueError("guest_count_options darf nicht leer sein")
        return self


# ─── GESAMT-CONFIG ───

class BookingConfig(BaseModel):
    """Gesamtkonfiguration der Raumbuchung."""
    # Name der Organisation (Anzeige)
    organization_name: str = Field("Muster GmbH")
    # Buchbares Zeitfenster
    time_window: TimeWindowConfig = Field(default_factory=TimeWindowConfig)
    # Alle buchbaren Räume in Anzeigereihenfolge
    rooms: list[RoomDef]
    # Alle Abteilungen in Anzeigereihenfolge
    departments: list[DepartmentDef]
    # Annahme-Regeln
    policy: BookingPolicyConfig = Field(default_factory=BookingPolicyConfig)

    @model_validator(mode='after')
    def validate_unique_names(self):
        """Räume und Abteilungen müssen vorhanden und eindeutig sein."""
        for label, names in (
            ("Raum", [r.name for r in self.rooms]),
            ("Abteilung", [d.name for d in self.departments]),
        ):
            if not names:
                raise ValueError(f"Mindestens ein(e) {label} erforderlich")
            dupes = {n for n in names if names.count(n) > 1}
            if dupes:
                raise ValueError(f"{label} doppelt definiert: {sorted(dupes)}")
        return self

    @property
    def room_names(self) -> list[str]:
        """Raumnamen in Konfigurationsreihenfolge."""
        return [r.name for r in self.rooms]

    @property
    def department_names(self) -> list[str]:
        return [d.name for d in self.departments]

    def department_color(self, name: str) -> str:
        """Farbe einer Abteilung; unbekannte Abteilungen → Grau."""
        for d in self.departments:
            if d.name == name:
                return d.color
        return "#6b7280"
