"""Bearbeitungssitzung: Formularzustand und höchstens eine laufende Bearbeitung.

Zustände:
    Idle              – keine Bearbeitung; Speichern legt neu an
    Editing(id)       – genau eine Buchung wird bearbeitet; Speichern ersetzt sie

Jeder Fehler (Ablehnung oder Store-Fehler) lässt Zustand und Formular
unverändert, damit die Eingabe wiederholt werden kann.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Union

from pydantic import ValidationError

from booking.live import LiveReservations
from booking.store import ReservationStore, StoreError
from booking.validation import ReservationRejected, validate_candidate
from config.schema import BookingConfig
from models.reservation import Reservation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """Keine Bearbeitung aktiv."""


@dataclass(frozen=True)
class Editing:
    """Genau eine gespeicherte Buchung wird bearbeitet."""

    reservation_id: str


SessionState = Union[Idle, Editing]


@dataclass
class ReservationForm:
    """Arbeitsstand des Eingabeformulars."""

    date: str
    requester_name: str = ""
    department: str = ""
    purpose: str = ""
    guest_name: str = ""
    guest_count: str = "1"
    room: str = ""
    start_time: str = "09:00"
    end_time: str = "09:30"

    @classmethod
    def defaults(cls, config: BookingConfig, day: str) -> "ReservationForm":
        """Vorbelegung: erste Abteilung, erster Zweck, erster Raum."""
        policy = config.policy
        return cls(
            date=day,
            department=config.department_names[0],
            purpose=policy.purposes[0],
            guest_count=policy.guest_count_options[0],
            room=config.room_names[0],
            start_time=policy.default_start,
            end_time=policy.default_end,
        )

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "ReservationForm":
        return cls(**{f.name: getattr(reservation, f.name) for f in fields(cls)})


class EditSession:
    """Koordiniert Formular, Bearbeitungszustand und Store-Aufrufe."""

    def __init__(
        self,
        store: ReservationStore,
        live: LiveReservations,
        config: BookingConfig,
    ) -> None:
        self._store = store
        self._live = live
        self._config = config
        self._state: SessionState = Idle()
        self.form = ReservationForm.defaults(config, live.day)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def live(self) -> LiveReservations:
        return self._live

    @property
    def is_editing(self) -> bool:
        return isinstance(self._state, Editing)

    @property
    def editing_id(self) -> str | None:
        return self._state.reservation_id if isinstance(self._state, Editing) else None

    # ─── Übergänge ───

    def begin_edit(self, reservation: Reservation) -> None:
        """Idle/Editing → Editing(id), lädt die Felder ins Formular."""
        if reservation.id is None:
            raise ValueError("Nur gespeicherte Buchungen können bearbeitet werden")
        self._state = Editing(reservation.id)
        self.form = ReservationForm.from_reservation(reservation)
        logger.info(f"Bearbeitung gestartet: {reservation.id}")

    def cancel(self) -> None:
        """Editing → Idle, Formular auf Vorbelegung (Datum bleibt)."""
        self._state = Idle()
        self.form = ReservationForm.defaults(self._config, self.form.date)

    def select_date(self, day: str) -> None:
        """Datum wechseln; eine laufende Bearbeitung wird abgebrochen."""
        self._live.select_date(day)
        self.cancel()
        self.form = replace(self.form, date=day)

    # ─── Speichern / Löschen ───

    def build_candidate(self) -> Reservation:
        """Kandidat aus dem Formular; Gastname nur beim Besuchszweck."""
        data = {f.name: getattr(self.form, f.name) for f in fields(self.form)}
        if data["purpose"] != self._config.policy.visitor_purpose:
            data["guest_name"] = ""
        try:
            return Reservation(id=self.editing_id, **data)
        except ValidationError as e:
            raise ReservationRejected(
                "invalid_field", f"Ungültige Eingabe: {e.errors()[0]['msg']}") from e

    def save(self) -> str:
        """Legt an (Idle) oder ersetzt (Editing) und gibt die id zurück.

        Geprüft wird gegen den Stand des Formulardatums, auch wenn das
        Live-Abo einen anderen Tag zeigt. Das Abo wird dabei nicht umgestellt.

        Raises:
            ReservationRejected: Prüfung fehlgeschlagen, nichts gespeichert.
            StoreError: Store-Aufruf fehlgeschlagen, Sitzung unverändert.
        """
        self_id = self.editing_id
        try:
            candidate = self.build_candidate()
            existing = self._partition_snapshot(candidate.date)
            validate_candidate(candidate, existing, self._config, self_id)
        except ReservationRejected as e:
            logger.warning(f"Buchung abgelehnt ({e.code}): {e.reason}")
            raise

        payload = candidate.to_fields()
        try:
            if self_id is None:
                reservation_id = self._store.create(payload)
            else:
                self._store.update(self_id, payload)
                reservation_id = self_id
        except StoreError as e:
            logger.warning(f"Speichern fehlgeschlagen: {e}")
            raise

        self.cancel()
        return reservation_id

    def _partition_snapshot(self, day: str) -> list[Reservation]:
        """Stand des Formulardatums; das Live-Abo bleibt auf seinem Tag."""
        if day == self._live.day:
            return list(self._live.snapshot())
        received: list[list[Reservation]] = []
        subscription = self._store.subscribe(day, received.append)
        subscription.close()
        return received[-1]

    def delete(self, reservation_id: str) -> None:
        """Löscht eine Buchung. Die Bestätigung muss vorher eingeholt sein."""
        self._store.delete(reservation_id)
        if self.editing_id == reservation_id:
            self.cancel()
