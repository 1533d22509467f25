"""Annahmeprüfung eines Buchungskandidaten vor jedem Store-Aufruf.

Neu anlegen und Bearbeiten durchlaufen dieselben Regeln; beim Bearbeiten
wird nur die eigene id aus der Kollisionsprüfung ausgenommen.
"""

from typing import Iterable, Optional

from booking.conflicts import find_conflicts
from config.schema import BookingConfig
from models.reservation import Reservation
from models.time_grid import TimeGrid


class ReservationRejected(Exception):
    """Kandidat wurde vor dem Speichern abgelehnt.

    ``code`` ist maschinenlesbar (z.B. "conflict"), ``reason`` der Text
    für den Nutzer.
    """

    def __init__(self, code: str, reason: str) -> None:
        super().__init__(reason)
        self.code = code
        self.reason = reason


def validate_candidate(
    candidate: Reservation,
    existing: Iterable[Reservation],
    config: BookingConfig,
    self_id: Optional[str] = None,
) -> None:
    """Prüft alle Annahmeregeln, wirft ReservationRejected beim ersten Verstoß.

    Reihenfolge: Pflichtfelder → Gastname bei Besuch → Stammdaten und
    Teilnehmerzahl → Intervall → Fenster/Raster → Kollision. Ein verdrehtes
    Intervall wird also unabhängig von bestehenden Buchungen abgelehnt.
    """
    policy = config.policy

    if not candidate.requester_name.strip() or not candidate.purpose.strip():
        raise ReservationRejected("missing_field", "Bitte alle Pflichtfelder ausfüllen.")
    if (policy.require_guest_name_for_visitor
            and candidate.purpose == policy.visitor_purpose
            and not candidate.guest_name.strip()):
        raise ReservationRejected(
            "guest_name_required", "Bitte den Namen des Besuchers (Firma) angeben.")

    if candidate.room not in config.room_names:
        raise ReservationRejected("unknown_room", f"Unbekannter Raum: {candidate.room}")
    if candidate.department not in config.department_names:
        raise ReservationRejected(
            "unknown_department", f"Unbekannte Abteilung: {candidate.department}")
    if candidate.guest_count not in policy.guest_count_options:
        raise ReservationRejected(
            "invalid_guest_count", f"Ungültige Teilnehmerzahl: {candidate.guest_count}")

    if candidate.start_minutes >= candidate.end_minutes:
        raise ReservationRejected(
            "invalid_interval", "Das Ende muss nach dem Beginn liegen.")

    grid = TimeGrid.from_config(config.time_window)
    if not grid.contains(candidate.start_time, candidate.end_time):
        raise ReservationRejected(
            "outside_window",
            f"Buchbar nur zwischen {config.time_window.opening} "
            f"und {config.time_window.closing}.",
        )
    if not (grid.is_aligned(candidate.start_time) and grid.is_aligned(candidate.end_time)):
        raise ReservationRejected(
            "off_grid",
            f"Zeiten müssen im {grid.step}-Minuten-Raster liegen.",
        )

    conflicts = find_conflicts(candidate, existing, self_id, policy.conflict_policy)
    if conflicts:
        first = conflicts[0]
        raise ReservationRejected(
            "conflict",
            f"Bereits belegt: {first.start_time}-{first.end_time} "
            f"{first.room} ({first.requester_name}).",
        )


def rejection_reason(
    candidate: Reservation,
    existing: Iterable[Reservation],
    config: BookingConfig,
    self_id: Optional[str] = None,
) -> Optional[str]:
    """Begründung der Ablehnung oder None, wenn der Kandidat zulässig ist."""
    try:
        validate_candidate(candidate, existing, config, self_id)
    except ReservationRejected as e:
        return e.reason
    return None
