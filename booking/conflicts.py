"""Kollisionserkennung für Buchungskandidaten.

Reine Funktionen: keine Argumente werden verändert, kein Zustand gehalten.
"""

from typing import Iterable, Iterator, Optional

from config.schema import ConflictPolicy
from models.reservation import Reservation


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Echte Überschneidung zweier [start, end)-Intervalle.

    Berührende Enden (a_end == b_start) zählen nicht.
    """
    return not (a_end <= b_start or a_start >= b_end)


def shares_partition(
    candidate: Reservation,
    other: Reservation,
    policy: ConflictPolicy = ConflictPolicy.ROOM,
) -> bool:
    """True wenn beide Buchungen um dieselbe Ressource konkurrieren."""
    if candidate.date != other.date:
        return False
    if candidate.room == other.room:
        return True
    return (
        policy == ConflictPolicy.ROOM_AND_REQUESTER
        and candidate.requester_name == other.requester_name
    )


def _iter_conflicts(
    candidate: Reservation,
    existing: Iterable[Reservation],
    self_id: Optional[str],
    policy: ConflictPolicy,
) -> Iterator[Reservation]:
    c_start, c_end = candidate.start_minutes, candidate.end_minutes
    for r in existing:
        # Die gerade bearbeitete Buchung kollidiert nie mit sich selbst
        if self_id is not None and r.id == self_id:
            continue
        if not shares_partition(candidate, r, policy):
            continue
        if intervals_overlap(c_start, c_end, r.start_minutes, r.end_minutes):
            yield r


def has_conflict(
    candidate: Reservation,
    existing: Iterable[Reservation],
    self_id: Optional[str] = None,
    policy: ConflictPolicy = ConflictPolicy.ROOM,
) -> bool:
    """Prüft ob der Kandidat mit einer bestehenden Buchung kollidiert.

    Args:
        candidate: Neue oder bearbeitete Buchung.
        existing: Aktueller Snapshot der Buchungen (darf leer sein).
        self_id: id der bearbeiteten Buchung; wird vor dem Vergleich
            aus ``existing`` ausgeschlossen.
        policy: ROOM oder ROOM_AND_REQUESTER.

    Returns:
        True beim ersten gefundenen Konflikt, sonst False.
    """
    return next(_iter_conflicts(candidate, existing, self_id, policy), None) is not None


def find_conflicts(
    candidate: Reservation,
    existing: Iterable[Reservation],
    self_id: Optional[str] = None,
    policy: ConflictPolicy = ConflictPolicy.ROOM,
) -> list[Reservation]:
    """Wie has_conflict, liefert aber alle kollidierenden Buchungen."""
    return list(_iter_conflicts(candidate, existing, self_id, policy))
