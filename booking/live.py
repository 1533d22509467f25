"""Laufender Buchungsstand eines Tages, gespeist allein aus dem Abo."""

import logging
from typing import Callable, Optional

from booking.store import ReservationStore, Subscription
from models.reservation import Reservation

logger = logging.getLogger(__name__)


class LiveReservations:
    """Besitzt den zuletzt gelieferten Snapshot für genau ein Datum.

    Der Snapshot wird bei jeder Lieferung als Ganzes ersetzt; Leser bekommen
    immer einen vollständigen Stand, nie eine Mischung aus alt und neu.
    """

    def __init__(self, store: ReservationStore, day: str) -> None:
        self._store = store
        self._day = day
        self._snapshot: tuple[Reservation, ...] = ()
        self._subscription: Optional[Subscription] = None
        self._listeners: list[Callable[[tuple[Reservation, ...]], None]] = []
        self._subscription = store.subscribe(day, self._on_snapshot)

    @property
    def day(self) -> str:
        return self._day

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and not self._subscription.closed

    def snapshot(self) -> tuple[Reservation, ...]:
        """Aktueller, unveränderlicher Stand."""
        return self._snapshot

    def add_listener(self, listener: Callable[[tuple[Reservation, ...]], None]) -> None:
        """Wird nach jeder Lieferung mit dem neuen Snapshot aufgerufen."""
        self._listeners.append(listener)

    def select_date(self, day: str) -> None:
        """Wechselt das Datum: altes Abo schließen, neues öffnen."""
        if day == self._day and self.is_open:
            return
        self.close()
        self._day = day
        self._snapshot = ()
        self._subscription = self._store.subscribe(day, self._on_snapshot)
        logger.info(f"Abo gewechselt auf {day}")

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()

    def _on_snapshot(self, reservations: list[Reservation]) -> None:
        # Verspätete Lieferungen eines alten Datums verwerfen
        if any(r.date != self._day for r in reservations):
            logger.warning(f"Snapshot für fremdes Datum verworfen (aktuell {self._day})")
            return
        self._snapshot = tuple(reservations)
        for listener in self._listeners:
            listener(self._snapshot)

    def __repr__(self) -> str:
        return f"LiveReservations({self._day}, {len(self._snapshot)} Buchungen)"
