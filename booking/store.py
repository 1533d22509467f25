"""Store-Adapter: Schnittstelle zum dokumentbasierten Buchungsspeicher.

Der Store ist die einzige dauerhafte Quelle. Abonnenten erhalten bei
jeder Änderung den vollständigen Stand ihres Datums, nie ein Delta.
"""

import json
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from models.reservation import Reservation

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[list[Reservation]], None]


class StoreError(Exception):
    """Fehler beim Anlegen, Ändern oder Löschen im Store."""


class ReservationNotFound(StoreError):
    """Update auf eine nicht (mehr) vorhandene Buchung."""


class Subscription:
    """Laufendes Abo; close() beendet die Zustellung."""

    def __init__(self, day: str, callback: SnapshotCallback,
                 on_close: Callable[["Subscription"], None]) -> None:
        self.day = day
        self.callback = callback
        self._on_close = on_close
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._on_close(self)

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"Subscription({self.day}, {state})"


class ReservationStore(ABC):
    """Vertrag des externen Stores (subscribe / create / update / delete)."""

    @abstractmethod
    def subscribe(self, day: str, callback: SnapshotCallback) -> Subscription:
        """Liefert den Stand für ``day`` sofort und nach jeder Änderung."""

    @abstractmethod
    def create(self, fields: dict) -> str:
        """Legt eine Buchung an und gibt die neue id zurück."""

    @abstractmethod
    def update(self, reservation_id: str, fields: dict) -> None:
        """Ersetzt alle Felder; ReservationNotFound wenn die id fehlt."""

    @abstractmethod
    def delete(self, reservation_id: str) -> None:
        """Entfernt eine Buchung; unbekannte ids sind kein Fehler."""


class InMemoryReservationStore(ReservationStore):
    """Store im Arbeitsspeicher mit synchroner Zustellung an Abonnenten."""

    def __init__(self) -> None:
        self._records: dict[str, dict] = {}
        self._subscriptions: list[Subscription] = []

    # ─── Abos ───

    def subscribe(self, day: str, callback: SnapshotCallback) -> Subscription:
        sub = Subscription(day, callback, self._subscriptions.remove)
        self._subscriptions.append(sub)
        callback(self.snapshot(day))
        return sub

    def snapshot(self, day: str) -> list[Reservation]:
        """Alle Buchungen eines Tages in Einfügereihenfolge."""
        return [
            Reservation.from_record(rid, fields)
            for rid, fields in self._records.items()
            if fields["date"] == day
        ]

    def all_reservations(self) -> list[Reservation]:
        return [Reservation.from_record(rid, f) for rid, f in self._records.items()]

    def _notify(self, *days: str) -> None:
        for sub in list(self._subscriptions):
            if sub.day in days and not sub.closed:
                sub.callback(self.snapshot(sub.day))

    # ─── Schreiben ───

    def create(self, fields: dict) -> str:
        reservation_id = uuid.uuid4().hex
        now = datetime.now(timezone.utc).isoformat()
        record = self._checked(reservation_id, {**fields, "created_at": now, "updated_at": now})
        self._commit({**self._records, reservation_id: record})
        logger.info(f"Buchung angelegt: {reservation_id} ({record['date']})")
        self._notify(record["date"])
        return reservation_id

    def update(self, reservation_id: str, fields: dict) -> None:
        old = self._records.get(reservation_id)
        if old is None:
            raise ReservationNotFound(f"Buchung nicht gefunden: {reservation_id}")
        record = self._checked(reservation_id, {
            **fields,
            "created_at": old.get("created_at"),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        })
        self._commit({**self._records, reservation_id: record})
        logger.info(f"Buchung geändert: {reservation_id}")
        self._notify(old["date"], record["date"])

    def delete(self, reservation_id: str) -> None:
        old = self._records.get(reservation_id)
        if old is None:
            logger.info(f"Löschen ignoriert, unbekannte id: {reservation_id}")
            return
        self._commit({k: v for k, v in self._records.items() if k != reservation_id})
        logger.info(f"Buchung gelöscht: {reservation_id}")
        self._notify(old["date"])

    def _checked(self, reservation_id: str, record: dict) -> dict:
        """Format prüfen, bevor der Datensatz sichtbar wird."""
        if not isinstance(record, dict):
            raise StoreError(f"Ungültiger Datensatz {reservation_id}: kein Objekt")
        try:
            Reservation.from_record(reservation_id, record)
        except (ValueError, TypeError) as e:
            raise StoreError(f"Ungültiger Datensatz: {e}") from e
        return record

    def _commit(self, records: dict[str, dict]) -> None:
        # Ablage vor Übernahme
        self._persist(records)
        self._records = records

    def _persist(self, records: dict[str, dict]) -> None:
        """Hook für dauerhafte Ablage; im Speicher nichts zu tun."""

    def __len__(self) -> int:
        return len(self._records)


class JsonReservationStore(InMemoryReservationStore):
    """Store mit JSON-Datei als Ablage (lokaler Einzelbetrieb der CLI)."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            with open(self.path, "r", encoding="utf-8") as f:
                try:
                    records = json.load(f)
                except json.JSONDecodeError as e:
                    raise StoreError(f"Buchungsdatei ungültig: {self.path}: {e}") from e
            if not isinstance(records, dict):
                raise StoreError(f"Buchungsdatei ungültig: {self.path}: kein Objekt")
            self._records = {
                rid: self._checked(rid, fields) for rid, fields in records.items()
            }
            logger.info(f"{len(self._records)} Buchungen geladen aus {self.path}")

    def _persist(self, records: dict[str, dict]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise StoreError(f"Speichern fehlgeschlagen: {self.path}: {e}") from e
