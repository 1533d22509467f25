"""Tests für Store-Adapter, Live-Snapshot und Bearbeitungssitzung."""

import json

import pytest

from booking.live import LiveReservations
from booking.session import EditSession, Editing, Idle, ReservationForm
from booking.store import (
    InMemoryReservationStore,
    JsonReservationStore,
    ReservationNotFound,
    StoreError,
)
from booking.validation import ReservationRejected
from config.defaults import default_booking_config
from models.reservation import Reservation

DAY = "2024-01-10"


def _fields(start: str, end: str, room: str = "Conference Room",
            day: str = DAY, name: str = "Tanaka") -> dict:
    return Reservation(
        date=day, room=room, requester_name=name, department="Manufacturing",
        purpose="Meeting", start_time=start, end_time=end,
    ).to_fields()


class FailingStore(InMemoryReservationStore):
    """Store, dessen Schreibzugriffe scheitern, solange ``failing`` gesetzt ist."""

    def __init__(self) -> None:
        super().__init__()
        self.failing = False

    def create(self, fields: dict) -> str:
        if self.failing:
            raise StoreError("Store nicht erreichbar")
        return super().create(fields)

    def update(self, reservation_id: str, fields: dict) -> None:
        if self.failing:
            raise StoreError("Store nicht erreichbar")
        super().update(reservation_id, fields)

    def delete(self, reservation_id: str) -> None:
        if self.failing:
            raise StoreError("Store nicht erreichbar")
        super().delete(reservation_id)


@pytest.fixture
def store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def session(store):
    live = LiveReservations(store, DAY)
    return EditSession(store, live, default_booking_config())


def _fill(session: EditSession, start: str, end: str, **kw) -> None:
    session.form.requester_name = kw.pop("name", "Tanaka")
    session.form.start_time = start
    session.form.end_time = end
    for k, v in kw.items():
        setattr(session.form, k, v)


# ─── STORE ────────────────────────────────────────────────────────────────────

class TestInMemoryStore:
    def test_subscribe_delivers_current_state(self, store):
        store.create(_fields("09:00", "10:00"))
        received = []
        store.subscribe(DAY, received.append)
        assert len(received) == 1
        assert len(received[0]) == 1

    def test_every_change_delivers_full_snapshot(self, store):
        received = []
        store.subscribe(DAY, received.append)
        rid = store.create(_fields("09:00", "10:00"))
        store.create(_fields("11:00", "12:00"))
        store.delete(rid)
        assert [len(s) for s in received] == [0, 1, 2, 1]

    def test_other_date_not_delivered(self, store):
        received = []
        store.subscribe(DAY, received.append)
        store.create(_fields("09:00", "10:00", day="2024-01-11"))
        assert received == [[]]

    def test_close_stops_delivery(self, store):
        received = []
        sub = store.subscribe(DAY, received.append)
        sub.close()
        store.create(_fields("09:00", "10:00"))
        assert len(received) == 1
        assert sub.closed

    def test_update_missing_id_raises(self, store):
        with pytest.raises(ReservationNotFound):
            store.update("nope", _fields("09:00", "10:00"))

    def test_delete_is_idempotent(self, store):
        rid = store.create(_fields("09:00", "10:00"))
        store.delete(rid)
        store.delete(rid)
        assert len(store) == 0

    def test_timestamps(self, store):
        rid = store.create(_fields("09:00", "10:00"))
        created = store.snapshot(DAY)[0]
        assert created.created_at is not None
        store.update(rid, _fields("10:00", "11:00"))
        updated = store.snapshot(DAY)[0]
        assert updated.created_at == created.created_at
        assert updated.start_time == "10:00"

    def test_invalid_record_rejected(self, store):
        with pytest.raises(StoreError):
            store.create({"date": DAY})
        assert len(store) == 0


class TestJsonStore:
    def test_roundtrip_through_file(self, tmp_path):
        path = tmp_path / "reservations.json"
        store = JsonReservationStore(path)
        rid = store.create(_fields("09:00", "10:00"))

        reopened = JsonReservationStore(path)
        assert [r.id for r in reopened.all_reservations()] == [rid]
        with open(path, encoding="utf-8") as f:
            assert rid in json.load(f)

    def test_top_level_list_raises_store_error(self, tmp_path):
        path = tmp_path / "reservations.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonReservationStore(path)

    @pytest.mark.parametrize("record", [
        "kein Objekt",
        {"date": DAY},
        {**_fields("09:00", "10:00"), "date": "2024-W02-3"},
    ])
    def test_malformed_record_raises_store_error(self, tmp_path, record):
        """Ungültige Datensätze fallen beim Laden auf, nicht erst beim Abo."""
        path = tmp_path / "reservations.json"
        path.write_text(json.dumps({"abc": record}), encoding="utf-8")
        with pytest.raises(StoreError):
            JsonReservationStore(path)

    def test_corrupt_file_raises_store_error(self, tmp_path):
        path = tmp_path / "reservations.json"
        path.write_text("{kaputt", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonReservationStore(path)


# ─── LIVE-SNAPSHOT ────────────────────────────────────────────────────────────

class TestLiveReservations:
    def test_snapshot_follows_store(self, store):
        live = LiveReservations(store, DAY)
        assert live.snapshot() == ()
        store.create(_fields("09:00", "10:00"))
        assert len(live.snapshot()) == 1

    def test_snapshot_replaced_not_merged(self, store):
        live = LiveReservations(store, DAY)
        rid = store.create(_fields("09:00", "10:00"))
        first = live.snapshot()
        store.delete(rid)
        assert live.snapshot() == ()
        assert len(first) == 1

    def test_select_date_resubscribes(self, store):
        store.create(_fields("09:00", "10:00", day="2024-01-11"))
        live = LiveReservations(store, DAY)
        live.select_date("2024-01-11")
        assert live.day == "2024-01-11"
        assert len(live.snapshot()) == 1
        store.create(_fields("11:00", "12:00", day=DAY))
        assert all(r.date == "2024-01-11" for r in live.snapshot())

    def test_listener_called(self, store):
        live = LiveReservations(store, DAY)
        seen = []
        live.add_listener(seen.append)
        store.create(_fields("09:00", "10:00"))
        assert len(seen) == 1


# ─── BEARBEITUNGSSITZUNG ──────────────────────────────────────────────────────

class TestEditSession:
    def test_initial_state_idle_with_defaults(self, session):
        assert session.state == Idle()
        assert session.form.date == DAY
        assert session.form.room == "Conference Room"
        assert session.form.start_time == "09:00"
        assert session.form.end_time == "09:30"

    def test_save_creates_and_resets(self, session, store):
        _fill(session, "09:00", "10:00")
        rid = session.save()
        assert [r.id for r in store.snapshot(DAY)] == [rid]
        assert session.state == Idle()
        assert session.form.requester_name == ""

    def test_conflicting_create_rejected(self, session, store):
        store.create(_fields("09:00", "10:00"))
        _fill(session, "09:30", "10:30")
        with pytest.raises(ReservationRejected) as exc:
            session.save()
        assert exc.value.code == "conflict"
        assert len(store) == 1
        # Eingabe bleibt erhalten
        assert session.form.start_time == "09:30"
        assert session.form.requester_name == "Tanaka"

    def test_begin_edit_loads_fields(self, session, store):
        rid = store.create(_fields("14:00", "15:00", room="Spare 1", name="Sato"))
        reservation = session.live.snapshot()[0]
        session.begin_edit(reservation)
        assert session.state == Editing(rid)
        assert session.editing_id == rid
        assert session.form.room == "Spare 1"
        assert session.form.requester_name == "Sato"
        assert session.form.start_time == "14:00"

    def test_resubmit_unchanged_does_not_conflict_with_itself(self, session, store):
        rid = store.create(_fields("09:00", "10:00"))
        session.begin_edit(session.live.snapshot()[0])
        assert session.save() == rid
        assert session.state == Idle()
        assert len(store) == 1

    def test_edit_updates_in_place(self, session, store):
        rid = store.create(_fields("09:00", "10:00"))
        session.begin_edit(session.live.snapshot()[0])
        session.form.end_time = "11:00"
        session.save()
        [updated] = store.snapshot(DAY)
        assert updated.id == rid
        assert updated.end_time == "11:00"

    def test_edit_into_other_booking_rejected(self, session, store):
        store.create(_fields("09:00", "10:00"))
        store.create(_fields("10:00", "11:00", name="Sato"))
        second = [r for r in session.live.snapshot() if r.requester_name == "Sato"][0]
        session.begin_edit(second)
        session.form.start_time = "09:30"
        with pytest.raises(ReservationRejected):
            session.save()
        assert session.state == Editing(second.id)

    def test_cancel_resets(self, session, store):
        store.create(_fields("09:00", "10:00"))
        session.begin_edit(session.live.snapshot()[0])
        session.cancel()
        assert session.state == Idle()
        assert session.form == ReservationForm.defaults(default_booking_config(), DAY)

    def test_store_failure_keeps_state(self, session, store):
        rid = store.create(_fields("09:00", "10:00"))
        session.begin_edit(session.live.snapshot()[0])
        session.form.end_time = "11:00"
        store.failing = True
        with pytest.raises(StoreError):
            session.save()
        assert session.state == Editing(rid)
        assert session.form.end_time == "11:00"
        # Wiederholung nach Behebung gelingt
        store.failing = False
        session.save()
        assert store.snapshot(DAY)[0].end_time == "11:00"

    def test_create_failure_keeps_form(self, session, store):
        _fill(session, "09:00", "10:00")
        store.failing = True
        with pytest.raises(StoreError):
            session.save()
        assert session.state == Idle()
        assert session.form.requester_name == "Tanaka"

    def test_delete_while_editing_returns_to_idle(self, session, store):
        rid = store.create(_fields("09:00", "10:00"))
        session.begin_edit(session.live.snapshot()[0])
        session.delete(rid)
        assert session.state == Idle()
        assert len(store) == 0

    def test_delete_other_keeps_edit(self, session, store):
        keep = store.create(_fields("09:00", "10:00"))
        other = store.create(_fields("11:00", "12:00"))
        session.begin_edit([r for r in session.live.snapshot() if r.id == keep][0])
        session.delete(other)
        assert session.state == Editing(keep)

    def test_guest_name_cleared_for_non_visitor(self, session, store):
        _fill(session, "09:00", "10:00", guest_name="ACME")
        session.save()
        assert store.snapshot(DAY)[0].guest_name == ""

    def test_visitor_keeps_guest_name(self, session, store):
        _fill(session, "09:00", "10:00", purpose="Visitor", guest_name="ACME")
        session.save()
        assert store.snapshot(DAY)[0].guest_name == "ACME"

    def test_malformed_time_rejected(self, session, store):
        _fill(session, "9:00", "10:00")
        with pytest.raises(ReservationRejected) as exc:
            session.save()
        assert exc.value.code == "invalid_field"
        assert len(store) == 0

    def test_select_date_cancels_edit(self, session, store):
        store.create(_fields("09:00", "10:00"))
        session.begin_edit(session.live.snapshot()[0])
        session.select_date("2024-01-11")
        assert session.state == Idle()
        assert session.form.date == "2024-01-11"
        assert session.live.day == "2024-01-11"

    def test_save_checks_against_form_date(self, session, store):
        """Formulardatum abweichend vom Abo: geprüft wird gegen das Formulardatum."""
        store.create(_fields("09:00", "10:00", day="2024-01-11"))
        _fill(session, "09:30", "10:00", date="2024-01-11")
        with pytest.raises(ReservationRejected):
            session.save()

    def test_save_on_other_date_keeps_live_day(self, session, store):
        """Prüfung gegen ein anderes Datum stellt das Live-Abo nicht um."""
        store.create(_fields("09:00", "10:00", day="2024-01-11"))
        _fill(session, "09:30", "10:00", date="2024-01-11")
        with pytest.raises(ReservationRejected):
            session.save()
        assert session.live.day == DAY
        assert session.live.is_open
        assert session.form.date == "2024-01-11"

        session.form.start_time = "10:00"
        session.form.end_time = "11:00"
        session.save()
        assert session.live.day == DAY
        assert len(store.snapshot("2024-01-11")) == 2

    def test_week_date_alias_rejected(self, store):
        """Derselbe Tag in ISO-Wochenschreibweise ergibt keine zweite Partition."""
        first = EditSession(store, LiveReservations(store, DAY), default_booking_config())
        _fill(first, "09:00", "10:00")
        first.save()

        second = EditSession(
            store, LiveReservations(store, "2024-W02-3"), default_booking_config())
        _fill(second, "09:00", "10:00", name="Sato")
        with pytest.raises(ReservationRejected) as exc:
            second.save()
        assert exc.value.code == "invalid_field"
        assert len(store) == 1

    def test_unknown_guest_count_rejected(self, session, store):
        _fill(session, "09:00", "10:00", guest_count="lots")
        with pytest.raises(ReservationRejected) as exc:
            session.save()
        assert exc.value.code == "invalid_guest_count"
        assert len(store) == 0

    def test_begin_edit_requires_id(self, session):
        with pytest.raises(ValueError):
            session.begin_edit(Reservation(
                date=DAY, room="Conference Room", requester_name="X",
                department="Manufacturing", purpose="Meeting",
                start_time="09:00", end_time="10:00",
            ))
