"""Tests für den Audit gespeicherter Buchungen."""

from analysis.schedule_audit import AuditReport, AuditViolation, ScheduleAuditor
from config.defaults import default_booking_config
from config.schema import ConflictPolicy
from models.reservation import Reservation


def _res(rid: str, start: str, end: str, room: str = "Conference Room",
         day: str = "2024-01-10", name: str = "Tanaka") -> Reservation:
    return Reservation(
        id=rid, date=day, room=room, requester_name=name,
        department="Manufacturing", purpose="Meeting",
        start_time=start, end_time=end,
    )


class TestScheduleAuditor:
    def test_clean_schedule_is_valid(self):
        """Berührende Buchungen im selben Raum sind zulässig."""
        reservations = [
            _res("a", "09:00", "09:30"),
            _res("b", "09:30", "10:00"),
            _res("c", "09:00", "10:00", room="Spare 1"),
        ]
        report = ScheduleAuditor().audit(reservations, default_booking_config())
        assert report.is_valid
        assert report.violations == []

    def test_race_double_booking_detected(self):
        """Zwei gleichzeitig durchgekommene Buchungen im selben Raum → Error."""
        reservations = [_res("a", "09:00", "10:00"), _res("b", "09:30", "10:30", name="Sato")]
        report = ScheduleAuditor().audit(reservations, default_booking_config())
        assert not report.is_valid
        [v] = report.violations
        assert v.constraint == "room_double_booking"
        assert v.entity == "Conference Room"

    def test_same_time_other_date_ok(self):
        reservations = [_res("a", "09:00", "10:00"), _res("b", "09:00", "10:00", day="2024-01-11")]
        assert ScheduleAuditor().audit(reservations, default_booking_config()).is_valid

    def test_requester_overlap_only_with_name_policy(self):
        reservations = [
            _res("a", "09:00", "10:00", room="Spare 1", name="Sato"),
            _res("b", "09:30", "10:30", room="Spare 2", name="Sato"),
        ]
        config = default_booking_config()
        assert ScheduleAuditor().audit(reservations, config).is_valid

        strict = config.model_copy(update={"policy": config.policy.model_copy(
            update={"conflict_policy": ConflictPolicy.ROOM_AND_REQUESTER})})
        report = ScheduleAuditor().audit(reservations, strict)
        assert [v.constraint for v in report.violations] == ["requester_double_booking"]

    def test_invalid_interval_is_error(self):
        report = ScheduleAuditor().audit([_res("a", "10:00", "09:00")], default_booking_config())
        assert not report.is_valid
        assert report.violations[0].constraint == "invalid_interval"

    def test_outside_window_and_unknown_room_are_warnings(self):
        reservations = [
            _res("a", "17:30", "18:30"),
            _res("b", "09:00", "10:00", room="Attic"),
        ]
        report = ScheduleAuditor().audit(reservations, default_booking_config())
        assert report.is_valid
        assert {v.constraint for v in report.violations} == {"outside_window", "unknown_room"}

    def test_print_rich_does_not_fail(self):
        report = AuditReport(
            violations=[AuditViolation(severity="error", constraint="room_double_booking",
                                       description="Test", entity="Spare 1")],
            is_valid=False,
        )
        report.print_rich()
        AuditReport(violations=[], is_valid=True).print_rich()
