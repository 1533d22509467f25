"""Buchungs-Kern: Kollisionen, Gruppierung, Zeitleiste, Bearbeitungssitzung."""

from .conflicts import find_conflicts, has_conflict, intervals_overlap
from .grouping import group_by_date_and_room, group_by_room, sort_chronologically
from .live import LiveReservations
from .session import EditSession, Editing, Idle, ReservationForm
from .store import (
    InMemoryReservationStore,
    JsonReservationStore,
    ReservationNotFound,
    ReservationStore,
    StoreError,
    Subscription,
)
from .timeline import TimelinePosition, hour_ticks, project, project_reservation
from .validation import ReservationRejected, rejection_reason, validate_candidate

__all__ = [
    "EditSession",
    "Editing",
    "Idle",
    "InMemoryReservationStore",
    "JsonReservationStore",
    "LiveReservations",
    "ReservationForm",
    "ReservationNotFound",
    "ReservationRejected",
    "ReservationStore",
    "StoreError",
    "Subscription",
    "TimelinePosition",
    "find_conflicts",
    "group_by_date_and_room",
    "group_by_room",
    "has_conflict",
    "hour_ticks",
    "intervals_overlap",
    "project",
    "project_reservation",
    "rejection_reason",
    "sort_chronologically",
    "validate_candidate",
]
