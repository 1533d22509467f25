from config.schema import (
    BookingConfig,
    BookingPolicyConfig,
    ConflictPolicy,
    DepartmentDef,
    RoomDef,
    TimeWindowConfig,
)


# Farben der Abteilungen (Legende + Balken in der Zeitleiste)
DEPARTMENT_COLORS: dict[str, str] = {
    "Manufacturing":   "#3b82f6",
    "Ceramics":        "#10b981",
    "General Affairs": "#f59e0b",
    "Executive":       "#8b5cf6",
    "Other":           "#6b7280",
}


def default_time_window() -> TimeWindowConfig:
    """Standard-Fenster: 08:00 - 18:00 im 30-Minuten-Raster.

    Ergibt 21 Rastergrenzen; 08:00 bis 17:30 sind als Start wählbar,
    08:30 bis 18:00 als Ende.
    """
    return TimeWindowConfig(opening="08:00", closing="18:00", step_minutes=30)


def default_rooms() -> list[RoomDef]:
    """Ein Besprechungsraum, ein Empfangsraum, zwei freie Räume."""
    return [
        RoomDef(name="Conference Room"),
        RoomDef(name="Reception Room"),
        RoomDef(name="Spare 1"),
        RoomDef(name="Spare 2"),
    ]


def default_departments() -> list[DepartmentDef]:
    return [DepartmentDef(name=n, color=c) for n, c in DEPARTMENT_COLORS.items()]


def default_policy() -> BookingPolicyConfig:
    """Raum-Kollision, Gastname Pflicht bei Besuch."""
    return BookingPolicyConfig(
        conflict_policy=ConflictPolicy.ROOM,
        purposes=["Meeting", "Visitor", "Consultation", "Interview", "Other"],
        visitor_purpose="Visitor",
        require_guest_name_for_visitor=True,
        default_start="09:00",
        default_end="09:30",
    )


def default_booking_config() -> BookingConfig:
    """Vollständige Default-Konfiguration."""
    return BookingConfig(
        organization_name="Muster GmbH",
        time_window=default_time_window(),
        rooms=default_rooms(),
        departments=default_departments(),
        policy=default_policy(),
    )
