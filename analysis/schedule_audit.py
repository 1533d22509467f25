"""Nachträgliche Prüfung gespeicherter Buchungen.

Die Kollisionsprüfung läuft nur im Client vor dem Schreiben; zwei fast
gleichzeitige Buchungen können beide durchkommen. Dieser Audit findet
solche Überschneidungen und sonstige Verstöße im gespeicherten Bestand.
"""

from collections import defaultdict
from itertools import combinations
from typing import Literal

from pydantic import BaseModel

from booking.conflicts import intervals_overlap
from config.schema import BookingConfig, ConflictPolicy
from models.reservation import Reservation
from models.time_grid import TimeGrid


class AuditViolation(BaseModel):
    """Ein einzelner Verstoß."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "room_double_booking"
    description: str
    entity: str          # Raum / Person / Buchungs-id


class AuditReport(BaseModel):
    """Ergebnis des Audits."""

    violations: list[AuditViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        errors = [v for v in self.violations if v.severity == "error"]
        warnings = [v for v in self.violations if v.severity == "warning"]

        status = (
            "[bold green]✓ KONSISTENT[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERSTÖSSE GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(errors)} | Warnungen: {len(warnings)}"]
        console.print(Panel("\n".join(lines), title="Buchungs-Audit", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verstöße gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=26)
        table.add_column("Entität", width=18)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class ScheduleAuditor:
    """Prüft einen Buchungsbestand gegen die Konfiguration."""

    def audit(
        self, reservations: list[Reservation], config: BookingConfig
    ) -> AuditReport:
        """Führt alle Prüfungen durch und gibt einen AuditReport zurück."""
        violations: list[AuditViolation] = []

        violations.extend(self._check_intervals(reservations, config))
        violations.extend(self._check_unknown_rooms(reservations, config))
        violations.extend(self._check_double_booking(
            reservations, lambda r: r.room, "room_double_booking"))
        if config.policy.conflict_policy == ConflictPolicy.ROOM_AND_REQUESTER:
            violations.extend(self._check_double_booking(
                reservations, lambda r: r.requester_name, "requester_double_booking"))

        has_errors = any(v.severity == "error" for v in violations)
        return AuditReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_intervals(
        self, reservations: list[Reservation], config: BookingConfig
    ) -> list[AuditViolation]:
        """Start vor Ende, beides im Fenster."""
        violations: list[AuditViolation] = []
        grid = TimeGrid.from_config(config.time_window)
        for r in reservations:
            if r.start_minutes >= r.end_minutes:
                violations.append(AuditViolation(
                    severity="error",
                    constraint="invalid_interval",
                    entity=r.id or "-",
                    description=f"{r}: Ende liegt nicht nach dem Beginn.",
                ))
            elif not grid.contains(r.start_time, r.end_time):
                violations.append(AuditViolation(
                    severity="warning",
                    constraint="outside_window",
                    entity=r.id or "-",
                    description=(
                        f"{r}: außerhalb {config.time_window.opening}-"
                        f"{config.time_window.closing}."
                    ),
                ))
        return violations

    def _check_unknown_rooms(
        self, reservations: list[Reservation], config: BookingConfig
    ) -> list[AuditViolation]:
        """Räume, die nicht (mehr) konfiguriert sind."""
        known = set(config.room_names)
        return [
            AuditViolation(
                severity="warning",
                constraint="unknown_room",
                entity=r.room,
                description=f"{r}: Raum ist nicht konfiguriert.",
            )
            for r in reservations
            if r.room not in known
        ]

    def _check_double_booking(
        self, reservations: list[Reservation], key, constraint: str
    ) -> list[AuditViolation]:
        """Keine zwei Buchungen mit gleichem Schlüssel am gleichen Tag überlappen."""
        violations: list[AuditViolation] = []
        groups: dict[tuple, list[Reservation]] = defaultdict(list)
        for r in reservations:
            groups[(r.date, key(r))].append(r)

        for (day, entity), items in groups.items():
            for a, b in combinations(items, 2):
                if intervals_overlap(a.start_minutes, a.end_minutes,
                                     b.start_minutes, b.end_minutes):
                    violations.append(AuditViolation(
                        severity="error",
                        constraint=constraint,
                        entity=entity,
                        description=(
                            f"{day}: {a.start_time}-{a.end_time} ({a.requester_name}) "
                            f"überschneidet {b.start_time}-{b.end_time} "
                            f"({b.requester_name})."
                        ),
                    ))
        return violations
