"""Raumbuchung — Haupt-CLI.

Verwendung:
  python main.py setup                    Ersteinrichtung (Default-Konfiguration)
  python main.py config show              Konfiguration anzeigen
  python main.py show [--date D]          Tagesübersicht mit Zeitleiste
  python main.py add --name N ...         Buchung anlegen
  python main.py edit <id> [--start ...]  Buchung ändern
  python main.py delete <id>              Buchung löschen (mit Rückfrage)
  python main.py audit [--date D]         Gespeicherte Buchungen prüfen
"""

import logging
import sys
from datetime import date
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfade
DEFAULT_CONFIG_YAML = Path("config/booking_config.yaml")
DEFAULT_STORE_JSON = Path("output/reservations.json")


def _load_config_or_abort(ctx: click.Context):
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager(ctx.obj["config_path"])
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _open_session(ctx: click.Context, day: str):
    """Store öffnen, Tag abonnieren, Sitzung anlegen."""
    from booking.live import LiveReservations
    from booking.session import EditSession
    from booking.store import JsonReservationStore, StoreError

    config = _load_config_or_abort(ctx)
    try:
        store = JsonReservationStore(ctx.obj["store_path"])
    except StoreError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    live = LiveReservations(store, day)
    return config, store, live, EditSession(store, live, config)


def _save_or_abort(session) -> str:
    """Speichert die Sitzung; Ablehnung und Store-Fehler → Exit 1."""
    from booking.store import StoreError
    from booking.validation import ReservationRejected

    try:
        return session.save()
    except ReservationRejected as e:
        console.print(f"[red bold]Abgelehnt:[/red bold] {e.reason}")
        sys.exit(1)
    except StoreError as e:
        console.print(f"[red bold]Speichern fehlgeschlagen:[/red bold] {e}")
        sys.exit(1)


def _apply_form_options(form, **values) -> None:
    """Überträgt nur die angegebenen Optionen ins Formular."""
    for name, value in values.items():
        if value is not None:
            setattr(form, name, value)


# Gemeinsame Formular-Optionen für add und edit
_FORM_OPTIONS = [
    click.option("--date", "day", default=None, help="Datum YYYY-MM-DD."),
    click.option("--name", "requester_name", default=None, help="Name der buchenden Person."),
    click.option("--department", default=None, help="Abteilung."),
    click.option("--purpose", default=None, help="Verwendungszweck."),
    click.option("--guest", "guest_name", default=None, help="Besucher (Firma), Pflicht bei Besuch."),
    click.option("--count", "guest_count", default=None, help="Teilnehmerzahl (1-9 oder 10+)."),
    click.option("--room", default=None, help="Raum."),
    click.option("--start", "start_time", default=None, help="Beginn HH:MM."),
    click.option("--end", "end_time", default=None, help="Ende HH:MM."),
]


def form_options(func):
    for option in reversed(_FORM_OPTIONS):
        func = option(func)
    return func


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
@click.pass_context
def cmd_setup(ctx: click.Context):
    """Ersteinrichtung: Default-Konfiguration anlegen."""
    from config.defaults import default_booking_config
    from config.manager import ConfigManager

    mgr = ConfigManager(ctx.obj["config_path"])
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem überschreiben?", default=False):
            return

    mgr.save(default_booking_config())
    console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
    console.print("Räume und Zeiten können in der YAML-Datei angepasst werden.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    from models.time_grid import TimeGrid

    config = _load_config_or_abort(ctx)
    tw = config.time_window
    grid = TimeGrid.from_config(tw)

    console.print(Panel(
        f"[bold]{config.organization_name}[/bold]  |  "
        f"{tw.opening}–{tw.closing}  |  Raster {tw.step_minutes} min  |  "
        f"Kollision: {config.policy.conflict_policy.value}",
        title="Raumbuchung",
        border_style="cyan",
    ))

    table = Table(title="Räume", box=box.ROUNDED)
    table.add_column("Raum")
    table.add_column("Plätze")
    for r in config.rooms:
        table.add_row(r.name, str(r.capacity or "—"))
    console.print(table)

    table2 = Table(title="Abteilungen", box=box.ROUNDED)
    table2.add_column("Abteilung")
    table2.add_column("Farbe")
    for d in config.departments:
        table2.add_row(f"[{d.color}]■[/] {d.name}", d.color)
    console.print(table2)

    console.print(
        f"[bold]Startzeiten:[/bold] {len(grid.start_options())} "
        f"({grid.start_options()[0]} … {grid.start_options()[-1]})"
    )


# ─── SHOW ─────────────────────────────────────────────────────────────────────

@click.command("show")
@click.option("--date", "day", default=None, help="Datum YYYY-MM-DD (Default: heute).")
@click.option("--width", default=60, help="Breite der Zeitleiste in Zeichen.")
@click.pass_context
def cmd_show(ctx: click.Context, day: str | None, width: int):
    """Tagesübersicht: Zeitleiste pro Raum und Buchungsliste."""
    from booking.grouping import group_by_room
    from export.tui_renderer import render_room_rows, render_tick_header, render_timeline_bar
    from models.time_grid import TimeGrid

    day = day or date.today().isoformat()
    config, store, live, session = _open_session(ctx, day)
    grid = TimeGrid.from_config(config.time_window)
    grouped = group_by_room(live.snapshot(), day, config.room_names)

    timeline = Table(title=f"Belegung {day}", box=box.SIMPLE, show_header=True)
    timeline.add_column("Raum", style="bold")
    timeline.add_column(render_tick_header(grid, width), no_wrap=True)
    for room, items in grouped.items():
        timeline.add_row(room, render_timeline_bar(items, grid, width))
    console.print(timeline)

    table = Table(box=box.ROUNDED)
    for col in ("Raum", "Zeit", "Name", "Abteilung", "Zweck", "id"):
        table.add_column(col)
    for row in render_room_rows(grouped):
        dept = row[3]
        if dept:
            color = config.department_color(dept)
            row[3] = f"[{color}]■[/] {dept}"
        table.add_row(*row)
    console.print(table)
    live.close()


# ─── ADD / EDIT / DELETE ──────────────────────────────────────────────────────

@click.command("add")
@form_options
@click.pass_context
def cmd_add(ctx: click.Context, day: str | None, **values):
    """Legt eine neue Buchung an."""
    day = day or date.today().isoformat()
    config, store, live, session = _open_session(ctx, day)
    _apply_form_options(session.form, **values)
    reservation_id = _save_or_abort(session)
    console.print(f"[green]✓[/green] Buchung angelegt: {reservation_id}")
    live.close()


@click.command("edit")
@click.argument("reservation_id")
@form_options
@click.pass_context
def cmd_edit(ctx: click.Context, reservation_id: str, day: str | None, **values):
    """Ändert eine bestehende Buchung (nur angegebene Felder)."""
    config, store, live, session = _open_session(ctx, date.today().isoformat())
    existing = next((r for r in store.all_reservations() if r.id == reservation_id), None)
    if existing is None:
        console.print(f"[red]Buchung nicht gefunden: {reservation_id}[/red]")
        sys.exit(1)

    session.select_date(existing.date)
    session.begin_edit(existing)
    _apply_form_options(session.form, date=day, **values)
    _save_or_abort(session)
    console.print(f"[green]✓[/green] Buchung geändert: {reservation_id}")
    live.close()


@click.command("delete")
@click.argument("reservation_id")
@click.option("--yes", is_flag=True, default=False, help="Ohne Rückfrage löschen.")
@click.pass_context
def cmd_delete(ctx: click.Context, reservation_id: str, yes: bool):
    """Löscht eine Buchung nach Bestätigung."""
    from booking.store import StoreError

    config, store, live, session = _open_session(ctx, date.today().isoformat())
    existing = next((r for r in store.all_reservations() if r.id == reservation_id), None)
    if existing is None:
        console.print(f"[yellow]Keine Buchung mit id {reservation_id}.[/yellow]")
        return
    if not yes and not click.confirm(f"Buchung {existing} wirklich löschen?", default=False):
        console.print("[yellow]Abgebrochen.[/yellow]")
        return
    try:
        session.delete(reservation_id)
    except StoreError as e:
        console.print(f"[red bold]Löschen fehlgeschlagen:[/red bold] {e}")
        sys.exit(1)
    console.print(f"[green]✓[/green] Buchung gelöscht: {reservation_id}")
    live.close()


# ─── AUDIT ────────────────────────────────────────────────────────────────────

@click.command("audit")
@click.option("--date", "day", default=None, help="Nur dieses Datum prüfen.")
@click.pass_context
def cmd_audit(ctx: click.Context, day: str | None):
    """Prüft den gespeicherten Bestand auf Doppelbuchungen."""
    from analysis.schedule_audit import ScheduleAuditor

    config, store, live, session = _open_session(ctx, day or date.today().isoformat())
    reservations = store.all_reservations()
    if day:
        reservations = [r for r in reservations if r.date == day]
    report = ScheduleAuditor().audit(reservations, config)
    report.print_rich()
    live.close()
    sys.exit(0 if report.is_valid else 1)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "config_path", default=str(DEFAULT_CONFIG_YAML),
              type=click.Path(path_type=Path), help="Pfad zur Konfiguration.")
@click.option("--store", "store_path", default=str(DEFAULT_STORE_JSON),
              type=click.Path(path_type=Path), help="Pfad zur Buchungsdatei.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log-Ausgaben anzeigen.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path, store_path: Path, verbose: bool):
    """Raumbuchung mit Kollisionsprüfung.

    Starten Sie mit: python main.py setup
    """
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config_path)
    ctx.obj["store_path"] = Path(store_path)


def main():
    """Einstiegspunkt."""
    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_show)
cli.add_command(cmd_add)
cli.add_command(cmd_edit)
cli.add_command(cmd_delete)
cli.add_command(cmd_audit)


if __name__ == "__main__":
    main()
