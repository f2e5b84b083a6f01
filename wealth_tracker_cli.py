"""Mini README: Command line entry point for WealthTracker.

This script exposes a Typer CLI that starts the FastAPI pairing service and
manages the local ledger snapshot: adding, editing and deleting entries,
printing the dashboard statistics, and exporting or importing the JSON file
the web page produces. Ledger commands read and write the snapshot
configured in settings unless ``--ledger`` points elsewhere.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
import uvicorn

from wealthtracker.configuration import get_settings
from wealthtracker.ledger import IncomeLedger, LedgerSnapshotStore, LedgerStorageError
from wealthtracker.logging_utils import configure_root_logger, get_logger, level_for_environment
from wealthtracker.statistics import compare_all, compute_statistics

LOGGER = get_logger("wealthtracker.cli")

cli = typer.Typer(help="Track daily income and run the WealthTracker sync service.")

LEDGER_OPTION = typer.Option(None, "--ledger", help="Ledger snapshot file (defaults to settings).")


def _snapshot_store(ledger_path: Optional[Path]) -> LedgerSnapshotStore:
    return LedgerSnapshotStore(ledger_path or get_settings().ledger_path)


def _load(store: LedgerSnapshotStore) -> IncomeLedger:
    try:
        return store.load()
    except LedgerStorageError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1) from error


def _save(store: LedgerSnapshotStore, ledger: IncomeLedger) -> None:
    try:
        store.save(ledger)
    except LedgerStorageError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1) from error


def _fail(error: Exception) -> typer.Exit:
    message = error.args[0] if isinstance(error, KeyError) and error.args else str(error)
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def _parse_day(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError as error:
        raise typer.BadParameter(f"Invalid date '{value}'. Expected format YYYY-MM-DD.") from error


@cli.command()
def serve(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the sync service using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(level_for_environment(settings.environment))

    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting WealthTracker sync on {effective_host}:{effective_port}.\n"
        f"Health check: http://{browser_host}:{effective_port}/health"
    )
    uvicorn.run(
        "wealthtracker.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def add(
    cash: float = typer.Option(0.0, "--cash", help="Paper money received."),
    coins: float = typer.Option(0.0, "--coins", help="Coins received."),
    on: Optional[str] = typer.Option(None, "--date", help="Entry date (YYYY-MM-DD), defaults to today."),
    at: Optional[str] = typer.Option(None, "--time", help="Time of day (HH:MM), defaults to now."),
    ledger_path: Optional[Path] = LEDGER_OPTION,
) -> None:
    """Record a new income entry."""

    store = _snapshot_store(ledger_path)
    ledger = _load(store)
    try:
        entry = ledger.add_entry(cash, coins, _parse_day(on), recorded_time=at)
    except ValueError as error:
        raise _fail(error) from error
    _save(store, ledger)
    typer.echo(f"Added entry {entry.entry_id}: {entry.entry_date} {entry.weekday} total {entry.total:.2f}")


@cli.command("list")
def list_entries(ledger_path: Optional[Path] = LEDGER_OPTION) -> None:
    """Show entries newest first with the last-month comparison."""

    ledger = _load(_snapshot_store(ledger_path))
    if not len(ledger):
        typer.echo("No transactions yet")
        return
    comparisons = compare_all(ledger.entries())
    for entry in ledger.list_entries():
        line = (
            f"[{entry.entry_id}] {entry.entry_date} {entry.weekday:<9} "
            f"cash {entry.cash_amount:.2f} coins {entry.coin_amount:.2f} total {entry.total:.2f}"
        )
        comparison = comparisons[entry.entry_id]
        if comparison is not None:
            line += f" | vs {comparison.matched.entry_date}: {comparison.difference:+.2f}"
            if comparison.percent_change is not None:
                line += f" ({comparison.percent_change:+.2f}%)"
        typer.echo(line)


@cli.command()
def edit(
    entry_id: int = typer.Argument(..., help="Identifier of the entry to replace."),
    cash: Optional[float] = typer.Option(None, "--cash"),
    coins: Optional[float] = typer.Option(None, "--coins"),
    on: Optional[str] = typer.Option(None, "--date"),
    at: Optional[str] = typer.Option(None, "--time"),
    ledger_path: Optional[Path] = LEDGER_OPTION,
) -> None:
    """Replace an entry; the edited entry receives a new identifier."""

    store = _snapshot_store(ledger_path)
    ledger = _load(store)
    try:
        entry = ledger.edit_entry(
            entry_id,
            cash_amount=cash,
            coin_amount=coins,
            entry_date=_parse_day(on) if on else None,
            recorded_time=at,
        )
    except (KeyError, ValueError) as error:
        raise _fail(error) from error
    _save(store, ledger)
    typer.echo(f"Replaced entry {entry_id} with {entry.entry_id}: total {entry.total:.2f}")


@cli.command()
def delete(
    entry_id: int = typer.Argument(..., help="Identifier of the entry to delete."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    ledger_path: Optional[Path] = LEDGER_OPTION,
) -> None:
    """Delete a single entry."""

    if not yes:
        typer.confirm("Are you sure you want to delete this transaction?", abort=True)
    store = _snapshot_store(ledger_path)
    ledger = _load(store)
    try:
        ledger.remove_entry(entry_id)
    except KeyError as error:
        raise _fail(error) from error
    _save(store, ledger)
    typer.echo(f"Deleted entry {entry_id}")


@cli.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    ledger_path: Optional[Path] = LEDGER_OPTION,
) -> None:
    """Delete all entries. This cannot be undone."""

    if not yes:
        typer.confirm(
            "Are you sure you want to delete ALL transaction data? This cannot be undone!",
            abort=True,
        )
    store = _snapshot_store(ledger_path)
    try:
        removed = store.load().clear()
    except LedgerStorageError as error:
        # an unreadable snapshot is still removed below
        LOGGER.warning("Clearing unreadable snapshot %s: %s", store.path, error)
        removed = 0
    try:
        store.clear()
    except LedgerStorageError as error:
        raise _fail(error) from error
    typer.echo(f"All data has been cleared! ({removed} entries removed)")


@cli.command()
def stats(
    today: Optional[str] = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD)."),
    as_json: bool = typer.Option(False, "--json", help="Print the statistics as JSON."),
    ledger_path: Optional[Path] = LEDGER_OPTION,
) -> None:
    """Print today/week/month totals and month-over-month growth."""

    ledger = _load(_snapshot_store(ledger_path))
    result = compute_statistics(ledger.entries(), _parse_day(today))
    if as_json:
        typer.echo(json.dumps(result.as_dict(), indent=2))
        return
    arrow = "up" if result.is_growth else "down"
    typer.echo(f"Today:      {result.today_total:.2f}")
    typer.echo(f"This week:  {result.weekly_total:.2f}")
    typer.echo(f"This month: {result.monthly_total:.2f}")
    typer.echo(f"Last month: {result.last_month_total:.2f}")
    typer.echo(f"Growth:     {result.growth_percentage:.2f}% ({arrow})")
    for label, total in result.monthly_series.items():
        typer.echo(f"  {label}: {total:.2f}")


@cli.command()
def export(
    destination: Optional[Path] = typer.Argument(None, help="Output file; defaults to a dated name."),
    ledger_path: Optional[Path] = LEDGER_OPTION,
) -> None:
    """Export the ledger to a JSON file."""

    ledger = _load(_snapshot_store(ledger_path))
    if not len(ledger):
        typer.echo("No data to export!", err=True)
        raise typer.Exit(code=1)
    target = destination or Path(IncomeLedger.export_filename(datetime.now().date()))
    try:
        target.write_text(json.dumps(ledger.export_snapshot(), indent=2), encoding="utf-8")
    except OSError as error:
        raise _fail(error) from error
    typer.echo(f"Exported {len(ledger)} entries to {target}")


@cli.command("import")
def import_entries(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file produced by export."),
    ledger_path: Optional[Path] = LEDGER_OPTION,
) -> None:
    """Replace the local ledger with the contents of an exported file."""

    incoming = _load(LedgerSnapshotStore(source))
    store = _snapshot_store(ledger_path)
    _save(store, incoming)
    typer.echo(f"Imported {len(incoming)} entries into {store.path}")


if __name__ == "__main__":
    cli()
