"""CLI for registry-watcher."""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import WatcherConfig, load_config
from .errors import ConfigError, StorageError, WatcherError
from .storage import make_snapshot_store
from .utils import format_iso_millis, humanize_size
from .watcher import RegistryWatcher


app = typer.Typer(help="""\
Watch a DistributeMe registry: fetch its current snapshot, keep it locally,
and mail a diff when it changed since the last run.""")

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_config_or_exit(config_path: Optional[Path]) -> WatcherConfig:
    """Load configuration, exiting with status 1 if it is invalid."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (default: ./registry-watcher.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run one fetch-compare-notify cycle."""
    _setup_logging(verbose)
    config = _load_config_or_exit(config_path)

    try:
        report = RegistryWatcher(config).check()
    except WatcherError as e:
        logging.getLogger(__name__).error("Fatal error occurred", exc_info=e)
        console.print(f"[red]✗[/red] Registry check failed: {e}")
        raise typer.Exit(1)

    if report.changed:
        status = "notified" if report.notified else "notification failed"
        console.print(f"[yellow]●[/yellow] Registry changed at {config.server_address} ({status})")
    else:
        console.print(f"[green]✓[/green] No changes at {config.server_address}")

    for error in report.errors:
        console.print(f"  [dim]{error.stage.value}: {error.message}[/dim]")


@app.command()
def snapshots(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (default: ./registry-watcher.yaml)"
    ),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Show at most this many (newest first)"),
):
    """List stored registry snapshots."""
    config = _load_config_or_exit(config_path)
    store = make_snapshot_store(config)

    try:
        timestamps = store.list_timestamps()
    except StorageError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    if not timestamps:
        console.print(f"[dim]No snapshots stored in {config.local_path}[/dim]")
        return

    table = Table(title=f"Snapshots in {config.local_path}")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Captured (UTC)")
    table.add_column("Size", justify="right")

    for timestamp in reversed(timestamps[-limit:]):
        try:
            size = humanize_size(len(store.get(timestamp).payload.encode("utf-8")))
        except StorageError:
            size = "[red]unreadable[/red]"
        table.add_row(str(timestamp), format_iso_millis(timestamp), size)

    console.print(table)
    if len(timestamps) > limit:
        console.print(f"[dim]... and {len(timestamps) - limit} older[/dim]")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
