"""Typer CLI for fdbstat status snapshots."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import Annotated, Optional

import typer
from rich.console import Console

from fdbstat.config import FdbstatConfig
from fdbstat.errors import StatusError
from fdbstat.models.status import StatusSnapshot

app = typer.Typer(
    name="fdbstat",
    help="Point-in-time FoundationDB status snapshots.",
    no_args_is_help=True,
)
console = Console(stderr=True)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    from fdbstat.logging_setup import setup_logging

    setup_logging(logging.DEBUG if verbose else logging.INFO)


def _config(
    cluster_file: Optional[str] = None, timeout: Optional[float] = None
) -> FdbstatConfig:
    config = FdbstatConfig.load()
    if cluster_file:
        config = replace(config, client=replace(config.client, cluster_file=cluster_file))
    if timeout is not None:
        config = replace(config, read=replace(config.read, timeout_seconds=timeout))
    return config


def _capture(config: FdbstatConfig) -> StatusSnapshot:
    from fdbstat.core.snapshot import capture_status

    try:
        return capture_status(config)
    except StatusError as exc:
        console.print(f"[red]Status unavailable:[/red] {exc}")
        raise typer.Exit(1) from exc


def _yes_no(flag: bool) -> str:
    return "[green]yes[/green]" if flag else "[red]no[/red]"


@app.command()
def status(
    as_json: Annotated[bool, typer.Option("--json", help="Print the decoded document")] = False,
    cluster_file: Annotated[Optional[str], typer.Option("--cluster-file", "-C", help="Cluster file path")] = None,
    timeout: Annotated[Optional[float], typer.Option("--timeout", help="Read deadline in seconds")] = None,
) -> None:
    """Take a status snapshot and summarise it."""
    from fdbstat.core.decoder import encode

    snap = _capture(_config(cluster_file, timeout))

    if as_json:
        typer.echo(json.dumps(encode(snap, include_read_version=True), indent=2))
        return

    c = snap.cluster
    console.print(f"\n[bold]Read version[/bold] {snap.read_version}")
    console.print(f"  Available: {_yes_no(c.database_available)}  Healthy: {_yes_no(snap.client.database_status.healthy)}")
    console.print(f"  Generation: {c.generation}  Recovery: {c.recovery_state.name or '—'}")
    console.print(f"  Redundancy: {c.configuration.redundancy_mode or '—'}  Engine: {c.configuration.storage_engine or '—'}")
    console.print(f"  Processes: {len(c.processes)}  Machines: {len(c.machines)}")
    ft = c.fault_tolerance
    console.print(
        f"  Zone failures tolerated: availability {ft.max_zone_failures_without_losing_availability}, "
        f"data {ft.max_zone_failures_without_losing_data}"
    )
    if c.messages:
        console.print(f"  [yellow]{len(c.messages)} cluster message(s)[/yellow]")


@app.command()
def processes(
    role: Annotated[Optional[str], typer.Option("--role", "-r", help="Only processes holding this role")] = None,
    cluster_file: Annotated[Optional[str], typer.Option("--cluster-file", "-C", help="Cluster file path")] = None,
    timeout: Annotated[Optional[float], typer.Option("--timeout", help="Read deadline in seconds")] = None,
) -> None:
    """List processes and their roles."""
    snap = _capture(_config(cluster_file, timeout))
    procs = snap.cluster.processes_with_role(role) if role else dict(snap.cluster.processes)

    if not procs:
        console.print("[dim]No processes found.[/dim]")
        return

    from rich.table import Table

    table = Table(title=f"Processes @ {snap.read_version}")
    table.add_column("Address", style="bold")
    table.add_column("Class")
    table.add_column("Roles")
    table.add_column("CPU", justify="right")
    table.add_column("RSS MB", justify="right")
    table.add_column("Uptime s", justify="right")

    for pid in sorted(procs, key=lambda k: procs[k].address):
        p = procs[pid]
        table.add_row(
            p.address or pid,
            p.class_type or "—",
            ", ".join(r.role for r in p.roles) or "—",
            f"{p.cpu.usage_cores:.2f}",
            f"{p.memory.rss_bytes / (1024 * 1024):.1f}",
            f"{p.uptime_seconds:.0f}",
        )
    console.print(table)


def main() -> None:
    """Entry point for the fdbstat CLI."""
    app()


if __name__ == "__main__":
    main()
