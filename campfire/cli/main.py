"""
Campfire CLI.

Commands:
- config: init / validate / dump configuration
- snapshot: inspect or edit a protection snapshot offline
- simulate: run a scripted session against the in-memory host
- version
"""

import logging
import time
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..config import CampfireConfig, load_config, generate_default_config
from ..core.errors import CampfireError, ErrorCode
from ..core.record import ProtectionRecord
from ..engine import CommandHandler, ProtectionEngine
from ..host import (
    Block,
    CommandSender,
    DamageEvent,
    DamageSource,
    InMemoryHost,
    InteractEvent,
    ManualScheduler,
    Material,
    MoveEvent,
    Participant,
    Position,
    Region,
    RegionZoneOracle,
)
from ..store import ProtectionStore, SnapshotError, read_snapshot, write_snapshot


app = typer.Typer(
    name="campfire",
    help="Spawn protection for PvP game servers",
    add_completion=False,
)
snapshot_app = typer.Typer(help="Inspect or edit a protection snapshot")
app.add_typer(snapshot_app, name="snapshot")

console = Console()


def _records_table(records, duration_seconds: int, title: str = "Protection Records") -> Table:
    table = Table(title=title)
    table.add_column("Participant")
    table.add_column("Elapsed", justify="right")
    table.add_column("Left", justify="right")
    table.add_column("Zone")
    table.add_column("Active")
    table.add_column("Confirmed")

    for participant_id, record in records:
        if record.active:
            left = f"{int(record.remaining(duration_seconds) / 60)} min"
        else:
            left = "expired"
        table.add_row(
            escape(participant_id),
            f"{record.elapsed_seconds}s",
            left,
            "yes" if record.in_protected_zone else "no",
            "yes" if record.active else "no",
            "yes" if record.confirmed_termination else "no",
        )
    return table


def _load_records(path: Path):
    try:
        return read_snapshot(path)
    except FileNotFoundError:
        console.print(f"[red]Snapshot not found:[/] {path}")
        raise typer.Exit(1)
    except (SnapshotError, OSError) as e:
        console.print(f"[red]Error reading snapshot:[/] {escape(str(e))}")
        raise typer.Exit(1)


def _fail(error: CampfireError, details=()):
    console.print(f"[red]{error.code.value}:[/] {escape(error.message)}")
    for line in details:
        console.print(f"  - {escape(line)}")
    raise typer.Exit(1)


def _load_config_file(path: Path) -> CampfireConfig:
    try:
        return CampfireConfig.load(path)
    except (OSError, TypeError, AttributeError, yaml.YAMLError) as e:
        _fail(CampfireError(ErrorCode.E3001_INVALID_CONFIG, {'path': str(path), 'error': str(e)}))


# === CONFIG COMMAND ===

@app.command("config")
def config_cmd(
    action: str = typer.Argument(..., help="Action: init|validate|dump"),
    path: Optional[Path] = typer.Argument(None, help="Config file path"),
):
    """Configuration management."""
    if action == "init":
        if path:
            path.write_text(generate_default_config())
            console.print(f"[green]Written to:[/] {path}")
        else:
            console.print(escape(generate_default_config()))

    elif action == "validate":
        if not path:
            console.print("[red]Path required for validate[/]")
            raise typer.Exit(1)
        cfg = _load_config_file(path)
        errors = cfg.validate()
        if errors:
            _fail(CampfireError(ErrorCode.E3002_VALIDATION_FAILED, {'path': str(path)}), errors)
        console.print(f"[green]Valid:[/] {path}")

    elif action == "dump":
        cfg = _load_config_file(path) if path else load_config()
        console.print(escape(cfg.to_yaml()))

    else:
        console.print(f"[red]Unknown action:[/] {escape(action)}")
        console.print("Valid actions: init, validate, dump")
        raise typer.Exit(1)


# === SNAPSHOT COMMANDS ===

@snapshot_app.command("show")
def snapshot_show(
    path: Path = typer.Argument(..., help="Snapshot file"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
):
    """List every record in a snapshot."""
    cfg = load_config(config_path)
    records = _load_records(path)

    if not records:
        console.print("[yellow]Snapshot is empty[/]")
        return

    items = sorted(records.items())
    console.print(_records_table(items, cfg.protection.duration_seconds))
    active = sum(1 for _, r in items if r.active)
    console.print(f"{len(items)} records, {active} protected")


@snapshot_app.command("reset")
def snapshot_reset(
    path: Path = typer.Argument(..., help="Snapshot file"),
    participant_id: str = typer.Argument(..., help="Participant id"),
):
    """Give a participant a fresh protection episode while the server is down."""
    records = _load_records(path)
    records[participant_id] = ProtectionRecord.fresh(int(time.time()))
    try:
        write_snapshot(path, records)
    except (SnapshotError, OSError) as e:
        console.print(f"[red]Error writing snapshot:[/] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(f"[green]Reset:[/] {escape(participant_id)}")


# === SIMULATE COMMAND ===

@app.command()
def simulate(
    duration: Optional[int] = typer.Option(None, "--duration", help="Protection seconds (default from config)"),
    buffer: Optional[float] = typer.Option(None, "--buffer", help="Buffer distance (default from config)"),
    ticks: Optional[int] = typer.Option(None, "--ticks", help="Seconds to simulate (default duration + 120)"),
    snapshot: Optional[Path] = typer.Option(None, "--snapshot", help="Write the final snapshot here"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only print the final table"),
):
    """
    Run a scripted session: a newcomer, a veteran and an admin.

    The veteran attacks the newcomer, tries to set fire next to them, the
    newcomer spends a minute in the spawn safe zone, and then the clock runs
    until protection expires.
    """
    cfg = load_config(config_path)
    if duration is not None:
        cfg.protection.duration_seconds = duration
    if buffer is not None:
        cfg.protection.buffer_distance = buffer
    errors = cfg.validate()
    if errors:
        _fail(CampfireError(ErrorCode.E3002_VALIDATION_FAILED), errors)

    logging.basicConfig(level=cfg.logging.level_number, format="%(levelname)s %(name)s: %(message)s")

    total = ticks if ticks is not None else cfg.protection.duration_seconds + 120

    scheduler = ManualScheduler(start=0)
    host = InMemoryHost()
    spawn = Region("spawn", "world", (-10, -64, -10), (10, 320, 10))
    regions = RegionZoneOracle([spawn])
    store = ProtectionStore(snapshot)
    engine = ProtectionEngine(host, store, cfg, zone_oracle=regions, clock=scheduler.now)
    commands = CommandHandler(engine)

    newcomer = host.connect(Participant("Alex", position=Position("world", 40, 64, 0)))
    veteran = host.connect(Participant("Blake", position=Position("world", 42, 64, 0)))
    admin = host.connect(Participant("Admin", privileged=True, position=Position("world", 0, 64, 0)))

    if not quiet:
        console.print(Panel.fit(f"[bold blue]Campfire v{__version__} Simulation[/]", border_style="blue"))

    seen = 0

    def flush():
        nonlocal seen
        for message in host.messages[seen:]:
            if quiet:
                continue
            who = message.recipient or "*"
            console.print(f"[dim]t={int(scheduler.now()):>5}[/] [cyan]{escape(who):<6}[/] {escape(message.text)}")
        seen = len(host.messages)

    engine.enable(scheduler)
    for participant in (newcomer, veteran, admin):
        engine.on_join(participant)
    # The veteran's protection has long since run out
    store.get(veteran.id).active = False
    flush()

    def say(sender: CommandSender, *args):
        result = commands.dispatch(sender, list(args))
        for line in result.lines:
            host.send_message(sender.participant, line)
        flush()

    script = {
        5: lambda: engine.on_damage(DamageEvent(newcomer, DamageSource.direct(veteran))),
        6: lambda: engine.on_interact(InteractEvent(
            veteran, Material.FLINT_AND_STEEL, Block(Material.OTHER, Position("world", 41, 64, 2)),
        )),
        7: lambda: say(CommandSender.of(newcomer), "timeleft"),
        10: lambda: _move(engine, newcomer, Position("world", 0, 64, 0)),
        70: lambda: _move(engine, newcomer, Position("world", 40, 64, 0)),
        71: lambda: engine.on_damage(DamageEvent(veteran, DamageSource.projectile(admin))),
    }

    for second in range(1, total + 1):
        scheduler.advance(1)
        action = script.get(second)
        if action:
            action()
        flush()

    engine.disable()

    console.print()
    console.print(_records_table(store.items(), cfg.protection.duration_seconds, title="Final State"))
    if snapshot:
        console.print(f"[green]Snapshot written to:[/] {snapshot}")


def _move(engine: ProtectionEngine, participant: Participant, position: Position):
    participant.position = position
    engine.on_move(MoveEvent(participant))


# === VERSION COMMAND ===

@app.command()
def version():
    """Show version information."""
    console.print(f"[bold blue]Campfire v{__version__}[/]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
