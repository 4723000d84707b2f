"""Pytest fixtures for Campfire tests."""

from pathlib import Path

import pytest

from campfire.config import CampfireConfig
from campfire.engine import CommandHandler, ProtectionEngine
from campfire.host import (
    InMemoryHost,
    ManualScheduler,
    Participant,
    Position,
    Region,
    RegionZoneOracle,
)
from campfire.store import ProtectionStore


# Spawn safe zone used throughout: a no-PvP box around the origin
SPAWN = Region("spawn", "world", (-10, -64, -10), (10, 320, 10))

OUTSIDE = Position("world", 100, 64, 100)
INSIDE = Position("world", 0, 64, 0)


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Deterministic clock + scheduler, starting at t=1000."""
    return ManualScheduler(start=1000)


@pytest.fixture
def host() -> InMemoryHost:
    return InMemoryHost()


@pytest.fixture
def config() -> CampfireConfig:
    """Default config: 1200s protection, buffer 5, reset on death, zones on."""
    return CampfireConfig()


@pytest.fixture
def zones() -> RegionZoneOracle:
    return RegionZoneOracle([SPAWN])


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    return tmp_path / "players.dat"


@pytest.fixture
def store(snapshot_path: Path) -> ProtectionStore:
    return ProtectionStore(snapshot_path)


@pytest.fixture
def engine(host, store, config, zones, scheduler) -> ProtectionEngine:
    return ProtectionEngine(host, store, config, zone_oracle=zones, clock=scheduler.now)


@pytest.fixture
def commands(engine) -> CommandHandler:
    return CommandHandler(engine)


@pytest.fixture
def newcomer(host) -> Participant:
    """Regular participant standing outside the safe zone."""
    return host.connect(Participant("Alex", position=OUTSIDE))


@pytest.fixture
def veteran(host) -> Participant:
    """Second regular participant next to the newcomer."""
    return host.connect(Participant("Blake", position=Position("world", 102, 64, 100)))


@pytest.fixture
def admin(host) -> Participant:
    return host.connect(Participant("Admin", privileged=True, position=OUTSIDE))


def expire(engine: ProtectionEngine, participant: Participant):
    """Mark a participant's protection as already run out."""
    record = engine.store.get_or_create(participant.id, engine.now())
    record.active = False
